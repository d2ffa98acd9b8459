"""Round lifecycle engine: start, purchase, inject, close and draw."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .context import Clock, OperatorContext, system_clock
from ..draw.codec import bracket_keys, final_number_from_random, validate_ticket_number
from ..draw.pricing import DISCOUNT_DIVISOR, calculate_total_price_for_bulk_tickets
from ..draw.settlement import Settlement, settle_draw, validate_rewards_breakdown, validate_treasury_fee
from ..errors import (
    InvalidRoundTiming,
    NotClaimable,
    NotClosed,
    RandomnessNotReady,
    RoundAlreadyOpen,
    RoundNotOpen,
    RoundNotOpenOrNotElapsed,
    Unauthorized,
)
from ..ledger import Ledger
from ..models import BracketTicketCount, LotteryEvent, LotteryRound, LotteryState, RoundStatus, Ticket
from ..randomness.adapter import RandomnessAdapter, adapter_name

logger = logging.getLogger(__name__)


class LotteryEngine:
    """State machine driving rounds through Open, Closed and Claimable.

    Every public method validates its inputs and the current state first and
    only then moves tokens and mutates rows, so a raised error leaves the
    session untouched. Callers are expected to run each call inside
    ``Session.begin()`` so that a failure in a collaborator rolls back too.
    """

    def __init__(
        self,
        session: Session,
        *,
        randomness: RandomnessAdapter,
        ledger: Ledger,
        clock: Optional[Clock] = None,
    ) -> None:
        """Create an engine bound to a SQLAlchemy session.

        Parameters
        ----------
        session : Session
            Active session holding the lottery tables.
        randomness : RandomnessAdapter
            Oracle queried when rounds close and draw.
        ledger : Ledger
            Custody used to charge buyers and pay the treasury.
        clock : Optional[Clock], default: None
            Returns the current unix time. Defaults to the system clock.
        """

        self._session = session
        self._randomness = randomness
        self._ledger = ledger
        self._clock = clock or system_clock

    @property
    def randomness(self) -> RandomnessAdapter:
        return self._randomness

    # -------- helpers --------
    def _require_operator(self, operator: OperatorContext) -> LotteryState:
        state = LotteryState.load(self._session)
        if not isinstance(operator, OperatorContext) or operator.address != state.operator_address:
            raise Unauthorized()
        return state

    def _current_round(self, state: LotteryState) -> Optional[LotteryRound]:
        if state.current_round_id == 0:
            return None
        return LotteryRound.get(self._session, state.current_round_id)

    @staticmethod
    def _require_positive(name: str, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
        return value

    # -------- round lifecycle --------
    def start_round(
        self,
        operator: OperatorContext,
        *,
        end_time: int,
        ticket_price: int,
        rewards_breakdown: Sequence[int],
        treasury_fee: int,
    ) -> LotteryRound:
        """Open a new round.

        The round receives id ``current_round_id + 1``, owns ticket ids from
        the global counter onwards and starts with the rollover left by
        previous draws as its initial pool.

        Raises
        ------
        Unauthorized
            If ``operator`` is not the configured operator.
        RoundAlreadyOpen
            If the current round is still open.
        InvalidRoundTiming
            If ``end_time`` is not in the future.
        RewardBreakdownTooHigh
            If the breakdown shares add up to more than 10000 bps.
        TreasuryFeeTooHigh
            If the treasury fee exceeds 3000 bps.
        """

        state = self._require_operator(operator)
        current = self._current_round(state)
        if current is not None and current.round_status == RoundStatus.OPEN:
            raise RoundAlreadyOpen()

        now = self._clock()
        if end_time <= now:
            raise InvalidRoundTiming()
        self._require_positive("ticket_price", ticket_price)
        breakdown = validate_rewards_breakdown(rewards_breakdown)
        validate_treasury_fee(treasury_fee)

        round_id = state.current_round_id + 1
        seed_amount = state.pending_injection_next_lottery
        lottery_round = LotteryRound(
            id=round_id,
            start_time=now,
            end_time=end_time,
            ticket_price=ticket_price,
            rewards_breakdown=breakdown,
            treasury_fee=treasury_fee,
            first_ticket_id=state.current_ticket_id,
            amount_collected=seed_amount,
        )
        self._session.add(lottery_round)
        state.current_round_id = round_id
        state.pending_injection_next_lottery = 0

        LotteryEvent.record(
            self._session,
            "LotteryOpen",
            round_id=round_id,
            actor=operator.address,
            details={
                "start_time": now,
                "end_time": end_time,
                "ticket_price": str(ticket_price),
                "rewards_breakdown": breakdown,
                "treasury_fee": treasury_fee,
                "first_ticket_id": lottery_round.first_ticket_id,
                "injected_amount": str(seed_amount),
            },
        )
        self._session.flush()
        logger.info(
            f"Round {round_id} opened until {end_time} "
            f"(price={ticket_price}, seeded with {seed_amount})"
        )
        return lottery_round

    def buy_tickets(self, buyer: str, numbers: Sequence[int]) -> list[Ticket]:
        """Buy a batch of tickets in the current round.

        The whole batch is validated before the buyer is charged, so one bad
        number rejects every ticket.

        Raises
        ------
        RoundNotOpen
            If no round is open or its end time has passed.
        EmptyPurchase
            If ``numbers`` is empty.
        BatchTooLarge
            If the batch exceeds the configured per-call cap.
        InvalidTicketNumber
            If any number is outside ``[10000, 19999]``.
        """

        state = LotteryState.load(self._session)
        lottery_round = self._current_round(state)
        if (
            lottery_round is None
            or lottery_round.round_status != RoundStatus.OPEN
            or self._clock() >= lottery_round.end_time
        ):
            raise RoundNotOpen()
        if not buyer:
            raise ValueError("buyer address must not be empty")

        numbers = list(numbers)
        total_price = calculate_total_price_for_bulk_tickets(
            lottery_round.ticket_price,
            len(numbers),
            state.max_number_tickets_each_time,
        )
        for number in numbers:
            validate_ticket_number(number)

        self._ledger.transfer_in(buyer, total_price)
        lottery_round.amount_collected = lottery_round.amount_collected + total_price

        tickets: list[Ticket] = []
        increments: Counter = Counter()
        for number in numbers:
            ticket = Ticket(
                id=state.current_ticket_id,
                round_id=lottery_round.id,
                number=number,
                owner=buyer,
            )
            state.current_ticket_id += 1
            tickets.append(ticket)
            for bracket, key in enumerate(bracket_keys(number)):
                increments[(bracket, key)] += 1
        self._session.add_all(tickets)

        for (bracket, key), amount in increments.items():
            row = BracketTicketCount.lookup(self._session, lottery_round.id, bracket, key)
            if row is None:
                self._session.add(
                    BracketTicketCount(
                        round_id=lottery_round.id, bracket=bracket, key=key, count=amount
                    )
                )
            else:
                row.count += amount

        LotteryEvent.record(
            self._session,
            "TicketsPurchased",
            round_id=lottery_round.id,
            actor=buyer,
            details={
                "ticket_ids": [t.id for t in tickets],
                "numbers": numbers,
                "price_paid": str(total_price),
            },
        )
        self._session.flush()
        logger.debug(f"{buyer} bought {len(tickets)} tickets in round {lottery_round.id}")
        return tickets

    def inject_funds(self, operator: OperatorContext, amount: int) -> LotteryRound:
        """Add ``amount`` from the operator to the current round's pool.

        Only rounds that are open or closed but not yet drawn accept funds.
        """

        state = self._require_operator(operator)
        lottery_round = self._current_round(state)
        if lottery_round is None or lottery_round.round_status not in (
            RoundStatus.OPEN,
            RoundStatus.CLOSED,
        ):
            raise RoundNotOpen()
        self._require_positive("amount", amount)

        self._ledger.transfer_in(operator.address, amount)
        lottery_round.amount_collected = lottery_round.amount_collected + amount

        LotteryEvent.record(
            self._session,
            "LotteryInjection",
            round_id=lottery_round.id,
            actor=operator.address,
            details={"amount": str(amount)},
        )
        self._session.flush()
        logger.info(f"Injected {amount} into round {lottery_round.id}")
        return lottery_round

    def close_round(
        self, operator: OperatorContext, round_id: int, *, force: bool = False
    ) -> LotteryRound:
        """Stop sales for ``round_id`` and request its random number.

        Parameters
        ----------
        operator : OperatorContext
            Privileged caller.
        round_id : int
            Round to close; it must be open.
        force : bool, default: False
            Close before ``end_time`` has elapsed.

        Raises
        ------
        RoundNotOpenOrNotElapsed
            If the round is not open, or ``end_time`` has not passed and
            ``force`` is not set.
        """

        state = self._require_operator(operator)
        lottery_round = LotteryRound.get(self._session, round_id)
        if lottery_round is None or lottery_round.round_status != RoundStatus.OPEN:
            raise RoundNotOpenOrNotElapsed()
        if not force and self._clock() < lottery_round.end_time:
            raise RoundNotOpenOrNotElapsed()

        request_id = self._randomness.request()
        lottery_round.first_ticket_id_next_round = state.current_ticket_id
        lottery_round.randomness_request_id = request_id
        lottery_round.status = int(RoundStatus.CLOSED)

        LotteryEvent.record(
            self._session,
            "LotteryClose",
            round_id=round_id,
            actor=operator.address,
            details={
                "first_ticket_id_next_round": state.current_ticket_id,
                "randomness_request_id": request_id,
            },
        )
        self._session.flush()
        logger.info(f"Round {round_id} closed, randomness request {request_id}")
        return lottery_round

    def draw_final_number_and_make_claimable(
        self,
        operator: OperatorContext,
        round_id: int,
        auto_inject: bool = True,
    ) -> Settlement:
        """Draw the final number of a closed round and settle its brackets.

        The treasury fee is paid out immediately. The rollover (empty
        brackets, unassigned breakdown and rounding dust) either seeds the
        next round when ``auto_inject`` is set, or goes to the treasury.

        Raises
        ------
        NotClosed
            If the round is not in the closed state.
        RandomnessNotReady
            If the oracle has not fulfilled the round's request yet.
        """

        state = self._require_operator(operator)
        lottery_round = LotteryRound.get(self._session, round_id)
        if lottery_round is None or lottery_round.round_status != RoundStatus.CLOSED:
            raise NotClosed()
        request_id = lottery_round.randomness_request_id
        if not request_id or not self._randomness.is_fulfilled(request_id):
            raise RandomnessNotReady()

        final_number = final_number_from_random(self._randomness.result(request_id))
        settlement = settle_draw(
            final_number,
            lottery_round.amount_collected,
            lottery_round.rewards_breakdown,
            lottery_round.treasury_fee,
            lambda bracket, key: BracketTicketCount.count_for(
                self._session, round_id, bracket, key
            ),
        )

        treasury_payout = settlement.treasury_amount
        if not auto_inject:
            treasury_payout += settlement.rollover_amount
        if treasury_payout > 0:
            self._ledger.transfer_out(state.treasury_address, treasury_payout)

        lottery_round.final_number = final_number
        lottery_round.count_winners_per_bracket = settlement.winner_counts
        lottery_round.reward_per_bracket = settlement.reward_totals
        lottery_round.reward_per_ticket_per_bracket = settlement.rewards_per_ticket
        lottery_round.treasury_amount = settlement.treasury_amount
        lottery_round.rollover_amount = settlement.rollover_amount
        lottery_round.pending_rewards = settlement.distributed_amount
        lottery_round.status = int(RoundStatus.CLAIMABLE)
        state.all_pending_rewards = state.all_pending_rewards + settlement.distributed_amount
        if auto_inject:
            state.pending_injection_next_lottery = (
                state.pending_injection_next_lottery + settlement.rollover_amount
            )

        LotteryEvent.record(
            self._session,
            "LotteryNumberDrawn",
            round_id=round_id,
            actor=operator.address,
            details={
                "final_number": final_number,
                "count_winners_per_bracket": settlement.winner_counts,
                "treasury_amount": str(settlement.treasury_amount),
                "rollover_amount": str(settlement.rollover_amount),
                "auto_inject": auto_inject,
            },
        )
        self._session.flush()
        logger.info(
            f"Round {round_id} drew {final_number}: winners={settlement.winner_counts}, "
            f"rollover={settlement.rollover_amount}"
        )
        return settlement

    # -------- operator settings --------
    def set_max_number_tickets_each_time(
        self, operator: OperatorContext, max_number_tickets: int
    ) -> None:
        """Change the per-call purchase cap. Issued tickets are unaffected."""

        state = self._require_operator(operator)
        self._require_positive("max_number_tickets", max_number_tickets)
        if max_number_tickets > DISCOUNT_DIVISOR:
            raise ValueError(
                f"max_number_tickets must not exceed the discount divisor {DISCOUNT_DIVISOR}"
            )
        state.max_number_tickets_each_time = max_number_tickets
        LotteryEvent.record(
            self._session,
            "NewMaxTicketsPerBatch",
            actor=operator.address,
            details={"max_number_tickets_each_time": max_number_tickets},
        )
        self._session.flush()

    def set_treasury_address(self, operator: OperatorContext, treasury_address: str) -> None:
        state = self._require_operator(operator)
        if not treasury_address:
            raise ValueError("treasury address must not be empty")
        state.treasury_address = treasury_address
        LotteryEvent.record(
            self._session,
            "NewTreasuryAddress",
            actor=operator.address,
            details={"treasury_address": treasury_address},
        )
        self._session.flush()
        logger.info(f"Treasury address set to {treasury_address}")

    def change_randomness_adapter(
        self, operator: OperatorContext, randomness: RandomnessAdapter
    ) -> None:
        """Swap the oracle; allowed only while no round, current or older, awaits a draw."""

        state = self._require_operator(operator)
        current = self._current_round(state)
        if current is not None and current.round_status != RoundStatus.CLAIMABLE:
            raise NotClaimable("Lottery not in claimable")
        # An older round may still be closed while a later one was drawn.
        awaiting = self._session.scalar(
            select(LotteryRound.id).where(LotteryRound.status == int(RoundStatus.CLOSED))
        )
        if awaiting is not None:
            raise NotClaimable(f"Round {awaiting} still awaits its random number")
        self._randomness = randomness
        state.randomness_adapter = adapter_name(randomness)
        LotteryEvent.record(
            self._session,
            "NewRandomGenerator",
            actor=operator.address,
            details={"randomness_adapter": state.randomness_adapter},
        )
        self._session.flush()
        logger.info(f"Randomness adapter changed to {state.randomness_adapter}")


__all__ = ["LotteryEngine"]
