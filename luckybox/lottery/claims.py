"""Ticket claims against claimable rounds."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from ..draw.codec import BRACKET_COUNT, matches_at, validate_bracket
from ..errors import (
    EmptyClaim,
    LengthMismatch,
    NoPrize,
    NotClaimable,
    NotOwnerOrAlreadyClaimed,
    TicketOutOfRange,
)
from ..ledger import Ledger
from ..models import LotteryEvent, LotteryRound, LotteryState, RoundStatus, Ticket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimedTicket:
    ticket_id: int
    bracket: int
    reward: int


@dataclass(frozen=True)
class ClaimReceipt:
    """Outcome of a claim call.

    Attributes
    ----------
    claimer : str
        Address that received the payout.
    round_id : int
        Round the tickets belong to.
    tickets : tuple[ClaimedTicket, ...]
        Tickets marked as claimed, in the order they were processed.
    total_reward : int
        Amount transferred to ``claimer``.
    """

    claimer: str
    round_id: int
    tickets: tuple[ClaimedTicket, ...]
    total_reward: int


def reward_for_ticket(lottery_round: LotteryRound, number: int, bracket: int) -> int:
    """Return what a ticket with ``number`` earns at ``bracket`` in a drawn round.

    Zero when the bracket had no winners or the ticket's digits do not match
    the final number at that bracket.
    """

    if lottery_round.final_number is None:
        return 0
    if lottery_round.count_winners_per_bracket[bracket] == 0:
        return 0
    if not matches_at(number, lottery_round.final_number, bracket):
        return 0
    return lottery_round.reward_per_ticket_per_bracket[bracket]


def best_bracket_for_ticket(lottery_round: LotteryRound, number: int) -> Optional[int]:
    """Return the highest bracket at which ``number`` earns a reward, if any."""

    for bracket in reversed(range(BRACKET_COUNT)):
        if reward_for_ticket(lottery_round, number, bracket) > 0:
            return bracket
    return None


class ClaimEngine:
    """Verifies and pays ticket claims.

    A ticket is paid at most once: the ``claimed`` flag is set in the same
    unit of work as the payout and is never cleared.
    """

    def __init__(self, session: Session, *, ledger: Ledger) -> None:
        self._session = session
        self._ledger = ledger

    def _claimable_round(self, round_id: int) -> LotteryRound:
        lottery_round = LotteryRound.get(self._session, round_id)
        if lottery_round is None or lottery_round.round_status != RoundStatus.CLAIMABLE:
            raise NotClaimable()
        return lottery_round

    def claim_ticket(
        self, claimer: str, round_id: int, ticket_id: int, bracket: int
    ) -> ClaimReceipt:
        """Claim a single ticket at ``bracket``. See :meth:`claim_tickets`."""

        return self.claim_tickets(claimer, round_id, [ticket_id], [bracket])

    def claim_tickets(
        self,
        claimer: str,
        round_id: int,
        ticket_ids: Sequence[int],
        brackets: Sequence[int],
    ) -> ClaimReceipt:
        """Claim several tickets, each at the bracket named for it.

        The bracket is taken as given: a ticket matching bracket 3 may be
        claimed at bracket 1 and is then paid the bracket 1 reward. Either
        every pair succeeds or nothing is claimed.

        Parameters
        ----------
        claimer : str
            Address claiming; it must own every ticket.
        round_id : int
            Claimable round the tickets belong to.
        ticket_ids : Sequence[int]
            Tickets to claim.
        brackets : Sequence[int]
            Bracket claimed for each ticket, aligned with ``ticket_ids``.

        Raises
        ------
        LengthMismatch
            If ``ticket_ids`` and ``brackets`` differ in length.
        EmptyClaim
            If no ticket is given.
        NotClaimable
            If the round has not been drawn.
        TicketOutOfRange
            If a ticket id does not belong to the round.
        NotOwnerOrAlreadyClaimed
            If a ticket belongs to someone else, is already claimed, or is
            listed twice.
        NoPrize
            If a ticket does not win at the named bracket.
        """

        ticket_ids = list(ticket_ids)
        brackets = list(brackets)
        if len(ticket_ids) != len(brackets):
            raise LengthMismatch()
        if not ticket_ids:
            raise EmptyClaim()
        lottery_round = self._claimable_round(round_id)

        payouts: list[tuple[Ticket, int, int]] = []
        seen: set[int] = set()
        for ticket_id, bracket in zip(ticket_ids, brackets):
            validate_bracket(bracket)
            if not lottery_round.owns_ticket_id(ticket_id):
                raise TicketOutOfRange()
            ticket = Ticket.get(self._session, ticket_id)
            if (
                ticket is None
                or ticket.owner != claimer
                or ticket.claimed
                or ticket_id in seen
            ):
                raise NotOwnerOrAlreadyClaimed()
            reward = reward_for_ticket(lottery_round, ticket.number, bracket)
            if reward == 0:
                raise NoPrize()
            seen.add(ticket_id)
            payouts.append((ticket, bracket, reward))

        return self._pay(claimer, lottery_round, payouts)

    def claim_all_tickets(self, claimer: str, round_id: int) -> ClaimReceipt:
        """Claim every winning, unclaimed ticket ``claimer`` holds in the round.

        Each ticket is claimed at its best active bracket; tickets without a
        prize are skipped rather than rejected.
        """

        lottery_round = self._claimable_round(round_id)
        payouts: list[tuple[Ticket, int, int]] = []
        for ticket in Ticket.owned_in_round(self._session, claimer, round_id):
            if ticket.claimed:
                continue
            bracket = best_bracket_for_ticket(lottery_round, ticket.number)
            if bracket is None:
                continue
            payouts.append(
                (ticket, bracket, reward_for_ticket(lottery_round, ticket.number, bracket))
            )
        return self._pay(claimer, lottery_round, payouts)

    def _pay(
        self,
        claimer: str,
        lottery_round: LotteryRound,
        payouts: list[tuple[Ticket, int, int]],
    ) -> ClaimReceipt:
        total = sum(reward for _, _, reward in payouts)
        if total > 0:
            self._ledger.transfer_out(claimer, total)

        for ticket, _, _ in payouts:
            ticket.claimed = True
        lottery_round.pending_rewards = lottery_round.pending_rewards - total
        state = LotteryState.load(self._session)
        state.all_pending_rewards = state.all_pending_rewards - total

        claimed = tuple(
            ClaimedTicket(ticket_id=ticket.id, bracket=bracket, reward=reward)
            for ticket, bracket, reward in payouts
        )
        if claimed:
            LotteryEvent.record(
                self._session,
                "TicketsClaim",
                round_id=lottery_round.id,
                actor=claimer,
                details={
                    "ticket_ids": [c.ticket_id for c in claimed],
                    "brackets": [c.bracket for c in claimed],
                    "amount": str(total),
                },
            )
            logger.info(
                f"{claimer} claimed {len(claimed)} tickets in round {lottery_round.id} for {total}"
            )
        self._session.flush()
        return ClaimReceipt(
            claimer=claimer,
            round_id=lottery_round.id,
            tickets=claimed,
            total_reward=total,
        )


__all__ = [
    "ClaimEngine",
    "ClaimReceipt",
    "ClaimedTicket",
    "best_bracket_for_ticket",
    "reward_for_ticket",
]
