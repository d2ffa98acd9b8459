"""Read-only views over lottery rounds and tickets.

None of these functions add, modify or flush rows, so repeated calls return
identical results until a mutating operation runs.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .claims import reward_for_ticket
from ..draw.codec import validate_bracket
from ..draw.pricing import calculate_total_price_for_bulk_tickets
from ..errors import RoundNotOpen, TicketOutOfRange
from ..models import LotteryRound, LotteryState, RoundInfo, RoundStatus, Ticket


def view_current_round_id(session: Session) -> int:
    state = LotteryState.find(session)
    return state.current_round_id if state is not None else 0


def view_round(session: Session, round_id: int) -> RoundInfo:
    """Return the snapshot of ``round_id``; unknown ids read as pending rounds."""

    lottery_round = LotteryRound.get(session, round_id)
    if lottery_round is None:
        return RoundInfo.pending(round_id)
    return lottery_round.to_info()


def view_rounds(session: Session, *, offset: int = 0, limit: int = 100) -> list[RoundInfo]:
    """Return started rounds ordered by id, one page at a time.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    offset : int, default: 0
        Number of rounds to skip.
    limit : int, default: 100
        Maximum number of rounds returned. Must be positive.
    """

    if offset < 0:
        raise ValueError("offset must be non-negative")
    if limit <= 0:
        raise ValueError("limit must be a positive integer")
    stmt = (
        select(LotteryRound)
        .order_by(LotteryRound.id.asc())
        .offset(offset)
        .limit(limit)
    )
    return [r.to_info() for r in session.scalars(stmt).all()]


def view_wallet_ticket_ids(session: Session, owner: str, round_id: int) -> list[int]:
    """Return the ids of the tickets ``owner`` bought in ``round_id``."""

    return [t.id for t in Ticket.owned_in_round(session, owner, round_id)]


def view_numbers_and_statuses_for_ticket_ids(
    session: Session, ticket_ids: Sequence[int]
) -> tuple[list[int], list[bool]]:
    """Return the numbers and claimed flags of ``ticket_ids``, in order.

    Raises
    ------
    TicketOutOfRange
        If a ticket id was never issued.
    """

    numbers: list[int] = []
    statuses: list[bool] = []
    for ticket_id in ticket_ids:
        ticket = Ticket.get(session, ticket_id)
        if ticket is None:
            raise TicketOutOfRange(f"Unknown ticket id {ticket_id}")
        numbers.append(ticket.number)
        statuses.append(ticket.claimed)
    return numbers, statuses


def view_rewards_for_ticket_id(
    session: Session, round_id: int, ticket_id: int, bracket: int
) -> int:
    """Return the reward ``ticket_id`` would earn at ``bracket``.

    The value ignores whether the ticket was already claimed; it is zero for
    rounds that are not claimable and for tickets outside the round.
    """

    validate_bracket(bracket)
    lottery_round = LotteryRound.get(session, round_id)
    if lottery_round is None or lottery_round.round_status != RoundStatus.CLAIMABLE:
        return 0
    if not lottery_round.owns_ticket_id(ticket_id):
        return 0
    ticket = Ticket.get(session, ticket_id)
    if ticket is None:
        return 0
    return reward_for_ticket(lottery_round, ticket.number, bracket)


def quote_ticket_price(
    session: Session, number_tickets: int, round_id: Optional[int] = None
) -> int:
    """Return the price of buying ``number_tickets`` in one batch.

    Uses the current round unless ``round_id`` is given, and the operator's
    current per-call cap.

    Raises
    ------
    RoundNotOpen
        If the round does not exist or is no longer selling tickets.
    """

    state = LotteryState.load(session)
    target_id = round_id if round_id is not None else state.current_round_id
    lottery_round = LotteryRound.get(session, target_id)
    if lottery_round is None or lottery_round.round_status != RoundStatus.OPEN:
        raise RoundNotOpen()
    return calculate_total_price_for_bulk_tickets(
        lottery_round.ticket_price,
        number_tickets,
        state.max_number_tickets_each_time,
    )


__all__ = [
    "quote_ticket_price",
    "view_current_round_id",
    "view_numbers_and_statuses_for_ticket_ids",
    "view_round",
    "view_rounds",
    "view_rewards_for_ticket_id",
    "view_wallet_ticket_ids",
]
