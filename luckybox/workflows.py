from typing import TYPE_CHECKING, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import LotteryRound, LotteryState, RoundInfo, RoundStatus, Ticket
from .lottery.claims import best_bracket_for_ticket

if TYPE_CHECKING:
    from .config import LotterySettings
    from .lottery.context import OperatorContext
    from .lottery.engine import LotteryEngine
    from .randomness.adapter import RandomnessAdapter


def initialize_lottery(
    session: Session,
    settings: "LotterySettings",
    randomness: Optional["RandomnessAdapter"] = None,
) -> LotteryState:
    """Create the lottery state row from ``settings``.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    settings : LotterySettings
        Operator, treasury and purchase cap to start with. Use
        :meth:`~luckybox.config.LotterySettings.from_env` to read them from
        the environment.
    randomness : Optional[RandomnessAdapter]
        Adapter whose name is recorded on the state row.

    Returns
    -------
    LotteryState
        The persisted state row.

    Raises
    ------
    ValueError
        If the lottery was already initialized or the settings are invalid.
    """
    from .draw.pricing import DISCOUNT_DIVISOR
    from .randomness.adapter import adapter_name

    if LotteryState.find(session) is not None:
        raise ValueError("Lottery state already exists, cannot initialize again.")
    if not settings.operator_address:
        raise ValueError("An operator address is required to initialize the lottery.")
    if not settings.treasury_address:
        raise ValueError("A treasury address is required to initialize the lottery.")
    cap = settings.max_number_tickets_each_time
    if cap <= 0 or cap > DISCOUNT_DIVISOR:
        raise ValueError(f"max_number_tickets_each_time must be in 1..{DISCOUNT_DIVISOR}")

    state = LotteryState(
        operator_address=settings.operator_address,
        treasury_address=settings.treasury_address,
        max_number_tickets_each_time=cap,
        randomness_adapter=adapter_name(randomness) if randomness is not None else None,
    )
    session.add(state)
    session.flush()
    return state


def close_and_draw(
    engine: "LotteryEngine",
    operator: "OperatorContext",
    round_id: int,
    *,
    auto_inject: bool = True,
    force: bool = False,
) -> Optional[RoundInfo]:
    """Close an open round and draw it right away if the oracle has answered.

    The helper is meant for oracles that fulfil synchronously (such as the
    deterministic adapter). When the request is still pending the round is
    left closed and ``None`` is returned; call
    :meth:`LotteryEngine.draw_final_number_and_make_claimable` later.

    Returns
    -------
    Optional[RoundInfo]
        Snapshot of the claimable round, or ``None`` if it awaits randomness.
    """

    lottery_round = engine.close_round(operator, round_id, force=force)
    request_id = lottery_round.randomness_request_id
    if request_id is None or not engine.randomness.is_fulfilled(request_id):
        return None
    engine.draw_final_number_and_make_claimable(operator, round_id, auto_inject)
    return lottery_round.to_info()


def unclaimed_winning_tickets(session: Session, round_id: int) -> list[tuple[Ticket, int]]:
    """Return ``(ticket, best_bracket)`` for every winning ticket not yet claimed.

    Useful for reminding holders about prizes of past rounds, which never
    expire. Returns an empty list for rounds that are not claimable.
    """

    lottery_round = LotteryRound.get(session, round_id)
    if lottery_round is None or lottery_round.round_status != RoundStatus.CLAIMABLE:
        return []

    stmt = (
        select(Ticket)
        .where(Ticket.round_id == round_id, Ticket.claimed.is_(False))
        .order_by(Ticket.id.asc())
    )
    winners: list[tuple[Ticket, int]] = []
    for ticket in session.scalars(stmt).all():
        bracket = best_bracket_for_ticket(lottery_round, ticket.number)
        if bracket is not None:
            winners.append((ticket, bracket))
    return winners
