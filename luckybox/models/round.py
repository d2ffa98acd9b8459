"""Database models for lottery rounds and their bracket histograms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    ForeignKey,
    Integer,
    JSON,
    String,
    UniqueConstraint,
    Index,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .types import ID_TYPE, TokenAmount, TokenAmountList

if TYPE_CHECKING:
    from .ticket import Ticket


class RoundStatus(IntEnum):
    """Lifecycle of a round. Values only ever increase."""

    PENDING = 0
    OPEN = 1
    CLOSED = 2
    CLAIMABLE = 3


@dataclass(frozen=True)
class RoundInfo:
    """Read-only snapshot of a round as exposed by the view functions.

    Attributes
    ----------
    round_id : int
        Identifier of the round.
    status : RoundStatus
        Lifecycle status at the time of the snapshot.
    rewards_breakdown : tuple[int, ...]
        Basis-point share of the pool per bracket (bracket 0 first).
    count_winners_per_bracket : tuple[int, ...]
        Raw winner counts per bracket, zero for inactive brackets.
    reward_per_bracket : tuple[int, ...]
        Amount distributable per bracket after floor division.
    reward_per_ticket_per_bracket : tuple[int, ...]
        Amount a single winning ticket receives per bracket.
    """

    round_id: int
    status: RoundStatus
    start_time: int
    end_time: int
    ticket_price: int
    rewards_breakdown: tuple[int, ...]
    treasury_fee: int
    first_ticket_id: int
    first_ticket_id_next_round: int
    amount_collected: int
    final_number: int
    count_winners_per_bracket: tuple[int, ...]
    reward_per_bracket: tuple[int, ...]
    reward_per_ticket_per_bracket: tuple[int, ...]
    treasury_amount: int
    rollover_amount: int
    pending_rewards: int

    @classmethod
    def pending(cls, round_id: int) -> "RoundInfo":
        """Return the all-zero snapshot of a round that was never started."""

        zeros = (0, 0, 0, 0)
        return cls(
            round_id=round_id,
            status=RoundStatus.PENDING,
            start_time=0,
            end_time=0,
            ticket_price=0,
            rewards_breakdown=zeros,
            treasury_fee=0,
            first_ticket_id=0,
            first_ticket_id_next_round=0,
            amount_collected=0,
            final_number=0,
            count_winners_per_bracket=zeros,
            reward_per_bracket=zeros,
            reward_per_ticket_per_bracket=zeros,
            treasury_amount=0,
            rollover_amount=0,
            pending_rewards=0,
        )


class LotteryRound(Base):
    """One lottery cycle from opening to the claimable terminal state."""

    __tablename__ = "lottery_rounds"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=False)
    """Sequential round identifier, assigned by the engine starting at 1."""

    status: Mapped[int] = mapped_column(
        Integer, nullable=False, default=int(RoundStatus.PENDING)
    )
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_time: Mapped[int] = mapped_column(BigInteger, nullable=False)

    ticket_price: Mapped[int] = mapped_column(TokenAmount, nullable=False)
    rewards_breakdown: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    """Four basis-point shares, immutable once the round is open."""

    treasury_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    first_ticket_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    first_ticket_id_next_round: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    """Exclusive upper bound of the ticket ids owned by this round, fixed at close."""

    amount_collected: Mapped[int] = mapped_column(TokenAmount, nullable=False, default=0)

    final_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Drawn number, set exactly once when the round becomes claimable."""

    randomness_request_id: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True
    )

    count_winners_per_bracket: Mapped[list[int]] = mapped_column(JSON, nullable=False)
    reward_per_bracket: Mapped[list[int]] = mapped_column(
        TokenAmountList, nullable=False
    )
    reward_per_ticket_per_bracket: Mapped[list[int]] = mapped_column(
        TokenAmountList, nullable=False
    )
    treasury_amount: Mapped[int] = mapped_column(TokenAmount, nullable=False, default=0)
    rollover_amount: Mapped[int] = mapped_column(TokenAmount, nullable=False, default=0)
    # Reserved at draw time. Winner counts are raw, so a top-bracket ticket also
    # reserves a share in every lower bracket it can never be paid for; that
    # part stays pending once every ticket is claimed.
    pending_rewards: Mapped[int] = mapped_column(TokenAmount, nullable=False, default=0)

    tickets: Mapped[list["Ticket"]] = relationship(
        back_populates="round", order_by="Ticket.id"
    )
    bracket_counts: Mapped[list["BracketTicketCount"]] = relationship(
        back_populates="round", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        *,
        id: int,
        start_time: int,
        end_time: int,
        ticket_price: int,
        rewards_breakdown: list[int],
        treasury_fee: int,
        first_ticket_id: int,
        amount_collected: int = 0,
        status: RoundStatus = RoundStatus.OPEN,
    ) -> None:
        self.id = id
        self.status = int(status)
        self.start_time = start_time
        self.end_time = end_time
        self.ticket_price = ticket_price
        self.rewards_breakdown = list(rewards_breakdown)
        self.treasury_fee = treasury_fee
        self.first_ticket_id = first_ticket_id
        self.first_ticket_id_next_round = first_ticket_id
        self.amount_collected = amount_collected
        self.count_winners_per_bracket = [0, 0, 0, 0]
        self.reward_per_bracket = [0, 0, 0, 0]
        self.reward_per_ticket_per_bracket = [0, 0, 0, 0]
        self.treasury_amount = 0
        self.rollover_amount = 0
        self.pending_rewards = 0

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<LotteryRound(id={id}, status={status}, amount_collected={amount})>".format(
            id=self.id,
            status=RoundStatus(self.status).name,
            amount=self.amount_collected,
        )

    @property
    def round_status(self) -> RoundStatus:
        return RoundStatus(self.status)

    def owns_ticket_id(self, ticket_id: int) -> bool:
        """Return ``True`` when ``ticket_id`` falls in this round's id range."""

        return self.first_ticket_id <= ticket_id < self.first_ticket_id_next_round

    def to_info(self) -> RoundInfo:
        """Return an immutable snapshot of the round."""

        return RoundInfo(
            round_id=self.id,
            status=self.round_status,
            start_time=self.start_time,
            end_time=self.end_time,
            ticket_price=self.ticket_price,
            rewards_breakdown=tuple(self.rewards_breakdown),
            treasury_fee=self.treasury_fee,
            first_ticket_id=self.first_ticket_id,
            first_ticket_id_next_round=self.first_ticket_id_next_round,
            amount_collected=self.amount_collected,
            final_number=self.final_number or 0,
            count_winners_per_bracket=tuple(self.count_winners_per_bracket),
            reward_per_bracket=tuple(self.reward_per_bracket),
            reward_per_ticket_per_bracket=tuple(self.reward_per_ticket_per_bracket),
            treasury_amount=self.treasury_amount,
            rollover_amount=self.rollover_amount,
            pending_rewards=self.pending_rewards,
        )

    @classmethod
    def get(cls, session: Session, round_id: int) -> Optional["LotteryRound"]:
        """Return the round with ``round_id`` if it was ever started."""

        return session.get(cls, round_id)


class BracketTicketCount(Base):
    """Number of tickets in a round sharing a bracket key.

    A ticket contributes one to each of its four bracket keys, so the row for
    ``(round, 3, 1975)`` counts the tickets ending in ``1975`` and the row for
    ``(round, 0, 5)`` counts every ticket ending in ``5``.
    """

    __tablename__ = "lottery_bracket_counts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("lottery_rounds.id", ondelete="CASCADE"), nullable=False
    )
    bracket: Mapped[int] = mapped_column(Integer, nullable=False)
    key: Mapped[int] = mapped_column(Integer, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    round: Mapped["LotteryRound"] = relationship(back_populates="bracket_counts")

    __table_args__ = (
        UniqueConstraint(
            "round_id", "bracket", "key", name="uq_bracket_count_round_bracket_key"
        ),
        Index("ix_bracket_counts_round", "round_id"),
    )

    def __init__(self, *, round_id: int, bracket: int, key: int, count: int = 0) -> None:
        self.round_id = round_id
        self.bracket = bracket
        self.key = key
        self.count = count

    @classmethod
    def lookup(
        cls, session: Session, round_id: int, bracket: int, key: int
    ) -> Optional["BracketTicketCount"]:
        return session.scalar(
            select(cls).where(
                cls.round_id == round_id,
                cls.bracket == bracket,
                cls.key == key,
            )
        )

    @classmethod
    def count_for(cls, session: Session, round_id: int, bracket: int, key: int) -> int:
        """Return the number of tickets of ``round_id`` with ``key`` at ``bracket``."""

        row = cls.lookup(session, round_id, bracket, key)
        return row.count if row is not None else 0


__all__ = [
    "BracketTicketCount",
    "LotteryRound",
    "RoundInfo",
    "RoundStatus",
]
