from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, JSON, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .types import ID_TYPE

EVENT_TYPES = (
    "LotteryOpen",
    "TicketsPurchased",
    "LotteryInjection",
    "LotteryClose",
    "LotteryNumberDrawn",
    "TicketsClaim",
    "NewTreasuryAddress",
    "NewRandomGenerator",
    "NewMaxTicketsPerBatch",
)


class LotteryEvent(Base):
    """Append-only audit log of lottery actions."""

    __tablename__ = "lottery_events"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    round_id: Mapped[Optional[int]] = mapped_column(ID_TYPE, nullable=True)
    actor: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(
            "event_type IN ({})".format(", ".join(f"'{t}'" for t in EVENT_TYPES)),
            name="event_type_enum",
        ),
        Index("ix_lottery_events_round_type", "round_id", "event_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<LotteryEvent(id={self.id}, event_type='{self.event_type}', "
            f"round_id={self.round_id}, actor='{self.actor}')>"
        )

    @classmethod
    def record(
        cls,
        session: Session,
        event_type: str,
        *,
        round_id: Optional[int] = None,
        actor: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> "LotteryEvent":
        """Append an event row to the session.

        Amounts in ``details`` should already be strings so that values above
        the JSON double range survive a round trip.
        """

        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown lottery event type '{event_type}'")
        event = cls(
            event_type=event_type,
            round_id=round_id,
            actor=actor,
            details=details,
        )
        session.add(event)
        return event

    @classmethod
    def for_round(
        cls, session: Session, round_id: int, event_type: Optional[str] = None
    ) -> Sequence["LotteryEvent"]:
        stmt = select(cls).where(cls.round_id == round_id)
        if event_type is not None:
            stmt = stmt.where(cls.event_type == event_type)
        return session.scalars(stmt.order_by(cls.id.asc())).all()
