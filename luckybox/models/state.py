"""Singleton row holding the lottery-wide counters and configuration."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, Session, mapped_column

from .types import TokenAmount
from .base import Base
from ..errors import LotteryNotInitialized

STATE_ROW_ID = 1
DEFAULT_MAX_NUMBER_TICKETS_EACH_TIME = 10


class LotteryState(Base):
    """Global lottery state shared by every round."""

    __tablename__ = "lottery_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

    operator_address: Mapped[str] = mapped_column(String(100), nullable=False)
    """The single identity allowed to call privileged operations."""

    treasury_address: Mapped[str] = mapped_column(String(100), nullable=False)
    """Recipient of the treasury fee at every draw."""

    randomness_adapter: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    """Name of the randomness adapter last installed by the operator."""

    current_round_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    current_ticket_id: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    """Id the next purchased ticket will receive."""

    max_number_tickets_each_time: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_MAX_NUMBER_TICKETS_EACH_TIME
    )
    pending_injection_next_lottery: Mapped[int] = mapped_column(
        TokenAmount, nullable=False, default=0
    )
    all_pending_rewards: Mapped[int] = mapped_column(
        TokenAmount, nullable=False, default=0
    )
    """Unclaimed rewards summed over every claimable round."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __init__(
        self,
        *,
        operator_address: str,
        treasury_address: str,
        max_number_tickets_each_time: int = DEFAULT_MAX_NUMBER_TICKETS_EACH_TIME,
        randomness_adapter: Optional[str] = None,
    ) -> None:
        self.id = STATE_ROW_ID
        self.operator_address = operator_address
        self.treasury_address = treasury_address
        self.max_number_tickets_each_time = max_number_tickets_each_time
        self.randomness_adapter = randomness_adapter
        self.current_round_id = 0
        self.current_ticket_id = 0
        self.pending_injection_next_lottery = 0
        self.all_pending_rewards = 0

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<LotteryState(current_round_id={self.current_round_id}, "
            f"current_ticket_id={self.current_ticket_id}, "
            f"pending_injection_next_lottery={self.pending_injection_next_lottery})>"
        )

    @classmethod
    def find(cls, session: Session) -> Optional["LotteryState"]:
        return session.get(cls, STATE_ROW_ID)

    @classmethod
    def load(cls, session: Session) -> "LotteryState":
        """Return the state row, raising when the lottery was never initialized."""

        state = cls.find(session)
        if state is None:
            raise LotteryNotInitialized()
        return state
