from typing import TYPE_CHECKING, Optional, Sequence

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, select, text
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .types import ID_TYPE

if TYPE_CHECKING:
    from .round import LotteryRound


class Ticket(Base):
    """A ticket bought by a single holder for a single round."""

    def __init__(self, id: int, round_id: int, number: int, owner: str):
        """Create a ticket record.

        Parameters
        ----------
        id : int
            Global ticket id, assigned sequentially across all rounds.
        round_id : int
            Round the ticket was bought for.
        number : int
            Ticket number in ``[10000, 19999]``.
        owner : str
            Address of the buyer.
        """

        self.id = id
        self.round_id = round_id
        self.number = number
        self.owner = owner
        self.claimed = False

    __tablename__ = "lottery_tickets"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=False)
    round_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("lottery_rounds.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    owner: Mapped[str] = mapped_column(String(100), nullable=False)
    claimed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    round: Mapped["LotteryRound"] = relationship(back_populates="tickets")

    __table_args__ = (
        Index("ix_tickets_owner_round", "owner", "round_id"),
        Index("ix_tickets_round", "round_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Ticket(id={self.id}, round_id={self.round_id}, number={self.number}, "
            f"owner='{self.owner}', claimed={self.claimed})>"
        )

    @classmethod
    def get(cls, session: Session, ticket_id: int) -> Optional["Ticket"]:
        return session.get(cls, ticket_id)

    @classmethod
    def owned_in_round(
        cls, session: Session, owner: str, round_id: int
    ) -> Sequence["Ticket"]:
        """Return the tickets ``owner`` bought in ``round_id`` in issuance order."""

        return session.scalars(
            select(cls)
            .where(cls.owner == owner, cls.round_id == round_id)
            .order_by(cls.id.asc())
        ).all()
