from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base
from .types import ID_TYPE, TokenAmount


class LedgerAccount(Base):
    """Token balance held by an address in the SQL-backed ledger."""

    __tablename__ = "ledger_accounts"

    address: Mapped[str] = mapped_column(String(100), primary_key=True)
    balance: Mapped[int] = mapped_column(TokenAmount, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __init__(self, address: str, balance: int = 0):
        self.address = address
        self.balance = balance

    def __repr__(self) -> str:
        return f"<LedgerAccount(address='{self.address}', balance={self.balance})>"

    @classmethod
    def get_or_create(cls, session: Session, address: str) -> "LedgerAccount":
        account = session.get(cls, address)
        if account is None:
            account = cls(address=address)
            session.add(account)
        return account

    @classmethod
    def balance_of(cls, session: Session, address: str) -> int:
        account = session.get(cls, address)
        return account.balance if account is not None else 0


class LedgerTransfer(Base):
    """Journal entry for one token movement."""

    __tablename__ = "ledger_transfers"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    sender: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """``None`` for tokens minted into the ledger."""
    recipient: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[int] = mapped_column(TokenAmount, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("kind IN ('mint','in','out')", name="kind_enum"),
        Index("ix_ledger_transfers_recipient", "recipient"),
        Index("ix_ledger_transfers_sender", "sender"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerTransfer(id={self.id}, sender='{self.sender}', "
            f"recipient='{self.recipient}', amount={self.amount}, kind='{self.kind}')>"
        )

    @classmethod
    def history(cls, session: Session, address: str) -> list["LedgerTransfer"]:
        """Return every transfer touching ``address`` in journal order."""

        stmt = (
            select(cls)
            .where((cls.sender == address) | (cls.recipient == address))
            .order_by(cls.id.asc())
        )
        return list(session.scalars(stmt).all())
