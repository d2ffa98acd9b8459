"""Token custody used by the lottery engine."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from sqlalchemy.orm import Session

from .errors import InsufficientBalance
from .models.ledger import LedgerAccount, LedgerTransfer

logger = logging.getLogger(__name__)

DEFAULT_CUSTODY_ADDRESS = "lottery"


@runtime_checkable
class Ledger(Protocol):
    """Moves tokens between holders and the lottery's custody account.

    Both operations either complete or raise without moving anything.
    """

    def transfer_in(self, payer: str, amount: int) -> None:
        ...

    def transfer_out(self, payee: str, amount: int) -> None:
        ...


class SqlLedger:
    """Ledger that keeps balances and a transfer journal in the database.

    The ledger writes through the caller's session, so its movements commit
    or roll back together with the lottery state they pay for.
    """

    def __init__(self, session: Session, custody_address: str = DEFAULT_CUSTODY_ADDRESS):
        self._session = session
        self.custody_address = custody_address

    def balance_of(self, address: str) -> int:
        return LedgerAccount.balance_of(self._session, address)

    def mint(self, holder: str, amount: int) -> None:
        """Credit ``holder`` with freshly issued tokens."""

        self._check_amount(amount)
        account = LedgerAccount.get_or_create(self._session, holder)
        account.balance = account.balance + amount
        self._journal(None, holder, amount, "mint")

    def transfer_in(self, payer: str, amount: int) -> None:
        self._move(payer, self.custody_address, amount, "in")

    def transfer_out(self, payee: str, amount: int) -> None:
        self._move(self.custody_address, payee, amount, "out")

    def _move(self, sender: str, recipient: str, amount: int, kind: str) -> None:
        self._check_amount(amount)
        available = self.balance_of(sender)
        if available < amount:
            raise InsufficientBalance(
                f"Insufficient balance for '{sender}': has {available}, needs {amount}"
            )
        source = LedgerAccount.get_or_create(self._session, sender)
        target = LedgerAccount.get_or_create(self._session, recipient)
        source.balance = source.balance - amount
        target.balance = target.balance + amount
        self._journal(sender, recipient, amount, kind)
        logger.debug(f"Ledger {kind} transfer of {amount} from {sender} to {recipient}")

    def _journal(self, sender, recipient: str, amount: int, kind: str) -> None:
        self._session.add(
            LedgerTransfer(sender=sender, recipient=recipient, amount=amount, kind=kind)
        )
        self._session.flush()

    @staticmethod
    def _check_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValueError(f"transfer amount must be a non-negative integer, got {amount!r}")


__all__ = ["DEFAULT_CUSTODY_ADDRESS", "Ledger", "SqlLedger"]
