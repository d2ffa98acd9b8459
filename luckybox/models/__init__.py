from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .round import BracketTicketCount, LotteryRound, RoundInfo, RoundStatus  # noqa: F401
from .ticket import Ticket  # noqa: F401
from .state import LotteryState  # noqa: F401
from .event import LotteryEvent  # noqa: F401
from .ledger import LedgerAccount, LedgerTransfer  # noqa: F401

__all__ = [
    "Base",
    "BracketTicketCount",
    "LotteryRound",
    "RoundInfo",
    "RoundStatus",
    "Ticket",
    "LotteryState",
    "LotteryEvent",
    "LedgerAccount",
    "LedgerTransfer",
]
