"""Round lifecycle, claims and read views."""

from .claims import ClaimEngine, ClaimReceipt, ClaimedTicket
from .context import OperatorContext
from .engine import LotteryEngine

__all__ = [
    "ClaimEngine",
    "ClaimReceipt",
    "ClaimedTicket",
    "LotteryEngine",
    "OperatorContext",
]
