"""Exception taxonomy for the lottery engine.

Every error is raised before any round, ticket or ledger state is mutated,
so a failed call leaves the lottery exactly as it was.
"""

from __future__ import annotations

from typing import Optional


class LotteryError(Exception):
    """Base class for all lottery engine errors."""

    default_message = "Lottery operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class LotteryNotInitialized(LotteryError):
    default_message = "Lottery state has not been initialized"


class Unauthorized(LotteryError):
    default_message = "Caller is not the operator"


class InvalidTicketNumber(LotteryError):
    default_message = "Ticket number is outside range"


class InvalidBracket(LotteryError):
    default_message = "Bracket out of range"


class EmptyPurchase(LotteryError):
    default_message = "No tickets are being bought"


class BatchTooLarge(LotteryError):
    default_message = "Too many tickets"


class RewardBreakdownTooHigh(LotteryError):
    default_message = "Rewards breakdown too high"


class TreasuryFeeTooHigh(LotteryError):
    default_message = "Treasury fee too high"


class InvalidRoundTiming(LotteryError):
    default_message = "Round end time must be in the future"


class RoundAlreadyOpen(LotteryError):
    default_message = "A round is already open"


class RoundNotOpen(LotteryError):
    default_message = "Round not open"


class RoundNotOpenOrNotElapsed(LotteryError):
    default_message = "Round not open or not over"


class NotClosed(LotteryError):
    default_message = "Round not closed"


class RandomnessNotReady(LotteryError):
    default_message = "Random number not fulfilled yet"


class NotClaimable(LotteryError):
    default_message = "Not claimable"


class TicketOutOfRange(LotteryError):
    default_message = "Ticket id out of range"


class NotOwnerOrAlreadyClaimed(LotteryError):
    default_message = "Not the ticket owner or already claimed"


class NoPrize(LotteryError):
    default_message = "No prize"


class LengthMismatch(LotteryError):
    default_message = "Not same length"


class EmptyClaim(LotteryError):
    default_message = "No tickets are being claimed"


class InsufficientBalance(LotteryError):
    default_message = "Insufficient balance"


__all__ = [
    "LotteryError",
    "LotteryNotInitialized",
    "Unauthorized",
    "InvalidTicketNumber",
    "InvalidBracket",
    "EmptyPurchase",
    "BatchTooLarge",
    "RewardBreakdownTooHigh",
    "TreasuryFeeTooHigh",
    "InvalidRoundTiming",
    "RoundAlreadyOpen",
    "RoundNotOpen",
    "RoundNotOpenOrNotElapsed",
    "NotClosed",
    "RandomnessNotReady",
    "NotClaimable",
    "TicketOutOfRange",
    "NotOwnerOrAlreadyClaimed",
    "NoPrize",
    "LengthMismatch",
    "EmptyClaim",
    "InsufficientBalance",
]
