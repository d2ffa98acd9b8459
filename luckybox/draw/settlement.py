"""Bracket settlement for a drawn final number."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from .codec import BRACKET_COUNT, bridge
from ..errors import RewardBreakdownTooHigh, TreasuryFeeTooHigh

BPS_DENOMINATOR = 10000
MAX_TREASURY_FEE = 3000


@dataclass(frozen=True)
class BracketResult:
    """Outcome of a single bracket.

    Attributes
    ----------
    bracket : int
        Bracket index, ``0`` for a one-digit match up to ``3``.
    key : int
        Bracket key of the final number.
    share_bps : int
        Basis points of the prize pool assigned to the bracket, including
        shares bridged down from empty brackets above. Zero when inactive.
    winner_count : int
        Tickets holding ``key`` at this bracket; zero marks an inactive bracket.
    reward_total : int
        Amount distributable to the bracket, always
        ``reward_per_ticket * winner_count``.
    reward_per_ticket : int
        Amount paid for each winning ticket claimed at this bracket.
    """

    bracket: int
    key: int
    share_bps: int
    winner_count: int
    reward_total: int
    reward_per_ticket: int

    @property
    def active(self) -> bool:
        return self.winner_count > 0


@dataclass(frozen=True)
class Settlement:
    """Full settlement of one round, brackets ordered from 0 to 3."""

    final_number: int
    amount_collected: int
    treasury_amount: int
    brackets: tuple[BracketResult, ...]
    rollover_amount: int

    @property
    def winner_counts(self) -> list[int]:
        return [b.winner_count for b in self.brackets]

    @property
    def reward_totals(self) -> list[int]:
        return [b.reward_total for b in self.brackets]

    @property
    def rewards_per_ticket(self) -> list[int]:
        return [b.reward_per_ticket for b in self.brackets]

    @property
    def distributed_amount(self) -> int:
        return sum(b.reward_total for b in self.brackets)

    def is_balanced(self) -> bool:
        """Return ``True`` when every unit of the pool is accounted for."""

        return (
            self.treasury_amount + self.distributed_amount + self.rollover_amount
            == self.amount_collected
        )


def validate_rewards_breakdown(rewards_breakdown: Sequence[int]) -> list[int]:
    """Return the breakdown as a list after checking its shape and total."""

    breakdown = list(rewards_breakdown)
    if len(breakdown) != BRACKET_COUNT:
        raise ValueError(
            f"rewards breakdown must have {BRACKET_COUNT} entries, got {len(breakdown)}"
        )
    for share in breakdown:
        if isinstance(share, bool) or not isinstance(share, int) or share < 0:
            raise ValueError("rewards breakdown entries must be non-negative integers")
    if sum(breakdown) > BPS_DENOMINATOR:
        raise RewardBreakdownTooHigh()
    return breakdown


def validate_treasury_fee(treasury_fee: int) -> int:
    if isinstance(treasury_fee, bool) or not isinstance(treasury_fee, int):
        raise ValueError("treasury fee must be an integer")
    if treasury_fee < 0:
        raise ValueError("treasury fee must be non-negative")
    if treasury_fee > MAX_TREASURY_FEE:
        raise TreasuryFeeTooHigh()
    return treasury_fee


def settle_draw(
    final_number: int,
    amount_collected: int,
    rewards_breakdown: Sequence[int],
    treasury_fee: int,
    count_tickets: Callable[[int, int], int],
) -> Settlement:
    """Compute the reward table of a round from its final number.

    Parameters
    ----------
    final_number : int
        Drawn number in ``[10000, 19999]``.
    amount_collected : int
        Total pool of the round (ticket sales and injections).
    rewards_breakdown : Sequence[int]
        Basis-point share per bracket, bracket 0 first.
    treasury_fee : int
        Basis points skimmed to the treasury before distribution.
    count_tickets : Callable[[int, int], int]
        ``count_tickets(bracket, key)`` returns the number of tickets of the
        round whose key at ``bracket`` equals ``key``.

    Returns
    -------
    Settlement
        Per-bracket results with an exact rollover remainder.

    Notes
    -----
    Brackets are walked from 3 down to 0. A bracket without winners passes
    its share down to the next bracket, so the share of an empty bracket ends
    up with the nearest active bracket below it. Shares that never meet an
    active bracket, the unassigned part of a breakdown below 100%, and every
    floor-division remainder form the rollover amount.
    """

    breakdown = validate_rewards_breakdown(rewards_breakdown)
    validate_treasury_fee(treasury_fee)
    if amount_collected < 0:
        raise ValueError("amount collected must be non-negative")

    treasury_amount = amount_collected * treasury_fee // BPS_DENOMINATOR
    pool = amount_collected - treasury_amount

    results: list[BracketResult] = []
    carried_bps = 0
    for bracket in reversed(range(BRACKET_COUNT)):
        key = bridge(final_number, bracket)
        count = count_tickets(bracket, key)
        if count > 0:
            share = breakdown[bracket] + carried_bps
            carried_bps = 0
            allocation = pool * share // BPS_DENOMINATOR
            per_ticket = allocation // count
            results.append(
                BracketResult(
                    bracket=bracket,
                    key=key,
                    share_bps=share,
                    winner_count=count,
                    reward_total=per_ticket * count,
                    reward_per_ticket=per_ticket,
                )
            )
        else:
            carried_bps += breakdown[bracket]
            results.append(
                BracketResult(
                    bracket=bracket,
                    key=key,
                    share_bps=0,
                    winner_count=0,
                    reward_total=0,
                    reward_per_ticket=0,
                )
            )

    results.reverse()
    distributed = sum(r.reward_total for r in results)
    return Settlement(
        final_number=final_number,
        amount_collected=amount_collected,
        treasury_amount=treasury_amount,
        brackets=tuple(results),
        rollover_amount=amount_collected - treasury_amount - distributed,
    )


__all__ = [
    "BPS_DENOMINATOR",
    "BracketResult",
    "MAX_TREASURY_FEE",
    "Settlement",
    "settle_draw",
    "validate_rewards_breakdown",
    "validate_treasury_fee",
]
