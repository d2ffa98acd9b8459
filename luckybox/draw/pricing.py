"""Bulk-discount pricing for ticket purchases."""

from __future__ import annotations

from typing import Optional

from ..errors import BatchTooLarge, EmptyPurchase

DISCOUNT_DIVISOR = 98


def calculate_total_price_for_bulk_tickets(
    ticket_price: int,
    number_tickets: int,
    max_number_tickets: Optional[int] = None,
    *,
    discount_divisor: int = DISCOUNT_DIVISOR,
) -> int:
    """Return the price of ``number_tickets`` bought in one batch.

    The price is ``ticket_price * n * (D + 1 - n) // D`` so every extra ticket
    in a batch lowers the average unit price. A single ticket costs exactly
    ``ticket_price``.

    Parameters
    ----------
    ticket_price : int
        Unit price of the round in token base units.
    number_tickets : int
        Size of the batch.
    max_number_tickets : Optional[int], default: None
        Per-call cap configured by the operator. ``None`` only applies the
        structural limit of ``discount_divisor``.
    discount_divisor : int, default: 98

    Raises
    ------
    EmptyPurchase
        If ``number_tickets`` is zero.
    BatchTooLarge
        If the batch exceeds the cap or the discount divisor.
    """

    if number_tickets <= 0:
        raise EmptyPurchase()
    if max_number_tickets is not None and number_tickets > max_number_tickets:
        raise BatchTooLarge()
    if number_tickets > discount_divisor:
        raise BatchTooLarge()
    return (
        ticket_price * number_tickets * (discount_divisor + 1 - number_tickets)
    ) // discount_divisor


__all__ = ["DISCOUNT_DIVISOR", "calculate_total_price_for_bulk_tickets"]
