"""Pure helpers for ticket numbers, pricing and draw settlement."""

from .codec import (
    BRACKET_COUNT,
    MAX_TICKET_NUMBER,
    MIN_TICKET_NUMBER,
    bracket_keys,
    bridge,
    final_number_from_random,
    matching_brackets,
    validate_ticket_number,
)
from .pricing import DISCOUNT_DIVISOR, calculate_total_price_for_bulk_tickets
from .settlement import BracketResult, Settlement, settle_draw

__all__ = [
    "BRACKET_COUNT",
    "BracketResult",
    "DISCOUNT_DIVISOR",
    "MAX_TICKET_NUMBER",
    "MIN_TICKET_NUMBER",
    "Settlement",
    "bracket_keys",
    "bridge",
    "calculate_total_price_for_bulk_tickets",
    "final_number_from_random",
    "matching_brackets",
    "settle_draw",
    "validate_ticket_number",
]
