"""Helpers for validating ticket numbers and deriving bracket keys."""

from __future__ import annotations

from ..errors import InvalidBracket, InvalidTicketNumber

MIN_TICKET_NUMBER = 10000
MAX_TICKET_NUMBER = 19999
BRACKET_COUNT = 4


def validate_ticket_number(number: int) -> int:
    """Return ``number`` unchanged if it is a valid ticket number.

    The leading ``1`` is a fixed marker; only the four trailing digits take
    part in matching.

    Raises
    ------
    InvalidTicketNumber
        If ``number`` is not an integer in ``[10000, 19999]``.
    """

    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidTicketNumber(f"Ticket number must be an integer, got {number!r}")
    if number < MIN_TICKET_NUMBER or number > MAX_TICKET_NUMBER:
        raise InvalidTicketNumber()
    return number


def validate_bracket(bracket: int) -> int:
    if isinstance(bracket, bool) or not isinstance(bracket, int):
        raise InvalidBracket(f"Bracket must be an integer, got {bracket!r}")
    if bracket < 0 or bracket >= BRACKET_COUNT:
        raise InvalidBracket()
    return bracket


def bridge(number: int, bracket: int) -> int:
    """Return the bracket key of ``number``: its last ``bracket + 1`` digits.

    Parameters
    ----------
    number : int
        Ticket or final number in ``[10000, 19999]``.
    bracket : int
        Bracket index; ``0`` matches the last digit, ``3`` all four payload
        digits.

    Returns
    -------
    int
        ``number % 10 ** (bracket + 1)``.
    """

    validate_ticket_number(number)
    validate_bracket(bracket)
    return number % 10 ** (bracket + 1)


def bracket_keys(number: int) -> tuple[int, ...]:
    """Return the keys of ``number`` for every bracket, bracket 0 first."""

    return tuple(bridge(number, b) for b in range(BRACKET_COUNT))


def matches_at(ticket_number: int, final_number: int, bracket: int) -> bool:
    return bridge(ticket_number, bracket) == bridge(final_number, bracket)


def matching_brackets(ticket_number: int, final_number: int) -> list[int]:
    """Return every bracket at which ``ticket_number`` matches ``final_number``.

    Matching is suffix based, so the result is always a prefix of
    ``[0, 1, 2, 3]``.
    """

    return [
        b for b in range(BRACKET_COUNT) if matches_at(ticket_number, final_number, b)
    ]


def final_number_from_random(raw: int) -> int:
    """Map a raw oracle value onto the ticket number space."""

    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ValueError(f"random result must be a non-negative integer, got {raw!r}")
    return MIN_TICKET_NUMBER + raw % 10000


__all__ = [
    "BRACKET_COUNT",
    "MAX_TICKET_NUMBER",
    "MIN_TICKET_NUMBER",
    "bracket_keys",
    "bridge",
    "final_number_from_random",
    "matches_at",
    "matching_brackets",
    "validate_bracket",
    "validate_ticket_number",
]
