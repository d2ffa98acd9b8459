"""Column types shared by the lottery models.

Token amounts use 18 decimals, so a handful of tokens already overflows a
signed 64-bit integer. Amounts are therefore persisted as base-10 strings and
converted back to Python ``int`` on load.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.types import TypeDecorator

# SQLite only autoincrements INTEGER primary keys.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


def _coerce_amount(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"token amounts must be integers, got {value!r}")
    if value < 0:
        raise ValueError(f"token amounts must be non-negative, got {value}")
    return value


class TokenAmount(TypeDecorator):
    """Non-negative arbitrary precision integer stored as a decimal string."""

    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value: Optional[int], dialect) -> Optional[str]:
        if value is None:
            return None
        return str(_coerce_amount(value))

    def process_result_value(self, value: Optional[str], dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)


class TokenAmountList(TypeDecorator):
    """Fixed-length list of token amounts, one entry per bracket."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[list[int]], dialect) -> Optional[str]:
        if value is None:
            return None
        return json.dumps([str(_coerce_amount(v)) for v in value])

    def process_result_value(self, value: Optional[str], dialect) -> Optional[list[int]]:
        if value is None:
            return None
        return [int(v) for v in json.loads(value)]


__all__ = ["ID_TYPE", "TokenAmount", "TokenAmountList"]
