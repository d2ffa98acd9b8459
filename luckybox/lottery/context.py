from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

Clock = Callable[[], int]


@dataclass(frozen=True)
class OperatorContext:
    """Capability passed to privileged operations.

    Holding a context is not enough on its own: its ``address`` must equal the
    operator address stored in the lottery state.
    """

    address: str


def system_clock() -> int:
    """Return the current unix time in whole seconds."""
    return int(time.time())


__all__ = ["Clock", "OperatorContext", "system_clock"]
