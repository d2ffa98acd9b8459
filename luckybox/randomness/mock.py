"""Deterministic randomness adapter for tests and local development."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .adapter import RequestId
from ..errors import RandomnessNotReady

logger = logging.getLogger(__name__)


class DeterministicRandomness:
    """Randomness adapter with a predictable output sequence.

    Each request increments a seed. The result of the n-th request is the
    n-th scripted value when ``values`` was supplied and
    ``12345 * n % 10000 + 10000`` otherwise, so the first two draws are
    ``12345`` and ``14690``.

    With ``auto_fulfill=False`` requests stay pending until :meth:`fulfill`
    is called, which mimics an oracle answering in a later block.
    """

    name = "deterministic"

    def __init__(
        self,
        values: Optional[Iterable[int]] = None,
        *,
        auto_fulfill: bool = True,
    ) -> None:
        self._scripted = list(values) if values is not None else None
        self.auto_fulfill = auto_fulfill
        self.seed = 0
        self._requests: dict[RequestId, Optional[int]] = {}
        self._seeds: dict[RequestId, int] = {}

    def _value_for(self, seed: int) -> int:
        if self._scripted is not None:
            if seed > len(self._scripted):
                raise RuntimeError("Scripted randomness values are exhausted")
            return self._scripted[seed - 1]
        return 12345 * seed % 10000 + 10000

    def request(self) -> RequestId:
        self.seed += 1
        request_id = f"mock-{self.seed}"
        self._seeds[request_id] = self.seed
        self._requests[request_id] = (
            self._value_for(self.seed) if self.auto_fulfill else None
        )
        logger.debug(f"Issued randomness request {request_id}")
        return request_id

    def fulfill(self, request_id: RequestId, value: Optional[int] = None) -> None:
        """Answer a pending request with ``value`` or its sequence value."""

        if request_id not in self._requests:
            raise KeyError(f"Unknown randomness request '{request_id}'")
        self._requests[request_id] = (
            value if value is not None else self._value_for(self._seeds[request_id])
        )

    def is_fulfilled(self, request_id: RequestId) -> bool:
        return self._requests.get(request_id) is not None

    def result(self, request_id: RequestId) -> int:
        value = self._requests.get(request_id)
        if value is None:
            raise RandomnessNotReady()
        return value


__all__ = ["DeterministicRandomness"]
