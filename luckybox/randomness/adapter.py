"""Interface of the randomness oracle consumed by the lottery engine."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

RequestId = str


@runtime_checkable
class RandomnessAdapter(Protocol):
    """Two-phase randomness source.

    ``request`` is issued when a round closes; the engine later checks
    ``is_fulfilled`` and reads ``result`` exactly once, when it draws the
    round. ``is_fulfilled`` must be side-effect free.
    """

    name: str

    def request(self) -> RequestId:
        ...

    def is_fulfilled(self, request_id: RequestId) -> bool:
        ...

    def result(self, request_id: RequestId) -> int:
        ...


def adapter_name(adapter: RandomnessAdapter) -> str:
    return getattr(adapter, "name", None) or type(adapter).__name__


__all__ = ["RandomnessAdapter", "RequestId", "adapter_name"]
