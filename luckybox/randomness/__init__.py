"""Randomness sources for drawing final numbers."""

from .adapter import RandomnessAdapter, RequestId, adapter_name
from .mock import DeterministicRandomness

__all__ = [
    "DeterministicRandomness",
    "RandomnessAdapter",
    "RequestId",
    "adapter_name",
]
