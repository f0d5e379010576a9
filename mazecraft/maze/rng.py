"""Seeded Park-Miller pseudo-random number generator."""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

from ..base import MazeConfigurationError

MODULUS = 2147483647  # 2^31 - 1
MULTIPLIER = 16807  # 7^5

T = TypeVar("T")


def normalize_seed(seed: object) -> int:
    """Map an integer seed onto a valid non-zero generator state.

    Negative seeds use their absolute value and zero maps to 1, so every
    integer yields a reproducible stream.
    """

    if isinstance(seed, bool):
        raise MazeConfigurationError(f"Seed must be an integer, got {seed!r}")
    if isinstance(seed, float):
        if not seed.is_integer():
            raise MazeConfigurationError(f"Seed must be an integer, got {seed!r}")
        seed = int(seed)
    if not isinstance(seed, int):
        raise MazeConfigurationError(f"Seed must be an integer, got {seed!r}")
    value = abs(seed) % MODULUS
    return value or 1


class ParkMillerRandom:
    """Multiplicative LCG producing floats in [0, 1)."""

    def __init__(self, seed: int) -> None:
        self.seed = normalize_seed(seed)
        self._state = self.seed

    @property
    def state(self) -> int:
        return self._state

    def random(self) -> float:
        self._state = (self._state * MULTIPLIER) % MODULUS
        return (self._state - 1) / (MODULUS - 1)

    def randint(self, low: int, high: int) -> int:
        """Random integer in ``[low, high]``, inclusive on both ends."""

        if high < low:
            raise ValueError(f"Empty range [{low}, {high}]")
        return int(math.floor(self.random() * (high - low + 1))) + low

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def uniform(self, low: float, high: float) -> float:
        return low + self.random() * (high - low)


__all__ = ["ParkMillerRandom", "normalize_seed", "MODULUS", "MULTIPLIER"]
