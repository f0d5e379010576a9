"""Per-maze generation state: the seeded PRNG and an injected logger."""

from __future__ import annotations

import logging
from typing import Optional

from .rng import ParkMillerRandom

logger = logging.getLogger(__name__)


class GenerationSession:
    """Owns the random stream shared by every stage building one maze."""

    def __init__(self, seed: int, *, log: Optional[logging.Logger] = None) -> None:
        self.rng = ParkMillerRandom(seed)
        self.seed = self.rng.seed
        self.log = log or logger

    def random(self) -> float:
        return self.rng.random()

    def randint(self, low: int, high: int) -> int:
        return self.rng.randint(low, high)

    def debug(self, message: str, *args) -> None:
        self.log.debug(message, *args)


__all__ = ["GenerationSession"]
