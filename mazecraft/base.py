"""Abstract interfaces for maze generation and evaluation."""

from __future__ import annotations

import json
import random
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

PathLike = Union[str, Path]
RecordT = TypeVar("RecordT")

MIN_DIMENSION = 5
MAX_DIMENSION = 100
MAX_RANDOM_SEED = 1_000_000


class MazeConfigurationError(ValueError):
    """Raised for invalid dimensions, seeds or generation parameters."""


class MazeGenerationError(RuntimeError):
    """Raised when a generated maze breaks its connectivity invariant."""


def validate_dimensions(width: int, height: int) -> None:
    """Reject grid sizes outside the supported range."""

    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise MazeConfigurationError(f"{name} must be an integer, got {value!r}")
        if not MIN_DIMENSION <= value <= MAX_DIMENSION:
            raise MazeConfigurationError(
                f"{name} must be between {MIN_DIMENSION} and {MAX_DIMENSION}, got {value}"
            )


class AbstractMazeGenerator(ABC, Generic[RecordT]):
    """Base class for generators that emit maze records."""

    def __init__(
        self,
        *,
        width: int,
        height: int,
        cell_size: int = 20,
        seed: Optional[int] = None,
    ) -> None:
        validate_dimensions(width, height)
        self.width = width
        self.height = height
        self.cell_size = cell_size
        # Only used to draw seeds for create_random_maze().
        self._rng = random.Random(seed)

    @abstractmethod
    def create_maze(self, seed: int) -> RecordT:
        """Create a maze for the given seed."""

    def create_random_maze(self) -> RecordT:
        """Create a single maze with a freshly drawn seed."""

        return self.create_maze(self._rng.randint(1, MAX_RANDOM_SEED - 1))

    def generate_dataset(self, count: int) -> List[RecordT]:
        """Generate a batch of mazes with random seeds."""

        return [self.create_random_maze() for _ in range(count)]

    def record_to_dict(self, record: RecordT) -> Dict[str, Any]:
        """Dictionary serialization hook for maze records."""

        if hasattr(record, "to_dict"):
            return getattr(record, "to_dict")()
        raise TypeError(
            "Maze record must implement to_dict() or override record_to_dict() in the generator."
        )


class AbstractMazeEvaluator(ABC):
    """Base class scaffolding for maze solution evaluators."""

    @staticmethod
    def load_record(path: PathLike) -> Dict[str, Any]:
        record_path = Path(path)
        if not record_path.exists():
            raise FileNotFoundError(f"Maze record not found: {record_path}")
        raw = json.loads(record_path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("Maze record must be a JSON object")
        return raw

    @abstractmethod
    def evaluate(self, maze, *args, **kwargs):
        """Evaluate a candidate solution for the given maze."""


__all__ = [
    "AbstractMazeGenerator",
    "AbstractMazeEvaluator",
    "MazeConfigurationError",
    "MazeGenerationError",
    "MIN_DIMENSION",
    "MAX_DIMENSION",
    "MAX_RANDOM_SEED",
    "PathLike",
    "validate_dimensions",
]
