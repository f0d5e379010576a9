"""Maze record: grid, openings, solution path and difficulty data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .grid import DIRECTIONS, OFFSETS, Cell, Grid

Position = Tuple[int, int]
CellLike = Union[Cell, Position, Sequence[int]]


@dataclass(frozen=True)
class Opening:
    row: int
    col: int
    side: str

    @property
    def position(self) -> Position:
        return self.row, self.col

    def to_dict(self) -> dict:
        return {"row": self.row, "col": self.col, "side": self.side}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Opening":
        side = str(payload["side"])
        if side not in DIRECTIONS:
            raise ValueError(f"Unknown opening side: {side!r}")
        return cls(int(payload["row"]), int(payload["col"]), side)


@dataclass(frozen=True)
class MazeSnapshot:
    """Value copy of the mutable parts of a maze."""

    grid: Grid
    entrance: Optional[Opening]
    exit: Optional[Opening]
    solution_path: Tuple[Position, ...]
    difficulty_score: Optional[int]
    difficulty_breakdown: Any


def _position(cell: CellLike) -> Position:
    if isinstance(cell, Cell):
        return cell.position
    row, col = cell
    return int(row), int(col)


def difficulty_label(score: Optional[float]) -> str:
    if not score:
        return "Unknown"
    if score > 90:
        return "Hard"
    if score > 70:
        return "Medium"
    return "Easy"


@dataclass
class Maze:
    width: int
    height: int
    cell_size: int
    seed: int
    grid: Grid = field(init=False)
    entrance: Optional[Opening] = None
    exit: Optional[Opening] = None
    solution_path: List[Cell] = field(default_factory=list)
    difficulty_score: Optional[int] = None
    difficulty_breakdown: Any = None
    params: Any = None
    stats: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.grid = Grid(self.width, self.height)

    def cell(self, row: int, col: int) -> Cell:
        return self.grid.cell(row, col)

    @property
    def solution_length(self) -> int:
        return len(self.solution_path)

    def difficulty_label(self) -> str:
        return difficulty_label(self.difficulty_score)

    # ------------------------------------------------------------------
    # Move legality used by path-drawing collaborators

    def _opening_allows(self, opening: Optional[Opening], source: Position, target: Position) -> bool:
        if opening is None or opening.position != source:
            return False
        dr, dc = OFFSETS[opening.side]
        return (target[0] - source[0], target[1] - source[1]) == (dr, dc)

    def has_wall_between(self, cell_a: CellLike, cell_b: CellLike) -> bool:
        """True when a wall blocks the step from ``cell_a`` to ``cell_b``.

        Stepping out of the entrance or exit cell through its opening side
        is open. Non-adjacent pairs are always blocked.
        """

        source = _position(cell_a)
        target = _position(cell_b)
        if source == target:
            return False
        if self._opening_allows(self.entrance, source, target):
            return False
        if self._opening_allows(self.exit, source, target):
            return False
        if not self.grid.in_bounds(*source) or not self.grid.in_bounds(*target):
            return True
        delta = (target[0] - source[0], target[1] - source[1])
        for direction, offset in OFFSETS.items():
            if offset == delta:
                return self.grid.cell(*source).walls[direction]
        return True

    def can_move(self, cell_a: CellLike, cell_b: CellLike) -> bool:
        """Adjacent in-grid cells with no wall between them."""

        source = _position(cell_a)
        target = _position(cell_b)
        if not self.grid.in_bounds(*source) or not self.grid.in_bounds(*target):
            return False
        if abs(source[0] - target[0]) + abs(source[1] - target[1]) != 1:
            return False
        return not self.has_wall_between(source, target)

    # ------------------------------------------------------------------
    # Snapshot / restore

    def snapshot(self) -> MazeSnapshot:
        return MazeSnapshot(
            grid=self.grid.copy(),
            entrance=self.entrance,
            exit=self.exit,
            solution_path=tuple(cell.position for cell in self.solution_path),
            difficulty_score=self.difficulty_score,
            difficulty_breakdown=self.difficulty_breakdown,
        )

    def restore(self, snapshot: MazeSnapshot) -> None:
        if (snapshot.grid.width, snapshot.grid.height) != (self.width, self.height):
            raise ValueError("Snapshot dimensions do not match this maze")
        self.grid = snapshot.grid.copy()
        self.entrance = snapshot.entrance
        self.exit = snapshot.exit
        self.solution_path = [self.grid.cell(row, col) for row, col in snapshot.solution_path]
        self.difficulty_score = snapshot.difficulty_score
        self.difficulty_breakdown = snapshot.difficulty_breakdown

    # ------------------------------------------------------------------
    # Serialization

    def wall_bitmap(self) -> np.ndarray:
        return self.grid.wall_bitmap()

    def to_dict(self) -> dict:
        breakdown = self.difficulty_breakdown
        return {
            "width": self.width,
            "height": self.height,
            "cell_size": self.cell_size,
            "seed": self.seed,
            "entrance": self.entrance.to_dict() if self.entrance else None,
            "exit": self.exit.to_dict() if self.exit else None,
            "walls": self.wall_bitmap().astype(int).tolist(),
            "solution_path": [list(cell.position) for cell in self.solution_path],
            "difficulty_score": self.difficulty_score,
            "difficulty_label": self.difficulty_label(),
            "difficulty_breakdown": breakdown.to_dict() if breakdown is not None else None,
            "params": self.params.to_dict() if self.params is not None else None,
            "stats": dict(self.stats),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Maze":
        """Rebuild grid, openings and solution path from ``to_dict`` output."""

        bitmap = np.asarray(payload["walls"], dtype=np.uint8)
        maze = cls(
            width=int(payload["width"]),
            height=int(payload["height"]),
            cell_size=int(payload.get("cell_size", 20)),
            seed=int(payload["seed"]),
        )
        if bitmap.shape != (maze.height, maze.width):
            raise ValueError(
                f"Wall bitmap shape {bitmap.shape} does not match {maze.height}x{maze.width}"
            )
        maze.grid = Grid.from_bitmap(bitmap)
        if payload.get("entrance"):
            maze.entrance = Opening.from_dict(payload["entrance"])
        if payload.get("exit"):
            maze.exit = Opening.from_dict(payload["exit"])
        maze.solution_path = [
            maze.grid.cell(int(row), int(col)) for row, col in payload.get("solution_path", [])
        ]
        score = payload.get("difficulty_score")
        maze.difficulty_score = int(score) if score is not None else None
        return maze


__all__ = ["Maze", "MazeSnapshot", "Opening", "Position", "difficulty_label"]
