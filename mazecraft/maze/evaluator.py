"""Maze path evaluator for drawn solution paths."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from ..base import AbstractMazeEvaluator, PathLike
from .model import Maze

Position = Tuple[int, int]


@dataclass
class PathEvaluationResult:
    starts_at_entrance: bool
    connected: bool
    touches_exit: bool
    crosses_walls: bool
    invalid_moves: List[Tuple[Position, Position]]
    path_length: int
    message: str

    @property
    def solved(self) -> bool:
        return self.starts_at_entrance and self.connected and self.touches_exit

    def to_dict(self) -> dict:
        return {
            "starts_at_entrance": self.starts_at_entrance,
            "connected": self.connected,
            "touches_exit": self.touches_exit,
            "crosses_walls": self.crosses_walls,
            "invalid_moves": [[list(a), list(b)] for a, b in self.invalid_moves],
            "path_length": self.path_length,
            "solved": self.solved,
            "message": self.message,
        }


class MazePathEvaluator(AbstractMazeEvaluator):
    """Check a cell sequence against the walls of a maze."""

    def evaluate(self, maze: Maze, path: Iterable[Sequence[int]]) -> PathEvaluationResult:
        cells = [(int(row), int(col)) for row, col in path]
        if maze.entrance is None or maze.exit is None:
            raise ValueError("Maze has no entrance or exit")

        invalid: List[Tuple[Position, Position]] = []
        crosses_walls = False
        for source, target in zip(cells, cells[1:]):
            if maze.can_move(source, target):
                continue
            invalid.append((source, target))
            if self._adjacent(maze, source, target):
                crosses_walls = True

        starts = bool(cells) and cells[0] == maze.entrance.position
        touches_exit = bool(cells) and cells[-1] == maze.exit.position
        connected = bool(cells) and not invalid

        if not cells:
            message = "No path provided."
        elif not starts:
            message = "Path does not start at the entrance."
        elif crosses_walls:
            message = "Path passes through a wall."
        elif not connected:
            message = "Path is not continuous."
        elif not touches_exit:
            message = "Path does not reach the exit."
        else:
            message = "Path successfully connects entrance to exit."

        return PathEvaluationResult(
            starts_at_entrance=starts,
            connected=connected,
            touches_exit=touches_exit,
            crosses_walls=crosses_walls,
            invalid_moves=invalid,
            path_length=len(cells),
            message=message,
        )

    def evaluate_file(self, maze_path: PathLike, path_file: PathLike) -> PathEvaluationResult:
        maze = Maze.from_dict(self.load_record(maze_path))
        candidate_path = Path(path_file)
        if not candidate_path.exists():
            raise FileNotFoundError(f"Candidate path not found: {candidate_path}")
        raw = json.loads(candidate_path.read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("path", [])
        return self.evaluate(maze, raw)

    @staticmethod
    def _adjacent(maze: Maze, a: Position, b: Position) -> bool:
        return (
            maze.grid.in_bounds(*a)
            and maze.grid.in_bounds(*b)
            and abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1
        )


__all__ = ["MazePathEvaluator", "PathEvaluationResult"]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate a drawn maze path")
    parser.add_argument("maze", type=Path, help="Maze JSON produced by the generator CLI")
    parser.add_argument("path", type=Path, help="JSON list of [row, col] cells, or {'path': [...]}")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    result = MazePathEvaluator().evaluate_file(args.maze, args.path)
    print(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    main()
