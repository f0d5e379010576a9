"""Perfect maze generator: randomized depth-first carve with two openings."""

from __future__ import annotations

import argparse
import json
import logging
import random
from typing import List, Optional

from ..base import (
    MAX_RANDOM_SEED,
    AbstractMazeGenerator,
    MazeConfigurationError,
    MazeGenerationError,
    validate_dimensions,
)
from .grid import DIRECTIONS, EAST, NORTH, OPPOSITE, SOUTH, WEST, Grid
from .model import Maze, Opening
from .pathfinding import find_solution_path
from .scorer import DifficultyBreakdown, ScoringWeights, score_difficulty
from .session import GenerationSession

logger = logging.getLogger(__name__)


def carve_perfect_maze(grid: Grid, session: GenerationSession) -> None:
    """Growing-tree carve that always extends the newest cell.

    Every cell ends up visited and the passages form a spanning tree.
    """

    start = grid.cell(session.randint(0, grid.height - 1), session.randint(0, grid.width - 1))
    start.visited = True
    stack = [start]
    while stack:
        current = stack[-1]
        neighbors = grid.unvisited_neighbors(current)
        if not neighbors:
            stack.pop()
            continue
        neighbor, direction = neighbors[session.randint(0, len(neighbors) - 1)]
        grid.remove_wall(current, neighbor, direction)
        neighbor.visited = True
        stack.append(neighbor)


def create_opening(grid: Grid, side: str, session: GenerationSession) -> Opening:
    """Open a non-corner exterior wall on ``side``."""

    along = grid.width if side in (NORTH, SOUTH) else grid.height
    if along < 3:
        raise MazeConfigurationError(
            f"Cannot place an opening on the {side} side of a {grid.width}x{grid.height} grid"
        )
    if side == NORTH:
        row, col = 0, session.randint(1, grid.width - 2)
    elif side == EAST:
        row, col = session.randint(1, grid.height - 2), grid.width - 1
    elif side == SOUTH:
        row, col = grid.height - 1, session.randint(1, grid.width - 2)
    elif side == WEST:
        row, col = session.randint(1, grid.height - 2), 0
    else:
        raise ValueError(f"Unknown side: {side!r}")
    grid.cell(row, col).walls[side] = False
    return Opening(row, col, side)


def place_openings(maze: Maze, session: GenerationSession) -> None:
    entrance_side = DIRECTIONS[session.randint(0, 3)]
    maze.entrance = create_opening(maze.grid, entrance_side, session)
    maze.exit = create_opening(maze.grid, OPPOSITE[entrance_side], session)


def evaluate_maze(maze: Maze, weights: Optional[ScoringWeights] = None) -> DifficultyBreakdown:
    """Refresh the solution path and difficulty fields stored on ``maze``."""

    maze.solution_path = find_solution_path(maze)
    breakdown = score_difficulty(maze, weights)
    maze.difficulty_breakdown = breakdown
    maze.difficulty_score = breakdown.overall
    return breakdown


def build_plain_maze(
    width: int,
    height: int,
    cell_size: int,
    seed: int,
    *,
    weights: Optional[ScoringWeights] = None,
    log: Optional[logging.Logger] = None,
) -> Maze:
    validate_dimensions(width, height)
    session = GenerationSession(seed, log=log)
    maze = Maze(width=width, height=height, cell_size=cell_size, seed=seed)
    carve_perfect_maze(maze.grid, session)
    place_openings(maze, session)
    evaluate_maze(maze, weights)
    if not maze.solution_path:
        raise MazeGenerationError(f"Generated maze for seed {seed} has no solution path")
    maze.stats = {"configuration": "plain"}
    session.debug(
        "Plain maze %dx%d seed=%s difficulty=%s path=%d",
        width,
        height,
        seed,
        maze.difficulty_score,
        maze.solution_length,
    )
    return maze


def generate(
    width: int,
    height: int,
    cell_size: int,
    seed: int,
    params=None,
    *,
    weights: Optional[ScoringWeights] = None,
) -> Maze:
    """Generate a plain maze, or an enhanced one when ``params`` is given."""

    if params is None:
        return build_plain_maze(width, height, cell_size, seed, weights=weights)
    from .enhanced import EnhancedMazeGenerator

    generator = EnhancedMazeGenerator(
        width=width, height=height, cell_size=cell_size, params=params, weights=weights
    )
    return generator.create_maze(seed)


class MazeGenerator(AbstractMazeGenerator[Maze]):
    """Generate plain perfect mazes."""

    def __init__(
        self,
        *,
        width: int = 10,
        height: int = 10,
        cell_size: int = 20,
        weights: Optional[ScoringWeights] = None,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(width=width, height=height, cell_size=cell_size, seed=seed)
        self.weights = weights

    def create_maze(self, seed: int) -> Maze:
        return build_plain_maze(self.width, self.height, self.cell_size, seed, weights=self.weights)


__all__ = [
    "MazeGenerator",
    "build_plain_maze",
    "carve_perfect_maze",
    "create_opening",
    "evaluate_maze",
    "generate",
    "place_openings",
]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a maze and print it as JSON")
    parser.add_argument("--width", type=int, default=10)
    parser.add_argument("--height", type=int, default=10)
    parser.add_argument("--cell-size", type=int, default=20)
    parser.add_argument("--seed", type=int, default=None, help="Maze seed (default: random)")
    parser.add_argument("--wall-removal", type=float, default=None, help="Enable enhancement with this loop factor")
    parser.add_argument("--dead-end-length", type=float, default=0.0)
    parser.add_argument("--persistence", type=float, default=0.0, help="Directional persistence bias")
    parser.add_argument("--balance", type=float, default=0.5, help="Complexity balance preference")
    parser.add_argument("--verbose", action="store_true", help="Log generation details to stderr")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    seed = args.seed if args.seed is not None else random.randint(1, MAX_RANDOM_SEED - 1)
    params = None
    if args.wall_removal is not None or args.persistence > 0:
        from .enhanced import EnhancementParams

        params = EnhancementParams(
            wall_removal_factor=args.wall_removal or 0.0,
            dead_end_length_factor=args.dead_end_length,
            directional_persistence=args.persistence,
            complexity_balance_preference=args.balance,
        )
    maze = generate(args.width, args.height, args.cell_size, seed, params)
    print(json.dumps(maze.to_dict(), indent=2))


if __name__ == "__main__":
    main()
