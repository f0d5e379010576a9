"""Enhanced maze generator with corridor bias and loop insertion.

Generation runs in phases:

1. carve a perfect maze whose depth-first walk prefers to keep going in
   the direction it just took, producing longer corridors;
2. open the entrance and exit, solve and score the maze, and snapshot it;
3. optionally knock out interior walls, dead ends first, to add loops
   without short-circuiting the original solution;
4. rescore and roll back to the snapshot if the loops made it easier.

The plain maze for the same seed acts as a final floor, so enhancement
never returns a maze that scores below plain generation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..base import AbstractMazeGenerator, MazeConfigurationError, MazeGenerationError
from .generator import build_plain_maze, evaluate_maze, place_openings
from .grid import DIRECTIONS, EAST, SOUTH, Cell, Grid, direction_between
from .model import Maze
from .pathfinding import find_solution_path
from .scorer import ScoringWeights, dead_end_cells
from .session import GenerationSession

Position = Tuple[int, int]


@dataclass(frozen=True)
class EnhancementParams:
    wall_removal_factor: float = 0.0
    dead_end_length_factor: float = 0.0
    directional_persistence: float = 0.0
    complexity_balance_preference: float = 0.5

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
                raise MazeConfigurationError(f"{item.name} must be a number, got {value!r}")
            object.__setattr__(self, item.name, float(min(1.0, max(0.0, value))))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "EnhancementParams":
        known = {item.name for item in fields(cls)}
        unknown = set(payload) - known
        if unknown:
            raise MazeConfigurationError(f"Unknown enhancement parameters: {sorted(unknown)}")
        return cls(**dict(payload))


@dataclass
class WallCandidate:
    cell: Cell
    neighbor: Cell
    direction: str
    score: float


def ensure_exterior_walls_intact(maze: Maze) -> int:
    """Re-close every exterior wall except the two openings; returns repairs."""

    openings = {
        (opening.row, opening.col, opening.side)
        for opening in (maze.entrance, maze.exit)
        if opening is not None
    }
    repaired = 0
    for cell in maze.grid.iter_cells():
        for direction in DIRECTIONS:
            if not maze.grid.is_exterior_wall(cell, direction):
                continue
            if (cell.row, cell.col, direction) in openings or cell.walls[direction]:
                continue
            cell.walls[direction] = True
            repaired += 1
    return repaired


class EnhancedMazeGenerator(AbstractMazeGenerator[Maze]):
    """Generate mazes tuned by :class:`EnhancementParams`."""

    def __init__(
        self,
        *,
        width: int = 10,
        height: int = 10,
        cell_size: int = 20,
        params: Optional[EnhancementParams] = None,
        weights: Optional[ScoringWeights] = None,
        plain_floor: bool = True,
        seed: Optional[int] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(width=width, height=height, cell_size=cell_size, seed=seed)
        if params is None:
            params = EnhancementParams()
        elif isinstance(params, Mapping):
            params = EnhancementParams.from_mapping(params)
        elif not isinstance(params, EnhancementParams):
            raise MazeConfigurationError(f"Unsupported enhancement parameters: {params!r}")
        self.params = params
        self.weights = weights
        self.plain_floor = plain_floor
        self.log = log

    def create_maze(self, seed: int) -> Maze:
        session = GenerationSession(seed, log=self.log)
        maze = Maze(width=self.width, height=self.height, cell_size=self.cell_size, seed=seed)
        maze.params = self.params
        stats: Dict[str, Any] = {
            "direction_streaks": [],
            "walls_removed": 0,
            "attempted_removals": 0,
            "exterior_repairs": 0,
        }
        session.debug("Generating enhanced maze seed=%s params=%s", seed, self.params)

        self._carve(maze.grid, session, stats)
        place_openings(maze, session)
        evaluate_maze(maze, self.weights)
        original_path = list(maze.solution_path)
        snapshot = maze.snapshot()
        stats["dead_ends"] = len(dead_end_cells(list(maze.grid.iter_cells())))
        stats["original_difficulty"] = maze.difficulty_score
        stats["original_path_length"] = len(original_path)
        configuration = "original"

        if self.params.wall_removal_factor > 0:
            configuration = self._add_loops(maze, session, original_path, snapshot, stats)

        if self.plain_floor:
            plain = build_plain_maze(
                self.width, self.height, self.cell_size, seed, weights=self.weights, log=self.log
            )
            if plain.difficulty_score > maze.difficulty_score:
                session.debug(
                    "Plain layout scores higher (%s > %s), adopting it",
                    plain.difficulty_score,
                    maze.difficulty_score,
                )
                maze.restore(plain.snapshot())
                maze.params = None
                self._discard_removals(maze, stats)
                configuration = "plain"

        if not maze.solution_path:
            raise MazeGenerationError(f"Enhanced maze for seed {seed} has no solution path")
        streaks = stats["direction_streaks"]
        stats["longest_streak"] = max(streaks, default=0)
        stats["average_streak"] = sum(streaks) / len(streaks) if streaks else 0.0
        stats["configuration"] = configuration
        maze.stats = stats
        session.debug(
            "Enhanced maze done: configuration=%s difficulty=%s path=%d removed=%d",
            configuration,
            maze.difficulty_score,
            maze.solution_length,
            stats["walls_removed"],
        )
        return maze

    # ------------------------------------------------------------------
    # Carving

    def _carve(self, grid: Grid, session: GenerationSession, stats: Dict[str, Any]) -> None:
        start = grid.cell(session.randint(0, grid.height - 1), session.randint(0, grid.width - 1))
        start.visited = True
        stack = [start]
        current_direction: Optional[str] = None
        streak = 0
        streaks: List[int] = stats["direction_streaks"]
        while stack:
            current = stack[-1]
            neighbors = grid.unvisited_neighbors(current)
            if not neighbors:
                stack.pop()
                if streak > 0:
                    streaks.append(streak)
                streak = 0
                current_direction = None
                continue
            neighbor, direction = self._choose_neighbor(neighbors, session, current_direction, streak)
            grid.remove_wall(current, neighbor, direction)
            if direction == current_direction:
                streak += 1
            else:
                if streak > 0:
                    streaks.append(streak)
                streak = 0
                current_direction = direction
            neighbor.visited = True
            stack.append(neighbor)

    def _choose_neighbor(
        self,
        neighbors: List[Tuple[Cell, str]],
        session: GenerationSession,
        current_direction: Optional[str],
        streak: int,
    ) -> Tuple[Cell, str]:
        persistence = self.params.directional_persistence
        if len(neighbors) == 1 or persistence == 0:
            return neighbors[session.randint(0, len(neighbors) - 1)]

        scored: List[Tuple[float, Cell, str]] = []
        for neighbor, direction in neighbors:
            score = 0.0
            if direction == current_direction:
                score += persistence + min(5, streak) * 0.1
            if streak > 1 and self.params.dead_end_length_factor > 0:
                score += self.params.dead_end_length_factor * 0.5
            # jitter
            score += session.random() * 0.2
            scored.append((score, neighbor, direction))
        scored.sort(key=lambda item: item[0], reverse=True)

        remaining = session.random() * sum(item[0] for item in scored)
        for score, neighbor, direction in scored:
            remaining -= score
            if remaining <= 0:
                return neighbor, direction
        return scored[0][1], scored[0][2]

    # ------------------------------------------------------------------
    # Loop insertion

    def _add_loops(
        self,
        maze: Maze,
        session: GenerationSession,
        original_path: List[Cell],
        snapshot,
        stats: Dict[str, Any],
    ) -> str:
        original_score = snapshot.difficulty_score
        try:
            self._remove_walls(maze, session, original_path, stats)
            maze.solution_path = find_solution_path(maze)
            stats["exterior_repairs"] = ensure_exterior_walls_intact(maze)
            evaluate_maze(maze, self.weights)
        except Exception:
            session.log.warning(
                "Wall removal failed for seed %s, keeping the original layout",
                maze.seed,
                exc_info=True,
            )
            maze.restore(snapshot)
            self._discard_removals(maze, stats)
            return "original"

        stats["modified_difficulty"] = maze.difficulty_score
        if not maze.solution_path or maze.difficulty_score < original_score:
            session.debug(
                "Modified maze is easier (%s < %s), reverting",
                maze.difficulty_score,
                original_score,
            )
            maze.restore(snapshot)
            self._discard_removals(maze, stats)
            return "reverted"
        session.debug(
            "Keeping modifications: difficulty %s -> %s",
            original_score,
            maze.difficulty_score,
        )
        return "modified"

    @staticmethod
    def _discard_removals(maze: Maze, stats: Dict[str, Any]) -> None:
        """Reset removal counters once the current layout carries no loops."""

        stats["walls_removed"] = 0
        stats["dead_ends_after"] = len(dead_end_cells(list(maze.grid.iter_cells())))

    def _remove_walls(
        self,
        maze: Maze,
        session: GenerationSession,
        original_path: List[Cell],
        stats: Dict[str, Any],
    ) -> int:
        grid = maze.grid
        budget = int(math.floor(math.sqrt(grid.area) * self.params.wall_removal_factor))
        if budget <= 0:
            return 0
        path_index = {cell.position: index for index, cell in enumerate(original_path)}
        candidates = self._wall_candidates(grid, session, path_index, budget)
        candidates.sort(key=lambda candidate: candidate.score, reverse=True)

        selected = candidates[:budget]
        removed = 0
        for candidate in selected:
            if not candidate.cell.walls[candidate.direction]:
                continue
            if self.is_valid_wall_removal(maze, candidate.cell, candidate.neighbor, path_index):
                grid.remove_wall(candidate.cell, candidate.neighbor, candidate.direction)
                removed += 1
        stats["attempted_removals"] = len(selected)
        stats["walls_removed"] = removed
        stats["dead_ends_after"] = len(dead_end_cells(list(grid.iter_cells())))
        session.debug(
            "Removed %d of %d planned walls (%d candidates)", removed, budget, len(candidates)
        )
        return removed

    def _wall_candidates(
        self,
        grid: Grid,
        session: GenerationSession,
        path_index: Dict[Position, int],
        budget: int,
    ) -> List[WallCandidate]:
        balance = self.params.complexity_balance_preference
        dead_end_bonus = 2.0 * (1.5 - balance)
        region_bonus = 0.5 + balance
        dead_ends = dead_end_cells(list(grid.iter_cells()))
        dead_end_positions = {cell.position for cell in dead_ends}
        candidates: List[WallCandidate] = []

        for cell in dead_ends:
            for direction in DIRECTIONS:
                neighbor = self._interior_neighbor(grid, cell, direction)
                if neighbor is None or self._both_on_path(path_index, cell, neighbor):
                    continue
                score = 1.0 + dead_end_bonus
                if not self._consecutive_on_path(path_index, cell, neighbor):
                    score += region_bonus
                score += session.random() * 0.5
                candidates.append(WallCandidate(cell, neighbor, direction, score))

        if len(candidates) < budget * 2:
            for cell in grid.iter_cells():
                for direction in (EAST, SOUTH):
                    neighbor = self._interior_neighbor(grid, cell, direction)
                    if neighbor is None or self._both_on_path(path_index, cell, neighbor):
                        continue
                    score = 0.5
                    if (
                        cell.position not in dead_end_positions
                        and neighbor.position not in dead_end_positions
                    ):
                        score += 0.5
                    score += session.random() * 0.2
                    candidates.append(WallCandidate(cell, neighbor, direction, score))
        return candidates

    @staticmethod
    def _interior_neighbor(grid: Grid, cell: Cell, direction: str) -> Optional[Cell]:
        """Neighbour behind a standing interior wall, if any."""

        if not cell.walls[direction] or grid.is_exterior_wall(cell, direction):
            return None
        return grid.neighbor_in_direction(cell, direction)

    @staticmethod
    def _both_on_path(path_index: Dict[Position, int], cell_a: Cell, cell_b: Cell) -> bool:
        return cell_a.position in path_index and cell_b.position in path_index

    @staticmethod
    def _consecutive_on_path(path_index: Dict[Position, int], cell_a: Cell, cell_b: Cell) -> bool:
        index_a = path_index.get(cell_a.position)
        index_b = path_index.get(cell_b.position)
        if index_a is None or index_b is None:
            return False
        return abs(index_a - index_b) == 1

    @classmethod
    def is_valid_wall_removal(
        cls,
        maze: Maze,
        cell_a: Cell,
        cell_b: Cell,
        path_index: Dict[Position, int],
    ) -> bool:
        """Whether opening the wall between two cells keeps the maze honest."""

        for opening in (maze.entrance, maze.exit):
            if opening is not None and opening.position in (cell_a.position, cell_b.position):
                return False
        direction = direction_between(cell_a, cell_b)
        if direction is None or maze.grid.is_exterior_wall(cell_a, direction):
            return False
        if cell_a.position in path_index and cell_b.position in path_index:
            return not cls._consecutive_on_path(path_index, cell_a, cell_b)
        return True


__all__ = [
    "EnhancedMazeGenerator",
    "EnhancementParams",
    "WallCandidate",
    "ensure_exterior_walls_intact",
]
