"""Maze difficulty scoring on a 1-100 scale.

The score blends two primary components, the complexity of the false
branches hanging off the solution and the density of decision points a
solver meets, and scales the blend by adjustments for maze size, solution
length relative to the shortest conceivable route, absolute solution
length, and false-path density. Every constant lives on
:class:`ScoringWeights` so callers can retune the heuristic.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from .grid import Cell
from .model import Maze
from .pathfinding import find_solution_path, minimum_path_length

Position = Tuple[int, int]


@dataclass(frozen=True)
class ScoringWeights:
    branch_complexity: float = 0.55
    decision_points: float = 0.45
    decision_density_scale: float = 45.0
    decision_distribution_scale: float = 30.0
    maze_junction_density: float = 5.0
    branch_path_saturation: float = 30.0
    decision_path_saturation: float = 25.0
    solution_length_cap: float = 1.05
    compression_start: float = 70.0
    missing_path_factor: float = 0.5

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BranchPoint:
    position: int
    row: int
    col: int
    branches: Tuple[Position, ...]


@dataclass(frozen=True)
class AlternatePath:
    start_position: int
    start_row: int
    start_col: int
    length: int
    dead_end: bool
    sub_branches: int
    max_depth: int
    distance_from_exit: int

    def to_dict(self) -> dict:
        return {
            "start_position": self.start_position,
            "start_location": {"row": self.start_row, "col": self.start_col},
            "length": self.length,
            "is_dead_end": self.dead_end,
            "sub_branches": self.sub_branches,
            "max_depth": self.max_depth,
            "distance_from_exit": self.distance_from_exit,
        }


@dataclass(frozen=True)
class DifficultyBreakdown:
    branch_complexity: float
    decision_points: float
    size_adjustment: float
    solution_length_factor: float
    absolute_path_adjustment: float
    false_path_density: float
    solution_path_length: int
    minimum_path_length: int
    path_junctions: int
    maze_junctions: int
    overall: int

    def to_dict(self) -> dict:
        return asdict(self)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class DifficultyScorer:
    """Analyse a finished maze without modifying it."""

    def __init__(self, maze: Maze, weights: Optional[ScoringWeights] = None) -> None:
        self.maze = maze
        self.weights = weights or ScoringWeights()
        self.solution_path: List[Cell] = []
        self.solution_cells: Set[Position] = set()
        self.branching_points: List[BranchPoint] = []
        self.alternate_paths: List[AlternatePath] = []
        self.maze_junctions = 0

    @property
    def area(self) -> int:
        return self.maze.width * self.maze.height

    # ------------------------------------------------------------------
    # Analysis

    def analyze(self) -> None:
        self.solution_path = find_solution_path(self.maze)
        self.solution_cells = {cell.position for cell in self.solution_path}
        self._identify_branch_points()
        self._analyze_alternate_paths()
        counts = self.maze.grid.traversable_counts()
        self.maze_junctions = int(np.count_nonzero(counts > 2))

    def _neighbors(self, position: Position) -> List[Position]:
        grid = self.maze.grid
        return [cell.position for cell in grid.accessible_neighbors(grid.cell(*position))]

    def _identify_branch_points(self) -> None:
        self.branching_points = []
        # Entrance and exit cells are never counted as decisions.
        for index in range(1, len(self.solution_path) - 1):
            cell = self.solution_path[index]
            branches = tuple(
                neighbor
                for neighbor in self._neighbors(cell.position)
                if neighbor not in self.solution_cells
            )
            if branches:
                self.branching_points.append(BranchPoint(index, cell.row, cell.col, branches))

    def _analyze_alternate_paths(self) -> None:
        self.alternate_paths = []
        exit_position = self.maze.exit.position if self.maze.exit else (0, 0)
        for point in self.branching_points:
            for branch in point.branches:
                length, dead_end, sub_branches, max_depth = self._explore_branch(
                    branch, (point.row, point.col)
                )
                self.alternate_paths.append(
                    AlternatePath(
                        start_position=point.position,
                        start_row=point.row,
                        start_col=point.col,
                        length=length,
                        dead_end=dead_end,
                        sub_branches=sub_branches,
                        max_depth=max_depth,
                        distance_from_exit=_manhattan((point.row, point.col), exit_position),
                    )
                )

    def _explore_branch(self, start: Position, origin: Position) -> Tuple[int, bool, int, int]:
        """Breadth-first sweep of a false branch away from the solution.

        Returns (cells explored, dead end, internal forks, max depth). A
        branch that touches the solution anywhere other than its origin is
        a loop, not a dead end.
        """

        visited = {start}
        queue: deque[Tuple[Position, int, Position]] = deque([(start, 1, origin)])
        max_depth = 0
        sub_branches = 0
        dead_end = True
        while queue:
            position, depth, parent = queue.popleft()
            max_depth = max(max_depth, depth)
            onward = 0
            for neighbor in self._neighbors(position):
                if neighbor == parent:
                    continue
                if neighbor in self.solution_cells:
                    dead_end = False
                    continue
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                queue.append((neighbor, depth + 1, position))
                onward += 1
            if onward > 1:
                sub_branches += 1
        return len(visited), dead_end, sub_branches, max_depth

    # ------------------------------------------------------------------
    # Components

    def size_adjustment(self) -> float:
        area = self.area
        if area < 100:
            return 0.2 + (area / 100) * 0.4
        if area < 400:
            return 0.6 + ((area - 100) / 300) * 0.3
        if area < 900:
            return 0.9 + ((area - 400) / 500) * 0.15
        return 1.05 + min(0.1, (area - 900) / 3000)

    def solution_length_factor(self) -> float:
        if not self.solution_path:
            return self.weights.missing_path_factor
        minimum = max(1, minimum_path_length(self.maze))
        ratio = len(self.solution_path) / minimum
        return min(self.weights.solution_length_cap, 0.8 + ratio / 15)

    def absolute_path_adjustment(self) -> float:
        if not self.solution_path:
            return self.weights.missing_path_factor
        length = len(self.solution_path)
        if length < 15:
            return 0.3 + (length / 15) * 0.4
        if length < 30:
            return 0.7 + ((length - 15) / 15) * 0.2
        return 0.9 + min(0.1, (length - 30) / 100)

    def false_path_density(self) -> float:
        total_paths = len(self.alternate_paths)
        if total_paths < 3:
            return 0.5 + total_paths * 0.1
        total_cells = sum(branch.length for branch in self.alternate_paths)
        cell_ratio = total_cells / self.area
        path_ratio = total_paths / (len(self.solution_path) or 1)
        expected_paths = math.sqrt(self.area) / 3
        density_ratio = min(1.5, total_paths / expected_paths)
        return min(1.0, 0.75 + cell_ratio * 0.5 + path_ratio * 0.25 + density_ratio * 0.25)

    def branch_complexity(self) -> float:
        if not self.alternate_paths:
            return 10.0
        area = self.area
        span = self.maze.width + self.maze.height
        path_factor = min(1.0, len(self.solution_path) / self.weights.branch_path_saturation)
        total = 0.0
        for branch in self.alternate_paths:
            # Branches close to the exit mislead more.
            distance = max(1, branch.distance_from_exit)
            position_factor = 1 + (span - distance) / (self.maze.width + self.maze.height * 2)
            length_factor = branch.length / (area * 0.3) * 1.2
            long_path_bonus = 1.5 if branch.length > area * 0.1 else 1.0
            fork_factor = branch.sub_branches * 1.2
            depth_factor = branch.max_depth / math.sqrt(area) * 1.5
            dead_end_factor = 1.0
            if branch.dead_end:
                if branch.length < 5:
                    dead_end_factor = 0.9
                else:
                    length_score = min(2.0, 1.0 + branch.length / 25)
                    depth_score = min(1.5, 1.0 + branch.max_depth / 15)
                    dead_end_factor = length_score * 0.6 + depth_score * 0.4
            total += (
                (length_factor + fork_factor + depth_factor)
                * position_factor
                * dead_end_factor
                * path_factor
                * long_path_bonus
            )
        return max(10.0, min(100.0, total / math.sqrt(area)))

    def decision_points(self) -> float:
        area = self.area
        path_length = len(self.solution_path)
        path_factor = min(1.0, path_length / self.weights.decision_path_saturation)
        junction_score = (
            self.weights.maze_junction_density * self.maze_junctions / math.sqrt(area) * path_factor
        )
        count = len(self.branching_points)
        base_score = count / math.sqrt(area) * self.weights.decision_density_scale * path_factor
        distribution_score = 0.0
        if count > 1:
            # Evenly spread decisions are harder than clustered ones.
            spacing = path_length / (count + 1)
            variance = sum(
                abs(point.position - spacing * (index + 1)) / path_length
                for index, point in enumerate(self.branching_points)
            )
            distribution_score = (
                self.weights.decision_distribution_scale * (1 - variance / count) * path_factor
            )
        return max(5.0, min(100.0, base_score + distribution_score + junction_score))

    def _compress(self, score: int) -> float:
        start = self.weights.compression_start
        if score <= start:
            return float(score)
        factor = 0.93 + (score - start) / 300
        return start + (score - start) * factor

    # ------------------------------------------------------------------

    def calculate(self) -> DifficultyBreakdown:
        self.analyze()
        branch = self.branch_complexity()
        decision = self.decision_points()
        size = self.size_adjustment()
        length = self.solution_length_factor()
        absolute = self.absolute_path_adjustment()
        false_paths = self.false_path_density()
        blended = self.weights.branch_complexity * branch + self.weights.decision_points * decision
        raw = blended * size * length * absolute * false_paths
        score = max(1, min(100, _round_half_up(raw)))
        overall = max(1, min(100, _round_half_up(self._compress(score))))
        return DifficultyBreakdown(
            branch_complexity=branch,
            decision_points=decision,
            size_adjustment=size,
            solution_length_factor=length,
            absolute_path_adjustment=absolute,
            false_path_density=false_paths,
            solution_path_length=len(self.solution_path),
            minimum_path_length=minimum_path_length(self.maze),
            path_junctions=len(self.branching_points),
            maze_junctions=self.maze_junctions,
            overall=overall,
        )

    def detailed_analysis(self) -> Dict[str, object]:
        breakdown = self.calculate()
        dead_ends = [branch for branch in self.alternate_paths if branch.dead_end]
        dead_end_total = sum(branch.length for branch in dead_ends)
        return {
            "difficulty": {"score": breakdown.overall, "breakdown": breakdown.to_dict()},
            "solution": {
                "length": breakdown.solution_path_length,
                "path_percentage": breakdown.solution_path_length / self.area * 100,
            },
            "branching_points": {
                "count": len(self.branching_points),
                "details": [
                    {
                        "position": point.position,
                        "location": {"row": point.row, "col": point.col},
                        "branch_count": len(point.branches),
                    }
                    for point in self.branching_points
                ],
            },
            "alternate_paths": {
                "total_count": len(self.alternate_paths),
                "total_length": sum(branch.length for branch in self.alternate_paths),
                "dead_end_count": len(dead_ends),
                "total_sub_branches": sum(branch.sub_branches for branch in self.alternate_paths),
                "max_depth": max((branch.max_depth for branch in self.alternate_paths), default=0),
                "details": [branch.to_dict() for branch in self.alternate_paths],
            },
            "dead_ends": {
                "count": len(dead_ends),
                "total_length": dead_end_total,
                "average_length": dead_end_total / len(dead_ends) if dead_ends else 0,
                "max_length": max((branch.length for branch in dead_ends), default=0),
                "max_depth": max((branch.max_depth for branch in dead_ends), default=0),
            },
            "maze": {
                "width": self.maze.width,
                "height": self.maze.height,
                "cell_count": self.area,
                "junctions": self.maze_junctions,
            },
        }


def score_difficulty(maze: Maze, weights: Optional[ScoringWeights] = None) -> DifficultyBreakdown:
    """Score ``maze``; pure, so repeated calls on an unchanged maze agree."""

    return DifficultyScorer(maze, weights).calculate()


def dead_end_cells(cells: Sequence[Cell]) -> List[Cell]:
    """Cells with exactly one open wall."""

    return [cell for cell in cells if cell.open_wall_count() == 1]


__all__ = [
    "AlternatePath",
    "BranchPoint",
    "DifficultyBreakdown",
    "DifficultyScorer",
    "ScoringWeights",
    "dead_end_cells",
    "score_difficulty",
]
