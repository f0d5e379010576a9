"""Breadth-first solution pathfinding through open passages."""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Optional, Tuple

from .grid import Cell, Grid
from .model import Maze

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


def reconstruct_path(parent: Dict[Position, Optional[Position]], goal: Position) -> List[Position]:
    if goal not in parent:
        return []
    node: Optional[Position] = goal
    result: List[Position] = []
    while node is not None:
        result.append(node)
        node = parent[node]
    result.reverse()
    return result


def shortest_path(grid: Grid, start: Position, goal: Position) -> List[Position]:
    """Shortest cell sequence from ``start`` to ``goal`` inclusive, or ``[]``."""

    if not grid.in_bounds(*start) or not grid.in_bounds(*goal):
        return []
    queue: deque[Position] = deque([start])
    parent: Dict[Position, Optional[Position]] = {start: None}
    while queue:
        row, col = queue.popleft()
        if (row, col) == goal:
            break
        for neighbor in grid.accessible_neighbors(grid.cell(row, col)):
            if neighbor.position not in parent:
                parent[neighbor.position] = (row, col)
                queue.append(neighbor.position)
    return reconstruct_path(parent, goal)


def find_solution_path(maze: Maze) -> List[Cell]:
    """Cells from entrance to exit inclusive.

    The off-grid steps through the two openings are terminal and contribute
    no cells. An empty list is returned while the openings are unset.
    """

    if maze.entrance is None or maze.exit is None:
        logger.debug("Solution requested before entrance/exit were created")
        return []
    positions = shortest_path(maze.grid, maze.entrance.position, maze.exit.position)
    return [maze.grid.cell(row, col) for row, col in positions]


def minimum_path_length(maze: Maze) -> int:
    """Manhattan lower bound on the solution cell count."""

    if maze.entrance is None or maze.exit is None:
        return 0
    return (
        abs(maze.entrance.row - maze.exit.row)
        + abs(maze.entrance.col - maze.exit.col)
        + 1
    )


__all__ = ["find_solution_path", "minimum_path_length", "reconstruct_path", "shortest_path"]
