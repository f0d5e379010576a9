"""Cell and grid model with symmetric wall mutation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

NORTH = "north"
EAST = "east"
SOUTH = "south"
WEST = "west"

# Enumeration order for neighbours; generation determinism depends on it.
DIRECTIONS: Tuple[str, ...] = (NORTH, EAST, SOUTH, WEST)

OPPOSITE = {NORTH: SOUTH, EAST: WEST, SOUTH: NORTH, WEST: EAST}

OFFSETS = {
    NORTH: (-1, 0),
    EAST: (0, 1),
    SOUTH: (1, 0),
    WEST: (0, -1),
}

WALL_BITS = {NORTH: 1, EAST: 2, SOUTH: 4, WEST: 8}


@dataclass
class Cell:
    row: int
    col: int
    walls: Dict[str, bool] = field(
        default_factory=lambda: {direction: True for direction in DIRECTIONS}
    )
    visited: bool = False

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col

    def has_wall(self, direction: str) -> bool:
        return self.walls[direction]

    def open_directions(self) -> List[str]:
        return [direction for direction in DIRECTIONS if not self.walls[direction]]

    def open_wall_count(self) -> int:
        return sum(1 for direction in DIRECTIONS if not self.walls[direction])

    def copy(self) -> "Cell":
        return Cell(self.row, self.col, dict(self.walls), self.visited)


def direction_between(cell_a: Cell, cell_b: Cell) -> Optional[str]:
    """Direction from ``cell_a`` to an orthogonally adjacent ``cell_b``."""

    delta = (cell_b.row - cell_a.row, cell_b.col - cell_a.col)
    for direction, offset in OFFSETS.items():
        if offset == delta:
            return direction
    return None


class Grid:
    """Fixed-size rectangular array of cells, all walls up on creation."""

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError("Grid dimensions must be positive")
        self.width = width
        self.height = height
        self.cells: List[List[Cell]] = [
            [Cell(row, col) for col in range(width)] for row in range(height)
        ]

    def __getitem__(self, row: int) -> List[Cell]:
        return self.cells[row]

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def iter_cells(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    @property
    def area(self) -> int:
        return self.width * self.height

    # ------------------------------------------------------------------

    def neighbor_in_direction(self, cell: Cell, direction: str) -> Optional[Cell]:
        dr, dc = OFFSETS[direction]
        row, col = cell.row + dr, cell.col + dc
        if self.in_bounds(row, col):
            return self.cells[row][col]
        return None

    def is_exterior_wall(self, cell: Cell, direction: str) -> bool:
        if direction == NORTH:
            return cell.row == 0
        if direction == SOUTH:
            return cell.row == self.height - 1
        if direction == WEST:
            return cell.col == 0
        if direction == EAST:
            return cell.col == self.width - 1
        return False

    def remove_wall(self, cell_a: Cell, cell_b: Cell, direction: str) -> None:
        """Open the passage between two adjacent cells (idempotent)."""

        if self.neighbor_in_direction(cell_a, direction) is not cell_b:
            raise ValueError(
                f"Cell {cell_b.position} is not {direction} of {cell_a.position}"
            )
        cell_a.walls[direction] = False
        cell_b.walls[OPPOSITE[direction]] = False

    def unvisited_neighbors(self, cell: Cell) -> List[Tuple[Cell, str]]:
        neighbors = []
        for direction in DIRECTIONS:
            neighbor = self.neighbor_in_direction(cell, direction)
            if neighbor is not None and not neighbor.visited:
                neighbors.append((neighbor, direction))
        return neighbors

    def accessible_neighbors(self, cell: Cell) -> List[Cell]:
        """Neighbours reachable through an open, in-bounds passage."""

        neighbors = []
        for direction in DIRECTIONS:
            if cell.walls[direction]:
                continue
            neighbor = self.neighbor_in_direction(cell, direction)
            if neighbor is not None:
                neighbors.append(neighbor)
        return neighbors

    def reset_visited(self) -> None:
        for cell in self.iter_cells():
            cell.visited = False

    def interior_passage_count(self) -> int:
        """Number of open walls between pairs of in-bounds cells."""

        count = 0
        for cell in self.iter_cells():
            for direction in (EAST, SOUTH):
                if not cell.walls[direction] and not self.is_exterior_wall(cell, direction):
                    count += 1
        return count

    def exterior_openings(self) -> List[Tuple[Cell, str]]:
        openings = []
        for cell in self.iter_cells():
            for direction in DIRECTIONS:
                if not cell.walls[direction] and self.is_exterior_wall(cell, direction):
                    openings.append((cell, direction))
        return openings

    def copy(self) -> "Grid":
        clone = Grid.__new__(Grid)
        clone.width = self.width
        clone.height = self.height
        clone.cells = [[cell.copy() for cell in row] for row in self.cells]
        return clone

    def wall_bitmap(self) -> np.ndarray:
        """Per-cell wall bits (N=1, E=2, S=4, W=8), set where a wall stands."""

        bitmap = np.zeros((self.height, self.width), dtype=np.uint8)
        for cell in self.iter_cells():
            value = 0
            for direction, bit in WALL_BITS.items():
                if cell.walls[direction]:
                    value |= bit
            bitmap[cell.row, cell.col] = value
        return bitmap

    def traversable_counts(self) -> np.ndarray:
        """Count of open in-bounds passages per cell."""

        bitmap = self.wall_bitmap()
        counts = np.zeros_like(bitmap, dtype=np.int16)
        for direction, bit in WALL_BITS.items():
            open_mask = (bitmap & bit) == 0
            if direction == NORTH:
                open_mask[0, :] = False
            elif direction == SOUTH:
                open_mask[-1, :] = False
            elif direction == WEST:
                open_mask[:, 0] = False
            else:
                open_mask[:, -1] = False
            counts += open_mask.astype(np.int16)
        return counts

    @classmethod
    def from_bitmap(cls, bitmap: np.ndarray) -> "Grid":
        height, width = bitmap.shape
        grid = cls(int(width), int(height))
        for cell in grid.iter_cells():
            value = int(bitmap[cell.row, cell.col])
            for direction, bit in WALL_BITS.items():
                cell.walls[direction] = bool(value & bit)
        for cell in grid.iter_cells():
            for direction in (EAST, SOUTH):
                neighbor = grid.neighbor_in_direction(cell, direction)
                if neighbor is None:
                    continue
                if cell.walls[direction] != neighbor.walls[OPPOSITE[direction]]:
                    raise ValueError(
                        f"Wall bitmap disagrees between {cell.position} and {neighbor.position}"
                    )
        return grid


def create_grid(width: int, height: int) -> Grid:
    return Grid(width, height)


__all__ = [
    "Cell",
    "Grid",
    "create_grid",
    "direction_between",
    "DIRECTIONS",
    "OPPOSITE",
    "OFFSETS",
    "WALL_BITS",
    "NORTH",
    "EAST",
    "SOUTH",
    "WEST",
]
