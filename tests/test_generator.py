import contextlib
import io
import json
import unittest
from collections import deque

import numpy as np

from mazecraft.base import MazeConfigurationError
from mazecraft.maze import Maze, MazeGenerator, generate
from mazecraft.maze.generator import main
from mazecraft.maze.grid import OPPOSITE


def reachable_count(maze: Maze) -> int:
    start = maze.entrance.position
    seen = {start}
    queue = deque([start])
    while queue:
        cell = maze.grid.cell(*queue.popleft())
        for neighbor in maze.grid.accessible_neighbors(cell):
            if neighbor.position not in seen:
                seen.add(neighbor.position)
                queue.append(neighbor.position)
    return len(seen)


class PlainGeneratorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.maze = generate(10, 10, 20, 42)

    def test_same_seed_produces_identical_maze(self) -> None:
        again = generate(10, 10, 20, 42)
        self.assertEqual(self.maze.to_dict(), again.to_dict())

    def test_different_seeds_differ(self) -> None:
        other = generate(10, 10, 20, 43)
        self.assertFalse(np.array_equal(self.maze.wall_bitmap(), other.wall_bitmap()))

    def test_maze_is_a_spanning_tree(self) -> None:
        self.assertEqual(self.maze.grid.interior_passage_count(), 10 * 10 - 1)
        self.assertEqual(reachable_count(self.maze), 100)

    def test_two_openings_on_opposite_sides(self) -> None:
        openings = self.maze.grid.exterior_openings()
        self.assertEqual(len(openings), 2)
        self.assertEqual(OPPOSITE[self.maze.entrance.side], self.maze.exit.side)
        corners = {(0, 0), (0, 9), (9, 0), (9, 9)}
        for opening in (self.maze.entrance, self.maze.exit):
            self.assertNotIn(opening.position, corners)
            self.assertFalse(self.maze.cell(opening.row, opening.col).walls[opening.side])

    def test_solution_path_is_walkable(self) -> None:
        path = self.maze.solution_path
        self.assertEqual(path[0].position, self.maze.entrance.position)
        self.assertEqual(path[-1].position, self.maze.exit.position)
        for current, following in zip(path, path[1:]):
            self.assertTrue(self.maze.can_move(current, following))
        self.assertEqual(self.maze.stats["configuration"], "plain")

    def test_score_and_label_are_filled(self) -> None:
        self.assertGreaterEqual(self.maze.difficulty_score, 1)
        self.assertLessEqual(self.maze.difficulty_score, 100)
        self.assertEqual(self.maze.difficulty_score, self.maze.difficulty_breakdown.overall)
        self.assertIn(self.maze.difficulty_label(), {"Easy", "Medium", "Hard"})

    def test_smallest_maze_is_reproducible(self) -> None:
        first = generate(5, 5, 20, 1)
        second = generate(5, 5, 20, 1)
        np.testing.assert_array_equal(first.wall_bitmap(), second.wall_bitmap())
        self.assertEqual(first.entrance, second.entrance)
        self.assertEqual(reachable_count(first), 25)

    def test_rectangular_maze(self) -> None:
        maze = generate(12, 7, 20, 99)
        self.assertEqual(maze.wall_bitmap().shape, (7, 12))
        self.assertEqual(maze.grid.interior_passage_count(), 12 * 7 - 1)

    def test_zero_seed_behaves_like_seed_one(self) -> None:
        np.testing.assert_array_equal(
            generate(8, 8, 20, 0).wall_bitmap(), generate(8, 8, 20, 1).wall_bitmap()
        )

    def test_invalid_dimensions_are_rejected(self) -> None:
        for width, height in ((4, 10), (10, 101), (0, 0)):
            with self.assertRaises(MazeConfigurationError):
                generate(width, height, 20, 1)
        with self.assertRaises(MazeConfigurationError):
            generate("10", 10, 20, 1)
        with self.assertRaises(MazeConfigurationError):
            generate(10, 10, 20, 1.5)

    def test_serialization_round_trip(self) -> None:
        payload = json.loads(json.dumps(self.maze.to_dict()))
        rebuilt = Maze.from_dict(payload)
        np.testing.assert_array_equal(rebuilt.wall_bitmap(), self.maze.wall_bitmap())
        self.assertEqual(rebuilt.entrance, self.maze.entrance)
        self.assertEqual(
            [cell.position for cell in rebuilt.solution_path],
            [cell.position for cell in self.maze.solution_path],
        )


    def test_loading_one_sided_wall_fails(self) -> None:
        payload = self.maze.to_dict()
        row, col = next(
            cell.position
            for cell in self.maze.grid.iter_cells()
            if cell.col < 9 and cell.walls["east"]
        )
        payload["walls"][row][col] &= ~2
        with self.assertRaises(ValueError):
            Maze.from_dict(payload)


class MazeGeneratorClassTests(unittest.TestCase):
    def test_dataset_generation(self) -> None:
        generator = MazeGenerator(width=6, height=6, seed=3)
        mazes = generator.generate_dataset(3)
        self.assertEqual(len(mazes), 3)
        self.assertTrue(all(maze.solution_path for maze in mazes))
        record = generator.record_to_dict(mazes[0])
        self.assertEqual(record["width"], 6)

    def test_cli_prints_json(self) -> None:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            main(["--width", "6", "--height", "5", "--seed", "11"])
        payload = json.loads(buffer.getvalue())
        self.assertEqual(payload["seed"], 11)
        self.assertEqual(len(payload["walls"]), 5)
        self.assertEqual(payload["stats"]["configuration"], "plain")


if __name__ == "__main__":
    unittest.main()
