import unittest

from mazecraft.maze import Maze, find_solution_path, generate
from mazecraft.maze.grid import EAST, WEST
from mazecraft.maze.model import Opening
from mazecraft.maze.pathfinding import minimum_path_length, shortest_path


def corridor_maze() -> Maze:
    """5x5 maze whose only passage is a straight corridor along row 2."""

    maze = Maze(width=5, height=5, cell_size=20, seed=1)
    for col in range(4):
        maze.grid.remove_wall(maze.cell(2, col), maze.cell(2, col + 1), EAST)
    maze.cell(2, 0).walls[WEST] = False
    maze.cell(2, 4).walls[EAST] = False
    maze.entrance = Opening(2, 0, WEST)
    maze.exit = Opening(2, 4, EAST)
    return maze


class PathfindingTests(unittest.TestCase):
    def test_corridor_solution(self) -> None:
        maze = corridor_maze()
        path = find_solution_path(maze)
        self.assertEqual([cell.position for cell in path], [(2, col) for col in range(5)])
        self.assertEqual(minimum_path_length(maze), 5)

    def test_missing_openings_give_empty_path(self) -> None:
        maze = corridor_maze()
        maze.exit = None
        self.assertEqual(find_solution_path(maze), [])
        self.assertEqual(minimum_path_length(maze), 0)

    def test_blocked_corridor_has_no_path(self) -> None:
        maze = corridor_maze()
        maze.cell(2, 2).walls[EAST] = True
        maze.cell(2, 3).walls[WEST] = True
        self.assertEqual(find_solution_path(maze), [])

    def test_out_of_bounds_endpoints(self) -> None:
        maze = corridor_maze()
        self.assertEqual(shortest_path(maze.grid, (2, 0), (7, 7)), [])

    def test_solution_is_shortest_on_generated_maze(self) -> None:
        maze = generate(9, 9, 20, 5)
        positions = shortest_path(maze.grid, maze.entrance.position, maze.exit.position)
        self.assertEqual(positions, [cell.position for cell in maze.solution_path])
        self.assertGreaterEqual(len(positions), minimum_path_length(maze))


if __name__ == "__main__":
    unittest.main()
