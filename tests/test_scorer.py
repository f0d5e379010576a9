import unittest

import numpy as np

from mazecraft.maze import DifficultyScorer, ScoringWeights, generate, score_difficulty
from mazecraft.maze.grid import EAST, SOUTH, WEST
from mazecraft.maze.model import Maze, Opening, difficulty_label


class DifficultyScorerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.maze = generate(12, 12, 20, 2024)

    def test_score_is_pure_and_repeatable(self) -> None:
        before = self.maze.wall_bitmap().copy()
        first = score_difficulty(self.maze)
        second = score_difficulty(self.maze)
        self.assertEqual(first, second)
        self.assertEqual(first.overall, self.maze.difficulty_score)
        np.testing.assert_array_equal(before, self.maze.wall_bitmap())

    def test_scores_stay_in_range(self) -> None:
        for seed in range(1, 9):
            for size in (5, 15, 30):
                score = generate(size, size, 20, seed).difficulty_score
                self.assertGreaterEqual(score, 1)
                self.assertLessEqual(score, 100)

    def test_breakdown_fields(self) -> None:
        breakdown = score_difficulty(self.maze)
        self.assertEqual(breakdown.solution_path_length, self.maze.solution_length)
        self.assertGreaterEqual(breakdown.branch_complexity, 10.0)
        self.assertGreaterEqual(breakdown.decision_points, 5.0)
        self.assertLessEqual(breakdown.solution_length_factor, ScoringWeights().solution_length_cap)
        self.assertLessEqual(breakdown.false_path_density, 1.0)
        self.assertGreater(breakdown.maze_junctions, 0)
        self.assertEqual(set(breakdown.to_dict()), set(breakdown.__dataclass_fields__))

    def test_size_adjustment_bands(self) -> None:
        scorer = DifficultyScorer(generate(10, 10, 20, 1))
        self.assertAlmostEqual(scorer.size_adjustment(), 0.6)
        scorer = DifficultyScorer(generate(5, 5, 20, 1))
        self.assertAlmostEqual(scorer.size_adjustment(), 0.2 + 0.25 * 0.4)

    def test_dead_end_branches_are_detected(self) -> None:
        scorer = DifficultyScorer(self.maze)
        analysis = scorer.detailed_analysis()
        alternate = analysis["alternate_paths"]
        # A perfect maze has no loops, so every false branch dead-ends.
        self.assertEqual(alternate["dead_end_count"], alternate["total_count"])
        self.assertEqual(analysis["difficulty"]["score"], self.maze.difficulty_score)

    def test_missing_path_still_scores(self) -> None:
        maze = Maze(width=5, height=5, cell_size=20, seed=1)
        maze.entrance = Opening(0, 2, "north")
        maze.exit = Opening(4, 2, "south")
        breakdown = score_difficulty(maze)
        self.assertEqual(breakdown.solution_path_length, 0)
        self.assertEqual(breakdown.solution_length_factor, 0.5)
        self.assertGreaterEqual(breakdown.overall, 1)

    def test_side_branch_counts_as_decision(self) -> None:
        maze = Maze(width=5, height=5, cell_size=20, seed=1)
        for col in range(4):
            maze.grid.remove_wall(maze.cell(2, col), maze.cell(2, col + 1), EAST)
        maze.grid.remove_wall(maze.cell(2, 2), maze.cell(3, 2), SOUTH)
        maze.grid.remove_wall(maze.cell(3, 2), maze.cell(4, 2), SOUTH)
        maze.cell(2, 0).walls[WEST] = False
        maze.cell(2, 4).walls[EAST] = False
        maze.entrance = Opening(2, 0, WEST)
        maze.exit = Opening(2, 4, EAST)

        scorer = DifficultyScorer(maze)
        breakdown = scorer.calculate()
        self.assertEqual(breakdown.path_junctions, 1)
        self.assertEqual(len(scorer.alternate_paths), 1)
        branch = scorer.alternate_paths[0]
        self.assertTrue(branch.dead_end)
        self.assertEqual(branch.length, 2)
        self.assertEqual(branch.max_depth, 2)

    def test_custom_weights_change_the_score(self) -> None:
        heavy = ScoringWeights(branch_complexity=1.0, decision_points=1.0)
        self.assertGreaterEqual(
            score_difficulty(self.maze, heavy).overall, score_difficulty(self.maze).overall
        )


class DifficultyLabelTests(unittest.TestCase):
    def test_thresholds(self) -> None:
        self.assertEqual(difficulty_label(95), "Hard")
        self.assertEqual(difficulty_label(91), "Hard")
        self.assertEqual(difficulty_label(90), "Medium")
        self.assertEqual(difficulty_label(71), "Medium")
        self.assertEqual(difficulty_label(70), "Easy")
        self.assertEqual(difficulty_label(1), "Easy")
        self.assertEqual(difficulty_label(None), "Unknown")


if __name__ == "__main__":
    unittest.main()
