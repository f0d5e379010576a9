import contextlib
import io
import json
import unittest
from unittest import mock

import numpy as np

from mazecraft.base import MazeConfigurationError
from mazecraft.maze import MazeOptimizer, OptimizedMazeGenerator, OptimizerConfig, generate, optimize
from mazecraft.maze.optimizer import PARAMETER_NAMES, OptimizationCandidate, main


def forced_config(attempts: int = 4, **overrides) -> OptimizerConfig:
    """Config whose thresholds never short-circuit the search."""

    overrides.setdefault("baseline_skip_threshold", 101.0)
    overrides.setdefault("early_termination_threshold", 101.0)
    return OptimizerConfig(generation_attempts=attempts, **overrides)


def candidate(score: int, path_length: int, **flags) -> OptimizationCandidate:
    return OptimizationCandidate(
        maze=None,
        params=None,
        seed=1,
        difficulty_score=score,
        solution_path_length=path_length,
        **flags,
    )


class OptimizerTests(unittest.TestCase):
    def test_never_worse_than_plain(self) -> None:
        for seed in (1, 42, 777):
            best = optimize(10, 10, 20, seed, attempts=4)
            plain = generate(10, 10, 20, seed)
            self.assertGreaterEqual(best.difficulty_score, plain.difficulty_score)
            self.assertTrue(best.solution_path)

    def test_deterministic(self) -> None:
        first = optimize(8, 8, 20, 9, attempts=5)
        second = optimize(8, 8, 20, 9, attempts=5)
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_small_grid_with_few_attempts(self) -> None:
        maze = optimize(5, 5, 20, 3, attempts=1)
        self.assertEqual((maze.width, maze.height), (5, 5))
        self.assertEqual(len(maze.grid.exterior_openings()), 2)

    def test_invalid_dimensions_propagate(self) -> None:
        with self.assertRaises(MazeConfigurationError):
            optimize(3, 10, 20, 1)
        with self.assertRaises(MazeConfigurationError):
            MazeOptimizer(10, 200)

    def test_total_failure_falls_back_to_plain(self) -> None:
        optimizer = MazeOptimizer(8, 8, 20, 5, forced_config())
        with mock.patch.object(MazeOptimizer, "_optimize", side_effect=RuntimeError("boom")):
            with self.assertLogs("mazecraft.maze.optimizer", level="WARNING"):
                result = optimizer.optimize()
        self.assertTrue(result.is_fallback)
        np.testing.assert_array_equal(result.maze.wall_bitmap(), generate(8, 8, 20, 5).wall_bitmap())

    def test_failing_trials_are_skipped(self) -> None:
        optimizer = MazeOptimizer(8, 8, 20, 5, forced_config(attempts=3))
        with mock.patch.object(
            MazeOptimizer, "generate_candidate", side_effect=RuntimeError("trial failed")
        ):
            with self.assertLogs("mazecraft.maze.optimizer", level="WARNING") as captured:
                result = optimizer.optimize()
        self.assertGreaterEqual(len(captured.records), 3)
        self.assertEqual(optimizer.candidates, [])
        self.assertTrue(result.is_fallback)
        np.testing.assert_array_equal(result.maze.wall_bitmap(), generate(8, 8, 20, 5).wall_bitmap())

    def test_baseline_skip(self) -> None:
        optimizer = MazeOptimizer(8, 8, 20, 5, OptimizerConfig(baseline_skip_threshold=0))
        result = optimizer.optimize()
        self.assertTrue(result.is_baseline)
        self.assertEqual(optimizer.parameter_history, [])

    def test_sampled_parameters_stay_in_range(self) -> None:
        optimizer = MazeOptimizer(10, 10, 20, 11, forced_config(attempts=8))
        optimizer.optimize()
        ranges = optimizer.config.parameter_ranges
        self.assertEqual(len(optimizer.parameter_history), 8)
        for record in optimizer.parameter_history:
            for name in PARAMETER_NAMES:
                value = record["params"][name]
                self.assertGreaterEqual(value, ranges[name].min)
                self.assertLessEqual(value, ranges[name].max)

    def test_candidates_use_consecutive_seeds(self) -> None:
        optimizer = MazeOptimizer(8, 8, 20, 100, forced_config(attempts=3))
        optimizer.optimize()
        self.assertEqual([c.seed for c in optimizer.candidates], [100, 101, 102])

    def test_parameter_statistics(self) -> None:
        optimizer = MazeOptimizer(10, 10, 20, 21, forced_config(attempts=6))
        self.assertEqual(optimizer.parameter_statistics(), {})
        optimizer.optimize()
        stats = optimizer.parameter_statistics()
        self.assertEqual(set(stats), set(PARAMETER_NAMES))
        for entry in stats.values():
            self.assertLessEqual(entry["min"], entry["avg"])
            self.assertLessEqual(entry["avg"], entry["max"])
            self.assertGreaterEqual(entry["correlation"], -1.0 - 1e-9)
            self.assertLessEqual(entry["correlation"], 1.0 + 1e-9)

    def test_generate_comparison(self) -> None:
        comparison = MazeOptimizer(10, 10, 20, 4).generate_comparison()
        self.assertEqual(
            comparison["improvement"],
            comparison["optimized"]["difficulty_score"] - comparison["standard"]["difficulty_score"],
        )
        self.assertGreaterEqual(comparison["improvement"], 0)


class CandidateSelectionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.optimizer = MazeOptimizer(10, 10, 20, 1)
        self.optimizer.baseline = candidate(50, 10, is_baseline=True)

    def test_longer_paths_win_by_composite(self) -> None:
        longer = candidate(60, 12)
        harder_but_shorter = candidate(90, 9)
        self.optimizer.candidates = [longer, harder_but_shorter]
        self.assertIs(self.optimizer.select_best_candidate(), longer)
        self.assertAlmostEqual(longer.composite_score, 0.3 * 0.2 + 0.7 * 0.2)

    def test_highest_score_without_longer_paths(self) -> None:
        low = candidate(40, 8)
        high = candidate(70, 9)
        self.optimizer.candidates = [low, high]
        self.assertIs(self.optimizer.select_best_candidate(), high)

    def test_difficulty_floor(self) -> None:
        easier_but_longer = candidate(40, 20)
        self.assertIs(self.optimizer._compare_to_baseline(easier_but_longer), self.optimizer.baseline)
        self.optimizer.config.enforce_difficulty_floor = False
        self.assertIs(self.optimizer._compare_to_baseline(easier_but_longer), easier_but_longer)

    def test_baseline_kept_when_harder_and_not_shorter(self) -> None:
        self.optimizer.config.enforce_difficulty_floor = False
        self.assertIs(self.optimizer._compare_to_baseline(candidate(45, 10)), self.optimizer.baseline)
        better = candidate(55, 9)
        self.assertIs(self.optimizer._compare_to_baseline(better), better)


class OptimizerEntryPointTests(unittest.TestCase):
    def test_batch_generator(self) -> None:
        generator = OptimizedMazeGenerator(width=6, height=6, attempts=2, seed=8)
        mazes = generator.generate_dataset(2)
        self.assertEqual(len(mazes), 2)
        self.assertTrue(all(maze.difficulty_score >= 1 for maze in mazes))

    def test_cli_prints_json(self) -> None:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            main(["--width", "6", "--height", "6", "--seed", "3", "--attempts", "2", "--stats"])
        payload = json.loads(buffer.getvalue())
        self.assertEqual(payload["maze"]["seed"], payload["candidate"]["seed"])
        self.assertIn("parameter_statistics", payload)


if __name__ == "__main__":
    unittest.main()
