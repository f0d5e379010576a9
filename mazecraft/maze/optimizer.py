"""Best-of-N maze optimization over enhancement parameters."""

from __future__ import annotations

import argparse
import json
import logging
import random
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

import numpy as np

from ..base import MAX_RANDOM_SEED, AbstractMazeGenerator, validate_dimensions
from .enhanced import EnhancedMazeGenerator, EnhancementParams
from .generator import build_plain_maze
from .model import Maze
from .rng import ParkMillerRandom
from .scorer import ScoringWeights

logger = logging.getLogger(__name__)

PARAMETER_NAMES = (
    "wall_removal_factor",
    "dead_end_length_factor",
    "directional_persistence",
    "complexity_balance_preference",
)


@dataclass(frozen=True)
class ParameterRange:
    min: float
    max: float

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))


def default_parameter_ranges() -> Dict[str, ParameterRange]:
    return {
        "wall_removal_factor": ParameterRange(0.0, 0.5),
        "dead_end_length_factor": ParameterRange(0.0, 1.0),
        "directional_persistence": ParameterRange(0.0, 0.5),
        "complexity_balance_preference": ParameterRange(0.0, 1.0),
    }


@dataclass
class OptimizerConfig:
    generation_attempts: int = 10
    early_termination_threshold: float = 95.0
    baseline_skip_threshold: float = 95.0
    variation_factor: float = 0.4
    path_length_weight: float = 0.3
    exploration_attempts: int = 3
    enforce_difficulty_floor: bool = True
    parameter_ranges: Dict[str, ParameterRange] = field(default_factory=default_parameter_ranges)


@dataclass
class OptimizationCandidate:
    maze: Maze
    params: Optional[EnhancementParams]
    seed: int
    difficulty_score: int
    solution_path_length: int
    composite_score: Optional[float] = None
    is_baseline: bool = False
    is_fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "params": self.params.to_dict() if self.params is not None else None,
            "difficulty_score": self.difficulty_score,
            "solution_path_length": self.solution_path_length,
            "composite_score": self.composite_score,
            "is_baseline": self.is_baseline,
            "is_fallback": self.is_fallback,
        }


def _candidate_from(maze: Maze, params: Optional[EnhancementParams], seed: int, **flags) -> OptimizationCandidate:
    return OptimizationCandidate(
        maze=maze,
        params=params,
        seed=seed,
        difficulty_score=maze.difficulty_score or 0,
        solution_path_length=maze.solution_length,
        **flags,
    )


class MazeOptimizer:
    """Search enhancement parameters for a harder maze than plain generation.

    A plain baseline is generated first. Trials then sample parameters,
    uniformly at first and later by perturbing the best set found so far,
    and the winner is chosen by a composite of path-length and difficulty
    gains over the baseline. The baseline is returned whenever no trial
    beats it, and a plain maze is returned if every trial fails.
    """

    def __init__(
        self,
        width: int,
        height: int,
        cell_size: int = 20,
        seed: int = 1,
        config: Optional[OptimizerConfig] = None,
        *,
        weights: Optional[ScoringWeights] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        validate_dimensions(width, height)
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.base_seed = seed
        self.config = config or OptimizerConfig()
        self.weights = weights
        self.log = log or logger
        self.rng = ParkMillerRandom(seed)

        self.candidates: List[OptimizationCandidate] = []
        self.best_candidate: Optional[OptimizationCandidate] = None
        self.parameter_history: List[Dict[str, Any]] = []
        self.baseline: Optional[OptimizationCandidate] = None

    # ------------------------------------------------------------------
    # Generation

    def _plain(self, seed: int) -> Maze:
        return build_plain_maze(
            self.width, self.height, self.cell_size, seed, weights=self.weights, log=self.log
        )

    def generate_baseline(self) -> OptimizationCandidate:
        maze = self._plain(self.base_seed)
        self.baseline = _candidate_from(maze, None, self.base_seed, is_baseline=True)
        self.log.debug(
            "Baseline difficulty=%s path=%d",
            self.baseline.difficulty_score,
            self.baseline.solution_path_length,
        )
        return self.baseline

    def generate_candidate(self, params: EnhancementParams, attempt: int) -> OptimizationCandidate:
        seed = self.base_seed + attempt
        generator = EnhancedMazeGenerator(
            width=self.width,
            height=self.height,
            cell_size=self.cell_size,
            params=params,
            weights=self.weights,
            log=self.log,
        )
        maze = generator.create_maze(seed)
        self.log.debug(
            "Candidate #%d seed=%s difficulty=%s path=%d",
            attempt,
            seed,
            maze.difficulty_score,
            maze.solution_length,
        )
        return _candidate_from(maze, params, seed)

    # ------------------------------------------------------------------
    # Parameter sampling

    def _random_in_range(self, value_range: ParameterRange) -> float:
        return value_range.min + self.rng.random() * (value_range.max - value_range.min)

    def _perturb(self, value: float, value_range: ParameterRange) -> float:
        variation = (value_range.max - value_range.min) * self.config.variation_factor
        low = max(value_range.min, value - variation)
        high = min(value_range.max, value + variation)
        return low + self.rng.random() * (high - low)

    def sample_parameters(self, attempt: int) -> EnhancementParams:
        ranges = self.config.parameter_ranges
        explore = attempt < self.config.exploration_attempts or len(self.parameter_history) < 2
        if explore or not self.candidates:
            values = {name: self._random_in_range(ranges[name]) for name in PARAMETER_NAMES}
        else:
            best = max(self.candidates, key=lambda candidate: candidate.difficulty_score)
            values = {
                name: self._perturb(ranges[name].clamp(getattr(best.params, name)), ranges[name])
                for name in PARAMETER_NAMES
            }
        return EnhancementParams(**values)

    # ------------------------------------------------------------------
    # Optimization

    def optimize(self) -> OptimizationCandidate:
        self.candidates = []
        self.parameter_history = []
        self.best_candidate = None
        try:
            return self._optimize()
        except Exception:
            self.log.warning(
                "Optimization failed for seed %s, falling back to a plain maze",
                self.base_seed,
                exc_info=True,
            )
            maze = self._plain(self.base_seed)
            return _candidate_from(maze, None, self.base_seed, is_fallback=True)

    def _optimize(self) -> OptimizationCandidate:
        baseline = self.generate_baseline()
        if baseline.difficulty_score >= self.config.baseline_skip_threshold:
            self.log.debug(
                "Baseline difficulty %s meets %s, skipping optimization",
                baseline.difficulty_score,
                self.config.baseline_skip_threshold,
            )
            return baseline

        for attempt in range(self.config.generation_attempts):
            params = self.sample_parameters(attempt)
            try:
                candidate = self.generate_candidate(params, attempt)
            except Exception:
                self.log.warning(
                    "Candidate #%d failed with params %s", attempt, params, exc_info=True
                )
                continue
            self.candidates.append(candidate)
            self.parameter_history.append(
                {
                    "attempt": attempt,
                    "params": params.to_dict(),
                    "score": candidate.difficulty_score,
                    "path_length": candidate.solution_path_length,
                }
            )
            if (
                candidate.difficulty_score >= self.config.early_termination_threshold
                and candidate.solution_path_length > baseline.solution_path_length
            ):
                self.log.debug("Early termination at attempt #%d", attempt)
                break

        best = self.select_best_candidate()
        if best is None:
            raise RuntimeError("No valid maze candidates were generated")
        return self._compare_to_baseline(best)

    def select_best_candidate(self) -> Optional[OptimizationCandidate]:
        if not self.candidates or self.baseline is None:
            return None
        baseline = self.baseline
        longer = [
            candidate
            for candidate in self.candidates
            if candidate.solution_path_length > baseline.solution_path_length
        ]
        if longer:
            weight = self.config.path_length_weight
            for candidate in longer:
                path_gain = (
                    candidate.solution_path_length - baseline.solution_path_length
                ) / max(1, baseline.solution_path_length)
                difficulty_gain = (
                    candidate.difficulty_score - baseline.difficulty_score
                ) / max(1, baseline.difficulty_score)
                candidate.composite_score = weight * path_gain + (1 - weight) * difficulty_gain
            self.best_candidate = max(longer, key=lambda candidate: candidate.composite_score)
        else:
            self.best_candidate = max(self.candidates, key=lambda candidate: candidate.difficulty_score)
        return self.best_candidate

    def _compare_to_baseline(self, best: OptimizationCandidate) -> OptimizationCandidate:
        baseline = self.baseline
        baseline_better = baseline.difficulty_score > best.difficulty_score
        if baseline_better and (
            baseline.solution_path_length >= best.solution_path_length
            or self.config.enforce_difficulty_floor
        ):
            self.log.debug(
                "Baseline kept: difficulty %s > %s",
                baseline.difficulty_score,
                best.difficulty_score,
            )
            return baseline
        self.log.debug(
            "Optimized maze selected: difficulty %s -> %s, path %d -> %d",
            baseline.difficulty_score,
            best.difficulty_score,
            baseline.solution_path_length,
            best.solution_path_length,
        )
        return best

    # ------------------------------------------------------------------
    # Analysis

    def parameter_statistics(self) -> Dict[str, Dict[str, float]]:
        """Min/max/mean per parameter and its Pearson correlation with score."""

        if not self.parameter_history:
            return {}
        scores = np.array([record["score"] for record in self.parameter_history], dtype=float)
        stats: Dict[str, Dict[str, float]] = {}
        for name in PARAMETER_NAMES:
            values = np.array(
                [record["params"][name] for record in self.parameter_history], dtype=float
            )
            stats[name] = {
                "min": float(values.min()),
                "max": float(values.max()),
                "avg": float(values.mean()),
                "correlation": _correlation(values, scores),
            }
        return stats

    def generate_comparison(self, params: Optional[EnhancementParams] = None) -> Dict[str, Any]:
        """Plain versus enhanced maze for the base seed."""

        params = params or EnhancementParams(
            wall_removal_factor=0.3,
            dead_end_length_factor=0.7,
            directional_persistence=0.6,
            complexity_balance_preference=0.5,
        )
        standard = self._plain(self.base_seed)
        optimized = EnhancedMazeGenerator(
            width=self.width,
            height=self.height,
            cell_size=self.cell_size,
            params=params,
            weights=self.weights,
            log=self.log,
        ).create_maze(self.base_seed)
        return {
            "standard": {
                "maze": standard,
                "difficulty_score": standard.difficulty_score,
                "difficulty_breakdown": standard.difficulty_breakdown,
            },
            "optimized": {
                "maze": optimized,
                "difficulty_score": optimized.difficulty_score,
                "difficulty_breakdown": optimized.difficulty_breakdown,
                "params": params,
            },
            "improvement": optimized.difficulty_score - standard.difficulty_score,
        }


def _correlation(x: np.ndarray, y: np.ndarray) -> float:
    if x.size == 0:
        return 0.0
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = float(np.sqrt((dx * dx).sum() * (dy * dy).sum()))
    if denominator == 0:
        return 0.0
    return float((dx * dy).sum() / denominator)


def optimize(
    width: int,
    height: int,
    cell_size: int,
    seed: int,
    attempts: int = 10,
    *,
    config: Optional[OptimizerConfig] = None,
    weights: Optional[ScoringWeights] = None,
) -> Maze:
    """Best-of-``attempts`` maze for ``seed``; never worse than plain generation."""

    config = replace(config or OptimizerConfig(), generation_attempts=attempts)
    optimizer = MazeOptimizer(width, height, cell_size, seed, config, weights=weights)
    return optimizer.optimize().maze


class OptimizedMazeGenerator(AbstractMazeGenerator[Maze]):
    """Batch generator returning optimized mazes."""

    def __init__(
        self,
        *,
        width: int = 10,
        height: int = 10,
        cell_size: int = 20,
        attempts: int = 30,
        config: Optional[OptimizerConfig] = None,
        weights: Optional[ScoringWeights] = None,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(width=width, height=height, cell_size=cell_size, seed=seed)
        self.attempts = attempts
        self.config = config
        self.weights = weights

    def create_maze(self, seed: int) -> Maze:
        config = replace(self.config or OptimizerConfig(), generation_attempts=self.attempts)
        optimizer = MazeOptimizer(
            self.width, self.height, self.cell_size, seed, config, weights=self.weights
        )
        return optimizer.optimize().maze


__all__ = [
    "MazeOptimizer",
    "OptimizationCandidate",
    "OptimizedMazeGenerator",
    "OptimizerConfig",
    "ParameterRange",
    "default_parameter_ranges",
    "optimize",
]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search for a harder maze and print it as JSON")
    parser.add_argument("--width", type=int, default=10)
    parser.add_argument("--height", type=int, default=10)
    parser.add_argument("--cell-size", type=int, default=20)
    parser.add_argument("--seed", type=int, default=None, help="Base seed (default: random)")
    parser.add_argument("--attempts", type=int, default=10, help="Number of enhancement trials")
    parser.add_argument("--threshold", type=float, default=95.0, help="Skip/early-stop difficulty threshold")
    parser.add_argument("--stats", action="store_true", help="Include parameter statistics in the output")
    parser.add_argument("--verbose", action="store_true", help="Log optimization details to stderr")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    seed = args.seed if args.seed is not None else random.randint(1, MAX_RANDOM_SEED - 1)
    config = OptimizerConfig(
        generation_attempts=args.attempts,
        early_termination_threshold=args.threshold,
        baseline_skip_threshold=args.threshold,
    )
    optimizer = MazeOptimizer(args.width, args.height, args.cell_size, seed, config)
    result = optimizer.optimize()
    payload = {"candidate": result.to_dict(), "maze": result.maze.to_dict()}
    if args.stats:
        payload["parameter_statistics"] = optimizer.parameter_statistics()
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
