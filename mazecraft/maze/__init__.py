"""Maze generation, difficulty scoring, optimization and path evaluation."""

__all__ = [
    "Cell",
    "DifficultyBreakdown",
    "DifficultyScorer",
    "EnhancedMazeGenerator",
    "EnhancementParams",
    "GenerationSession",
    "Grid",
    "Maze",
    "MazeGenerator",
    "MazeOptimizer",
    "MazePathEvaluator",
    "Opening",
    "OptimizedMazeGenerator",
    "OptimizerConfig",
    "ParkMillerRandom",
    "PathEvaluationResult",
    "ScoringWeights",
    "find_solution_path",
    "generate",
    "optimize",
    "score_difficulty",
]

from .grid import Cell, Grid
from .rng import ParkMillerRandom
from .session import GenerationSession
from .model import Maze, Opening
from .pathfinding import find_solution_path
from .scorer import DifficultyBreakdown, DifficultyScorer, ScoringWeights, score_difficulty
from .generator import MazeGenerator, generate
from .enhanced import EnhancedMazeGenerator, EnhancementParams
from .optimizer import MazeOptimizer, OptimizedMazeGenerator, OptimizerConfig, optimize
from .evaluator import MazePathEvaluator, PathEvaluationResult
