"""Maze generation and difficulty optimization toolkit."""

__all__ = [
    "AbstractMazeGenerator",
    "AbstractMazeEvaluator",
    "MazeConfigurationError",
    "MazeGenerationError",
    "Maze",
    "MazeGenerator",
    "EnhancedMazeGenerator",
    "EnhancementParams",
    "MazeOptimizer",
    "OptimizedMazeGenerator",
    "MazePathEvaluator",
    "PathEvaluationResult",
    "DifficultyBreakdown",
    "find_solution_path",
    "generate",
    "optimize",
    "score_difficulty",
]

from .base import (
    AbstractMazeGenerator,
    AbstractMazeEvaluator,
    MazeConfigurationError,
    MazeGenerationError,
)
from .maze import (
    DifficultyBreakdown,
    EnhancedMazeGenerator,
    EnhancementParams,
    Maze,
    MazeGenerator,
    MazeOptimizer,
    MazePathEvaluator,
    OptimizedMazeGenerator,
    PathEvaluationResult,
    find_solution_path,
    generate,
    optimize,
    score_difficulty,
)
