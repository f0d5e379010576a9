#!/usr/bin/env python3
"""Generate a batch of optimized mazes and sort the metadata by difficulty."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mazecraft.maze import OptimizedMazeGenerator


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--count", type=int, default=10, help="Number of mazes to generate")
    parser.add_argument("--width", type=int, default=10)
    parser.add_argument("--height", type=int, default=10)
    parser.add_argument("--cell-size", type=int, default=20)
    parser.add_argument(
        "--attempts",
        type=int,
        default=30,
        help="Optimizer trials per maze",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/mazes/mazes.json"),
        help="Path for the difficulty-sorted metadata JSON",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional RNG seed used to draw the per-maze seeds",
    )
    parser.add_argument("--verbose", action="store_true", help="Log optimizer details to stderr")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    if args.count <= 0:
        raise ValueError(f"--count must be positive, got {args.count}")

    generator = OptimizedMazeGenerator(
        width=args.width,
        height=args.height,
        cell_size=args.cell_size,
        attempts=args.attempts,
        seed=args.seed,
    )
    args.output.parent.mkdir(parents=True, exist_ok=True)

    records: List[dict] = []
    for index in range(1, args.count + 1):
        maze = generator.create_random_maze()
        record = generator.record_to_dict(maze)
        records.append(record)
        print(
            f"[{index}/{args.count}] seed={maze.seed} "
            f"difficulty={maze.difficulty_score} ({maze.difficulty_label()}) "
            f"path={maze.solution_length}"
        )

    records.sort(key=lambda item: (item["difficulty_score"], item["seed"]))

    args.output.write_text(json.dumps(records, indent=2), encoding="utf-8")
    print(f"Wrote {len(records)} mazes to {args.output}")


if __name__ == "__main__":
    main()
