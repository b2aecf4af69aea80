"""
Performance Benchmark
=====================

Measures simulation throughput for performance tuning.

Usage:
    python -m tools.benchmark_speed [--steps S] [--jump-rate P]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import numpy as np

from ball_runner.runner_core.config_loader import load_config
from ball_runner.runner_core.env_gym import ACTIONS, BallRunnerEnv
from ball_runner.runner_core.game import CoreGame
from ball_runner.runner_core.rules import JumpDirection

logger = logging.getLogger(__name__)

DIRECTIONS = (JumpDirection.NONE, JumpDirection.LEFT, JumpDirection.RIGHT)


def benchmark_single_env(
    num_steps: int = 1000,
    seed: int = 42,
    jump_rate: float = 0.08
) -> dict:
    """
    Benchmark single environment performance.

    Args:
        num_steps: Number of steps to run.
        seed: Random seed.
        jump_rate: Probability of a jump action per step.

    Returns:
        Dict with timing results.
    """
    env = BallRunnerEnv()
    rng = np.random.default_rng(seed)

    def sample_action() -> int:
        if rng.random() >= jump_rate:
            return 0
        return int(rng.integers(1, len(ACTIONS)))

    # Warmup
    env.reset(seed=seed)
    for _ in range(10):
        _, _, terminated, truncated, _ = env.step(sample_action())
        if terminated or truncated:
            env.reset()

    # Benchmark
    env.reset(seed=seed)
    episodes = 0
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(sample_action())
        if terminated or truncated:
            episodes += 1
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "single",
        "num_steps": num_steps,
        "episodes": episodes,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_core_game(
    num_steps: int = 1000,
    seed: int = 42,
    jump_rate: float = 0.08
) -> dict:
    """
    Benchmark raw CoreGame without Gym overhead.

    Args:
        num_steps: Number of ticks.
        seed: Random seed.
        jump_rate: Probability of a jump per tick.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    game = CoreGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)

    game.reset(seed=seed)
    episodes = 0
    start = time.perf_counter()

    for _ in range(num_steps):
        if rng.random() < jump_rate:
            game.jump(DIRECTIONS[int(rng.integers(len(DIRECTIONS)))])
        result = game.tick()
        if result.game_over:
            episodes += 1
            game.reset()

    elapsed = time.perf_counter() - start

    return {
        "mode": "core_game",
        "num_steps": num_steps,
        "episodes": episodes,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def run_all_benchmarks(steps: int = 5000, jump_rate: float = 0.08) -> list:
    """Run both benchmarks and log a summary table."""
    results = [
        benchmark_core_game(num_steps=steps, jump_rate=jump_rate),
        benchmark_single_env(num_steps=steps, jump_rate=jump_rate),
    ]

    logger.info("%-12s %10s %12s %10s", "Mode", "Episodes", "Steps/s", "ms/step")
    for r in results:
        logger.info(
            "%-12s %10d %12.1f %10.4f",
            r["mode"], r["episodes"], r["steps_per_second"], r["ms_per_step"]
        )
    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Ball Runner performance")
    parser.add_argument("--steps", type=int, default=5000, help="Steps per benchmark")
    parser.add_argument("--jump-rate", type=float, default=0.08, help="Jump probability per step")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    steps = 500 if args.quick else args.steps
    run_all_benchmarks(steps=steps, jump_rate=args.jump_rate)

    return 0


if __name__ == "__main__":
    sys.exit(main())
