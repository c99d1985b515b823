#!/usr/bin/env python3
"""
Progress demo: many slow jobs, a few at a time, each drawing its own line.

Usage:
    python -m jobpool.demo --count 50 --max-at-once 20
    python -m jobpool.demo --config pool.yaml --rounds 1
"""

from __future__ import annotations

import argparse
import asyncio
import random
from typing import List, Optional

from dotenv import load_dotenv

from .config import PoolConfig, load_pool_config, pool_config_from_env
from .parallel import run_batch
from .utils import StatusLineWriter, setup_logging

COLORS = {
    "blue": "\x1b[34m",
    "yellow": "\x1b[33m",
    "green": "\x1b[32m",
}
RESET_COLOR = "\x1b[0m"
STEPS = 10


def colorize(step: int, message: str) -> str:
    """Color a progress message by how far along it is."""
    if step < 3:
        return message
    if step < 7:
        color = COLORS["blue"]
    elif step < STEPS:
        color = COLORS["yellow"]
    else:
        color = COLORS["green"]
    return f"{color}{message}{RESET_COLOR}"


async def slow_job(writer: StatusLineWriter, value: int, index: int, step_delay: float) -> int:
    writer.set_line(index, f"{value}: 0%")
    for step in range(1, STEPS + 1):
        await asyncio.sleep(random.random() * step_delay)
        writer.set_line(index, f"{value}: {colorize(step, f'{step * 10}%')}")
    return value


async def run_rounds(
    inputs: List[int],
    max_at_once: int,
    rounds: int,
    pause: float,
    step_delay: float,
    writer: StatusLineWriter,
    progress_interval: int = 10,
) -> None:
    async def job(value: int, index: int) -> int:
        return await slow_job(writer, value, index, step_delay)

    for round_number in range(1, rounds + 1):
        await run_batch(
            job,
            inputs,
            max_at_once=max_at_once,
            progress_interval=progress_interval,
        )

        if round_number < rounds:
            print(
                f"Round {round_number} of jobs completed. "
                f"Next round starting in {pause:g} seconds."
            )
            await asyncio.sleep(pause)
            writer.reset()

    print("All done!")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render progress of concurrent jobs")
    parser.add_argument("--count", type=int, default=50, help="Number of jobs")
    parser.add_argument("--max-at-once", type=int, default=None, help="Concurrency cap")
    parser.add_argument("--rounds", type=int, default=2, help="Times to run the whole set")
    parser.add_argument("--pause", type=float, default=3.0, help="Seconds between rounds")
    parser.add_argument(
        "--step-delay",
        type=float,
        default=1.0,
        help="Upper bound in seconds for each of the ten job steps",
    )
    parser.add_argument("--config", default=None, help="YAML pool config file")
    parser.add_argument("--log-level", default=None, help="Logging level")
    return parser


def resolve_config(args: argparse.Namespace) -> PoolConfig:
    """Defaults, then the YAML file, then JOBPOOL_* variables, then flags."""
    if args.config:
        config = load_pool_config(args.config)
    else:
        config = PoolConfig(max_at_once=20, log_level="WARNING")
    config = pool_config_from_env(config)
    if args.max_at_once is not None:
        config.max_at_once = args.max_at_once
    if args.log_level is not None:
        config.log_level = args.log_level
    return config


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = resolve_config(args)
    setup_logging(config.log_level, config.log_file)

    inputs = [i + 1 for i in range(args.count)]
    asyncio.run(
        run_rounds(
            inputs,
            max_at_once=config.max_at_once,
            rounds=args.rounds,
            pause=args.pause,
            step_delay=args.step_delay,
            writer=StatusLineWriter(),
            progress_interval=config.progress_interval,
        )
    )


if __name__ == "__main__":
    main()
