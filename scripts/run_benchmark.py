#!/usr/bin/env python3
"""CLI entry point for running the GAIA benchmark (sequential, resumable)."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
import traceback

from dotenv import load_dotenv
load_dotenv()

from gaia_bench.agent import create_agent
from gaia_bench.config import BenchmarkConfig, Category, DatasetSplit, load_config
from gaia_bench.runner import BenchmarkRunner

API_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def build_config(args: argparse.Namespace) -> BenchmarkConfig:
    """Config file values, overridden by whatever flags were given."""
    config = load_config(args.config) if args.config else BenchmarkConfig()
    overrides = {
        "dataset": DatasetSplit.TEST if args.test else None,
        "level": args.level,
        "category": Category(args.category) if args.category else None,
        "limit": args.limit,
        "seed": args.seed,
        "output_dir": args.output,
    }
    flags = {
        "random": args.random,
        "stream": args.stream,
        "verbose": args.verbose,
        "resume": args.resume,
        "reflection": args.reflection,
    }
    update = {k: v for k, v in overrides.items() if v is not None}
    update.update({k: True for k, v in flags.items() if v})
    return config.model_validate({**config.model_dump(), **update})


def check_api_key(config: BenchmarkConfig) -> bool:
    var = API_KEY_VARS.get(config.agent.provider)
    if var is None or config.agent.api_key or config.agent.base_url:
        return True
    if not os.environ.get(var):
        print(f"ERROR: {var} is not set. Add it to your .env file.")
        return False
    return True


def print_banner(config: BenchmarkConfig) -> None:
    print(f"\n{'=' * 60}")
    print(f"GAIA Benchmark | dataset: {config.dataset.value}")
    print(f"Agent: {config.agent.provider} / {config.agent.model}")
    print(f"Providers: {config.providers.summary_text()}")
    mode = []
    if config.stream:
        mode.append("streaming")
    if config.reflection:
        mode.append(f"reflection ({config.reflection_style.value})")
    if config.resume:
        mode.append("resume")
    if mode:
        print(f"Mode: {', '.join(mode)}")
    print(f"Output: {config.output_dir}")
    print(f"{'=' * 60}\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the GAIA benchmark")
    parser.add_argument("--test", action="store_true", help="Use the test split instead of validation")
    parser.add_argument("--level", type=int, choices=[1, 2, 3], help="Only run tasks of this level")
    parser.add_argument("--category", choices=[c.value for c in Category],
                        help="Only run tasks of this category")
    parser.add_argument("--limit", type=int, help="Max number of tasks to run")
    parser.add_argument("--random", action="store_true", help="Run one randomly chosen task")
    parser.add_argument("--seed", type=int, help="Seed for --random")
    parser.add_argument("--stream", action="store_true", help="Stream agent output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print per-task details")
    parser.add_argument("--resume", action="store_true", help="Skip tasks in the latest checkpoint")
    parser.add_argument("--reflection", action="store_true", help="Evaluate with self-reflection")
    parser.add_argument("--output", help="Output directory for results")
    parser.add_argument("--config", help="Path to benchmark YAML config")
    args = parser.parse_args()

    config = build_config(args)
    print_banner(config)
    if not check_api_key(config):
        sys.exit(1)

    runner = BenchmarkRunner(config, create_agent(config.agent))
    try:
        results = asyncio.run(runner.run())
    except KeyboardInterrupt:
        print("\nInterrupted. Re-run with --resume to continue from the latest checkpoint.")
        sys.exit(130)
    except Exception as e:
        print(f"\nBenchmark failed: {e}")
        traceback.print_exc()
        sys.exit(1)

    if not results:
        print("No tasks were run.")


if __name__ == "__main__":
    main()
