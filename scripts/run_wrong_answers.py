#!/usr/bin/env python3
"""Retry the tasks recorded in the wrong-answers ledger."""

from __future__ import annotations

import argparse
import asyncio
import sys
import traceback

from dotenv import load_dotenv
load_dotenv()

from gaia_bench.agent import create_agent
from gaia_bench.config import BenchmarkConfig, load_config
from gaia_bench.runner import BenchmarkRunner

from run_benchmark import check_api_key


def main() -> None:
    parser = argparse.ArgumentParser(description="Retry previously wrong GAIA tasks")
    parser.add_argument("--output", help="Output directory holding wrong-answers.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print per-task details")
    parser.add_argument("--stream", action="store_true", help="Stream agent output")
    parser.add_argument("--limit", type=int, help="Max number of tasks to retry")
    parser.add_argument("--level", type=int, choices=[1, 2, 3], help="Only retry tasks of this level")
    parser.add_argument("--config", help="Path to benchmark YAML config")
    args = parser.parse_args()

    config = load_config(args.config) if args.config else BenchmarkConfig()
    update = {
        k: v for k, v in {
            "output_dir": args.output,
            "limit": args.limit,
            "level": args.level,
        }.items() if v is not None
    }
    if args.verbose:
        update["verbose"] = True
    if args.stream:
        update["stream"] = True
    config = config.model_validate({**config.model_dump(), **update})

    print(f"\n{'=' * 60}")
    print("GAIA Benchmark | retrying wrong answers")
    print(f"Agent: {config.agent.provider} / {config.agent.model}")
    print(f"Output: {config.output_dir}")
    print(f"{'=' * 60}\n")
    if not check_api_key(config):
        sys.exit(1)

    runner = BenchmarkRunner(config, create_agent(config.agent))
    try:
        asyncio.run(runner.run_wrong_answers())
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)
    except Exception as e:
        print(f"\nRetry run failed: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
