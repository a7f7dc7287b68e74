"""Benchmark run orchestration: selection, resume, evaluation, persistence."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from typing import Any

from gaia_bench.agent.base import Agent
from gaia_bench.analytics import generate_analysis_report
from gaia_bench.benchmark.base import Task, TaskResult
from gaia_bench.benchmark.categorize import categorize_task
from gaia_bench.benchmark.gaia import load_gaia_tasks
from gaia_bench.checkpoint import RunState, plan_resume
from gaia_bench.config import BenchmarkConfig, DatasetSplit
from gaia_bench.docs_sink import DocumentationSink, benchmark_command, details_link
from gaia_bench.evaluation.evaluator import evaluate_task
from gaia_bench.evaluation.reflection import evaluate_task_with_reflection
from gaia_bench.logging.logger import BenchmarkLogger
from gaia_bench.reporter import (
    display_analysis_report,
    display_summary,
    display_wrong_answers_summary,
    save_analysis_report,
)
from gaia_bench.storage.results import ResultStore, file_timestamp, utc_now
from gaia_bench.storage.wrong_answers import MergeStats, WrongAnswersLedger

WRONG_ANSWERS_DATASET = "validation-wrong-answers"
WRONG_ANSWERS_COMMAND = "run_wrong_answers"


class BenchmarkRunner:
    """Runs GAIA tasks one at a time against a single agent."""

    def __init__(
        self,
        config: BenchmarkConfig,
        agent: Agent,
        load_tasks: Callable[[str], list[Task]] = load_gaia_tasks,
        docs_sink: DocumentationSink | None = None,
        logger: BenchmarkLogger | None = None,
    ):
        self.config = config
        self.agent = agent
        self.load_tasks = load_tasks
        self.docs_sink = docs_sink
        self.logger = logger or BenchmarkLogger(
            f"gaia-{config.dataset.value}-{file_timestamp(utc_now())}",
            config.output_dir,
        )
        self.ledger = WrongAnswersLedger(config.output_dir)
        self.state = RunState.FRESH

    def _store(self, dataset: str) -> ResultStore:
        return ResultStore(
            self.config.output_dir,
            dataset,
            agent_name=self.agent.name,
            model=self.agent.model,
        )

    def select_tasks(self, tasks: list[Task]) -> list[Task]:
        """Apply level, category, then random-pick or limit filters."""
        selected = list(tasks)
        if self.config.level:
            selected = [t for t in selected if t.level == self.config.level]
            print(f"Filtered to level {self.config.level}: {len(selected)} tasks")

        if self.config.category:
            category = self.config.category.value
            selected = [t for t in selected if category in categorize_task(t)]
            print(f"Filtered to category \"{category}\": {len(selected)} tasks")

        if self.config.random and selected:
            picked = random.Random(self.config.seed).choice(selected)
            selected = [picked]
            print(f"Selected random task: {picked.task_id}")
        elif self.config.limit:
            selected = selected[:self.config.limit]
            print(f"Limited to {len(selected)} tasks")
        return selected

    async def _evaluate(self, task: Task) -> TaskResult:
        if self.config.reflection:
            return await evaluate_task_with_reflection(
                task,
                self.agent,
                verbose=self.config.verbose,
                reflection_style=self.config.reflection_style,
                max_reflections=self.config.max_reflections,
            )
        return await evaluate_task(
            task,
            self.agent,
            verbose=self.config.verbose,
            stream=self.config.stream,
            poll_interval=self.config.poll_interval_seconds,
            logger=self.logger,
        )

    async def run(self) -> list[TaskResult]:
        """Run the configured benchmark; returns every result of the run."""
        dataset = self.config.dataset.value
        self.logger.log_run_start(dataset, self.config.model_dump(mode="json"))

        all_tasks = self.load_tasks(dataset)
        selected = self.select_tasks(all_tasks)

        store = self._store(dataset)
        plan = plan_resume(selected, store, self.config.resume, self.logger)
        self.state = plan.state
        results = list(plan.carried_results)

        print(f"\nRunning {len(plan.remaining)} tasks...\n")
        self.state = RunState.RUNNING
        for i, task in enumerate(plan.remaining):
            completed, total = plan.progress(i)
            categories = categorize_task(task)
            print(f"\n[{completed}/{total}] Task {task.task_id} "
                  f"(Level {task.level}, {', '.join(categories)})")
            self.logger.log_task_start(task.task_id, task.level, categories)

            result = await self._evaluate(task)
            results.append(result)
            self.logger.log_task_end(result)
            _print_task_status(result)

            store.save_incremental(results)

            if i < len(plan.remaining) - 1 and self.config.delay_seconds > 0:
                await asyncio.sleep(self.config.delay_seconds)

        print()
        self._finalize(results, all_tasks, store, benchmark_command(self.config))
        return results

    async def run_wrong_answers(self) -> list[TaskResult]:
        """Retry only the tasks currently in the wrong-answers ledger."""
        collection = self.ledger.load()
        if not collection.tasks:
            print("\nNo wrong answers to retry. Run the full benchmark first.")
            return []

        display_wrong_answers_summary(collection)
        self.logger.log_run_start(WRONG_ANSWERS_DATASET, self.config.model_dump(mode="json"))

        all_tasks = self.load_tasks(DatasetSplit.VALIDATION.value)
        tasks = [t for t in all_tasks if t.task_id in collection.tasks]
        if self.config.level:
            tasks = [t for t in tasks if t.level == self.config.level]
            print(f"Filtered to level {self.config.level}: {len(tasks)} tasks")
        if self.config.limit:
            tasks = tasks[:self.config.limit]
            print(f"Limited to {len(tasks)} tasks")

        print(f"\nRetrying {len(tasks)} previously wrong tasks...\n")
        self.state = RunState.RUNNING
        store = self._store(WRONG_ANSWERS_DATASET)
        results: list[TaskResult] = []
        for i, task in enumerate(tasks):
            entry = collection.tasks[task.task_id]
            print(f"\n[{i + 1}/{len(tasks)}] Task {task.task_id} (Level {task.level})")
            print(f"Previous attempts: {entry.attempt_count}")
            print(f"Last failed: {entry.last_failed_at}")
            self.logger.log_task_start(task.task_id, task.level, categorize_task(task))

            result = await self._evaluate(task)
            results.append(result)
            self.logger.log_task_end(result)
            _print_task_status(result)

            if i < len(tasks) - 1 and self.config.delay_seconds > 0:
                await asyncio.sleep(self.config.delay_seconds)

        print()
        self._finalize(results, all_tasks, store, WRONG_ANSWERS_COMMAND)
        display_wrong_answers_summary(self.ledger.load())
        return results

    def _finalize(
        self,
        results: list[TaskResult],
        tasks: list[Task],
        store: ResultStore,
        command: str,
    ) -> None:
        """Final snapshot, ledger merge, documentation, analytics, summary."""
        self.state = RunState.COMPLETED
        store.save_final(results)

        stats = MergeStats()
        ledger = self.ledger.update(results, tasks, stats=stats)
        self.logger.log_ledger_update(stats.added, stats.updated, stats.removed,
                                      ledger.metadata.total_wrong)
        if store.latest_path.exists():
            store.mark_completed(results)

        if self.docs_sink is not None:
            try:
                self.docs_sink.update(
                    command,
                    store.build_metadata(results, incremental=False),
                    self.config.providers.summary_text(),
                    details_link(command, store.dataset),
                )
            except Exception as e:
                print(f"WARNING: failed to update documentation: {e}")
                self.logger.log_docs_update_failed(str(e))

        if results:
            report = generate_analysis_report(results, tasks)
            display_analysis_report(report)
            save_analysis_report(report, self.config.output_dir, store.dataset)

        display_summary(results)
        self.logger.log_run_end(_run_summary(results))


def _print_task_status(result: TaskResult) -> None:
    if result.error:
        status = f"ERROR: {result.error}"
    else:
        status = "CORRECT" if result.correct else "WRONG"
    print(f"  {status} | Steps: {result.steps} | Time: {result.duration_ms / 1000:.1f}s")


def _run_summary(results: list[TaskResult]) -> dict[str, Any]:
    total = len(results)
    correct = sum(1 for r in results if r.correct)
    return {
        "total": total,
        "correct": correct,
        "errors": sum(1 for r in results if r.error),
        "accuracy": round(correct / total * 100, 2) if total else 0.0,
    }
