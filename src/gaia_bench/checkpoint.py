"""Resume planning across interrupted runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from gaia_bench.benchmark.base import Task, TaskResult
from gaia_bench.logging.logger import BenchmarkLogger
from gaia_bench.storage.results import ResultStore


class RunState(str, Enum):
    FRESH = "fresh"
    RESUMING = "resuming"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class ResumePlan:
    """Results carried over from a checkpoint plus the tasks still to run."""
    state: RunState
    remaining: list[Task]
    carried_results: list[TaskResult] = field(default_factory=list)

    @property
    def total_tasks(self) -> int:
        return len(self.carried_results) + len(self.remaining)

    def progress(self, index: int) -> tuple[int, int]:
        """(completed so far, total) after finishing remaining[index]."""
        return len(self.carried_results) + index + 1, self.total_tasks


def plan_resume(
    tasks: list[Task],
    store: ResultStore,
    resume: bool,
    logger: BenchmarkLogger | None = None,
) -> ResumePlan:
    """Drop tasks already answered in the latest snapshot when resuming.

    A missing or unreadable snapshot, or one from a run that already
    finished, starts the run fresh.
    """
    checkpoint = store.load_checkpoint() if resume else None
    if not checkpoint:
        plan = ResumePlan(state=RunState.FRESH, remaining=list(tasks))
    else:
        completed = {r.task_id for r in checkpoint}
        plan = ResumePlan(
            state=RunState.RESUMING,
            remaining=[t for t in tasks if t.task_id not in completed],
            carried_results=checkpoint,
        )
        print(f"Resuming from checkpoint: {len(checkpoint)} tasks already completed")
        print(f"Remaining tasks: {len(plan.remaining)}")

    if logger:
        logger.log_checkpoint(plan.state.value, len(plan.carried_results), len(plan.remaining))
    return plan
