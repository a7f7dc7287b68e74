"""Cross-run ledger of tasks the agent currently gets wrong.

The ledger is one JSON file per output directory, read and rewritten
whole. Two processes merging into the same directory at once can lose
updates; runs against one output directory must not overlap.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pydantic import Field, ValidationError

from gaia_bench.benchmark.base import PersistedModel, ResultSummary, Task, TaskResult

from .results import utc_now

WRONG_ANSWERS_FILE = "wrong-answers.json"


class WrongAnswerEntry(PersistedModel):
    task_id: str
    question: str
    expected_answer: str | None = None
    agent_answer: str
    level: int
    first_failed_at: str
    last_failed_at: str
    attempt_count: int = 1
    error: str | None = None
    steps: int | None = None
    tools_used: list[str] | None = None
    summary: ResultSummary | None = None


class LedgerMetadata(PersistedModel):
    total_wrong: int = 0
    last_updated: str = Field(default_factory=utc_now)


class WrongAnswersCollection(PersistedModel):
    metadata: LedgerMetadata = Field(default_factory=LedgerMetadata)
    tasks: dict[str, WrongAnswerEntry] = Field(default_factory=dict)


@dataclass
class MergeStats:
    added: int = 0
    updated: int = 0
    removed: int = 0


def merge_results(
    results: list[TaskResult],
    task_lookup: Mapping[str, Task],
    ledger: WrongAnswersCollection,
    now: str | None = None,
    stats: MergeStats | None = None,
) -> WrongAnswersCollection:
    """Fold one run's results into the ledger and return the updated copy.

    Correct results delete their entry; incorrect ones upsert it, keeping
    the existing first_failed_at and bumping attempt_count. Results whose
    task is unknown are skipped.
    """
    now = now or utc_now()
    stats = stats if stats is not None else MergeStats()
    tasks = dict(ledger.tasks)

    for result in results:
        task = task_lookup.get(result.task_id)
        if task is None:
            continue

        existing = tasks.get(result.task_id)
        if result.correct:
            if existing is not None:
                del tasks[result.task_id]
                stats.removed += 1
                print(f"Removed {result.task_id} from wrong answers (now correct)")
            continue

        entry = WrongAnswerEntry(
            task_id=result.task_id,
            question=task.question,
            expected_answer=result.expected_answer,
            agent_answer=result.answer,
            level=task.level,
            first_failed_at=existing.first_failed_at if existing else now,
            last_failed_at=now,
            attempt_count=existing.attempt_count + 1 if existing else 1,
            error=result.error,
            steps=result.steps,
            tools_used=result.tools_used,
            summary=result.summary,
        )
        tasks[result.task_id] = entry
        if existing:
            stats.updated += 1
            print(f"Updated wrong answer {result.task_id} (attempt {entry.attempt_count})")
        else:
            stats.added += 1
            print(f"Added new wrong answer {result.task_id}")

    return WrongAnswersCollection(
        metadata=LedgerMetadata(total_wrong=len(tasks), last_updated=now),
        tasks=tasks,
    )


class WrongAnswersLedger:
    """Load/save repository for the wrong-answers collection."""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)

    @property
    def path(self) -> Path:
        return self.output_dir / WRONG_ANSWERS_FILE

    def load(self) -> WrongAnswersCollection:
        """Load the ledger; an absent or malformed file yields an empty one."""
        if not self.path.exists():
            return WrongAnswersCollection()
        try:
            return WrongAnswersCollection.model_validate_json(self.path.read_text())
        except (OSError, ValueError, ValidationError) as e:
            print(f"WARNING: failed to load wrong answers from {self.path}: {e}")
            return WrongAnswersCollection()

    def save(self, collection: WrongAnswersCollection) -> WrongAnswersCollection:
        """Write the ledger, recomputing total_wrong from the entries."""
        collection = collection.model_copy(update={
            "metadata": LedgerMetadata(total_wrong=len(collection.tasks), last_updated=utc_now()),
        })
        self.output_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(collection.to_json_dict(), f, indent=2, ensure_ascii=False)
        return collection

    def task_ids(self) -> list[str]:
        return list(self.load().tasks)

    def update(
        self,
        results: list[TaskResult],
        tasks: list[Task],
        stats: MergeStats | None = None,
    ) -> WrongAnswersCollection:
        """Merge a finished run into the persisted ledger."""
        merged = merge_results(results, {t.task_id: t for t in tasks}, self.load(), stats=stats)
        saved = self.save(merged)

        if saved.tasks:
            print(f"\nWrong answers collection: {len(saved.tasks)} tasks")
            print(f"  File: {self.path}")
        else:
            print("\nNo wrong answers! All tasks passed.")
        return saved
