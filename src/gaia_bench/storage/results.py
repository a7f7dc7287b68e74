"""Results snapshots: the crash-safe "latest" checkpoint and final snapshots.

Every save rewrites the whole file. This is only safe with a single writer
per output directory.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from gaia_bench.benchmark.base import ResultsSnapshot, RunMetadata, TaskResult


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def file_timestamp(iso_timestamp: str) -> str:
    return iso_timestamp.replace(":", "-").replace(".", "-").replace("+", "_")


class ResultStore:
    """Persists the result list of one dataset-scoped run."""

    def __init__(
        self,
        output_dir: str | Path,
        dataset: str,
        agent_name: str = "gaia-bench",
        model: str = "",
    ):
        self.output_dir = Path(output_dir)
        self.dataset = dataset
        self.agent_name = agent_name
        self.model = model

    @property
    def latest_path(self) -> Path:
        return self.output_dir / f"gaia-{self.dataset}-latest.json"

    def load_snapshot(self) -> ResultsSnapshot | None:
        """Load the latest snapshot; None if absent or unreadable."""
        if not self.latest_path.exists():
            return None
        try:
            return ResultsSnapshot.model_validate_json(self.latest_path.read_text())
        except (OSError, ValueError, ValidationError) as e:
            print(f"WARNING: could not load checkpoint {self.latest_path}: {e}")
            return None

    def load_checkpoint(self) -> list[TaskResult] | None:
        """Results of an unfinished run to resume from, if any."""
        snapshot = self.load_snapshot()
        if snapshot is None:
            return None
        if snapshot.metadata is not None and snapshot.metadata.completed:
            print(f"Latest snapshot {self.latest_path} is from a finished run, starting fresh")
            return None
        return list(snapshot.results)

    def save_incremental(self, results: list[TaskResult]) -> Path:
        """Overwrite the latest snapshot with the full result list so far."""
        return self._write(self.latest_path, results, incremental=True)

    def mark_completed(self, results: list[TaskResult]) -> Path:
        """Flag the latest snapshot as finished so it is not resumed and re-merged."""
        return self._write(self.latest_path, results, incremental=True, completed=True)

    def save_final(self, results: list[TaskResult]) -> Path:
        """Write a new timestamped snapshot for the finished run."""
        now = utc_now()
        path = self.output_dir / f"gaia-{self.dataset}-{file_timestamp(now)}.json"
        return self._write(path, results, incremental=False, timestamp=now)

    def build_metadata(
        self,
        results: list[TaskResult],
        incremental: bool,
        timestamp: str | None = None,
        completed: bool = False,
    ) -> RunMetadata:
        total = len(results)
        correct = sum(1 for r in results if r.correct)
        return RunMetadata(
            dataset=self.dataset,
            timestamp=timestamp or utc_now(),
            total=total,
            correct=correct,
            accuracy=round(correct / total * 100, 2) if total else 0.0,
            agent=self.agent_name,
            model=self.model,
            incremental=incremental,
            completed=completed,
        )

    def _write(
        self,
        path: Path,
        results: list[TaskResult],
        incremental: bool,
        timestamp: str | None = None,
        completed: bool = False,
    ) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        snapshot = ResultsSnapshot(
            metadata=self.build_metadata(results, incremental, timestamp, completed),
            results=results,
        )
        with open(path, "w") as f:
            json.dump(snapshot.to_json_dict(), f, indent=2, ensure_ascii=False)

        if incremental and not completed:
            print(f"\rProgress saved: {len(results)} tasks completed", end="", flush=True)
        else:
            print(f"Results saved to: {path}")
        return path
