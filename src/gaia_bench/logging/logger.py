"""Structured JSON benchmark logger."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

from gaia_bench.agent.base import StepRecord
from gaia_bench.benchmark.base import TaskResult


class BenchmarkLogger:
    """Logs all benchmark run events as structured JSON lines."""

    def __init__(self, run_id: str, output_dir: str = "benchmark-results"):
        self.run_id = run_id
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = self.output_dir / f"{run_id}.jsonl"
        self._events: list[dict[str, Any]] = []

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    def _write_event(self, event: dict[str, Any]) -> None:
        event["run_id"] = self.run_id
        event["timestamp"] = time.time()
        self._events.append(event)
        with open(self.log_path, "a") as f:
            f.write(json.dumps(event, default=str) + "\n")

    def log_run_start(self, dataset: str, config: dict[str, Any]) -> None:
        self._write_event({
            "event": "run_start",
            "dataset": dataset,
            "config": config,
        })

    def log_checkpoint(self, state: str, completed: int, remaining: int) -> None:
        self._write_event({
            "event": "checkpoint",
            "state": state,
            "completed": completed,
            "remaining": remaining,
        })

    def log_task_start(self, task_id: str, level: int, categories: list[str]) -> None:
        self._write_event({
            "event": "task_start",
            "task_id": task_id,
            "level": level,
            "categories": categories,
        })

    def log_tool_step(self, task_id: str, step_index: int, step: StepRecord) -> None:
        self._write_event({
            "event": "tool_step",
            "task_id": task_id,
            "step_index": step_index,
            "kind": step.kind,
            "tools": [tc.tool_name for tc in step.tool_calls],
        })

    def log_task_end(self, result: TaskResult) -> None:
        self._write_event({
            "event": "task_end",
            "task_id": result.task_id,
            "correct": result.correct,
            "duration_ms": result.duration_ms,
            "steps": result.steps,
            "tools_used": result.tools_used or [],
            "error": result.error,
        })

    def log_ledger_update(self, added: int, updated: int, removed: int, total_wrong: int) -> None:
        self._write_event({
            "event": "ledger_update",
            "added": added,
            "updated": updated,
            "removed": removed,
            "total_wrong": total_wrong,
        })

    def log_docs_update_failed(self, error: str) -> None:
        self._write_event({
            "event": "docs_update_failed",
            "error": error[:1000],
        })

    def log_run_end(self, summary: dict[str, Any]) -> None:
        self._write_event({
            "event": "run_end",
            "summary": summary,
        })
