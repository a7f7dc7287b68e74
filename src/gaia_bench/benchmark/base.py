"""Base benchmark task and result data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class TaskFile:
    """A file attached to a benchmark task."""
    name: str
    path: str
    mime_type: str = "application/octet-stream"
    inline_data: str | None = None  # base64 data URL


@dataclass(frozen=True)
class Task:
    """A single GAIA question for the agent to answer."""
    task_id: str
    level: int
    question: str
    expected_answer: str | None = None
    files: tuple[TaskFile, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


class PersistedModel(BaseModel):
    """Persisted record; camelCase on disk, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ToolCallDetail(PersistedModel):
    tool_name: str
    tool_call_id: str
    args: dict[str, Any] = {}


class ToolResultDetail(PersistedModel):
    tool_name: str
    tool_call_id: str
    result: Any = None


class StepDetail(PersistedModel):
    """Transcript of one agent step, kept for tool extraction and debugging."""
    step_index: int
    tool_calls: list[ToolCallDetail] | None = None
    tool_results: list[ToolResultDetail] | None = None
    text: str | None = None


class ResultSummary(PersistedModel):
    total_tool_calls: int = 0
    unique_tools: list[str] = []
    had_error: bool = False


class ResultMetadata(PersistedModel):
    attempts: int | None = None
    confidence: float | None = None
    final_reflection: str | None = None


class TaskResult(PersistedModel):
    """Outcome of evaluating one task once."""
    task_id: str
    question: str = ""
    level: int = 1
    files_attached: list[str] | None = None
    answer: str = ""
    expected_answer: str | None = None
    correct: bool = False
    duration_ms: int = 0
    steps: int = 0
    step_details: list[StepDetail] | None = None
    tools_used: list[str] | None = None
    error: str | None = None
    summary: ResultSummary | None = None
    metadata: ResultMetadata | None = None


class RunMetadata(PersistedModel):
    dataset: str
    timestamp: str
    total: int
    correct: int
    accuracy: float
    agent: str = "gaia-bench"
    model: str = ""
    incremental: bool = False
    completed: bool = False


class ResultsSnapshot(PersistedModel):
    """Contents of a results file (latest checkpoint or final snapshot)."""
    metadata: RunMetadata | None = None
    results: list[TaskResult]
