"""Abstract agent interface consumed by the evaluator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolCall:
    tool_name: str
    tool_call_id: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResult:
    tool_name: str
    tool_call_id: str
    result: Any = None


@dataclass
class StepRecord:
    """One reasoning/tool-use iteration performed by the agent.

    All three fields are always present; an empty list or string means the
    step did not produce that kind of output.
    """
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)
    text: str = ""

    @property
    def kind(self) -> str:
        if self.tool_calls:
            return "tool_call"
        if self.tool_results:
            return "tool_result"
        return "text"


@dataclass
class AgentOutput:
    """Buffered response from Agent.generate."""
    text: str
    steps: list[StepRecord] = field(default_factory=list)


@dataclass
class AgentStream:
    """Incremental response from Agent.stream.

    `partial_steps` grows while the stream is consumed; `steps` resolves to
    the final step list once the agent is done.
    """
    text_stream: AsyncIterator[str]
    steps: Awaitable[list[StepRecord]]
    partial_steps: list[StepRecord] = field(default_factory=list)


class Agent(ABC):
    """Abstract base for the reasoning agent under benchmark."""

    model: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def generate(self, messages: list[dict[str, Any]]) -> AgentOutput:
        """Run the agent to completion and return its answer and steps."""
        ...

    @abstractmethod
    async def stream(self, messages: list[dict[str, Any]]) -> AgentStream:
        """Run the agent, yielding text chunks as they are produced."""
        ...


def split_data_url(data_url: str) -> tuple[str, str]:
    """Split "data:<mime>;base64,<payload>" into (mime, payload)."""
    header, _, payload = data_url.partition(",")
    mime = header.removeprefix("data:").split(";", 1)[0] or "application/octet-stream"
    return mime, payload
