"""Runs a single GAIA task through the agent and judges the answer."""

from __future__ import annotations

import asyncio
import contextlib
import re
import time
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from gaia_bench.agent.base import Agent, AgentStream, StepRecord
from gaia_bench.benchmark.base import (
    ResultSummary,
    StepDetail,
    Task,
    TaskResult,
    ToolCallDetail,
    ToolResultDetail,
)

if TYPE_CHECKING:
    from gaia_bench.logging.logger import BenchmarkLogger

SUPPORTED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")

# Provider bookkeeping some agent SDKs attach to tool-call arguments
PROVIDER_METADATA_KEYS = frozenset({
    "providerOptions",
    "providerMetadata",
    "experimental_providerMetadata",
    "provider_options",
    "provider_metadata",
})

_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_answer(answer: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace.

    Only ASCII letters, digits and underscore survive, so accented letters
    are stripped along with punctuation.
    """
    text = _NON_WORD.sub("", answer.lower())
    return _WHITESPACE.sub(" ", text).strip()


def is_correct(answer: str, expected: str | None) -> bool:
    """Bidirectional containment of the normalized answers.

    Best-effort only: a short expected answer such as "1" is contained in
    many unrelated numeric strings.
    """
    if not expected:
        return False
    got = normalize_answer(answer)
    want = normalize_answer(expected)
    return want in got or got in want


def build_messages(task: Task) -> list[dict[str, Any]]:
    """Build the user message for a task, attaching files as content parts."""
    if not task.files:
        return [{"role": "user", "content": task.question}]

    parts: list[dict[str, Any]] = [{"type": "text", "text": task.question}]
    for f in task.files:
        if f.inline_data and f.mime_type in SUPPORTED_IMAGE_TYPES:
            parts.append({"type": "image", "image": f.inline_data})
        elif f.inline_data:
            parts.append({
                "type": "text",
                "text": f"\n[Attached file: {f.name} ({f.mime_type})] - "
                        "File content available for processing",
            })
        else:
            parts.append({
                "type": "text",
                "text": f"\n[Attached file: {f.name} ({f.mime_type}) at {f.path}]",
            })
    return [{"role": "user", "content": parts}]


def extract_tools_used(steps: list[StepRecord]) -> list[str]:
    """Tool names across all steps, deduplicated in order of first use."""
    seen: dict[str, None] = {}
    for step in steps:
        for call in step.tool_calls:
            seen.setdefault(call.tool_name, None)
    return list(seen)


def extract_step_details(steps: list[StepRecord]) -> list[StepDetail]:
    details = []
    for index, step in enumerate(steps):
        tool_calls = [
            ToolCallDetail(
                tool_name=call.tool_name,
                tool_call_id=call.tool_call_id,
                args={k: v for k, v in call.args.items() if k not in PROVIDER_METADATA_KEYS},
            )
            for call in step.tool_calls
        ]
        tool_results = [
            ToolResultDetail(
                tool_name=res.tool_name,
                tool_call_id=res.tool_call_id,
                result=res.result,
            )
            for res in step.tool_results
        ]
        details.append(StepDetail(
            step_index=index,
            tool_calls=tool_calls or None,
            tool_results=tool_results or None,
            text=step.text or None,
        ))
    return details


async def evaluate_task(
    task: Task,
    agent: Agent,
    verbose: bool = False,
    stream: bool = False,
    poll_interval: float = 0.5,
    logger: BenchmarkLogger | None = None,
) -> TaskResult:
    """Evaluate one task. Never raises: agent failures become error results."""
    if verbose:
        _print_task_header(task)

    start = time.time()
    try:
        messages = build_messages(task)
        if stream:
            print("\nAgent thinking (streaming)...\n")
            handle = await agent.stream(messages)
            answer, steps = await _drain_stream(task, handle, poll_interval, logger)
        else:
            output = await agent.generate(messages)
            answer, steps = output.text or "", output.steps
        duration_ms = int((time.time() - start) * 1000)
    except Exception as e:
        duration_ms = int((time.time() - start) * 1000)
        if verbose:
            print(f"ERROR: {e}")
        return _error_result(task, str(e), duration_ms)

    tools_used = extract_tools_used(steps)
    result = TaskResult(
        task_id=task.task_id,
        question=task.question,
        level=task.level,
        files_attached=[f.name for f in task.files] or None,
        answer=answer,
        expected_answer=task.expected_answer,
        correct=is_correct(answer, task.expected_answer),
        duration_ms=duration_ms,
        steps=len(steps),
        step_details=extract_step_details(steps),
        tools_used=tools_used,
        summary=ResultSummary(
            total_tool_calls=sum(len(s.tool_calls) for s in steps),
            unique_tools=tools_used,
            had_error=False,
        ),
    )
    if verbose:
        _print_evaluation(result, steps)
    return result


async def _drain_stream(
    task: Task,
    handle: AgentStream,
    poll_interval: float,
    logger: BenchmarkLogger | None,
) -> tuple[str, list[StepRecord]]:
    """Consume the text stream while a poller reports new tool steps."""
    poller = asyncio.create_task(
        _poll_steps(task.task_id, handle.partial_steps, poll_interval, logger)
    )
    try:
        answer = await _consume_text(handle.text_stream)
        steps = await handle.steps
    finally:
        poller.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await poller
    print("\n")
    return answer, list(steps)


async def _consume_text(text_stream: AsyncIterator[str]) -> str:
    parts = []
    async for chunk in text_stream:
        print(chunk, end="", flush=True)
        parts.append(chunk)
    return "".join(parts)


async def _poll_steps(
    task_id: str,
    partial_steps: list[StepRecord],
    interval: float,
    logger: BenchmarkLogger | None,
) -> None:
    reported = 0
    while True:
        await asyncio.sleep(interval)
        while reported < len(partial_steps):
            step = partial_steps[reported]
            for call in step.tool_calls:
                print(f"\n  [step {reported + 1}] tool: {call.tool_name}", flush=True)
            if logger:
                logger.log_tool_step(task_id, reported, step)
            reported += 1


def _error_result(task: Task, error: str, duration_ms: int) -> TaskResult:
    return TaskResult(
        task_id=task.task_id,
        question=task.question,
        level=task.level,
        files_attached=[f.name for f in task.files] or None,
        answer="",
        expected_answer=task.expected_answer,
        correct=False,
        duration_ms=duration_ms,
        steps=0,
        tools_used=[],
        error=error,
        summary=ResultSummary(total_tool_calls=0, unique_tools=[], had_error=True),
    )


def _print_task_header(task: Task) -> None:
    print(f"\n{'=' * 80}")
    print(f"Task {task.task_id} (Level {task.level})")
    print("=" * 80)
    print(f"Question: {task.question}")
    if task.files:
        print(f"Files: {', '.join(f.name for f in task.files)}")
    print(f"{'=' * 80}\n")


def _print_evaluation(result: TaskResult, steps: list[StepRecord]) -> None:
    print(f"\n{'=' * 80}")
    print("Evaluation:")
    print("=" * 80)
    print(f"Expected Answer: {result.expected_answer or 'N/A'}")
    print(f"Agent Answer: {result.answer}")
    if result.expected_answer:
        print(f"Normalized Expected: {normalize_answer(result.expected_answer)}")
    print(f"Normalized Agent: {normalize_answer(result.answer)}")
    print(f"Result: {'CORRECT' if result.correct else 'INCORRECT'}")
    print(f"Duration: {result.duration_ms / 1000:.2f}s ({result.duration_ms}ms)")
    print(f"Steps: {result.steps}")
    calls = [(i, c.tool_name) for i, s in enumerate(steps) for c in s.tool_calls]
    if calls:
        print("\nTool Calls:")
        for index, tool_name in calls:
            print(f"  {index + 1}. {tool_name}")
    print(f"{'=' * 80}\n")
