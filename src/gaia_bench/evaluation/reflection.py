"""Evaluation variant that interleaves reflection prompts between agent turns."""

from __future__ import annotations

import time
from typing import Any

from gaia_bench.agent.base import Agent
from gaia_bench.benchmark.base import ResultMetadata, ResultSummary, Task, TaskResult
from gaia_bench.config import ReflectionStyle

from .answers import contains_final_answer, extract_final_answer
from .evaluator import build_messages, extract_step_details, extract_tools_used, is_correct

REFLECTION_PROMPTS = {
    ReflectionStyle.BASIC: (
        "QUICK CHECK\n\n"
        "Take 10 seconds to assess your progress:\n"
        "1. What did you just learn? (1 sentence)\n"
        "2. Are you closer to the answer? (yes/no + why)\n"
        "3. What's your IMMEDIATE next action? (which tool + what query)\n\n"
        "Then DO IT - take that action right now!\n"
    ),
    ReflectionStyle.DETAILED: (
        "PROGRESS CHECK\n\n"
        "What you learned: summarize the key information from the last tool.\n\n"
        "Progress status:\n"
        "- Moving toward answer? (yes/no)\n"
        "- Confidence level? (low/medium/high)\n"
        "- Any contradictions or gaps?\n\n"
        "Immediate next action, choose ONE and execute it:\n"
        "1. Search with different query\n"
        "2. Verify with another tool\n"
        "3. Calculate or process data\n"
        "4. Provide final answer (if confident)\n"
    ),
    ReflectionStyle.QUICK: "Quick check: What did you learn? Helpful? Next tool? -> GO!\n",
}


def should_reflect(
    step_count: int,
    max_steps: int,
    tool_history: list[str],
    had_error: bool = False,
) -> bool:
    """Decide whether to inject a reflection prompt after this step."""
    if had_error:
        return True
    if step_count > 2 and step_count % 3 == 0:
        return True
    if step_count >= max_steps * 0.8:
        return True
    # Same tool three times in a row
    return len(tool_history) >= 3 and len(set(tool_history[-3:])) == 1


def build_reflection_prompt(
    step_number: int,
    total_steps: int,
    last_tool: str | None,
    style: ReflectionStyle = ReflectionStyle.BASIC,
) -> str:
    lines = ["=" * 60, f"Step {step_number} of {total_steps} completed"]
    if last_tool:
        lines.append(f"Last tool used: {last_tool}")
    lines.append("=" * 60)
    return "\n" + "\n".join(lines) + "\n" + REFLECTION_PROMPTS[style]


async def evaluate_task_with_reflection(
    task: Task,
    agent: Agent,
    verbose: bool = False,
    reflection_style: ReflectionStyle = ReflectionStyle.BASIC,
    max_reflections: int = 15,
) -> TaskResult:
    """Evaluate one task with periodic self-reflection. Never raises."""
    if verbose:
        print(f"\nTask {task.task_id} (Level {task.level}) [WITH REFLECTION]")
        print(f"Question: {task.question}")

    start = time.time()
    messages: list[dict[str, Any]] = build_messages(task)
    all_steps = []
    reflections: list[str] = []
    tool_history: list[str] = []
    final_answer = ""
    step_count = 0

    try:
        while step_count < max_reflections:
            output = await agent.generate(messages)
            all_steps.extend(output.steps)
            step_count += 1

            if contains_final_answer(output.text):
                final_answer = extract_final_answer(output.text)
                break

            last_step = output.steps[-1] if output.steps else None
            if last_step is None or not last_step.tool_calls:
                final_answer = extract_final_answer(output.text)
                break

            last_tool = last_step.tool_calls[0].tool_name
            tool_history.append(last_tool)
            messages.append({"role": "assistant", "content": output.text})

            if not should_reflect(step_count, max_reflections, tool_history):
                continue

            messages.append({
                "role": "user",
                "content": build_reflection_prompt(
                    step_count, max_reflections, last_tool, reflection_style,
                ),
            })
            if verbose:
                print(f"\nReflecting after {last_tool} (step {step_count})")

            reflection = await agent.generate(messages)
            all_steps.extend(reflection.steps)
            reflections.append(reflection.text)
            if contains_final_answer(reflection.text):
                final_answer = extract_final_answer(reflection.text)
                break
            messages.append({"role": "assistant", "content": reflection.text})
            step_count += 1

        if not final_answer:
            last_content = messages[-1].get("content", "")
            final_answer = extract_final_answer(last_content if isinstance(last_content, str) else "")
    except Exception as e:
        duration_ms = int((time.time() - start) * 1000)
        if verbose:
            print(f"\nERROR evaluating task {task.task_id}: {e}")
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
            error=str(e),
            summary=ResultSummary(had_error=True),
        )

    duration_ms = int((time.time() - start) * 1000)
    tools_used = extract_tools_used(all_steps)
    correct = is_correct(final_answer, task.expected_answer)

    if verbose:
        print(f"\nReflections: {len(reflections)} | Steps: {step_count} | "
              f"Answer: {final_answer} | Expected: {task.expected_answer or 'N/A'} | "
              f"{'CORRECT' if correct else 'INCORRECT'}")

    return TaskResult(
        task_id=task.task_id,
        question=task.question,
        level=task.level,
        files_attached=[f.name for f in task.files] or None,
        answer=final_answer,
        expected_answer=task.expected_answer,
        correct=correct,
        duration_ms=duration_ms,
        steps=step_count,
        step_details=extract_step_details(all_steps),
        tools_used=tools_used,
        summary=ResultSummary(
            total_tool_calls=sum(len(s.tool_calls) for s in all_steps),
            unique_tools=tools_used,
            had_error=False,
        ),
        metadata=ResultMetadata(
            attempts=step_count,
            final_reflection=reflections[-1] if reflections else None,
        ),
    )
