"""Tests for answer extraction and the reflection evaluation loop."""

import asyncio

from gaia_bench.agent.base import Agent, AgentOutput, StepRecord, ToolCall
from gaia_bench.benchmark.base import Task
from gaia_bench.config import ReflectionStyle
from gaia_bench.evaluation.answers import contains_final_answer, extract_final_answer
from gaia_bench.evaluation.reflection import (
    build_reflection_prompt,
    evaluate_task_with_reflection,
    should_reflect,
)


class _ScriptedAgent(Agent):
    """Replays canned outputs; repeats the last one when the script runs out."""
    name = "scripted"
    model = "scripted-model"

    def __init__(self, outputs: list[AgentOutput]):
        self.outputs = outputs
        self.calls = 0
        self.last_messages: list[dict] = []

    async def generate(self, messages):
        self.last_messages = messages
        output = self.outputs[min(self.calls, len(self.outputs) - 1)]
        self.calls += 1
        return output

    async def stream(self, messages):
        raise NotImplementedError


def _make_task() -> Task:
    return Task(task_id="r1", level=2, question="What is the capital of France?",
                expected_answer="Paris")


def _tool_output(text: str, tool: str = "search") -> AgentOutput:
    return AgentOutput(text=text, steps=[StepRecord(tool_calls=[ToolCall(tool, "c1")])])


def test_contains_final_answer():
    assert contains_final_answer("My final answer is Paris")
    assert contains_final_answer("Therefore, the answer is 42")
    assert not contains_final_answer("Let me search for that")


def test_extract_explicit_final_answer():
    assert extract_final_answer("After checking sources.\nFinal answer: Paris.") == "Paris"


def test_extract_counting_answer():
    text = "How many moons? There are 12 items in the list"
    assert extract_final_answer(text) == "12"


def test_extract_falls_back_to_last_line():
    text = "Checking the records carefully\nThe capital city is Paris."
    assert extract_final_answer(text) == "The capital city is Paris"


def test_should_reflect_triggers():
    assert should_reflect(1, 15, [], had_error=True)
    assert should_reflect(3, 15, ["a", "b", "c"])
    assert should_reflect(12, 15, ["a", "b"])
    assert should_reflect(4, 15, ["a", "a", "a"])
    assert not should_reflect(1, 15, ["a"])
    assert not should_reflect(4, 15, ["a", "b", "a"])


def test_build_reflection_prompt():
    prompt = build_reflection_prompt(3, 15, "search", ReflectionStyle.QUICK)
    assert "Step 3 of 15 completed" in prompt
    assert "Last tool used: search" in prompt
    assert prompt.endswith("GO!\n")


def test_reflection_stops_on_final_answer():
    agent = _ScriptedAgent([
        _tool_output("Looking up the capital"),
        AgentOutput(text="Final answer: Paris."),
    ])
    result = asyncio.run(evaluate_task_with_reflection(_make_task(), agent))

    assert result.correct
    assert result.answer == "Paris"
    assert result.steps == 2
    assert result.tools_used == ["search"]
    assert result.metadata.attempts == 2
    assert result.metadata.final_reflection is None


def test_reflection_prompt_injected():
    agent = _ScriptedAgent([_tool_output("Looking up more data")])
    result = asyncio.run(evaluate_task_with_reflection(
        _make_task(), agent, reflection_style=ReflectionStyle.BASIC, max_reflections=4,
    ))

    assert agent.calls == 4
    assert result.metadata.attempts == 4
    assert result.metadata.final_reflection == "Looking up more data"
    assert any("QUICK CHECK" in str(m["content"]) for m in agent.last_messages)
    assert not result.correct


def test_reflection_error_becomes_result():
    class _Broken(_ScriptedAgent):
        async def generate(self, messages):
            raise ConnectionError("provider down")

    result = asyncio.run(evaluate_task_with_reflection(_make_task(), _Broken([])))
    assert result.error == "provider down"
    assert result.summary.had_error
    assert not result.correct
