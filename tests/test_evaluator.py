"""Tests for single-task evaluation and answer checking."""

import asyncio
import tempfile

from gaia_bench.agent.base import Agent, AgentOutput, AgentStream, StepRecord, ToolCall
from gaia_bench.benchmark.base import Task, TaskFile
from gaia_bench.evaluation.evaluator import (
    build_messages,
    evaluate_task,
    extract_step_details,
    extract_tools_used,
    is_correct,
    normalize_answer,
)
from gaia_bench.logging.logger import BenchmarkLogger


class _FakeAgent(Agent):
    name = "fake"
    model = "fake-model"

    def __init__(self, text: str = "", steps: list[StepRecord] | None = None,
                 error: Exception | None = None):
        self.text = text
        self.steps = steps or []
        self.error = error
        self.calls: list[list[dict]] = []

    async def generate(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return AgentOutput(text=self.text, steps=self.steps)

    async def stream(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        done = asyncio.get_running_loop().create_future()
        partial: list[StepRecord] = []
        steps = self.steps
        text = self.text

        async def chunks():
            for word in text.split(" "):
                yield word + " "
                await asyncio.sleep(0)
            partial.extend(steps)
            done.set_result(steps)

        return AgentStream(text_stream=chunks(), steps=done, partial_steps=partial)


def _make_task(question: str = "Calculate 2+2", expected: str | None = "4", files: tuple = ()) -> Task:
    return Task(task_id="t1", level=1, question=question, expected_answer=expected, files=files)


def _make_steps() -> list[StepRecord]:
    return [
        StepRecord(tool_calls=[ToolCall("calculator", "c1", {"expr": "2+2", "providerOptions": {"x": 1}})]),
        StepRecord(tool_calls=[ToolCall("search", "c2"), ToolCall("calculator", "c3")]),
        StepRecord(text="The answer is 4."),
    ]


def test_normalize_answer():
    assert normalize_answer("  The Answer,  is 4! ") == "the answer is 4"
    assert normalize_answer("a . b") == "a b"


def test_normalize_is_idempotent():
    for text in ("a . b", "Hello,   World!!", "  x\t-\ny  ", "St. Louis", ""):
        once = normalize_answer(text)
        assert normalize_answer(once) == once


def test_is_correct_containment_both_ways():
    assert is_correct("The answer is 4.", "4")
    assert is_correct("Paris", "Paris, France")
    assert not is_correct("Lyon", "Paris")


def test_is_correct_empty_expected():
    assert not is_correct("anything", "")
    assert not is_correct("anything", None)


def test_build_messages_plain_question():
    messages = build_messages(_make_task())
    assert messages == [{"role": "user", "content": "Calculate 2+2"}]


def test_build_messages_with_files():
    files = (
        TaskFile(name="chart.png", path="/d/chart.png", mime_type="image/png",
                 inline_data="data:image/png;base64,AAAA"),
        TaskFile(name="data.csv", path="/d/data.csv", mime_type="text/csv",
                 inline_data="data:text/csv;base64,YSxi"),
        TaskFile(name="audio.mp3", path="/d/audio.mp3", mime_type="audio/mpeg"),
    )
    content = build_messages(_make_task(files=files))[0]["content"]
    assert content[0] == {"type": "text", "text": "Calculate 2+2"}
    assert content[1] == {"type": "image", "image": "data:image/png;base64,AAAA"}
    assert "data.csv" in content[2]["text"]
    assert "/d/audio.mp3" in content[3]["text"]


def test_extract_tools_used_dedupes_in_order():
    assert extract_tools_used(_make_steps()) == ["calculator", "search"]


def test_extract_step_details_strips_provider_metadata():
    details = extract_step_details(_make_steps())
    assert len(details) == 3
    assert details[0].tool_calls[0].args == {"expr": "2+2"}
    assert details[2].tool_calls is None
    assert details[2].text == "The answer is 4."


def test_evaluate_task_generate():
    agent = _FakeAgent(text="The answer is 4.", steps=_make_steps())
    result = asyncio.run(evaluate_task(_make_task(), agent))

    assert result.correct
    assert result.answer == "The answer is 4."
    assert result.steps == 3
    assert result.tools_used == ["calculator", "search"]
    assert result.summary.total_tool_calls == 3
    assert not result.summary.had_error
    assert result.error is None


def test_evaluate_task_stream():
    agent = _FakeAgent(text="The answer is 4.", steps=_make_steps())
    result = asyncio.run(evaluate_task(_make_task(), agent, stream=True, poll_interval=0.01))

    assert result.correct
    assert result.steps == 3
    assert result.tools_used == ["calculator", "search"]


def test_evaluate_task_agent_error_becomes_result():
    agent = _FakeAgent(error=RuntimeError("rate limited"))
    result = asyncio.run(evaluate_task(_make_task(), agent))

    assert not result.correct
    assert result.error == "rate limited"
    assert result.steps == 0
    assert result.tools_used == []
    assert result.summary.had_error


def test_evaluate_task_without_expected_answer():
    agent = _FakeAgent(text="4")
    result = asyncio.run(evaluate_task(_make_task(expected=None), agent))
    assert not result.correct
    assert result.error is None


def test_normalize_strips_non_ascii_letters():
    assert normalize_answer("Café Olé") == "caf ol"
    assert is_correct("Cafe", "Café")


class _SteppingStreamAgent(_FakeAgent):
    """Publishes a tool step between text chunks, like a live tool loop."""

    async def stream(self, messages):
        done = asyncio.get_running_loop().create_future()
        partial: list[StepRecord] = []
        tools = ["search", "searchGetContents", "calculator"]

        async def chunks():
            for i, tool in enumerate(tools):
                partial.append(StepRecord(tool_calls=[ToolCall(tool, f"c{i}")]))
                yield f"step {i} "
                await asyncio.sleep(0.05)
            yield "The answer is 4."
            done.set_result(list(partial))

        return AgentStream(text_stream=chunks(), steps=done, partial_steps=partial)


def test_stream_poller_reports_steps_as_they_arrive(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        logger = BenchmarkLogger("stream-test", tmp)
        result = asyncio.run(evaluate_task(
            _make_task(), _SteppingStreamAgent(), stream=True, poll_interval=0.01, logger=logger,
        ))

        tool_steps = [e for e in logger.events if e["event"] == "tool_step"]
        assert [e["tools"] for e in tool_steps] == [["search"], ["searchGetContents"], ["calculator"]]
        assert [e["step_index"] for e in tool_steps] == [0, 1, 2]
        assert "[step 2] tool: searchGetContents" in capsys.readouterr().out
        assert result.correct
        assert result.tools_used == ["search", "searchGetContents", "calculator"]
