"""Tests for task categorization."""

from gaia_bench.benchmark.base import Task, TaskFile
from gaia_bench.benchmark.categorize import categorize_task


def _make_task(question: str, files: tuple = ()) -> Task:
    return Task(task_id="t", level=1, question=question, files=files)


def test_arithmetic_is_code():
    assert categorize_task(_make_task("Calculate 2+2")) == ["code"]
    assert categorize_task(_make_task("What is 17 * 3?")) == ["code"]


def test_plain_question_falls_back_to_reasoning():
    assert categorize_task(_make_task("What is the capital of France?")) == ["reasoning"]


def test_multiple_categories():
    task = _make_task(
        "Search wikipedia for population",
        files=(TaskFile(name="data.csv", path="/tmp/data.csv"),),
    )
    assert set(categorize_task(task)) == {"files", "search"}


def test_browser_keywords():
    categories = categorize_task(_make_task("Navigate to the webpage and take a screenshot"))
    assert "browser" in categories
    assert "reasoning" not in categories


def test_never_empty():
    for question in ("", "?", "Who?", "Compute the formula"):
        assert categorize_task(_make_task(question))
