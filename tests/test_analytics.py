"""Tests for the analytics engine."""

from gaia_bench.analytics import (
    analyze_category_performance,
    analyze_tool_usage,
    category_recommendation,
    detect_weaknesses,
    generate_analysis_report,
    recognize_failure_patterns,
)
from gaia_bench.benchmark.base import Task, TaskFile, TaskResult

_FILE = (TaskFile(name="sheet.xlsx", path="/d/sheet.xlsx"),)


def _make_task(task_id: str, question: str = "Who wrote Hamlet?", level: int = 1,
               files: tuple = ()) -> Task:
    return Task(task_id=task_id, level=level, question=question, files=files)


def _make_result(task_id: str, correct: bool = False, level: int = 1, steps: int = 2,
                 tools: list[str] | None = None, error: str | None = None) -> TaskResult:
    return TaskResult(
        task_id=task_id,
        level=level,
        correct=correct,
        steps=steps,
        duration_ms=1000,
        tools_used=tools,
        error=error,
    )


def test_file_category_critical_weakness():
    tasks = [_make_task(f"f{i}", files=_FILE) for i in range(10)]
    results = [_make_result(f"f{i}", correct=i < 2) for i in range(10)]

    weaknesses = detect_weaknesses(results, tasks)
    files = next(w for w in weaknesses if w.category == "files")
    assert files.accuracy == 20.0
    assert files.total_tasks == 10
    assert len(files.failed_task_ids) == 8
    assert files.recommendation.startswith("CRITICAL:")


def test_weaknesses_below_threshold_sorted():
    tasks = [
        _make_task("c1", "Calculate 1+1"),
        _make_task("c2", "Calculate 2+2"),
        _make_task("s1", "Search for the article"),
        _make_task("s2", "Search for the journal"),
        _make_task("s3", "Search the website"),
        _make_task("r1", "Who is it?"),
        _make_task("r2", "Who was it?"),
        _make_task("r3", "Who will it be?"),
        _make_task("r4", "Who could it be?"),
        _make_task("r5", "Who might it be?"),
    ]
    results = [
        _make_result("c1", correct=False),
        _make_result("c2", correct=False),
        _make_result("s1", correct=True),
        _make_result("s2", correct=False),
        _make_result("s3", correct=False),
        _make_result("r1", correct=True),
        _make_result("r2", correct=True),
        _make_result("r3", correct=True),
        _make_result("r4", correct=False),
        _make_result("r5", correct=False),
    ]
    weaknesses = detect_weaknesses(results, tasks)

    # reasoning sits exactly at 60% and is not flagged
    assert [w.category for w in weaknesses] == ["code", "search"]
    assert [w.accuracy for w in weaknesses] == [0.0, 33.33]
    assert all(w.accuracy < 60 for w in weaknesses)


def test_recommendation_bands():
    assert category_recommendation("code", 10).startswith("CRITICAL:")
    assert category_recommendation("code", 45).startswith("MODERATE:")
    assert category_recommendation("code", 55).startswith("MINOR:")
    assert "Review task patterns" in category_recommendation("unknown", 55)


def test_tool_usage_counts_and_co_occurrence():
    results = [
        _make_result("a", correct=True, steps=4, tools=["search", "searchGetContents", "search"]),
        _make_result("b", correct=False, steps=2, tools=["search", "calculator"]),
        _make_result("c", correct=True, steps=6, tools=["calculator"]),
        _make_result("d", correct=False, steps=1),
    ]
    analytics = {t.tool_name: t for t in analyze_tool_usage(results)}

    search = analytics["search"]
    assert search.usage_count == 2
    assert search.success_count == 1
    assert search.failure_count == 1
    assert search.success_rate == 50.0
    assert search.avg_steps_when_used == 3.0
    assert set(search.commonly_used_with) == {"searchGetContents", "calculator"}
    assert analytics["calculator"].usage_count == 2
    assert analyze_tool_usage(results)[-1].tool_name == "searchGetContents"


def test_failure_patterns():
    tasks = [_make_task(f"t{i}") for i in range(6)] + [_make_task("file", files=_FILE)]
    results = [
        _make_result("t0", steps=11, tools=["search"]),
        _make_result("t1", steps=15, tools=["search", "searchGetContents"]),
        _make_result("t2", steps=10, tools=["calculator"]),
        _make_result("t3", tools=[]),
        _make_result("t4", error="timeout", steps=30),
        _make_result("t5", correct=True, steps=20),
        _make_result("file", tools=["sandbox"]),
    ]
    patterns = {p.pattern: p for p in recognize_failure_patterns(results, tasks)}

    assert patterns["excessive_steps"].occurrences == 2
    assert set(patterns["excessive_steps"].affected_tasks) == {"t0", "t1"}
    assert patterns["no_tools_used"].affected_tasks == ["t3"]
    assert patterns["file_processing_failure"].affected_tasks == ["file"]
    assert patterns["search_without_verification"].affected_tasks == ["t0"]
    assert "level_3_difficulty" not in patterns


def test_level_3_pattern_needs_more_than_five():
    tasks = [_make_task(f"h{i}", level=3) for i in range(6)]
    five = [_make_result(f"h{i}", level=3, tools=["x"]) for i in range(5)]
    assert not any(p.pattern == "level_3_difficulty"
                   for p in recognize_failure_patterns(five, tasks))

    six = [_make_result(f"h{i}", level=3, tools=["x"]) for i in range(6)]
    level_3 = [p for p in recognize_failure_patterns(six, tasks) if p.pattern == "level_3_difficulty"]
    assert level_3[0].occurrences == 6


def test_category_performance_per_level():
    tasks = [
        _make_task("a", "Calculate 3*3", level=1),
        _make_task("b", "Calculate 4*4", level=2),
        _make_task("c", "Calculate 5*5", level=2),
        _make_task("d", "Who is it?", level=1),
    ]
    results = [
        _make_result("a", correct=True, level=1, steps=2, tools=["calculator"]),
        _make_result("b", correct=True, level=2, steps=4, tools=["calculator", "sandbox"]),
        _make_result("c", correct=False, level=2, steps=6, tools=["sandbox"]),
        _make_result("d", correct=True, level=1),
    ]
    performance = analyze_category_performance(results, tasks)

    assert [c.category for c in performance] == ["code", "reasoning"]
    code = performance[0]
    assert code.accuracy == 66.67
    assert code.avg_steps == 4.0
    assert code.level1_accuracy == 100.0
    assert code.level2_accuracy == 50.0
    assert code.level3_accuracy is None
    assert code.level_accuracies() == {1: 100.0, 2: 50.0}
    assert set(code.common_tools) == {"calculator", "sandbox"}


def test_generate_report():
    tasks = [_make_task(f"t{i}", "Calculate 1+1") for i in range(4)]
    results = [
        _make_result("t0", correct=True, tools=["calculator"]),
        _make_result("t1", tools=["calculator"]),
        _make_result("t2", tools=["calculator"]),
        _make_result("t3", tools=["calculator"]),
    ]
    report = generate_analysis_report(results, tasks)

    assert report.summary.total_tasks == 4
    assert report.summary.accuracy == 25.0
    assert report.recommendations[0].startswith("Overall accuracy is low")
    assert any("Low-performing tools: calculator" in r for r in report.recommendations)
    assert any(r.startswith("code: CRITICAL") for r in report.recommendations)

    data = report.to_dict()
    assert "level2_accuracy" not in data["category_performance"][0]
    assert data["summary"]["correct"] == 1


def test_generate_report_empty():
    report = generate_analysis_report([], [])
    assert report.summary.total_tasks == 0
    assert report.summary.accuracy == 0.0
    assert report.weaknesses == []


def test_category_performance_shared_tool_across_results():
    tasks = [_make_task(f"s{i}", "Search the archive") for i in range(3)]
    results = [
        _make_result("s0", correct=True, tools=["search"]),
        _make_result("s1", tools=["search", "searchGetContents"]),
        _make_result("s2", tools=["search"]),
    ]
    performance = analyze_category_performance(results, tasks)

    assert performance[0].category == "search"
    assert performance[0].common_tools == ["search", "searchGetContents"]
    assert generate_analysis_report(results, tasks).summary.total_tasks == 3
