"""Performance analytics over a finished set of benchmark results.

All functions are pure: they take results plus the tasks they came from and
return report objects sorted for presentation.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any

from gaia_bench.benchmark.base import Task, TaskResult
from gaia_bench.benchmark.categorize import categorize_task

WEAKNESS_THRESHOLD = 60.0
EXCESSIVE_STEPS = 10
LEVEL_3_FAILURE_THRESHOLD = 5

SEARCH_TOOLS = frozenset({"search", "tavilySearch", "exaSearch"})
CONTENT_RETRIEVAL_TOOLS = frozenset({"searchGetContents", "exaGetContents"})

CATEGORY_RECOMMENDATIONS = {
    "files": "Consider using sandbox with appropriate libraries "
             "(pandas for CSV, PyPDF2 for PDF, PIL for images)",
    "code": "Use sandbox with Python for calculations. Verify results with calculator tool.",
    "search": "Cross-verify facts from multiple sources. "
              "Use searchGetContents for detailed information.",
    "browser": "Wait for JavaScript to load. Take screenshots to verify. "
               "Try multiple selectors if first fails.",
    "reasoning": "Break down into clear steps. Use memory to track multi-step reasoning.",
}


@dataclass
class WeaknessAnalysis:
    category: str
    total_tasks: int
    correct_tasks: int
    accuracy: float
    failed_task_ids: list[str]
    recommendation: str
    common_errors: list[str] = field(default_factory=list)


@dataclass
class ToolAnalytics:
    tool_name: str
    usage_count: int
    success_count: int
    failure_count: int
    success_rate: float
    avg_steps_when_used: float
    commonly_used_with: list[str]


@dataclass
class FailurePattern:
    pattern: str
    occurrences: int
    affected_tasks: list[str]
    description: str
    suggested_fix: str


@dataclass
class CategoryPerformance:
    category: str
    total_tasks: int
    correct_tasks: int
    accuracy: float
    avg_steps: float
    avg_duration: float
    common_tools: list[str]
    level1_accuracy: float | None = None
    level2_accuracy: float | None = None
    level3_accuracy: float | None = None

    def level_accuracies(self) -> dict[int, float]:
        levels = {1: self.level1_accuracy, 2: self.level2_accuracy, 3: self.level3_accuracy}
        return {level: acc for level, acc in levels.items() if acc is not None}


@dataclass
class ReportSummary:
    total_tasks: int
    correct: int
    accuracy: float
    avg_steps: float
    avg_duration: float


@dataclass
class AnalysisReport:
    summary: ReportSummary
    weaknesses: list[WeaknessAnalysis]
    tool_analytics: list[ToolAnalytics]
    failure_patterns: list[FailurePattern]
    category_performance: list[CategoryPerformance]
    recommendations: list[str]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["category_performance"] = [
            {k: v for k, v in cat.items() if v is not None}
            for cat in data["category_performance"]
        ]
        return data


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _results_by_category(
    results: list[TaskResult],
    tasks: list[Task],
) -> dict[str, list[TaskResult]]:
    """Group results by task category; a result can join several groups."""
    task_map = {t.task_id: t for t in tasks}
    groups: dict[str, list[TaskResult]] = defaultdict(list)
    for result in results:
        task = task_map.get(result.task_id)
        if task is None:
            continue
        for category in categorize_task(task):
            groups[category].append(result)
    return groups


def category_recommendation(category: str, accuracy: float) -> str:
    base = CATEGORY_RECOMMENDATIONS.get(category, "Review task patterns and adjust strategy")
    if accuracy < 30:
        return f"CRITICAL: {base}. Consider using ReAct planner with iterative mode."
    if accuracy < 50:
        return f"MODERATE: {base}. Enable reflection for better verification."
    return f"MINOR: {base}"


def detect_weaknesses(results: list[TaskResult], tasks: list[Task]) -> list[WeaknessAnalysis]:
    """Categories below 60% accuracy, worst first."""
    weaknesses = []
    for category, group in _results_by_category(results, tasks).items():
        correct = sum(1 for r in group if r.correct)
        accuracy = correct / len(group) * 100
        if accuracy >= WEAKNESS_THRESHOLD:
            continue
        weaknesses.append(WeaknessAnalysis(
            category=category,
            total_tasks=len(group),
            correct_tasks=correct,
            accuracy=round(accuracy, 2),
            failed_task_ids=[r.task_id for r in group if not r.correct],
            recommendation=category_recommendation(category, accuracy),
        ))
    return sorted(weaknesses, key=lambda w: w.accuracy)


def analyze_tool_usage(results: list[TaskResult]) -> list[ToolAnalytics]:
    """Per-tool usage, success rate and the tools it most often appears with."""
    usage: Counter[str] = Counter()
    success: Counter[str] = Counter()
    total_steps: Counter[str] = Counter()
    co_occurrence: dict[str, Counter[str]] = defaultdict(Counter)

    for result in results:
        tools = list(dict.fromkeys(result.tools_used or []))
        for tool in tools:
            usage[tool] += 1
            if result.correct:
                success[tool] += 1
            total_steps[tool] += result.steps
            co_occurrence[tool].update(other for other in tools if other != tool)

    analytics = [
        ToolAnalytics(
            tool_name=tool,
            usage_count=count,
            success_count=success[tool],
            failure_count=count - success[tool],
            success_rate=_percent(success[tool], count),
            avg_steps_when_used=round(total_steps[tool] / count, 1),
            commonly_used_with=[name for name, _ in co_occurrence[tool].most_common(3)],
        )
        for tool, count in usage.items()
    ]
    return sorted(analytics, key=lambda t: t.usage_count, reverse=True)


def recognize_failure_patterns(
    results: list[TaskResult],
    tasks: list[Task],
) -> list[FailurePattern]:
    """Common traits of tasks the agent finished but got wrong."""
    failed = [r for r in results if not r.correct and not r.error]
    task_map = {t.task_id: t for t in tasks}
    patterns = []

    def add(pattern: str, matched: list[TaskResult], description: str, fix: str) -> None:
        if matched:
            patterns.append(FailurePattern(
                pattern=pattern,
                occurrences=len(matched),
                affected_tasks=[r.task_id for r in matched],
                description=description,
                suggested_fix=fix,
            ))

    add(
        "no_tools_used",
        [r for r in failed if not r.tools_used],
        "Tasks failed without using any tools",
        "Agent may need better prompting to use tools. "
        "Enable ReAct planner for structured reasoning.",
    )
    add(
        "excessive_steps",
        [r for r in failed if r.steps > EXCESSIVE_STEPS],
        f"Tasks failed after using many steps (>{EXCESSIVE_STEPS})",
        "Agent may be stuck in loops. Consider using reflection to verify approach earlier.",
    )
    add(
        "file_processing_failure",
        [r for r in failed if r.task_id in task_map and task_map[r.task_id].files],
        "Tasks with file attachments failed",
        "Ensure sandbox is properly configured. Use appropriate libraries (pandas, PyPDF2, PIL).",
    )
    add(
        "search_without_verification",
        [
            r for r in failed
            if SEARCH_TOOLS.intersection(r.tools_used or [])
            and not CONTENT_RETRIEVAL_TOOLS.intersection(r.tools_used or [])
        ],
        "Failed after search without content verification",
        "Use searchGetContents to verify search results. Enable reflection for cross-checking.",
    )

    level_3 = [r for r in failed if r.level == 3]
    if len(level_3) > LEVEL_3_FAILURE_THRESHOLD:
        add(
            "level_3_difficulty",
            level_3,
            "High failure rate on Level 3 (hard) tasks",
            "Use iterative mode with reflection. Break down into smaller steps. "
            "Use memory to track progress.",
        )

    return sorted(patterns, key=lambda p: p.occurrences, reverse=True)


def analyze_category_performance(
    results: list[TaskResult],
    tasks: list[Task],
) -> list[CategoryPerformance]:
    """Accuracy, cost and tool usage per category, largest category first."""
    performance = []
    for category, group in _results_by_category(results, tasks).items():
        total = len(group)
        correct = sum(1 for r in group if r.correct)

        tools: Counter[str] = Counter()
        for r in group:
            tools.update(dict.fromkeys(r.tools_used or [], 1))

        by_level: dict[int, list[TaskResult]] = defaultdict(list)
        for r in group:
            by_level[r.level].append(r)
        level_acc = {
            level: _percent(sum(1 for r in rs if r.correct), len(rs))
            for level, rs in by_level.items()
        }

        performance.append(CategoryPerformance(
            category=category,
            total_tasks=total,
            correct_tasks=correct,
            accuracy=_percent(correct, total),
            avg_steps=round(sum(r.steps for r in group) / total, 1),
            avg_duration=round(sum(r.duration_ms for r in group) / total),
            common_tools=[name for name, _ in tools.most_common(3)],
            level1_accuracy=level_acc.get(1),
            level2_accuracy=level_acc.get(2),
            level3_accuracy=level_acc.get(3),
        ))
    return sorted(performance, key=lambda c: c.total_tasks, reverse=True)


def generate_analysis_report(results: list[TaskResult], tasks: list[Task]) -> AnalysisReport:
    """Combine all analyses into one report with recommendations."""
    total = len(results)
    correct = sum(1 for r in results if r.correct)
    accuracy = _percent(correct, total)

    weaknesses = detect_weaknesses(results, tasks)
    tool_analytics = analyze_tool_usage(results)
    failure_patterns = recognize_failure_patterns(results, tasks)
    category_performance = analyze_category_performance(results, tasks)

    recommendations = []
    if accuracy < 50:
        recommendations.append(
            "Overall accuracy is low (<50%). Enable ReAct planner for structured reasoning."
        )
    if accuracy < 70:
        recommendations.append(
            "Consider using iterative mode to retry low-confidence answers."
        )
    for weakness in weaknesses[:3]:
        recommendations.append(f"{weakness.category}: {weakness.recommendation}")
    for pattern in failure_patterns[:2]:
        recommendations.append(f"{pattern.pattern}: {pattern.suggested_fix}")

    low_performers = [t.tool_name for t in tool_analytics if t.success_rate < 50 and t.usage_count > 3]
    if low_performers:
        recommendations.append(
            f"Low-performing tools: {', '.join(low_performers)}. Review tool usage patterns."
        )

    return AnalysisReport(
        summary=ReportSummary(
            total_tasks=total,
            correct=correct,
            accuracy=accuracy,
            avg_steps=round(sum(r.steps for r in results) / total, 1) if total else 0.0,
            avg_duration=round(sum(r.duration_ms for r in results) / total) if total else 0,
        ),
        weaknesses=weaknesses,
        tool_analytics=tool_analytics,
        failure_patterns=failure_patterns,
        category_performance=category_performance,
        recommendations=recommendations,
    )
