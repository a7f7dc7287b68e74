"""Console and file rendering of benchmark results."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from gaia_bench.analytics import AnalysisReport
from gaia_bench.benchmark.base import TaskResult
from gaia_bench.storage.results import file_timestamp, utc_now
from gaia_bench.storage.wrong_answers import WrongAnswersCollection


def display_summary(results: list[TaskResult]) -> None:
    total = len(results)
    correct = sum(1 for r in results if r.correct)
    errors = sum(1 for r in results if r.error)
    accuracy = correct / total * 100 if total else 0.0
    avg_duration = sum(r.duration_ms for r in results) / total if total else 0.0
    avg_steps = sum(r.steps for r in results) / total if total else 0.0

    print(f"\n{'=' * 60}")
    print("GAIA Benchmark Results")
    print("=" * 60)
    print(f"Total tasks:     {total}")
    print(f"Correct:         {correct} ({accuracy:.2f}%)")
    print(f"Incorrect:       {total - correct - errors}")
    print(f"Errors:          {errors}")
    print(f"Avg duration:    {avg_duration:.0f}ms")
    print(f"Avg steps:       {avg_steps:.1f}")
    print(f"{'=' * 60}\n")


def display_analysis_report(report: AnalysisReport) -> None:
    print("\n" + "=" * 80)
    print("COMPREHENSIVE ANALYSIS REPORT")
    print("=" * 80)

    s = report.summary
    print("\nSummary:")
    print(f"  Total Tasks: {s.total_tasks}")
    print(f"  Correct: {s.correct} ({s.accuracy}%)")
    print(f"  Avg Steps: {s.avg_steps}")
    print(f"  Avg Duration: {s.avg_duration}ms")

    if report.weaknesses:
        print("\nWeaknesses Detected:")
        for w in report.weaknesses:
            print(f"  - {w.category}: {w.accuracy}% accuracy ({w.correct_tasks}/{w.total_tasks})")
            print(f"    -> {w.recommendation}")
    else:
        print("\nNo significant weaknesses detected (all categories >=60% accuracy)")

    if report.tool_analytics:
        print("\nTool Usage Analytics:")
        for tool in report.tool_analytics[:5]:
            print(f"  - {tool.tool_name}: {tool.usage_count} uses, "
                  f"{tool.success_rate}% success rate")
            if tool.commonly_used_with:
                print(f"    Often used with: {', '.join(tool.commonly_used_with)}")

    if report.failure_patterns:
        print("\nFailure Patterns:")
        for p in report.failure_patterns:
            print(f"  - {p.pattern}: {p.occurrences} occurrences")
            print(f"    {p.description}")
            print(f"    -> {p.suggested_fix}")
    else:
        print("\nNo common failure patterns detected")

    if report.category_performance:
        print("\nCategory Performance:")
        for cat in report.category_performance:
            print(f"  - {cat.category}: {cat.accuracy}% ({cat.correct_tasks}/{cat.total_tasks})")
            print(f"    Avg steps: {cat.avg_steps}, Duration: {cat.avg_duration}ms")
            if cat.common_tools:
                print(f"    Common tools: {', '.join(cat.common_tools)}")
            levels = cat.level_accuracies()
            if levels:
                print("    By level: " + ", ".join(f"L{lvl}: {acc}%" for lvl, acc in levels.items()))

    if report.recommendations:
        print("\nRecommendations:")
        for rec in report.recommendations:
            print(f"  - {rec}")

    print("\n" + "=" * 80 + "\n")


def save_analysis_report(report: AnalysisReport, output_dir: str | Path, dataset: str) -> Path:
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    path = output / f"gaia-{dataset}-analysis-{file_timestamp(utc_now())}.json"
    with open(path, "w") as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
    print(f"Analysis report saved to: {path}")
    return path


def display_wrong_answers_summary(collection: WrongAnswersCollection) -> None:
    entries = list(collection.tasks.values())
    if not entries:
        print("\nNo wrong answers! All previous tasks passed.")
        return

    print(f"\n{'=' * 60}")
    print("Wrong Answers Collection")
    print("=" * 60)
    print(f"Total wrong:     {len(entries)}")
    print(f"Last updated:    {_local_time(collection.metadata.last_updated)}")

    print("\nBy difficulty level:")
    for level in (1, 2, 3):
        count = sum(1 for e in entries if e.level == level)
        print(f"  Level {level}: {count} tasks")

    print("\nTop 5 most attempted:")
    for entry in sorted(entries, key=lambda e: e.attempt_count, reverse=True)[:5]:
        question = entry.question if len(entry.question) <= 60 else f"{entry.question[:60]}..."
        print(f"  [{entry.attempt_count}x] {entry.task_id[:8]}... - {question}")
    print(f"\n{'=' * 60}\n")


def _local_time(iso_timestamp: str) -> str:
    try:
        return datetime.fromisoformat(iso_timestamp).astimezone().strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return iso_timestamp
