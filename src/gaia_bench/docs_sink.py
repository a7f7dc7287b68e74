"""What a finished run hands to external report documents.

Rendering (README tables, results pages) lives outside this package; a sink
only receives the label, metadata, provider summary and link for a run.
"""

from __future__ import annotations

from typing import Protocol

from gaia_bench.benchmark.base import RunMetadata
from gaia_bench.config import BenchmarkConfig, DatasetSplit

BASE_COMMAND = "run_benchmark"
DETAILS_DOC = "./docs/benchmark-results.md"


class DocumentationSink(Protocol):
    def update(
        self,
        command_label: str,
        run_metadata: RunMetadata,
        provider_summary: str,
        details_link: str,
    ) -> None:
        ...


def benchmark_command(config: BenchmarkConfig) -> str:
    """Label identifying which kind of run produced the results."""
    if config.level:
        return f"{BASE_COMMAND} --level {config.level}"
    if config.category:
        return f"{BASE_COMMAND} --category {config.category.value}"
    if config.dataset == DatasetSplit.TEST:
        return f"{BASE_COMMAND} --test"
    return BASE_COMMAND


def section_id(command: str, dataset: str) -> str:
    for level in (1, 2, 3):
        if f"--level {level}" in command:
            return f"level-{level}"
    for category in ("files", "code", "search", "browser", "reasoning"):
        if f"--category {category}" in command:
            return category
    return "test" if dataset == DatasetSplit.TEST.value else "validation"


def details_link(command: str, dataset: str) -> str:
    return f"{DETAILS_DOC}#{section_id(command, dataset)}"
