"""Heuristic capability categories for GAIA tasks."""

from __future__ import annotations

import re

from gaia_bench.config import Category

from .base import Task

CODE_KEYWORDS = ("calculate", "compute", "code", "program", "equation", "formula", "algorithm")
SEARCH_KEYWORDS = (
    "search", "find", "article", "website", "url",
    "arxiv", "wikipedia", "published", "journal",
)
BROWSER_KEYWORDS = ("browser", "navigate", "click", "screenshot", "webpage", "web page")

_ARITHMETIC = re.compile(r"\d+\s*[+\-*/]\s*\d+")


def categorize_task(task: Task) -> list[str]:
    """Return the capability categories a task likely needs.

    Every rule is checked independently, so a task can land in several
    categories. "reasoning" is the fallback when nothing else matched.
    """
    question = task.question.lower()
    categories: list[str] = []

    if task.files:
        categories.append(Category.FILES.value)
    if _contains_any(question, CODE_KEYWORDS) or _ARITHMETIC.search(question):
        categories.append(Category.CODE.value)
    if _contains_any(question, SEARCH_KEYWORDS):
        categories.append(Category.SEARCH.value)
    if _contains_any(question, BROWSER_KEYWORDS):
        categories.append(Category.BROWSER.value)

    if not categories:
        categories.append(Category.REASONING.value)
    return categories


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)
