"""Heuristic final-answer extraction from free-form agent text.

These are regex heuristics over free text and will misfire on unusual
phrasing. They only pick the answer string; correctness is still decided by
`evaluator.is_correct`.
"""

from __future__ import annotations

import re

_FINAL_ANSWER_INDICATORS = [
    re.compile(r"final answer", re.I),
    re.compile(r"task complete", re.I),
    re.compile(r"conclusion:", re.I),
    re.compile(r"therefore,?\s+(?:the answer is|it is)", re.I),
    re.compile(r"in summary", re.I),
]

_EXPLICIT_PATTERNS = [
    re.compile(r"(?:final answer|my final answer|the final answer)[:\s]+(.+?)(?:\.|$)", re.I | re.S),
    re.compile(r"(?:therefore|thus|so)[,\s]+(?:the answer is|it is)[:\s]+(.+?)(?:\.|$)", re.I | re.S),
]

_COUNT_PATTERNS = [
    re.compile(r"(?:total|count|there are|there were|number is)[:\s]+(\d+)", re.I),
    re.compile(r"(\d+)\s+(?:countries|items|elements|people|states)", re.I),
]

_GENERIC_PATTERNS = [
    re.compile(r"(?:answer|conclusion)[:\s]+(.+?)(?:\.|$)", re.I | re.S),
    re.compile(r"(?:the term|the word)[:\s]+\"([^\"]+)\"", re.I),
    re.compile(r"(?:the result is|result)[:\s]+(.+?)(?:\.|$)", re.I | re.S),
]

_REFLECTION_LIST_MARKERS = ("next action", "continue current approach", "verify current findings")
_REFLECTION_LINE_MARKERS = (
    "next action", "confidence", "does this help", "my immediate next", "i will", "i need to",
)
_TRAILING_PUNCT = re.compile(r"[.,;!?]+$")


def contains_final_answer(text: str) -> bool:
    return any(p.search(text) for p in _FINAL_ANSWER_INDICATORS)


def extract_final_answer(text: str) -> str:
    """Pull the most likely final answer out of an agent response."""
    clean = re.sub(r"🤔.*?REFLECTION.*?\*\*", "", text, flags=re.I)
    clean = re.sub(r"\*\*[^*]+\*\*", "", clean)
    clean = re.sub(r"^\s*\d+\.\s*", "", clean, flags=re.M).strip()

    answer = _first_plausible(_EXPLICIT_PATTERNS, clean)
    if answer:
        return answer

    if "how many" in text.lower():
        for pattern in _COUNT_PATTERNS:
            match = pattern.search(clean)
            if match:
                return match.group(1)
        bullets = re.findall(r"^[-•*]\s+", clean, flags=re.M)
        lowered = clean.lower()
        if len(bullets) >= 3 and not any(m in lowered for m in _REFLECTION_LIST_MARKERS):
            return str(len(bullets))

    answer = _first_plausible(_GENERIC_PATTERNS, clean)
    if answer:
        return answer

    lines = [
        line.strip() for line in clean.split("\n")
        if len(line.strip()) > 10 and not line.strip().startswith("□") and "?**" not in line
    ]
    if not lines:
        return clean

    candidates = [l for l in lines if not any(m in l.lower() for m in _REFLECTION_LINE_MARKERS)]
    if not candidates:
        return _TRAILING_PUNCT.sub("", lines[-1])
    last = candidates[-1]
    quoted = re.search(r"\"([^\"]+)\"", last)
    if quoted:
        return quoted.group(1)
    return _TRAILING_PUNCT.sub("", last)


def _first_plausible(patterns: list[re.Pattern[str]], text: str) -> str:
    for pattern in patterns:
        match = pattern.search(text)
        if not match or not match.group(1):
            continue
        answer = _TRAILING_PUNCT.sub("", match.group(1).strip())
        if "?**" not in answer and "does it help" not in answer.lower():
            return answer
    return ""
