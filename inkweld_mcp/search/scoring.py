"""Text scoring shared by the search tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, TypeVar

WILDCARD = "*"
EXACT_SCORE = 1.0
SUBSTRING_SCORE = 0.8
WORD_SCORE = 0.5
MATCHED_VALUE_LIMIT = 200


def match_text(text: Any, query: str) -> float:
    """Score ``text`` against ``query`` (case-insensitive).

    ``*`` and exact matches score 1.0, substrings 0.8, and otherwise each
    whitespace-separated query word found in the text contributes to
    ``0.5 * matched / total``.
    """
    if not isinstance(text, str) or not text or not query:
        return 0.0
    if query == WILDCARD:
        return EXACT_SCORE

    lower_text = text.lower()
    lower_query = query.lower()
    if lower_text == lower_query:
        return EXACT_SCORE
    if lower_query in lower_text:
        return SUBSTRING_SCORE

    words = lower_query.split()
    if not words:
        return 0.0
    matched = [w for w in words if w in lower_text]
    if matched:
        return WORD_SCORE * (len(matched) / len(words))
    return 0.0


@dataclass(frozen=True)
class FieldMatch:
    field: str
    value: str
    score: float


def search_in_object(obj: Mapping[str, Any], query: str, prefix: str = "") -> List[FieldMatch]:
    """Score every string reachable from ``obj``, reporting dotted field paths.

    Strings inside lists are reported under the list's own path.
    """
    matches: List[FieldMatch] = []
    for key, value in obj.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, str):
            score = match_text(value, query)
            if score > 0:
                matches.append(FieldMatch(path, value, score))
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, str):
                    score = match_text(item, query)
                    if score > 0:
                        matches.append(FieldMatch(path, item, score))
                elif isinstance(item, dict):
                    matches.extend(search_in_object(item, query, path))
        elif isinstance(value, dict):
            matches.extend(search_in_object(value, query, path))
    return matches


def truncate_value(value: str, limit: int = MATCHED_VALUE_LIMIT) -> str:
    return value[:limit]


def capped_limit(requested: Any, default: int, cap: int) -> int:
    """``min(requested or default, cap)``; non-numeric or non-positive values use ``default``."""
    try:
        value = int(requested)
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        value = default
    return min(value, cap)


R = TypeVar("R", bound=Dict[str, Any])


def dedupe_best(results: Iterable[R], key: str = "elementId") -> List[R]:
    """Keep the highest-scoring result per ``key``, then order by score descending."""
    best: Dict[Any, R] = {}
    for result in results:
        current = best.get(result[key])
        if current is None or result["score"] > current["score"]:
            best[result[key]] = result
    return sorted(best.values(), key=lambda r: r["score"], reverse=True)
