"""Close-name suggestions for error messages."""

from __future__ import annotations

from collections.abc import Iterable

from rapidfuzz import fuzz

from ...constants import Suggestions


def suggest_names(
    name: str,
    candidates: Iterable[str],
    *,
    limit: int = Suggestions.LIMIT,
    min_score: float = Suggestions.MIN_SCORE,
) -> list[str]:
    """Return up to ``limit`` candidates that look like ``name``, best first."""
    scored: list[tuple[float, str]] = []
    for candidate in candidates:
        score = fuzz.ratio(name, candidate) / 100
        if score >= min_score:
            scored.append((score, candidate))
    scored.sort(key=lambda item: (-item[0], item[1]))
    return [candidate for _, candidate in scored[:limit]]
