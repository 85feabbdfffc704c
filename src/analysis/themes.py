"""Theme frequency reducer used by the dashboard statistics."""
from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence, Tuple


def tally_themes(theme_lists: Iterable[Sequence[str]]) -> Counter[str]:
    """Count every theme literal across *theme_lists*.

    Themes are keyed by their exact string: case and whitespace variants are
    distinct. The returned counter preserves first-encountered order.
    """

    counts: Counter[str] = Counter()
    for themes in theme_lists:
        for theme in themes:
            counts[theme] += 1
    return counts


def top_themes(
    theme_lists: Iterable[Sequence[str]], *, limit: int = 10
) -> List[Tuple[str, int]]:
    """Return the *limit* most frequent themes as ``(name, count)`` pairs.

    Ties keep the order in which the themes were first encountered.
    """

    counts = tally_themes(theme_lists)
    # sorted() is stable (also with reverse=True), so ties stay in insertion order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]
