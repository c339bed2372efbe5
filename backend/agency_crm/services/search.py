"""Helpers for the global keyword search."""
from typing import Any, Callable, Iterable, List


def like_pattern(term: str) -> str:
    """ILIKE pattern for a substring match, with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def merge_unique(*result_sets: Iterable[Any], key: Callable[[Any], Any], limit: int) -> List[Any]:
    """Union result sets in order, keeping the first row seen for each key."""
    seen = set()
    merged = []
    for rows in result_sets:
        for row in rows:
            k = key(row)
            if k in seen:
                continue
            seen.add(k)
            merged.append(row)
    return merged[:limit]
