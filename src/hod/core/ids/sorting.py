"""
Numeric ordering for task IDs.

IDs are compared segment by segment as integers, not lexicographically,
so "1.10" sorts after "1.2". A missing trailing segment counts as 0.
"""

from collections.abc import Iterable
from functools import cmp_to_key


def _segments(task_id: str) -> list[int]:
    segments: list[int] = []
    for part in task_id.split("."):
        try:
            segments.append(int(part))
        except ValueError:
            segments.append(0)
    return segments


def compare_ids(a: str, b: str) -> int:
    """
    Compare two IDs segment-wise.

    Returns:
        Negative if a < b, zero if equal, positive if a > b
    """
    parts_a = _segments(a)
    parts_b = _segments(b)
    for i in range(max(len(parts_a), len(parts_b))):
        val_a = parts_a[i] if i < len(parts_a) else 0
        val_b = parts_b[i] if i < len(parts_b) else 0
        if val_a != val_b:
            return val_a - val_b
    return 0


def sort_ids(ids: Iterable[str]) -> list[str]:
    """
    Sort task IDs numerically by segment.

    The sort is stable, so IDs comparing equal ("1" and "1.0") keep their
    input order.

    Example:
        >>> sort_ids(["2", "1.10", "1.2", "10"])
        ['1.2', '1.10', '2', '10']
    """
    return sorted(ids, key=cmp_to_key(compare_ids))
