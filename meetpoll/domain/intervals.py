"""
Pure helpers for comparing and scanning availability intervals.
"""

from itertools import chain
from typing import Iterable, Iterator, List, Sequence, Tuple

from pendulum import DateTime

from .models import Interval


def contains(interval: Interval, start: DateTime, end: DateTime) -> bool:
    """
    Check whether ``interval`` fully contains ``[start, end]``.

    Zero-length intervals never contain anything.
    """
    if interval.is_zero_length():
        return False
    return interval.start <= start and interval.end >= end


def flatten(form_availabilities: Sequence[Sequence[Interval]]) -> List[Interval]:
    """Concatenate every form's intervals, preserving submission order."""
    return list(chain.from_iterable(form_availabilities))


def breakpoints(intervals: Iterable[Interval]) -> List[DateTime]:
    """
    Collect every start and end timestamp, sorted ascending.

    Duplicates are kept; callers skip equal neighbours.
    """
    points: List[DateTime] = []
    for interval in intervals:
        points.append(interval.start)
        points.append(interval.end)
    return sorted(points)


def distinct_pairs(points: Sequence[DateTime]) -> Iterator[Tuple[DateTime, DateTime]]:
    """Yield adjacent breakpoint pairs whose endpoints differ."""
    for left, right in zip(points, points[1:]):
        if left == right:
            continue
        yield left, right


def count_containing(intervals: Iterable[Interval], start: DateTime, end: DateTime) -> int:
    """Count the intervals that fully contain ``[start, end]``."""
    return sum(1 for interval in intervals if contains(interval, start, end))
