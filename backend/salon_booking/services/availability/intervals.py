# backend/salon_booking/services/availability/intervals.py
"""
Half-open interval math: [start, end).

Pure functions, no I/O. Values only need to be ordered
(datetimes in practice, ints in some tests).
"""

from typing import Any, Iterable, NamedTuple


class Interval(NamedTuple):
    start: Any
    end: Any


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """
    True iff [a_start, a_end) and [b_start, b_end) intersect.

    Touching intervals (a_end == b_start) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def contains(outer: Interval, inner: Interval) -> bool:
    """True iff inner lies fully inside outer."""
    return outer.start <= inner.start and inner.end <= outer.end


def subtract(interval: Interval, busy: Iterable[Interval]) -> list[Interval]:
    """
    Remove busy sub-intervals from interval.

    Returns the free remainder as sorted, non-overlapping, non-empty pieces.
    Busy intervals may be unsorted, overlapping, or partly outside.
    """
    free: list[Interval] = []
    cursor = interval.start

    for b_start, b_end in sorted(busy):
        if not overlaps(interval.start, interval.end, b_start, b_end):
            continue
        if b_start > cursor:
            free.append(Interval(cursor, b_start))
        if b_end > cursor:
            cursor = b_end
        if cursor >= interval.end:
            break

    if cursor < interval.end:
        free.append(Interval(cursor, interval.end))

    return free
