# backend/salon_booking/services/availability/calculator.py
"""
Slot generation for one employee on one day.

Input:
  ✓ open intervals of the day (eligibility.resolve_day)
  ✓ service duration
  ✓ grid step (BookingConfig.slot_step_minutes)
  ✓ busy intervals (blocking reservations of the employee)

Candidates sit on a grid anchored at the start of each open interval,
so the result is sorted and free of duplicates. The result covers the
whole day (it is what gets cached); starts already past today are cut
by the orchestrator at read time.
"""

from datetime import datetime, timedelta
from typing import Iterable

from .intervals import Interval, overlaps


def generate_slots(
    intervals: Iterable[Interval],
    duration_min: int,
    step_min: int,
    busy: Iterable[Interval] = (),
) -> list[datetime]:
    """
    Bookable start times.

    Returns:
        Ascending list of slot start datetimes. Empty list = no slots.
    """
    if duration_min <= 0 or step_min <= 0:
        return []

    duration = timedelta(minutes=duration_min)
    step = timedelta(minutes=step_min)
    busy = list(busy)
    slots: list[datetime] = []

    for start, end in sorted(intervals):
        t = start
        while t + duration <= end:
            if not any(overlaps(t, t + duration, b.start, b.end) for b in busy):
                slots.append(t)

            t += step

    return slots
