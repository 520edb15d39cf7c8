# backend/salon_booking/services/availability/eligibility.py
"""
Day eligibility: is the salon open on a date, and when.

Single source of truth for slot listing and reservation validation.

Order:
  1. active holiday          → closed (holiday)
  2. no working_hours row    → closed (no_working_hours)
  3. start/end not set       → closed (weekday_closed)
  4. [start, end) minus break → open intervals
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time

from sqlalchemy.orm import Session

from .config import weekday_index
from .intervals import Interval, subtract
from .store import get_active_holiday, get_working_hour

logger = logging.getLogger(__name__)

CLOSED_HOLIDAY = "holiday"
CLOSED_NO_WORKING_HOURS = "no_working_hours"
CLOSED_WEEKDAY = "weekday_closed"


@dataclass(frozen=True)
class DayEligibility:
    date: date
    closed_reason: str | None = None
    intervals: list[Interval] = field(default_factory=list)
    holiday_name: str | None = None
    working_start: time | None = None
    working_end: time | None = None
    break_interval: Interval | None = None

    @property
    def is_open(self) -> bool:
        return self.closed_reason is None


def resolve_day(db: Session, salon_id: int, target_date: date) -> DayEligibility:
    """Resolve open intervals of salon on target_date."""
    holiday = get_active_holiday(db, salon_id, target_date)
    if holiday is not None:
        logger.debug(f"Salon {salon_id} closed on {target_date}: holiday {holiday.name}")
        return DayEligibility(
            date=target_date,
            closed_reason=CLOSED_HOLIDAY,
            holiday_name=holiday.name,
        )

    working_hour = get_working_hour(db, salon_id, weekday_index(target_date))
    if working_hour is None:
        return DayEligibility(date=target_date, closed_reason=CLOSED_NO_WORKING_HOURS)

    if working_hour.start_time is None or working_hour.end_time is None:
        return DayEligibility(date=target_date, closed_reason=CLOSED_WEEKDAY)

    return open_day(
        target_date,
        working_hour.start_time,
        working_hour.end_time,
        working_hour.break_start,
        working_hour.break_end,
    )


def open_day(
    target_date: date,
    start: time,
    end: time,
    break_start: time | None = None,
    break_end: time | None = None,
) -> DayEligibility:
    """Build an open day from clock times; the break is cut out."""
    day = Interval(
        datetime.combine(target_date, start),
        datetime.combine(target_date, end),
    )

    break_interval = None
    if break_start is not None and break_end is not None:
        break_interval = Interval(
            datetime.combine(target_date, break_start),
            datetime.combine(target_date, break_end),
        )

    intervals = subtract(day, [break_interval] if break_interval else [])
    if not intervals:
        return DayEligibility(date=target_date, closed_reason=CLOSED_WEEKDAY)

    return DayEligibility(
        date=target_date,
        intervals=intervals,
        working_start=start,
        working_end=end,
        break_interval=break_interval,
    )
