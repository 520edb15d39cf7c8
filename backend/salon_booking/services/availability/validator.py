# backend/salon_booking/services/availability/validator.py
"""
Reservation validation for the write path.

Checks run in order and stop at the first failure:
  1. holiday
  2. working hours (inside one open interval of the day, not in the break)
  3. conflict with a blocking reservation of the same employee

Each check is a plain function returning a BookingError or None.
The end of a reservation is always start + service duration.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..context import ANONYMOUS, RequestContext
from .config import format_slot_time
from .eligibility import CLOSED_HOLIDAY, DayEligibility, resolve_day
from .errors import (
    BookingError,
    ClosedDay,
    Conflict,
    DuringBreak,
    InvalidDuration,
    OutsideWorkingHours,
)
from .intervals import Interval, contains, overlaps
from .store import find_overlapping_reservations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    start: datetime
    end: datetime
    error: BookingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def reservation_end(start: datetime, duration_min: int) -> datetime:
    return start + timedelta(minutes=duration_min)


# ── Rules ────────────────────────────────────────────────────────────────


def check_duration(duration_min: int) -> BookingError | None:
    if duration_min is None or duration_min <= 0:
        return InvalidDuration(f"Service duration must be a positive number of minutes, got {duration_min}.")
    return None


def check_holiday(day: DayEligibility) -> BookingError | None:
    if day.closed_reason == CLOSED_HOLIDAY:
        return ClosedDay(
            f"Reservations cannot be made on {day.holiday_name} ({day.date.isoformat()}).",
            date=day.date,
            reason=CLOSED_HOLIDAY,
            holiday=day.holiday_name,
        )
    return None


def check_working_hours(day: DayEligibility, start: datetime, end: datetime) -> BookingError | None:
    if not day.is_open:
        return ClosedDay(
            f"The salon is closed on {day.date.isoformat()}.",
            date=day.date,
            reason=day.closed_reason,
        )

    requested = Interval(start, end)
    if any(contains(interval, requested) for interval in day.intervals):
        return None

    br = day.break_interval
    if br is not None and overlaps(start, end, br.start, br.end):
        return DuringBreak(
            f"Reservation cannot be made during break time "
            f"({format_slot_time(br.start)} - {format_slot_time(br.end)}).",
            break_start=br.start,
            break_end=br.end,
        )

    return OutsideWorkingHours(
        f"Reservation must be within working hours "
        f"({format_slot_time(day.working_start)} - {format_slot_time(day.working_end)}).",
        working_start=day.working_start,
        working_end=day.working_end,
    )


def check_conflict(
    db: Session,
    employee_id: int,
    start: datetime,
    end: datetime,
    exclude_id: int | None = None,
) -> BookingError | None:
    conflicts = find_overlapping_reservations(db, employee_id, start, end, exclude_id)
    if not conflicts:
        return None

    conflict = conflicts[0]
    time_range = f"{format_slot_time(conflict.start_at)} - {format_slot_time(conflict.end_at)}"
    return Conflict(
        f"Time slot conflicts with existing reservation on "
        f"{conflict.start_at.date().isoformat()} from {time_range}.",
        reservation_id=conflict.id,
        start_at=conflict.start_at,
        end_at=conflict.end_at,
    )


# ── Entry point ──────────────────────────────────────────────────────────


def validate_reservation(
    db: Session,
    salon_id: int,
    employee_id: int,
    duration_min: int,
    start: datetime,
    exclude_id: int | None = None,
    ctx: RequestContext = ANONYMOUS,
    day: DayEligibility | None = None,
) -> ValidationResult:
    """
    Validate a proposed reservation of employee at start.

    Args:
        db: Session
        salon_id: Salon the employee and service belong to
        employee_id: Employee to book
        duration_min: Service duration (end = start + duration)
        start: Salon-local naive start datetime
        exclude_id: Reservation being updated, ignored in the conflict check
        ctx: Request context for logging
        day: Already resolved eligibility of start.date(), if the caller has it
    """
    error = check_duration(duration_min)
    if error is not None:
        return ValidationResult(start=start, end=start, error=error)

    end = reservation_end(start, duration_min)
    day = day or resolve_day(db, salon_id, start.date())

    error = (
        check_holiday(day)
        or check_working_hours(day, start, end)
        or check_conflict(db, employee_id, start, end, exclude_id)
    )

    if error is not None:
        logger.warning(
            f"Reservation rejected ({error.code}): salon={salon_id} employee={employee_id} "
            f"start={start.isoformat()} end={end.isoformat()} "
            f"exclude={exclude_id} actor={ctx.actor_id}: {error.message}"
        )
    else:
        logger.debug(
            f"Reservation valid: salon={salon_id} employee={employee_id} "
            f"start={start.isoformat()} end={end.isoformat()} actor={ctx.actor_id}"
        )

    return ValidationResult(start=start, end=end, error=error)
