"""
backend/salon_booking/services/calendar_rules.py

Writes to the salon calendar: working hours and holidays.

Every write invalidates the salon's cached availability.
"""

import logging
from datetime import date

import holidays as holiday_calendars
from redis import Redis
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Holidays, WorkingHours
from ..schemas.holidays import HolidayCreate, HolidayUpdate
from ..schemas.working_hours import WorkingHourItem
from .availability.errors import InvalidWorkingHours, NotFound, UnknownHolidayCountry
from .availability.invalidator import invalidate_salon_cache
from .context import ANONYMOUS, RequestContext

logger = logging.getLogger(__name__)


# ── Working hours ────────────────────────────────────────────────────────


def validate_working_hour(item: WorkingHourItem) -> None:
    """
    Raise InvalidWorkingHours unless:
      - start/end both empty (closed) or both set with start < end
      - break both-or-neither, start <= break_start < break_end <= end
    """
    has_start = item.start_time is not None
    has_end = item.end_time is not None
    has_break_start = item.break_start is not None
    has_break_end = item.break_end is not None

    if has_start != has_end:
        raise InvalidWorkingHours(
            "start_time and end_time must both be set or both be empty.",
            weekday=item.weekday,
        )
    if has_break_start != has_break_end:
        raise InvalidWorkingHours(
            "break_start and break_end must both be set or both be empty.",
            weekday=item.weekday,
        )

    if not has_start:
        if has_break_start:
            raise InvalidWorkingHours("A closed day cannot have a break.", weekday=item.weekday)
        return

    if item.start_time >= item.end_time:
        raise InvalidWorkingHours("start_time must be before end_time.", weekday=item.weekday)

    if has_break_start and not (
        item.start_time <= item.break_start < item.break_end <= item.end_time
    ):
        raise InvalidWorkingHours(
            "Break must lie within working hours and break_start must be before break_end.",
            weekday=item.weekday,
        )


def list_working_hours(db: Session, salon_id: int) -> list[WorkingHours]:
    return list(
        db.execute(
            select(WorkingHours)
            .where(WorkingHours.salon_id == salon_id)
            .order_by(WorkingHours.weekday)
        ).scalars()
    )


def replace_working_hours(
    db: Session,
    salon_id: int,
    items: list[WorkingHourItem],
    ctx: RequestContext = ANONYMOUS,
    redis: Redis | None = None,
) -> list[WorkingHours]:
    """Delete all working hours of the salon and insert items instead."""
    weekdays = [item.weekday for item in items]
    if len(weekdays) != len(set(weekdays)):
        raise InvalidWorkingHours("Each weekday may appear only once.")

    for item in items:
        validate_working_hour(item)

    db.execute(delete(WorkingHours).where(WorkingHours.salon_id == salon_id))
    for item in items:
        db.add(WorkingHours(salon_id=salon_id, **item.model_dump()))
    db.commit()

    invalidate_salon_cache(redis, salon_id)
    logger.info(f"Working hours replaced: salon={salon_id} days={sorted(weekdays)} actor={ctx.actor_id}")

    return list_working_hours(db, salon_id)


# ── Holidays ─────────────────────────────────────────────────────────────


def list_holidays(db: Session, salon_id: int, year: int | None = None) -> list[Holidays]:
    query = select(Holidays).where(Holidays.salon_id == salon_id)
    if year is not None:
        query = query.where(Holidays.date >= date(year, 1, 1), Holidays.date <= date(year, 12, 31))
    return list(db.execute(query.order_by(Holidays.date)).scalars())


def get_holiday(db: Session, salon_id: int, holiday_id: int) -> Holidays:
    obj = db.execute(
        select(Holidays).where(Holidays.id == holiday_id, Holidays.salon_id == salon_id)
    ).scalar_one_or_none()
    if obj is None:
        raise NotFound(f"Holiday {holiday_id} not found.", holiday_id=holiday_id)
    return obj


def create_holiday(
    db: Session,
    salon_id: int,
    data: HolidayCreate,
    ctx: RequestContext = ANONYMOUS,
    redis: Redis | None = None,
) -> Holidays:
    """Create a holiday, or update the existing one on that date."""
    obj = db.execute(
        select(Holidays).where(Holidays.salon_id == salon_id, Holidays.date == data.date)
    ).scalar_one_or_none()

    if obj is None:
        obj = Holidays(salon_id=salon_id, **data.model_dump())
        db.add(obj)
    else:
        obj.name = data.name
        obj.type = data.type
        obj.is_active = data.is_active
    db.commit()
    db.refresh(obj)

    invalidate_salon_cache(redis, salon_id, [obj.date])
    logger.info(f"Holiday saved: salon={salon_id} date={obj.date} name={obj.name} actor={ctx.actor_id}")
    return obj


def update_holiday(
    db: Session,
    salon_id: int,
    holiday_id: int,
    data: HolidayUpdate,
    ctx: RequestContext = ANONYMOUS,
    redis: Redis | None = None,
) -> Holidays:
    obj = get_holiday(db, salon_id, holiday_id)
    obj.is_active = data.is_active
    if data.name is not None:
        obj.name = data.name
    db.commit()
    db.refresh(obj)

    invalidate_salon_cache(redis, salon_id, [obj.date])
    logger.info(
        f"Holiday updated: salon={salon_id} date={obj.date} active={obj.is_active} actor={ctx.actor_id}"
    )
    return obj


def delete_holiday(
    db: Session,
    salon_id: int,
    holiday_id: int,
    ctx: RequestContext = ANONYMOUS,
    redis: Redis | None = None,
) -> None:
    obj = get_holiday(db, salon_id, holiday_id)
    holiday_date = obj.date
    db.delete(obj)
    db.commit()

    invalidate_salon_cache(redis, salon_id, [holiday_date])
    logger.info(f"Holiday deleted: salon={salon_id} date={holiday_date} actor={ctx.actor_id}")


def import_national_holidays(
    db: Session,
    salon_id: int,
    year: int,
    country: str | None = None,
    ctx: RequestContext = ANONYMOUS,
    redis: Redis | None = None,
) -> tuple[list[Holidays], int]:
    """
    Insert the country's public holidays of a year as NATIONAL rows.

    Dates that already have a holiday (of any type) are left untouched.

    Returns:
        (imported rows, number of skipped dates)
    """
    country = (country or settings.holiday_country).upper()
    try:
        calendar = holiday_calendars.country_holidays(country, years=year)
    except NotImplementedError as e:
        raise UnknownHolidayCountry(f"No holiday calendar for country {country}.", country=country) from e

    existing = {
        h.date for h in db.execute(
            select(Holidays).where(Holidays.salon_id == salon_id)
        ).scalars()
    }

    imported = []
    skipped = 0
    for holiday_date, name in sorted(calendar.items()):
        if holiday_date in existing:
            skipped += 1
            continue
        obj = Holidays(salon_id=salon_id, date=holiday_date, name=name, type="NATIONAL", is_active=True)
        db.add(obj)
        imported.append(obj)
        existing.add(holiday_date)

    db.commit()
    for obj in imported:
        db.refresh(obj)

    if imported:
        invalidate_salon_cache(redis, salon_id, [h.date for h in imported])

    logger.info(
        f"National holidays imported: salon={salon_id} country={country} year={year} "
        f"imported={len(imported)} skipped={skipped} actor={ctx.actor_id}"
    )
    return imported, skipped
