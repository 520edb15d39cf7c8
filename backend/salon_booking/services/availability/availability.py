# backend/salon_booking/services/availability/availability.py
"""
Availability orchestration.

list_slots     - bookable start times for a service on a day, over one
                 employee or every qualified employee (union)
find_nearest   - first day with a slot inside a capped horizon
find_available_employee / check_slot - dry-run of the write-path
                 validator for a concrete start time

Listing and validation share eligibility.resolve_day and
intervals.overlaps, so a listed slot always passes validation.
"""

import logging
from datetime import date, datetime, timedelta

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ...models import Employees, Services
from ..context import ANONYMOUS, RequestContext
from .calculator import generate_slots
from .config import BookingConfig, format_slot_time, get_booking_config, slot_minutes
from .eligibility import resolve_day
from .errors import (
    BookingError,
    InvalidDuration,
    InvalidReservation,
    NoSlotAvailable,
    UnknownEmployeeOrService,
)
from .intervals import Interval
from .redis_store import SlotsRedisStore
from .store import (
    get_employee,
    get_employee_reservations,
    get_qualified_employees,
    get_service,
    is_qualified,
)
from .validator import ValidationResult, validate_reservation

logger = logging.getLogger(__name__)


def list_slots(
    db: Session,
    salon_id: int,
    service_id: int,
    target_date: date,
    employee_id: int | None = None,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Calculate available time slots for a service.

    Returns:
        Dict for AvailabilityDayResponse. Closed, past or fully booked
        days give an empty "slots" list.
    """
    config = config or get_booking_config()
    now = now or config.now()

    logger.info(
        f"Availability calculation started: salon={salon_id} service={service_id} "
        f"employee={employee_id} date={target_date}"
    )

    service = resolve_service(db, salon_id, service_id)
    employees = resolve_employees(db, salon_id, service, employee_id, config)

    result = {
        "salon_id": salon_id,
        "service_id": service_id,
        "employee_id": employee_id,
        "date": target_date,
        "service_duration_min": service.duration_min,
        "slot_step_minutes": config.slot_step_minutes,
        "slots": [],
    }

    if target_date < now.date():
        logger.info(f"Date {target_date} is in the past, no slots available")
        return result

    min_minute = _min_minute(target_date, now)
    day_slots = _get_day_slots(
        db, salon_id, service, target_date, employee_id, employees, config, redis, min_minute
    )

    result["slots"] = [
        {
            "time": time_str,
            "start_at": datetime.combine(target_date, datetime.strptime(time_str, "%H:%M").time()),
            "employee_ids": employee_ids,
        }
        for time_str, employee_ids in day_slots
    ]

    logger.info(
        f"Availability calculation completed: salon={salon_id} service={service_id} "
        f"employee={employee_id} date={target_date} slots={len(result['slots'])} "
        f"employees_checked={len(employees)}"
    )
    return result


def find_nearest(
    db: Session,
    salon_id: int,
    service_id: int,
    employee_id: int | None = None,
    from_date: date | None = None,
    horizon_days: int | None = None,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> dict:
    """
    First available slot from from_date on, scanning at most the capped horizon.

    Raises:
        NoSlotAvailable: the horizon is exhausted without a single slot.
    """
    config = config or get_booking_config()
    now = now or config.now()
    today = now.date()

    start_date = max(from_date or today, today)
    horizon = config.clamp_horizon(horizon_days)

    for days_ahead in range(horizon):
        target_date = start_date + timedelta(days=days_ahead)
        day = list_slots(db, salon_id, service_id, target_date, employee_id, config, redis, now)
        if day["slots"]:
            nearest = day["slots"][0]
            logger.info(
                f"Nearest slot found: salon={salon_id} service={service_id} employee={employee_id} "
                f"slot={nearest['start_at'].isoformat()} days_ahead={days_ahead}"
            )
            return {
                "salon_id": salon_id,
                "service_id": service_id,
                "employee_id": employee_id,
                "date": target_date,
                "time": nearest["time"],
                "start_at": nearest["start_at"],
                "employee_ids": nearest["employee_ids"],
                "days_ahead": days_ahead,
            }

    logger.warning(
        f"No available slots in the next {horizon} days: salon={salon_id} "
        f"service={service_id} employee={employee_id}"
    )
    raise NoSlotAvailable(
        f"No available slot in the next {horizon} days.",
        from_date=start_date,
        horizon_days=horizon,
    )


def find_available_employee(
    db: Session,
    salon_id: int,
    service: Services,
    start: datetime,
    config: BookingConfig | None = None,
    ctx: RequestContext = ANONYMOUS,
    exclude_id: int | None = None,
) -> tuple[Employees | None, ValidationResult | None]:
    """
    First qualified employee for whom a reservation at start validates.

    Returns:
        (employee, result) on success, (None, first failed result) otherwise.
        The failed result is None when nobody is qualified at all.
    """
    config = config or get_booking_config()
    employees = get_qualified_employees(db, salon_id, service.id, config.permissive_qualifications)
    day = resolve_day(db, salon_id, start.date())

    first_failure = None
    for employee in employees:
        result = validate_reservation(
            db, salon_id, employee.id, service.duration_min, start,
            exclude_id=exclude_id, ctx=ctx, day=day,
        )
        if result.ok:
            logger.info(
                f"Available employee found: salon={salon_id} employee={employee.id} "
                f"service={service.id} start={start.isoformat()}"
            )
            return employee, result
        first_failure = first_failure or result

    logger.warning(
        f"No available employee found: salon={salon_id} service={service.id} start={start.isoformat()}"
    )
    return None, first_failure


def check_slot(
    db: Session,
    salon_id: int,
    service_id: int,
    start: datetime,
    employee_id: int | None = None,
    config: BookingConfig | None = None,
    ctx: RequestContext = ANONYMOUS,
    now: datetime | None = None,
) -> dict:
    """
    Dry-run validation of a concrete start time; nothing is written.

    start is normalized exactly as the write path does, so a check and a
    create with the same start_at always get the same answer.
    """
    config = config or get_booking_config()
    now = now or config.now()
    start = config.normalize_start(start)
    service = resolve_service(db, salon_id, service_id)

    if start < now:
        raise InvalidReservation("Start time must be in the future.", start_at=start)

    if employee_id is not None:
        resolve_employees(db, salon_id, service, employee_id, config)
        result = validate_reservation(db, salon_id, employee_id, service.duration_min, start, ctx=ctx)
    else:
        employee, result = find_available_employee(db, salon_id, service, start, config, ctx)
        employee_id = employee.id if employee else None

    error: BookingError | None = result.error if result else None
    available = result is not None and result.ok

    return {
        "salon_id": salon_id,
        "service_id": service_id,
        "employee_id": employee_id,
        "start_at": start,
        "end_at": result.end if result else None,
        "duration_min": service.duration_min,
        "is_available": available,
        "reason": error.code if error else (None if available else "no_qualified_employee"),
        "message": error.message if error else None,
    }


# ── Resolution helpers ───────────────────────────────────────────────────


def resolve_service(db: Session, salon_id: int, service_id: int) -> Services:
    service = get_service(db, salon_id, service_id)
    if service is None:
        raise UnknownEmployeeOrService(
            f"Service {service_id} does not exist in salon {salon_id}.",
            service_id=service_id,
        )
    if not service.duration_min or service.duration_min <= 0:
        raise InvalidDuration(
            f"Service {service_id} has an invalid duration ({service.duration_min}).",
            service_id=service_id,
        )
    return service


def resolve_employees(
    db: Session,
    salon_id: int,
    service: Services,
    employee_id: int | None,
    config: BookingConfig,
) -> list[Employees]:
    """The requested employee (checked), or every qualified employee."""
    if employee_id is None:
        return get_qualified_employees(db, salon_id, service.id, config.permissive_qualifications)

    employee = get_employee(db, salon_id, employee_id)
    if employee is None or not is_qualified(db, employee, service.id, config.permissive_qualifications):
        raise UnknownEmployeeOrService(
            f"Employee {employee_id} does not exist in salon {salon_id} "
            f"or does not perform service {service.id}.",
            employee_id=employee_id,
            service_id=service.id,
        )
    return [employee]


# ── Day slots (with cache) ───────────────────────────────────────────────


def _get_day_slots(
    db: Session,
    salon_id: int,
    service: Services,
    target_date: date,
    employee_id: int | None,
    employees: list[Employees],
    config: BookingConfig,
    redis: Redis | None,
    min_minute: int,
) -> list[tuple[str, list[int]]]:
    """Slots of the whole day from cache or DB, then cut at min_minute."""
    store = SlotsRedisStore(redis, config) if redis is not None else None
    generation = None

    if store is not None:
        try:
            cached = store.get_day_slots(salon_id, target_date, service.id, employee_id, min_minute)
            if cached is not None:
                return cached
            # Read before the DB so a write committed meanwhile voids our store
            generation = store.get_generation(salon_id)
        except RedisError:
            logger.exception("Availability cache read failed, calculating from database")

    slots = _calculate_day_slots(db, salon_id, service, target_date, employees, config)

    if generation is not None:
        try:
            stored = store.store_day_slots(
                salon_id, target_date, service.id, employee_id, slots, generation=generation
            )
            if not stored:
                logger.info(
                    f"Availability cache invalidated during calculation, not stored: "
                    f"salon={salon_id} date={target_date} service={service.id}"
                )
        except RedisError:
            logger.exception("Availability cache write failed")

    return [
        (time_str, employee_ids)
        for time_str, employee_ids in slots
        if slot_minutes(time_str) >= min_minute
    ]


def _calculate_day_slots(
    db: Session,
    salon_id: int,
    service: Services,
    target_date: date,
    employees: list[Employees],
    config: BookingConfig,
) -> list[tuple[str, list[int]]]:
    """Union of per-employee slots: ("HH:MM", [employee_id, ...]) sorted by time."""
    day = resolve_day(db, salon_id, target_date)
    if not day.is_open:
        logger.info(f"Salon {salon_id} closed on {target_date} ({day.closed_reason}), no slots available")
        return []

    by_time: dict[datetime, list[int]] = {}
    for employee in employees:
        busy = [
            Interval(r.start_at, r.end_at)
            for r in get_employee_reservations(db, employee.id, target_date)
        ]
        for slot in generate_slots(day.intervals, service.duration_min, config.slot_step_minutes, busy):
            by_time.setdefault(slot, []).append(employee.id)

        logger.debug(
            f"Employee slots calculated: employee={employee.id} date={target_date} "
            f"busy={len(busy)}"
        )

    return [(format_slot_time(t), by_time[t]) for t in sorted(by_time)]


def _min_minute(target_date: date, now: datetime) -> int:
    """First minute of the day still bookable (slots before now are dropped today)."""
    if target_date != now.date():
        return 0
    minute = now.hour * 60 + now.minute
    if now.second or now.microsecond:
        minute += 1
    return minute
