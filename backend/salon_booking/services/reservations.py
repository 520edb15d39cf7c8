"""
backend/salon_booking/services/reservations.py

Reservation write path: create, reschedule, status transitions.

Validation and the insert/update run in one transaction that holds the
write lock for the employee (row lock, or BEGIN IMMEDIATE on SQLite).
Two overlapping requests for one employee cannot both commit; the loser
sees the winner's row and gets Conflict.
"""

import logging
from datetime import date, datetime, timedelta

from redis import Redis
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..models import BLOCKING_STATUSES, Clients, Reservations
from ..schemas.reservations import ReservationCreate, ReservationStatusUpdate, ReservationUpdate
from .availability.availability import find_available_employee, resolve_employees, resolve_service
from .availability.config import BookingConfig, get_booking_config
from .availability.errors import (
    BookingError,
    Conflict,
    InvalidReservation,
    InvalidStatusTransition,
    NotFound,
    UnknownEmployeeOrService,
)
from .availability.invalidator import get_affected_dates_from_interval, invalidate_salon_cache
from .availability.store import day_bounds, lock_employee
from .availability.validator import validate_reservation
from .context import ANONYMOUS, RequestContext

logger = logging.getLogger(__name__)


# REQUESTED → CONFIRMED → COMPLETED, REQUESTED|CONFIRMED → CANCELLED
STATUS_TRANSITIONS = {
    "REQUESTED": {"CONFIRMED", "CANCELLED"},
    "CONFIRMED": {"COMPLETED", "CANCELLED"},
    "CANCELLED": set(),
    "COMPLETED": set(),
}


def can_transition(current: str, new: str) -> bool:
    return new in STATUS_TRANSITIONS.get(current, set())


# ── Read ─────────────────────────────────────────────────────────────────


def get_reservation(db: Session, salon_id: int, reservation_id: int) -> Reservations:
    obj = db.execute(
        select(Reservations).where(
            Reservations.id == reservation_id,
            Reservations.salon_id == salon_id,
        )
    ).scalar_one_or_none()
    if obj is None:
        raise NotFound(f"Reservation {reservation_id} not found.", reservation_id=reservation_id)
    return obj


def list_reservations(
    db: Session,
    salon_id: int,
    employee_id: int | None = None,
    status: str | None = None,
    on_date: date | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[Reservations]:
    query = select(Reservations).where(Reservations.salon_id == salon_id)

    if employee_id is not None:
        query = query.where(Reservations.employee_id == employee_id)
    if status is not None:
        query = query.where(Reservations.status == status)
    if on_date is not None:
        start, end = day_bounds(on_date)
        query = query.where(Reservations.start_at >= start, Reservations.start_at < end)
    if date_from is not None:
        query = query.where(Reservations.start_at >= day_bounds(date_from)[0])
    if date_to is not None:
        query = query.where(Reservations.start_at < day_bounds(date_to)[1])

    return list(db.execute(query.order_by(Reservations.start_at.desc())).scalars())


# ── Create ───────────────────────────────────────────────────────────────


def create_reservation(
    db: Session,
    salon_id: int,
    data: ReservationCreate,
    ctx: RequestContext = ANONYMOUS,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> Reservations:
    """
    Validate and persist a reservation.

    The end time is always start + service duration; a client-supplied
    end is never read. Without employee_id the first free qualified
    employee is assigned.
    """
    config = config or get_booking_config()
    now = now or config.now()
    start = config.normalize_start(data.start_at)

    logger.info(
        f"Reservation creation attempt: salon={salon_id} service={data.service_id} "
        f"employee={data.employee_id} start={start.isoformat()} type={data.type} actor={ctx.actor_id}"
    )

    try:
        _check_client(db, salon_id, data)
        if data.type == "online" and start < now:
            raise InvalidReservation("Online reservations must start in the future.", start_at=start)

        service = resolve_service(db, salon_id, data.service_id)

        if data.employee_id is not None:
            resolve_employees(db, salon_id, service, data.employee_id, config)
            employee_id = data.employee_id
        else:
            employee, result = find_available_employee(db, salon_id, service, start, config, ctx)
            if employee is None:
                if result is not None:
                    raise result.error
                raise UnknownEmployeeOrService(
                    f"No employee in salon {salon_id} performs service {service.id}.",
                    service_id=service.id,
                )
            employee_id = employee.id

        if lock_employee(db, salon_id, employee_id) is None:
            raise UnknownEmployeeOrService(f"Employee {employee_id} does not exist in salon {salon_id}.")

        # Authoritative check, inside the locked transaction
        result = validate_reservation(db, salon_id, employee_id, service.duration_min, start, ctx=ctx)
        if not result.ok:
            raise result.error

        obj = Reservations(
            salon_id=salon_id,
            employee_id=employee_id,
            service_id=service.id,
            start_at=result.start,
            end_at=result.end,
            status=data.status,
            type=data.type,
            client_id=data.client_id if data.type == "online" else None,
            client_full_name=data.client_full_name,
            client_phone=data.client_phone,
            notes=data.notes,
        )
        db.add(obj)
        db.commit()
    except BookingError:
        db.rollback()
        raise
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        logger.warning(f"Reservation insert lost a race: salon={salon_id} start={start.isoformat()}: {e}")
        raise Conflict("Time slot no longer available. Please choose another slot.") from e

    db.refresh(obj)
    invalidate_salon_cache(redis, salon_id, get_affected_dates_from_interval(obj.start_at, obj.end_at))

    logger.info(
        f"Reservation created: id={obj.id} salon={salon_id} employee={obj.employee_id} "
        f"service={obj.service_id} start={obj.start_at.isoformat()} end={obj.end_at.isoformat()} "
        f"auto_assigned={data.employee_id is None} actor={ctx.actor_id}"
    )
    return obj


def _check_client(db: Session, salon_id: int, data: ReservationCreate) -> None:
    if data.type == "manual":
        if not data.client_full_name or not data.client_phone:
            raise InvalidReservation("Manual reservations require client_full_name and client_phone.")
        return

    if data.client_id is None:
        raise InvalidReservation("Online reservations require client_id.")

    client = db.execute(
        select(Clients).where(Clients.id == data.client_id, Clients.salon_id == salon_id)
    ).scalar_one_or_none()
    if client is None:
        raise NotFound(f"Client {data.client_id} not found.", client_id=data.client_id)


# ── Update ───────────────────────────────────────────────────────────────


def reschedule_reservation(
    db: Session,
    salon_id: int,
    reservation_id: int,
    data: ReservationUpdate,
    ctx: RequestContext = ANONYMOUS,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
    now: datetime | None = None,
) -> Reservations:
    """
    Move a reservation to another start and/or employee.

    The reservation keeps its original length and is excluded from its
    own conflict check.
    """
    config = config or get_booking_config()
    now = now or config.now()

    try:
        obj = get_reservation(db, salon_id, reservation_id)
        if obj.status not in BLOCKING_STATUSES:
            raise InvalidStatusTransition(
                f"A {obj.status} reservation cannot be rescheduled.",
                reservation_id=reservation_id,
                status=obj.status,
            )

        old_start, old_end = obj.start_at, obj.end_at
        duration_min = int((old_end - old_start) / timedelta(minutes=1))

        start = old_start
        if data.start_at is not None:
            start = config.normalize_start(data.start_at)
            if start < now:
                raise InvalidReservation("Reservations cannot be moved into the past.", start_at=start)

        employee_id = data.employee_id if data.employee_id is not None else obj.employee_id
        if employee_id != obj.employee_id:
            resolve_employees(db, salon_id, obj.service, employee_id, config)

        if lock_employee(db, salon_id, employee_id) is None:
            raise UnknownEmployeeOrService(f"Employee {employee_id} does not exist in salon {salon_id}.")

        result = validate_reservation(
            db, salon_id, employee_id, duration_min, start, exclude_id=obj.id, ctx=ctx,
        )
        if not result.ok:
            raise result.error

        obj.employee_id = employee_id
        obj.start_at = result.start
        obj.end_at = result.end
        if data.notes is not None:
            obj.notes = data.notes
        db.commit()
    except BookingError:
        db.rollback()
        raise
    except (IntegrityError, OperationalError) as e:
        db.rollback()
        raise Conflict("Time slot no longer available. Please choose another slot.") from e

    db.refresh(obj)
    dates = get_affected_dates_from_interval(old_start, old_end) + get_affected_dates_from_interval(obj.start_at, obj.end_at)
    invalidate_salon_cache(redis, salon_id, sorted(set(dates)))

    logger.info(
        f"Reservation rescheduled: id={obj.id} salon={salon_id} employee={obj.employee_id} "
        f"start={obj.start_at.isoformat()} (was {old_start.isoformat()}) actor={ctx.actor_id}"
    )
    return obj


def change_status(
    db: Session,
    salon_id: int,
    reservation_id: int,
    data: ReservationStatusUpdate,
    ctx: RequestContext = ANONYMOUS,
    redis: Redis | None = None,
) -> Reservations:
    obj = get_reservation(db, salon_id, reservation_id)

    if not can_transition(obj.status, data.status):
        raise InvalidStatusTransition(
            f"Reservation status cannot change from {obj.status} to {data.status}.",
            reservation_id=reservation_id,
            current=obj.status,
            requested=data.status,
        )

    previous = obj.status
    obj.status = data.status
    if data.status == "CANCELLED":
        obj.cancel_reason = data.cancel_reason
    db.commit()
    db.refresh(obj)

    invalidate_salon_cache(redis, salon_id, get_affected_dates_from_interval(obj.start_at, obj.end_at))

    logger.info(
        f"Reservation status changed: id={obj.id} salon={salon_id} "
        f"{previous} → {obj.status} actor={ctx.actor_id}"
    )
    return obj
