# backend/salon_booking/services/availability/store.py
"""
Database access for the availability engine.

Calendar rules (working hours, holidays) and reservation intervals.
Every lookup is scoped by salon_id so a row of another salon is never
returned.
"""

import logging
from datetime import date, datetime, time, timedelta
from functools import wraps

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ...models import (
    BLOCKING_STATUSES,
    Employees,
    Holidays,
    Reservations,
    Services,
    WorkingHours,
    t_employee_services,
)
from .intervals import overlaps

logger = logging.getLogger(__name__)


def retry_read_once(func):
    """Retry an idempotent read once on a transient store failure."""
    @wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except OperationalError as e:
            logger.warning(f"Read {func.__name__} failed, retrying once: {e}")
            db.rollback()
            return func(db, *args, **kwargs)
    return wrapper


def day_bounds(target_date: date) -> tuple[datetime, datetime]:
    start = datetime.combine(target_date, time.min)
    return start, start + timedelta(days=1)


# ── Calendar rules ───────────────────────────────────────────────────────


@retry_read_once
def get_working_hour(db: Session, salon_id: int, weekday: int) -> WorkingHours | None:
    return db.execute(
        select(WorkingHours).where(
            WorkingHours.salon_id == salon_id,
            WorkingHours.weekday == weekday,
        )
    ).scalar_one_or_none()


@retry_read_once
def get_active_holiday(db: Session, salon_id: int, target_date: date) -> Holidays | None:
    return db.execute(
        select(Holidays).where(
            Holidays.salon_id == salon_id,
            Holidays.date == target_date,
            Holidays.is_active.is_(True),
        )
    ).scalar_one_or_none()


# ── Salon entities ───────────────────────────────────────────────────────


@retry_read_once
def get_service(db: Session, salon_id: int, service_id: int) -> Services | None:
    """Active service of this salon."""
    return db.execute(
        select(Services).where(
            Services.id == service_id,
            Services.salon_id == salon_id,
            Services.is_active.is_(True),
        )
    ).scalar_one_or_none()


@retry_read_once
def get_employee(db: Session, salon_id: int, employee_id: int) -> Employees | None:
    """Active employee of this salon."""
    return db.execute(
        select(Employees).where(
            Employees.id == employee_id,
            Employees.salon_id == salon_id,
            Employees.is_active.is_(True),
        )
    ).scalar_one_or_none()


def lock_employee(db: Session, salon_id: int, employee_id: int) -> Employees | None:
    """
    Fetch the employee row with a row lock for the rest of the transaction.

    Serializes concurrent bookings for one employee on databases with
    SELECT ... FOR UPDATE. SQLite ignores the clause and relies on
    BEGIN IMMEDIATE instead (see database.configure_sqlite).
    """
    return db.execute(
        select(Employees)
        .where(
            Employees.id == employee_id,
            Employees.salon_id == salon_id,
            Employees.is_active.is_(True),
        )
        .with_for_update()
    ).scalar_one_or_none()


def is_qualified(db: Session, employee: Employees, service_id: int, permissive: bool) -> bool:
    declared = {s.id for s in employee.services}
    if not declared:
        return permissive
    return service_id in declared


@retry_read_once
def get_qualified_employees(
    db: Session,
    salon_id: int,
    service_id: int,
    permissive: bool,
) -> list[Employees]:
    """
    Active employees of the salon who can perform the service.

    With permissive=True an employee without any declared service is
    included as well.
    """
    declared = (
        select(Employees)
        .join(t_employee_services, Employees.id == t_employee_services.c.employee_id)
        .where(
            Employees.salon_id == salon_id,
            Employees.is_active.is_(True),
            t_employee_services.c.service_id == service_id,
        )
    )
    employees = list(db.execute(declared).scalars().unique())

    if permissive:
        undeclared = (
            select(Employees)
            .where(
                Employees.salon_id == salon_id,
                Employees.is_active.is_(True),
                ~Employees.id.in_(select(t_employee_services.c.employee_id)),
            )
        )
        employees.extend(db.execute(undeclared).scalars())

    return sorted(employees, key=lambda e: e.id)


# ── Reservations ─────────────────────────────────────────────────────────


def _window_query(employee_id: int, window_start: datetime, window_end: datetime, exclude_id: int | None):
    """
    Blocking reservations of employee starting inside the window.

    The window is whole days, one day wider at the front, so a
    reservation running over midnight is still fetched. The precise
    overlap test is done with intervals.overlaps by the callers.
    """
    query = (
        select(Reservations)
        .where(
            Reservations.employee_id == employee_id,
            Reservations.status.in_(BLOCKING_STATUSES),
            Reservations.start_at >= window_start - timedelta(days=1),
            Reservations.start_at < window_end,
        )
        .order_by(Reservations.start_at)
    )
    if exclude_id is not None:
        query = query.where(Reservations.id != exclude_id)
    return query


@retry_read_once
def get_employee_reservations(
    db: Session,
    employee_id: int,
    target_date: date,
) -> list[Reservations]:
    """Blocking reservations of employee touching target_date."""
    start, end = day_bounds(target_date)
    return [
        r for r in db.execute(_window_query(employee_id, start, end, None)).scalars()
        if overlaps(r.start_at, r.end_at, start, end)
    ]


def find_overlapping_reservations(
    db: Session,
    employee_id: int,
    start: datetime,
    end: datetime,
    exclude_id: int | None = None,
) -> list[Reservations]:
    """Blocking reservations of employee overlapping [start, end)."""
    window_start, _ = day_bounds(start.date())
    _, window_end = day_bounds(end.date())
    return [
        r for r in db.execute(_window_query(employee_id, window_start, window_end, exclude_id)).scalars()
        if overlaps(r.start_at, r.end_at, start, end)
    ]
