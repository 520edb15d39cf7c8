from datetime import date, datetime, time

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salon_booking.database import get_db
from salon_booking.main import app
from salon_booking.models import (
    Base,
    Clients,
    Employees,
    Holidays,
    Reservations,
    Salons,
    Services,
    WorkingHours,
)
from salon_booking.redis_client import get_redis
from salon_booking.services.availability.config import BookingConfig

# In-memory database shared by every session of a test
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Tuesday, far enough in the future for the API tests that use the real clock
DAY = date(2030, 1, 15)
# Salon-local "now" for service-level tests: the evening before DAY
NOW = datetime(2030, 1, 14, 20, 0)


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return datetime.combine(day, time(hour, minute))


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def redis():
    return fakeredis.FakeRedis()


@pytest.fixture
def config():
    return BookingConfig()


@pytest.fixture(scope="function")
def client(db_session, redis):
    """API client bound to the test database and fake Redis."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: redis
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ── Seed data ────────────────────────────────────────────────────────────


def _add_salon(db, name: str) -> Salons:
    """Salon open every day 09:00–18:00 with a 12:00–13:00 break."""
    salon = Salons(name=name)
    db.add(salon)
    db.flush()
    for weekday in range(7):
        db.add(WorkingHours(
            salon_id=salon.id,
            weekday=weekday,
            start_time=time(9),
            end_time=time(18),
            break_start=time(12),
            break_end=time(13),
        ))
    db.commit()
    return salon


@pytest.fixture
def salon(db_session):
    return _add_salon(db_session, "Atlas Beauty")


@pytest.fixture
def other_salon(db_session):
    return _add_salon(db_session, "Medina Hair")


@pytest.fixture
def employee(db_session, salon):
    obj = Employees(salon_id=salon.id, full_name="Amina Idrissi")
    db_session.add(obj)
    db_session.commit()
    return obj


@pytest.fixture
def second_employee(db_session, salon):
    obj = Employees(salon_id=salon.id, full_name="Karim Alaoui")
    db_session.add(obj)
    db_session.commit()
    return obj


@pytest.fixture
def service(db_session, salon):
    """30-minute service."""
    obj = Services(salon_id=salon.id, name="Haircut", duration_min=30, price=80)
    db_session.add(obj)
    db_session.commit()
    return obj


@pytest.fixture
def long_service(db_session, salon):
    """60-minute service."""
    obj = Services(salon_id=salon.id, name="Coloring", duration_min=60, price=250)
    db_session.add(obj)
    db_session.commit()
    return obj


@pytest.fixture
def registered_client(db_session, salon):
    obj = Clients(salon_id=salon.id, full_name="Sara Benali", phone="+212600000001")
    db_session.add(obj)
    db_session.commit()
    return obj


@pytest.fixture
def add_reservation(db_session, salon, service):
    """Insert a reservation row directly, bypassing validation."""
    def _add(employee, start, end, status="CONFIRMED"):
        obj = Reservations(
            salon_id=salon.id,
            employee_id=employee.id,
            service_id=service.id,
            start_at=start,
            end_at=end,
            status=status,
            type="manual",
            client_full_name="Walk-in Client",
            client_phone="+212600000000",
        )
        db_session.add(obj)
        db_session.commit()
        db_session.refresh(obj)
        return obj
    return _add


@pytest.fixture
def add_holiday(db_session, salon):
    def _add(day=DAY, name="Closed for inventory", is_active=True):
        obj = Holidays(salon_id=salon.id, date=day, name=name, type="CUSTOM", is_active=is_active)
        db_session.add(obj)
        db_session.commit()
        return obj
    return _add
