# backend/salon_booking/routers/reservations.py
# Reservations are never deleted: cancellation is a status change.

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_request_context
from ..redis_client import get_redis
from ..schemas.reservations import (
    ReservationCreate,
    ReservationRead,
    ReservationStatusUpdate,
    ReservationUpdate,
)
from ..services import reservations as reservation_service
from ..services.context import RequestContext

router = APIRouter(prefix="/salons/{salon_id}/reservations", tags=["reservations"])


@router.get("/", response_model=list[ReservationRead])
def list_reservations(
    salon_id: int,
    employee_id: int | None = None,
    status: Literal["REQUESTED", "CONFIRMED", "CANCELLED", "COMPLETED"] | None = None,
    date: date | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
):
    return reservation_service.list_reservations(
        db, salon_id,
        employee_id=employee_id,
        status=status,
        on_date=date,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/{id}", response_model=ReservationRead)
def get_reservation(salon_id: int, id: int, db: Session = Depends(get_db)):
    return reservation_service.get_reservation(db, salon_id, id)


@router.post("/", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
def create_reservation(
    salon_id: int,
    data: ReservationCreate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    return reservation_service.create_reservation(db, salon_id, data, ctx=ctx, redis=redis)


@router.patch("/{id}", response_model=ReservationRead)
def reschedule_reservation(
    salon_id: int,
    id: int,
    data: ReservationUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    return reservation_service.reschedule_reservation(db, salon_id, id, data, ctx=ctx, redis=redis)


@router.post("/{id}/status", response_model=ReservationRead)
def change_reservation_status(
    salon_id: int,
    id: int,
    data: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    return reservation_service.change_status(db, salon_id, id, data, ctx=ctx, redis=redis)


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
