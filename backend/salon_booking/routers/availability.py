"""
Availability API endpoints.

GET  /salons/{salon_id}/availability          - Bookable slots of a day
GET  /salons/{salon_id}/availability/nearest  - First available slot
POST /salons/{salon_id}/availability/check    - Dry-run check of a start time
POST /salons/{salon_id}/availability/invalidate - Flush cached listings (admin)
"""

from datetime import date

from fastapi import APIRouter, Body, Depends, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_request_context
from ..redis_client import get_redis
from ..schemas.availability import (
    AvailabilityDayResponse,
    CacheInvalidateResponse,
    NearestSlotResponse,
    SlotCheckRequest,
    SlotCheckResponse,
)
from ..services.availability import (
    check_slot,
    find_nearest,
    get_booking_config,
    invalidate_salon_cache,
    list_slots,
)
from ..services.context import RequestContext


router = APIRouter(prefix="/salons/{salon_id}/availability", tags=["availability"])


@router.get("", response_model=AvailabilityDayResponse)
def get_availability(
    salon_id: int,
    service_id: int,
    target_date: date | None = Query(None, alias="date"),
    employee_id: int | None = None,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Bookable start times for a service on a day (defaults to today)."""
    config = get_booking_config()
    target_date = target_date or config.now().date()

    result = list_slots(
        db=db,
        salon_id=salon_id,
        service_id=service_id,
        target_date=target_date,
        employee_id=employee_id,
        config=config,
        redis=redis,
    )
    return AvailabilityDayResponse(**result)


@router.get("/nearest", response_model=NearestSlotResponse)
def get_nearest_slot(
    salon_id: int,
    service_id: int,
    employee_id: int | None = None,
    from_date: date | None = None,
    horizon_days: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """First available slot; 404 when the (capped) horizon has none."""
    result = find_nearest(
        db=db,
        salon_id=salon_id,
        service_id=service_id,
        employee_id=employee_id,
        from_date=from_date,
        horizon_days=horizon_days,
        redis=redis,
    )
    return NearestSlotResponse(**result)


@router.post("/check", response_model=SlotCheckResponse)
def check_availability(
    salon_id: int,
    data: SlotCheckRequest,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """Would a reservation at start_at be accepted right now?"""
    config = get_booking_config()
    result = check_slot(
        db=db,
        salon_id=salon_id,
        service_id=data.service_id,
        start=data.start_at,
        employee_id=data.employee_id,
        config=config,
        ctx=ctx,
    )
    return SlotCheckResponse(**result)


@router.post("/invalidate", response_model=CacheInvalidateResponse)
def invalidate_availability_cache(
    salon_id: int,
    dates: list[date] | None = Body(None, embed=True),
    redis: Redis | None = Depends(get_redis),
):
    """Manually invalidate cached listings for the salon (admin endpoint)."""
    deleted = invalidate_salon_cache(redis, salon_id, dates)

    return CacheInvalidateResponse(
        salon_id=salon_id,
        deleted_keys=deleted,
        dates=dates if dates else "all",
    )
