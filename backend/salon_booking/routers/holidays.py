# backend/salon_booking/routers/holidays.py

from fastapi import APIRouter, Depends, status
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import get_request_context
from ..redis_client import get_redis
from ..schemas.holidays import (
    HolidayCreate,
    HolidayImportRequest,
    HolidayImportResponse,
    HolidayRead,
    HolidayUpdate,
)
from ..services import calendar_rules
from ..services.context import RequestContext

router = APIRouter(prefix="/salons/{salon_id}/holidays", tags=["holidays"])


@router.get("/", response_model=list[HolidayRead])
def list_holidays(salon_id: int, year: int | None = None, db: Session = Depends(get_db)):
    return calendar_rules.list_holidays(db, salon_id, year)


@router.get("/{id}", response_model=HolidayRead)
def get_holiday(salon_id: int, id: int, db: Session = Depends(get_db)):
    return calendar_rules.get_holiday(db, salon_id, id)


@router.post("/", response_model=HolidayRead, status_code=status.HTTP_201_CREATED)
def create_holiday(
    salon_id: int,
    data: HolidayCreate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    return calendar_rules.create_holiday(db, salon_id, data, ctx=ctx, redis=redis)


@router.patch("/{id}", response_model=HolidayRead)
def update_holiday(
    salon_id: int,
    id: int,
    data: HolidayUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    return calendar_rules.update_holiday(db, salon_id, id, data, ctx=ctx, redis=redis)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(
    salon_id: int,
    id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    calendar_rules.delete_holiday(db, salon_id, id, ctx=ctx, redis=redis)


@router.post("/import", response_model=HolidayImportResponse)
def import_holidays(
    salon_id: int,
    data: HolidayImportRequest,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    """Import national public holidays of a year (python-holidays calendars)."""
    imported, skipped = calendar_rules.import_national_holidays(
        db, salon_id, data.year, data.country, ctx=ctx, redis=redis
    )
    return HolidayImportResponse(
        salon_id=salon_id,
        year=data.year,
        country=(data.country or settings.holiday_country).upper(),
        imported=[HolidayRead.model_validate(h) for h in imported],
        skipped=skipped,
    )
