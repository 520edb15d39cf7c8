# backend/salon_booking/routers/working_hours.py
# Working hours are replaced wholesale: PUT = delete all + reinsert.

from fastapi import APIRouter, Depends
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_request_context
from ..redis_client import get_redis
from ..schemas.working_hours import WorkingHourRead, WorkingHoursReplace
from ..services import calendar_rules
from ..services.context import RequestContext

router = APIRouter(prefix="/salons/{salon_id}/working-hours", tags=["working_hours"])


@router.get("/", response_model=list[WorkingHourRead])
def list_working_hours(salon_id: int, db: Session = Depends(get_db)):
    return calendar_rules.list_working_hours(db, salon_id)


@router.put("/", response_model=list[WorkingHourRead])
def replace_working_hours(
    salon_id: int,
    data: WorkingHoursReplace,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    ctx: RequestContext = Depends(get_request_context),
):
    return calendar_rules.replace_working_hours(db, salon_id, data.items, ctx=ctx, redis=redis)
