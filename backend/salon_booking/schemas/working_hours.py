# backend/salon_booking/schemas/working_hours.py

from datetime import time
from typing import Optional
from pydantic import BaseModel, Field


class WorkingHourItem(BaseModel):
    weekday: int = Field(ge=0, le=6, description="0 = Sunday … 6 = Saturday")

    start_time: Optional[time] = None
    end_time: Optional[time] = None

    break_start: Optional[time] = None
    break_end: Optional[time] = None

    model_config = {"from_attributes": True}


class WorkingHoursReplace(BaseModel):
    items: list[WorkingHourItem]


class WorkingHourRead(WorkingHourItem):
    id: int
    salon_id: int

    model_config = {"from_attributes": True}
