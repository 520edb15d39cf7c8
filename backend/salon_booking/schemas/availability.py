"""
Pydantic schemas for availability API.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field


class SlotInfo(BaseModel):
    """A single bookable start time."""
    time: str  # "HH:MM"
    start_at: datetime
    employee_ids: list[int] = Field(description="Employees free for the whole service at this time")

    model_config = {"from_attributes": True}


class AvailabilityDayResponse(BaseModel):
    """Bookable slots of one day."""
    salon_id: int
    service_id: int
    employee_id: int | None = None
    date: date
    service_duration_min: int
    slot_step_minutes: int = Field(description="Grid step in minutes (15/30/60)")
    slots: list[SlotInfo]

    model_config = {"from_attributes": True}


class NearestSlotResponse(BaseModel):
    """First available slot within the search horizon."""
    salon_id: int
    service_id: int
    employee_id: int | None = None
    date: date
    time: str
    start_at: datetime
    employee_ids: list[int]
    days_ahead: int

    model_config = {"from_attributes": True}


class SlotCheckRequest(BaseModel):
    service_id: int
    employee_id: int | None = None
    start_at: datetime

    model_config = {"from_attributes": True}


class SlotCheckResponse(BaseModel):
    salon_id: int
    service_id: int
    employee_id: int | None = None
    start_at: datetime
    end_at: datetime | None = None
    duration_min: int
    is_available: bool
    reason: str | None = None
    message: str | None = None

    model_config = {"from_attributes": True}


class CacheInvalidateResponse(BaseModel):
    salon_id: int
    deleted_keys: int
    dates: list[date] | str
