# backend/salon_booking/schemas/holidays.py

from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field


class HolidayCreate(BaseModel):
    date: date
    name: str = Field(min_length=1, max_length=120)
    type: Literal["NATIONAL", "CUSTOM"] = "CUSTOM"
    is_active: bool = True

    model_config = {"from_attributes": True}


class HolidayUpdate(BaseModel):
    is_active: bool
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)


class HolidayRead(BaseModel):
    id: int
    salon_id: int

    date: date
    name: str
    type: str
    is_active: bool

    model_config = {"from_attributes": True}


class HolidayImportRequest(BaseModel):
    year: int = Field(ge=2000, le=2100)
    country: Optional[str] = Field(default=None, description="ISO country code, defaults to HOLIDAY_COUNTRY")


class HolidayImportResponse(BaseModel):
    salon_id: int
    year: int
    country: str
    imported: list[HolidayRead]
    skipped: int
