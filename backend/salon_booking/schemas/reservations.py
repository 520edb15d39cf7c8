# backend/salon_booking/schemas/reservations.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


class ReservationCreate(BaseModel):
    service_id: int
    employee_id: Optional[int] = None

    start_at: datetime

    type: Literal["online", "manual"] = "online"
    status: Literal["REQUESTED", "CONFIRMED"] = "CONFIRMED"

    # online: registered client
    client_id: Optional[int] = None
    # manual: entered by staff
    client_full_name: Optional[str] = Field(default=None, max_length=120)
    client_phone: Optional[str] = Field(default=None, max_length=40)

    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class ReservationUpdate(BaseModel):
    start_at: Optional[datetime] = None
    employee_id: Optional[int] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class ReservationStatusUpdate(BaseModel):
    status: Literal["CONFIRMED", "CANCELLED", "COMPLETED"]
    cancel_reason: Optional[str] = None

    model_config = {"from_attributes": True}


class ReservationRead(BaseModel):
    id: int

    salon_id: int
    employee_id: int
    service_id: int
    client_id: Optional[int] = None
    client_full_name: Optional[str] = None
    client_phone: Optional[str] = None

    start_at: datetime
    end_at: datetime

    status: str
    type: str
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
