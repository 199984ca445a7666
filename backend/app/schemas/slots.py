# backend/app/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field


class SlotRead(BaseModel):
    """A bookable window for one staff member."""
    start_time: datetime
    end_time: datetime
    staff_id: int
    staff_name: str
    available: bool = True

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Available slots for a service with a staff member on a day."""
    date: date
    service_id: int
    staff_id: int
    slot_interval_minutes: int = Field(description="Step between two slot starts")
    slots: list[SlotRead]

    model_config = {"from_attributes": True}


class SlotsInvalidateResponse(BaseModel):
    staff_id: int
    deleted_keys: int
    dates: list[date] | str
