# backend/app/schemas/appointments.py

from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, Field, NaiveDatetime

from ..models.generated import AppointmentStatus


class AppointmentCreate(BaseModel):
    service_id: int
    staff_id: int
    start_time: NaiveDatetime  # salon local time, offsets are rejected
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentReschedule(BaseModel):
    start_time: NaiveDatetime  # salon local time, offsets are rejected
    service_id: Optional[int] = None
    staff_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class AppointmentRead(BaseModel):
    id: int

    client_id: int
    staff_id: int
    service_id: int

    appointment_date: date
    start_time: time
    end_time: time

    status: AppointmentStatus
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
