# backend/app/routers/appointments.py
# DELETE = 405, cancellation goes through POST /{id}/cancel

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_current_user, get_now
from ..models.generated import Users as DBUsers
from ..redis_client import get_redis
from ..schemas.appointments import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentRead,
    AppointmentReschedule,
)
from ..services.appointments import (
    cancel_appointment,
    confirm_appointment,
    create_appointment,
    get_appointment,
    list_user_appointments,
    reschedule_appointment,
)
from ..services.slots import get_booking_config

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("/", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
def create(
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    now: datetime = Depends(get_now),
    user: DBUsers = Depends(get_current_user),
):
    return create_appointment(
        db,
        client=user,
        service_id=data.service_id,
        staff_id=data.staff_id,
        start=data.start_time,
        notes=data.notes,
        config=get_booking_config(),
        now=now,
        redis=redis,
    )


@router.get("/mine", response_model=list[AppointmentRead])
def read_mine(
    db: Session = Depends(get_db),
    user: DBUsers = Depends(get_current_user),
):
    # Declared before /{id} so "mine" is not parsed as an id
    return list_user_appointments(db, user)


@router.get("/{id}", response_model=AppointmentRead)
def read(
    id: int,
    db: Session = Depends(get_db),
    user: DBUsers = Depends(get_current_user),
):
    return get_appointment(db, id, user)


@router.patch("/{id}", response_model=AppointmentRead)
def reschedule(
    id: int,
    data: AppointmentReschedule,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    now: datetime = Depends(get_now),
    user: DBUsers = Depends(get_current_user),
):
    return reschedule_appointment(
        db,
        id,
        user,
        start=data.start_time,
        staff_id=data.staff_id,
        service_id=data.service_id,
        notes=data.notes,
        config=get_booking_config(),
        now=now,
        redis=redis,
    )


@router.post("/{id}/cancel", response_model=AppointmentRead)
def cancel(
    id: int,
    data: AppointmentCancel,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    now: datetime = Depends(get_now),
    user: DBUsers = Depends(get_current_user),
):
    return cancel_appointment(
        db,
        id,
        user,
        reason=data.reason,
        config=get_booking_config(),
        now=now,
        redis=redis,
    )


@router.post("/{id}/confirm", response_model=AppointmentRead)
def confirm(
    id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
    user: DBUsers = Depends(get_current_user),
):
    return confirm_appointment(db, id, user, config=get_booking_config(), redis=redis)


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
