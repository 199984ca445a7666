# backend/app/routers/slots.py
"""
Slots API endpoints.

GET  /slots/available  - bookable slots for (date, service, staff)
POST /slots/invalidate - manual cache eviction (admin)
"""

from datetime import date, datetime
from fastapi import APIRouter, Depends, HTTPException, Query, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_read_db
from ..dependencies import get_current_user, get_now
from ..models.generated import StaffMembers as DBStaffMembers, Users as DBUsers
from ..redis_client import get_redis
from ..schemas.slots import SlotRead, SlotsDayResponse, SlotsInvalidateResponse
from ..services.slots import calculate_available_slots, get_booking_config, invalidate_staff_cache
from ..services.slots.invalidator import get_affected_dates


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=SlotsDayResponse)
def get_available_slots(
    service_id: int,
    staff_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_read_db),
    redis: Redis | None = Depends(get_redis),
    now: datetime = Depends(get_now),
):
    """Get bookable slots for a service with a staff member on a day."""
    config = get_booking_config()

    if target_date < now.date():
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    slots = calculate_available_slots(
        db=db,
        target_date=target_date,
        service_id=service_id,
        staff_id=staff_id,
        config=config,
        now=now,
        redis=redis,
    )
    staff = db.get(DBStaffMembers, staff_id)

    return SlotsDayResponse(
        date=target_date,
        service_id=service_id,
        staff_id=staff_id,
        slot_interval_minutes=config.slot_interval_minutes,
        slots=[
            SlotRead(
                start_time=s.start,
                end_time=s.end,
                staff_id=s.staff_id,
                staff_name=staff.full_name,
                available=s.available,
            )
            for s in slots
        ],
    )


@router.post("/invalidate", response_model=SlotsInvalidateResponse)
def invalidate_slots_cache(
    staff_id: int,
    date_start: date | None = None,
    date_end: date | None = None,
    redis: Redis | None = Depends(get_redis),
    user: DBUsers = Depends(get_current_user),
):
    """Manually invalidate slots cache for a staff member (admin endpoint)."""
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin only")

    dates = None
    if date_start is not None:
        dates = get_affected_dates(date_start, date_end or date_start)

    deleted = invalidate_staff_cache(redis, staff_id, dates, get_booking_config())

    return SlotsInvalidateResponse(
        staff_id=staff_id,
        deleted_keys=deleted,
        dates=dates if dates else "all",
    )
