# backend/app/services/slots/availability.py
"""
Available slots for a (date, service, staff) triple.

Sources (working hours, holidays, active appointments) → candidate
slots (calculator) → overlap filter against active appointments.

The result can be stale by the time a booking arrives; the
authoritative check is the conflict guard at write time.
"""

import logging
from datetime import date, datetime
from typing import Iterable
from redis import Redis
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from .calculator import Slot, generate_candidate_slots
from .config import BookingConfig, get_booking_config
from .intervals import TimeInterval, overlaps
from .redis_store import SlotsRedisStore
from .sources import AvailabilitySources

logger = logging.getLogger(__name__)


def filter_available(
    candidates: Iterable[Slot],
    busy: list[TimeInterval],
) -> list[Slot]:
    """Keep slots overlapping no busy interval, preserving order."""
    return [
        slot for slot in candidates
        if not any(overlaps(slot.interval, b) for b in busy)
    ]


def calculate_available_slots(
    db: Session,
    target_date: date,
    service_id: int,
    staff_id: int,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> list[Slot]:
    """
    Calculate bookable slots for a service with a staff member.

    Raises:
        NotFoundError: service or staff member does not exist
    """
    config = config or get_booking_config()
    now = now or datetime.now()
    sources = AvailabilitySources(db)

    # Step 1: Resolve references
    service = sources.get_service(service_id)
    if not service:
        raise NotFoundError("Service not found")

    staff = sources.get_staff(staff_id)
    if not staff:
        raise NotFoundError("Staff member not found")

    # Step 2: Cache
    store = SlotsRedisStore(redis, config) if redis is not None else None
    if store is not None:
        cached = _read_cache(store, staff_id, service, target_date, now)
        if cached is not None:
            return cached

    # Step 3: Calculate
    slots = _compute_slots(sources, staff, service, target_date, config, now)

    if store is not None:
        try:
            store.store_day_slots(staff_id, service_id, target_date, slots, now)
        except Exception:
            logger.exception(f"Failed to cache slots staff={staff_id} date={target_date}")

    return slots


def _compute_slots(
    sources: AvailabilitySources,
    staff,
    service,
    target_date: date,
    config: BookingConfig,
    now: datetime,
) -> list[Slot]:
    if not staff.is_active:
        logger.debug(f"Staff {staff.id} is inactive")
        return []

    if sources.is_staff_on_holiday(staff.id, target_date):
        logger.debug(f"Staff {staff.id} is on holiday or salon closed on {target_date}")
        return []

    schedule = sources.day_schedule(staff.id, target_date)
    if schedule is None:
        logger.debug(f"No working hours for staff {staff.id} on {target_date}")
        return []

    candidates = generate_candidate_slots(
        target_date,
        service.duration_minutes,
        schedule,
        staff.id,
        config,
        now,
    )
    busy = sources.active_appointments(staff.id, target_date)
    return filter_available(candidates, busy)


def _read_cache(
    store: SlotsRedisStore,
    staff_id: int,
    service,
    target_date: date,
    now: datetime,
) -> list[Slot] | None:
    try:
        return store.get_available_slots(
            staff_id, service.id, target_date, service.duration_minutes, now
        )
    except Exception:
        logger.exception(f"Failed to read slots cache staff={staff_id} date={target_date}")
        return None
