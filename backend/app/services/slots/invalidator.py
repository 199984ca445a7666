# backend/app/services/slots/invalidator.py
"""
Cache invalidation for staff slots.

Triggers:
✓ Appointment created / rescheduled / confirmed / cancelled
  → invalidate the (staff, date) pairs it touched, every service
✓ Manual admin request → selected dates or everything for the staff

Schedule and holiday edits are not tracked here: cache TTL
(slots_cache_ttl_seconds) bounds how long they stay stale.
"""

import logging
from datetime import date, timedelta
from redis import Redis

from .config import BookingConfig
from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_staff_cache(
    redis: Redis | None,
    staff_id: int,
    dates: list[date] | None = None,
    config: BookingConfig | None = None,
) -> int:
    """
    Invalidate cached slots for a staff member.

    Args:
        redis: Redis client, None = caching disabled
        staff_id: Staff member ID
        dates: List of specific dates to invalidate,
               or None to invalidate all cached dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    store = SlotsRedisStore(redis, config)
    try:
        deleted = store.delete_day_slots(staff_id, dates)
    except Exception:
        logger.exception(f"Failed to invalidate slots cache for staff={staff_id}")
        return 0

    logger.info(f"Slots cache invalidated: staff={staff_id} dates={dates or 'all'} keys={deleted}")
    return deleted


def get_affected_dates(
    date_start: date,
    date_end: date,
) -> list[date]:
    """
    Get list of dates in range [date_start, date_end].

    Args:
        date_start: Start date (inclusive)
        date_end: End date (inclusive)

    Returns:
        List of dates
    """
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    dates = []
    current = date_start
    while current <= date_end:
        dates.append(current)
        current += timedelta(days=1)

    return dates
