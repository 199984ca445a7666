# backend/app/services/slots/__init__.py
"""
Slots calculation module.

Calendar primitives → availability sources → candidate generation →
appointment filter. Results are cached per (staff, service, date) in
Redis Sorted Sets and evicted on appointment writes.
"""

from .config import BookingConfig, get_booking_config
from .intervals import TimeInterval, overlaps
from .calculator import Slot, generate_candidate_slots
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_staff_cache
from .availability import calculate_available_slots, filter_available

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "TimeInterval",
    "overlaps",
    "Slot",
    "generate_candidate_slots",
    "SlotsRedisStore",
    "invalidate_staff_cache",
    "calculate_available_slots",
    "filter_available",
]
