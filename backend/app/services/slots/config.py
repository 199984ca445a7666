# backend/app/services/slots/config.py
"""
Booking configuration for slots calculation and booking rules.
"""

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from ...config import settings


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        slot_interval_minutes: Step between two candidate slot starts
        min_advance_hours: Minimum hours between now and a bookable start
        cancellation_hours: Cancellation is refused this close to the start
        cache_ttl_seconds: Upper bound for Redis slot cache lifetime
    """
    slot_interval_minutes: int = 30
    min_advance_hours: int = 1
    cancellation_hours: int = 24
    cache_ttl_seconds: int = 300

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_interval_minutes <= 0:
            raise ValueError(
                f"slot_interval_minutes must be positive, got {self.slot_interval_minutes}"
            )
        if self.min_advance_hours < 0:
            raise ValueError(f"min_advance_hours must be >= 0, got {self.min_advance_hours}")
        if self.cancellation_hours < 0:
            raise ValueError(f"cancellation_hours must be >= 0, got {self.cancellation_hours}")

    @property
    def min_advance(self) -> timedelta:
        return timedelta(hours=self.min_advance_hours)

    @property
    def cancellation_window(self) -> timedelta:
        return timedelta(hours=self.cancellation_hours)


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton, read from settings)."""
    return BookingConfig(
        slot_interval_minutes=settings.slot_interval_minutes,
        min_advance_hours=settings.min_advance_hours,
        cancellation_hours=settings.cancellation_hours,
        cache_ttl_seconds=settings.slots_cache_ttl_seconds,
    )


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hour, minute = value.split(":")[:2]
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
