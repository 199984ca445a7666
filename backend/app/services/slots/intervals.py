# backend/app/services/slots/intervals.py
"""
Calendar primitives.

TimeInterval is the single shape for working windows, breaks,
appointment occupancy and candidate slots. `overlaps` is the only
overlap test used by slots and booking code.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


@dataclass(frozen=True)
class TimeInterval:
    """Half-open interval [start, end)."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Interval start {self.start} must be before end {self.end}")

    @classmethod
    def from_start(cls, start: datetime, minutes: int) -> "TimeInterval":
        return cls(start, start + timedelta(minutes=minutes))

    @classmethod
    def on_day(cls, day: date, start_time: time, end_time: time) -> "TimeInterval":
        return cls(datetime.combine(day, start_time), datetime.combine(day, end_time))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """
    Strict overlap of two half-open intervals.

    Touching endpoints do not overlap: [14:00, 14:30) and [14:30, 15:00)
    can both be booked.
    """
    return a.start < b.end and a.end > b.start


def day_bounds(day: date) -> TimeInterval:
    """Whole day as [day 00:00, day+1 00:00)."""
    start = datetime.combine(day, time.min)
    return TimeInterval(start, start + timedelta(days=1))
