# backend/app/services/slots/calculator.py
"""
Candidate slot generation for one staff member on one day.

Walks the working window in fixed steps of slot_interval_minutes:

✓ service duration (slot ends at most at closing time)
✓ break window (cursor inside [break_start, break_end) is skipped)
✓ min_advance_hours (slot_start must be strictly after now + advance)

Does NOT contain:
✗ Holidays / inactive staff / day off (checked by availability)
✗ Existing appointments (filtered by availability)
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

from .config import BookingConfig, get_booking_config
from .intervals import TimeInterval
from .sources import DaySchedule


MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class Slot:
    """Bookable window computed per query, never persisted."""
    start: datetime
    end: datetime
    staff_id: int
    available: bool = True

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)


def generate_candidate_slots(
    target_date: date,
    duration_minutes: int,
    schedule: DaySchedule,
    staff_id: int,
    config: BookingConfig | None = None,
    now: datetime | None = None,
) -> Iterator[Slot]:
    """
    Yield candidate slots in chronological order.

    Pure function of its inputs: calling it again restarts the sequence.
    """
    config = config or get_booking_config()
    now = now or datetime.now()
    min_start = now + config.min_advance
    step = config.slot_interval_minutes

    cursor = _to_minutes(schedule.start_time)
    # end_time 00:00 closes at midnight
    end_min = _to_minutes(schedule.end_time) or MINUTES_PER_DAY
    day_start = datetime.combine(target_date, time.min)

    while cursor + duration_minutes <= end_min:
        if schedule.in_break(_to_time(cursor)):
            cursor += step
            continue

        slot_start = day_start + timedelta(minutes=cursor)
        if slot_start > min_start:
            yield Slot(
                start=slot_start,
                end=slot_start + timedelta(minutes=duration_minutes),
                staff_id=staff_id,
            )

        cursor += step


def _to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)
