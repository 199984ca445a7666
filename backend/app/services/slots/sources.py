# backend/app/services/slots/sources.py
"""
Availability sources for one (staff, day) pair.

Read-only adapters over the database. Raw rows (working_hours,
holidays, appointments) are normalized into DaySchedule, HolidayPeriod
and TimeInterval values consumed by the calculator.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models.generated import (
    ACTIVE_STATUSES,
    Appointments,
    Holidays,
    Services,
    StaffMembers,
    WorkingHours,
)
from .intervals import TimeInterval


# ── Holiday scope ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GlobalScope:
    """Salon closure, applies to every staff member."""


@dataclass(frozen=True)
class StaffScope:
    """Personal leave of one staff member."""
    staff_id: int


HolidayScope = Union[GlobalScope, StaffScope]


@dataclass(frozen=True)
class HolidayPeriod:
    """
    Inclusive date range [start_date, end_date].

    Recurring periods repeat every year: only month/day are compared,
    the stored year is ignored.
    """
    scope: HolidayScope
    start_date: date
    end_date: date
    recurring: bool = False

    @classmethod
    def from_row(cls, row: Holidays) -> "HolidayPeriod":
        scope = GlobalScope() if row.staff_id is None else StaffScope(row.staff_id)
        return cls(
            scope=scope,
            start_date=row.start_date,
            end_date=row.end_date,
            recurring=bool(row.is_recurring),
        )

    def applies_to(self, staff_id: int) -> bool:
        if isinstance(self.scope, GlobalScope):
            return True
        if isinstance(self.scope, StaffScope):
            return self.scope.staff_id == staff_id
        raise TypeError(f"Unknown holiday scope: {self.scope!r}")

    def covers(self, day: date) -> bool:
        if not self.recurring:
            return self.start_date <= day <= self.end_date

        span = self.end_date - self.start_date
        # A period that started last year may still run into this one (Dec 24 - Jan 2)
        for year in (day.year, day.year - 1):
            start = _same_day_in_year(self.start_date, year)
            if start <= day <= start + span:
                return True
        return False


def _same_day_in_year(value: date, year: int) -> date:
    try:
        return value.replace(year=year)
    except ValueError:
        # Feb 29 on a non-leap year
        return value.replace(year=year, day=28)


# ── Working hours ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DaySchedule:
    """Working window of a staff member for one weekday."""
    start_time: time
    end_time: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None

    @classmethod
    def from_row(cls, row: WorkingHours) -> "DaySchedule":
        return cls(
            start_time=row.start_time,
            end_time=row.end_time,
            break_start=row.break_start,
            break_end=row.break_end,
        )

    @property
    def has_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    def in_break(self, t: time) -> bool:
        """True when t falls in [break_start, break_end)."""
        return self.has_break and self.break_start <= t < self.break_end


# ── Adapter ──────────────────────────────────────────────────────────────


class AvailabilitySources:
    """Read-only views of the data feeding slot calculation."""

    def __init__(self, db: Session):
        self.db = db

    def get_staff(self, staff_id: int) -> Optional[StaffMembers]:
        return self.db.get(StaffMembers, staff_id)

    def get_service(self, service_id: int) -> Optional[Services]:
        return self.db.get(Services, service_id)

    def day_schedule(self, staff_id: int, day: date) -> Optional[DaySchedule]:
        """Working hours for the weekday of `day`, None = day off."""
        row = (
            self.db.query(WorkingHours)
            .filter(
                WorkingHours.staff_id == staff_id,
                WorkingHours.day_of_week == day.isoweekday(),
            )
            .first()
        )
        return DaySchedule.from_row(row) if row else None

    def holidays_on(self, staff_id: int, day: date) -> list[HolidayPeriod]:
        """Global closures and personal leave covering `day`."""
        rows = (
            self.db.query(Holidays)
            .filter(
                or_(Holidays.staff_id.is_(None), Holidays.staff_id == staff_id),
                # Recurring rows carry an arbitrary year, they are matched in Python
                or_(
                    Holidays.is_recurring.is_(True),
                    Holidays.start_date <= day,
                ),
            )
            .all()
        )
        periods = [HolidayPeriod.from_row(r) for r in rows]
        return [p for p in periods if p.applies_to(staff_id) and p.covers(day)]

    def is_staff_on_holiday(self, staff_id: int, day: date) -> bool:
        """True for personal leave or a salon closure."""
        return bool(self.holidays_on(staff_id, day))

    def is_salon_closed(self, day: date) -> bool:
        rows = self.db.query(Holidays).filter(Holidays.staff_id.is_(None)).all()
        return any(HolidayPeriod.from_row(r).covers(day) for r in rows)

    def active_appointments(self, staff_id: int, day: date) -> list[TimeInterval]:
        """Intervals of PENDING/CONFIRMED appointments of the staff on `day`."""
        rows = (
            self.db.query(Appointments)
            .filter(
                Appointments.staff_id == staff_id,
                Appointments.appointment_date == day,
                Appointments.status.in_(ACTIVE_STATUSES),
            )
            .order_by(Appointments.start_time)
            .all()
        )
        return [appointment_interval(a) for a in rows]


def appointment_interval(appointment: Appointments) -> TimeInterval:
    """Occupied interval of a stored appointment."""
    start = datetime.combine(appointment.appointment_date, appointment.start_time)
    end = datetime.combine(appointment.appointment_date, appointment.end_time)
    if end <= start:
        # end_time 00:00 means the appointment runs until midnight
        end += timedelta(days=1)
    return TimeInterval(start, end)
