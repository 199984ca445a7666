# backend/app/services/appointments/guard.py
"""
Booking conflict guard.

Authoritative checks at the moment an appointment is written,
independent of whatever slot list the client saw:

- no overlap with another active appointment of the same staff member
- start strictly after now + min_advance_hours
- cancellation only while now + cancellation_hours <= start

check-then-insert is made atomic by lock_staff_day(), which must be
called inside the same transaction as the write.
"""

import zlib
from datetime import date, datetime, timedelta

from sqlalchemy import text
from sqlalchemy.orm import Session

from ...models.generated import ACTIVE_STATUSES, Appointments, StaffMembers
from ..errors import BookingTooSoonError, CancellationTooLateError, InvalidSlotError, SlotConflictError
from ..slots.config import BookingConfig
from ..slots.intervals import TimeInterval, overlaps
from ..slots.sources import appointment_interval


def ensure_min_advance(start: datetime, now: datetime, config: BookingConfig) -> None:
    if not start > now + config.min_advance:
        raise BookingTooSoonError(
            f"The appointment must be booked at least {config.min_advance_hours} hour(s) in advance"
        )


def ensure_cancellation_window(start: datetime, now: datetime, config: BookingConfig) -> None:
    if now + config.cancellation_window > start:
        raise CancellationTooLateError(
            f"The appointment must be cancelled at least {config.cancellation_hours} hours in advance"
        )


def ensure_single_day(interval: TimeInterval) -> None:
    """Appointments are stored as date + start/end time, midnight end allowed."""
    next_midnight = datetime.combine(interval.start.date() + timedelta(days=1), datetime.min.time())
    if interval.end > next_midnight:
        raise InvalidSlotError()


def find_conflicts(
    db: Session,
    staff_id: int,
    interval: TimeInterval,
    exclude_id: int | None = None,
) -> list[Appointments]:
    """Active appointments of the staff member overlapping `interval`."""
    query = db.query(Appointments).filter(
        Appointments.staff_id == staff_id,
        Appointments.status.in_(ACTIVE_STATUSES),
        Appointments.appointment_date >= interval.start.date(),
        Appointments.appointment_date <= interval.end.date(),
    )
    if exclude_id is not None:
        query = query.filter(Appointments.id != exclude_id)

    return [
        a for a in query.all()
        if overlaps(appointment_interval(a), interval)
    ]


def ensure_no_conflict(
    db: Session,
    staff_id: int,
    interval: TimeInterval,
    exclude_id: int | None = None,
) -> None:
    if find_conflicts(db, staff_id, interval, exclude_id):
        raise SlotConflictError()


def lock_staff_day(db: Session, staff_id: int, day: date) -> None:
    """
    Serialize writers of one staff member's day until the transaction ends.

    - PostgreSQL: transaction-scoped advisory lock on (staff_id, day)
    - SQLite: no-op, write sessions already run under BEGIN IMMEDIATE
    - others: row lock on the staff member (SELECT ... FOR UPDATE)
    """
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        key = zlib.crc32(f"appointments:{staff_id}:{day.isoformat()}".encode())
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
    elif dialect != "sqlite":
        (
            db.query(StaffMembers)
            .filter(StaffMembers.id == staff_id)
            .with_for_update()
            .first()
        )
