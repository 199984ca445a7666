# backend/app/services/appointments/service.py
"""
Appointment write operations.

Each write runs as one transaction on the caller's session:
lock (staff, day) → validate → conflict check → write → commit.
After commit the slots cache of the touched (staff, day) pairs is
evicted and an event is emitted for notification consumers.
"""

import logging
from datetime import date, datetime
from typing import Optional

from redis import Redis
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models.generated import Appointments, AppointmentStatus, Services, StaffMembers, Users
from ..errors import NotFoundError, NotCancellableError, SlotConflictError, UnauthorizedError
from ..events import emit_event
from ..slots.config import BookingConfig, get_booking_config
from ..slots.intervals import TimeInterval
from ..slots.invalidator import invalidate_staff_cache
from ..slots.sources import appointment_interval
from .guard import (
    ensure_cancellation_window,
    ensure_min_advance,
    ensure_no_conflict,
    ensure_single_day,
    lock_staff_day,
)
from .status import is_active, transition

logger = logging.getLogger(__name__)


def create_appointment(
    db: Session,
    client: Users,
    service_id: int,
    staff_id: int,
    start: datetime,
    notes: Optional[str] = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> Appointments:
    """
    Book a PENDING appointment for `client`.

    Raises:
        NotFoundError, InvalidSlotError, BookingTooSoonError, SlotConflictError
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    try:
        service = _get_service(db, service_id)
        staff = _get_active_staff(db, staff_id)

        interval = TimeInterval.from_start(start, service.duration_minutes)
        ensure_single_day(interval)
        ensure_min_advance(interval.start, now, config)

        lock_staff_day(db, staff.id, interval.start.date())
        ensure_no_conflict(db, staff.id, interval)

        appointment = Appointments(
            client_id=client.id,
            staff_id=staff.id,
            service_id=service.id,
            appointment_date=interval.start.date(),
            start_time=interval.start.time(),
            end_time=interval.end.time(),
            status=AppointmentStatus.PENDING,
            notes=notes,
        )
        db.add(appointment)
        _commit(db)
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(
        f"Appointment created: id={appointment.id} client={client.id} "
        f"staff={staff.id} start={interval.start.isoformat()}"
    )

    invalidate_staff_cache(redis, staff.id, [appointment.appointment_date], config)
    emit_event(redis, "appointment_created", _event_payload(appointment))
    return appointment


def reschedule_appointment(
    db: Session,
    appointment_id: int,
    actor: Users,
    start: datetime,
    staff_id: Optional[int] = None,
    service_id: Optional[int] = None,
    notes: Optional[str] = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> Appointments:
    """
    Move an active appointment to a new start (and optionally staff/service).

    Only the owner may reschedule. The appointment itself is excluded
    from the conflict check.
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    try:
        appointment = _get_appointment(db, appointment_id)
        if appointment.client_id != actor.id:
            raise UnauthorizedError()
        if not is_active(appointment.status):
            raise NotCancellableError("This appointment can no longer be modified")

        old_staff_id = appointment.staff_id
        old_date = appointment.appointment_date

        service = _get_service(db, service_id) if service_id is not None else appointment.service
        staff = _get_active_staff(db, staff_id) if staff_id is not None else appointment.staff_member

        interval = TimeInterval.from_start(start, service.duration_minutes)
        ensure_single_day(interval)
        ensure_min_advance(interval.start, now, config)

        lock_staff_day(db, staff.id, interval.start.date())
        ensure_no_conflict(db, staff.id, interval, exclude_id=appointment.id)

        appointment.service_id = service.id
        appointment.staff_id = staff.id
        appointment.appointment_date = interval.start.date()
        appointment.start_time = interval.start.time()
        appointment.end_time = interval.end.time()
        if notes is not None:
            appointment.notes = notes
        _commit(db)
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(f"Appointment rescheduled: id={appointment.id} start={interval.start.isoformat()}")

    _invalidate_pairs(
        redis,
        config,
        (old_staff_id, old_date),
        (appointment.staff_id, appointment.appointment_date),
    )
    emit_event(redis, "appointment_rescheduled", _event_payload(appointment))
    return appointment


def cancel_appointment(
    db: Session,
    appointment_id: int,
    actor: Users,
    reason: Optional[str] = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> Appointments:
    """
    Cancel an appointment (owner or admin).

    Raises:
        NotFoundError, UnauthorizedError, NotCancellableError, CancellationTooLateError
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    try:
        appointment = _get_appointment(db, appointment_id)
        _ensure_owner_or_admin(appointment, actor)

        new_status = transition(appointment.status, AppointmentStatus.CANCELLED)
        ensure_cancellation_window(appointment_interval(appointment).start, now, config)

        appointment.status = new_status
        appointment.cancellation_reason = reason
        appointment.cancelled_at = now
        _commit(db)
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(f"Appointment cancelled: id={appointment.id} by user={actor.id}")

    invalidate_staff_cache(redis, appointment.staff_id, [appointment.appointment_date], config)
    emit_event(redis, "appointment_cancelled", {
        **_event_payload(appointment),
        "reason": reason or "No reason provided",
    })
    return appointment


def confirm_appointment(
    db: Session,
    appointment_id: int,
    actor: Users,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> Appointments:
    """PENDING → CONFIRMED, admin only."""
    config = config or get_booking_config()

    try:
        if not actor.is_admin:
            raise UnauthorizedError()
        appointment = _get_appointment(db, appointment_id)
        appointment.status = transition(appointment.status, AppointmentStatus.CONFIRMED)
        _commit(db)
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(f"Appointment confirmed: id={appointment.id}")

    invalidate_staff_cache(redis, appointment.staff_id, [appointment.appointment_date], config)
    emit_event(redis, "appointment_confirmed", _event_payload(appointment))
    return appointment


def get_appointment(db: Session, appointment_id: int, actor: Users) -> Appointments:
    """Read an appointment (owner or admin)."""
    appointment = _get_appointment(db, appointment_id)
    _ensure_owner_or_admin(appointment, actor)
    return appointment


def list_user_appointments(db: Session, user: Users) -> list[Appointments]:
    """All appointments of `user`, most recent first."""
    return (
        db.query(Appointments)
        .filter(Appointments.client_id == user.id)
        .order_by(Appointments.appointment_date.desc(), Appointments.start_time.desc())
        .all()
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _get_appointment(db: Session, appointment_id: int) -> Appointments:
    appointment = db.get(Appointments, appointment_id)
    if not appointment:
        raise NotFoundError("Appointment not found")
    return appointment


def _get_service(db: Session, service_id: int) -> Services:
    service = db.get(Services, service_id)
    if not service or not service.is_active:
        raise NotFoundError("Service not found")
    return service


def _get_active_staff(db: Session, staff_id: int) -> StaffMembers:
    staff = db.get(StaffMembers, staff_id)
    if not staff or not staff.is_active:
        raise NotFoundError("Staff member not found")
    return staff


def _ensure_owner_or_admin(appointment: Appointments, actor: Users) -> None:
    if appointment.client_id != actor.id and not actor.is_admin:
        raise UnauthorizedError()


def _commit(db: Session) -> None:
    """Commit; the (staff, date, start) unique constraint maps to a slot conflict."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Appointment write rejected by storage constraint: {e.orig}")
        raise SlotConflictError() from None


def _invalidate_pairs(
    redis: Redis | None,
    config: BookingConfig,
    *pairs: tuple[int, date],
) -> None:
    for staff_id, day in set(pairs):
        invalidate_staff_cache(redis, staff_id, [day], config)


def _event_payload(appointment: Appointments) -> dict:
    return {
        "appointment_id": appointment.id,
        "client_id": appointment.client_id,
        "staff_id": appointment.staff_id,
        "service_id": appointment.service_id,
        "date": appointment.appointment_date.isoformat(),
        "start_time": appointment.start_time.strftime("%H:%M"),
        "status": appointment.status.value,
    }
