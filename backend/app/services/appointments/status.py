# backend/app/services/appointments/status.py
"""
Appointment status machine.

    PENDING ──confirm──▶ CONFIRMED
    PENDING | CONFIRMED ──cancel──▶ CANCELLED
    PENDING | CONFIRMED ──complete──▶ COMPLETED
    PENDING | CONFIRMED ──no-show──▶ NO_SHOW

CANCELLED / COMPLETED / NO_SHOW are terminal.
"""

from ...models.generated import ACTIVE_STATUSES, AppointmentStatus
from ..errors import InvalidTransitionError, NotCancellableError


_TERMINAL = {
    AppointmentStatus.CANCELLED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.NO_SHOW,
}

ALLOWED_TRANSITIONS: dict[AppointmentStatus, set[AppointmentStatus]] = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED} | _TERMINAL,
    AppointmentStatus.CONFIRMED: set(_TERMINAL),
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.NO_SHOW: set(),
}


def is_active(status: AppointmentStatus) -> bool:
    return status in ACTIVE_STATUSES


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition(current: AppointmentStatus, target: AppointmentStatus) -> AppointmentStatus:
    """Validate a status change and return the new status."""
    if can_transition(current, target):
        return target
    if target == AppointmentStatus.CANCELLED:
        raise NotCancellableError(
            f"Appointment is {current.value} and can no longer be cancelled"
        )
    raise InvalidTransitionError(
        f"Cannot change appointment status from {current.value} to {target.value}"
    )
