# backend/app/services/errors.py
"""
Caller-facing booking errors.

Raised by slot and appointment services, rendered to JSON by the
exception handler in main.py. None of them are fatal.
"""


class BookingError(Exception):
    """Base class: a recoverable outcome the caller presents to the user."""
    code = "booking_error"
    status_code = 400
    default_message = "Booking request rejected"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(BookingError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class SlotConflictError(BookingError):
    code = "slot_conflict"
    status_code = 409
    default_message = "This time slot is no longer available"


class BookingTooSoonError(BookingError):
    code = "booking_too_soon"
    status_code = 422
    default_message = "Appointment starts too soon"


class InvalidSlotError(BookingError):
    code = "invalid_slot"
    status_code = 422
    default_message = "Appointment must start and end on the same day"


class CancellationTooLateError(BookingError):
    code = "cancellation_too_late"
    status_code = 422
    default_message = "Appointment can no longer be cancelled"


class NotCancellableError(BookingError):
    code = "not_cancellable"
    status_code = 409
    default_message = "Appointment is not pending or confirmed"


class InvalidTransitionError(BookingError):
    code = "invalid_transition"
    status_code = 409
    default_message = "Status transition not allowed"


class UnauthorizedError(BookingError):
    code = "unauthorized"
    status_code = 403
    default_message = "Unauthorized access"
