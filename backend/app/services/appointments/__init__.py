# backend/app/services/appointments/__init__.py
"""
Appointment booking: conflict guard, status machine, write operations.
"""

from .service import (
    cancel_appointment,
    confirm_appointment,
    create_appointment,
    get_appointment,
    list_user_appointments,
    reschedule_appointment,
)

__all__ = [
    "cancel_appointment",
    "confirm_appointment",
    "create_appointment",
    "get_appointment",
    "list_user_appointments",
    "reschedule_appointment",
]
