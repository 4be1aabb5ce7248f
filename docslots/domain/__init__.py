"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .availability_resolver import AvailabilityResolver, resolve_day, weekday_index
from .calendar_state import CalendarSelection, SchedulerState
from .models import (
    Appointment,
    AppointmentStatus,
    AvailabilityWindow,
    CurrentUser,
    Doctor,
    SubscriptionStatus,
)
from .slot_generator import generate_slots

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AvailabilityResolver",
    "AvailabilityWindow",
    "CalendarSelection",
    "CurrentUser",
    "Doctor",
    "SchedulerState",
    "SubscriptionStatus",
    "generate_slots",
    "resolve_day",
    "weekday_index",
]
