"""
Resolves a calendar date into the doctor's bookable slots for that day.
"""

from __future__ import annotations

from datetime import date
from typing import List

from .models import WeeklyAvailability
from .slot_generator import DEFAULT_INTERVAL_MINUTES, generate_slots


def weekday_index(day: date) -> int:
    """Canonical weekday index used for stored availability (Monday=0, Sunday=6)."""
    return day.weekday()


def resolve_day(
    availability: WeeklyAvailability,
    day: date,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> List[str]:
    """
    Get the sorted, de-duplicated slot start times for ``day``.

    Overlapping windows on the same weekday never list a slot twice. This
    does not look at the current time or at existing bookings; callers
    filter those.
    """
    windows = availability.get(weekday_index(day)) or []

    slots: set[str] = set()
    for window in windows:
        slots.update(generate_slots(window, interval_minutes))

    # Fixed-width HH:MM sorts chronologically
    return sorted(slots)


class AvailabilityResolver:
    """
    Binds a doctor's weekly availability to a slot interval.
    """

    def __init__(
        self,
        availability: WeeklyAvailability,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
    ):
        self.availability = availability
        self.interval_minutes = interval_minutes

    def slots_for(self, day: date) -> List[str]:
        return resolve_day(self.availability, day, self.interval_minutes)

    def available_weekdays(self) -> List[int]:
        """Weekday indexes that yield at least one slot."""
        return [
            index
            for index in range(7)
            if any(
                generate_slots(window, self.interval_minutes)
                for window in self.availability.get(index) or []
            )
        ]
