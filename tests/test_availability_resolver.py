"""
Tests for the weekly availability resolver.
"""

import pendulum

from docslots.domain.availability_resolver import AvailabilityResolver, resolve_day, weekday_index
from docslots.domain.models import AvailabilityWindow

# 2026-11-02 is a Monday
MONDAY = pendulum.date(2026, 11, 2)
TUESDAY = pendulum.date(2026, 11, 3)
SUNDAY = pendulum.date(2026, 11, 8)


def _window(start, end):
    return AvailabilityWindow(start_time=start, end_time=end)


class TestWeekdayIndex:
    """Tests for the canonical weekday index."""

    def test_monday_is_zero_and_sunday_six(self):
        assert weekday_index(MONDAY) == 0
        assert weekday_index(TUESDAY) == 1
        assert weekday_index(SUNDAY) == 6


class TestResolveDay:
    """Tests for resolve_day."""

    def test_overlapping_windows_are_merged_without_duplicates(self):
        """Overlapping windows list each slot once, in order."""
        availability = {0: [_window("09:00", "10:00"), _window("09:30", "10:30")]}

        assert resolve_day(availability, MONDAY, 30) == ["09:00", "09:30", "10:00"]

    def test_windows_out_of_order_are_sorted(self):
        """Insertion order of windows does not affect the result."""
        availability = {0: [_window("15:00", "16:00"), _window("08:00", "09:00")]}

        assert resolve_day(availability, MONDAY) == ["08:00", "08:30", "15:00", "15:30"]

    def test_missing_weekday_is_empty(self):
        """A weekday without windows simply has no slots."""
        availability = {0: [_window("09:00", "10:00")]}

        assert resolve_day(availability, TUESDAY) == []

    def test_sunday_uses_index_six(self):
        availability = {6: [_window("10:00", "11:00")], 0: [_window("09:00", "10:00")]}

        assert resolve_day(availability, SUNDAY) == ["10:00", "10:30"]

    def test_invalid_window_does_not_hide_valid_ones(self):
        availability = {0: [_window("12:00", "11:00"), _window("09:00", "09:30")]}

        assert resolve_day(availability, MONDAY) == ["09:00"]

    def test_does_not_depend_on_today(self):
        """Past dates resolve the same way as future ones."""
        availability = {0: [_window("09:00", "10:00")]}
        past_monday = pendulum.date(2020, 1, 6)

        assert resolve_day(availability, past_monday) == resolve_day(availability, MONDAY)


class TestAvailabilityResolver:
    """Tests for the AvailabilityResolver wrapper."""

    def test_slots_for_uses_configured_interval(self):
        resolver = AvailabilityResolver({0: [_window("09:00", "10:00")]}, interval_minutes=20)

        assert resolver.slots_for(MONDAY) == ["09:00", "09:20", "09:40"]

    def test_available_weekdays_ignores_days_without_slots(self):
        """Only weekdays that produce at least one slot are open."""
        resolver = AvailabilityResolver(
            {
                0: [_window("09:00", "10:00")],
                2: [_window("09:00", "09:10")],
                4: [],
                5: [_window("08:00", "12:00")],
            },
            interval_minutes=30,
        )

        assert resolver.available_weekdays() == [0, 5]
