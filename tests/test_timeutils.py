"""
Tests for time arithmetic primitives.
"""

import pendulum
import pytest

from docslots.domain.exceptions import InvalidTimeFormat
from docslots.domain.timeutils import (
    add_minutes,
    combine,
    format_time,
    minutes_between,
    parse_time,
)


class TestParseTime:
    """Tests for parse_time."""

    def test_attaches_time_to_reference_date(self):
        """The time of day lands on the reference date."""
        parsed = parse_time("09:30", pendulum.date(2026, 3, 14))

        assert parsed == pendulum.datetime(2026, 3, 14, 9, 30, tz="UTC")

    def test_keeps_timezone_of_reference_datetime(self):
        """A timezone-aware reference keeps its own timezone."""
        reference = pendulum.datetime(2026, 3, 14, 18, 45, tz="America/Guayaquil")

        parsed = parse_time("07:05", reference)

        assert parsed.hour == 7
        assert parsed.minute == 5
        assert parsed.second == 0
        assert parsed.timezone_name == "America/Guayaquil"

    @pytest.mark.parametrize("value", ["9:30", "09:3", "0930", "ab:cd", "", "09:30:00", "24:00", "12:60"])
    def test_rejects_malformed_or_out_of_range(self, value):
        """Strings outside HH:MM or with impossible values raise InvalidTimeFormat."""
        with pytest.raises(InvalidTimeFormat):
            parse_time(value, pendulum.date(2026, 3, 14))

    def test_invalid_format_is_a_value_error(self):
        """Callers catching ValueError also catch format errors."""
        with pytest.raises(ValueError):
            parse_time("99:99", pendulum.date(2026, 3, 14))


class TestArithmetic:
    """Tests for add_minutes and minutes_between."""

    def test_add_minutes_crosses_day_and_month(self):
        """Adding minutes rolls over midnight at the end of a month."""
        late = pendulum.datetime(2026, 1, 31, 23, 45, tz="UTC")

        assert add_minutes(late, 30) == pendulum.datetime(2026, 2, 1, 0, 15, tz="UTC")

    def test_minutes_between_is_signed(self):
        """Later minus earlier is positive, the reverse negative."""
        start = pendulum.datetime(2026, 1, 5, 9, 0, tz="UTC")
        end = pendulum.datetime(2026, 1, 5, 10, 30, tz="UTC")

        assert minutes_between(end, start) == 90
        assert minutes_between(start, end) == -90
        assert minutes_between(start, start) == 0

    def test_format_time_zero_pads(self):
        assert format_time(pendulum.datetime(2026, 1, 5, 7, 5, tz="UTC")) == "07:05"

    def test_combine_builds_local_instant(self):
        """combine places the slot on the date in the given timezone."""
        start = combine(pendulum.date(2026, 11, 2), "09:30", "America/Guayaquil")

        assert start.to_iso8601_string() == "2026-11-02T09:30:00-05:00"
