"""
Time arithmetic primitives used by slot generation and booking.

Times of day travel through the system as fixed-width "HH:MM" strings; they
are only turned into ``pendulum.DateTime`` objects when arithmetic is needed.
"""

from __future__ import annotations

import re
from datetime import date, datetime

import pendulum
from pendulum import DateTime

from .exceptions import InvalidTimeFormat

TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def split_time(hhmm: str) -> tuple[int, int]:
    """
    Split an "HH:MM" string into hour and minute.

    Raises:
        InvalidTimeFormat: If the string is malformed or out of range
    """
    if not isinstance(hhmm, str) or not TIME_PATTERN.match(hhmm):
        raise InvalidTimeFormat(f"Expected HH:MM, got {hhmm!r}")

    hour, minute = int(hhmm[:2]), int(hhmm[3:])
    if hour > 23 or minute > 59:
        raise InvalidTimeFormat(f"Time out of range: {hhmm!r}")

    return hour, minute


def parse_time(hhmm: str, reference_date: date, tz: str = "UTC") -> DateTime:
    """
    Attach an "HH:MM" time of day to the date part of ``reference_date``.

    A timezone-aware datetime keeps its own timezone; plain dates use ``tz``.
    """
    hour, minute = split_time(hhmm)

    if isinstance(reference_date, datetime):
        return pendulum.instance(reference_date).set(
            hour=hour, minute=minute, second=0, microsecond=0
        )

    return pendulum.datetime(
        reference_date.year,
        reference_date.month,
        reference_date.day,
        hour,
        minute,
        tz=tz,
    )


def add_minutes(dt: DateTime, n: int) -> DateTime:
    """Return ``dt`` shifted by ``n`` minutes."""
    return dt.add(minutes=n)


def minutes_between(a: DateTime, b: DateTime) -> int:
    """Signed whole minutes from ``b`` to ``a``; negative when ``a`` is earlier."""
    return int((a - b).total_seconds() / 60)


def format_time(dt: datetime) -> str:
    return f"{dt.hour:02d}:{dt.minute:02d}"


def combine(day: date, hhmm: str, tz: str) -> DateTime:
    """Build the start instant of a slot on ``day`` in timezone ``tz``."""
    hour, minute = split_time(hhmm)
    return pendulum.datetime(day.year, day.month, day.day, hour, minute, tz=tz)
