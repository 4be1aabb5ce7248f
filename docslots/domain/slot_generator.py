"""
Turns a single availability window into fixed-width slot start times.

Pure domain logic: no I/O, no notion of "today", identical output for
identical input.
"""

from __future__ import annotations

import logging
from typing import Iterator, List

import pendulum

from .exceptions import InvalidTimeFormat
from .models import AvailabilityWindow
from .timeutils import add_minutes, format_time, minutes_between, parse_time

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 30

# Slots are computed on a fixed UTC day so DST transitions never shift them
REFERENCE_DATE = pendulum.date(2000, 1, 3)


def iter_slots(
    window: AvailabilityWindow,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> Iterator[str]:
    """
    Yield slot start times for ``window`` in chronological order.

    A slot is emitted only while it starts before the window end and its
    full interval fits inside the window.
    """
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")

    try:
        start = parse_time(window.start_time, REFERENCE_DATE)
        end = parse_time(window.end_time, REFERENCE_DATE)
    except InvalidTimeFormat as exc:
        logger.debug("Skipping malformed availability window %s: %s", window, exc)
        return

    if minutes_between(end, start) <= 0:
        return

    current = start
    while current < end and add_minutes(current, interval_minutes) <= end:
        yield format_time(current)
        current = add_minutes(current, interval_minutes)


def generate_slots(
    window: AvailabilityWindow,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
) -> List[str]:
    """
    Generate the bookable "HH:MM" start times of one availability window.

    Example:
    Window: 09:00 - 10:00, interval 30
    Result: ["09:00", "09:30"]

    Zero-length, inverted or malformed windows give an empty list.
    """
    return list(iter_slots(window, interval_minutes))
