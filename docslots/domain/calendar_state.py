"""
Calendar navigation state for the booking scheduler.

The selection is an immutable value; every transition returns a selection
(the same object when the transition is rejected), so callers own the state
and tests need no UI harness.

States:
    BROWSING       - only a displayed month
    DATE_SELECTED  - a date is picked, no slot yet
    SLOT_SELECTED  - date and slot are picked, ready to book
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

import pendulum
from pendulum import Date

logger = logging.getLogger(__name__)

DATE_PARAM_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PARAM_PATTERN = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")


class SchedulerState(str, Enum):
    BROWSING = "browsing"
    DATE_SELECTED = "date_selected"
    SLOT_SELECTED = "slot_selected"


def _as_date(value: date) -> Date:
    if isinstance(value, datetime):
        value = value.date()
    return pendulum.date(value.year, value.month, value.day)


def _month_of(value: date) -> Date:
    return _as_date(value).start_of("month")


@dataclass(frozen=True)
class CalendarSelection:
    """
    What the patient currently sees and has picked in the scheduler.
    """
    displayed_month: Date
    selected_date: Optional[Date] = None
    selected_slot: Optional[str] = None

    @classmethod
    def browsing(cls, month: date) -> "CalendarSelection":
        return cls(displayed_month=_month_of(month))

    @property
    def state(self) -> SchedulerState:
        if self.selected_date is None:
            return SchedulerState.BROWSING
        if self.selected_slot is None:
            return SchedulerState.DATE_SELECTED
        return SchedulerState.SLOT_SELECTED


def select_date(selection: CalendarSelection, day: date, today: date) -> CalendarSelection:
    """
    Pick a date; rejected when it lies before ``today``.

    Changing the date drops any slot picked for the previous date.
    """
    day = _as_date(day)
    if day < _as_date(today):
        return selection

    return CalendarSelection(
        displayed_month=_month_of(day),
        selected_date=day,
        selected_slot=None,
    )


def select_slot(
    selection: CalendarSelection,
    slot: str,
    available_slots: Sequence[str],
) -> CalendarSelection:
    """
    Pick a slot offered for the selected date; anything else is ignored.

    Only allowed from DATE_SELECTED. To change a picked slot, select the
    date again first, which clears it.
    """
    if selection.state != SchedulerState.DATE_SELECTED:
        return selection
    if slot not in available_slots:
        return selection

    return replace(selection, selected_slot=slot)


def next_month(selection: CalendarSelection) -> CalendarSelection:
    """Show the following month. The selected date and slot are kept."""
    return replace(selection, displayed_month=selection.displayed_month.add(months=1))


def prev_month(selection: CalendarSelection) -> CalendarSelection:
    """Show the previous month. The selected date and slot are kept."""
    return replace(selection, displayed_month=selection.displayed_month.subtract(months=1))


def clear(selection: CalendarSelection) -> CalendarSelection:
    return CalendarSelection(displayed_month=selection.displayed_month)


def parse_date_param(value: Optional[str]) -> Optional[Date]:
    """Parse a ``yyyy-MM-dd`` value, returning None when it is unusable."""
    if not value or not DATE_PARAM_PATTERN.match(value):
        return None
    try:
        return pendulum.date(int(value[:4]), int(value[5:7]), int(value[8:]))
    except ValueError:
        return None


def parse_time_param(value: Optional[str]) -> Optional[str]:
    if not value or not TIME_PARAM_PATTERN.match(value):
        return None
    return value


def from_deep_link(params: Mapping[str, str], today: date) -> CalendarSelection:
    """
    Restore a selection from ``date`` and ``time`` navigation parameters.

    Malformed values are ignored and the selection falls back to browsing
    the current month. A time is only restored together with a valid date.
    """
    selection = CalendarSelection.browsing(today)

    raw_date = params.get("date")
    raw_time = params.get("time")

    selected_date = parse_date_param(raw_date)
    if selected_date is None:
        if raw_date:
            logger.debug("Ignoring malformed date parameter %r", raw_date)
        return selection

    selected_slot = parse_time_param(raw_time)
    if selected_slot is None and raw_time:
        logger.debug("Ignoring malformed time parameter %r", raw_time)

    return CalendarSelection(
        displayed_month=_month_of(selected_date),
        selected_date=selected_date,
        selected_slot=selected_slot,
    )


def to_deep_link(selection: CalendarSelection) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if selection.selected_date is not None:
        params["date"] = selection.selected_date.format("YYYY-MM-DD")
        if selection.selected_slot is not None:
            params["time"] = selection.selected_slot
    return params


def month_grid(displayed_month: date) -> List[List[Optional[Date]]]:
    """
    Lay out a month as Monday-first week rows, padded with None.
    """
    first = _month_of(displayed_month)
    cells: List[Optional[Date]] = [None] * first.weekday()
    cells.extend(first.add(days=offset) for offset in range(first.days_in_month))

    while len(cells) % 7:
        cells.append(None)

    return [cells[i:i + 7] for i in range(0, len(cells), 7)]
