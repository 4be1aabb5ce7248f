"""
Booking submission.

``BookingService`` checks a calendar selection, builds the appointment record
and hands it to the appointment store. The store is responsible for refusing
a second booking of the same doctor and start time; this service does not
re-check availability at submission.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union
from urllib.parse import urlencode

from ..domain.calendar_state import CalendarSelection, to_deep_link
from ..domain.exceptions import (
    BookingInProgress,
    IncompleteSelection,
    PersistenceError,
    SelfBookingForbidden,
)
from ..domain.models import Appointment, AppointmentStatus, CurrentUser, Doctor
from ..domain.slot_generator import DEFAULT_INTERVAL_MINUTES
from ..domain.timeutils import add_minutes, combine
from .protocols import AppointmentStoreProtocol, AuthProviderProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingConfirmed:
    appointment: Appointment


@dataclass(frozen=True)
class DeferredLogin:
    """The patient must sign in first; ``login_url`` resumes the booking."""
    login_url: str
    callback_url: str


BookingOutcome = Union[BookingConfirmed, DeferredLogin]


def build_callback_url(doctor: Doctor, selection: CalendarSelection) -> str:
    """Doctor page URL carrying the selection as ``date``/``time`` parameters."""
    params = to_deep_link(selection)
    path = f"/doctors/{doctor.slug}"
    if not params:
        return path
    return f"{path}?{urlencode(params, safe=':')}"


class BookingService:
    """
    Validates selections and creates appointments.

    Only one submission may be in flight per service instance; the busy flag
    mirrors a disabled submit button rather than a lock.
    """

    def __init__(
        self,
        store: AppointmentStoreProtocol,
        auth: AuthProviderProtocol,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        timezone: str = "UTC",
    ) -> None:
        self._store = store
        self._auth = auth
        self.interval_minutes = interval_minutes
        self.timezone = timezone
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    def build_appointment(
        self,
        selection: CalendarSelection,
        doctor: Doctor,
        patient_id: str,
    ) -> Appointment:
        start_time = combine(selection.selected_date, selection.selected_slot, self.timezone)
        return Appointment(
            doctor_id=doctor.id,
            patient_id=patient_id,
            start_time=start_time,
            end_time=add_minutes(start_time, self.interval_minutes),
            status=AppointmentStatus.CONFIRMED,
            cost=doctor.cost,
        )

    async def submit_booking(
        self,
        selection: CalendarSelection,
        doctor: Doctor,
        current_user: CurrentUser,
    ) -> BookingOutcome:
        """
        Submit the selected slot as a confirmed appointment.

        Checks run in order and the first failure wins:
        1. a date and a slot are selected
        2. the user is signed in (otherwise a DeferredLogin is returned)
        3. the user is not the doctor

        Raises:
            IncompleteSelection: If no date or slot is selected
            SelfBookingForbidden: If the doctor books themselves
            BookingInProgress: If another submission is still running
            PersistenceError: If the store fails for any reason
        """
        if selection.selected_date is None or selection.selected_slot is None:
            raise IncompleteSelection("Select a date and a time to book.")

        if not current_user.is_authenticated or not current_user.id:
            callback_url = build_callback_url(doctor, selection)
            return DeferredLogin(
                login_url=self._auth.login_url(callback_url),
                callback_url=callback_url,
            )

        if current_user.id == doctor.id:
            raise SelfBookingForbidden("You cannot book an appointment with yourself.")

        if self._busy:
            raise BookingInProgress("A booking is already being submitted.")

        record = self.build_appointment(selection, doctor, current_user.id)

        self._busy = True
        try:
            created = await self._store.create_appointment(record)
        except PersistenceError:
            raise
        except Exception as exc:
            logger.debug("Appointment store failed", exc_info=True)
            raise PersistenceError(f"Could not create the appointment: {exc}") from exc
        finally:
            self._busy = False

        logger.info(
            "Appointment %s created for doctor %s at %s",
            created.id,
            created.doctor_id,
            created.start_time.to_iso8601_string(),
        )
        return BookingConfirmed(appointment=created)
