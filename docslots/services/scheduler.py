"""
Scheduler facade used by the command line.

Wires the doctor directory, the stores and the auth provider into the domain
resolver, the booking service and the review service, and applies the
caller-side rules the resolver leaves out (no past dates, no slots earlier
than now).
"""

from __future__ import annotations

from datetime import date
from typing import List, Mapping, Optional

from pendulum import DateTime

from ..domain import calendar_state
from ..domain.availability_resolver import resolve_day
from ..domain.calendar_state import CalendarSelection, SchedulerState
from ..domain.exceptions import DateInPast, DoctorNotBookable, SlotNotOffered
from ..domain.models import Appointment, Doctor, Rating, RatingSummary
from ..domain.timeutils import combine
from .booking import BookingOutcome, BookingService
from .protocols import (
    AppointmentStoreProtocol,
    AuthProviderProtocol,
    DoctorDirectoryProtocol,
    RatingStoreProtocol,
)
from .reviews import ReviewService


class SchedulerService:
    """
    Orchestrates doctor lookup, slot listing, booking and reviews.
    """

    def __init__(
        self,
        doctors: DoctorDirectoryProtocol,
        store: AppointmentStoreProtocol,
        auth: AuthProviderProtocol,
        ratings: RatingStoreProtocol,
        interval_minutes: int = 30,
        timezone: str = "UTC",
    ) -> None:
        self._doctors = doctors
        self._store = store
        self._auth = auth
        self.interval_minutes = interval_minutes
        self.timezone = timezone
        self.booking = BookingService(
            store=store,
            auth=auth,
            interval_minutes=interval_minutes,
            timezone=timezone,
        )
        self.reviews = ReviewService(store, ratings)

    def get_doctor(self, slug: str) -> Doctor:
        return self._doctors.get_doctor(slug)

    def search_doctors(
        self,
        specialty: Optional[str] = None,
        city: Optional[str] = None,
    ) -> List[Doctor]:
        """Doctors whose subscription makes them visible, optionally filtered."""
        results = []
        for doctor in self._doctors.list_doctors():
            if not doctor.is_visible:
                continue
            if specialty and doctor.specialty.lower() != specialty.lower():
                continue
            if city and doctor.city.lower() != city.lower():
                continue
            results.append(doctor)

        return sorted(results, key=lambda d: d.name.lower())

    def slots_for(self, doctor: Doctor, day: date) -> List[str]:
        """All slots of ``day`` regardless of the current time."""
        return resolve_day(doctor.availability, day, self.interval_minutes)

    def bookable_slots(self, doctor: Doctor, day: date, now: DateTime) -> List[str]:
        """
        Slots a patient can still pick on ``day``.

        Past dates have none; on the current date only slots starting after
        ``now`` remain.
        """
        local_now = now.in_timezone(self.timezone)
        today = local_now.date()

        if day < today:
            return []

        slots = self.slots_for(doctor, day)
        if day > today:
            return slots

        return [slot for slot in slots if combine(day, slot, self.timezone) > local_now]

    def checked_selection(
        self,
        doctor: Doctor,
        day: Optional[date],
        slot: Optional[str],
        now: DateTime,
    ) -> CalendarSelection:
        """
        Run ``day`` and ``slot`` through the calendar transitions.

        A missing day or slot leaves the selection incomplete; the booking
        service rejects it on submission.

        Raises:
            DateInPast: If ``day`` lies before today
            SlotNotOffered: If ``slot`` is not bookable on ``day``
        """
        today = now.in_timezone(self.timezone).date()
        selection = CalendarSelection.browsing(today)

        if day is None:
            return selection

        selection = calendar_state.select_date(selection, day, today)
        if selection.state == SchedulerState.BROWSING:
            raise DateInPast("The selected date has already passed.")

        if slot is None:
            return selection

        available = self.bookable_slots(doctor, selection.selected_date, now)
        selection = calendar_state.select_slot(selection, slot, available)
        if selection.state != SchedulerState.SLOT_SELECTED:
            raise SlotNotOffered(f"{slot} is not available on {day.isoformat()}.")
        return selection

    async def patient_appointments(self, patient_id: str) -> List[Appointment]:
        appointments = await self._store.list_appointments(patient_id=patient_id)
        return sorted(appointments, key=lambda a: a.start_time)

    async def book(self, selection: CalendarSelection, doctor: Doctor) -> BookingOutcome:
        """Book ``selection`` for the signed-in user."""
        if not doctor.is_visible:
            raise DoctorNotBookable(f"{doctor.name} is not accepting bookings right now.")

        return await self.booking.submit_booking(
            selection,
            doctor,
            self._auth.current_user(),
        )

    async def book_at(
        self,
        doctor: Doctor,
        day: Optional[date],
        slot: Optional[str],
        now: DateTime,
    ) -> BookingOutcome:
        return await self.book(self.checked_selection(doctor, day, slot, now), doctor)

    async def resume_after_login(
        self,
        params: Mapping[str, str],
        doctor: Doctor,
        now: DateTime,
    ) -> BookingOutcome:
        """
        Retry a booking from the ``date``/``time`` parameters carried through login.

        The restored values pass the same checks as a fresh selection.
        """
        today = now.in_timezone(self.timezone).date()
        restored = calendar_state.from_deep_link(params, today)
        return await self.book_at(doctor, restored.selected_date, restored.selected_slot, now)

    async def can_review(self, doctor: Doctor) -> bool:
        user = self._auth.current_user()
        if not user.is_authenticated or not user.id:
            return False
        return await self.reviews.can_review(user.id, doctor.id)

    async def submit_review(self, doctor: Doctor, rating: int, comment: str) -> Rating:
        return await self.reviews.submit_review(self._auth.current_user(), doctor, rating, comment)

    async def rating_summary(self, doctor: Doctor) -> RatingSummary:
        return await self.reviews.summary(doctor.id)

    async def recent_ratings(self, doctor: Doctor) -> List[Rating]:
        return await self.reviews.recent(doctor.id)
