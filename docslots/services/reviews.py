"""
Doctor reviews.

A patient may rate a doctor once, and only after an appointment with that
doctor has been completed.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import AuthenticationError, InvalidReview, ReviewNotAllowed
from ..domain.models import Appointment, AppointmentStatus, CurrentUser, Doctor, Rating, RatingSummary
from .protocols import AppointmentStoreProtocol, RatingStoreProtocol

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
RECENT_RATINGS_LIMIT = 10


class ReviewService:
    """
    Checks review eligibility, stores ratings and summarizes them per doctor.
    """

    def __init__(self, appointments: AppointmentStoreProtocol, ratings: RatingStoreProtocol):
        self._appointments = appointments
        self._ratings = ratings

    async def completed_appointment(self, patient_id: str, doctor_id: str) -> Optional[Appointment]:
        completed = await self._appointments.list_appointments(
            patient_id=patient_id,
            doctor_id=doctor_id,
            status=AppointmentStatus.COMPLETED,
        )
        return completed[0] if completed else None

    async def can_review(self, patient_id: str, doctor_id: str) -> bool:
        """True when the patient has a completed appointment and no rating yet."""
        if await self.completed_appointment(patient_id, doctor_id) is None:
            return False
        existing = await self._ratings.list_ratings(doctor_id=doctor_id, patient_id=patient_id)
        return not existing

    async def submit_review(
        self,
        current_user: CurrentUser,
        doctor: Doctor,
        rating: int,
        comment: str,
        now: Optional[DateTime] = None,
    ) -> Rating:
        """
        Store a rating of ``doctor`` by the signed-in user.

        Raises:
            AuthenticationError: If nobody is signed in
            InvalidReview: If the rating is outside 1-5 or the comment is blank
            ReviewNotAllowed: If there is no completed appointment or a rating exists
        """
        if not current_user.is_authenticated or not current_user.id:
            raise AuthenticationError("Sign in to review a doctor.")

        comment = comment.strip()
        if not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidReview(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}.")
        if not comment:
            raise InvalidReview("A comment is required.")

        appointment = await self.completed_appointment(current_user.id, doctor.id)
        if appointment is None:
            raise ReviewNotAllowed("You need a completed appointment to review this doctor.")
        if await self._ratings.list_ratings(doctor_id=doctor.id, patient_id=current_user.id):
            raise ReviewNotAllowed("You have already reviewed this doctor.")

        created = await self._ratings.create_rating(
            Rating(
                doctor_id=doctor.id,
                patient_id=current_user.id,
                rating=rating,
                comment=comment,
                appointment_id=appointment.id,
                created_at=now or pendulum.now("UTC"),
            )
        )
        logger.info("Rating %s stored for doctor %s", created.id, created.doctor_id)
        return created

    async def summary(self, doctor_id: str) -> RatingSummary:
        return RatingSummary.from_ratings(await self._ratings.list_ratings(doctor_id=doctor_id))

    async def recent(self, doctor_id: str, limit: int = RECENT_RATINGS_LIMIT) -> List[Rating]:
        """Newest ratings first; undated ones sort last."""
        ratings = await self._ratings.list_ratings(doctor_id=doctor_id)
        dated = sorted(
            (r for r in ratings if r.created_at is not None),
            key=lambda r: r.created_at,
            reverse=True,
        )
        undated = [r for r in ratings if r.created_at is None]
        return (dated + undated)[:limit]
