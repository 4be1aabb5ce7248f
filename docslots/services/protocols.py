"""
Protocols describing the collaborators the services depend on.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from ..domain.models import Appointment, AppointmentStatus, CurrentUser, Doctor, Rating


class DoctorDirectoryProtocol(Protocol):
    """Read-only access to doctor profiles."""

    def get_doctor(self, doctor_id_or_slug: str) -> Doctor:
        """Return the doctor or raise ``DoctorNotFound``."""

    def list_doctors(self) -> List[Doctor]:
        """Return every known doctor."""


class AuthProviderProtocol(Protocol):
    """Current-user lookup and the login redirect."""

    def current_user(self) -> CurrentUser:
        """Return the signed-in user, or an anonymous one."""

    def login_url(self, callback_url: str) -> str:
        """Return the login URL that resumes at ``callback_url``."""


class AppointmentStoreProtocol(Protocol):
    """Persistence for appointment records."""

    async def create_appointment(self, record: Appointment) -> Appointment:
        """Store ``record`` and return it with its assigned id."""

    async def list_appointments(
        self,
        patient_id: Optional[str] = None,
        doctor_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        """Return stored appointments, optionally filtered."""


class RatingStoreProtocol(Protocol):
    """Persistence for doctor ratings."""

    async def create_rating(self, rating: Rating) -> Rating:
        """Store ``rating`` and return it with its assigned id."""

    async def list_ratings(
        self,
        doctor_id: Optional[str] = None,
        patient_id: Optional[str] = None,
    ) -> List[Rating]:
        """Return stored ratings, optionally filtered."""
