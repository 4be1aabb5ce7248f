"""
REST client for a remote ``appointments`` collection.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from ..domain.exceptions import PersistenceError, SlotUnavailable
from ..domain.models import Appointment, AppointmentStatus
from .schemas import AppointmentDocument


class RestAppointmentClient:
    """
    Appointment store backed by an HTTP API.

    The API is expected to enforce uniqueness of (doctorId, startTime) and
    answer a duplicate create with 409 Conflict.
    """

    def __init__(self, base_url: str, token: str = "", timeout: int = 30):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. https://api.example.com/v1
            token: Optional bearer token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/appointments"

    def _create(self, record: Appointment) -> Appointment:
        payload = AppointmentDocument.from_domain(record).to_payload()

        try:
            response = requests.post(
                self.collection_url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
            if response.status_code == 409:
                raise SlotUnavailable("This time has already been booked.")
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f"Failed to create appointment: {e}") from e
        except ValueError as e:
            raise PersistenceError(f"Invalid response from appointments API: {e}") from e

        return self._parse_created(data, record)

    @staticmethod
    def _parse_created(data: Dict[str, Any], record: Appointment) -> Appointment:
        """The API answers with the stored document, or at least its id."""
        if isinstance(data, dict) and "doctorId" in data:
            try:
                return AppointmentDocument.model_validate(data).to_domain()
            except ValidationError as e:
                raise PersistenceError(f"Invalid appointment in API response: {e}") from e
        if isinstance(data, dict) and data.get("id"):
            return record.with_id(str(data["id"]))
        raise PersistenceError("Appointments API response did not contain an id.")

    def _list(
        self,
        patient_id: Optional[str],
        doctor_id: Optional[str],
        status: Optional[AppointmentStatus],
    ) -> List[Appointment]:
        params = {}
        if patient_id is not None:
            params["patientId"] = patient_id
        if doctor_id is not None:
            params["doctorId"] = doctor_id
        if status is not None:
            params["status"] = status.value

        try:
            response = requests.get(
                self.collection_url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f"Failed to fetch appointments: {e}") from e
        except ValueError as e:
            raise PersistenceError(f"Invalid response from appointments API: {e}") from e

        if not isinstance(data, list):
            raise PersistenceError("Appointments API did not return a list.")

        try:
            return [AppointmentDocument.model_validate(item).to_domain() for item in data]
        except ValidationError as e:
            raise PersistenceError(f"Invalid appointment in API response: {e}") from e

    async def create_appointment(self, record: Appointment) -> Appointment:
        return await asyncio.to_thread(self._create, record)

    async def list_appointments(
        self,
        patient_id: Optional[str] = None,
        doctor_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        return await asyncio.to_thread(self._list, patient_id, doctor_id, status)
