"""
JSON-file appointment store.

Creation checks and writes under one lock, so within a process a doctor can
never hold two live appointments starting at the same instant.
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import List, Optional

from ..domain.exceptions import SlotUnavailable
from ..domain.models import Appointment, AppointmentStatus
from .json_file import read_documents, write_documents
from .schemas import AppointmentDocument


class JsonAppointmentStore:
    """
    Persists appointments as a JSON list in a single file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> List[AppointmentDocument]:
        return read_documents(self.path, AppointmentDocument)

    async def create_appointment(self, record: Appointment) -> Appointment:
        """
        Store a new appointment.

        Raises:
            SlotUnavailable: If the doctor already has a live appointment at that start
            PersistenceError: If the file cannot be read or written
        """
        async with self._lock:
            documents = self._read()

            for existing in documents:
                if existing.status == AppointmentStatus.CANCELLED:
                    continue
                if existing.doctor_id != record.doctor_id:
                    continue
                if existing.to_domain().start_time == record.start_time:
                    raise SlotUnavailable("This time has already been booked.")

            created = record.with_id(uuid.uuid4().hex)
            documents.append(AppointmentDocument.from_domain(created))
            write_documents(self.path, documents)

        return created

    async def list_appointments(
        self,
        patient_id: Optional[str] = None,
        doctor_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        async with self._lock:
            documents = self._read()

        return [
            document.to_domain()
            for document in documents
            if (patient_id is None or document.patient_id == patient_id)
            and (doctor_id is None or document.doctor_id == doctor_id)
            and (status is None or document.status == status)
        ]
