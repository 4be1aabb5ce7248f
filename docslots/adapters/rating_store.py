"""
JSON-file store for doctor ratings.
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import List, Optional

from ..domain.exceptions import ReviewNotAllowed
from ..domain.models import Rating
from .json_file import read_documents, write_documents
from .schemas import RatingDocument


class JsonRatingStore:
    """
    Persists ratings as a JSON list in a single file.

    A patient holds at most one rating per doctor; a second one is refused
    under the same lock that writes the first.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def create_rating(self, rating: Rating) -> Rating:
        """
        Raises:
            ReviewNotAllowed: If the patient already rated this doctor
            PersistenceError: If the file cannot be read or written
        """
        async with self._lock:
            documents = read_documents(self.path, RatingDocument)
            if any(
                d.doctor_id == rating.doctor_id and d.patient_id == rating.patient_id
                for d in documents
            ):
                raise ReviewNotAllowed("You have already reviewed this doctor.")

            created = rating.with_id(uuid.uuid4().hex)
            documents.append(RatingDocument.from_domain(created))
            write_documents(self.path, documents)

        return created

    async def list_ratings(
        self,
        doctor_id: Optional[str] = None,
        patient_id: Optional[str] = None,
    ) -> List[Rating]:
        async with self._lock:
            documents = read_documents(self.path, RatingDocument)

        return [
            document.to_domain()
            for document in documents
            if (doctor_id is None or document.doctor_id == doctor_id)
            and (patient_id is None or document.patient_id == patient_id)
        ]
