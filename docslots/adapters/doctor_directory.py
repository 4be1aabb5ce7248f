"""
File-backed doctor directory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import ValidationError

from ..domain.exceptions import DirectoryError, DoctorNotFound
from ..domain.models import Doctor
from .schemas import DoctorDocument

logger = logging.getLogger(__name__)


class JsonDoctorDirectory:
    """
    Loads doctor profiles from a JSON or YAML file.

    The file holds a list of doctor documents. Documents that fail
    validation are skipped with a warning instead of failing the whole load.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._doctors: Dict[str, Doctor] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.warning("Doctor directory file not found: %s", self.path)
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                if self.path.suffix in (".yaml", ".yml"):
                    documents = yaml.safe_load(f) or []
                else:
                    documents = json.load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise DirectoryError(f"Could not read doctors from {self.path}: {exc}") from exc

        if not isinstance(documents, list):
            raise DirectoryError(f"Doctor file {self.path} must contain a list of doctors.")

        for raw in documents:
            try:
                doctor = DoctorDocument.model_validate(raw).to_domain()
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid doctor document %r: %s",
                    raw.get("id") if isinstance(raw, dict) else raw,
                    exc,
                )
                continue

            self._doctors[doctor.id] = doctor

    def get_doctor(self, doctor_id_or_slug: str) -> Doctor:
        doctor = self._doctors.get(doctor_id_or_slug)
        if doctor is not None:
            return doctor

        for candidate in self._doctors.values():
            if candidate.slug == doctor_id_or_slug:
                return candidate

        raise DoctorNotFound(f"Unknown doctor: '{doctor_id_or_slug}'")

    def list_doctors(self) -> List[Doctor]:
        return list(self._doctors.values())
