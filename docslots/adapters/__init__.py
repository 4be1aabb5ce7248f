"""
Adapters layer - Storage, HTTP and session integrations.
"""

from .appointment_store import JsonAppointmentStore
from .doctor_directory import JsonDoctorDirectory
from .rating_store import JsonRatingStore
from .rest_client import RestAppointmentClient
from .session_auth import SessionAuthProvider

__all__ = [
    "JsonAppointmentStore",
    "JsonDoctorDirectory",
    "JsonRatingStore",
    "RestAppointmentClient",
    "SessionAuthProvider",
]
