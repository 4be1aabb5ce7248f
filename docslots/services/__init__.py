"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking import BookingConfirmed, BookingService, DeferredLogin
from .protocols import (
    AppointmentStoreProtocol,
    AuthProviderProtocol,
    DoctorDirectoryProtocol,
    RatingStoreProtocol,
)
from .reviews import ReviewService
from .scheduler import SchedulerService

__all__ = [
    "AppointmentStoreProtocol",
    "AuthProviderProtocol",
    "BookingConfirmed",
    "BookingService",
    "DeferredLogin",
    "DoctorDirectoryProtocol",
    "RatingStoreProtocol",
    "ReviewService",
    "SchedulerService",
]
