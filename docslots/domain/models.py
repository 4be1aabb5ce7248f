"""
Domain models for doctors, availability windows and appointments.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from pendulum import DateTime


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    A contiguous time-of-day range in which a doctor accepts appointments.

    Expected: end_time is later than start_time on the same day. Windows that
    break this are kept as-is and simply produce no slots.
    """
    start_time: str
    end_time: str

    def __str__(self) -> str:
        return f"{self.start_time} - {self.end_time}"


# Weekday index (Monday=0 .. Sunday=6) -> windows for that day
WeeklyAvailability = Mapping[int, Sequence[AvailabilityWindow]]


class SubscriptionStatus(str, Enum):
    TRIAL = "Trial"
    PENDING_VALIDATION = "Pending_Validation"
    ACTIVE = "Active"
    ACTIVE_PAID = "Active_Paid"
    EXPIRED = "Expired"

    @property
    def is_visible(self) -> bool:
        """Whether doctors with this status are listed and bookable."""
        return self in (
            SubscriptionStatus.TRIAL,
            SubscriptionStatus.ACTIVE,
            SubscriptionStatus.ACTIVE_PAID,
        )


class AppointmentStatus(str, Enum):
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


@dataclass
class Doctor:
    """A bookable doctor as provided by the doctor directory."""
    id: str
    name: str
    cost: float = 0.0
    availability: Dict[int, List[AvailabilityWindow]] = field(default_factory=dict)
    slug: str = ""
    specialty: str = ""
    city: str = ""
    subscription_status: SubscriptionStatus = SubscriptionStatus.EXPIRED

    def __post_init__(self):
        if not self.slug:
            self.slug = self.id

    @property
    def is_visible(self) -> bool:
        return self.subscription_status.is_visible


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the person using the scheduler."""
    id: Optional[str] = None
    is_authenticated: bool = False

    @classmethod
    def anonymous(cls) -> "CurrentUser":
        return cls()

    @classmethod
    def signed_in(cls, user_id: str) -> "CurrentUser":
        return cls(id=user_id, is_authenticated=True)


@dataclass(frozen=True)
class Appointment:
    """
    An appointment record handed to the persistence collaborator.

    ``id`` is assigned by the store on creation.
    """
    doctor_id: str
    patient_id: str
    start_time: DateTime
    end_time: DateTime
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    cost: float = 0.0
    id: Optional[str] = None

    def with_id(self, appointment_id: str) -> "Appointment":
        return replace(self, id=appointment_id)

    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() / 60)

    def format_display(self) -> str:
        """
        Format the appointment for display.
        Format: Weekday, DD.MM.YYYY | HH:mm – HH:mm
        """
        weekday_names = {
            0: "Lunes",
            1: "Martes",
            2: "Miércoles",
            3: "Jueves",
            4: "Viernes",
            5: "Sábado",
            6: "Domingo",
        }

        start = self.start_time
        weekday = weekday_names[start.weekday()]
        date_str = start.format("DD.MM.YYYY")
        time_str = f"{start.format('HH:mm')} – {self.end_time.format('HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.status.value})"


@dataclass(frozen=True)
class Rating:
    """A patient's review of a doctor, tied to the completed appointment it rates."""
    doctor_id: str
    patient_id: str
    rating: int
    comment: str
    appointment_id: Optional[str] = None
    created_at: Optional[DateTime] = None
    id: Optional[str] = None

    def with_id(self, rating_id: str) -> "Rating":
        return replace(self, id=rating_id)


@dataclass(frozen=True)
class RatingSummary:
    average: float = 0.0
    count: int = 0

    @classmethod
    def from_ratings(cls, ratings: Sequence[Rating]) -> "RatingSummary":
        """Average rounded to one decimal; zero when there are no ratings."""
        if not ratings:
            return cls()
        total = sum(r.rating for r in ratings)
        return cls(average=round(total / len(ratings), 1), count=len(ratings))
