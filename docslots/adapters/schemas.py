"""
Document schemas for data coming from and going to storage.

Raw documents use the camelCase field names of the document database; they
are validated here and converted to domain objects so malformed data never
reaches the resolver.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pendulum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.exceptions import InvalidTimeFormat
from ..domain.models import (
    Appointment,
    AppointmentStatus,
    AvailabilityWindow,
    Doctor,
    Rating,
    SubscriptionStatus,
)
from ..domain.timeutils import split_time


class WindowDocument(BaseModel):
    """One availability window as stored on a doctor profile."""
    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        try:
            split_time(value)
        except InvalidTimeFormat as exc:
            raise ValueError(str(exc)) from exc
        return value

    def to_domain(self) -> AvailabilityWindow:
        return AvailabilityWindow(start_time=self.start_time, end_time=self.end_time)


class DoctorDocument(BaseModel):
    """A doctor profile document."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    slug: str = ""
    specialty: str = ""
    city: str = ""
    cost: float = 0.0
    availability: Dict[int, List[WindowDocument]] = Field(default_factory=dict)
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.EXPIRED,
        alias="subscriptionStatus",
    )

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, value: float) -> float:
        if value < 0:
            raise ValueError("cost must not be negative")
        return value

    @field_validator("availability")
    @classmethod
    def validate_weekdays(cls, value: Dict[int, List[WindowDocument]]) -> Dict[int, List[WindowDocument]]:
        """Ensure weekday keys use the Monday=0 .. Sunday=6 range."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"availability weekdays must be between 0 and 6, got {invalid_days}")
        return value

    def to_domain(self) -> Doctor:
        return Doctor(
            id=self.id,
            name=self.name,
            slug=self.slug or self.id,
            specialty=self.specialty,
            city=self.city,
            cost=self.cost,
            availability={
                day: [window.to_domain() for window in windows]
                for day, windows in self.availability.items()
            },
            subscription_status=self.subscription_status,
        )


class AppointmentDocument(BaseModel):
    """An appointment as written to the ``appointments`` collection."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    doctor_id: str = Field(alias="doctorId")
    patient_id: str = Field(alias="patientId")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    cost: float = 0.0

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentDocument":
        return cls(
            id=appointment.id,
            doctor_id=appointment.doctor_id,
            patient_id=appointment.patient_id,
            start_time=appointment.start_time.to_iso8601_string(),
            end_time=appointment.end_time.to_iso8601_string(),
            status=appointment.status,
            cost=appointment.cost,
        )

    def to_domain(self) -> Appointment:
        return Appointment(
            id=self.id,
            doctor_id=self.doctor_id,
            patient_id=self.patient_id,
            start_time=pendulum.parse(self.start_time),
            end_time=pendulum.parse(self.end_time),
            status=self.status,
            cost=self.cost,
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class RatingDocument(BaseModel):
    """A review as written to the ``ratings`` collection."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    doctor_id: str = Field(alias="doctorId")
    patient_id: str = Field(alias="patientId")
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    appointment_id: Optional[str] = Field(default=None, alias="appointmentId")
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @classmethod
    def from_domain(cls, rating: Rating) -> "RatingDocument":
        return cls(
            id=rating.id,
            doctor_id=rating.doctor_id,
            patient_id=rating.patient_id,
            rating=rating.rating,
            comment=rating.comment,
            appointment_id=rating.appointment_id,
            created_at=rating.created_at.to_iso8601_string() if rating.created_at else None,
        )

    def to_domain(self) -> Rating:
        return Rating(
            id=self.id,
            doctor_id=self.doctor_id,
            patient_id=self.patient_id,
            rating=self.rating,
            comment=self.comment,
            appointment_id=self.appointment_id,
            created_at=pendulum.parse(self.created_at) if self.created_at else None,
        )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
