"""
Domain-specific exception hierarchy for the docslots application.
"""


class DocslotsError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeFormat(DocslotsError, ValueError):
    """Raised when an "HH:MM" string is malformed or out of range."""


class DoctorNotFound(DocslotsError, LookupError):
    """Raised when a doctor cannot be found in the directory."""


class BookingError(DocslotsError):
    """Base class for booking policy rejections shown to the user."""


class IncompleteSelection(BookingError):
    """Raised when a booking is submitted without a date and a slot."""


class SelfBookingForbidden(BookingError):
    """Raised when a doctor tries to book an appointment with themselves."""


class BookingInProgress(BookingError):
    """Raised when a submission is attempted while another is in flight."""


class DoctorNotBookable(BookingError):
    """Raised when the doctor's subscription does not allow bookings."""


class DateInPast(BookingError):
    """Raised when the selected date lies before today."""


class SlotNotOffered(BookingError):
    """Raised when the selected time is not a bookable slot of the selected date."""


class PersistenceError(DocslotsError):
    """Raised when an appointment cannot be stored."""


class SlotUnavailable(PersistenceError):
    """Raised when the store already holds an appointment for the same doctor and start."""


class AuthenticationError(DocslotsError):
    """Raised when session handling fails."""


class DirectoryError(DocslotsError):
    """Raised when the doctor directory file cannot be read or parsed."""


class ReviewError(DocslotsError):
    """Base class for rejected doctor reviews."""


class ReviewNotAllowed(ReviewError):
    """Raised when the patient has no completed appointment or already rated the doctor."""


class InvalidReview(ReviewError):
    """Raised when the rating is outside 1-5 or the comment is empty."""
