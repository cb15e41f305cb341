# app/services/exceptions.py
"""Booking domain errors. Each maps to one HTTP status in app.main."""


class BookingServiceError(Exception):
    """Base class for all booking domain errors."""
    status_code = 400


class BookingValidationError(BookingServiceError):
    """Raised when a request is malformed (times, purpose, vehicle selection)."""
    status_code = 422


class BookingConflictError(BookingServiceError):
    """Raised when the requested interval overlaps a non-rejected booking."""
    status_code = 409


class InvalidTransitionError(BookingServiceError):
    """Raised when a status change is not allowed from the booking's current status."""
    status_code = 409


class PermissionDeniedError(BookingServiceError):
    """Raised when the acting user's role or ownership does not allow the operation."""
    status_code = 403


class NotFoundError(BookingServiceError):
    """Raised when a booking or vehicle id does not resolve."""
    status_code = 404
