"""
Reservation Errors

Typed failures raised by the reservation core. The HTTP layer maps each
class to its status code; the core itself never builds responses.
"""

import enum
from typing import List, Optional


class ValidationErrorKind(str, enum.Enum):
    INVALID_FORMAT = "invalid_format"
    MISSING_DATES = "missing_dates"
    PAST_DATES = "past_dates"
    CHECKIN_NOT_BEFORE_CHECKOUT = "checkin_not_before_checkout"
    INVALID_LENGTH = "invalid_length"
    LEAD_TIME = "lead_time"
    INVALID_RANGE = "invalid_range"
    INVALID_GUEST_NAME = "invalid_guest_name"
    INVALID_EMAIL = "invalid_email"
    INVALID_ID = "invalid_id"


class ReservationError(Exception):
    """Base class for every error the reservation core surfaces."""

    status_code = 500
    title = "Server-side error"
    retryable = False

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else [message]


class ValidationError(ReservationError):
    """Malformed or out-of-policy request."""

    status_code = 400
    title = "Validation error"

    def __init__(self, kind: ValidationErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class ConflictError(ReservationError):
    """At least one requested day is claimed by another active reservation."""

    status_code = 409
    title = "Occupied period error"

    DEFAULT_MESSAGE = "There is at least one unavailable date in the provided time period"

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)


class NotFoundError(ReservationError):
    status_code = 404
    title = "Resource not found"

    def __init__(self, reservation_id: str):
        super().__init__(f"Reservation with id {reservation_id} is not found")
        self.reservation_id = reservation_id


class NotAllowedError(ReservationError):
    """Operation is invalid for the reservation's current state."""

    status_code = 405
    title = "Operation is not allowed"


class TransientError(ReservationError):
    """Lock or serialization contention; the same request may be retried."""

    status_code = 503
    title = "Temporarily unavailable"
    retryable = True

    DEFAULT_MESSAGE = "The campsite calendar is busy, please retry the request"

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message)
