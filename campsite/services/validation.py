"""
Reservation request validation.

Stateless rule checks for a candidate reservation, applied in a fixed order
and stopping at the first failure:

1. dates parse as yyyy-MM-dd
2. both dates are present
3. neither date is in the past
4. check-in comes before check-out
5. length of stay is within the policy
6. check-in falls inside the lead time window
7. guest name is present
8. guest email looks like an email address
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

from ..config import ReservationPolicy
from ..exceptions import ValidationError, ValidationErrorKind
from ..utils.clock import Clock

DATE_FORMAT = "%Y-%m-%d"
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

DateInput = Union[date, str, None]

VALIDATION_ERROR_INVALID_DATE_FORMAT = "Both check-in and check-out dates must have valid format: yyyy-MM-dd"
VALIDATION_ERROR_DATES_REQUIRED = "Both check-in and check-out dates must be provided."
VALIDATION_ERROR_DATES_FUTURE = "Both check-in and check-out dates must be in the future."
VALIDATION_ERROR_CHECKIN_AFTER_CHECKOUT = "The check-in date must be before the check-out date"
VALIDATION_ERROR_GUEST_NAME = "Name must not be empty"
VALIDATION_ERROR_GUEST_EMAIL = "Email must be a valid e-mail"


@dataclass(frozen=True)
class ValidatedReservation:
    check_in: date
    check_out: date
    guest_name: str
    guest_email: str

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


def parse_date(value: DateInput) -> Optional[date]:
    """
    Parse a yyyy-MM-dd string. Dates pass through; None and blank strings give None.

    Raises ValueError on anything else.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"{value!r} is not a yyyy-MM-dd date")
    return datetime.strptime(value, DATE_FORMAT).date()


class ReservationValidator:
    def __init__(self, policy: ReservationPolicy, clock: Clock):
        self.policy = policy
        self.clock = clock

    def validate(
        self,
        check_in: DateInput,
        check_out: DateInput,
        guest_name: Optional[str],
        guest_email: Optional[str],
    ) -> ValidatedReservation:
        try:
            check_in_date = parse_date(check_in)
            check_out_date = parse_date(check_out)
        except (AttributeError, TypeError, ValueError):
            raise ValidationError(ValidationErrorKind.INVALID_FORMAT, VALIDATION_ERROR_INVALID_DATE_FORMAT)

        if check_in_date is None or check_out_date is None:
            raise ValidationError(ValidationErrorKind.MISSING_DATES, VALIDATION_ERROR_DATES_REQUIRED)

        today = self.clock.today()
        if check_in_date < today or check_out_date < today:
            raise ValidationError(ValidationErrorKind.PAST_DATES, VALIDATION_ERROR_DATES_FUTURE)

        if check_in_date >= check_out_date:
            raise ValidationError(
                ValidationErrorKind.CHECKIN_NOT_BEFORE_CHECKOUT, VALIDATION_ERROR_CHECKIN_AFTER_CHECKOUT
            )

        nights = (check_out_date - check_in_date).days
        if nights < self.policy.min_length or nights > self.policy.max_length:
            raise ValidationError(
                ValidationErrorKind.INVALID_LENGTH,
                f"The reservation at the campsite must be between {self.policy.min_length} "
                f"and {self.policy.max_length} nights"
            )

        earliest_start = today + timedelta(days=self.policy.min_start_offset_days)
        latest_start = today + timedelta(days=self.policy.max_start_offset_days)
        if check_in_date < earliest_start or check_in_date > latest_start:
            raise ValidationError(
                ValidationErrorKind.LEAD_TIME,
                f"The reservation at the campsite can be placed minimum "
                f"{self.policy.min_start_offset_days} day(s) ahead of arrival and up to "
                f"{self.policy.max_start_offset_days} days in advance"
            )

        name = (guest_name or "").strip()
        if not name:
            raise ValidationError(ValidationErrorKind.INVALID_GUEST_NAME, VALIDATION_ERROR_GUEST_NAME)

        email = (guest_email or "").strip()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError(ValidationErrorKind.INVALID_EMAIL, VALIDATION_ERROR_GUEST_EMAIL)

        return ValidatedReservation(
            check_in=check_in_date,
            check_out=check_out_date,
            guest_name=name,
            guest_email=email,
        )
