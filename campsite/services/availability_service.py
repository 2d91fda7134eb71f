"""
Availability Service

Read-only availability over a caller-supplied window.
Takes no locks: a concurrent write can make the answer stale, never wrong
enough to double-book, because writers re-check inside their own transaction.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from ..config import ReservationPolicy
from ..exceptions import ValidationError, ValidationErrorKind
from ..utils.clock import Clock
from ..utils.date_range import days_between
from .availability_index import AvailabilityIndex

logger = logging.getLogger(__name__)

VALIDATION_ERROR_DATE_QUERY_PARAMS = "The from date must not be after the to date"


class AvailabilityService:
    def __init__(self, db: Session, policy: ReservationPolicy, clock: Clock):
        self.db = db
        self.policy = policy
        self.clock = clock
        self.index = AvailabilityIndex(db)

    def get_available_dates(self, from_date: date, to_date: date) -> List[date]:
        """
        Free days in [from_date, to_date], both ends inclusive, ascending.

        Raises:
            ValidationError: from_date is after to_date
        """
        if from_date > to_date:
            raise ValidationError(ValidationErrorKind.INVALID_RANGE, VALIDATION_ERROR_DATE_QUERY_PARAMS)

        occupied = set(self.index.find_days_between(from_date, to_date))
        available = [d for d in days_between(from_date, to_date) if d not in occupied]

        logger.debug(
            f"Availability {from_date}..{to_date}: {len(available)} free, {len(occupied)} occupied"
        )
        return available

    def default_window(
        self,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None
    ) -> Tuple[date, date]:
        """
        Clamp a query window into the bookable horizon.

        A missing bound, or one outside [today + min offset, today + max offset],
        is replaced by the nearest edge of the horizon.
        """
        today = self.clock.today()
        earliest = today + timedelta(days=self.policy.min_start_offset_days)
        latest = today + timedelta(days=self.policy.max_start_offset_days)

        start = earliest if from_date is None or from_date < earliest else from_date
        end = latest if to_date is None or to_date > latest else to_date
        return start, end
