"""
Reservation Service

Create, update and cancel reservations on the single campsite.

Every mutation is one atomic write transaction that re-reads the occupied-day
markers under the write lock, so at most one active reservation can ever claim
a given calendar day, however many requests race for it.
"""

import uuid
from datetime import date
from typing import Callable, List, Optional, Tuple, TypeVar
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..exceptions import ConflictError, NotFoundError, ValidationError, ValidationErrorKind
from ..models.reservation import Reservation, ReservationStatus
from ..utils.clock import Clock, SystemClock
from ..utils.date_range import days_in_range
from ..utils.db_helpers import run_in_write_transaction
from ..utils.logging_config import get_logger
from .availability_index import AvailabilityIndex
from .availability_service import AvailabilityService
from .reservation_store import ReservationStore
from .validation import DateInput, ReservationValidator

logger = get_logger(__name__)

T = TypeVar('T')

VALIDATION_ERROR_ID = "The reservation id must be valid"


class ReservationService:
    """
    Conflict-resolution engine for the campsite calendar.

    State per reservation: absent -> active -> cancelled (terminal).
    Updates are only allowed while active.
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None, clock: Optional[Clock] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock(self.settings.timezone)
        self.policy = self.settings.reservation_policy
        self.validator = ReservationValidator(self.policy, self.clock)
        self.availability = AvailabilityService(db, self.policy, self.clock)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_available_dates(self, from_date: date, to_date: date) -> List[date]:
        return self.availability.get_available_dates(from_date, to_date)

    def get_reservation(self, reservation_id: str) -> Reservation:
        reservation_id = self._parse_id(reservation_id)
        reservation = ReservationStore(self.db).find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError(reservation_id)
        return reservation

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_reservation(
        self,
        check_in: DateInput,
        check_out: DateInput,
        guest_name: Optional[str],
        guest_email: Optional[str],
    ) -> Reservation:
        """
        Reserve [check_in, check_out) if every day in it is free.

        Raises:
            ValidationError: request breaks a booking rule
            ConflictError: a requested day is already occupied
            TransientError: the calendar stayed locked through all retries
        """
        candidate = self.validator.validate(check_in, check_out, guest_name, guest_email)
        requested_days = days_in_range(candidate.check_in, candidate.check_out)

        def _create(db: Session) -> Reservation:
            index = AvailabilityIndex(db)
            taken = index.find_markers_intersecting(candidate.check_in, candidate.check_out, lock=True)
            if taken:
                logger.reservation_conflict(None, [m.day for m in taken])
                raise ConflictError()

            reservation = Reservation(
                id=str(uuid.uuid4()),
                guest_name=candidate.guest_name,
                guest_email=candidate.guest_email,
                check_in_date=candidate.check_in,
                check_out_date=candidate.check_out,
                status=ReservationStatus.ACTIVE.value,
            )
            ReservationStore(db).save(reservation)
            index.insert_markers(reservation.id, requested_days)
            return reservation

        reservation = self._write(_create)
        logger.reservation_created(reservation.id, reservation.check_in_date, reservation.check_out_date)
        return reservation

    def update_reservation(
        self,
        reservation_id: str,
        check_in: DateInput,
        check_out: DateInput,
        guest_name: Optional[str],
        guest_email: Optional[str],
    ) -> Reservation:
        """
        Move or resize an active reservation and replace its contact details.

        The reservation never conflicts with its own days, so shrinking or
        shifting into them is fine. Only vacated days are released and only
        newly covered days are claimed.

        Raises:
            ValidationError: malformed id or request breaks a booking rule
            NotFoundError: unknown id
            NotAllowedError: the reservation is cancelled
            ConflictError: a new day is occupied by another reservation
            TransientError: the calendar stayed locked through all retries
        """
        existing = self.get_reservation(reservation_id)
        existing.ensure_active()
        reservation_id = existing.id

        candidate = self.validator.validate(check_in, check_out, guest_name, guest_email)
        new_days = set(days_in_range(candidate.check_in, candidate.check_out))

        def _update(db: Session) -> Reservation:
            store = ReservationStore(db)
            reservation = store.find_by_id(reservation_id, lock=True)
            if reservation is None:
                raise NotFoundError(reservation_id)
            # may have been cancelled since the first read
            reservation.ensure_active()

            old_days = set(reservation.days())
            index = AvailabilityIndex(db)
            occupied = {
                m.day for m in index.find_markers_intersecting(candidate.check_in, candidate.check_out, lock=True)
            }
            foreign = occupied - old_days
            if foreign:
                logger.reservation_conflict(reservation.id, sorted(foreign))
                raise ConflictError()

            index.delete_markers(reservation.id, old_days - new_days)
            index.insert_markers(reservation.id, new_days - old_days)

            reservation.check_in_date = candidate.check_in
            reservation.check_out_date = candidate.check_out
            reservation.guest_name = candidate.guest_name
            reservation.guest_email = candidate.guest_email
            return store.save(reservation)

        reservation = self._write(_update)
        logger.reservation_updated(reservation.id, reservation.check_in_date, reservation.check_out_date)
        return reservation

    def cancel_reservation(self, reservation_id: str) -> Reservation:
        """
        Cancel a reservation and release its days.

        Cancelling an already cancelled reservation returns it unchanged.

        Raises:
            ValidationError: malformed id
            NotFoundError: unknown id
        """
        reservation_id = self._parse_id(reservation_id)

        def _cancel(db: Session) -> Tuple[Reservation, int]:
            store = ReservationStore(db)
            reservation = store.find_by_id(reservation_id, lock=True)
            if reservation is None:
                raise NotFoundError(reservation_id)
            if not reservation.is_active:
                return reservation, 0

            released = reservation.days()
            reservation.cancel(self.clock.today())
            store.save(reservation)
            released_count = AvailabilityIndex(db).delete_markers(reservation.id, released)
            return reservation, released_count

        reservation, released_count = self._write(_cancel)
        if released_count:
            logger.reservation_cancelled(reservation.id, released_count)
        return reservation

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _write(self, work: Callable[[Session], T]) -> T:
        return run_in_write_transaction(self.db, work, retries=self.settings.transaction_retries)

    @staticmethod
    def _parse_id(reservation_id: str) -> str:
        try:
            return str(uuid.UUID(str(reservation_id)))
        except ValueError:
            raise ValidationError(ValidationErrorKind.INVALID_ID, VALIDATION_ERROR_ID)
