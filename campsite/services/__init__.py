# Services package
from .availability_index import AvailabilityIndex
from .availability_service import AvailabilityService
from .reservation_store import ReservationStore
from .reservation_service import ReservationService
from .validation import ReservationValidator, ValidatedReservation, parse_date

__all__ = [
    "AvailabilityIndex", "AvailabilityService", "ReservationStore", "ReservationService",
    "ReservationValidator", "ValidatedReservation", "parse_date",
]
