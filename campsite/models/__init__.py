# Models package
from .reservation import Reservation, ReservationStatus
from .occupied_day import OccupiedDay

__all__ = ["Reservation", "ReservationStatus", "OccupiedDay"]
