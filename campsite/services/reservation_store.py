"""Reservation Store - persistence for reservation records."""

from typing import List, Optional
from sqlalchemy.orm import Session

from ..models.reservation import Reservation, ReservationStatus
from ..utils.db_helpers import acquire_row_lock


class ReservationStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, reservation_id: str, lock: bool = False) -> Optional[Reservation]:
        if lock:
            return acquire_row_lock(self.db, Reservation, Reservation.id == reservation_id)
        return self.db.query(Reservation).filter(Reservation.id == reservation_id).first()

    def save(self, reservation: Reservation) -> Reservation:
        """Stage the record and flush, so the version check runs inside the transaction."""
        self.db.add(reservation)
        self.db.flush()
        return reservation

    def list_active(self) -> List[Reservation]:
        return self.db.query(Reservation).filter(
            Reservation.status == ReservationStatus.ACTIVE.value
        ).order_by(Reservation.check_in_date).all()
