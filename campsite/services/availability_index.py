"""
Availability Index

Occupied-day markers for the campsite.
The set of markers is always the union of the day-sets of active reservations.
"""

import logging
from datetime import date
from typing import Iterable, List
from sqlalchemy.orm import Session

from ..models.occupied_day import OccupiedDay
from ..utils.db_helpers import is_postgres

logger = logging.getLogger(__name__)


class AvailabilityIndex:
    """
    Persistence for occupied-day markers.

    Key responsibilities:
    - Range lookups for conflict detection (optionally row-locked)
    - Range lookups for the availability query (never locked)
    - Bulk insert/delete of a reservation's markers
    """

    def __init__(self, db: Session):
        self.db = db

    def find_markers_intersecting(self, start: date, end: date, lock: bool = False) -> List[OccupiedDay]:
        """Markers for days in [start, end), ascending."""
        query = self.db.query(OccupiedDay).filter(
            OccupiedDay.day >= start,
            OccupiedDay.day < end
        ).order_by(OccupiedDay.day)

        # SQLite already holds the database write lock (BEGIN IMMEDIATE)
        if lock and is_postgres(self.db):
            query = query.with_for_update()

        return query.all()

    def find_days_between(self, first: date, last: date) -> List[date]:
        """Occupied days in [first, last], both inclusive. Read path, no locks."""
        rows = self.db.query(OccupiedDay.day).filter(
            OccupiedDay.day >= first,
            OccupiedDay.day <= last
        ).order_by(OccupiedDay.day).all()
        return [row[0] for row in rows]

    def markers_for(self, reservation_id: str) -> List[OccupiedDay]:
        return self.db.query(OccupiedDay).filter(
            OccupiedDay.reservation_id == reservation_id
        ).order_by(OccupiedDay.day).all()

    def insert_markers(self, reservation_id: str, days: Iterable[date]) -> int:
        """
        Claim days for a reservation.
        Flushes immediately so a duplicate day fails inside the caller's transaction.
        """
        markers = [OccupiedDay(day=d, reservation_id=reservation_id) for d in sorted(set(days))]
        if not markers:
            return 0

        self.db.add_all(markers)
        self.db.flush()

        logger.info(f"Claimed {len(markers)} days for reservation {reservation_id}")
        return len(markers)

    def delete_markers(self, reservation_id: str, days: Iterable[date]) -> int:
        """
        Release days held by a reservation.
        Only the owner's markers are removed, so released days are never freed twice.
        """
        days = sorted(set(days))
        if not days:
            return 0

        count = self.db.query(OccupiedDay).filter(
            OccupiedDay.reservation_id == reservation_id,
            OccupiedDay.day.in_(days)
        ).delete(synchronize_session=False)

        logger.info(f"Released {count} days for reservation {reservation_id}")
        return count
