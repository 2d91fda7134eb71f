"""
Tests for the persistence collaborators

Test Coverage:
1. Marker range lookups (half-open for conflicts, inclusive for queries)
2. Owner-scoped marker release
3. The day primary key rejects a second marker for the same day
4. Reservation store lookups and optimistic version bumps
"""

import pytest
from sqlalchemy.exc import IntegrityError

from campsite.models import OccupiedDay, Reservation, ReservationStatus
from campsite.services.availability_index import AvailabilityIndex
from campsite.services.reservation_store import ReservationStore

from conftest import day


def make_reservation(db, check_in, check_out, status=ReservationStatus.ACTIVE):
    reservation = Reservation(
        guest_name="John Doe",
        guest_email="john@example.com",
        check_in_date=check_in,
        check_out_date=check_out,
        status=status.value,
    )
    ReservationStore(db).save(reservation)
    return reservation


class TestAvailabilityIndex:

    def test_find_markers_intersecting_is_half_open(self, db):
        reservation = make_reservation(db, day(1), day(4))
        index = AvailabilityIndex(db)
        index.insert_markers(reservation.id, reservation.days())
        db.commit()

        assert [m.day for m in index.find_markers_intersecting(day(3), day(6))] == [day(3)]
        assert index.find_markers_intersecting(day(4), day(6)) == []
        assert index.find_markers_intersecting(day(0), day(1)) == []

    def test_find_days_between_is_inclusive(self, db):
        reservation = make_reservation(db, day(2), day(4))
        index = AvailabilityIndex(db)
        index.insert_markers(reservation.id, reservation.days())
        db.commit()

        assert index.find_days_between(day(1), day(2)) == [day(2)]
        assert index.find_days_between(day(3), day(10)) == [day(3)]
        assert index.find_days_between(day(4), day(10)) == []

    def test_insert_markers_dedupes_and_counts(self, db):
        reservation = make_reservation(db, day(1), day(3))
        index = AvailabilityIndex(db)

        assert index.insert_markers(reservation.id, [day(2), day(1), day(2)]) == 2
        assert index.insert_markers(reservation.id, []) == 0
        assert [m.day for m in index.markers_for(reservation.id)] == [day(1), day(2)]

    def test_same_day_cannot_be_claimed_twice(self, db):
        first = make_reservation(db, day(1), day(3))
        second = make_reservation(db, day(2), day(4))
        index = AvailabilityIndex(db)
        index.insert_markers(first.id, first.days())

        with pytest.raises(IntegrityError):
            index.insert_markers(second.id, second.days())
        db.rollback()

    def test_delete_markers_only_releases_owned_days(self, db):
        first = make_reservation(db, day(1), day(3))
        second = make_reservation(db, day(3), day(5))
        index = AvailabilityIndex(db)
        index.insert_markers(first.id, first.days())
        index.insert_markers(second.id, second.days())
        db.commit()

        # day(3) belongs to the second reservation and must survive
        released = index.delete_markers(first.id, [day(1), day(2), day(3)])
        db.commit()

        assert released == 2
        assert index.find_days_between(day(0), day(10)) == [day(3), day(4)]

    def test_delete_markers_twice_releases_nothing(self, db):
        reservation = make_reservation(db, day(1), day(3))
        index = AvailabilityIndex(db)
        index.insert_markers(reservation.id, reservation.days())

        assert index.delete_markers(reservation.id, reservation.days()) == 2
        assert index.delete_markers(reservation.id, reservation.days()) == 0


class TestReservationStore:

    def test_find_by_id(self, db):
        reservation = make_reservation(db, day(1), day(2))
        db.commit()
        store = ReservationStore(db)

        assert store.find_by_id(reservation.id).id == reservation.id
        assert store.find_by_id(reservation.id, lock=True).id == reservation.id
        assert store.find_by_id("00000000-0000-0000-0000-000000000000") is None

    def test_save_bumps_version(self, db):
        reservation = make_reservation(db, day(1), day(2))
        db.commit()
        assert reservation.version == 1

        reservation.guest_name = "Jane Doe"
        ReservationStore(db).save(reservation)
        db.commit()

        assert reservation.version == 2

    def test_list_active_skips_cancelled(self, db):
        active = make_reservation(db, day(5), day(6))
        make_reservation(db, day(1), day(2), status=ReservationStatus.CANCELLED)
        db.commit()

        assert [r.id for r in ReservationStore(db).list_active()] == [active.id]

    def test_cancelled_is_terminal(self, db, clock):
        from campsite.exceptions import NotAllowedError

        reservation = make_reservation(db, day(1), day(2))
        reservation.cancel(clock.today())

        assert not reservation.is_active
        assert reservation.cancelled_date == clock.today()
        with pytest.raises(NotAllowedError):
            reservation.cancel(clock.today())
        with pytest.raises(NotAllowedError):
            reservation.ensure_active()


class TestMarkerModel:

    def test_marker_points_at_owner(self, db):
        reservation = make_reservation(db, day(1), day(2))
        AvailabilityIndex(db).insert_markers(reservation.id, reservation.days())
        db.commit()

        marker = db.query(OccupiedDay).one()
        assert marker.reservation.id == reservation.id
