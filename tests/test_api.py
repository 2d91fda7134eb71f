"""
Tests for the reservations HTTP API

Test Coverage:
1. Status codes for every outcome (201/200/400/404/405/409)
2. Error body shape {timestamp, status, error, details}
3. Availability window defaults and clamping
4. Health endpoints
"""

import uuid
from unittest.mock import patch

from campsite.exceptions import TransientError

from conftest import day

BASE = "/api/v1/reservations"


def iso(offset: int) -> str:
    return day(offset).isoformat()


def body(check_in, check_out, name="John Doe", email="john@example.com"):
    return {
        "guest_name": name,
        "guest_email": email,
        "check_in_date": iso(check_in),
        "check_out_date": iso(check_out),
    }


def assert_error(response, status, error):
    assert response.status_code == status
    data = response.json()
    assert data["status"] == status
    assert data["error"] == error
    assert data["details"]
    assert "timestamp" in data
    return data


class TestCreateEndpoint:

    def test_create_returns_201(self, client):
        response = client.post(BASE, json=body(1, 3))

        assert response.status_code == 201
        data = response.json()
        assert uuid.UUID(data["id"])
        assert data["check_in_date"] == iso(1)
        assert data["check_out_date"] == iso(3)
        assert data["active"] is True
        assert data["status"] == "active"
        assert data["cancelled_date"] is None

    def test_conflict_returns_409(self, client):
        client.post(BASE, json=body(1, 3))

        response = client.post(BASE, json=body(2, 4))

        data = assert_error(response, 409, "Occupied period error")
        assert data["details"] == ["There is at least one unavailable date in the provided time period"]

    def test_lead_time_returns_400(self, client):
        response = client.post(BASE, json=body(0, 2))

        assert_error(response, 400, "Validation error")

    def test_bad_date_format_returns_400(self, client):
        payload = body(1, 2)
        payload["check_in_date"] = "02/07/2026"

        data = assert_error(client.post(BASE, json=payload), 400, "Validation error")
        assert data["details"] == ["Both check-in and check-out dates must have valid format: yyyy-MM-dd"]

    def test_missing_dates_returns_400(self, client):
        payload = {"guest_name": "John Doe", "guest_email": "john@example.com"}

        data = assert_error(client.post(BASE, json=payload), 400, "Validation error")
        assert data["details"] == ["Both check-in and check-out dates must be provided."]

    def test_malformed_email_rejected_by_schema(self, client):
        response = client.post(BASE, json=body(1, 2, email="not-an-email"))

        assert_error(response, 400, "Validation error")

    def test_too_long_returns_400(self, client):
        data = assert_error(client.post(BASE, json=body(1, 5)), 400, "Validation error")
        assert data["details"] == ["The reservation at the campsite must be between 1 and 3 nights"]

    def test_busy_calendar_returns_503(self, client):
        with patch(
            "campsite.services.reservation_service.ReservationService.create_reservation",
            side_effect=TransientError(),
        ):
            response = client.post(BASE, json=body(1, 2))

        assert_error(response, 503, "Temporarily unavailable")
        assert response.headers["Retry-After"] == "1"


class TestGetEndpoint:

    def test_get_returns_reservation(self, client):
        created = client.post(BASE, json=body(1, 3, name="Jane Doe")).json()

        response = client.get(f"{BASE}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["guest_name"] == "Jane Doe"

    def test_unknown_id_returns_404(self, client):
        missing = str(uuid.uuid4())

        data = assert_error(client.get(f"{BASE}/{missing}"), 404, "Resource not found")
        assert data["details"] == [f"Reservation with id {missing} is not found"]

    def test_malformed_id_returns_400(self, client):
        assert_error(client.get(f"{BASE}/not-a-uuid"), 400, "Validation error")


class TestUpdateEndpoint:

    def test_update_returns_200(self, client):
        created = client.post(BASE, json=body(1, 3)).json()

        response = client.patch(f"{BASE}/{created['id']}", json=body(5, 7, email="new@example.com"))

        assert response.status_code == 200
        data = response.json()
        assert data["check_in_date"] == iso(5)
        assert data["guest_email"] == "new@example.com"

    def test_update_into_other_reservation_returns_409(self, client):
        first = client.post(BASE, json=body(1, 3)).json()
        client.post(BASE, json=body(5, 7))

        response = client.patch(f"{BASE}/{first['id']}", json=body(4, 6))

        assert_error(response, 409, "Occupied period error")
        unchanged = client.get(f"{BASE}/{first['id']}").json()
        assert unchanged["check_in_date"] == iso(1)
        assert unchanged["check_out_date"] == iso(3)

    def test_update_cancelled_returns_405(self, client):
        created = client.post(BASE, json=body(1, 3)).json()
        client.delete(f"{BASE}/{created['id']}")

        response = client.patch(f"{BASE}/{created['id']}", json=body(5, 6))

        assert_error(response, 405, "Operation is not allowed")

    def test_update_unknown_returns_404(self, client):
        response = client.patch(f"{BASE}/{uuid.uuid4()}", json=body(5, 6))

        assert_error(response, 404, "Resource not found")


class TestCancelEndpoint:

    def test_cancel_returns_cancelled_record(self, client):
        created = client.post(BASE, json=body(1, 3)).json()

        response = client.delete(f"{BASE}/{created['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["active"] is False
        assert data["status"] == "cancelled"
        assert data["cancelled_date"] == iso(0)

    def test_cancel_twice_is_a_no_op(self, client):
        created = client.post(BASE, json=body(1, 3)).json()
        first = client.delete(f"{BASE}/{created['id']}").json()

        second = client.delete(f"{BASE}/{created['id']}")

        assert second.status_code == 200
        assert second.json()["cancelled_date"] == first["cancelled_date"]

    def test_recreate_after_cancel(self, client):
        created = client.post(BASE, json=body(1, 3)).json()
        client.delete(f"{BASE}/{created['id']}")

        assert client.post(BASE, json=body(1, 3)).status_code == 201

    def test_cancel_unknown_returns_404(self, client):
        assert_error(client.delete(f"{BASE}/{uuid.uuid4()}"), 404, "Resource not found")


class TestAvailabilityEndpoint:

    def test_explicit_window(self, client):
        client.post(BASE, json=body(1, 3))

        response = client.get(BASE, params={"from_date": iso(1), "to_date": iso(10)})

        assert response.status_code == 200
        data = response.json()
        assert data["from_date"] == iso(1)
        assert data["to_date"] == iso(10)
        assert data["available_dates"] == [iso(n) for n in range(3, 11)]

    def test_defaults_to_bookable_horizon(self, client):
        data = client.get(BASE).json()

        assert data["from_date"] == iso(1)
        assert data["to_date"] == iso(30)
        assert len(data["available_dates"]) == 30

    def test_out_of_horizon_bounds_clamped(self, client):
        data = client.get(BASE, params={"from_date": iso(-3), "to_date": iso(45)}).json()

        assert data["from_date"] == iso(1)
        assert data["to_date"] == iso(30)

    def test_reversed_window_returns_400(self, client):
        response = client.get(BASE, params={"from_date": iso(10), "to_date": iso(5)})

        data = assert_error(response, 400, "Validation error")
        assert data["details"] == ["The from date must not be after the to date"]

    def test_unparseable_query_date_returns_400(self, client):
        response = client.get(BASE, params={"from_date": "soon"})

        assert_error(response, 400, "Validation error")


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_ready_checks_database(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["database"]["status"] == "up"

    def test_request_id_echoed(self, client):
        response = client.get("/health/live", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
