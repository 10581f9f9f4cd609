"""Integration tests for the order tracking endpoints."""

import pytest

from modules.orders.constants import TrackingStatus

pytestmark = pytest.mark.integration

BASE = "/api/v1/orders/"


def status_url(order):
    return f"{BASE}{order.order_number}/status/"


class TestListOrders:
    def test_lists_farmer_orders(self, auth_client, make_order):
        make_order(TrackingStatus.IN_TRANSIT)
        make_order(TrackingStatus.PAID)
        make_order(TrackingStatus.MATCHED, farmer_id=2)

        response = auth_client.get(BASE, {"farmer_id": 1, "status": "active"})

        assert response.status_code == 200
        data = response.json()
        assert [o["tracking_status"] for o in data["orders"]] == ["IN_TRANSIT"]
        assert data["orders"][0]["current_step"] == 5
        assert data["orders"][0]["total_steps"] == 7
        assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "has_more": False}

    @pytest.mark.parametrize("farmer_id", ["", "0", "-4", "abc"])
    def test_invalid_farmer_id(self, auth_client, farmer_id):
        response = auth_client.get(BASE, {"farmer_id": farmer_id})

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "INVALID_ARGUMENT"

    def test_active_count(self, auth_client, make_order):
        make_order(TrackingStatus.LISTED)
        make_order(TrackingStatus.DELIVERED)
        make_order(TrackingStatus.PAID)

        response = auth_client.get(f"{BASE}active-count/", {"farmer_id": 1})

        assert response.json() == {"farmer_id": 1, "active_count": 2}


class TestOrderDetails:
    def test_returns_timeline(self, auth_client, make_order):
        order = make_order(TrackingStatus.AT_DROP_POINT)

        response = auth_client.get(f"{BASE}{order.order_number}/", {"farmer_id": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["order_id"] == order.order_number
        assert len(data["status_history"]) == 4
        assert [e["active"] for e in data["status_history"]] == [False, False, False, True]
        assert data["buyer"] == {"business_type": "Restaurant", "city": "Bengaluru", "area": None}

    def test_foreign_order_is_forbidden(self, auth_client, make_order):
        order = make_order(farmer_id=2)

        response = auth_client.get(f"{BASE}{order.order_number}/", {"farmer_id": 1})

        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "PERMISSION_DENIED"

    def test_missing_order(self, auth_client):
        response = auth_client.get(f"{BASE}ORD-20260101-FFFFFF/", {"farmer_id": 1})

        assert response.status_code == 404
        error = response.json()["errors"][0]
        assert error["code"] == "NOT_FOUND"
        assert error["metadata"] == {"order_id": "ORD-20260101-FFFFFF"}


class TestTransition:
    def test_next_step_succeeds(self, auth_client, make_order):
        order = make_order(TrackingStatus.MATCHED)

        response = auth_client.post(
            status_url(order),
            {
                "new_status": "PICKUP_SCHEDULED",
                "actor": "dispatcher",
                "hauler": {"id": "H-7", "name": "Suresh", "phone": "9876543210"},
            },
            format="json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tracking_status"] == "PICKUP_SCHEDULED"
        assert data["hauler"]["name"] == "Suresh"
        assert data["status_history"][-1]["actor"] == "dispatcher"

    def test_skipping_a_stage_conflicts(self, auth_client, make_order):
        order = make_order(TrackingStatus.MATCHED)

        response = auth_client.post(
            status_url(order), {"new_status": "IN_TRANSIT", "actor": "x"}, format="json"
        )

        assert response.status_code == 409
        error = response.json()["errors"][0]
        assert error["code"] == "FAILED_PRECONDITION"
        assert error["metadata"]["current_status"] == "MATCHED"

    def test_unknown_status_is_invalid(self, auth_client, make_order):
        order = make_order()

        response = auth_client.post(
            status_url(order), {"new_status": "LOST", "actor": "x"}, format="json"
        )

        assert response.status_code == 400

    def test_paid_stamps_payment(self, auth_client, make_order):
        order = make_order(TrackingStatus.DELIVERED)

        response = auth_client.post(
            status_url(order),
            {"new_status": "PAID", "actor": "payments", "upi_transaction_id": "UPI123456789012"},
            format="json",
        )

        data = response.json()
        assert data["tracking_status"] == "PAID"
        assert data["paid_at"] is not None
        assert data["upi_transaction_id"] == "UPI123456789012"


class TestDelay:
    def test_records_delay_without_status_change(self, auth_client, make_order):
        order = make_order(TrackingStatus.IN_TRANSIT)

        response = auth_client.post(
            f"{BASE}{order.order_number}/delay/",
            {"delay_minutes": 45, "reason": "Highway closed"},
            format="json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["delay_minutes"] == 45
        assert data["delay_reason"] == "Highway closed"
        assert data["tracking_status"] == "IN_TRANSIT"

    def test_negative_delay_rejected(self, auth_client, make_order):
        order = make_order(TrackingStatus.IN_TRANSIT)

        response = auth_client.post(
            f"{BASE}{order.order_number}/delay/",
            {"delay_minutes": -5, "reason": "x"},
            format="json",
        )

        assert response.status_code == 400


class TestFormBodies:
    def test_multipart_transition(self, auth_client, make_order):
        order = make_order(TrackingStatus.MATCHED)

        response = auth_client.post(
            status_url(order),
            {"new_status": "PICKUP_SCHEDULED", "actor": "dispatcher"},
            format="multipart",
        )

        assert response.status_code == 200
        assert response.json()["tracking_status"] == "PICKUP_SCHEDULED"

    def test_multipart_delay(self, auth_client, make_order):
        order = make_order(TrackingStatus.IN_TRANSIT)

        response = auth_client.post(
            f"{BASE}{order.order_number}/delay/",
            {"delay_minutes": "30", "reason": "Rain"},
            format="multipart",
        )

        assert response.status_code == 200
        assert response.json()["delay_minutes"] == 30
