"""Integration tests for the quality rating endpoints."""

from datetime import timedelta

import pytest
from django.utils import timezone

from modules.orders.constants import TrackingStatus

pytestmark = pytest.mark.integration

BASE = "/api/v1/ratings/"


class TestList:
    def test_page_with_summary(self, auth_client, make_rating):
        make_rating(rating=5, crop_type="Onion")
        make_rating(rating=4, crop_type="Tomato")
        make_rating(farmer_id=2, rating=1)

        response = auth_client.get(BASE, {"farmer_id": 1, "limit": 1})

        assert response.status_code == 200
        data = response.json()
        assert len(data["ratings"]) == 1
        assert data["pagination"] == {"page": 1, "limit": 1, "total": 2, "has_more": True}
        summary = data["summary"]
        assert summary["overall_score"] == 4.5
        assert summary["total_orders"] == 2
        assert summary["best_crop_type"] == "Onion"
        assert summary["unseen_count"] == 2
        assert len(summary["monthly_trend"]) == 6
        assert summary["monthly_trend"][-1]["count"] == 2

    def test_crop_filter(self, auth_client, make_rating):
        make_rating(crop_type="Onion")
        make_rating(crop_type="Tomato")

        response = auth_client.get(BASE, {"farmer_id": 1, "crop_type": "Tomato"})

        assert [r["crop_type"] for r in response.json()["ratings"]] == ["Tomato"]

    def test_invalid_farmer(self, auth_client):
        response = auth_client.get(BASE, {"farmer_id": 0})

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "INVALID_ARGUMENT"


class TestDetails:
    def test_recommendations_and_delivery(self, auth_client, make_rating, make_order):
        order = make_order(TrackingStatus.DELIVERED)
        rating = make_rating(
            order_id=order.order_number,
            rating=2,
            quality_issues=["RIPENESS_ISSUES"],
            rated_at=timezone.now() - timedelta(hours=1),
        )

        response = auth_client.get(f"{BASE}{rating.id}/", {"farmer_id": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["recommendations"] == [
            {
                "issue": "RIPENESS_ISSUES",
                "title": "Ripeness issues",
                "recommendation": (
                    "Harvest at optimal ripeness. Check color and firmness before picking."
                ),
                "tutorial_id": "harvest-timing",
            }
        ]
        assert data["delivered_at"] is not None

    def test_foreign_rating_is_not_found(self, auth_client, make_rating):
        rating = make_rating(farmer_id=2)

        response = auth_client.get(f"{BASE}{rating.id}/", {"farmer_id": 1})

        assert response.status_code == 404
        assert response.json()["errors"][0]["metadata"] == {"rating_id": str(rating.id)}


class TestSeen:
    def test_mark_seen_clears_badge(self, auth_client, make_rating):
        rating = make_rating()
        make_rating()

        response = auth_client.post(f"{BASE}{rating.id}/seen/", {"farmer_id": 1}, format="json")

        assert response.status_code == 200
        assert response.json() == {"rating_id": str(rating.id), "success": True}
        count = auth_client.get(f"{BASE}unseen-count/", {"farmer_id": 1}).json()
        assert count == {"farmer_id": 1, "unseen_count": 1}

    def test_mark_seen_unknown(self, auth_client):
        response = auth_client.post(
            f"{BASE}0190d7a0-0000-7000-8000-000000000000/seen/", {"farmer_id": 1}, format="json"
        )

        assert response.status_code == 404


def test_summary_endpoint(auth_client, make_rating):
    make_rating(rating=3)

    response = auth_client.get(f"{BASE}summary/", {"farmer_id": 1})

    assert response.status_code == 200
    assert response.json()["overall_score"] == 3.0


def test_requires_authentication(api_client):
    assert api_client.get(BASE, {"farmer_id": 1}).status_code == 401
