from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.orders.constants import STATUS_STEPS, TrackingStatus
from modules.orders.timeline import append_event, initial_timeline, serialize_timeline

FIXED_NOW = datetime(2026, 3, 15, 10, 30, tzinfo=dt_timezone.utc)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _reset_throttles():
    """Throttle counters live in the cache; start every test from zero."""
    from django.core.cache import cache

    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(username="gateway", password="testpass123")
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def fixed_now():
    return FIXED_NOW


def build_history(status, at=FIXED_NOW):
    """Timeline of an order that walked from LISTED up to *status*."""
    statuses = [s for s in TrackingStatus.values if STATUS_STEPS[s] <= STATUS_STEPS[status]]
    history = initial_timeline(statuses[0], at)
    for next_status in statuses[1:]:
        history = append_event(history, next_status, at, actor="system")
    return serialize_timeline(history)


@pytest.fixture()
def make_order():
    """Factory persisting an order at a given tracking status."""

    def _make(status=TrackingStatus.LISTED, farmer_id=1, **fields):
        from modules.orders.models import Order

        defaults = {
            "farmer_id": farmer_id,
            "tracking_status": status,
            "status_history": build_history(status),
            "listing_id": "LST-001",
            "crop_type": "Tomato",
            "quantity_kg": Decimal("50.00"),
            "buyer_id": "BUY-001",
            "buyer_business_type": "Restaurant",
            "buyer_city": "Bengaluru",
            "total_amount": Decimal("1750.00"),
        }
        defaults.update(fields)
        order = Order(**defaults)
        order.save()
        return order

    return _make


@pytest.fixture()
def make_match():
    """Factory persisting a match; ``expires_in`` is relative to the real clock."""

    def _make(farmer_id=1, status="PENDING_ACCEPTANCE", expires_in=timedelta(hours=24), **fields):
        from django.utils import timezone

        from modules.matches.models import Match

        defaults = {
            "listing_id": "LST-001",
            "farmer_id": farmer_id,
            "crop_type": "Tomato",
            "buyer_id": "BUY-001",
            "buyer_business_type": "Hotel",
            "buyer_city": "Mysuru",
            "quantity_matched": Decimal("50.00"),
            "price_per_kg": Decimal("35.00"),
            "total_amount": Decimal("1750.00"),
            "status": status,
            "expires_at": timezone.now() + expires_in,
        }
        defaults.update(fields)
        return Match.objects.create(**defaults)

    return _make


@pytest.fixture()
def make_rating():
    """Factory persisting a quality rating."""

    def _make(farmer_id=1, rating=4, **fields):
        from django.utils import timezone

        from modules.ratings.models import QualityRating

        defaults = {
            "order_id": "ORD-20260301-ABC123",
            "farmer_id": farmer_id,
            "crop_type": "Tomato",
            "quantity_kg": Decimal("40.00"),
            "rating": rating,
            "quality_issues": [],
            "rated_at": timezone.now(),
        }
        defaults.update(fields)
        return QualityRating.objects.create(**defaults)

    return _make
