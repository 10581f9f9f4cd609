"""Integration tests for OrderDjangoRepository against the test database."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from modules.orders.constants import TrackingStatus
from modules.orders.dtos import OrderListFilterDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.transactions.dtos import TransactionFilterDTO

pytestmark = pytest.mark.integration

MONTH_START = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


def set_created_at(order, when):
    Order.objects.filter(pk=order.pk).update(created_at=when)


class TestReads:
    def test_get_by_order_number(self, repo, make_order):
        order = make_order()
        assert repo.get_by_id(order.order_number).pk == order.pk

    def test_soft_deleted_is_invisible(self, repo, make_order):
        order = make_order()
        order.delete()

        assert repo.get_by_id(order.order_number) is None
        assert repo.count_active(1) == 0

    def test_find_by_farmer_filters_and_pages(self, repo, make_order):
        for status in (TrackingStatus.MATCHED, TrackingStatus.IN_TRANSIT, TrackingStatus.PAID):
            make_order(status)
        make_order(TrackingStatus.MATCHED, farmer_id=2)

        active, active_total = repo.find_by_farmer(OrderListFilterDTO(farmer_id=1, status="active"))
        completed, _ = repo.find_by_farmer(OrderListFilterDTO(farmer_id=1, status="completed"))
        page, total = repo.find_by_farmer(OrderListFilterDTO(farmer_id=1, page=2, limit=2))

        assert active_total == 2
        assert {o.tracking_status for o in active} == {"MATCHED", "IN_TRANSIT"}
        assert [o.tracking_status for o in completed] == ["PAID"]
        assert total == 3
        assert len(page) == 1

    def test_count_active_excludes_paid_and_other_farmers(self, repo, make_order):
        make_order(TrackingStatus.LISTED)
        make_order(TrackingStatus.DELIVERED)
        make_order(TrackingStatus.PAID)
        make_order(TrackingStatus.LISTED, farmer_id=9)

        assert repo.count_active(1) == 2


class TestConditionalUpdate:
    def test_applies_when_status_matches(self, repo, make_order):
        order = make_order(TrackingStatus.LISTED)

        updated = repo.update_status(
            order.order_number,
            expected_status=TrackingStatus.LISTED,
            new_status=TrackingStatus.MATCHED,
            status_history=[],
            fields={"hauler_id": "H-1"},
        )

        assert updated.tracking_status == TrackingStatus.MATCHED
        assert updated.hauler_id == "H-1"

    def test_misses_when_status_moved_on(self, repo, make_order):
        order = make_order(TrackingStatus.MATCHED)
        history = list(order.status_history)

        updated = repo.update_status(
            order.order_number,
            expected_status=TrackingStatus.LISTED,
            new_status=TrackingStatus.MATCHED,
            status_history=[],
        )

        assert updated is None
        order.refresh_from_db()
        assert order.tracking_status == TrackingStatus.MATCHED
        assert order.status_history == history

    def test_update_delay_missing_order(self, repo):
        assert repo.update_delay("ORD-NOPE", 30, "Rain") is None


class TestAggregateEarnings:
    def test_buckets(self, repo, make_order):
        make_order(TrackingStatus.PAID, total_amount=Decimal("1800.00"), paid_at=MONTH_START + timedelta(days=9))
        make_order(TrackingStatus.PAID, total_amount=Decimal("1000.00"), paid_at=MONTH_START - timedelta(days=20))
        make_order(TrackingStatus.DELIVERED, total_amount=Decimal("500.00"))
        make_order(TrackingStatus.IN_TRANSIT, total_amount=Decimal("900.00"))
        make_order(TrackingStatus.PAID, farmer_id=2, total_amount=Decimal("999.00"), paid_at=MONTH_START)
        make_order(TrackingStatus.PAID, total_amount=Decimal("5000.00"), paid_at=MONTH_START).delete()

        totals = repo.aggregate_earnings(1, MONTH_START)

        assert totals["total"] == Decimal("2800.00")
        assert totals["total_count"] == 2
        assert totals["this_month"] == Decimal("1800.00")
        assert totals["this_month_count"] == 1
        assert totals["pending"] == Decimal("500.00")
        assert totals["pending_count"] == 1

    def test_no_orders_is_zero(self, repo):
        totals = repo.aggregate_earnings(1, MONTH_START)

        assert totals["total"] == Decimal("0")
        assert totals["pending_count"] == 0


class TestQueryTransactions:
    @pytest.fixture()
    def history(self, make_order):
        tomato = make_order(TrackingStatus.PAID, crop_type="Tomato", total_amount=Decimal("1800.00"))
        onion = make_order(TrackingStatus.DELIVERED, crop_type="Red Onion", total_amount=Decimal("700.00"))
        old = make_order(TrackingStatus.PAID, crop_type="Potato", total_amount=Decimal("300.00"))
        make_order(TrackingStatus.IN_TRANSIT, crop_type="Okra")
        set_created_at(tomato, MONTH_START + timedelta(days=2))
        set_created_at(onion, MONTH_START + timedelta(days=5))
        set_created_at(old, MONTH_START - timedelta(days=100))
        return tomato, onion, old

    def test_status_filter(self, repo, history):
        completed, total = repo.query_transactions(TransactionFilterDTO(farmer_id=1, status="completed"))
        pending, _ = repo.query_transactions(TransactionFilterDTO(farmer_id=1, status="pending"))

        assert total == 2
        assert {o.crop_type for o in completed} == {"Tomato", "Potato"}
        assert [o.crop_type for o in pending] == ["Red Onion"]

    def test_date_bounds_and_crop(self, repo, history):
        recent, total = repo.query_transactions(
            TransactionFilterDTO(farmer_id=1, from_date=MONTH_START, to_date=MONTH_START + timedelta(days=30))
        )
        onions, _ = repo.query_transactions(TransactionFilterDTO(farmer_id=1, crop_type="onion"))

        assert total == 2
        assert [o.crop_type for o in recent] == ["Red Onion", "Tomato"]
        assert [o.crop_type for o in onions] == ["Red Onion"]

    def test_sort_by_amount_ascending(self, repo, history):
        orders, _ = repo.query_transactions(
            TransactionFilterDTO(farmer_id=1, sort_by="amount", sort_order="asc")
        )

        assert [o.total_amount for o in orders] == [
            Decimal("300.00"),
            Decimal("700.00"),
            Decimal("1800.00"),
        ]

    def test_detail_scoped_to_farmer_and_status(self, repo, make_order):
        paid = make_order(TrackingStatus.PAID)
        listed = make_order(TrackingStatus.LISTED)

        assert repo.find_transaction_detail(paid.order_number, 1).pk == paid.pk
        assert repo.find_transaction_detail(paid.order_number, 2) is None
        assert repo.find_transaction_detail(listed.order_number, 1) is None
