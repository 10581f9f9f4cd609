"""Soft delete behaviour of SoftDeleteModel (exercised through Order)."""

import pytest

from modules.orders.models import Order

pytestmark = pytest.mark.unit


def test_delete_sets_tombstone(make_order):
    order = make_order()

    order.delete()

    order.refresh_from_db()
    assert order.is_deleted
    assert Order.objects.filter(pk=order.pk).exists()
    assert not Order.objects.alive().filter(pk=order.pk).exists()


def test_second_delete_is_noop(make_order):
    order = make_order()
    order.delete()

    assert order.delete() == (0, {})


def test_bulk_delete_only_counts_alive(make_order):
    make_order()
    make_order().delete()

    count, _ = Order.objects.all().delete()

    assert count == 1
    assert Order.objects.alive().count() == 0


def test_order_number_format(make_order):
    order = make_order()

    assert order.order_number.startswith("ORD-")
    assert len(order.order_number) == len("ORD-YYYYMMDD-XXXXXX")
