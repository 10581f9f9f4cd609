"""Unit tests for order notification handlers and the delivery task."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from modules.orders.events import OrderDelayUpdated, OrderStatusChanged
from modules.orders.handlers import OrderDelayUpdatedHandler, OrderStatusChangedHandler
from modules.orders.tasks import deliver_order_notification
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


def _status_event():
    return OrderStatusChanged(
        aggregate_id="ORD-1", farmer_id=4, previous_status="LISTED", new_status="MATCHED"
    )


def test_status_handler_enqueues_notification():
    event = _status_event()
    with patch("modules.orders.handlers.deliver_order_notification") as task:
        OrderStatusChangedHandler().handle(event)

    payload = task.delay.call_args.args[0]
    assert payload["aggregate_id"] == "ORD-1"
    assert payload["farmer_id"] == 4
    assert payload["previous_status"] == "LISTED"
    assert payload["new_status"] == "MATCHED"
    assert payload["event_name"] == "OrderStatusChanged"


def test_delay_handler_enqueues_notification():
    event = OrderDelayUpdated(
        aggregate_id="ORD-1", farmer_id=4, previous_status="IN_TRANSIT", delay_minutes=45
    )
    with patch("modules.orders.handlers.deliver_order_notification") as task:
        OrderDelayUpdatedHandler().handle(event)

    assert task.delay.call_args.args[0]["delay_minutes"] == 45


def test_delivery_task_accepts_json_payload():
    payload = _status_event().to_payload()

    assert json.loads(json.dumps(payload)) == payload
    assert deliver_order_notification(payload) == payload


def test_bus_dispatches_to_subscribed_handler():
    bus = InMemoryEventBus()
    handler = OrderStatusChangedHandler()
    bus.subscribe(OrderStatusChanged, handler)
    bus.subscribe(OrderStatusChanged, handler)

    with patch("modules.orders.handlers.deliver_order_notification") as task:
        bus.publish(_status_event())

    assert task.delay.call_count == 1


def test_bus_ignores_events_without_handlers():
    bus = InMemoryEventBus()
    with patch("modules.orders.handlers.deliver_order_notification") as task:
        bus.publish(_status_event())
    task.delay.assert_not_called()
