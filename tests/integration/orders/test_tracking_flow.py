"""End-to-end tracking through the service with the Django repository."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from modules.orders.constants import TrackingStatus
from modules.orders.dtos import HaulerInfoDTO, UpdateOrderStatusDTO
from modules.orders.exceptions import AlreadyInStatus, InvalidTransition, OrderNotFound
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderTrackingService
from modules.orders.timeline import parse_timeline

pytestmark = pytest.mark.integration

WALK = [
    TrackingStatus.MATCHED,
    TrackingStatus.PICKUP_SCHEDULED,
    TrackingStatus.AT_DROP_POINT,
    TrackingStatus.IN_TRANSIT,
    TrackingStatus.DELIVERED,
    TrackingStatus.PAID,
]


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def bus():
    return MagicMock()


@pytest.fixture()
def service(repo, bus):
    return OrderTrackingService(order_repository=repo, event_bus=bus)


def advance(service, order_number, status, **extra):
    return service.transition(
        UpdateOrderStatusDTO(order_id=order_number, new_status=status, actor="ops", **extra)
    )


def test_full_walk_builds_timeline(service, make_order, bus):
    order = make_order(TrackingStatus.LISTED, status_history=[])

    for status in WALK:
        extra = {}
        if status == TrackingStatus.PICKUP_SCHEDULED:
            extra["hauler"] = HaulerInfoDTO(id="H-1", name="Ravi", phone="9876543210")
        if status == TrackingStatus.PAID:
            extra["upi_transaction_id"] = "UPI123456789012"
        order = advance(service, order.order_number, status, **extra)

    timeline = parse_timeline(order.status_history)
    assert [event.status for event in timeline] == list(WALK)
    assert [event.step for event in timeline] == [2, 3, 4, 5, 6, 7]
    assert [event.active for event in timeline] == [False] * 5 + [True]
    assert order.tracking_status == TrackingStatus.PAID
    assert order.hauler_name == "Ravi"
    assert order.paid_at is not None
    assert bus.publish.call_count == len(WALK)


def test_paid_is_terminal(service, make_order):
    order = make_order(TrackingStatus.PAID)

    with pytest.raises(AlreadyInStatus):
        advance(service, order.order_number, TrackingStatus.PAID)
    with pytest.raises(InvalidTransition):
        advance(service, order.order_number, TrackingStatus.DELIVERED)


def test_rejected_transition_leaves_no_trace(service, make_order):
    order = make_order(TrackingStatus.MATCHED)
    before = list(order.status_history)

    with pytest.raises(InvalidTransition):
        advance(service, order.order_number, TrackingStatus.IN_TRANSIT)

    order.refresh_from_db()
    assert order.tracking_status == TrackingStatus.MATCHED
    assert order.status_history == before


def test_soft_deleted_order_not_found(service, make_order):
    order = make_order(TrackingStatus.MATCHED)
    order.delete()

    with pytest.raises(OrderNotFound):
        advance(service, order.order_number, TrackingStatus.PICKUP_SCHEDULED)


def test_concurrent_duplicate_transition_has_one_winner(service, repo, make_order):
    order = make_order(TrackingStatus.MATCHED)
    stale = repo.get_by_id(order.order_number)

    advance(service, order.order_number, TrackingStatus.PICKUP_SCHEDULED)

    # The loser read the order before the winner committed.
    real_get = repo.get_by_id
    with patch.object(repo, "get_by_id", side_effect=[stale, real_get(order.order_number)]):
        with pytest.raises(AlreadyInStatus):
            advance(service, order.order_number, TrackingStatus.PICKUP_SCHEDULED)

    order.refresh_from_db()
    assert order.tracking_status == TrackingStatus.PICKUP_SCHEDULED
    assert len(order.status_history) == 3


def test_notification_task_runs_through_process_bus(make_order):
    from modules.core.container import build_order_service

    order = make_order(TrackingStatus.MATCHED)

    with patch("modules.orders.handlers.deliver_order_notification") as task:
        advance(build_order_service(), order.order_number, TrackingStatus.PICKUP_SCHEDULED)

    payload = task.delay.call_args.args[0]
    assert payload["aggregate_id"] == order.order_number
    assert payload["new_status"] == TrackingStatus.PICKUP_SCHEDULED
