"""Match lifecycle against the database: acceptance, expiry and the sweep task."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from modules.core.container import build_match_service
from modules.matches.constants import MatchStatus
from modules.matches.dtos import AcceptMatchDTO
from modules.matches.exceptions import MatchExpired
from modules.matches.repositories import DjangoOrderGateway, MatchDjangoRepository
from modules.matches.services import MatchService
from modules.matches.tasks import expire_pending_matches
from modules.orders.constants import TrackingStatus
from modules.orders.models import Order
from modules.orders.timeline import parse_timeline

pytestmark = pytest.mark.integration


@pytest.fixture()
def service():
    return build_match_service()


def test_accept_creates_matched_order(service, make_match):
    match = make_match()

    accepted = service.accept(AcceptMatchDTO(match_id=str(match.id)))

    order = Order.objects.get(order_number=accepted.order_id)
    assert accepted.status == MatchStatus.ACCEPTED
    assert order.tracking_status == TrackingStatus.MATCHED
    assert order.farmer_id == match.farmer_id
    assert order.total_amount == match.total_amount
    assert order.quantity_kg == match.quantity_matched
    assert order.buyer_city == "Mysuru"
    timeline = parse_timeline(order.status_history)
    assert len(timeline) == 1
    assert timeline[0].active is True
    assert timeline[0].step == 2


def test_order_creation_failure_rolls_back_claim(make_match):
    match = make_match()
    gateway = MagicMock(spec=DjangoOrderGateway)
    gateway.create_order_for_match.side_effect = RuntimeError("order store unavailable")
    service = MatchService(MatchDjangoRepository(), gateway, MagicMock())

    with pytest.raises(RuntimeError):
        service.accept(AcceptMatchDTO(match_id=str(match.id)))

    match.refresh_from_db()
    assert match.status == MatchStatus.PENDING_ACCEPTANCE
    assert match.order_id is None


def test_lazy_expiry_persists(service, make_match):
    match = make_match(expires_in=-timedelta(seconds=5))

    with pytest.raises(MatchExpired):
        service.accept(AcceptMatchDTO(match_id=str(match.id)))

    match.refresh_from_db()
    assert match.status == MatchStatus.EXPIRED
    assert not Order.objects.exists()


def test_sweep_task_expires_overdue_matches(make_match):
    overdue = [make_match(expires_in=-timedelta(minutes=m)) for m in (1, 2)]
    fresh = make_match()

    assert expire_pending_matches() == 2
    assert expire_pending_matches() == 0

    for match in overdue:
        match.refresh_from_db()
        assert match.status == MatchStatus.EXPIRED
    fresh.refresh_from_db()
    assert fresh.status == MatchStatus.PENDING_ACCEPTANCE


def test_sweep_batch_size_from_settings(settings, make_match):
    settings.MATCH_EXPIRY_BATCH_SIZE = 1
    for minutes in (1, 2, 3):
        make_match(expires_in=-timedelta(minutes=minutes))

    assert build_match_service().expire_sweep() == 1
    assert build_match_service().expire_sweep() == 1
