"""Unit tests for the match audit handler."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from modules.matches.events import MatchAccepted, MatchExpired, MatchRejected
from modules.matches.handlers import HANDLED_EVENTS, match_audit_handler
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "event",
    [
        MatchAccepted(aggregate_id="m-1", farmer_id=3, order_id="ORD-20260315-0A1B2C"),
        MatchRejected(aggregate_id="m-1", farmer_id=3, reason="SOLD_ELSEWHERE"),
        MatchExpired(aggregate_id="m-1", farmer_id=3),
    ],
)
def test_every_outcome_is_audited(event):
    bus = InMemoryEventBus()
    for event_class in HANDLED_EVENTS:
        bus.subscribe(event_class, match_audit_handler)

    with patch("modules.matches.handlers.logger") as logger:
        bus.publish(event)

    logger.info.assert_called_once()
    args, kwargs = logger.info.call_args
    assert args == ("match.audit",)
    assert kwargs["event_name"] == type(event).__name__
    assert kwargs["match_id"] == "m-1"
    assert kwargs["farmer_id"] == 3
