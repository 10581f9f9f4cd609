"""Event handlers for match lifecycle events."""

from __future__ import annotations

from typing import Union

import structlog

from modules.matches.events import MatchAccepted, MatchExpired, MatchRejected
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)

MatchOutcome = Union[MatchAccepted, MatchRejected, MatchExpired]

HANDLED_EVENTS = (MatchAccepted, MatchRejected, MatchExpired)


class MatchAuditHandler(IEventHandler[MatchOutcome]):
    """Writes one structured audit line per terminal match transition."""

    def handle(self, event: MatchOutcome) -> None:
        logger.info(
            "match.audit",
            event_name=event.event_name,
            match_id=event.aggregate_id,
            farmer_id=event.farmer_id,
            occurred_on=event.occurred_on.isoformat(),
        )


match_audit_handler = MatchAuditHandler()
