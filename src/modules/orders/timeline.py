"""Order timeline value type and pure helpers.

The timeline is stored as a JSON list on ``Order.status_history``.  Every
helper here returns a new list; persisted events are never edited except
for clearing ``active`` on the previously current entry.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modules.orders.constants import STATUS_LABELS, get_step

logger = structlog.get_logger(__name__)


class TimelineEvent(BaseModel):
    """One immutable visit of an order to a tracking stage."""

    model_config = ConfigDict(frozen=True)

    step: int = Field(ge=1, le=7)
    status: str
    label: str
    completed: bool
    active: bool
    timestamp: Optional[datetime] = None
    actor: Optional[str] = None
    note: Optional[str] = None


def build_event(
    status: str,
    timestamp: datetime,
    actor: Optional[str] = None,
    note: Optional[str] = None,
) -> TimelineEvent:
    """The event recorded when an order enters *status*."""
    return TimelineEvent(
        step=get_step(status),
        status=status,
        label=STATUS_LABELS[status],
        completed=True,
        active=True,
        timestamp=timestamp,
        actor=actor,
        note=note,
    )


def initial_timeline(
    status: str,
    timestamp: datetime,
    actor: Optional[str] = "system",
    note: Optional[str] = None,
) -> List[TimelineEvent]:
    return [build_event(status, timestamp, actor, note)]


def append_event(
    history: List[TimelineEvent],
    status: str,
    timestamp: datetime,
    actor: Optional[str] = None,
    note: Optional[str] = None,
) -> List[TimelineEvent]:
    """Return *history* with every entry deactivated plus the new active one."""
    previous = [event.model_copy(update={"active": False}) for event in history]
    previous.append(build_event(status, timestamp, actor, note))
    return previous


def parse_timeline(raw: Any) -> List[TimelineEvent]:
    """Decode a stored ``status_history`` value.

    Accepts a list of dicts or a JSON string.  Anything unreadable yields
    an empty timeline; malformed entries are dropped and logged.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("order.timeline_unreadable")
            return []
    if not isinstance(raw, list):
        return []

    events: List[TimelineEvent] = []
    for entry in raw:
        if isinstance(entry, TimelineEvent):
            events.append(entry)
            continue
        try:
            events.append(TimelineEvent.model_validate(entry))
        except ValidationError:
            logger.warning("order.timeline_entry_invalid", entry=entry)
    return events


def serialize_timeline(events: List[TimelineEvent]) -> List[dict]:
    """JSON-ready representation for ``Order.status_history``."""
    return [event.model_dump(mode="json") for event in events]
