"""Domain events primitives for the modular monolith."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable).

    ``aggregate_id`` is a string so both order numbers and match UUIDs fit.
    """

    aggregate_id: str
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe dict representation (used as a Celery task argument)."""
        data = asdict(self)
        data["event_id"] = str(self.event_id)
        data["occurred_on"] = self.occurred_on.isoformat()
        return data
