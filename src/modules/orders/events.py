"""Domain events for the order tracking bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised after a tracking status transition is persisted."""

    farmer_id: int = 0
    previous_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class OrderDelayUpdated(DomainEvent):
    """Raised after delay metadata is updated (status unchanged)."""

    farmer_id: int = 0
    previous_status: str = ""
    delay_minutes: int = 0
