"""Domain events for the match lifecycle bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class MatchAccepted(DomainEvent):
    farmer_id: int = 0
    order_id: str = ""
    is_partial: bool = False


@dataclass(frozen=True)
class MatchRejected(DomainEvent):
    farmer_id: int = 0
    reason: str = ""


@dataclass(frozen=True)
class MatchExpired(DomainEvent):
    farmer_id: int = 0
