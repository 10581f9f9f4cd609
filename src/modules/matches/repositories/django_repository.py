"""Django ORM implementation of the Match repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.matches.constants import MatchStatus
from modules.matches.models import Match
from modules.matches.repositories.interfaces import IMatchRepository

logger = structlog.get_logger(__name__)


class MatchDjangoRepository(IMatchRepository):
    """Concrete Match repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Match]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return Match.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def create(self, data: Dict[str, Any]) -> Match:
        match = Match.objects.create(**data)
        logger.info(
            "match.created",
            match_id=str(match.id),
            farmer_id=match.farmer_id,
            expires_at=match.expires_at.isoformat(),
        )
        return match

    def find_pending_by_farmer(
        self, farmer_id: int, now: datetime, limit: int, offset: int = 0
    ) -> List[Match]:
        queryset = Match.objects.filter(
            farmer_id=farmer_id,
            status=MatchStatus.PENDING_ACCEPTANCE,
            expires_at__gt=now,
        ).order_by("expires_at")
        return list(queryset[offset : offset + limit])

    def update_status(
        self,
        match_id: str,
        new_status: str,
        expected_statuses: Iterable[str],
        **details: Any,
    ) -> Optional[Match]:
        with transaction.atomic():
            updated = Match.objects.filter(
                id=match_id, status__in=list(expected_statuses)
            ).update(status=new_status, updated_at=timezone.now(), **details)
            if not updated:
                return None
            return Match.objects.get(id=match_id)

    def attach_order(self, match_id: str, order_id: str) -> Match:
        Match.objects.filter(id=match_id).update(order_id=order_id, updated_at=timezone.now())
        return Match.objects.get(id=match_id)

    def find_expired_pending(self, now: datetime, limit: int) -> List[Match]:
        queryset = Match.objects.filter(
            status=MatchStatus.PENDING_ACCEPTANCE,
            expires_at__lte=now,
        ).order_by("expires_at")
        return list(queryset[:limit])
