"""Match model: a buyer offer for a farmer's listing.

Business rules implemented:
- ``status`` leaves PENDING_ACCEPTANCE exactly once; every write that
  changes it is a conditional update (see ``MatchDjangoRepository``).
- ``total_amount`` is fixed at creation (quantity x price per kg).
- ``order_id`` is only set on acceptance.
- Matches are never deleted.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.matches.constants import TERMINAL_STATUSES, MatchStatus


class Match(BaseModel):
    listing_id: models.CharField = models.CharField(max_length=64)
    farmer_id: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    crop_type: models.CharField = models.CharField(max_length=100, blank=True, default="")

    # Buyer summary
    buyer_id: models.CharField = models.CharField(max_length=64)
    buyer_business_type: models.CharField = models.CharField(max_length=100)
    buyer_city: models.CharField = models.CharField(max_length=100)
    buyer_area: models.CharField = models.CharField(max_length=100, blank=True, default="")
    delivery_date: models.CharField = models.CharField(max_length=32, blank=True, default="")

    # Terms
    quantity_matched: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    price_per_kg: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    total_amount: models.DecimalField = models.DecimalField(max_digits=12, decimal_places=2)

    # Lifecycle
    status: models.CharField = models.CharField(
        max_length=20,
        choices=MatchStatus.choices,
        default=MatchStatus.PENDING_ACCEPTANCE,
    )
    rejection_reason: models.CharField = models.CharField(max_length=255, blank=True, default="")
    expires_at: models.DateTimeField = models.DateTimeField()
    accepted_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    rejected_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    order_id: models.CharField = models.CharField(max_length=20, null=True, blank=True)

    class Meta:
        db_table = "matches"
        ordering = ["expires_at"]
        indexes = [
            models.Index(
                fields=["farmer_id", "status", "expires_at"],
                name="matches_farmer_pending_idx",
            ),
            models.Index(fields=["status", "expires_at"], name="matches_expiry_idx"),
        ]

    @property
    def is_pending(self) -> bool:
        return self.status == MatchStatus.PENDING_ACCEPTANCE

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """``True`` once ``expires_at`` has passed (strictly)."""
        return (now or timezone.now()) > self.expires_at

    def __str__(self) -> str:
        return f"Match {self.id} ({self.status})"
