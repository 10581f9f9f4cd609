"""Order model with embedded tracking timeline.

Business rules implemented:
- ``tracking_status`` only changes through ``OrderTrackingService.transition``
  (forward-only, one step at a time).
- ``status_history`` is an append-only JSON list of timeline events; the
  last entry is the only one flagged ``active``.
- Listing, buyer, hauler and drop point data are denormalised snapshots.
- Money fields are ``DecimalField`` (never float).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import SoftDeleteModel
from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    TERMINAL_STATES,
    TOTAL_STEPS,
    TrackingStatus,
    get_step,
    is_valid_transition,
)


class Order(SoftDeleteModel):
    """Order aggregate root.

    ``order_number`` is the stable, caller-facing identifier auto-generated
    on first save (format: ``ORD-YYYYMMDD-XXXXXX``).  The UUIDv7 ``id`` is
    only used internally.
    """

    order_number: models.CharField = models.CharField(
        max_length=20, unique=True, editable=False
    )
    farmer_id: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    tracking_status: models.CharField = models.CharField(
        max_length=20,
        choices=TrackingStatus.choices,
        default=TrackingStatus.LISTED,
    )
    status_history: models.JSONField = models.JSONField(default=list, blank=True)

    # Listing snapshot
    listing_id: models.CharField = models.CharField(max_length=64, blank=True, default="")
    crop_type: models.CharField = models.CharField(max_length=100, blank=True, default="")
    quantity_kg: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    photo_url: models.URLField = models.URLField(blank=True, default="")
    quality_grade: models.CharField = models.CharField(max_length=2, blank=True, default="")

    # Buyer snapshot
    buyer_id: models.CharField = models.CharField(max_length=64, blank=True, default="")
    buyer_business_type: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )
    buyer_city: models.CharField = models.CharField(max_length=100, blank=True, default="")
    buyer_area: models.CharField = models.CharField(max_length=100, blank=True, default="")

    # Hauler
    hauler_id: models.CharField = models.CharField(max_length=64, blank=True, default="")
    hauler_name: models.CharField = models.CharField(max_length=150, blank=True, default="")
    hauler_phone: models.CharField = models.CharField(max_length=20, blank=True, default="")
    hauler_vehicle_type: models.CharField = models.CharField(
        max_length=50, blank=True, default=""
    )
    hauler_vehicle_number: models.CharField = models.CharField(
        max_length=30, blank=True, default=""
    )

    # Drop point
    drop_point_name: models.CharField = models.CharField(
        max_length=150, blank=True, default=""
    )
    drop_point_address: models.TextField = models.TextField(blank=True, default="")

    # Scheduling
    eta: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    delay_minutes: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    delay_reason: models.CharField = models.CharField(max_length=255, blank=True, default="")

    # Money
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    base_amount: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    quality_bonus: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    upi_transaction_id: models.CharField = models.CharField(
        max_length=64, blank=True, default=""
    )
    paid_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["farmer_id", "tracking_status"],
                name="orders_farmer_status_idx",
            ),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.tracking_status in TERMINAL_STATES

    @property
    def current_step(self) -> int:
        return get_step(self.tracking_status)

    @property
    def total_steps(self) -> int:
        return TOTAL_STEPS

    def can_transition_to(self, new_status: str) -> bool:
        return is_valid_transition(self.tracking_status, new_status)

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.tracking_status})"
