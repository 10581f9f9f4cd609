"""Buyer quality rating of a delivered order.

Business rules implemented:
- ``rating`` is a whole number of stars between 1 and 5.
- ``quality_issues`` is a JSON list of ``QualityIssue`` codes.
- ``seen_by_farmer`` only ever flips from ``False`` to ``True``;
  ``seen_at`` records when.
- Ratings are written by the buyer side and are read-only here apart from
  the seen flag.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.ratings.constants import MAX_STARS, MIN_STARS


class QualityRating(BaseModel):
    order_id: models.CharField = models.CharField(max_length=20)
    farmer_id: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    crop_type: models.CharField = models.CharField(max_length=100)
    quantity_kg: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    rating: models.PositiveSmallIntegerField = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_STARS), MaxValueValidator(MAX_STARS)],
    )
    comment: models.TextField = models.TextField(blank=True, default="")
    quality_issues: models.JSONField = models.JSONField(default=list, blank=True)
    rated_at: models.DateTimeField = models.DateTimeField(default=timezone.now)

    seen_by_farmer: models.BooleanField = models.BooleanField(default=False)
    seen_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    ai_graded_photo_url: models.URLField = models.URLField(blank=True, default="")
    buyer_photo_url: models.URLField = models.URLField(blank=True, default="")

    class Meta:
        db_table = "quality_ratings"
        ordering = ["-rated_at"]
        indexes = [
            models.Index(fields=["farmer_id", "-rated_at"], name="ratings_farmer_recent_idx"),
            models.Index(fields=["farmer_id", "seen_by_farmer"], name="ratings_farmer_unseen_idx"),
        ]

    def __str__(self) -> str:
        return f"Rating {self.id} ({self.rating}*, {self.crop_type})"
