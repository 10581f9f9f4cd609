"""Django ORM implementation of the quality rating repository."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from modules.ratings.constants import MAX_STARS, MIN_STARS
from modules.ratings.models import QualityRating
from modules.ratings.repositories.interfaces import IRatingRepository

if TYPE_CHECKING:
    from modules.ratings.dtos import RatingFilterDTO

logger = structlog.get_logger(__name__)


class RatingDjangoRepository(IRatingRepository):
    """Concrete rating repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[QualityRating]:
        try:
            return QualityRating.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def find_by_farmer(self, filter: RatingFilterDTO) -> Tuple[List[QualityRating], int]:
        queryset = QualityRating.objects.filter(farmer_id=filter.farmer_id)
        if filter.crop_type:
            queryset = queryset.filter(crop_type=filter.crop_type)

        total = queryset.count()
        offset = (filter.page - 1) * filter.limit
        ratings = list(queryset.order_by("-rated_at")[offset : offset + filter.limit])
        return ratings, total

    def find_for_farmer(self, rating_id: str, farmer_id: int) -> Optional[QualityRating]:
        try:
            return QualityRating.objects.filter(id=rating_id, farmer_id=farmer_id).first()
        except (ValueError, ValidationError):
            return None

    def summary_totals(self, farmer_id: int) -> Dict[str, int]:
        stars = {
            f"star{value}": Count("id", filter=Q(rating=value))
            for value in range(MIN_STARS, MAX_STARS + 1)
        }
        return QualityRating.objects.filter(farmer_id=farmer_id).aggregate(
            count=Count("id"),
            stars_total=Sum("rating", default=0),
            unseen=Count("id", filter=Q(seen_by_farmer=False)),
            **stars,
        )

    def monthly_totals(self, farmer_id: int, since: datetime) -> Dict[str, Tuple[int, int]]:
        rows = (
            QualityRating.objects.filter(farmer_id=farmer_id, rated_at__gte=since)
            .annotate(month=TruncMonth("rated_at"))
            .values("month")
            .annotate(stars_total=Sum("rating"), count=Count("id"))
            .order_by("month")
        )
        return {
            f"{timezone.localtime(row['month']):%Y-%m}": (row["stars_total"], row["count"])
            for row in rows
        }

    def five_star_counts(self, farmer_id: int) -> List[Tuple[str, int]]:
        rows = (
            QualityRating.objects.filter(farmer_id=farmer_id, rating=MAX_STARS)
            .values("crop_type")
            .annotate(count=Count("id"))
            .order_by("-count", "crop_type")
        )
        return [(row["crop_type"], row["count"]) for row in rows]

    def mark_seen(self, rating_id: str, farmer_id: int, at: datetime) -> bool:
        rating = self.find_for_farmer(rating_id, farmer_id)
        if rating is None:
            return False
        updated = QualityRating.objects.filter(
            id=rating.id, seen_by_farmer=False
        ).update(seen_by_farmer=True, seen_at=at, updated_at=timezone.now())
        if updated:
            logger.info("rating.marked_seen", rating_id=rating_id, farmer_id=farmer_id)
        return True

    def count_unseen(self, farmer_id: int) -> int:
        return QualityRating.objects.filter(farmer_id=farmer_id, seen_by_farmer=False).count()
