"""Quality rating service layer.

Business rules enforced:
- Every operation is scoped to one farmer; a rating of another farmer is
  reported as not found.
- The overall score is the mean star value rounded half-up to one
  decimal, ``0.0`` without ratings.
- The monthly trend always lists the last six local calendar months,
  oldest first, with empty months reported as zero.
- The best crop is the crop with the most five-star ratings.
- Marking a rating seen is idempotent.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog
from django.utils import timezone

from modules.core.validation import validate_farmer_id
from modules.orders.constants import TrackingStatus
from modules.orders.dtos import PaginationDTO
from modules.orders.timeline import parse_timeline
from modules.ratings.constants import RECOMMENDATIONS, QualityIssue
from modules.ratings.dtos import (
    PaginatedRatingsDTO,
    RatingDetailsDTO,
    RatingListItemDTO,
    RatingSummaryDTO,
    RecommendationDTO,
    StarBreakdownDTO,
    TrendItemDTO,
)
from modules.ratings.exceptions import RatingNotFound
from modules.ratings.scoring import average_stars, crop_icon, known_issues, trend_window

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.ratings.dtos import RatingFilterDTO
    from modules.ratings.repositories.interfaces import IRatingRepository

logger = structlog.get_logger(__name__)


class RatingService:
    def __init__(
        self,
        rating_repository: IRatingRepository,
        order_repository: IOrderRepository,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._rating_repo = rating_repository
        self._order_repo = order_repository
        self._clock = clock

    def ratings(self, filter: RatingFilterDTO) -> PaginatedRatingsDTO:
        validate_farmer_id(filter.farmer_id)
        ratings, total = self._rating_repo.find_by_farmer(filter)
        logger.info(
            "rating.list_retrieved",
            farmer_id=filter.farmer_id,
            crop_type=filter.crop_type,
            count=len(ratings),
            total=total,
        )
        return PaginatedRatingsDTO(
            ratings=[RatingListItemDTO.from_entity(rating) for rating in ratings],
            pagination=PaginationDTO(
                page=filter.page,
                limit=filter.limit,
                total=total,
                has_more=filter.page * filter.limit < total,
            ),
        )

    def summary(self, farmer_id: Any) -> RatingSummaryDTO:
        farmer_id = validate_farmer_id(farmer_id)
        totals = self._rating_repo.summary_totals(farmer_id)

        since, months = trend_window(self._clock())
        monthly = self._rating_repo.monthly_totals(farmer_id, since)
        trend = []
        for month in months:
            stars_total, count = monthly.get(month, (0, 0))
            trend.append(
                TrendItemDTO(month=month, avg_rating=average_stars(stars_total, count), count=count)
            )

        five_star = self._rating_repo.five_star_counts(farmer_id)
        summary = RatingSummaryDTO(
            farmer_id=farmer_id,
            overall_score=average_stars(totals["stars_total"], totals["count"]),
            total_orders=totals["count"],
            star_breakdown=StarBreakdownDTO(
                **{key: totals[key] for key in ("star5", "star4", "star3", "star2", "star1")}
            ),
            monthly_trend=trend,
            best_crop_type=five_star[0][0] if five_star else None,
            unseen_count=totals["unseen"],
        )
        logger.info(
            "rating.summary_retrieved",
            farmer_id=farmer_id,
            overall_score=summary.overall_score,
            total_orders=summary.total_orders,
        )
        return summary

    def rating_details(self, rating_id: str, farmer_id: Any) -> RatingDetailsDTO:
        """Full view of one rating with improvement advice per quality issue.

        Raises:
            InvalidFarmerId: *farmer_id* is not a positive integer.
            RatingNotFound: missing or owned by another farmer.
        """
        farmer_id = validate_farmer_id(farmer_id)
        rating = self._rating_repo.find_for_farmer(rating_id, farmer_id)
        if rating is None:
            raise RatingNotFound(f"Rating {rating_id} not found.", {"rating_id": rating_id})

        issues = known_issues(rating.quality_issues)
        logger.info(
            "rating.details_retrieved",
            rating_id=rating_id,
            farmer_id=farmer_id,
            rating=rating.rating,
            issue_count=len(issues),
        )
        return RatingDetailsDTO(
            id=str(rating.id),
            order_id=rating.order_id,
            crop_type=rating.crop_type,
            crop_icon=crop_icon(rating.crop_type),
            quantity_kg=rating.quantity_kg,
            rating=rating.rating,
            comment=rating.comment or None,
            quality_issues=issues,
            recommendations=[
                RecommendationDTO(
                    issue=issue,
                    title=QualityIssue(issue).label,
                    recommendation=RECOMMENDATIONS[issue].text,
                    tutorial_id=RECOMMENDATIONS[issue].tutorial_id,
                )
                for issue in issues
            ],
            rated_at=rating.rated_at,
            delivered_at=self._delivered_at(rating.order_id),
            ai_graded_photo_url=rating.ai_graded_photo_url or None,
            buyer_photo_url=rating.buyer_photo_url or None,
            seen_by_farmer=rating.seen_by_farmer,
        )

    def mark_seen(self, rating_id: str, farmer_id: Any) -> bool:
        farmer_id = validate_farmer_id(farmer_id)
        if not self._rating_repo.mark_seen(rating_id, farmer_id, self._clock()):
            raise RatingNotFound(f"Rating {rating_id} not found.", {"rating_id": rating_id})
        return True

    def unseen_count(self, farmer_id: Any) -> int:
        return self._rating_repo.count_unseen(validate_farmer_id(farmer_id))

    def _delivered_at(self, order_id: str) -> Optional[datetime]:
        """When the rated order reached DELIVERED, from its timeline."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            return None
        for event in parse_timeline(order.status_history):
            if event.status == TrackingStatus.DELIVERED:
                return event.timestamp
        return None
