"""Quality rating DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from modules.orders.dtos import PaginationDTO
from modules.ratings.constants import DEFAULT_RATINGS_PAGE_SIZE
from modules.ratings.scoring import crop_icon, known_issues

if TYPE_CHECKING:
    from modules.ratings.models import QualityRating


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class RatingFilterDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    crop_type: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_RATINGS_PAGE_SIZE, ge=1, le=50)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class RatingListItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    order_id: str
    crop_type: str
    crop_icon: str
    quantity_kg: Decimal
    rating: int
    comment: Optional[str] = None
    quality_issues: List[str]
    rated_at: datetime
    seen_by_farmer: bool

    @classmethod
    def from_entity(cls, rating: QualityRating) -> RatingListItemDTO:
        return cls(
            id=str(rating.id),
            order_id=rating.order_id,
            crop_type=rating.crop_type,
            crop_icon=crop_icon(rating.crop_type),
            quantity_kg=rating.quantity_kg,
            rating=rating.rating,
            comment=rating.comment or None,
            quality_issues=known_issues(rating.quality_issues),
            rated_at=rating.rated_at,
            seen_by_farmer=rating.seen_by_farmer,
        )


class StarBreakdownDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    star5: int = 0
    star4: int = 0
    star3: int = 0
    star2: int = 0
    star1: int = 0


class TrendItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str
    avg_rating: float
    count: int


class RatingSummaryDTO(BaseModel):
    """Overall quality standing of a farmer."""

    model_config = ConfigDict(frozen=True)

    farmer_id: int
    overall_score: float
    total_orders: int
    star_breakdown: StarBreakdownDTO
    monthly_trend: List[TrendItemDTO]
    best_crop_type: Optional[str] = None
    unseen_count: int


class PaginatedRatingsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    ratings: List[RatingListItemDTO]
    pagination: PaginationDTO


class FarmerRatingsDTO(BaseModel):
    """Ratings page together with the farmer's summary."""

    model_config = ConfigDict(frozen=True)

    ratings: List[RatingListItemDTO]
    pagination: PaginationDTO
    summary: RatingSummaryDTO


class RecommendationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    issue: str
    title: str
    recommendation: str
    tutorial_id: Optional[str] = None


class RatingDetailsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    order_id: str
    crop_type: str
    crop_icon: str
    quantity_kg: Decimal
    rating: int
    comment: Optional[str] = None
    quality_issues: List[str]
    recommendations: List[RecommendationDTO]
    rated_at: datetime
    delivered_at: Optional[datetime] = None
    ai_graded_photo_url: Optional[str] = None
    buyer_photo_url: Optional[str] = None
    seen_by_farmer: bool


class MarkSeenResultDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    rating_id: str
    success: bool


class UnseenCountDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    unseen_count: int
