"""Quality rating repository interface."""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.ratings.dtos import RatingFilterDTO
    from modules.ratings.models import QualityRating


class IRatingRepository(IRepository["QualityRating"]):
    @abstractmethod
    def get_by_id(self, id: str) -> Optional[QualityRating]:
        """Retrieve a rating; ``None`` for unknown or malformed ids."""

    @abstractmethod
    def find_by_farmer(self, filter: RatingFilterDTO) -> Tuple[List[QualityRating], int]:
        """One page of the farmer's ratings, newest first, and the total."""

    @abstractmethod
    def find_for_farmer(self, rating_id: str, farmer_id: int) -> Optional[QualityRating]:
        """The rating when it exists and belongs to *farmer_id*, else ``None``."""

    @abstractmethod
    def summary_totals(self, farmer_id: int) -> Dict[str, int]:
        """Counts over all of the farmer's ratings.

        Keys: ``count``, ``stars_total``, ``unseen``, and ``star1`` to
        ``star5``.
        """

    @abstractmethod
    def monthly_totals(self, farmer_id: int, since: datetime) -> Dict[str, Tuple[int, int]]:
        """``{"YYYY-MM": (stars_total, count)}`` for ratings at or after *since*.

        Months are local calendar months; months without ratings are absent.
        """

    @abstractmethod
    def five_star_counts(self, farmer_id: int) -> List[Tuple[str, int]]:
        """``(crop_type, count)`` of five-star ratings, most frequent first.

        Ties are ordered by crop type.
        """

    @abstractmethod
    def mark_seen(self, rating_id: str, farmer_id: int, at: datetime) -> bool:
        """Flag the rating as seen unless it already is.

        Returns ``False`` only when no such rating belongs to the farmer.
        """

    @abstractmethod
    def count_unseen(self, farmer_id: int) -> int:
        """Ratings the farmer has not opened yet."""
