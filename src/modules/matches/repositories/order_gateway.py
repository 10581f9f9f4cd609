"""Order creation for accepted matches, backed by the orders module."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

import structlog
from django.utils import timezone

from modules.matches.repositories.interfaces import IOrderGateway
from modules.orders.constants import TrackingStatus
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.timeline import initial_timeline, serialize_timeline

if TYPE_CHECKING:
    from datetime import datetime

    from modules.matches.models import Match
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class DjangoOrderGateway(IOrderGateway):
    """Materialises the order for an accepted match.

    The order starts at MATCHED with a one-event timeline and carries the
    match's listing, buyer and money terms.
    """

    def __init__(
        self,
        order_repository: Optional[IOrderRepository] = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._order_repo = order_repository or OrderDjangoRepository()
        self._clock = clock

    def create_order_for_match(self, match: Match) -> str:
        timeline = initial_timeline(
            TrackingStatus.MATCHED,
            self._clock(),
            actor="system",
            note=f"Match {match.id} accepted",
        )
        order = self._order_repo.create(
            {
                "farmer_id": match.farmer_id,
                "tracking_status": TrackingStatus.MATCHED,
                "status_history": serialize_timeline(timeline),
                "listing_id": match.listing_id,
                "crop_type": match.crop_type,
                "quantity_kg": match.quantity_matched,
                "buyer_id": match.buyer_id,
                "buyer_business_type": match.buyer_business_type,
                "buyer_city": match.buyer_city,
                "buyer_area": match.buyer_area,
                "total_amount": match.total_amount,
                "base_amount": match.total_amount,
            }
        )
        logger.info(
            "match.order_materialised",
            match_id=str(match.id),
            order_id=order.order_number,
        )
        return order.order_number
