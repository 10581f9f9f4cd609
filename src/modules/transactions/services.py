"""Transaction and earnings service layer (read-only).

Derives the farmer earnings dashboard, the transaction history and the
per-transaction details from persisted order state.  Nothing here ever
writes; lifecycle changes belong to ``OrderTrackingService`` and
``MatchService``.

Business rules enforced:
- Earnings: PAID orders count as earned, DELIVERED orders as pending.
- The current month starts on the first calendar day, local time.
- Transaction history defaults to the last 90 days when no date bound
  is supplied.
- Receipts are downloadable up to 90 days after payment, inclusive.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable

import structlog
from django.utils import timezone

from modules.core.validation import validate_farmer_id
from modules.orders.constants import TrackingStatus
from modules.orders.dtos import (
    PaginationDTO,
    buyer_from_entity,
    drop_point_from_entity,
    hauler_from_entity,
    listing_from_entity,
)
from modules.orders.timeline import parse_timeline
from modules.transactions.dtos import (
    EarningsSummaryDTO,
    OrderCountDTO,
    PaginatedTransactionsDTO,
    PaymentBreakdownDTO,
    TransactionBuyerDTO,
    TransactionCropDTO,
    TransactionDetailsDTO,
    TransactionListItemDTO,
)
from modules.transactions.exceptions import TransactionNotFound
from modules.transactions.receipts import can_download_receipt, mask_upi_reference

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.transactions.dtos import TransactionFilterDTO

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_WINDOW = timedelta(days=90)
PLATFORM_FEE = Decimal("0.00")


def month_start(now: datetime) -> datetime:
    """Midnight on the first day of *now*'s month, in the active time zone."""
    local = timezone.localtime(now)
    return local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class TransactionService:
    def __init__(
        self,
        order_repository: IOrderRepository,
        clock: Callable[[], datetime] = timezone.now,
        currency: str = "INR",
    ) -> None:
        self._order_repo = order_repository
        self._clock = clock
        self._currency = currency

    def earnings_summary(self, farmer_id: Any) -> EarningsSummaryDTO:
        farmer_id = validate_farmer_id(farmer_id)
        totals = self._order_repo.aggregate_earnings(farmer_id, month_start(self._clock()))

        summary = EarningsSummaryDTO(
            farmer_id=farmer_id,
            total=totals["total"],
            this_month=totals["this_month"],
            pending=totals["pending"],
            order_count=OrderCountDTO(
                total=totals["total_count"],
                this_month=totals["this_month_count"],
                pending=totals["pending_count"],
            ),
            currency=self._currency,
        )
        logger.info(
            "transaction.earnings_retrieved",
            farmer_id=farmer_id,
            total=str(summary.total),
            this_month=str(summary.this_month),
        )
        return summary

    def transactions(self, filter: TransactionFilterDTO) -> PaginatedTransactionsDTO:
        validate_farmer_id(filter.farmer_id)
        if filter.from_date is None and filter.to_date is None:
            filter = filter.model_copy(
                update={"from_date": self._clock() - DEFAULT_HISTORY_WINDOW}
            )

        orders, total = self._order_repo.query_transactions(filter)
        logger.info(
            "transaction.list_retrieved",
            farmer_id=filter.farmer_id,
            status=filter.status,
            count=len(orders),
            total=total,
        )
        return PaginatedTransactionsDTO(
            transactions=[_list_item(order) for order in orders],
            pagination=PaginationDTO(
                page=filter.page,
                limit=filter.limit,
                total=total,
                has_more=filter.page * filter.limit < total,
            ),
        )

    def transaction_details(self, order_id: str, farmer_id: Any) -> TransactionDetailsDTO:
        """Full view of one PAID/DELIVERED order.

        Raises:
            InvalidFarmerId: *farmer_id* is not a positive integer.
            TransactionNotFound: missing, foreign, or not yet delivered.
        """
        farmer_id = validate_farmer_id(farmer_id)
        order = self._get_or_raise(order_id, farmer_id)
        eligible = can_download_receipt(order.paid_at or order.updated_at, self._clock())

        logger.info(
            "transaction.details_retrieved",
            order_id=order_id,
            farmer_id=farmer_id,
            can_download_receipt=eligible,
        )
        return TransactionDetailsDTO(
            id=order.order_number,
            listing=listing_from_entity(order),
            buyer=buyer_from_entity(order),
            drop_point=drop_point_from_entity(order),
            hauler=hauler_from_entity(order),
            timeline=parse_timeline(order.status_history),
            payment=PaymentBreakdownDTO(
                base_amount=(
                    order.base_amount if order.base_amount is not None else order.total_amount
                ),
                quality_bonus=order.quality_bonus,
                platform_fee=PLATFORM_FEE,
                net_amount=order.total_amount,
                upi_txn_id=mask_upi_reference(order.upi_transaction_id or ""),
                paid_at=order.paid_at,
            ),
            created_at=order.created_at,
            can_download_receipt=eligible,
        )

    def can_download_receipt(self, order_id: str, farmer_id: Any) -> bool:
        farmer_id = validate_farmer_id(farmer_id)
        order = self._get_or_raise(order_id, farmer_id)
        return can_download_receipt(order.paid_at or order.updated_at, self._clock())

    def _get_or_raise(self, order_id: str, farmer_id: int) -> Order:
        order = self._order_repo.find_transaction_detail(order_id, farmer_id)
        if order is None:
            raise TransactionNotFound(
                f"Transaction not found: {order_id}", {"transaction_id": order_id}
            )
        return order


def _list_item(order: Order) -> TransactionListItemDTO:
    return TransactionListItemDTO(
        id=order.order_number,
        date=order.created_at,
        crop=TransactionCropDTO(
            type=order.crop_type or "Unknown", quantity_kg=order.quantity_kg
        ),
        buyer=TransactionBuyerDTO(
            type=order.buyer_business_type or "Buyer", city=order.buyer_city or "Unknown"
        ),
        amount=order.total_amount,
        status="completed" if order.tracking_status == TrackingStatus.PAID else "pending",
        quality_grade=order.quality_grade or None,
    )
