"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

Status changes are conditional updates keyed on the expected current
status (``UPDATE ... WHERE tracking_status = <expected>``), so two
concurrent transitions on the same order cannot both succeed and the
timeline stays strictly append-ordered.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import structlog
from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from modules.orders.constants import (
    ACTIVE_STATUSES,
    EARNING_STATUSES,
    TERMINAL_STATES,
    TrackingStatus,
)
from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.dtos import OrderListFilterDTO
    from modules.transactions.dtos import TransactionFilterDTO

logger = structlog.get_logger(__name__)

_TRANSACTION_STATUS_MAP = {
    "completed": [TrackingStatus.PAID],
    "pending": [TrackingStatus.DELIVERED],
    "all": sorted(EARNING_STATUSES),
}

_TRANSACTION_SORT_FIELDS = {
    "date": "created_at",
    "amount": "total_amount",
    "crop": "crop_type",
}

_ZERO = Value(Decimal("0.00"), output_field=DecimalField(max_digits=14, decimal_places=2))


def _money_sum(condition: Q) -> Coalesce:
    return Coalesce(Sum("total_amount", filter=condition), _ZERO)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _alive(self) -> QuerySet[Order]:
        return Order.objects.alive()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(**data)
        order.save()
        logger.info(
            "order.created",
            order_id=order.order_number,
            farmer_id=order.farmer_id,
            tracking_status=order.tracking_status,
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        return self._alive().filter(order_number=id).first()

    def find_by_farmer(self, filter: OrderListFilterDTO) -> Tuple[List[Order], int]:
        queryset = self._alive().filter(farmer_id=filter.farmer_id)
        if filter.status == "active":
            queryset = queryset.filter(tracking_status__in=ACTIVE_STATUSES)
        elif filter.status == "completed":
            queryset = queryset.filter(tracking_status__in=TERMINAL_STATES)

        total = queryset.count()
        offset = (filter.page - 1) * filter.limit
        orders = list(queryset.order_by("-created_at")[offset : offset + filter.limit])
        return orders, total

    def count_active(self, farmer_id: int) -> int:
        return (
            self._alive()
            .filter(farmer_id=farmer_id)
            .exclude(tracking_status__in=TERMINAL_STATES)
            .count()
        )

    # ------------------------------------------------------------------
    # Conditional writes
    # ------------------------------------------------------------------

    def update_status(
        self,
        order_id: str,
        expected_status: str,
        new_status: str,
        status_history: List[Dict[str, Any]],
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[Order]:
        changes: Dict[str, Any] = dict(fields or {})
        changes.update(
            tracking_status=new_status,
            status_history=status_history,
            updated_at=timezone.now(),
        )
        with transaction.atomic():
            updated = (
                self._alive()
                .filter(order_number=order_id, tracking_status=expected_status)
                .update(**changes)
            )
            if updated:
                return self.get_by_id(order_id)
        logger.info(
            "order.conditional_update_missed",
            order_id=order_id,
            expected_status=expected_status,
            new_status=new_status,
        )
        return None

    def update_delay(
        self,
        order_id: str,
        delay_minutes: int,
        reason: str,
        new_eta: Optional[datetime] = None,
    ) -> Optional[Order]:
        changes: Dict[str, Any] = {
            "delay_minutes": delay_minutes,
            "delay_reason": reason,
            "updated_at": timezone.now(),
        }
        if new_eta is not None:
            changes["eta"] = new_eta
        if not self._alive().filter(order_number=order_id).update(**changes):
            return None
        return self.get_by_id(order_id)

    # ------------------------------------------------------------------
    # Aggregates (read-only)
    # ------------------------------------------------------------------

    def aggregate_earnings(self, farmer_id: int, month_start: datetime) -> Dict[str, Any]:
        paid = Q(tracking_status=TrackingStatus.PAID)
        paid_this_month = paid & Q(paid_on__gte=month_start)
        delivered = Q(tracking_status=TrackingStatus.DELIVERED)

        return (
            self._alive()
            .filter(farmer_id=farmer_id, tracking_status__in=EARNING_STATUSES)
            .annotate(paid_on=Coalesce("paid_at", "updated_at"))
            .aggregate(
                total=_money_sum(paid),
                total_count=Count("id", filter=paid),
                this_month=_money_sum(paid_this_month),
                this_month_count=Count("id", filter=paid_this_month),
                pending=_money_sum(delivered),
                pending_count=Count("id", filter=delivered),
            )
        )

    def query_transactions(self, filter: TransactionFilterDTO) -> Tuple[List[Order], int]:
        queryset = self._alive().filter(
            farmer_id=filter.farmer_id,
            tracking_status__in=_TRANSACTION_STATUS_MAP[filter.status],
        )
        if filter.from_date is not None:
            queryset = queryset.filter(created_at__gte=filter.from_date)
        if filter.to_date is not None:
            queryset = queryset.filter(created_at__lte=filter.to_date)
        if filter.crop_type:
            queryset = queryset.filter(crop_type__icontains=filter.crop_type)

        sort_field = _TRANSACTION_SORT_FIELDS[filter.sort_by]
        if filter.sort_order == "desc":
            sort_field = f"-{sort_field}"

        total = queryset.count()
        offset = (filter.page - 1) * filter.limit
        orders = list(queryset.order_by(sort_field, "-created_at")[offset : offset + filter.limit])
        return orders, total

    def find_transaction_detail(self, order_id: str, farmer_id: int) -> Optional[Order]:
        return (
            self._alive()
            .filter(
                order_number=order_id,
                farmer_id=farmer_id,
                tracking_status__in=EARNING_STATUSES,
            )
            .first()
        )
