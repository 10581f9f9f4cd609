"""Order tracking service layer (Use Cases).

Applies the seven-stage tracking state machine and maintains the order
timeline.  Every status change is a conditional update keyed on the
status the decision was made against, so concurrent transitions are
serialised by the database and a failed transition leaves nothing behind.

Business rules enforced:
- Transitions are forward-only, one step at a time; PAID is terminal.
- Exactly one timeline event is ``active`` (the most recent).
- ``paid_at`` is stamped on the transition to PAID.
- Notifications are best-effort: a failing publisher never fails the
  transition.
- Order reads by farmer reject foreign orders with ``Unauthorized``.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

import structlog
from django.utils import timezone

from modules.core.exceptions import Unauthorized
from modules.core.validation import validate_farmer_id
from modules.orders.constants import TrackingStatus
from modules.orders.dtos import (
    OrderListItemDTO,
    PaginatedOrdersDTO,
    PaginationDTO,
)
from modules.orders.events import OrderDelayUpdated, OrderStatusChanged
from modules.orders.exceptions import AlreadyInStatus, InvalidTransition, OrderNotFound
from modules.orders.timeline import append_event, parse_timeline, serialize_timeline

if TYPE_CHECKING:
    from modules.orders.dtos import OrderListFilterDTO, UpdateDelayDTO, UpdateOrderStatusDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class OrderTrackingService:
    """Application service for order tracking use-cases.

    Receives the repository, the event bus and a clock via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        event_bus: IEventBus,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._order_repo = order_repository
        self._event_bus = event_bus
        self._clock = clock

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def transition(self, dto: UpdateOrderStatusDTO) -> Order:
        """Advance an order to the immediate successor of its status.

        Raises:
            OrderNotFound: order does not exist or is soft-deleted.
            AlreadyInStatus: order is already in ``dto.new_status``.
            InvalidTransition: ``dto.new_status`` is not the next step.
        """
        log = logger.bind(order_id=dto.order_id, new_status=dto.new_status, actor=dto.actor)

        order = self._get_or_raise(dto.order_id)
        self._check_transition(order, dto.new_status, log)

        now = self._clock()
        history = append_event(
            parse_timeline(order.status_history),
            dto.new_status,
            now,
            actor=dto.actor,
            note=dto.note,
        )
        previous_status = order.tracking_status
        updated = self._order_repo.update_status(
            dto.order_id,
            expected_status=previous_status,
            new_status=dto.new_status,
            status_history=serialize_timeline(history),
            fields=self._optional_fields(dto, now),
        )

        if updated is None:
            # Lost the race: report against the state that won.
            log.warning("order.transition_conflict", expected_status=previous_status)
            current = self._get_or_raise(dto.order_id)
            self._check_transition(current, dto.new_status, log)
            raise InvalidTransition(
                f"Order {dto.order_id} changed concurrently; retry the transition.",
                {"order_id": dto.order_id, "current_status": current.tracking_status},
            )

        log.info(
            "order.status_transitioned",
            previous_status=previous_status,
            current_step=updated.current_step,
        )
        self._notify(
            OrderStatusChanged(
                aggregate_id=updated.order_number,
                farmer_id=updated.farmer_id,
                previous_status=previous_status,
                new_status=updated.tracking_status,
            )
        )
        return updated

    def update_delay(self, dto: UpdateDelayDTO) -> Order:
        """Record a delay on an order without touching its status.

        Raises:
            OrderNotFound: order does not exist or is soft-deleted.
        """
        log = logger.bind(order_id=dto.order_id, delay_minutes=dto.delay_minutes)
        updated = self._order_repo.update_delay(
            dto.order_id, dto.delay_minutes, dto.reason, dto.new_eta
        )
        if updated is None:
            raise OrderNotFound(
                f"Order {dto.order_id} not found.", {"order_id": dto.order_id}
            )

        log.info("order.delay_updated", reason=dto.reason, actor=dto.actor)
        self._notify(
            OrderDelayUpdated(
                aggregate_id=updated.order_number,
                farmer_id=updated.farmer_id,
                previous_status=updated.tracking_status,
                delay_minutes=updated.delay_minutes,
            )
        )
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_orders(self, filter: OrderListFilterDTO) -> PaginatedOrdersDTO:
        validate_farmer_id(filter.farmer_id)
        orders, total = self._order_repo.find_by_farmer(filter)
        return PaginatedOrdersDTO(
            orders=[OrderListItemDTO.from_entity(order) for order in orders],
            pagination=PaginationDTO(
                page=filter.page,
                limit=filter.limit,
                total=total,
                has_more=filter.page * filter.limit < total,
            ),
        )

    def get_order_details(self, order_id: str, farmer_id: Any) -> Order:
        """Retrieve an order owned by *farmer_id*.

        Raises:
            InvalidFarmerId: *farmer_id* is not a positive integer.
            OrderNotFound: order does not exist.
            Unauthorized: order belongs to another farmer.
        """
        farmer_id = validate_farmer_id(farmer_id)
        order = self._get_or_raise(order_id)
        if order.farmer_id != farmer_id:
            logger.warning(
                "order.access_denied", order_id=order_id, farmer_id=farmer_id
            )
            raise Unauthorized(
                "Order does not belong to this farmer.",
                {"order_id": order_id, "farmer_id": farmer_id},
            )
        return order

    def count_active(self, farmer_id: Any) -> int:
        return self._order_repo.count_active(validate_farmer_id(farmer_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_raise(self, order_id: str) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.", {"order_id": order_id})
        return order

    @staticmethod
    def _check_transition(order: Order, new_status: str, log: Any) -> None:
        metadata = {
            "order_id": order.order_number,
            "current_status": order.tracking_status,
            "new_status": new_status,
        }
        if order.tracking_status == new_status:
            log.warning("order.already_in_status")
            raise AlreadyInStatus(f"Order is already {new_status}.", metadata)
        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition", current_status=order.tracking_status)
            raise InvalidTransition(
                f"Cannot transition from {order.tracking_status} to {new_status}.",
                metadata,
            )

    @staticmethod
    def _optional_fields(dto: UpdateOrderStatusDTO, now: datetime) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        if dto.hauler is not None:
            fields.update(
                hauler_id=dto.hauler.id,
                hauler_name=dto.hauler.name,
                hauler_phone=dto.hauler.phone,
                hauler_vehicle_type=dto.hauler.vehicle_type or "",
                hauler_vehicle_number=dto.hauler.vehicle_number or "",
            )
        if dto.eta is not None:
            fields["eta"] = dto.eta
        if dto.delay_minutes is not None:
            fields["delay_minutes"] = dto.delay_minutes
        if dto.delay_reason:
            fields["delay_reason"] = dto.delay_reason
        if dto.upi_transaction_id:
            fields["upi_transaction_id"] = dto.upi_transaction_id
        if dto.new_status == TrackingStatus.PAID:
            fields["paid_at"] = now
        return fields

    def _notify(self, event: DomainEvent) -> None:
        try:
            self._event_bus.publish(event)
        except Exception:
            logger.exception(
                "order.notification_failed",
                order_id=event.aggregate_id,
                event_name=event.event_name,
            )
