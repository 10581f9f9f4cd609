"""Event handlers forwarding order events to the notification collaborator.

Delivery is handed to Celery so the publishing request never waits on it.
"""

from __future__ import annotations

import structlog

from modules.orders.events import OrderDelayUpdated, OrderStatusChanged
from modules.orders.tasks import deliver_order_notification
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        deliver_order_notification.delay(event.to_payload())
        logger.info(
            "order.notification_enqueued",
            order_id=event.aggregate_id,
            event_name=event.event_name,
        )


class OrderDelayUpdatedHandler(IEventHandler[OrderDelayUpdated]):
    def handle(self, event: OrderDelayUpdated) -> None:
        deliver_order_notification.delay(event.to_payload())
        logger.info(
            "order.notification_enqueued",
            order_id=event.aggregate_id,
            event_name=event.event_name,
        )


order_status_changed_handler = OrderStatusChangedHandler()
order_delay_updated_handler = OrderDelayUpdatedHandler()
