"""Async tasks of the order tracking module."""

from __future__ import annotations

from typing import Any, Dict

import structlog
from celery import shared_task

logger = structlog.get_logger(__name__)


@shared_task(name="orders.deliver_notification", ignore_result=True)
def deliver_order_notification(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Hand an order event to the farmer notification channel.

    Push/SMS delivery belongs to the notification service; this task is
    the hand-off point and records what was sent.
    """
    logger.info(
        "order.notification_dispatched",
        event_name=payload.get("event_name"),
        order_id=payload.get("aggregate_id"),
        farmer_id=payload.get("farmer_id"),
        previous_status=payload.get("previous_status"),
        new_status=payload.get("new_status"),
        delay_minutes=payload.get("delay_minutes"),
    )
    return payload
