"""Order tracking constants.

Defines the seven tracking stages, their step numbers and labels, and the
strict successor table of the tracking state machine.  The tables are
checked for completeness at import time so a new status cannot be added
without a step, a label and a (possibly empty) successor.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional

from django.core.exceptions import ImproperlyConfigured
from django.db import models


class TrackingStatus(models.TextChoices):
    LISTED = "LISTED", "Listed"
    MATCHED = "MATCHED", "Matched"
    PICKUP_SCHEDULED = "PICKUP_SCHEDULED", "Pickup Scheduled"
    AT_DROP_POINT = "AT_DROP_POINT", "At Drop Point"
    IN_TRANSIT = "IN_TRANSIT", "In Transit"
    DELIVERED = "DELIVERED", "Delivered"
    PAID = "PAID", "Payment Received"


STATUS_STEPS: Dict[str, int] = {
    TrackingStatus.LISTED: 1,
    TrackingStatus.MATCHED: 2,
    TrackingStatus.PICKUP_SCHEDULED: 3,
    TrackingStatus.AT_DROP_POINT: 4,
    TrackingStatus.IN_TRANSIT: 5,
    TrackingStatus.DELIVERED: 6,
    TrackingStatus.PAID: 7,
}

STATUS_LABELS: Dict[str, str] = {
    status.value: status.label for status in TrackingStatus
}

# Strict successor function: at most one valid next state, never backwards.
NEXT_STATUS: Dict[str, Optional[str]] = {
    TrackingStatus.LISTED: TrackingStatus.MATCHED,
    TrackingStatus.MATCHED: TrackingStatus.PICKUP_SCHEDULED,
    TrackingStatus.PICKUP_SCHEDULED: TrackingStatus.AT_DROP_POINT,
    TrackingStatus.AT_DROP_POINT: TrackingStatus.IN_TRANSIT,
    TrackingStatus.IN_TRANSIT: TrackingStatus.DELIVERED,
    TrackingStatus.DELIVERED: TrackingStatus.PAID,
    TrackingStatus.PAID: None,
}

TOTAL_STEPS = len(TrackingStatus.values)

TERMINAL_STATES: FrozenSet[str] = frozenset(
    status for status, successor in NEXT_STATUS.items() if successor is None
)

ACTIVE_STATUSES: FrozenSet[str] = frozenset(TrackingStatus.values) - TERMINAL_STATES

# Aggregation buckets
EARNING_STATUSES: FrozenSet[str] = frozenset(
    {TrackingStatus.PAID, TrackingStatus.DELIVERED}
)

ORDER_NUMBER_MAX_RETRIES = 5


def _check_state_tables() -> None:
    statuses = set(TrackingStatus.values)
    for name, table in (
        ("STATUS_STEPS", STATUS_STEPS),
        ("STATUS_LABELS", STATUS_LABELS),
        ("NEXT_STATUS", NEXT_STATUS),
    ):
        missing = statuses - set(table)
        if missing:
            raise ImproperlyConfigured(f"{name} has no entry for {sorted(missing)}")

    for status, successor in NEXT_STATUS.items():
        if successor is not None and STATUS_STEPS[successor] != STATUS_STEPS[status] + 1:
            raise ImproperlyConfigured(
                f"NEXT_STATUS[{status}] must be the immediate next step"
            )


_check_state_tables()


def get_step(status: str) -> int:
    return STATUS_STEPS[status]


def is_valid_transition(current_status: str, new_status: str) -> bool:
    """Return ``True`` when *new_status* is the immediate successor."""
    return NEXT_STATUS.get(current_status) == new_status
