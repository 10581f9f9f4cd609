"""Pure helpers for the rating summary and detail views."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Tuple

import structlog
from django.utils import timezone

from modules.ratings.constants import (
    CROP_ICONS,
    DEFAULT_CROP_ICON,
    TREND_MONTHS,
    QualityIssue,
)

logger = structlog.get_logger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def crop_icon(crop_type: str) -> str:
    return CROP_ICONS.get(crop_type, DEFAULT_CROP_ICON)


def average_stars(total: int, count: int) -> float:
    """Mean star value rounded half-up to one decimal; ``0.0`` when nothing is rated."""
    if not count:
        return 0.0
    return float((Decimal(total) / Decimal(count)).quantize(_ONE_DECIMAL, ROUND_HALF_UP))


def trend_window(now: datetime, months: int = TREND_MONTHS) -> Tuple[datetime, List[str]]:
    """Start of the trend window and its ``YYYY-MM`` keys, oldest first.

    The window covers the current local month and the ``months - 1``
    calendar months before it.
    """
    local = timezone.localtime(now)
    keys: List[str] = []
    year, month = local.year, local.month
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)
    keys.reverse()

    first_year, first_month = (int(part) for part in keys[0].split("-"))
    start = local.replace(
        year=first_year, month=first_month, day=1, hour=0, minute=0, second=0, microsecond=0
    )
    return start, keys


def known_issues(raw: Iterable[str]) -> List[str]:
    """Stored issue codes restricted to the known categories, order kept."""
    issues = []
    for code in raw or []:
        if code in QualityIssue.values:
            issues.append(code)
        else:
            logger.warning("rating.unknown_quality_issue", issue=code)
    return issues
