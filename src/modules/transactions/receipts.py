"""Receipt eligibility and payment reference masking."""

from __future__ import annotations

from datetime import datetime

RECEIPT_WINDOW_DAYS = 90
UPI_VISIBLE_CHARS = 8


def days_since(moment: datetime, now: datetime) -> int:
    """Whole days elapsed between *moment* and *now* (floored)."""
    return (now - moment).days


def can_download_receipt(paid_on: datetime, now: datetime) -> bool:
    """A receipt stays downloadable for 90 days after payment, inclusive."""
    return days_since(paid_on, now) <= RECEIPT_WINDOW_DAYS


def mask_upi_reference(reference: str) -> str:
    """Show only the trailing characters of a UPI transaction id."""
    if len(reference) > UPI_VISIBLE_CHARS:
        return "****" + reference[-UPI_VISIBLE_CHARS:]
    return reference
