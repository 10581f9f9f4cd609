"""Match lifecycle constants."""

from __future__ import annotations

from decimal import Decimal
from typing import FrozenSet

from django.db import models


class MatchStatus(models.TextChoices):
    PENDING_ACCEPTANCE = "PENDING_ACCEPTANCE", "Pending Acceptance"
    ACCEPTED = "ACCEPTED", "Accepted"
    REJECTED = "REJECTED", "Rejected"
    EXPIRED = "EXPIRED", "Expired"


class RejectionReason(models.TextChoices):
    QUALITY_CHANGED = "QUALITY_CHANGED", "Quality changed"
    SOLD_ELSEWHERE = "SOLD_ELSEWHERE", "Sold elsewhere"
    CHANGED_MIND = "CHANGED_MIND", "Changed mind"
    OTHER = "OTHER", "Other"


TERMINAL_STATUSES: FrozenSet[str] = frozenset(
    {MatchStatus.ACCEPTED, MatchStatus.REJECTED, MatchStatus.EXPIRED}
)

# An EXPIRED match may still be rejected explicitly (bookkeeping on the
# client); ACCEPTED and REJECTED matches may not.
REJECTABLE_STATUSES: FrozenSet[str] = frozenset(
    {MatchStatus.PENDING_ACCEPTANCE, MatchStatus.EXPIRED}
)

DEFAULT_EXPIRY_BATCH_SIZE = 100
DEFAULT_PENDING_PAGE_SIZE = 10

# Money columns hold two decimal places and at most twelve digits.
MONEY_QUANTUM = Decimal("0.01")
MAX_TOTAL_AMOUNT = Decimal("9999999999.99")
