"""Match repository and order gateway interfaces.

``update_status`` must be conditional: the write only happens when the
row is still in one of ``expected_statuses``.  This is what guarantees a
single winner when accept, reject and the expiry sweep race on one match.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.matches.models import Match


class IMatchRepository(IRepository["Match"]):
    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Match]:
        """Retrieve a match; ``None`` for unknown or malformed ids."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Match:
        """Persist a new PENDING_ACCEPTANCE match."""

    @abstractmethod
    def find_pending_by_farmer(
        self, farmer_id: int, now: datetime, limit: int, offset: int = 0
    ) -> List[Match]:
        """Pending, not yet overdue matches ordered by ``expires_at`` ascending."""

    @abstractmethod
    def update_status(
        self,
        match_id: str,
        new_status: str,
        expected_statuses: Iterable[str],
        **details: Any,
    ) -> Optional[Match]:
        """Conditionally move a match to *new_status*.

        ``details`` are extra columns written in the same statement
        (``accepted_at``, ``rejected_at``, ``rejection_reason``).
        Returns the refreshed match, or ``None`` if another writer won.
        """

    @abstractmethod
    def attach_order(self, match_id: str, order_id: str) -> Match:
        """Persist the order created for an accepted match."""

    @abstractmethod
    def find_expired_pending(self, now: datetime, limit: int) -> List[Match]:
        """At most *limit* PENDING_ACCEPTANCE matches with ``expires_at <= now``."""


class IOrderGateway(ABC):
    """Order creation collaborator used on match acceptance."""

    @abstractmethod
    def create_order_for_match(self, match: Match) -> str:
        """Create the order for an accepted match and return its order id."""
