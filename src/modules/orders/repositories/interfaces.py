"""Order repository interface.

Extends ``IRepository[Order]`` with the tracking-specific reads and the
conditional writes the Order Lifecycle Engine relies on, plus the
read-only aggregate queries used by the transactions module.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import OrderListFilterDTO
    from modules.orders.models import Order
    from modules.transactions.dtos import TransactionFilterDTO


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    Orders are addressed by ``order_number``.  Soft-deleted rows are
    invisible to every method.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Persist a new order; ``data`` maps model field names to values."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve a live order by its order number."""

    @abstractmethod
    def find_by_farmer(self, filter: OrderListFilterDTO) -> Tuple[List[Order], int]:
        """Return one page of the farmer's orders (newest first) and the total."""

    @abstractmethod
    def count_active(self, farmer_id: int) -> int:
        """Count the farmer's orders that are not yet in a terminal status."""

    @abstractmethod
    def update_status(
        self,
        order_id: str,
        expected_status: str,
        new_status: str,
        status_history: List[Dict[str, Any]],
        fields: Optional[Dict[str, Any]] = None,
    ) -> Optional[Order]:
        """Move an order to *new_status* only if it is still in *expected_status*.

        Returns the refreshed order, or ``None`` when the row was not in
        the expected status (a concurrent writer won).
        """

    @abstractmethod
    def update_delay(
        self,
        order_id: str,
        delay_minutes: int,
        reason: str,
        new_eta: Optional[datetime] = None,
    ) -> Optional[Order]:
        """Update delay metadata; returns ``None`` when the order is gone."""

    @abstractmethod
    def aggregate_earnings(self, farmer_id: int, month_start: datetime) -> Dict[str, Any]:
        """Sums and counts per earnings bucket.

        Keys: ``total``, ``total_count``, ``this_month``,
        ``this_month_count``, ``pending``, ``pending_count``.
        """

    @abstractmethod
    def query_transactions(self, filter: TransactionFilterDTO) -> Tuple[List[Order], int]:
        """Return one page of PAID/DELIVERED orders matching *filter* and the total."""

    @abstractmethod
    def find_transaction_detail(self, order_id: str, farmer_id: int) -> Optional[Order]:
        """A PAID or DELIVERED order owned by *farmer_id*, else ``None``."""
