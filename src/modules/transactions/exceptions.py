"""Transaction view exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound


class TransactionNotFound(NotFound):
    """No PAID/DELIVERED order with this id is visible to the farmer.

    Ownership and existence are not distinguished.
    """
