"""Order tracking domain exceptions.

Raised by the Order Lifecycle Engine when a tracking rule is violated.
The façade translates them into transport-neutral error codes.
"""

from __future__ import annotations

from modules.core.exceptions import FailedPrecondition, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist or has been soft-deleted."""


class AlreadyInStatus(FailedPrecondition):
    """The order is already in the requested tracking status."""


class InvalidTransition(FailedPrecondition):
    """The requested status is not the immediate successor of the current one."""
