"""Match lifecycle domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import FailedPrecondition, NotFound


class MatchNotFound(NotFound):
    """The requested match does not exist."""


class NoLongerPending(FailedPrecondition):
    """The match has already left PENDING_ACCEPTANCE."""


class MatchExpired(FailedPrecondition):
    """The match deadline has passed; it is now EXPIRED."""


class NotRejectable(NoLongerPending):
    """The match is ACCEPTED or REJECTED and cannot be rejected."""
