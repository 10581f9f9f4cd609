"""Domain error taxonomy.

Every error raised by the lifecycle engines derives from ``DomainError``
and carries a stable ``ErrorCode``, a human-readable message and the ids
involved (``metadata``).  The façade translates them into transport-neutral
``(code, message)`` pairs; the HTTP views translate those into responses.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INTERNAL = "INTERNAL"


class DomainError(Exception):
    """Base class for expected, caller-facing failures."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}


class NotFound(DomainError):
    code = ErrorCode.NOT_FOUND


class InvalidArgument(DomainError):
    code = ErrorCode.INVALID_ARGUMENT


class InvalidFarmerId(InvalidArgument):
    """Farmer id is missing, zero, negative or not an integer."""


class FailedPrecondition(DomainError):
    code = ErrorCode.FAILED_PRECONDITION


class Unauthorized(DomainError):
    """The caller does not own the requested resource."""

    code = ErrorCode.PERMISSION_DENIED
