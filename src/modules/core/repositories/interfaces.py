"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that the order and
match repository interfaces extend.  Service-layer code depends on this
abstraction, never on the Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the entity managed by the repository
    (e.g. ``Order``, ``Match``).
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its identifier, ``None`` when absent."""
