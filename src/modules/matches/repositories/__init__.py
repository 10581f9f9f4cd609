"""Match repositories package."""

from modules.matches.repositories.django_repository import MatchDjangoRepository
from modules.matches.repositories.interfaces import IMatchRepository, IOrderGateway
from modules.matches.repositories.order_gateway import DjangoOrderGateway

__all__ = [
    "DjangoOrderGateway",
    "IMatchRepository",
    "IOrderGateway",
    "MatchDjangoRepository",
]
