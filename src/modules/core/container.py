"""Composition root: builds services with their Django-backed collaborators."""

from __future__ import annotations

from django.conf import settings

from modules.core.facade import FarmerServiceFacade
from modules.matches.repositories import DjangoOrderGateway, MatchDjangoRepository
from modules.matches.services import MatchService
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderTrackingService
from modules.ratings.repositories import RatingDjangoRepository
from modules.ratings.services import RatingService
from modules.transactions.services import TransactionService
from shared.infrastructure.bus import event_bus


def build_order_service() -> OrderTrackingService:
    return OrderTrackingService(order_repository=OrderDjangoRepository(), event_bus=event_bus)


def build_match_service() -> MatchService:
    return MatchService(
        match_repository=MatchDjangoRepository(),
        order_gateway=DjangoOrderGateway(),
        event_bus=event_bus,
        expiry_batch_size=settings.MATCH_EXPIRY_BATCH_SIZE,
    )


def build_transaction_service() -> TransactionService:
    return TransactionService(
        order_repository=OrderDjangoRepository(),
        currency=settings.EARNINGS_CURRENCY,
    )


def build_rating_service() -> RatingService:
    return RatingService(
        rating_repository=RatingDjangoRepository(),
        order_repository=OrderDjangoRepository(),
    )


def build_facade() -> FarmerServiceFacade:
    return FarmerServiceFacade(
        order_service=build_order_service(),
        match_service=build_match_service(),
        transaction_service=build_transaction_service(),
        rating_service=build_rating_service(),
    )
