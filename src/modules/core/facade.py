"""Farmer service façade.

The single entry point for external callers (HTTP views, Celery tasks,
management commands).  Every operation validates caller input, delegates
to one engine and returns a ``ServiceResult``: either a payload or a
transport-neutral ``ServiceError``.  No exception escapes a façade call.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, TypeVar

import structlog
from pydantic import ValidationError

from modules.core.exceptions import DomainError, ErrorCode
from modules.core.validation import validate_farmer_id
from modules.matches.dtos import (
    AcceptMatchDTO,
    CreateMatchDTO,
    MatchOutputDTO,
    PendingMatchesDTO,
    PendingMatchesQueryDTO,
    RejectMatchDTO,
)
from modules.orders.dtos import (
    ActiveOrderCountDTO,
    OrderDetailDTO,
    OrderListFilterDTO,
    UpdateDelayDTO,
    UpdateOrderStatusDTO,
)
from modules.ratings.dtos import (
    FarmerRatingsDTO,
    MarkSeenResultDTO,
    RatingFilterDTO,
    UnseenCountDTO,
)
from modules.transactions.dtos import ReceiptEligibilityDTO, TransactionFilterDTO

if TYPE_CHECKING:
    from modules.matches.services import MatchService
    from modules.orders.services import OrderTrackingService
    from modules.ratings.services import RatingService
    from modules.transactions.services import TransactionService

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

INTERNAL_ERROR_MESSAGE = "An internal error occurred."


@dataclass(frozen=True)
class ServiceError:
    code: ErrorCode
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceResult:
    payload: Any = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _validation_details(exc: ValidationError) -> Dict[str, Any]:
    return {
        "fields": [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
    }


def service_operation(func: F) -> F:
    """Turn a façade method's return value or exception into a ``ServiceResult``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> ServiceResult:
        operation = func.__name__
        try:
            return ServiceResult(payload=func(*args, **kwargs))
        except DomainError as exc:
            logger.info(
                "facade.operation_failed",
                operation=operation,
                code=exc.code.value,
                error=exc.message,
            )
            return ServiceResult(error=ServiceError(exc.code, exc.message, exc.metadata))
        except ValidationError as exc:
            logger.info("facade.invalid_argument", operation=operation)
            return ServiceResult(
                error=ServiceError(
                    ErrorCode.INVALID_ARGUMENT, "Invalid request.", _validation_details(exc)
                )
            )
        except Exception:
            logger.exception("facade.internal_error", operation=operation)
            return ServiceResult(
                error=ServiceError(ErrorCode.INTERNAL, INTERNAL_ERROR_MESSAGE)
            )

    return wrapper  # type: ignore[return-value]


class FarmerServiceFacade:
    """Order tracking, match lifecycle, earnings and ratings behind one API."""

    def __init__(
        self,
        order_service: OrderTrackingService,
        match_service: MatchService,
        transaction_service: TransactionService,
        rating_service: RatingService,
    ) -> None:
        self._orders = order_service
        self._matches = match_service
        self._transactions = transaction_service
        self._ratings = rating_service

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    @service_operation
    def get_farmer_orders(
        self, farmer_id: Any, status: str = "all", page: Any = 1, limit: Any = 20
    ):
        filter = OrderListFilterDTO(
            farmer_id=validate_farmer_id(farmer_id), status=status, page=page, limit=limit
        )
        return self._orders.list_orders(filter)

    @service_operation
    def get_order_details(self, order_id: str, farmer_id: Any):
        return OrderDetailDTO.from_entity(self._orders.get_order_details(order_id, farmer_id))

    @service_operation
    def count_active_orders(self, farmer_id: Any):
        farmer_id = validate_farmer_id(farmer_id)
        return ActiveOrderCountDTO(
            farmer_id=farmer_id, active_count=self._orders.count_active(farmer_id)
        )

    @service_operation
    def update_order_status(self, data: Mapping[str, Any]):
        dto = UpdateOrderStatusDTO.model_validate(data)
        return OrderDetailDTO.from_entity(self._orders.transition(dto))

    @service_operation
    def update_order_delay(self, data: Mapping[str, Any]):
        dto = UpdateDelayDTO.model_validate(data)
        return OrderDetailDTO.from_entity(self._orders.update_delay(dto))

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    @service_operation
    def create_match(self, data: Mapping[str, Any]):
        dto = CreateMatchDTO.model_validate(data)
        return MatchOutputDTO.from_entity(self._matches.create_match(dto))

    @service_operation
    def get_pending_matches(self, farmer_id: Any, limit: Any = 10, offset: Any = 0):
        query = PendingMatchesQueryDTO(
            farmer_id=validate_farmer_id(farmer_id), limit=limit, offset=offset
        )
        matches = self._matches.list_pending(
            query.farmer_id, limit=query.limit, offset=query.offset
        )
        return PendingMatchesDTO(
            farmer_id=query.farmer_id,
            matches=[MatchOutputDTO.from_entity(match) for match in matches],
        )

    @service_operation
    def get_match(self, match_id: str):
        return MatchOutputDTO.from_entity(self._matches.get_match(match_id))

    @service_operation
    def accept_match(self, data: Mapping[str, Any]):
        dto = AcceptMatchDTO.model_validate(data)
        return MatchOutputDTO.from_entity(self._matches.accept(dto))

    @service_operation
    def reject_match(self, data: Mapping[str, Any]):
        dto = RejectMatchDTO.model_validate(data)
        return MatchOutputDTO.from_entity(self._matches.reject(dto))

    @service_operation
    def expire_matches(self):
        return {"expired": self._matches.expire_sweep()}

    # ------------------------------------------------------------------
    # Earnings & transactions
    # ------------------------------------------------------------------

    @service_operation
    def get_earnings(self, farmer_id: Any):
        return self._transactions.earnings_summary(farmer_id)

    @service_operation
    def get_transactions(self, data: Mapping[str, Any]):
        payload = dict(data)
        payload["farmer_id"] = validate_farmer_id(payload.get("farmer_id"))
        return self._transactions.transactions(TransactionFilterDTO.model_validate(payload))

    @service_operation
    def get_transaction_details(self, order_id: str, farmer_id: Any):
        return self._transactions.transaction_details(order_id, farmer_id)

    @service_operation
    def can_download_receipt(self, order_id: str, farmer_id: Any):
        return ReceiptEligibilityDTO(
            order_id=order_id,
            can_download_receipt=self._transactions.can_download_receipt(order_id, farmer_id),
        )

    # ------------------------------------------------------------------
    # Quality ratings
    # ------------------------------------------------------------------

    @service_operation
    def get_farmer_ratings(self, data: Mapping[str, Any]):
        payload = dict(data)
        payload["farmer_id"] = validate_farmer_id(payload.get("farmer_id"))
        page = self._ratings.ratings(RatingFilterDTO.model_validate(payload))
        return FarmerRatingsDTO(
            ratings=page.ratings,
            pagination=page.pagination,
            summary=self._ratings.summary(payload["farmer_id"]),
        )

    @service_operation
    def get_rating_summary(self, farmer_id: Any):
        return self._ratings.summary(farmer_id)

    @service_operation
    def get_rating_details(self, rating_id: str, farmer_id: Any):
        return self._ratings.rating_details(rating_id, farmer_id)

    @service_operation
    def mark_rating_seen(self, rating_id: str, farmer_id: Any):
        return MarkSeenResultDTO(
            rating_id=rating_id, success=self._ratings.mark_seen(rating_id, farmer_id)
        )

    @service_operation
    def get_unseen_rating_count(self, farmer_id: Any):
        farmer_id = validate_farmer_id(farmer_id)
        return UnseenCountDTO(
            farmer_id=farmer_id, unseen_count=self._ratings.unseen_count(farmer_id)
        )
