"""Order tracking DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are the
contracts between the façade and the Order Lifecycle Engine.  DTOs are
immutable (``frozen=True``).

- ``UpdateOrderStatusDTO`` / ``UpdateDelayDTO``: command inputs.
- ``OrderListFilterDTO``: farmer order list query.
- ``OrderListItemDTO`` / ``OrderDetailDTO``: outputs.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from modules.orders.constants import TrackingStatus
from modules.orders.timeline import TimelineEvent, parse_timeline

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


class HaulerInfoDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    phone: str = ""
    vehicle_type: Optional[str] = None
    vehicle_number: Optional[str] = None


class ListingSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    crop_type: str
    quantity_kg: Decimal
    photo_url: Optional[str] = None


class BuyerSummaryDTO(BaseModel):
    """Anonymised buyer view: business type and location only."""

    model_config = ConfigDict(frozen=True)

    business_type: str
    city: str
    area: Optional[str] = None


class DropPointDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    address: str = ""


class PaginationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    limit: int
    total: int
    has_more: bool


def _validate_status(value: str) -> str:
    if value not in TrackingStatus.values:
        raise ValueError(f"Unknown tracking status: {value!r}")
    return value


TrackingStatusName = Annotated[str, AfterValidator(_validate_status)]


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class UpdateOrderStatusDTO(BaseModel):
    """Immutable DTO for a tracking status transition.

    Optional fields are persisted alongside the new status when supplied.
    """

    model_config = ConfigDict(frozen=True)

    order_id: str = Field(min_length=1)
    new_status: TrackingStatusName
    actor: str = Field(min_length=1)
    note: Optional[str] = None
    hauler: Optional[HaulerInfoDTO] = None
    eta: Optional[datetime] = None
    delay_minutes: Optional[int] = Field(default=None, ge=0)
    delay_reason: Optional[str] = None
    upi_transaction_id: Optional[str] = None


class UpdateDelayDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str = Field(min_length=1)
    delay_minutes: int = Field(ge=0)
    reason: str
    new_eta: Optional[datetime] = None
    actor: str = "system"


class OrderListFilterDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    status: Literal["active", "completed", "all"] = "all"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


def listing_from_entity(order: Order) -> ListingSummaryDTO:
    return ListingSummaryDTO(
        id=order.listing_id,
        crop_type=order.crop_type or "Unknown",
        quantity_kg=order.quantity_kg,
        photo_url=order.photo_url or None,
    )


def buyer_from_entity(order: Order) -> BuyerSummaryDTO:
    return BuyerSummaryDTO(
        business_type=order.buyer_business_type or "Unknown",
        city=order.buyer_city or "Unknown",
        area=order.buyer_area or None,
    )


def hauler_from_entity(order: Order) -> Optional[HaulerInfoDTO]:
    if not order.hauler_id:
        return None
    return HaulerInfoDTO(
        id=order.hauler_id,
        name=order.hauler_name or "Unknown",
        phone=order.hauler_phone,
        vehicle_type=order.hauler_vehicle_type or None,
        vehicle_number=order.hauler_vehicle_number or None,
    )


class OrderListItemDTO(BaseModel):
    """Lightweight order view for the farmer order list."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    listing: ListingSummaryDTO
    buyer: BuyerSummaryDTO
    tracking_status: str
    current_step: int
    total_steps: int
    total_amount: Decimal
    eta: Optional[datetime] = None
    delay_minutes: int = 0
    created_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderListItemDTO:
        return cls(
            order_id=order.order_number,
            listing=listing_from_entity(order),
            buyer=buyer_from_entity(order),
            tracking_status=order.tracking_status,
            current_step=order.current_step,
            total_steps=order.total_steps,
            total_amount=order.total_amount,
            eta=order.eta,
            delay_minutes=order.delay_minutes,
            created_at=order.created_at,
        )


class PaginatedOrdersDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    orders: List[OrderListItemDTO]
    pagination: PaginationDTO


class OrderDetailDTO(BaseModel):
    """Full tracking view of a single order, timeline included."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    farmer_id: int
    listing: ListingSummaryDTO
    buyer: BuyerSummaryDTO
    tracking_status: str
    current_step: int
    total_steps: int
    total_amount: Decimal
    eta: Optional[datetime] = None
    delay_minutes: int = 0
    delay_reason: Optional[str] = None
    hauler: Optional[HaulerInfoDTO] = None
    drop_point: Optional[DropPointDTO] = None
    status_history: List[TimelineEvent]
    upi_transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderDetailDTO:
        return cls(
            order_id=order.order_number,
            farmer_id=order.farmer_id,
            listing=listing_from_entity(order),
            buyer=buyer_from_entity(order),
            tracking_status=order.tracking_status,
            current_step=order.current_step,
            total_steps=order.total_steps,
            total_amount=order.total_amount,
            eta=order.eta,
            delay_minutes=order.delay_minutes,
            delay_reason=order.delay_reason or None,
            hauler=hauler_from_entity(order),
            drop_point=drop_point_from_entity(order),
            status_history=parse_timeline(order.status_history),
            upi_transaction_id=order.upi_transaction_id or None,
            paid_at=order.paid_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def drop_point_from_entity(order: Order) -> Optional[DropPointDTO]:
    if not order.drop_point_name:
        return None
    return DropPointDTO(name=order.drop_point_name, address=order.drop_point_address)


class ActiveOrderCountDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    active_count: int
