"""Transaction and earnings DTOs (Pydantic v2, immutable).

All views here are read-only projections of PAID and DELIVERED orders.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from modules.orders.dtos import (
    BuyerSummaryDTO,
    DropPointDTO,
    HaulerInfoDTO,
    ListingSummaryDTO,
    PaginationDTO,
)
from modules.orders.timeline import TimelineEvent

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class TransactionFilterDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    status: Literal["completed", "pending", "all"] = "all"
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    crop_type: Optional[str] = None
    sort_by: Literal["date", "amount", "crop"] = "date"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @model_validator(mode="after")
    def _check_range(self) -> TransactionFilterDTO:
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderCountDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    this_month: int
    pending: int


class EarningsSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    total: Decimal
    this_month: Decimal
    pending: Decimal
    order_count: OrderCountDTO
    currency: str


class TransactionCropDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    quantity_kg: Decimal


class TransactionBuyerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    city: str


class TransactionListItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    date: datetime
    crop: TransactionCropDTO
    buyer: TransactionBuyerDTO
    amount: Decimal
    status: Literal["completed", "pending"]
    quality_grade: Optional[str] = None


class PaginatedTransactionsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    transactions: List[TransactionListItemDTO]
    pagination: PaginationDTO


class PaymentBreakdownDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_amount: Decimal
    quality_bonus: Decimal
    platform_fee: Decimal
    net_amount: Decimal
    upi_txn_id: str
    paid_at: Optional[datetime] = None


class TransactionDetailsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    listing: ListingSummaryDTO
    buyer: BuyerSummaryDTO
    drop_point: Optional[DropPointDTO] = None
    hauler: Optional[HaulerInfoDTO] = None
    timeline: List[TimelineEvent]
    payment: PaymentBreakdownDTO
    created_at: datetime
    can_download_receipt: bool


class ReceiptEligibilityDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    can_download_receipt: bool
