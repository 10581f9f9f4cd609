"""Match DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from modules.matches.constants import MAX_TOTAL_AMOUNT, MONEY_QUANTUM, RejectionReason

if TYPE_CHECKING:
    from modules.matches.models import Match


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateMatchDTO(BaseModel):
    """A counterparty found by the matching process for a listing."""

    model_config = ConfigDict(frozen=True)

    listing_id: str = Field(min_length=1)
    farmer_id: int
    buyer_id: str = Field(min_length=1)
    buyer_business_type: str = Field(min_length=1)
    buyer_city: str = Field(min_length=1)
    buyer_area: Optional[str] = None
    crop_type: Optional[str] = None
    delivery_date: Optional[str] = None
    quantity: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    price_per_kg: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    expires_in_hours: int = Field(gt=0)

    @model_validator(mode="after")
    def _total_fits(self) -> CreateMatchDTO:
        if self.total_amount > MAX_TOTAL_AMOUNT:
            raise ValueError(f"quantity x price_per_kg must not exceed {MAX_TOTAL_AMOUNT}")
        return self

    @property
    def total_amount(self) -> Decimal:
        """quantity x price_per_kg rounded half-up to the paisa."""
        return (self.quantity * self.price_per_kg).quantize(MONEY_QUANTUM, ROUND_HALF_UP)


class AcceptMatchDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_id: str = Field(min_length=1)
    is_partial: bool = False
    accepted_quantity: Optional[Decimal] = Field(default=None, gt=0)


class RejectMatchDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_id: str = Field(min_length=1)
    reason: RejectionReason
    other_reason_text: Optional[str] = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def _other_needs_text(self) -> RejectMatchDTO:
        if self.reason == RejectionReason.OTHER and not (self.other_reason_text or "").strip():
            raise ValueError("other_reason_text is required when reason is OTHER")
        return self

    @property
    def stored_reason(self) -> str:
        """Value persisted on the match: free text for OTHER, else the code."""
        if self.reason == RejectionReason.OTHER:
            return self.other_reason_text.strip()
        return self.reason.value


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class MatchBuyerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    business_type: str
    city: str
    area: Optional[str] = None


class MatchOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    listing_id: str
    farmer_id: int
    crop_type: Optional[str] = None
    buyer: MatchBuyerDTO
    delivery_date: Optional[str] = None
    quantity_matched: Decimal
    price_per_kg: Decimal
    total_amount: Decimal
    status: str
    rejection_reason: Optional[str] = None
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    order_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, match: Match) -> MatchOutputDTO:
        return cls(
            id=str(match.id),
            listing_id=match.listing_id,
            farmer_id=match.farmer_id,
            crop_type=match.crop_type or None,
            buyer=MatchBuyerDTO(
                id=match.buyer_id,
                business_type=match.buyer_business_type,
                city=match.buyer_city,
                area=match.buyer_area or None,
            ),
            delivery_date=match.delivery_date or None,
            quantity_matched=match.quantity_matched,
            price_per_kg=match.price_per_kg,
            total_amount=match.total_amount,
            status=match.status,
            rejection_reason=match.rejection_reason or None,
            expires_at=match.expires_at,
            accepted_at=match.accepted_at,
            rejected_at=match.rejected_at,
            order_id=match.order_id,
            created_at=match.created_at,
            updated_at=match.updated_at,
        )


class PendingMatchesDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    matches: List[MatchOutputDTO]


class PendingMatchesQueryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    farmer_id: int
    limit: int = Field(default=10, ge=1, le=50)
    offset: int = Field(default=0, ge=0)
