"""Match service layer (Use Cases).

Manages offer acceptance races and time-bounded expiry.  Every status
change goes through ``IMatchRepository.update_status`` with the set of
statuses the decision was made against, so at most one of a concurrent
accept, reject or expiry sweep wins; the losers fail cleanly.

Lazy expiry is an explicit two-step protocol: ``_expire_if_due`` persists
EXPIRED first, then the caller re-checks and raises.  It runs outside any
surrounding transaction so the EXPIRED write survives the error.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, List

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.validation import validate_farmer_id
from modules.matches import events
from modules.matches.constants import (
    DEFAULT_EXPIRY_BATCH_SIZE,
    DEFAULT_PENDING_PAGE_SIZE,
    REJECTABLE_STATUSES,
    MatchStatus,
)
from modules.matches.exceptions import (
    MatchExpired,
    MatchNotFound,
    NoLongerPending,
    NotRejectable,
)

if TYPE_CHECKING:
    from modules.matches.dtos import AcceptMatchDTO, CreateMatchDTO, RejectMatchDTO
    from modules.matches.models import Match
    from modules.matches.repositories.interfaces import IMatchRepository, IOrderGateway
    from shared.domain.bus import IEventBus
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

_PENDING = (MatchStatus.PENDING_ACCEPTANCE,)


class MatchService:
    """Application service for match use-cases.

    Receives the match repository, the order gateway, the event bus and a
    clock via constructor injection (DIP).
    """

    def __init__(
        self,
        match_repository: IMatchRepository,
        order_gateway: IOrderGateway,
        event_bus: IEventBus,
        clock: Callable[[], datetime] = timezone.now,
        expiry_batch_size: int = DEFAULT_EXPIRY_BATCH_SIZE,
    ) -> None:
        self._match_repo = match_repository
        self._order_gateway = order_gateway
        self._event_bus = event_bus
        self._clock = clock
        self._expiry_batch_size = expiry_batch_size

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_match(self, dto: CreateMatchDTO) -> Match:
        farmer_id = validate_farmer_id(dto.farmer_id)
        now = self._clock()
        return self._match_repo.create(
            {
                "listing_id": dto.listing_id,
                "farmer_id": farmer_id,
                "crop_type": dto.crop_type or "",
                "buyer_id": dto.buyer_id,
                "buyer_business_type": dto.buyer_business_type,
                "buyer_city": dto.buyer_city,
                "buyer_area": dto.buyer_area or "",
                "delivery_date": dto.delivery_date or "",
                "quantity_matched": dto.quantity,
                "price_per_kg": dto.price_per_kg,
                "total_amount": dto.total_amount,
                "status": MatchStatus.PENDING_ACCEPTANCE,
                "expires_at": now + timedelta(hours=dto.expires_in_hours),
            }
        )

    def accept(self, dto: AcceptMatchDTO) -> Match:
        """Accept a pending match and materialise its order.

        Raises:
            MatchNotFound: match does not exist.
            NoLongerPending: match already left PENDING_ACCEPTANCE, or a
                concurrent writer claimed it first.
            MatchExpired: deadline passed; the match is left EXPIRED.
        """
        log = logger.bind(match_id=dto.match_id, is_partial=dto.is_partial)

        match = self._get_or_raise(dto.match_id)
        self._ensure_pending(match)

        if self._expire_if_due(match):
            raise MatchExpired(
                "Match has expired.",
                {"match_id": dto.match_id, "expires_at": match.expires_at.isoformat()},
            )

        if dto.is_partial:
            # Quantity reconciliation is not supported; the full matched
            # quantity becomes the order.
            log.info(
                "match.partial_acceptance_requested",
                accepted_quantity=str(dto.accepted_quantity) if dto.accepted_quantity else None,
                quantity_matched=str(match.quantity_matched),
            )

        with transaction.atomic():
            claimed = self._match_repo.update_status(
                dto.match_id,
                MatchStatus.ACCEPTED,
                _PENDING,
                accepted_at=self._clock(),
            )
            if claimed is None:
                log.warning("match.accept_conflict")
                raise NoLongerPending(
                    "Match is no longer pending acceptance.", {"match_id": dto.match_id}
                )
            order_id = self._order_gateway.create_order_for_match(claimed)
            accepted = self._match_repo.attach_order(dto.match_id, order_id)

        log.info("match.accepted", order_id=order_id)
        self._publish(
            events.MatchAccepted(
                aggregate_id=str(accepted.id),
                farmer_id=accepted.farmer_id,
                order_id=order_id,
                is_partial=dto.is_partial,
            )
        )
        return accepted

    def reject(self, dto: RejectMatchDTO) -> Match:
        """Reject a pending (or already expired) match.

        Raises:
            MatchNotFound: match does not exist.
            NotRejectable: match is ACCEPTED or REJECTED, or a concurrent
                writer moved it there first.
        """
        log = logger.bind(match_id=dto.match_id, reason=dto.reason)

        match = self._get_or_raise(dto.match_id)
        if match.status not in REJECTABLE_STATUSES:
            log.warning("match.not_rejectable", status=match.status)
            raise NotRejectable(
                f"Match is {match.status} and cannot be rejected.",
                {"match_id": dto.match_id, "status": match.status},
            )

        self._expire_if_due(match)

        rejected = self._match_repo.update_status(
            dto.match_id,
            MatchStatus.REJECTED,
            REJECTABLE_STATUSES,
            rejected_at=self._clock(),
            rejection_reason=dto.stored_reason,
        )
        if rejected is None:
            log.warning("match.reject_conflict")
            raise NotRejectable(
                "Match is no longer pending acceptance.", {"match_id": dto.match_id}
            )

        log.info("match.rejected")
        self._publish(
            events.MatchRejected(
                aggregate_id=str(rejected.id),
                farmer_id=rejected.farmer_id,
                reason=rejected.rejection_reason,
            )
        )
        return rejected

    def expire_sweep(self) -> int:
        """Expire at most one batch of overdue pending matches.

        Each match is transitioned with its own conditional update, so a
        match accepted or rejected meanwhile is skipped.  Returns the
        number of matches actually expired.
        """
        now = self._clock()
        candidates = self._match_repo.find_expired_pending(now, self._expiry_batch_size)
        if not candidates:
            return 0

        count = 0
        for match in candidates:
            expired = self._match_repo.update_status(
                str(match.id), MatchStatus.EXPIRED, _PENDING
            )
            if expired is None:
                continue
            count += 1
            self._publish(
                events.MatchExpired(aggregate_id=str(expired.id), farmer_id=expired.farmer_id)
            )

        logger.info("match.expiry_sweep_completed", candidates=len(candidates), expired=count)
        return count

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_pending(
        self, farmer_id: Any, limit: int = DEFAULT_PENDING_PAGE_SIZE, offset: int = 0
    ) -> List[Match]:
        """Actionable matches for a farmer, most urgent first."""
        farmer_id = validate_farmer_id(farmer_id)
        return self._match_repo.find_pending_by_farmer(farmer_id, self._clock(), limit, offset)

    def get_match(self, match_id: str) -> Match:
        return self._get_or_raise(match_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_raise(self, match_id: str) -> Match:
        match = self._match_repo.get_by_id(match_id)
        if match is None:
            raise MatchNotFound(f"Match {match_id} not found.", {"match_id": match_id})
        return match

    @staticmethod
    def _ensure_pending(match: Match) -> None:
        if match.status != MatchStatus.PENDING_ACCEPTANCE:
            raise NoLongerPending(
                "Match is no longer pending acceptance.",
                {"match_id": str(match.id), "status": match.status},
            )

    def _expire_if_due(self, match: Match) -> bool:
        """Persist EXPIRED for an overdue pending match.

        Returns ``True`` when the match is EXPIRED afterwards, whether this
        call or a concurrent sweep performed the write.
        """
        if match.status != MatchStatus.PENDING_ACCEPTANCE or not match.is_overdue(self._clock()):
            return False
        expired = self._match_repo.update_status(str(match.id), MatchStatus.EXPIRED, _PENDING)
        if expired is not None:
            logger.info("match.expired", match_id=str(match.id), trigger="lazy")
            self._publish(
                events.MatchExpired(aggregate_id=str(expired.id), farmer_id=expired.farmer_id)
            )
            return True
        current = self._match_repo.get_by_id(str(match.id))
        return current is not None and current.status == MatchStatus.EXPIRED

    def _publish(self, event: DomainEvent) -> None:
        try:
            self._event_bus.publish(event)
        except Exception:
            logger.exception(
                "match.event_publish_failed",
                match_id=event.aggregate_id,
                event_name=event.event_name,
            )
