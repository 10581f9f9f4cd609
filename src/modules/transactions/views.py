"""Earnings and transaction history API views (read-only)."""

from __future__ import annotations

from django.conf import settings
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ViewSet

from modules.core.container import build_facade
from modules.core.responses import result_response


class EarningsView(APIView):
    """GET /api/v1/earnings/?farmer_id="""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._facade = build_facade()

    def get(self, request: Request) -> Response:
        return result_response(self._facade.get_earnings(request.query_params.get("farmer_id")))


class TransactionViewSet(ViewSet):
    """PAID and DELIVERED orders seen as transactions."""

    lookup_value_regex = r"[A-Za-z0-9-]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._facade = build_facade()

    def list(self, request: Request) -> Response:
        """GET /api/v1/transactions/

        Query: ``farmer_id``, ``status`` (completed|pending|all),
        ``from_date``, ``to_date``, ``crop_type``, ``sort_by``
        (date|amount|crop), ``sort_order``, ``page``, ``limit``.
        Without a date bound only the last 90 days are returned.
        """
        query = request.query_params.dict()
        query.setdefault("limit", settings.DEFAULT_PAGE_SIZE)
        return result_response(self._facade.get_transactions(query))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        return result_response(
            self._facade.get_transaction_details(pk, request.query_params.get("farmer_id"))
        )

    @action(detail=True, methods=["get"])
    def receipt(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/transactions/{id}/receipt/: download eligibility."""
        return result_response(
            self._facade.can_download_receipt(pk, request.query_params.get("farmer_id"))
        )
