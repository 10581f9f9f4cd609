"""Match lifecycle API views."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.container import build_facade
from modules.core.responses import request_payload, result_response


class MatchViewSet(ViewSet):
    """Buyer offers awaiting a farmer's decision."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._facade = build_facade()

    def create(self, request: Request) -> Response:
        """POST /api/v1/matches/ (called by the matching process)."""
        result = self._facade.create_match(request_payload(request))
        return result_response(result, success_status=status.HTTP_201_CREATED)

    def list(self, request: Request) -> Response:
        """GET /api/v1/matches/?farmer_id=&limit=&offset=

        Only pending, not yet overdue matches; most urgent first.
        """
        params = request.query_params
        result = self._facade.get_pending_matches(
            params.get("farmer_id"),
            limit=params.get("limit", 10),
            offset=params.get("offset", 0),
        )
        return result_response(result)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        return result_response(self._facade.get_match(pk))

    @action(detail=True, methods=["post"])
    def accept(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/matches/{id}/accept/ with ``is_partial``, ``accepted_quantity``."""
        data = request_payload(request, match_id=pk)
        return result_response(self._facade.accept_match(data))

    @action(detail=True, methods=["post"])
    def reject(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/matches/{id}/reject/ with ``reason``, ``other_reason_text``."""
        data = request_payload(request, match_id=pk)
        return result_response(self._facade.reject_match(data))
