"""Farmer quality rating API views."""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.container import build_facade
from modules.core.responses import request_payload, result_response


class RatingViewSet(ViewSet):
    """Buyer quality ratings of a farmer's delivered orders."""

    lookup_value_regex = r"[0-9A-Fa-f-]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._facade = build_facade()

    def list(self, request: Request) -> Response:
        """GET /api/v1/ratings/?farmer_id=&crop_type=&page=&limit=

        Newest first, with the farmer's rating summary alongside.
        """
        return result_response(self._facade.get_farmer_ratings(request.query_params.dict()))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/ratings/{id}/?farmer_id="""
        return result_response(
            self._facade.get_rating_details(pk, request.query_params.get("farmer_id"))
        )

    @action(detail=False, methods=["get"])
    def summary(self, request: Request) -> Response:
        """GET /api/v1/ratings/summary/?farmer_id="""
        return result_response(
            self._facade.get_rating_summary(request.query_params.get("farmer_id"))
        )

    @action(detail=False, methods=["get"], url_path="unseen-count")
    def unseen_count(self, request: Request) -> Response:
        """GET /api/v1/ratings/unseen-count/?farmer_id="""
        return result_response(
            self._facade.get_unseen_rating_count(request.query_params.get("farmer_id"))
        )

    @action(detail=True, methods=["post"])
    def seen(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/ratings/{id}/seen/ with ``farmer_id``."""
        farmer_id = request_payload(request).get("farmer_id")
        return result_response(self._facade.mark_rating_seen(pk, farmer_id))
