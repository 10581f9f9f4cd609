"""Order tracking API views.

Exposes the order operations of ``FarmerServiceFacade`` via DRF.
Views never catch domain exceptions themselves: the façade returns a
``ServiceResult`` and ``result_response`` maps its error code to HTTP.
"""

from __future__ import annotations

from django.conf import settings
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.container import build_facade
from modules.core.responses import request_payload, result_response


class OrderViewSet(ViewSet):
    """Farmer order tracking.

    ``farmer_id`` is read from the query string on read paths.
    """

    lookup_value_regex = r"[A-Za-z0-9-]+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._facade = build_facade()

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/?farmer_id=&status=active|completed|all&page=&limit="""
        params = request.query_params
        result = self._facade.get_farmer_orders(
            params.get("farmer_id"),
            status=params.get("status", "all"),
            page=params.get("page", 1),
            limit=params.get("limit", settings.DEFAULT_PAGE_SIZE),
        )
        return result_response(result)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{order_id}/?farmer_id="""
        result = self._facade.get_order_details(pk, request.query_params.get("farmer_id"))
        return result_response(result)

    @action(detail=False, methods=["get"], url_path="active-count")
    def active_count(self, request: Request) -> Response:
        """GET /api/v1/orders/active-count/?farmer_id="""
        return result_response(
            self._facade.count_active_orders(request.query_params.get("farmer_id"))
        )

    @action(detail=True, methods=["post"], url_path="status")
    def transition(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{order_id}/status/

        Body: ``new_status``, ``actor`` and optional ``note``, ``hauler``,
        ``eta``, ``delay_minutes``, ``delay_reason``, ``upi_transaction_id``.
        """
        data = request_payload(request, order_id=pk)
        return result_response(self._facade.update_order_status(data))

    @action(detail=True, methods=["post"])
    def delay(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{order_id}/delay/"""
        data = request_payload(request, order_id=pk)
        return result_response(self._facade.update_order_delay(data))
