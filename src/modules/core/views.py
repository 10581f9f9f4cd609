"""Operational endpoints of the core module."""

from __future__ import annotations

import structlog
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.container import build_facade
from modules.core.responses import result_response

logger = structlog.get_logger(__name__)


class ExpirySweepView(APIView):
    """POST /internal/matches/expire/

    Runs one expiry sweep on demand, the same operation Celery beat
    triggers on its schedule.  Returns ``{"expired": <count>}``.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._facade = build_facade()

    def post(self, request: Request) -> Response:
        result = self._facade.expire_matches()
        if result.ok:
            logger.info("match.manual_sweep", expired=result.payload["expired"])
        return result_response(result, success_status=status.HTTP_200_OK)
