"""Request correlation for structured logs."""

import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """Binds a correlation id (``X-Request-ID``) to every log line of a request.

    An incoming ``X-Request-ID`` is reused so calls can be traced across
    the gateway and this service; otherwise a UUID4 is generated.  The id
    is echoed back on the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        response = self.get_response(request)

        logger.info(
            "http.request_handled",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
        )
        response[REQUEST_ID_HEADER] = cid
        return response
