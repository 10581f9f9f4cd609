"""HTTP translation of façade results and DRF errors.

Error bodies share one shape::

    {"type": "client_error" | "server_error",
     "errors": [{"code": ..., "detail": ..., "metadata": {...}}]}
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from django.http import QueryDict
from pydantic import BaseModel
from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from modules.core.exceptions import ErrorCode
from modules.core.facade import ServiceError, ServiceResult

HTTP_STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FAILED_PRECONDITION: status.HTTP_409_CONFLICT,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def request_payload(request: Request, **extra: Any) -> Dict[str, Any]:
    """Request body as a plain dict, merged with URL-derived *extra* fields.

    Form and multipart bodies arrive as a ``QueryDict``; only the last value
    of a repeated key is kept.
    """
    data = request.data
    if isinstance(data, QueryDict):
        data = data.dict()
    elif not isinstance(data, Mapping):
        raise ParseError("Request body must be an object.")
    return {**data, **extra}


def error_body(code: str, detail: str, metadata: Optional[Dict[str, Any]] = None, *, server: bool = False) -> Dict[str, Any]:
    return {
        "type": "server_error" if server else "client_error",
        "errors": [{"code": code, "detail": detail, "metadata": metadata or {}}],
    }


def error_response(error: ServiceError) -> Response:
    http_status = HTTP_STATUS_BY_CODE[error.code]
    body = error_body(
        error.code.value,
        error.message,
        error.metadata,
        server=http_status >= status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return Response(body, status=http_status)


def result_response(result: ServiceResult, success_status: int = status.HTTP_200_OK) -> Response:
    """Render a ``ServiceResult``: the payload on success, an error body otherwise."""
    if not result.ok:
        return error_response(result.error)
    payload = result.payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    return Response(payload, status=success_status)


def exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """DRF exception handler producing the shared error shape.

    Covers authentication, permission, parse and throttling errors raised
    by DRF itself before a view reaches the façade.
    """
    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    code = getattr(exc, "default_code", "error")
    if isinstance(response.data, dict) and "detail" in response.data:
        detail = str(response.data["detail"])
        metadata: Dict[str, Any] = {}
    else:
        detail = "Invalid request."
        metadata = {"fields": response.data}
    response.data = error_body(str(code), detail, metadata)
    return response
