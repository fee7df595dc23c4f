# clinic_core/common/api/exceptions.py
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Request failed."

# first match wins; order subclasses before their bases
ERROR_CODES: tuple[tuple[type, str], ...] = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (PermissionDenied, "permission_denied"),
    (Http404, "not_found"),
    (NotFound, "not_found"),
)


class Forbidden(PermissionDenied):
    """
    Authenticated, but the permission check said no.
    The detail is the denial reason produced by the evaluator.
    """
    default_detail = "Access denied"

    def __init__(self, reason: str | None = None):
        super().__init__(detail=reason or self.default_detail)


def ensure_request_id(request) -> str:
    """
    Request id shared by the API envelope and the access-denied page.
    Generated on first use and pinned on the request.
    """
    if request is None:
        return uuid.uuid4().hex
    rid = getattr(request, "request_id", None)
    if not rid:
        rid = uuid.uuid4().hex
        request.request_id = rid
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": ensure_request_id(request),
        }
    }


def error_code_for(exc: Exception, http_status: int) -> str:
    for exc_type, code in ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, APIException):
        return exc.default_code or "api_error"
    return "server_error" if http_status >= 500 else "error"


def split_detail(data: Any) -> tuple[str, Any]:
    """
    DRF error payload -> (message, details).

    {"detail": "..."} keeps the detail as the message and any sibling keys as
    details; field-error payloads become details under a generic message.
    """
    if not isinstance(data, dict) or "detail" not in data:
        return GENERIC_MESSAGE, data
    rest = {k: v for k, v in data.items() if k != "detail"}
    return str(data["detail"]), rest or None


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        envelope = build_error_envelope(request=request, code="server_error", message="Unexpected server error.")
        return Response(envelope, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    message, details = split_detail(response.data)
    envelope = build_error_envelope(
        request=request,
        code=error_code_for(exc, response.status_code),
        message=message,
        details=details,
    )
    return Response(envelope, status=response.status_code, headers=response.headers)
