from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import (
    MethodNotAllowed,
    NotFound,
    ParseError,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.api.utils import error_response
from apps.common import get_logger
from apps.common import i18n
from apps.common.http import RemoteServiceError

logger = get_logger(__name__).bind(component="api", layer="exception")

STATUS_CODE_DEFAULTS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("VALIDATION_ERROR", "Validation failed"),
    status.HTTP_401_UNAUTHORIZED: ("UNAUTHORIZED", "Authentication required"),
    status.HTTP_404_NOT_FOUND: ("NOT_FOUND", "Resource not found"),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", "Method not allowed"),
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: (
        "UNSUPPORTED_MEDIA_TYPE",
        "Unsupported media type",
    ),
}


def global_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    DRF exception handler that renders every failure in the error envelope.

    Remote service failures that escape a view become 503 responses; anything
    DRF does not recognise is logged with its traceback and rendered as a
    generic 500 so internals never reach the client.
    """

    bound_logger = _bind_logger(context)

    if isinstance(exc, RemoteServiceError):
        bound_logger.warning(
            "Remote service failure reached the API layer",
            service=exc.service,
            status=exc.status_code,
        )
        return error_response(
            "SERVICE_UNAVAILABLE",
            f"{exc.service} is unavailable",
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(
            exc.message_dict if hasattr(exc, "message_dict") else list(exc.messages)
        )

    response = drf_exception_handler(exc, context)
    if response is not None:
        code, message, details = _normalize_payload(exc, response.data, response.status_code)
        bound_logger.info("Converted API exception", code=code, status=response.status_code)
        return error_response(code, message, details, http_status=response.status_code)

    bound_logger.exception("Unhandled exception bubbled to global handler")
    return error_response(
        "SERVER_ERROR",
        str(i18n.SOMETHING_WENT_WRONG),
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _bind_logger(context: Dict[str, Any]):
    log = logger
    view = context.get("view")
    request = context.get("request")
    if view:
        log = log.bind(view=type(view).__name__)
    if request is not None:
        log = log.bind(
            method=getattr(request, "method", None),
            path=getattr(request, "path", None),
        )
    return log


def _normalize_payload(
    exc: Exception, payload: Any, status_code: int
) -> Tuple[str, str, Optional[Any]]:
    if isinstance(exc, ValidationError):
        return "VALIDATION_ERROR", "Validation failed", payload
    if isinstance(exc, ParseError):
        return "VALIDATION_ERROR", _extract_message(payload, "Malformed request"), None
    if isinstance(exc, NotFound):
        return "NOT_FOUND", _extract_message(payload, "Resource not found"), None
    if isinstance(exc, MethodNotAllowed):
        return "METHOD_NOT_ALLOWED", _extract_message(payload, "Method not allowed"), None
    code, default_message = STATUS_CODE_DEFAULTS.get(
        status_code,
        (
            "SERVER_ERROR" if status_code >= 500 else "REQUEST_FAILED",
            "Request failed",
        ),
    )
    if status_code >= 500:
        return code, str(i18n.SOMETHING_WENT_WRONG), None
    return code, _extract_message(payload, default_message), None


def _extract_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, str):
            return detail
    return fallback


__all__ = ["global_exception_handler"]
