"""Standardized error responses for the REST API.

Every error body has the same shape::

    {"type": "<kind>", "errors": [{"code": "...", "detail": "...", ...}]}

``error_response`` is used by views when translating domain exceptions;
``standard_exception_handler`` is installed as DRF's ``EXCEPTION_HANDLER``
so framework errors (validation, auth, throttling) and database failures
come out in the same format.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core.exceptions import (
    DomainConflict,
    DomainError,
    DomainNotFound,
    DomainValidationError,
)

logger = structlog.get_logger(__name__)

_DOMAIN_STATUS = (
    (DomainNotFound, status.HTTP_404_NOT_FOUND),
    (DomainConflict, status.HTTP_409_CONFLICT),
    (DomainValidationError, status.HTTP_400_BAD_REQUEST),
)


def error_body(kind: str, errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": kind, "errors": errors}


def error_response(exc: DomainError, http_status: Optional[int] = None) -> Response:
    """Translate a domain exception into a standard error ``Response``."""
    if http_status is None:
        http_status = _status_for(exc)
    error = {"code": exc.code, "detail": str(exc), **exc.details}
    return Response(error_body(exc.kind, [error]), status=http_status)


def _status_for(exc: DomainError) -> int:
    for base, http_status in _DOMAIN_STATUS:
        if isinstance(exc, base):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def _flatten_validation(detail: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    """Flatten DRF's nested ``get_full_details()`` output into a list."""
    if isinstance(detail, dict) and {"message", "code"} <= set(detail):
        error: Dict[str, Any] = {"code": detail["code"], "detail": str(detail["message"])}
        if attr:
            error["attr"] = attr
        return [error]
    if isinstance(detail, dict):
        errors: List[Dict[str, Any]] = []
        for key, value in detail.items():
            child = key if attr is None else f"{attr}.{key}"
            errors.extend(_flatten_validation(value, child))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, value in enumerate(detail):
            # Lists of plain errors share the parent attr; nested serializers
            # (e.g. ``items``) get an index.
            if isinstance(value, dict) and {"message", "code"} <= set(value):
                errors.extend(_flatten_validation(value, attr))
            else:
                child = str(index) if attr is None else f"{attr}.{index}"
                errors.extend(_flatten_validation(value, child))
        return errors
    return [{"code": "invalid", "detail": str(detail), **({"attr": attr} if attr else {})}]


def standard_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """DRF exception handler producing the standard error body."""
    if isinstance(exc, DomainError):
        return error_response(exc)

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.error(
            "api.database_error",
            view=type(view).__name__ if view else None,
            error=str(exc),
        )
        return Response(
            error_body(
                "internal_error",
                [
                    {
                        "code": "store_unavailable",
                        "detail": "The order store is temporarily unavailable.",
                        "retryable": True,
                    }
                ],
            ),
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        response.data = error_body(
            "validation_error", _flatten_validation(exc.get_full_details())
        )
    elif isinstance(exc, APIException):
        kind = "client_error" if response.status_code < 500 else "server_error"
        response.data = error_body(kind, _flatten_validation(exc.get_full_details()))
    return response
