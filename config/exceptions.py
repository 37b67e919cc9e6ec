"""Project-wide DRF exception handler.

Every error leaving the API is shaped as::

    {"success": false, "message": "...", "errors": {...}}

so that clients can rely on a single envelope regardless of which app
raised the error.
"""

from __future__ import annotations

import logging
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException, ValidationError  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

logger = logging.getLogger("apps.api")


class BadRequest(APIException):
    """A request that breaks a business rule; the message is shown to the client."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request."
    default_code = "bad_request"


def _first_message(detail: Any) -> str:
    if isinstance(detail, dict):
        if "detail" in detail:
            return _first_message(detail["detail"])
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(getattr(exc, "message_dict", None) or exc.messages)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s: %s",
            view.__class__.__name__ if view else "unknown view",
            exc,
            exc_info=True,
        )
        return Response(
            {"success": False, "message": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data = response.data
    body: dict[str, Any] = {"success": False, "message": _first_message(data)}
    if isinstance(data, dict):
        errors = {key: value for key, value in data.items() if key != "detail"}
        if errors:
            body["errors"] = errors
    elif isinstance(data, list):
        body["errors"] = data
    response.data = body
    return response
