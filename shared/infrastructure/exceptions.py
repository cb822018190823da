"""Project-wide DRF exception handler.

Every error leaving the API uses the same envelope::

    {"success": false, "message": "<first readable error>", "errors": {...}}

so clients can always show ``message`` and still inspect field errors.
"""

from __future__ import annotations

import logging
from typing import Any

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

logger = logging.getLogger(__name__)


def _first_message(data: Any) -> str:
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        for value in data.values():
            return _first_message(value)
        return ""
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ""
    return str(data)


def api_exception_handler(exc, context):  # type: ignore
    response = exception_handler(exc, context)
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if response is None:
        logger.error(f"Unhandled error in {view_name}: {exc}", exc_info=exc)
        return Response(
            {"success": False, "message": "Internal Server Error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data = response.data
    body: dict[str, Any] = {"success": False, "message": _first_message(data)}
    if isinstance(data, dict) and set(data) != {"detail"}:
        body["errors"] = data
    elif isinstance(data, list):
        body["errors"] = data
    response.data = body

    if response.status_code >= 500:
        logger.error(f"{view_name} failed with {response.status_code}: {body['message']}")
    return response
