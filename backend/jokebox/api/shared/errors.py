"""Shared error handling for API endpoints.

Maps service exceptions onto the JSON error bodies clients expect. Internal
detail is echoed only when the application runs in development mode.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from jokebox.core.config import get_settings
from jokebox.models.jokes import ErrorBody
from jokebox.services.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


def error_response(
    status_code: int, error: str, message: str, exc: Exception | None = None
) -> JSONResponse:
    """Build a JSON error response.

    Args:
        status_code: HTTP status to return.
        error: Short error title.
        message: Human-readable guidance for the client.
        exc: Underlying exception, exposed as ``details`` in development.

    Returns:
        A JSONResponse with ``error``/``message`` and optional ``details``.
    """
    body = ErrorBody(error=error, message=message)
    if exc is not None and get_settings().is_development:
        body.details = str(exc)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )


async def service_unavailable_handler(
    request: Request, exc: ServiceUnavailableError
) -> JSONResponse:
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Service temporarily unavailable",
        "Please try again later",
        exc,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Server error while handling %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "Please try again later",
        exc,
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on the application."""
    app.add_exception_handler(ServiceUnavailableError, service_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["error_response", "install_exception_handlers"]
