"""Default responses for requests no handler accepted.

Starlette raises ``HTTPException`` when no route matches the path (404) or
the path matches but not the method (405). These are answered through the
same ``Responder`` contract as ordinary handlers so that every error body has
one shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from starlette.exceptions import HTTPException

from pennyworth.api.responder import Responder
from pennyworth.api.schemas.errors import ErrorDetail, ErrorResponse

if TYPE_CHECKING:
    from loguru import Logger
    from starlette.responses import Response

NOT_FOUND_MESSAGE = "resource not found"


def http_exception_message(request: Request, exc: HTTPException) -> str:
    """Return the client-facing message for a Starlette HTTP exception."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return NOT_FOUND_MESSAGE
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return f"method {request.method} is not allowed"
    return str(exc.detail)


def register_exception_handlers(app: FastAPI, logger: Logger) -> None:
    """Register the default HTTP exception handler with the application.

    Args:
        app: The FastAPI application instance.
        logger: Logger handed to the responder.
    """

    async def http_exception_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, HTTPException):
            msg = f"Expected HTTPException, got {type(exc).__name__}"
            raise TypeError(msg)

        responder = Responder(logger)
        body = ErrorResponse(
            error=ErrorDetail(message=http_exception_message(request, exc))
        )
        responder.respond(exc.status_code, body.to_content())
        for name, value in (exc.headers or {}).items():
            responder.set_header(name, value)
        return responder.to_response()

    app.add_exception_handler(HTTPException, http_exception_handler)
