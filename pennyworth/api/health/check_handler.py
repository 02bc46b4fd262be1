"""``GET /health``: liveness probe."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette import status

from pennyworth.api.handler import Handler

if TYPE_CHECKING:
    from pennyworth.api.request import Request
    from pennyworth.api.responder import Responder

PATH = "/health"


async def check(responder: Responder, request: Request) -> None:  # noqa: ARG001
    """Report that the service is up."""
    responder.respond(status.HTTP_200_OK, {"status": "ok"})


def new_check_handler() -> Handler:
    """Build the health check handler."""
    return Handler(path=PATH, methods=("GET",), func=check)
