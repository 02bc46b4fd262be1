"""Accounting of requests in flight, used to report graceful shutdown.

uvicorn drains open requests on shutdown and cancels those still running when
``timeout_graceful_shutdown`` expires. This middleware counts such cancelled
requests so the server can report that the shutdown was not clean.
"""

import asyncio
from dataclasses import dataclass

from starlette.types import ASGIApp, Receive, Scope, Send


@dataclass
class InFlightTracker:
    """Counters shared between the middleware and the server.

    Attributes:
        active: Requests currently being processed.
        abandoned: Requests cancelled before they completed.
    """

    active: int = 0
    abandoned: int = 0


class InFlightRequestsMiddleware:
    """Pure ASGI middleware updating an ``InFlightTracker``.

    Args:
        app: The wrapped application.
        tracker: Counters to update.
    """

    def __init__(self, app: ASGIApp, tracker: InFlightTracker) -> None:
        self.app = app
        self.tracker = tracker

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Count the request while the wrapped application runs."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        self.tracker.active += 1
        try:
            await self.app(scope, receive, send)
        except asyncio.CancelledError:
            self.tracker.abandoned += 1
            raise
        finally:
            self.tracker.active -= 1
