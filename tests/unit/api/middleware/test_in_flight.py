"""Unit tests for in-flight request accounting."""

import asyncio

import pytest
from starlette.types import Receive, Scope, Send

from pennyworth.api.middleware.in_flight import (
    InFlightRequestsMiddleware,
    InFlightTracker,
)

HTTP_SCOPE: Scope = {"type": "http", "method": "GET", "path": "/"}


async def receive() -> dict[str, object]:
    """Return an empty request body."""
    return {"type": "http.request", "body": b"", "more_body": False}


async def send(message: object) -> None:
    """Discard response messages."""


@pytest.mark.unit
class TestInFlightRequestsMiddleware:
    """Test suite for InFlightRequestsMiddleware."""

    async def test_counts_active_requests(self) -> None:
        """Test a request is counted while it runs."""
        tracker = InFlightTracker()
        seen: list[int] = []

        async def app(scope: Scope, receive: Receive, send: Send) -> None:
            seen.append(tracker.active)

        await InFlightRequestsMiddleware(app, tracker)(HTTP_SCOPE, receive, send)

        assert seen == [1]
        assert tracker.active == 0
        assert tracker.abandoned == 0

    async def test_counts_cancelled_requests(self) -> None:
        """Test a request cancelled at shutdown is counted as abandoned."""
        tracker = InFlightTracker()
        started = asyncio.Event()

        async def slow_app(scope: Scope, receive: Receive, send: Send) -> None:
            started.set()
            await asyncio.Event().wait()

        middleware = InFlightRequestsMiddleware(slow_app, tracker)
        task = asyncio.create_task(middleware(HTTP_SCOPE, receive, send))
        await started.wait()

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert tracker.abandoned == 1
        assert tracker.active == 0

    async def test_failures_are_not_abandoned(self) -> None:
        """Test application errors do not count as abandoned requests."""
        tracker = InFlightTracker()

        async def failing_app(scope: Scope, receive: Receive, send: Send) -> None:
            msg = "boom"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError):
            await InFlightRequestsMiddleware(failing_app, tracker)(
                HTTP_SCOPE, receive, send
            )

        assert tracker.abandoned == 0
        assert tracker.active == 0

    async def test_ignores_lifespan(self) -> None:
        """Test non-HTTP scopes pass through uncounted."""
        tracker = InFlightTracker()
        seen: list[int] = []

        async def app(scope: Scope, receive: Receive, send: Send) -> None:
            seen.append(tracker.active)

        await InFlightRequestsMiddleware(app, tracker)(
            {"type": "lifespan"}, receive, send
        )

        assert seen == [0]
