"""Route handlers and the panic-recovery boundary.

A ``Handler`` ties a path and its methods to a service function. Service
functions receive a ``Responder`` and a ``Request`` and communicate their
outcome only through the responder.

Registration wraps the function with the handler's own middleware and then,
always outermost, with ``recover_panic_middleware``. Any ``Exception`` that
escapes a service function is caught there, logged once and turned into an
empty 500 response, so one failing request never affects another.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from starlette import status as http_status
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response

from pennyworth.api.request import Request
from pennyworth.api.responder import Responder
from pennyworth.core.exceptions import Panic

if TYPE_CHECKING:
    from loguru import Logger
    from starlette.routing import Router

    from pennyworth.core.environment import Environment

type ServiceFunc = Callable[[Responder, Request], Awaitable[None]]
type Middleware = Callable[[ServiceFunc], ServiceFunc]

ERR_UNKNOWN = "unknown error"


def describe_panic(value: object) -> str:
    """Return the text logged for a recovered panic payload.

    Args:
        value: The payload of a ``Panic`` or the exception that escaped.

    Returns:
        str: Strings verbatim, exceptions as their message, ``ERR_UNKNOWN``
            for anything else.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, BaseException):
        return str(value)
    return ERR_UNKNOWN


def recover_panic_middleware(next_func: ServiceFunc, logger: Logger) -> ServiceFunc:
    """Wrap a service function so that failures become a logged 500.

    Args:
        next_func: The service function to protect.
        logger: Logger receiving the single error entry per failure.

    Returns:
        ServiceFunc: The protected service function.
    """

    async def recover(responder: Responder, request: Request) -> None:
        try:
            await next_func(responder, request)
        except Exception as exc:
            value = exc.value if isinstance(exc, Panic) else exc
            logger.opt(exception=exc).error(
                "application panicked: {error}",
                error=describe_panic(value),
                method=request.method,
                path=request.path,
            )
            responder.reset()
            responder.write_header(http_status.HTTP_500_INTERNAL_SERVER_ERROR)

    return recover


@dataclass(frozen=True)
class Handler:
    """A service function bound to a route.

    Attributes:
        path: Route path, with Starlette path parameters if any.
        methods: HTTP methods the route accepts.
        func: The service function.
        middleware: Optional transform applied to ``func`` before panic
            recovery.
    """

    path: str
    methods: Sequence[str]
    func: ServiceFunc
    middleware: Middleware | None = None

    def add_route(self, router: Router, environment: Environment) -> None:
        """Register the handler on a router.

        Args:
            router: Router receiving the route.
            environment: Dependencies handed to each request's responder.
        """
        func = self.func
        if self.middleware is not None:
            func = self.middleware(func)
        func = recover_panic_middleware(func, environment.logger)

        async def endpoint(request: StarletteRequest) -> Response:
            responder = Responder(environment.logger)
            await func(responder, Request(request))
            return responder.to_response()

        router.add_route(self.path, endpoint, methods=list(self.methods))
