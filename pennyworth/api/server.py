"""HTTP server: the FastAPI application and its uvicorn lifecycle.

``Server`` aggregates handlers into one application and serves it:

- Unknown paths and disallowed methods are answered with the structured
  error body (see ``middleware.error_handler``)
- Every request carries a correlation ID in its logs
- ``start`` blocks until the server is interrupted, draining in-flight
  requests for at most ``shutdown_timeout`` seconds

Middleware is executed in reverse order of registration, so the in-flight
tracker, registered last, sees every request first.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager, contextmanager
from types import FrameType
from typing import TYPE_CHECKING, Any, Final

import uvicorn
from fastapi import FastAPI

from pennyworth.api.middleware.error_handler import register_exception_handlers
from pennyworth.api.middleware.in_flight import (
    InFlightRequestsMiddleware,
    InFlightTracker,
)
from pennyworth.api.middleware.request_context import RequestContextMiddleware
from pennyworth.api.utils.responses import ORJSONResponse
from pennyworth.core.exceptions import ServerError, ShutdownTimeoutError

if TYPE_CHECKING:
    from pennyworth.api.handler import Handler
    from pennyworth.core.environment import Environment

# Route uvicorn's standard library loggers into Loguru
UVICORN_LOG_CONFIG: Final[dict[str, Any]] = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "default": {
            "class": "pennyworth.core.logging.InterceptHandler",
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.error": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
        "uvicorn.access": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
    },
}


def _raise_interrupt(signum: int, frame: FrameType | None) -> None:
    raise KeyboardInterrupt


@contextmanager
def _terminate_as_interrupt() -> Iterator[None]:
    """Treat SIGTERM like SIGINT while serving.

    uvicorn re-raises the signal that stopped it once it has shut down. With
    the default disposition SIGTERM would kill the process at that point.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


class Server:
    """The service's HTTP listener.

    Args:
        environment: Dependencies shared by every handler.
    """

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self.tracker = InFlightTracker()
        self.app = self._create_app()
        self._server: uvicorn.Server | None = None

    def _create_app(self) -> FastAPI:
        settings = self.environment.settings
        application = FastAPI(
            title=settings.app_name,
            version=settings.app_version,
            debug=settings.debug,
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
            default_response_class=ORJSONResponse,
            lifespan=self._lifespan,
        )

        # Register exception handlers BEFORE middleware
        register_exception_handlers(application, self.environment.logger)

        application.add_middleware(RequestContextMiddleware)
        application.add_middleware(InFlightRequestsMiddleware, tracker=self.tracker)
        return application

    @asynccontextmanager
    async def _lifespan(self, app_instance: FastAPI) -> AsyncGenerator[None]:
        """Verify the database on startup and release it on shutdown.

        Raises:
            RuntimeError: If database connection fails during startup.
        """
        logger = self.environment.logger
        database = self.environment.database
        if database is not None:
            is_healthy, error_msg = await database.check_connection()
            if is_healthy:
                logger.info("Database connection successful")
            else:
                logger.error("Database connection failed during startup: {}", error_msg)
                msg = f"Database connection failed: {error_msg}"
                raise RuntimeError(msg)

        logger.info(
            "Application startup complete - {} v{}",
            app_instance.title,
            app_instance.version,
        )

        yield

        logger.info("Application shutdown initiated")
        await self.environment.close()
        logger.info("Application shutdown complete")

    def register_handlers(self, *handlers: Handler) -> None:
        """Add the routes of the given handlers."""
        for handler in handlers:
            handler.add_route(self.app.router, self.environment)
            self.environment.logger.debug(
                "Registered {} {}", ",".join(handler.methods), handler.path
            )

    def _config(self) -> uvicorn.Config:
        server_config = self.environment.settings.server_config
        return uvicorn.Config(
            self.app,
            host=server_config.host,
            port=server_config.port,
            lifespan="on",
            log_config=UVICORN_LOG_CONFIG,
            timeout_keep_alive=server_config.idle_timeout,  # type: ignore[arg-type]
            timeout_graceful_shutdown=server_config.shutdown_timeout,  # type: ignore[arg-type]
        )

    def start(self) -> None:
        """Serve until interrupted.

        uvicorn stops accepting connections on SIGINT or SIGTERM and waits for
        in-flight requests before returning.

        Raises:
            ServerError: If the listener could not start or failed while
                serving.
            ShutdownTimeoutError: If requests were still running when the
                shutdown timeout expired.
        """
        server_config = self.environment.settings.server_config
        logger = self.environment.logger
        self._server = server = uvicorn.Server(self._config())

        logger.info(
            "Starting server on http://{}:{}", server_config.host, server_config.port
        )
        try:
            with _terminate_as_interrupt():
                server.run()
        except KeyboardInterrupt:
            logger.info("Server interrupted")
        except SystemExit as e:
            msg = f"server failed to start on {server_config.host}:{server_config.port}"
            raise ServerError(msg, cause=e) from e
        except OSError as e:
            msg = f"server failed: {e}"
            raise ServerError(msg, cause=e) from e
        finally:
            self._server = None

        if not server.started:
            msg = "server failed to start"
            raise ServerError(msg)

        if self.tracker.abandoned:
            raise ShutdownTimeoutError(self.tracker.abandoned)

        logger.info("Server stopped")

    def stop(self) -> None:
        """Ask a running server to begin graceful shutdown."""
        if self._server is not None:
            self._server.should_exit = True
