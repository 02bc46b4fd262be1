"""Shared fixtures for unit tests."""

import uuid
from collections.abc import AsyncGenerator, Generator
from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient
from loguru import logger

from pennyworth.api.handler import Handler
from pennyworth.api.server import Server
from pennyworth.core.config import LogConfig, SecurityConfig, Settings
from pennyworth.core.environment import Environment
from tests.support import ClientFactory, LogCapture


@pytest.fixture
def test_settings() -> Settings:
    """Provide settings with cheap password hashing.

    Returns:
        Settings: Development settings with the minimum bcrypt cost.
    """
    return Settings(
        app_name="TestApp",
        app_version="1.0.0",
        environment="development",
        log_config=LogConfig(log_formatter_type="console"),
        security_config=SecurityConfig(password_hash_rounds=4),
    )


@pytest.fixture
def log_capture() -> Generator[LogCapture]:
    """Capture the records of a logger private to the current test.

    The logger is bound to a unique id and a sink filtered on that id collects
    its records, so tests never observe each other's logs.
    """
    capture_id = uuid.uuid4().hex
    capture = LogCapture(logger=logger.bind(capture_id=capture_id))

    sink_id = logger.add(
        lambda message: capture.records.append(message.record),
        level="DEBUG",
        filter=lambda record: record["extra"].get("capture_id") == capture_id,
        format="{message}",
    )
    yield capture
    logger.remove(sink_id)


@pytest.fixture
def environment(test_settings: Settings, log_capture: LogCapture) -> Environment:
    """Provide an environment without a database, logging to the capture."""
    return Environment(settings=test_settings, logger=log_capture.logger)


@pytest.fixture
def make_client(environment: Environment) -> ClientFactory:
    """Provide a factory for HTTP clients talking to a server in memory.

    Returns:
        ClientFactory: Called with handlers, yields an ``AsyncClient`` for a
            server with those handlers registered.
    """

    @asynccontextmanager
    async def _make_client(*handlers: Handler) -> AsyncGenerator[AsyncClient]:
        server = Server(environment)
        server.register_handlers(*handlers)
        transport = ASGITransport(app=server.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    return _make_client
