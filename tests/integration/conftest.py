"""Shared fixtures for integration tests.

These tests need a PostgreSQL server reachable at the configured
``DATABASE_CONFIG__DATABASE_URL``. They are skipped when none is available.
"""

from collections.abc import AsyncGenerator

import pytest
from loguru import logger

from pennyworth.core.config import get_settings
from pennyworth.infrastructure.database.base import Base
from pennyworth.infrastructure.database.session import Database


@pytest.fixture
async def database() -> AsyncGenerator[Database]:
    """Provide a database with an empty schema.

    Tables are created before the test and dropped afterwards.
    """
    settings = get_settings()
    db = Database.connect(settings.database_config, logger)

    is_healthy, error_msg = await db.check_connection()
    if not is_healthy:
        await db.close()
        pytest.skip(f"PostgreSQL is not reachable: {error_msg}")

    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield db

    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await db.close()
