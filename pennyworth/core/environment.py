"""Composition root shared by the server, the CLI and the tests.

An ``Environment`` owns everything a request handler may depend on: the
settings, a bound logger and the database pool. It is built once and passed
down explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pennyworth.core.config import Settings, get_settings
from pennyworth.core.logging import setup_logging
from pennyworth.infrastructure.database.session import Database

if TYPE_CHECKING:
    from loguru import Logger


@dataclass
class Environment:
    """Dependencies of the running service.

    Attributes:
        settings: Application settings.
        logger: Logger every component logs through.
        database: Database pool, or None when running without storage.
    """

    settings: Settings
    logger: Logger
    database: Database | None = None

    async def close(self) -> None:
        """Release the resources owned by the environment."""
        if self.database is not None:
            await self.database.close()
            self.database = None


def create_default_environment(settings: Settings | None = None) -> Environment:
    """Build the environment used in production.

    Args:
        settings: Optional settings instance. If not provided, will use
            get_settings().

    Returns:
        Environment: Environment with logging configured and a database pool.
    """
    if settings is None:
        settings = get_settings()

    logger = setup_logging(settings)
    database = Database.connect(settings.database_config, logger)
    return Environment(settings=settings, logger=logger, database=database)
