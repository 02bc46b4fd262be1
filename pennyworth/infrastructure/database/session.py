"""Async database engine and session lifecycle management.

``Database`` owns one SQLAlchemy async engine (and therefore one connection
pool) plus its session factory. It is created by the composition root and
passed to whatever needs storage; there is no module-level engine.

Core functionality:
- **Connection pooling**: Configurable pool with overflow and recycling
- **Session scope**: Commit on success, rollback on error
- **Health checks**: Database connectivity validation for startup
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

if TYPE_CHECKING:
    from loguru import Logger

    from pennyworth.core.config import DatabaseConfig

POOL_RECYCLE_SECONDS = 3600  # 1 hour
COMMAND_TIMEOUT_SECONDS = 60


def create_database_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine with connection pooling.

    Args:
        config: Database configuration.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    return create_async_engine(
        config.database_url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_pre_ping=config.pool_pre_ping,
        echo=config.echo,
        pool_recycle=POOL_RECYCLE_SECONDS,
        connect_args={
            "server_settings": {"jit": "off"},
            "command_timeout": COMMAND_TIMEOUT_SECONDS,
        },
    )


class Database:
    """Connection pool and session factory for one PostgreSQL database.

    Args:
        engine: The async engine to use.
        logger: Logger for lifecycle events.
    """

    def __init__(self, engine: AsyncEngine, logger: Logger) -> None:
        self.engine = engine
        self._logger = logger
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def connect(cls, config: DatabaseConfig, logger: Logger) -> Database:
        """Create a Database from configuration.

        The pool connects lazily; call ``check_connection`` to verify the
        server is reachable.
        """
        engine = create_database_engine(config)
        logger.info(
            "Created database engine - pool_size: {}, max_overflow: {}",
            config.pool_size,
            config.max_overflow,
        )
        return cls(engine, logger)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Get an async database session with automatic cleanup.

        Yields:
            AsyncGenerator[AsyncSession]: Database session for performing
                operations, committed on success and rolled back on error.

        Example:
            async with database.session() as session:
                session.add(row)
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                self._logger.debug("Database session rolled back due to error")
                raise

    async def check_connection(self) -> tuple[bool, str | None]:
        """Check if the database is reachable.

        Returns:
            tuple[bool, str | None]: Whether the connection succeeded and the
                error message if it did not.
        """
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                _ = result.scalar()
        except (SQLAlchemyError, OSError) as e:
            return False, str(e)
        else:
            return True, None

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        await self.engine.dispose()
        self._logger.info("Database engine disposed")
