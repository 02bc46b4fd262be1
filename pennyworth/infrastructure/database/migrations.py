"""Schema migrations with alembic."""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING

from alembic import command
from alembic.config import Config

if TYPE_CHECKING:
    from loguru import Logger

    from pennyworth.core.config import Settings

PROJECT_ROOT = Path(__file__).resolve().parents[3]
ALEMBIC_INI = PROJECT_ROOT / "alembic.ini"


def alembic_config(settings: Settings) -> Config:
    """Build the alembic configuration pointing at the configured database."""
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option(
        "sqlalchemy.url",
        settings.database_config.database_url.replace("%", "%%"),
    )
    return config


def run_migrations(settings: Settings, logger: Logger) -> None:
    """Upgrade the database to the latest revision.

    Must be called outside a running event loop; the alembic environment
    drives its own.
    """
    start = time.perf_counter()
    logger.info("Migrations started")

    command.upgrade(alembic_config(settings), "head")

    logger.info("Migrations finished after {:.2f}s", time.perf_counter() - start)
