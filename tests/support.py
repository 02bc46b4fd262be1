"""Helpers shared by the test suites."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from httpx import AsyncClient

if TYPE_CHECKING:
    from loguru import Logger, Record

type ClientFactory = Callable[..., AbstractAsyncContextManager[AsyncClient]]


@dataclass
class LogCapture:
    """Records emitted through ``logger``."""

    logger: Logger
    records: list[Record] = field(default_factory=list)

    def messages(self, level: str | None = None) -> list[str]:
        """Return the messages, optionally only those of one level."""
        return [
            record["message"]
            for record in self.records
            if level is None or record["level"].name == level
        ]
