"""Structured logging built on Loguru.

Loguru keeps a single process-wide set of sinks, configured once by
``setup_logging`` at the composition root. Components never import the global
``logger`` to log request work; they receive a bound logger from the
``Environment`` so that tests can capture one environment's records in
isolation.

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: One JSON object per line (containers and log shippers)

Standard library logging (uvicorn, SQLAlchemy, alembic) is routed into Loguru
through ``InterceptHandler``.
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Final, cast

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

    from pennyworth.core.config import Settings

CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100
REDACTED: Final[str] = "[REDACTED]"

PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "method",
    "path",
    "status_code",
)


def _escape(value: object) -> str:
    """Escape braces and markup so Loguru prints the value verbatim."""
    return str(value).replace("{", "{{").replace("}", "}}").replace("<", r"\<")


def _format_extra_field(key: str, value: object, sensitive: Iterable[str]) -> str:
    """Format an extra field for display, redacting sensitive values.

    Args:
        key: The field name.
        value: The field value.
        sensitive: Field names whose values must not be printed.

    Returns:
        str: ``key=value`` ready for inclusion in the console line.
    """
    str_value = str(value)
    if key in sensitive:
        str_value = REDACTED
    elif len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def console_formatter(sensitive_fields: Iterable[str]) -> Callable[[Record], str]:
    """Build a console formatter that shows every bound context field.

    Args:
        sensitive_fields: Field names to redact.

    Returns:
        Callable[[Record], str]: Loguru format function.
    """
    sensitive = frozenset(sensitive_fields)

    def _format(record: Record) -> str:
        parts = [
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
            "<level>{level: <8}</level>",
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
        ]

        extra = record["extra"]
        context = []
        for field in PRIORITY_FIELDS:
            value = extra.get(field)
            if value is None:
                continue
            if field == "correlation_id":
                value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
            context.append(f"[<yellow>{_escape(value)}</yellow>]")
        for key, value in extra.items():
            if key in PRIORITY_FIELDS or key.startswith("_") or value is None:
                continue
            context.append(f"[<dim>{_format_extra_field(key, value, sensitive)}</dim>]")
        if context:
            parts.append(" ".join(context))

        parts.append(_escape(record["message"]))
        line = " | ".join(parts) + "\n"
        if record["exception"]:
            line += "{exception}"
        return line

    return _format


def serialize_for_json(record: Record, sensitive_fields: Iterable[str] = ()) -> str:
    """Format log record as a single JSON line.

    Args:
        record: Loguru record to format.
        sensitive_fields: Field names to redact.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    sensitive = set(sensitive_fields)
    for key, value in record["extra"].items():
        if key.startswith("_"):
            continue
        log_entry[key] = REDACTED if key in sensitive else value

    if exc := record["exception"]:
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru.

    This handler captures logs from libraries using standard logging
    and forwards them to Loguru for consistent formatting.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: Settings) -> Logger:
    """Configure Loguru sinks and return the service logger.

    Args:
        settings: Application settings containing log configuration.

    Returns:
        Logger: A logger bound with the service name, to be handed to the
            components that need one.
    """
    log_config = settings.log_config
    sensitive_fields = tuple(log_config.sensitive_fields)

    logger.remove()

    if log_config.log_formatter_type == "json":

        def structured_sink(message: object) -> None:
            """Write each record as one JSON line."""
            record = cast("Any", message).record
            sys.stdout.write(serialize_for_json(record, sensitive_fields))
            sys.stdout.flush()

        logger.add(
            structured_sink,
            level=log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", console_formatter(sensitive_fields)),
            level=log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    service_logger = logger.bind(service=settings.app_name)
    service_logger.info(
        "Logging configured with {} formatter",
        log_config.log_formatter_type,
        log_level=log_config.log_level,
    )
    return service_logger
