"""
structlog setup for cartwatch.

Every event is one JSON object: event_type, level, ISO-8601 UTC timestamp,
the emitting module under "logger", and whatever is bound in contextvars.
The scheduler binds tick and user_id there for each user's pipeline run, so
events from the clients, enricher and decision engine carry them too.

Level and format come from Settings (LOG_LEVEL, LOG_FORMAT) through
configure_logging(); entrypoints call it once settings are loaded. Until
then the defaults below apply.

Only structlog and stdlib are imported at module level; cartwatch modules
import this one, so it must not import them back.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog._config import BoundLoggerLazyProxy

if TYPE_CHECKING:
    from cartwatch.config.settings import Settings

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"
LOG_FORMATS = ("json", "console")


def build_processors(log_format: str = DEFAULT_LOG_FORMAT) -> list[Any]:
    """Processor chain ending in the renderer for log_format."""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"unknown log format: {log_format!r}")
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if log_format == "json":
        processors.append(structlog.processors.EventRenamer("event_type"))
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_structlog(
    log_format: str = DEFAULT_LOG_FORMAT,
    level: str = DEFAULT_LOG_LEVEL,
) -> None:
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        raise ValueError(f"unknown log level: {level!r}")
    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: Settings) -> None:
    """Apply LOG_LEVEL / LOG_FORMAT from settings."""
    configure_structlog(settings.log_format, settings.log_level)


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """
    Module logger; stays lazy until its first event so configure_logging()
    still applies to loggers created at import time.

        logger = get_logger(__name__)
        logger.info("discount_offer_sent", percentage=15)
    """
    return BoundLoggerLazyProxy(None, initial_values={"logger": name}, logger_factory_args=(name,))
