"""Structured logging for the PF2e character builder.

The engine only emits events; the host decides where they go. Rejected
edits (a slot that is already spent, a Treat Wounds still on cooldown)
log at debug, completed rest actions at info.

Example:
    >>> from pf2e_builder.core.logging import configure_logging_from_settings, get_logger
    >>> configure_logging_from_settings()
    >>> get_logger(__name__).info("Long rest completed", character="Valeros")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

from pf2e_builder.core.config import Settings, get_settings


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


APP_NAME = "pf2e_builder"


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every entry with the package name."""
    event_dict["app"] = APP_NAME
    return event_dict


def _renderer(json_format: bool) -> list[Processor]:
    if json_format:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(*, level: str = "INFO", json_format: bool = False) -> None:
    """Configure structlog for the engine's events.

    Entries carry the bound context, the log level, an ISO timestamp and
    the package name. Engine entries report the character's level as
    ``character_level`` so it never collides with the log level key.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        json_format: Render one JSON object per line instead of the
            console format.
    """
    threshold = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_app_context,
            *_renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from ``log_level`` and ``json_logs`` in settings."""
    config = settings if settings is not None else get_settings()
    configure_logging(level=config.log_level, json_format=config.json_logs)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to every entry logged from the current context.

    Example:
        >>> bind_context(character_id="abc123")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "APP_NAME",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
]
