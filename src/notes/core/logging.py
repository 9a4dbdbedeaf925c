"""
Notes-Core Logging - Structured logging for the entity layer.

Manifesto:
    The entity layer is fail-fast and silent on the happy path. What it
    logs (hydrations and refused values at debug, mapper writes at info)
    is structured so a log pipeline can filter on entity and attribute
    names instead of parsing prose.

    - **Quiet until asked:** importing ``notes`` leaves an application's own
      structlog setup alone, and without one only warnings get through
    - **Errors as data:** a :class:`~notes.core.errors.NotesError` passed as
      ``error=`` is rendered through its ``to_dict()``
    - **One switch:** :func:`configure_logging` picks level, format and
      service name; ``notes.core.settings`` feeds it from the environment

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="notes")
            │
            ▼
        structlog processor chain:
          1. TimeStamper (iso, optional)
          2. merge_contextvars
          3. add_log_level
          4. service metadata
          5. NotesError expansion (error= → error.to_dict())
          6. JSONRenderer, or ConsoleRenderer on a tty

        logger = get_logger(__name__)   # bound as logger_name=<name>
        logger.debug("coercion_failed", entity="Note", error=exc)

Examples:
    >>> from notes.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True, service="notes")
    >>> get_logger(__name__).info("note_saved", identifier=4)

Tags:
    logging, structlog, observability, json-logging, notes-core

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from notes.core.errors import NotesError

_SERVICE_NAME = "notes"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _expand_notes_error(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace a ``NotesError`` under ``error`` with its structured form."""
    error = event_dict.get("error")
    if isinstance(error, NotesError):
        event_dict["error"] = error.to_dict()
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "notes",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for the entity layer and its host application.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None to pick JSON
            whenever stdout is not a tty
        service: Value of the ``service.name`` key on every event
        add_timestamp: Stamp events with an ISO timestamp
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        _add_service_metadata,
        _expand_notes_error,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger, with *name* bound under ``logger_name``.

    The logger stays a lazy proxy: it picks up whatever configuration is
    active when it first logs, not the one active at import.
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


def _quiet_by_default() -> None:
    """Drop debug and info events until the application configures logging."""
    if not structlog.is_configured():
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))


_quiet_by_default()


__all__ = [
    "configure_logging",
    "get_logger",
]
