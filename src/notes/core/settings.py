"""Settings for notes-core.

``NotesSettings`` holds the few knobs the entity layer and its persistence
collaborator read: logging level and format, the service name stamped on
every log line, and the database URL handed to
:func:`~notes.core.connection.create_connection`.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first use
    - **Environment-driven:** Reads ``NOTES_*`` env vars and ``.env`` files
    - **Sensible defaults:** In-memory SQLite, INFO logging, auto format

Examples:
    >>> from notes.core.settings import NotesSettings
    >>> NotesSettings(log_level="debug").log_level
    'DEBUG'

Tags:
    settings, configuration, pydantic, environment, notes-core

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from notes.core.logging import configure_logging

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class NotesSettings(BaseSettings):
    """Settings for the notes entity layer.

    Fields
    ──────
    log_level    : Structlog log level
    log_json     : JSON logs (True), console logs (False), auto-detect (None)
    service_name : Value of ``service.name`` on every log line
    database_url : URL, path, or ``memory`` for the mapper's connection
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "notes"

    # ── Storage ──────────────────────────────────────────────────
    database_url: str = Field(
        default="memory",
        description="Database URL, SQLite file path, or 'memory'",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> NotesSettings:
    """Return the process-wide settings, loaded once."""
    return NotesSettings()


def configure_logging_from_settings(settings: NotesSettings | None = None) -> None:
    """Apply the logging section of *settings* (defaults to :func:`get_settings`)."""
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service=settings.service_name,
    )


__all__ = [
    "NotesSettings",
    "get_settings",
    "configure_logging_from_settings",
]
