"""
Shared pytest fixtures and configuration for notes-core tests.

This module provides:
- Sample entity classes covering typed and untyped attributes
- In-memory SQLite connections with a ``notes`` table
- Environment isolation for settings tests

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.
"""

import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure notes package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from notes.core.coercion import AttributeType
from notes.core.connection import SqliteConnection
from notes.core.entity import Attribute, Entity
from notes.core.settings import get_settings


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Sample Entities
# =============================================================================


class Document(Entity):
    """Identifier plus an untyped title and a few typed attributes."""

    title = Attribute()
    wordCount = Attribute(AttributeType.INTEGER)
    createdAt = Attribute(AttributeType.DATETIME)
    isPublished = Attribute(AttributeType.BOOLEAN)


class Ticket(Entity):
    """The minimal entity: identifier (integer) and title (string)."""

    title = Attribute(AttributeType.STRING)


@pytest.fixture
def document_class() -> type[Document]:
    return Document


@pytest.fixture
def ticket_class() -> type[Ticket]:
    return Ticket


# =============================================================================
# Database Fixtures
# =============================================================================


NOTES_DDL = """
    CREATE TABLE notes (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT,
        content TEXT,
        modified INTEGER,
        favorite INTEGER NOT NULL DEFAULT 0,
        category TEXT
    )
"""


@pytest.fixture
def conn() -> Generator[SqliteConnection, None, None]:
    """In-memory SQLite connection with an empty ``notes`` table."""
    c = SqliteConnection(":memory:")
    c.execute(NOTES_DDL)
    c.commit()
    yield c
    c.close()


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop NOTES_* variables and the cached settings around each test."""
    import os

    for key in list(os.environ):
        if key.startswith("NOTES_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
