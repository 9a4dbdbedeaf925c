"""Tests for notes.core.mapper."""

from __future__ import annotations

import sqlite3

import pytest

from notes.core.connection import SqliteConnection
from notes.core.dialect import POSTGRESQL
from notes.core.errors import (
    EntityAttributeError,
    EntityNotFoundError,
    IdentifierChangedError,
    MultipleEntitiesReturnedError,
    UnpersistedEntityError,
)
from notes.core.mapper import EntityMapper
from notes.core.models import Note

pytestmark = pytest.mark.integration


@pytest.fixture
def mapper(conn: SqliteConnection) -> EntityMapper[Note]:
    return EntityMapper(conn, Note, "notes")


def _row(conn: SqliteConnection, identifier: int) -> dict:
    return dict(conn.execute("SELECT * FROM notes WHERE id = ?", (identifier,)).fetchone())


def _count(conn: SqliteConnection) -> int:
    return conn.execute("SELECT COUNT(*) FROM notes").fetchone()[0]


class RecordingConnection:
    """Connection double that records statements and acts as its own cursor."""

    def __init__(self, rows: list | None = None) -> None:
        self.statements: list[tuple[str, tuple]] = []
        self.rows = rows or []
        self.commits = 0
        self.rollbacks = 0
        self.description = [("id",)]
        self.lastrowid = None

    def execute(self, sql: str, params: tuple = ()) -> RecordingConnection:
        self.statements.append((sql, params))
        return self

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self) -> list:
        return list(self.rows)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class TestInsert:
    def test_assigns_identifier(self, mapper: EntityMapper[Note]) -> None:
        note = mapper.insert(Note.from_params({"title": "Draft", "content": "body"}))
        assert note.identifier == 1
        assert note.persisted_identifier == 1
        assert note.get_updated_fields() == set()

    def test_writes_only_updated_columns(self, mapper, conn) -> None:
        note = mapper.insert(Note.from_params({"title": "Draft"}))
        row = _row(conn, note.identifier)
        assert row["title"] == "Draft"
        assert row["content"] is None
        assert row["favorite"] == 0

    def test_clean_entity_uses_default_values(self, mapper, conn) -> None:
        note = mapper.insert(Note.from_params({}))
        assert note.identifier == 1
        assert _row(conn, 1)["title"] is None

    def test_explicit_identifier(self, mapper, conn) -> None:
        note = mapper.insert(Note.from_params({"identifier": 40, "title": "Pinned"}))
        assert note.identifier == 40
        assert _row(conn, 40)["title"] == "Pinned"

    def test_loaded_entity_is_copied_under_new_key(self, mapper, conn) -> None:
        mapper.insert(Note.from_params({"title": "Original", "content": "body", "favorite": True}))
        loaded = mapper.find(1)

        copy = mapper.insert(loaded)

        assert copy.identifier == 2
        assert copy.get_updated_fields() == set()
        row = _row(conn, 2)
        assert row["title"] == "Original"
        assert row["content"] == "body"
        assert row["favorite"] == 1
        assert _row(conn, 1)["title"] == "Original"

    def test_loaded_and_edited_entity_copies_every_column(self, mapper, conn) -> None:
        mapper.insert(Note.from_params({"title": "Original", "content": "body"}))
        loaded = mapper.find(1)
        loaded.title = "Copy"

        mapper.insert(loaded)

        row = _row(conn, loaded.identifier)
        assert loaded.identifier == 2
        assert row["title"] == "Copy"
        assert row["content"] == "body"

    def test_returning_dialect(self) -> None:
        recorder = RecordingConnection(rows=[(41,)])
        mapper = EntityMapper(recorder, Note, "notes", POSTGRESQL)
        note = mapper.insert(Note.from_params({"title": "Draft"}))
        sql, params = recorder.statements[0]
        assert sql == "INSERT INTO notes (title) VALUES (%s) RETURNING id"
        assert params == ("Draft",)
        assert note.identifier == 41

    def test_failed_write_rolls_back(self, conn) -> None:
        conn.execute("CREATE TABLE strict_notes (id INTEGER PRIMARY KEY, title TEXT NOT NULL, content TEXT)")
        mapper = EntityMapper(conn, Note, "strict_notes")
        note = Note.from_params({"content": "no title"})

        with pytest.raises(sqlite3.IntegrityError):
            mapper.insert(note)

        assert note.identifier is None
        assert note.get_updated_fields() == {"content"}


class TestFind:
    def test_round_trip(self, mapper) -> None:
        mapper.insert(Note.from_params({"title": "Shopping", "modified": 1700000000, "favorite": True}))
        note = mapper.find(1)
        assert note.title == "Shopping"
        assert note.modified == 1700000000
        assert note.favorite is True
        assert note.get_updated_fields() == set()

    def test_not_found(self, mapper) -> None:
        with pytest.raises(EntityNotFoundError) as exc_info:
            mapper.find(99)
        assert exc_info.value.context.table == "notes"

    def test_multiple_rows(self) -> None:
        recorder = RecordingConnection(rows=[{"id": 1}, {"id": 1}])
        mapper = EntityMapper(recorder, Note, "notes")
        with pytest.raises(MultipleEntitiesReturnedError):
            mapper.find(1)

    def test_tuple_rows_use_description(self) -> None:
        recorder = RecordingConnection(rows=[(7,)])
        note = EntityMapper(recorder, Note, "notes").find(7)
        assert note.identifier == 7

    def test_unknown_column_surfaces(self, conn) -> None:
        conn.execute("ALTER TABLE notes ADD COLUMN etag TEXT")
        conn.execute("INSERT INTO notes (title, etag) VALUES (?, ?)", ("x", "abc"))
        conn.commit()
        with pytest.raises(EntityAttributeError):
            EntityMapper(conn, Note, "notes").find(1)

    def test_find_all_ordered(self, mapper) -> None:
        for title in ("a", "b", "c"):
            mapper.insert(Note.from_params({"title": title}))
        assert [note.title for note in mapper.find_all()] == ["a", "b", "c"]

    def test_find_all_empty(self, mapper) -> None:
        assert mapper.find_all() == []


class TestUpdate:
    def test_minimal_update(self) -> None:
        recorder = RecordingConnection()
        mapper = EntityMapper(recorder, Note, "notes")
        note = Note.from_row({"id": 3, "title": "Old", "content": "text"})
        note.title = "New"
        mapper.update(note)
        assert recorder.statements == [("UPDATE notes SET title = ? WHERE id = ?", ("New", 3))]
        assert recorder.commits == 1
        assert note.get_updated_fields() == set()

    def test_persists(self, mapper, conn) -> None:
        note = mapper.insert(Note.from_params({"title": "Old", "content": "keep"}))
        note.title = "New"
        note.favorite = "yes"
        mapper.update(note)
        row = _row(conn, note.identifier)
        assert row["title"] == "New"
        assert row["favorite"] == 1
        assert row["content"] == "keep"

    def test_clean_entity_is_noop(self) -> None:
        recorder = RecordingConnection()
        mapper = EntityMapper(recorder, Note, "notes")
        mapper.update(Note.from_row({"id": 3, "title": "Same"}))
        assert recorder.statements == []
        assert recorder.commits == 0

    def test_identifier_from_params_addresses_row(self) -> None:
        recorder = RecordingConnection()
        mapper = EntityMapper(recorder, Note, "notes")
        note = Note.from_params({"identifier": 5, "title": "x"})
        mapper.update(note)
        assert recorder.statements == [("UPDATE notes SET title = ? WHERE id = ?", ("x", 5))]

    def test_rewritten_identifier_is_refused(self, mapper, conn) -> None:
        first = mapper.insert(Note.from_params({"title": "A"}))
        second = mapper.insert(Note.from_params({"title": "B"}))
        loaded = mapper.find(first.identifier)
        loaded.identifier = second.identifier
        loaded.title = "A2"

        with pytest.raises(IdentifierChangedError) as exc_info:
            mapper.update(loaded)

        assert exc_info.value.persisted == first.identifier
        assert exc_info.value.current == second.identifier
        assert _row(conn, first.identifier)["title"] == "A"
        assert _row(conn, second.identifier)["title"] == "B"

    def test_restored_identifier_is_accepted(self, mapper, conn) -> None:
        note = mapper.insert(Note.from_params({"title": "A"}))
        note.identifier = 99
        note.identifier = 1
        note.title = "A2"
        mapper.update(note)
        assert _row(conn, 1)["title"] == "A2"

    def test_requires_identifier(self, mapper) -> None:
        with pytest.raises(UnpersistedEntityError):
            mapper.update(Note.from_params({"title": "x"}))


class TestDelete:
    def test_delete(self, mapper) -> None:
        note = mapper.insert(Note.from_params({"title": "Temp"}))
        mapper.delete(note)
        with pytest.raises(EntityNotFoundError):
            mapper.find(note.identifier)

    def test_rewritten_identifier_is_refused(self, mapper, conn) -> None:
        mapper.insert(Note.from_params({"title": "A"}))
        mapper.insert(Note.from_params({"title": "B"}))
        loaded = mapper.find(1)
        loaded.identifier = 2

        with pytest.raises(IdentifierChangedError):
            mapper.delete(loaded)

        assert _count(conn) == 2

    def test_requires_identifier(self, mapper) -> None:
        with pytest.raises(UnpersistedEntityError):
            mapper.delete(Note.from_params({}))
