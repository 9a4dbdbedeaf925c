"""Entity mapper: single-entity persistence driven by the dirty set.

:class:`EntityMapper` is the persistence-write collaborator of the entity
layer. It reads rows into entities with
:meth:`~notes.core.entity.Entity.from_row` and writes back only the columns
the entity reports as updated.

Manifesto:
    A record loaded, touched in one field and saved should cost one
    single-column UPDATE. The entity already knows what was written; the
    mapper only turns that knowledge into SQL.

    - **Minimal writes:** UPDATE uses ``updated_row()`` only
    - **Clean after write:** the dirty set is reset once the write commits
    - **Stored key addresses the row:** UPDATE and DELETE refuse an entity
      whose identifier was rewritten after it was loaded
    - **One entity at a time:** no joins, no query builder, no migrations

Architecture:
    ::

        find(4)          SELECT * ... WHERE id = ?        → from_row()
        insert(note)     INSERT (dirty cols | full copy)  → identifier = new key
        update(note)     UPDATE SET dirty cols WHERE id = persisted key
        delete(note)     DELETE WHERE id = persisted key

        every write runs inside transaction(): commit, or rollback + re-raise

Examples:
    >>> conn, _ = create_connection()
    >>> mapper = EntityMapper(conn, Note, "notes")
    >>> note = mapper.insert(Note.from_params({"title": "Draft"}))
    >>> note.title = "Final"
    >>> mapper.update(note)    # UPDATE notes SET title = ? WHERE id = ?

Tags:
    mapper, repository, persistence, dirty-tracking, notes-core

Doc-Types:
    - API Reference
    - Entity Mapping Guide
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from notes.core.dialect import SQLITE, Dialect
from notes.core.entity import Entity
from notes.core.errors import (
    EntityNotFoundError,
    IdentifierChangedError,
    MultipleEntitiesReturnedError,
    UnpersistedEntityError,
)
from notes.core.logging import get_logger
from notes.core.protocols import Connection

logger = get_logger(__name__)

E = TypeVar("E", bound=Entity)


class EntityMapper(Generic[E]):
    """Maps one entity class onto one table.

    Parameters:
        conn: Any object satisfying the :class:`Connection` protocol.
        entity_class: Concrete :class:`Entity` subclass rows hydrate into.
        table: Table name.
        dialect: SQL dialect. Defaults to :data:`~notes.core.dialect.SQLITE`.
    """

    def __init__(
        self,
        conn: Connection,
        entity_class: type[E],
        table: str,
        dialect: Dialect = SQLITE,
    ) -> None:
        self.conn = conn
        self.entity_class = entity_class
        self.table = table
        self.dialect = dialect
        self.key_column = entity_class.column_for("identifier")

    # -- Reads -------------------------------------------------------------

    def find(self, identifier: int) -> E:
        """Load the entity whose key equals *identifier*.

        Raises:
            EntityNotFoundError: no row matches.
            MultipleEntitiesReturnedError: more than one row matches.
        """
        rows = self._rows(
            f"SELECT * FROM {self.table} WHERE {self.key_column} = {self.dialect.marker}",
            (identifier,),
        )
        if not rows:
            raise EntityNotFoundError(self.entity_class.__name__, identifier).with_context(
                table=self.table
            )
        if len(rows) > 1:
            raise MultipleEntitiesReturnedError(
                self.entity_class.__name__, identifier, len(rows)
            ).with_context(table=self.table)
        return self.entity_class.from_row(rows[0])

    def find_all(self) -> list[E]:
        """Load every row of the table, ordered by key."""
        rows = self._rows(f"SELECT * FROM {self.table} ORDER BY {self.key_column}")
        return [self.entity_class.from_row(row) for row in rows]

    def _rows(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Run a SELECT and return rows keyed by column name.

        ``sqlite3.Row`` and dict-style cursors convert directly; plain tuple
        rows are zipped with ``cursor.description``.
        """
        cursor = self.conn.execute(sql, params)
        rows = cursor.fetchall()
        if not rows:
            return []
        if hasattr(rows[0], "keys"):
            return [dict(row) for row in rows]
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row, strict=True)) for row in rows]

    # -- Writes ------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Commit when the block succeeds, roll back and re-raise otherwise."""
        try:
            yield self.conn
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def insert(self, entity: E) -> E:
        """Insert *entity* as a new row and assign it the new key.

        A new entity writes its updated columns only. An entity that is
        already stored (clean identifier) is copied in full under a new key.
        """
        stored = entity.identifier is not None and "identifier" not in entity.get_updated_fields()
        if stored:
            data = entity.to_row()
            del data[self.key_column]
        else:
            data = entity.updated_row()
            if entity.identifier is None:
                data.pop(self.key_column, None)

        if data:
            sql = (
                f"INSERT INTO {self.table} ({', '.join(data)}) "
                f"VALUES ({self.dialect.placeholders(len(data))})"
            )
        else:
            sql = f"INSERT INTO {self.table} DEFAULT VALUES"
        if self.dialect.returning:
            sql = f"{sql} RETURNING {self.key_column}"

        with self.transaction() as conn:
            cursor = conn.execute(sql, tuple(data.values()))
            new_key = cursor.fetchone()[0] if self.dialect.returning else cursor.lastrowid

        entity.identifier = new_key
        entity.reset_updated_fields()

        logger.info(
            "entity_inserted",
            entity=self.entity_class.__name__,
            table=self.table,
            identifier=new_key,
            columns=sorted(data),
            copied=stored,
        )
        return entity

    def update(self, entity: E) -> E:
        """Write *entity*'s updated columns; a clean entity is left alone.

        Raises:
            UnpersistedEntityError: *entity* has no identifier.
            IdentifierChangedError: *entity*'s identifier was rewritten
                after it was loaded or last saved.
        """
        key = self._stored_key(entity, "update")

        data = entity.updated_row()
        data.pop(self.key_column, None)
        if not data:
            logger.debug("entity_unchanged", entity=self.entity_class.__name__, identifier=key)
            return entity

        assignments = ", ".join(f"{column} = {self.dialect.marker}" for column in data)
        sql = (
            f"UPDATE {self.table} SET {assignments} "
            f"WHERE {self.key_column} = {self.dialect.marker}"
        )
        with self.transaction() as conn:
            conn.execute(sql, (*data.values(), key))
        entity.reset_updated_fields()

        logger.info(
            "entity_updated",
            entity=self.entity_class.__name__,
            table=self.table,
            identifier=key,
            columns=sorted(data),
        )
        return entity

    def delete(self, entity: E) -> E:
        """Delete *entity*'s row.

        Raises:
            UnpersistedEntityError: *entity* has no identifier.
            IdentifierChangedError: *entity*'s identifier was rewritten
                after it was loaded or last saved.
        """
        key = self._stored_key(entity, "delete")

        with self.transaction() as conn:
            conn.execute(
                f"DELETE FROM {self.table} WHERE {self.key_column} = {self.dialect.marker}",
                (key,),
            )

        logger.info(
            "entity_deleted",
            entity=self.entity_class.__name__,
            table=self.table,
            identifier=key,
        )
        return entity

    def _stored_key(self, entity: E, operation: str) -> int:
        """Key of the row *entity* stands for.

        Entities built from params carry no stored key; their identifier
        is taken as given.
        """
        current = entity.identifier
        if current is None:
            raise UnpersistedEntityError(self.entity_class.__name__, operation)
        persisted = entity.persisted_identifier
        if persisted is not None and persisted != current:
            raise IdentifierChangedError(
                self.entity_class.__name__, operation, persisted, current
            ).with_context(table=self.table)
        return current


__all__ = [
    "EntityMapper",
]
