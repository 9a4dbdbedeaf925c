"""Notes Core -- entity mapping layer for the notes app.

Manifesto:
    Rows from storage and parameters from requests are untyped dicts. The
    core turns them into typed entities once, at the boundary, remembers
    which attributes were written afterwards, and hands persistence a
    minimal diff.

Architecture::

    Layer 1 -- Errors & Types
        errors.py          Structured error hierarchy (NotesError, ...)
        coercion.py        AttributeType + closed coercion table
        naming.py          column_to_property / property_to_column

    Layer 2 -- Entities
        entity.py          Attribute descriptor + Entity base class
        models/            Concrete entities (Note)

    Layer 3 -- Persistence collaborator
        protocols.py       Connection protocol
        dialect.py         SQLITE / POSTGRESQL marker + key strategy
        connection.py      create_connection() for SQLite
        mapper.py          EntityMapper (find / insert / update / delete)

    Ambient
        logging.py         structlog configuration
        settings.py        pydantic-settings NotesSettings

Tags:
    notes-core, entity, mapping, hydration

Doc-Types:
    - API Reference
"""

from notes.core.coercion import AttributeType, coerce, resolve_type
from notes.core.entity import Attribute, Entity
from notes.core.errors import (
    ConfigError,
    DatabaseError,
    EntityAttributeError,
    EntityNotFoundError,
    ErrorCategory,
    ErrorContext,
    InvalidTypeDeclarationError,
    MultipleEntitiesReturnedError,
    NotesError,
    TypeCoercionError,
    IdentifierChangedError,
    UnpersistedEntityError,
    ValidationError,
    is_retryable,
)
from notes.core.naming import column_to_property, property_to_column

__all__ = [
    # Entities
    "Attribute",
    "Entity",
    # Types
    "AttributeType",
    "coerce",
    "resolve_type",
    # Naming
    "column_to_property",
    "property_to_column",
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "NotesError",
    "EntityAttributeError",
    "ValidationError",
    "TypeCoercionError",
    "UnpersistedEntityError",
    "IdentifierChangedError",
    "ConfigError",
    "InvalidTypeDeclarationError",
    "DatabaseError",
    "EntityNotFoundError",
    "MultipleEntitiesReturnedError",
    "is_retryable",
]
