"""
Structured error types for the notes entity layer.

Every failure raised by ``notes.core`` is a :class:`NotesError`. Instead of
bare exceptions that lose context, each error carries:

- **Category:** What kind of failure (validation, config, database, ...)
- **Retryable:** Whether repeating the operation could succeed
- **Context:** Entity, attribute and free-form metadata for logging
- **Cause:** The chained underlying exception, if any

Manifesto:
    The entity layer is a fail-fast substrate. It never recovers from a bad
    attribute name or an unconvertible value; it raises, with enough context
    for the controller layer above to translate the failure into a response.

    - **Typed hierarchy:** One class per failure the layer can produce
    - **Builtin compatibility:** Attribute errors are ``AttributeError``,
      coercion errors are ``ValueError``
    - **Rich context:** Attribute name, declared type and raw value travel
      with the exception

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                         NotesError                           │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  EntityAttributeError   ValidationError       ConfigError    │
        │  (+ AttributeError)     (VALIDATION)          (CONFIG)       │
        │                              │                     │         │
        │                      TypeCoercionError   InvalidType-        │
        │                      (+ ValueError)      DeclarationError    │
        │                      UnpersistedEntityError                  │
        │                      IdentifierChangedError                  │
        │                                                              │
        │  DatabaseError (DATABASE)                                    │
        │       │                                                      │
        │  EntityNotFoundError   MultipleEntitiesReturnedError         │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = TypeCoercionError("identifier", "integer", "four")
    >>> err.attribute, err.declared_type, err.value
    ('identifier', 'integer', 'four')
    >>> err.to_dict()["category"]
    'VALIDATION'

Tags:
    error-handling, exception-hierarchy, entity, coercion, notes-core

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    VALIDATION = "VALIDATION"     # Unknown attribute, bad value
    CONFIG = "CONFIG"             # Bad type declaration, invalid settings
    DATABASE = "DATABASE"         # Missing or ambiguous rows
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Typed fields cover what the entity layer knows at the raise site; any
    other key-value pair goes into ``metadata``. ``to_dict()`` serializes
    only the fields that are set.

    Attributes:
        entity: Name of the concrete entity class
        attribute: In-memory attribute name involved
        column: Storage column name involved
        table: Storage table name (mapper errors)
        metadata: Additional key-value pairs
    """

    entity: str | None = None
    attribute: str | None = None
    column: str | None = None
    table: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["entity", "attribute", "column", "table"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class NotesError(Exception):
    """
    Base exception for all notes-core errors.

    Subclasses set ``default_category`` and ``default_retryable`` so callers
    only pass what differs from the defaults.

    Examples:
        >>> error = NotesError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(entity="Note").context.entity
        'Note'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> NotesError:
        """
        Add context to this error (fluent API).

        Usage:
            raise EntityNotFoundError("Note", 3).with_context(table="notes")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# ATTRIBUTE ERRORS
# =============================================================================


class EntityAttributeError(NotesError, AttributeError):
    """
    Raised when an attribute name has no declared field on the entity.

    Also an ``AttributeError`` so that ``getattr``-style callers and
    ``except AttributeError`` blocks behave as they would for any object.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(self, entity: str, attribute: str, message: str | None = None):
        super().__init__(
            message or f"{attribute} is not a valid attribute of {entity}",
            context=ErrorContext(entity=entity, attribute=attribute),
        )
        self.entity = entity
        self.attribute = attribute
        self.name = attribute


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(NotesError):
    """Data validation failure. Never retryable."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class TypeCoercionError(ValidationError, ValueError):
    """A raw value could not be converted to an attribute's declared type."""

    def __init__(
        self,
        attribute: str,
        declared_type: str,
        value: Any,
        cause: Exception | None = None,
    ):
        super().__init__(
            f"Cannot coerce {value!r} to {declared_type} for attribute {attribute!r}",
            context=ErrorContext(
                attribute=attribute,
                metadata={"declared_type": declared_type, "value": repr(value)},
            ),
            cause=cause,
        )
        self.attribute = attribute
        self.declared_type = declared_type
        self.value = value


class UnpersistedEntityError(ValidationError):
    """An operation needs a stored entity but ``identifier`` is unset."""

    def __init__(self, entity: str, operation: str):
        super().__init__(
            f"Cannot {operation} {entity} without an identifier",
            context=ErrorContext(entity=entity, metadata={"operation": operation}),
        )
        self.entity = entity
        self.operation = operation


class IdentifierChangedError(ValidationError):
    """``identifier`` was rewritten after the entity was loaded or saved.

    Writing by the new value would address a different row.
    """

    def __init__(self, entity: str, operation: str, persisted: Any, current: Any):
        super().__init__(
            f"Cannot {operation} {entity}: identifier changed from "
            f"{persisted!r} to {current!r} since it was stored",
            context=ErrorContext(
                entity=entity,
                attribute="identifier",
                metadata={"operation": operation, "persisted": persisted, "current": current},
            ),
        )
        self.entity = entity
        self.operation = operation
        self.persisted = persisted
        self.current = current


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(NotesError):
    """Invalid entity or settings configuration. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidTypeDeclarationError(ConfigError):
    """Unknown type tag, or an attempt to change ``identifier``'s type."""

    def __init__(self, attribute: str, declared_type: Any, message: str | None = None):
        super().__init__(
            message or f"Invalid type {declared_type!r} declared for attribute {attribute!r}",
            context=ErrorContext(
                attribute=attribute,
                metadata={"declared_type": str(declared_type)},
            ),
        )
        self.attribute = attribute
        self.declared_type = declared_type


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(NotesError):
    """Failure reported by the persistence collaborator."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class EntityNotFoundError(DatabaseError):
    """No row matched the requested identifier."""

    def __init__(self, entity: str, identifier: Any):
        super().__init__(
            f"{entity} with identifier {identifier!r} does not exist",
            context=ErrorContext(entity=entity, metadata={"identifier": identifier}),
        )
        self.entity = entity
        self.identifier = identifier


class MultipleEntitiesReturnedError(DatabaseError):
    """More than one row matched a lookup that expects exactly one."""

    def __init__(self, entity: str, identifier: Any, count: int):
        super().__init__(
            f"{count} rows of {entity} matched identifier {identifier!r}",
            context=ErrorContext(
                entity=entity,
                metadata={"identifier": identifier, "count": count},
            ),
        )
        self.entity = entity
        self.identifier = identifier
        self.count = count


def is_retryable(error: BaseException) -> bool:
    """Return True if *error* is a NotesError flagged as retryable."""
    if isinstance(error, NotesError):
        return error.retryable
    return False


__all__ = [
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
