"""Entity base class: attribute registry, coercion, dirty tracking, hydration.

Concrete record types subclass :class:`Entity` and declare their attributes
with :class:`Attribute` descriptors. The class gains, without any
per-attribute code:

- a generic accessor pair, ``get(name)`` / ``set(name, value)``, that rejects
  names it does not know,
- coercion of raw values to each attribute's declared type,
- tracking of which attributes were written since the last reset,
- two hydration entry points, ``from_row`` (storage row, snake_case columns)
  and ``from_params`` (request parameters, camelCase attribute names).

Manifesto:
    Storage rows and request payloads are untyped dicts. Letting them flow
    through the application as dicts means every consumer re-validates keys
    and re-casts values. The entity layer does that once, at the boundary,
    and fails immediately when a key or value does not fit.

    - **Registry per class, not per call:** ``__init_subclass__`` collects the
      declared attributes once; an unknown name is a dict miss
    - **Written, not changed:** every ``set`` marks the attribute dirty, even
      when the value is unchanged
    - **Rows are clean, params are pending:** ``from_row`` resets the dirty
      set, ``from_params`` keeps it

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        Entity subclass                        │
        │                                                               │
        │  class-level (built once)       instance-level                │
        │  ────────────────────────       ──────────────                │
        │  _attributes: name → Attribute  _values: name → value         │
        │  _columns:    column → name     _attribute_types: name → type │
        │                                 _updated_fields: {name, ...}  │
        └──────────────────────────────────────────────────────────────┘

        from_row({"id": "4", "created_at": ...})
            column → name (_columns) → set() → coerce() → reset dirty

        from_params({"title": "x"})
            name → set() → coerce()                (dirty kept)

Examples:
    >>> class Task(Entity):
    ...     title = Attribute(AttributeType.STRING)
    ...     createdAt = Attribute(AttributeType.INTEGER)
    >>> task = Task.from_row({"id": "4", "title": "Grocery List", "created_at": "17"})
    >>> task.identifier, task.createdAt, task.get_updated_fields()
    (4, 17, set())
    >>> task.title = "Groceries"
    >>> task.updated_row()
    {'title': 'Groceries'}

Tags:
    entity, orm, mapping, hydration, dirty-tracking, notes-core

Doc-Types:
    - API Reference
    - Entity Mapping Guide
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from notes.core.coercion import AttributeType, coerce, resolve_type
from notes.core.errors import (
    EntityAttributeError,
    InvalidTypeDeclarationError,
    TypeCoercionError,
)
from notes.core.logging import get_logger
from notes.core.naming import column_to_property, property_to_column

logger = get_logger(__name__)

E = TypeVar("E", bound="Entity")

_SLUG_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


class Attribute:
    """Declares one attribute of an :class:`Entity` subclass.

    Args:
        type: Declared type tag; ``None`` leaves values uncoerced.
        column: Storage column name, when it differs from the snake_case
            form of the attribute name.
        default: Value of the attribute before anything is written.
    """

    def __init__(
        self,
        type: AttributeType | str | None = None,
        *,
        column: str | None = None,
        default: Any = None,
    ) -> None:
        self.declared = type
        self.type = AttributeType.ANY
        self.column = column
        self.default = default
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        if self.column is None:
            self.column = property_to_column(name)

    def __get__(self, instance: Entity | None, owner: type) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: Entity, value: Any) -> None:
        instance.set(self.name, value)

    def __repr__(self) -> str:
        return f"Attribute({self.name!r}, type={self.type.value!r}, column={self.column!r})"


class Entity:
    """Base class for records hydrated from storage rows or request params.

    Instances come from :meth:`from_row` or :meth:`from_params`. Subclasses
    may override ``__init__`` (taking no arguments) to refine declared types
    with :meth:`_declare_type`; those declarations are frozen once hydration
    starts.
    """

    identifier = Attribute(AttributeType.INTEGER, column="id")

    _attributes: ClassVar[dict[str, Attribute]] = {}
    _columns: ClassVar[dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _register_attributes(cls)

    def __init__(self) -> None:
        self._values: dict[str, Any] = {
            name: attr.default for name, attr in self._attributes.items()
        }
        self._attribute_types: dict[str, AttributeType] = {
            name: attr.type for name, attr in self._attributes.items()
        }
        self._updated_fields: set[str] = set()
        self._persisted_identifier: int | None = None
        self._types_locked = False

    # -- Hydration ---------------------------------------------------------

    @classmethod
    def from_row(cls: type[E], row: Mapping[str, Any]) -> E:
        """Build an entity from a storage row keyed by column name.

        The returned entity has no dirty attributes.

        Raises:
            EntityAttributeError: a column maps to no declared attribute.
            TypeCoercionError: a value does not fit its declared type.
        """
        instance = cls()
        instance._types_locked = True

        for column, value in row.items():
            name = cls._columns.get(column)
            if name is None:
                logger.debug("unknown_column", entity=cls.__name__, column=column)
                raise EntityAttributeError(
                    cls.__name__,
                    column_to_property(column),
                    f"column {column!r} does not map to an attribute of {cls.__name__}",
                ).with_context(column=column)
            instance.set(name, value)

        instance.reset_updated_fields()
        logger.debug("entity_hydrated", entity=cls.__name__, source="row", attributes=len(row))
        return instance

    @classmethod
    def from_params(cls: type[E], params: Mapping[str, Any]) -> E:
        """Build an entity from request parameters keyed by attribute name.

        Every supplied parameter stays marked as updated: the entity
        represents pending writes.

        Raises:
            EntityAttributeError: a key names no declared attribute.
            TypeCoercionError: a value does not fit its declared type.
        """
        instance = cls()
        instance._types_locked = True

        for name, value in params.items():
            instance.set(name, value)

        logger.debug("entity_hydrated", entity=cls.__name__, source="params", attributes=len(params))
        return instance

    # -- Accessor protocol -------------------------------------------------

    def get(self, name: str) -> Any:
        """Return the current value of attribute *name*."""
        if name not in self._attributes:
            raise EntityAttributeError(type(self).__name__, name)
        return self._values[name]

    def set(self, name: str, value: Any) -> None:
        """Coerce and store *value* under *name*, marking it updated."""
        if name not in self._attributes:
            logger.debug("unknown_attribute", entity=type(self).__name__, attribute=name)
            raise EntityAttributeError(type(self).__name__, name)

        try:
            value = coerce(self._attribute_types[name], value, attribute=name)
        except TypeCoercionError as e:
            e.with_context(entity=type(self).__name__)
            logger.debug("coercion_failed", entity=type(self).__name__, error=e)
            raise

        self._values[name] = value
        self._mark_field_updated(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._attributes:
            self.set(name, value)
        elif name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            raise EntityAttributeError(type(self).__name__, name)

    def _declare_type(self, name: str, declared: AttributeType | str | None) -> None:
        """Declare or overwrite the type of attribute *name*.

        Only valid while the entity is being constructed.
        """
        if name not in self._attributes:
            raise EntityAttributeError(type(self).__name__, name)
        if self._types_locked:
            raise InvalidTypeDeclarationError(
                name, declared, "attribute types are fixed once an entity is hydrated"
            )

        resolved = resolve_type(declared, name)
        if name == "identifier" and resolved is not AttributeType.INTEGER:
            raise InvalidTypeDeclarationError(
                name, declared, "identifier is always declared as integer"
            )
        self._attribute_types[name] = resolved

    # -- Dirty tracking ----------------------------------------------------

    def _mark_field_updated(self, name: str) -> None:
        self._updated_fields.add(name)

    def get_updated_fields(self) -> set[str]:
        """Names of the attributes written since the last reset."""
        return set(self._updated_fields)

    def reset_updated_fields(self) -> None:
        """Mark the entity clean, e.g. after it has been persisted.

        The current identifier becomes :attr:`persisted_identifier`.
        """
        self._updated_fields.clear()
        self._persisted_identifier = self._values["identifier"]

    @property
    def persisted_identifier(self) -> int | None:
        """Identifier as of the last reset; ``None`` if never clean."""
        return self._persisted_identifier

    def get_field_types(self) -> dict[str, AttributeType]:
        """Declared types, excluding untyped attributes."""
        return {
            name: declared
            for name, declared in self._attribute_types.items()
            if declared is not AttributeType.ANY
        }

    # -- Name translation --------------------------------------------------

    @classmethod
    def attribute_names(cls) -> tuple[str, ...]:
        return tuple(cls._attributes)

    @classmethod
    def column_for(cls, name: str) -> str:
        """Storage column of attribute *name*."""
        if name not in cls._attributes:
            raise EntityAttributeError(cls.__name__, name)
        return cls._attributes[name].column

    # -- Serialization -----------------------------------------------------

    def updated_row(self) -> dict[str, Any]:
        """Values of the updated attributes keyed by column, for minimal writes."""
        return {
            self.column_for(name): self._values[name]
            for name in self._attributes
            if name in self._updated_fields
        }

    def to_row(self) -> dict[str, Any]:
        """All attribute values keyed by column."""
        return {attr.column: self._values[name] for name, attr in self._attributes.items()}

    def to_dict(self) -> dict[str, Any]:
        """All attribute values keyed by attribute name."""
        return dict(self._values)

    # -- Slugs -------------------------------------------------------------

    def slugify(self, name: str) -> str:
        """Lower-case, hyphen-separated form of attribute *name*'s value.

        Warning: the result is not unique across entities.
        """
        value = self.get(name)
        text = "" if value is None else str(value)
        return _SLUG_SEPARATORS.sub("-", text).lower().strip("-")

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={value!r}" for name, value in self._values.items())
        return f"{type(self).__name__}({fields})"


def _register_attributes(cls: type[Entity]) -> None:
    """Collect the Attribute descriptors of *cls* and its bases."""
    attributes: dict[str, Attribute] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, Attribute):
                value.type = resolve_type(value.declared, name)
                attributes[name] = value

    identifier = attributes.get("identifier")
    if identifier is None or identifier.type is not AttributeType.INTEGER:
        raise InvalidTypeDeclarationError(
            "identifier",
            identifier.declared if identifier else None,
            f"{cls.__name__}.identifier must be an integer Attribute",
        )

    cls._attributes = attributes
    cls._columns = {attr.column: name for name, attr in attributes.items()}


_register_attributes(Entity)


__all__ = [
    "Attribute",
    "Entity",
]
