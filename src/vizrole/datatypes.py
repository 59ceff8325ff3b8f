"""Value-type registry used to resolve type references of roles and data attributes."""

from __future__ import annotations

import logging
from typing import Iterator

from .errors import ArgumentInvalidError

logger = logging.getLogger(__name__)

ROOT_TYPE_ID = "value"


class ValueType:
    """A value type descriptor in a single-rooted type tree."""

    def __init__(self, type_id: str, base: ValueType | None = None, *, is_abstract: bool = False) -> None:
        self.id = type_id
        self.base = base
        self.is_abstract = is_abstract

    def ancestors(self) -> Iterator[ValueType]:
        current: ValueType | None = self
        while current is not None:
            yield current
            current = current.base

    def is_subtype_of(self, other: ValueType) -> bool:
        return any(t is other for t in self.ancestors())

    def is_subtype_of_id(self, type_id: str) -> bool:
        return any(t.id == type_id for t in self.ancestors())

    def __repr__(self) -> str:
        return f"ValueType({self.id!r})"

    def __str__(self) -> str:
        return self.id


class TypeRegistry:
    """Maps type ids to value types."""

    def __init__(self) -> None:
        self._types: dict[str, ValueType] = {}

    def define(self, type_id: str, base: str | ValueType | None = None, *, is_abstract: bool = False) -> ValueType:
        if not isinstance(type_id, str) or type_id == "":
            raise ArgumentInvalidError("type_id", "type id must be non-empty string")
        if type_id in self._types:
            raise ArgumentInvalidError("type_id", f"Type '{type_id}' is already defined.")
        base_type = self.resolve(base) if base is not None else None
        if base_type is None and self._types:
            raise ArgumentInvalidError("base", f"Type '{type_id}' must derive from a defined type.")
        value_type = ValueType(type_id, base_type, is_abstract=is_abstract)
        self._types[type_id] = value_type
        logger.debug("defined value type %s (base=%s)", type_id, base_type)
        return value_type

    def get(self, type_ref: str | ValueType | None) -> ValueType | None:
        """Resolve a type reference, returning `None` when it is unknown."""
        if isinstance(type_ref, ValueType):
            return type_ref if self._types.get(type_ref.id) is type_ref else None
        if isinstance(type_ref, str):
            return self._types.get(type_ref)
        return None

    def resolve(self, type_ref: str | ValueType) -> ValueType:
        value_type = self.get(type_ref)
        if value_type is None:
            raise ArgumentInvalidError("type_ref", f"Type '{type_ref}' is not defined.")
        return value_type

    @property
    def root(self) -> ValueType:
        return self._types[ROOT_TYPE_ID]


def default_registry() -> TypeRegistry:
    registry = TypeRegistry()
    registry.define(ROOT_TYPE_ID, is_abstract=True)
    registry.define("simple", ROOT_TYPE_ID, is_abstract=True)
    registry.define("string", "simple")
    registry.define("boolean", "simple")
    registry.define("number", "simple")
    registry.define("integer", "number")
    registry.define("date", "simple")
    return registry
