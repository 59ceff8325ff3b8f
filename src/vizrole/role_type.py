"""Visual role mapping types and their monotonic, inherited attributes."""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, TypeVar

from . import levels as ml
from .datatypes import TypeRegistry, ValueType
from .errors import ArgumentInvalidError, ArgumentRequiredError, OperationInvalidError
from .levels import MeasurementLevel
from .messages import bundle

logger = logging.getLogger(__name__)

ROOT_ROLE_TYPE_ID = "mapping"

T = TypeVar("T")


class InheritedAttribute(Generic[T]):
    """A type attribute whose effective value is the local value or the ancestor's.

    The local override lives in an explicit `_local_<name>` field, `None` meaning
    "inherit". Subclasses decide how a new value combines with the inherited one.
    """

    locked_message = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.local_field = f"_local_{name}"

    def __get__(self, owner: RoleMappingType | None, objtype: type | None = None) -> Any:
        if owner is None:
            return self
        return self.effective(owner)

    def __set__(self, owner: RoleMappingType, value: Any) -> None:
        self.set_local(owner, value)

    def local(self, owner: RoleMappingType) -> T | None:
        return getattr(owner, self.local_field, None)

    def effective(self, owner: RoleMappingType) -> T:
        local = self.local(owner)
        if local is not None:
            return self.present(local)
        if owner.ancestor is None:
            return self.present(self.root_value(owner))
        return self.effective(owner.ancestor)

    def set_local(self, owner: RoleMappingType, value: Any) -> None:
        if owner.has_descendants:
            raise OperationInvalidError(bundle.format(self.locked_message))
        if value is None:
            return
        merged = self.merge(owner, value)
        if merged is not None:
            setattr(owner, self.local_field, merged)

    def present(self, value: Any) -> T:
        return value

    def root_value(self, owner: RoleMappingType) -> Any:
        raise NotImplementedError

    def merge(self, owner: RoleMappingType, value: Any) -> Any:
        raise NotImplementedError


class LevelsAttribute(InheritedAttribute[tuple]):
    """Levels may only be added; existing entries are never removed or moved."""

    locked_message = "levelsLockedWhenTypeHasDescendants"

    def present(self, value: list[MeasurementLevel]) -> tuple[MeasurementLevel, ...]:
        return tuple(value)

    def root_value(self, owner: RoleMappingType) -> list[MeasurementLevel]:
        return []

    def merge(self, owner: RoleMappingType, value: Any) -> list[MeasurementLevel] | None:
        if owner.is_root:
            return None

        # Clones the inherited levels on first write.
        current = list(self.effective(owner))
        additions: list[MeasurementLevel] = []
        for level in ml.parse_levels(value):
            if level not in current and level not in additions:
                additions.append(level)

        data_type = owner.data_type
        if not data_type.is_abstract and ml.is_type_qualitative_only(data_type):
            for level in additions:
                if ml.is_quantitative(level):
                    raise ArgumentInvalidError(
                        "levels",
                        bundle.format("dataTypeIncompatibleWithRoleLevel", {"dataType": data_type, "level": level}),
                    )

        if additions:
            logger.debug("role type %s: adding levels %s", owner.id, [level.key for level in additions])
        return ml.sort_levels(current + additions)


class DataTypeAttribute(InheritedAttribute[ValueType]):
    """The data type may only be narrowed to a subtype of the current one."""

    locked_message = "dataTypeLockedWhenTypeHasDescendants"

    def root_value(self, owner: RoleMappingType) -> ValueType:
        return owner.registry.root

    def merge(self, owner: RoleMappingType, value: Any) -> ValueType | None:
        old_type = self.effective(owner)
        new_type = owner.registry.resolve(value)
        if new_type is old_type:
            return None

        if not new_type.is_subtype_of(old_type):
            raise ArgumentInvalidError(
                "data_type",
                bundle.format("dataTypeNotSubtypeOfBaseType", {"dataType": new_type, "baseType": old_type}),
            )

        if ml.is_type_qualitative_only(new_type):
            for level in owner.levels:
                if not ml.is_qualitative(level):
                    raise ArgumentInvalidError(
                        "data_type",
                        bundle.format("dataTypeIncompatibleWithRoleLevel", {"dataType": new_type, "level": level}),
                    )

        logger.debug("role type %s: data type narrowed to %s", owner.id, new_type.id)
        return new_type


class RoleMappingType:
    """The type of a visual role mapping.

    A role mapping type declares the capabilities of the visual role it maps to:
    the measurement `levels` in which the role can operate and the `data_type`
    required of the data attributes mapped to it. Both attributes are inherited
    from the ancestor type and can only change monotonically: levels can be
    added but not removed, the data type can be narrowed but not widened. Once a
    type has been extended, both are locked.
    """

    levels = LevelsAttribute()
    data_type = DataTypeAttribute()

    def __init__(
        self,
        type_id: str,
        *,
        ancestor: RoleMappingType | None = None,
        registry: TypeRegistry | None = None,
        is_abstract: bool = False,
        is_root: bool = False,
    ) -> None:
        if ancestor is None and not is_root:
            raise ArgumentRequiredError("ancestor")
        self.id = type_id
        self.ancestor = ancestor
        self.registry = registry if registry is not None else ancestor.registry  # type: ignore[union-attr]
        self.is_abstract = is_abstract
        self.is_root = is_root
        self._local_levels: list[MeasurementLevel] | None = None
        self._local_data_type: ValueType | None = None
        self._descendants: list[RoleMappingType] = []

    @classmethod
    def create_root(cls, registry: TypeRegistry) -> RoleMappingType:
        return cls(ROOT_ROLE_TYPE_ID, registry=registry, is_abstract=True, is_root=True)

    def extend(
        self,
        type_id: str,
        *,
        levels: Iterable[MeasurementLevel | str] | None = None,
        data_type: str | ValueType | None = None,
        is_abstract: bool = False,
    ) -> RoleMappingType:
        """Create a subtype, apply its attributes and register it as a descendant."""
        subtype = type(self)(type_id, ancestor=self, is_abstract=is_abstract)
        subtype.set_data_type(data_type)
        subtype.set_levels(levels)
        subtype._post_init()
        self._add_descendant(subtype)
        logger.debug(
            "created role type %s (base=%s, levels=%s, data_type=%s)",
            type_id,
            self.id,
            [level.key for level in subtype.levels],
            subtype.data_type.id,
        )
        return subtype

    def _post_init(self) -> None:
        if not self.is_abstract and not self.levels:
            raise ArgumentRequiredError("levels", bundle.format("noLevelsInNonAbstract"))

    def _add_descendant(self, subtype: RoleMappingType) -> None:
        self._descendants.append(subtype)

    @property
    def has_descendants(self) -> bool:
        return len(self._descendants) > 0

    def is_subtype_of(self, other: RoleMappingType) -> bool:
        current: RoleMappingType | None = self
        while current is not None:
            if current is other:
                return True
            current = current.ancestor
        return False

    def get_levels(self) -> tuple[MeasurementLevel, ...]:
        return self.levels

    def set_levels(self, values: Iterable[MeasurementLevel | str] | None) -> None:
        self.levels = values

    def get_data_type(self) -> ValueType:
        return self.data_type

    def set_data_type(self, value: str | ValueType | None) -> None:
        self.data_type = value

    def has_level(self, level: MeasurementLevel | str) -> bool:
        return ml.get_level(level) in self.levels

    @property
    def any_levels_qualitative(self) -> bool:
        return any(ml.is_qualitative(level) for level in self.levels)

    @property
    def any_levels_quantitative(self) -> bool:
        return any(ml.is_quantitative(level) for level in self.levels)

    def __repr__(self) -> str:
        return f"RoleMappingType({self.id!r})"

    def __str__(self) -> str:
        return self.id
