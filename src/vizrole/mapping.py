"""Visual role mappings: a fixed or automatic level plus the mapped data attributes."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any, Iterable

from . import levels as ml
from .attribute import MappingAttribute
from .errors import ArgumentInvalidError
from .levels import MeasurementLevel
from .resolution import level_auto, level_effective
from .role_type import RoleMappingType
from .validation import validate_mapping

if TYPE_CHECKING:
    from .model import RoleProperty, VisualModel


class RoleMapping:
    """The association between a visual role and attributes of a visual model's data.

    As an instance, a mapping holds an optional, fixed measurement `level` in
    which the visual role should operate, and the list of mapped `attributes`.
    The owning visual model is only referenced weakly; a mapping that is not
    set on a model, or that was replaced, is detached.
    """

    def __init__(
        self,
        mapping_type: RoleMappingType,
        *,
        level: MeasurementLevel | str | None = None,
        attributes: Iterable[MappingAttribute | str | dict[str, Any]] | None = None,
    ) -> None:
        if mapping_type.is_abstract:
            raise ArgumentInvalidError("mapping_type", f"Cannot create a mapping of abstract type '{mapping_type}'.")
        self._type = mapping_type
        self._level: MeasurementLevel | None = None
        self._attributes: list[MappingAttribute] = []
        self._owner_ref: weakref.ReferenceType[VisualModel] | None = None
        self._owner_property: str | None = None
        self.set_level(level)
        self.set_attributes(attributes)

    @property
    def type(self) -> RoleMappingType:
        return self._type

    def get_level(self) -> MeasurementLevel | None:
        return self._level

    def set_level(self, value: MeasurementLevel | str | None) -> None:
        """Set the fixed level; `None` lets the level be determined automatically."""
        self._level = ml.parse_level(value) if value is not None else None

    @property
    def level(self) -> MeasurementLevel | None:
        return self._level

    def get_attributes(self) -> list[MappingAttribute]:
        return list(self._attributes)

    def set_attributes(self, values: Iterable[MappingAttribute | str | dict[str, Any]] | None) -> None:
        self._attributes = [MappingAttribute.from_spec(v) for v in values or []]

    @property
    def attributes(self) -> tuple[MappingAttribute, ...]:
        return tuple(self._attributes)

    @property
    def is_mapped(self) -> bool:
        return len(self._attributes) > 0

    # region owner
    def _attach(self, model: VisualModel, property_name: str) -> None:
        self._owner_ref = weakref.ref(model)
        self._owner_property = property_name

    def _detach(self) -> None:
        self._owner_ref = None
        self._owner_property = None

    @property
    def model(self) -> VisualModel | None:
        """The visual model that owns this mapping, if any."""
        if self._owner_ref is None:
            return None
        return self._owner_ref()

    @property
    def model_property_name(self) -> str | None:
        return self._owner_property if self.model is not None else None

    @property
    def model_property(self) -> RoleProperty | None:
        """The role property of the owner model that holds this mapping, if any."""
        model = self.model
        if model is None:
            return None
        return model.get_property(self._owner_property)
    # endregion

    @property
    def level_auto(self) -> MeasurementLevel | None:
        return level_auto(self)

    @property
    def level_effective(self) -> MeasurementLevel | None:
        return level_effective(self)

    def validate(self) -> list[dict[str, Any]] | None:
        return validate_mapping(self)

    def __repr__(self) -> str:
        return f"RoleMapping({self._type.id!r}, level={self._level}, attributes={self._attributes!r})"
