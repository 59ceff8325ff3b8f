"""Visual models: role property slots, their mappings and the bound data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator

from .errors import ArgumentInvalidError, build_error_envelope, combine_errors
from .messages import MessageBundle, bundle as default_bundle
from .role_type import RoleMappingType

if TYPE_CHECKING:
    from .data import DataTable
    from .mapping import RoleMapping


class RoleProperty:
    """A visual role slot of a visual model."""

    def __init__(
        self,
        name: str,
        mapping_type: RoleMappingType,
        *,
        is_required: bool = False,
        count_min: int = 0,
        count_max: int | None = None,
        label: str | None = None,
    ) -> None:
        if mapping_type.is_abstract:
            raise ArgumentInvalidError("mapping_type", f"Role '{name}' cannot use abstract type '{mapping_type}'.")
        self.name = name
        self.mapping_type = mapping_type
        self.is_required = is_required
        self.count_min = count_min
        self.count_max = count_max
        self.label = label

    def __repr__(self) -> str:
        return f"RoleProperty({self.name!r}, {self.mapping_type.id!r})"

    def __str__(self) -> str:
        return self.label or self.name


class VisualModel:
    """Owns one visual role mapping per role property and an optional data table."""

    def __init__(
        self,
        properties: list[RoleProperty],
        *,
        data: DataTable | None = None,
        messages: MessageBundle | None = None,
    ) -> None:
        self._properties: dict[str, RoleProperty] = {}
        self._mappings: dict[str, RoleMapping] = {}
        self.data = data
        self.messages = messages if messages is not None else default_bundle
        for prop in properties:
            if prop.name in self._properties:
                raise ArgumentInvalidError("properties", f"Duplicate role property '{prop.name}'.")
            self._properties[prop.name] = prop

    def get_property(self, name: str | None) -> RoleProperty | None:
        if name is None:
            return None
        return self._properties.get(name)

    @property
    def properties(self) -> Iterator[RoleProperty]:
        return iter(self._properties.values())

    def get_mapping(self, name: str) -> RoleMapping | None:
        return self._mappings.get(name)

    def set_mapping(self, name: str, mapping: RoleMapping) -> None:
        """Set the mapping of a role, detaching the mapping it replaces."""
        prop = self.get_property(name)
        if prop is None:
            raise ArgumentInvalidError("name", f"Visual model has no role property '{name}'.")
        if not mapping.type.is_subtype_of(prop.mapping_type):
            raise ArgumentInvalidError(
                "mapping",
                f"Mapping of type '{mapping.type}' cannot fill role '{name}' of type '{prop.mapping_type}'.",
            )
        previous = self._mappings.get(name)
        if previous is mapping:
            return
        if previous is not None:
            previous._detach()
        if mapping.model is not None:
            mapping.model.remove_mapping(mapping.model_property_name)  # type: ignore[arg-type]
        self._mappings[name] = mapping
        mapping._attach(self, name)

    def remove_mapping(self, name: str) -> RoleMapping | None:
        mapping = self._mappings.pop(name, None)
        if mapping is not None:
            mapping._detach()
        return mapping

    def _validate_cardinality(self, prop: RoleProperty) -> list[dict[str, Any]]:
        mapping = self._mappings.get(prop.name)
        count = len(mapping.attributes) if mapping is not None else 0
        details: dict[str, Any] = {"role": prop.name, "count": count}
        if prop.is_required and count == 0:
            return [build_error_envelope("ValueRequired", self.messages.format("ValueRequired", {"role": prop}), details)]

        errors: list[dict[str, Any]] = []
        if count < prop.count_min:
            params = {"role": prop, "countMin": prop.count_min}
            errors.append(
                build_error_envelope("CountMin", self.messages.format("CountMin", params), {**details, "countMin": prop.count_min})
            )
        if prop.count_max is not None and count > prop.count_max:
            params = {"role": prop, "countMax": prop.count_max}
            errors.append(
                build_error_envelope("CountMax", self.messages.format("CountMax", params), {**details, "countMax": prop.count_max})
            )
        return errors

    def validate(self) -> list[dict[str, Any]] | None:
        """Validate the cardinality of every role and each role's mapping, in declaration order."""
        errors: list[dict[str, Any]] | None = None
        for prop in self.properties:
            errors = combine_errors(errors, self._validate_cardinality(prop))
            mapping = self._mappings.get(prop.name)
            if mapping is not None:
                errors = combine_errors(errors, mapping.validate())
        return errors
