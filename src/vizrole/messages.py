"""Message bundle for error kinds and type-level failures."""

from __future__ import annotations

from typing import Any, Mapping

DEFAULT_MESSAGES: dict[str, str] = {
    # Validation errors returned by mapping and model validation.
    "NoOwnerVisualModel": "The visual role mapping is not owned by a visual model.",
    "AttributeNotDefinedInData": "The attribute '{name}' of visual role '{role}' is not defined in the visual model's data.",
    "AttributeDataTypeNotSubtypeOfRoleType": (
        "The attribute '{name}' of visual role '{role}' has data type '{dataType}', "
        "which is not a subtype of the visual role's data type '{roleDataType}'."
    ),
    "LevelNotOneOfRoleLevels": (
        "The measurement level '{level}' of visual role '{role}' is not one of its supported levels: {roleLevels}."
    ),
    "AttributesLevelNotCompatibleWithRoleLevels": (
        "The measurement level '{dataLevel}' of the mapped attributes of visual role '{role}' "
        "is not compatible with the visual role's levels: {roleLevels}."
    ),
    "AttributeDuplicate": "The attribute '{name}' is mapped more than once to visual role '{role}'.",
    "AttributeAndAggregationDuplicate": (
        "The attribute '{name}' with aggregation '{aggregation}' is mapped more than once to visual role '{role}'."
    ),
    "AttributeNameRequired": "The attribute at position {index} of visual role '{role}' has no name.",
    "AggregationNotInDomain": (
        "The aggregation '{aggregation}' of attribute '{name}' of visual role '{role}' is not one of: {aggregations}."
    ),
    "ValueRequired": "The visual role '{role}' is required.",
    "CountMin": "The visual role '{role}' must have at least {countMin} mapped attribute(s).",
    "CountMax": "The visual role '{role}' must have at most {countMax} mapped attribute(s).",
    # Type-level failures raised while defining role types.
    "noLevelsInNonAbstract": "A non-abstract visual role mapping type must have at least one measurement level.",
    "levelsLockedWhenTypeHasDescendants": "Cannot change the levels of a visual role mapping type that has descendants.",
    "dataTypeLockedWhenTypeHasDescendants": (
        "Cannot change the data type of a visual role mapping type that has descendants."
    ),
    "dataTypeNotSubtypeOfBaseType": "The data type '{dataType}' is not a subtype of the current data type '{baseType}'.",
    "dataTypeIncompatibleWithRoleLevel": (
        "The data type '{dataType}' is qualitative only and is incompatible with the measurement level '{level}'."
    ),
}


class MessageBundle:
    """Formats messages from templates, falling back to the defaults."""

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self._templates = dict(DEFAULT_MESSAGES)
        if overrides:
            self._templates.update(overrides)

    def template(self, key: str) -> str:
        return self._templates.get(key, key)

    def format(self, key: str, params: Mapping[str, Any] | None = None) -> str:
        """Render a message, falling back to the default template when an override cannot be rendered."""
        params = params or {}
        text = _render(self.template(key), params)
        if text:
            return text
        return _render(DEFAULT_MESSAGES.get(key, key), params) or key


def _render(template: Any, params: Mapping[str, Any]) -> str | None:
    if not isinstance(template, str):
        return None
    try:
        return template.format(**params)
    except (KeyError, IndexError, ValueError, AttributeError, TypeError):
        return None


bundle = MessageBundle()


def format_level_list(levels: Any) -> str:
    return ", ".join(f"'{level}'" for level in levels)
