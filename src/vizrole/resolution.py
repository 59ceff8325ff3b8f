"""Measurement level resolution of visual role mappings.

Example 1: attributes `product|nominal, sales|quantitative` on a role with
levels `ordinal, quantitative`. The lowest attribute level is nominal, which
can be upgraded to ordinal: the auto level is ordinal.

Example 2: attributes `quantity|quantitative, sales|quantitative` on a role
with levels `ordinal`. Quantitative data can be downgraded to any qualitative
level: the auto level is ordinal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from . import levels as ml
from .levels import MeasurementLevel

if TYPE_CHECKING:
    from .data import DataAttribute, DataAttributes
    from .mapping import RoleMapping


def _data_attributes(mapping: RoleMapping) -> DataAttributes | None:
    model = mapping.model
    if model is None or model.data is None:
        return None
    return model.data.attributes


def _data_attribute_level(mapping: RoleMapping, data_attr: DataAttribute) -> MeasurementLevel | None:
    """Level of a data attribute usable by the role, or `None` if it is unknown or of an incompatible type."""
    level = ml.get_level(data_attr.level)
    if level is None:
        return None
    role_type = mapping.type
    data_attr_type = role_type.registry.get(data_attr.type)
    if data_attr_type is None or not data_attr_type.is_subtype_of(role_type.data_type):
        return None
    return level


def lowest_level_in_attributes(mapping: RoleMapping) -> MeasurementLevel | None:
    """Lowest level of all mapped data attributes.

    Returns `None` when there are no attributes, no owner model, no data, or when
    any attribute is undefined in data, has no known level, or has a type that
    is not a subtype of the role's data type.
    """
    attributes = mapping.attributes
    if not attributes:
        return None
    data_attrs = _data_attributes(mapping)
    if data_attrs is None:
        return None

    level_lowest: MeasurementLevel | None = None
    for mapping_attr in attributes:
        data_attr = data_attrs.get(mapping_attr.name) if mapping_attr.name else None
        if data_attr is None:
            return None
        level = _data_attribute_level(mapping, data_attr)
        if level is None:
            return None
        if level_lowest is None or ml.compare(level, level_lowest) < 0:
            level_lowest = level
    return level_lowest


def lowest_level_in_valid_attributes(mapping: RoleMapping) -> MeasurementLevel | None:
    """Lowest level among the mapped data attributes that are valid, skipping the others."""
    attributes = mapping.attributes
    if not attributes:
        return None
    data_attrs = _data_attributes(mapping)
    if data_attrs is None:
        return None

    level_lowest: MeasurementLevel | None = None
    for mapping_attr in attributes:
        data_attr = data_attrs.get(mapping_attr.name)
        if data_attr is None:
            continue
        level = _data_attribute_level(mapping, data_attr)
        if level is None:
            continue
        if level_lowest is None or ml.compare(level, level_lowest) < 0:
            level_lowest = level
    return level_lowest


def role_levels_compatible_with(
    attribute_level: MeasurementLevel,
    role_levels: Iterable[MeasurementLevel],
) -> list[MeasurementLevel]:
    """Role levels, ascending, that data of `attribute_level` can be operated in.

    Quantitative data is compatible with every role level; qualitative data only
    with qualitative role levels.
    """
    levels = list(role_levels)
    if ml.is_quantitative(attribute_level):
        return levels
    return [level for level in levels if not ml.is_quantitative(level)]


def role_level_compatible_with(
    attribute_level: MeasurementLevel,
    role_levels: Iterable[MeasurementLevel],
) -> MeasurementLevel | None:
    compatible = role_levels_compatible_with(attribute_level, role_levels)
    if compatible:
        return compatible[-1]
    return None


def level_auto(mapping: RoleMapping) -> MeasurementLevel | None:
    """The highest role level compatible with the lowest level of the mapped attributes."""
    level_lowest = lowest_level_in_attributes(mapping)
    if level_lowest is None:
        return None
    return role_level_compatible_with(level_lowest, mapping.type.levels)


def level_effective(mapping: RoleMapping) -> MeasurementLevel | None:
    """The fixed level when set, else the auto level."""
    if mapping.level is not None:
        return mapping.level
    return level_auto(mapping)
