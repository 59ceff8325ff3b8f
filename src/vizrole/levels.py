"""Measurement levels: a totally ordered domain split into qualitative and quantitative."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable

from .errors import ArgumentInvalidError

if TYPE_CHECKING:
    from .datatypes import ValueType


class MeasurementLevel(Enum):
    """Levels of measurement, declared from lowest to highest."""

    NOMINAL = "nominal"
    ORDINAL = "ordinal"
    QUANTITATIVE = "quantitative"

    @property
    def key(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def order(self) -> int:
        return _ORDER[self]

    def __str__(self) -> str:
        return self.value


_ORDER = {level: idx for idx, level in enumerate(MeasurementLevel)}

_LABELS = {
    MeasurementLevel.NOMINAL: "Nominal",
    MeasurementLevel.ORDINAL: "Ordinal",
    MeasurementLevel.QUANTITATIVE: "Quantitative",
}

_QUANTITATIVE = frozenset({MeasurementLevel.QUANTITATIVE})

# Value types whose descendants can carry quantitative data.
QUANTITATIVE_TYPE_IDS = ("number", "date")


def get_level(value: MeasurementLevel | str | None) -> MeasurementLevel | None:
    """Return the level for a level or key, or `None` when not in the domain."""
    if isinstance(value, MeasurementLevel):
        return value
    if isinstance(value, str):
        try:
            return MeasurementLevel(value)
        except ValueError:
            return None
    return None


def parse_level(value: MeasurementLevel | str) -> MeasurementLevel:
    level = get_level(value)
    if level is None:
        raise ArgumentInvalidError("level", f"'{value}' is not a measurement level.")
    return level


def parse_levels(values: Iterable[MeasurementLevel | str] | MeasurementLevel | str) -> list[MeasurementLevel]:
    if isinstance(values, (MeasurementLevel, str)):
        values = [values]
    return [parse_level(v) for v in values]


def compare(a: MeasurementLevel | str, b: MeasurementLevel | str) -> int:
    """Compare two levels, returning -1, 0 or 1."""
    oa = parse_level(a).order
    ob = parse_level(b).order
    return (oa > ob) - (oa < ob)


def is_quantitative(level: MeasurementLevel | str) -> bool:
    return parse_level(level) in _QUANTITATIVE


def is_qualitative(level: MeasurementLevel | str) -> bool:
    return not is_quantitative(level)


def sort_levels(levels: Iterable[MeasurementLevel]) -> list[MeasurementLevel]:
    return sorted(levels, key=lambda level: level.order)


def is_type_qualitative_only(value_type: ValueType) -> bool:
    """Tell whether values of a type can only be measured qualitatively.

    Abstract types are never qualitative-only: a subtype may still be numeric.
    """
    if value_type.is_abstract:
        return False
    return not any(value_type.is_subtype_of_id(type_id) for type_id in QUANTITATIVE_TYPE_IDS)
