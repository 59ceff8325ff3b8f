"""Mapping attributes and the identity keys used to detect duplicates."""

from __future__ import annotations

from typing import Any, Hashable

from .errors import ArgumentInvalidError

AGGREGATIONS = ("sum", "avg", "min", "max", "count")
DEFAULT_AGGREGATION = "sum"


class MappingAttribute:
    """A reference from a visual role mapping to a data attribute, by name."""

    def __init__(self, name: str, *, aggregation: str | None = None, label: str | None = None) -> None:
        self.name = name
        self.aggregation = aggregation if aggregation is not None else DEFAULT_AGGREGATION
        self.label = label

    @classmethod
    def from_spec(cls, spec: MappingAttribute | str | dict[str, Any]) -> MappingAttribute:
        if isinstance(spec, MappingAttribute):
            return spec
        if isinstance(spec, str):
            return cls(spec)
        if isinstance(spec, dict):
            return cls(spec.get("name", ""), aggregation=spec.get("aggregation"), label=spec.get("label"))
        raise ArgumentInvalidError("attribute", f"Cannot build a mapping attribute from {type(spec).__name__}.")

    @property
    def key_qualitative(self) -> Hashable:
        return self.name

    @property
    def key_quantitative(self) -> Hashable:
        return (self.name, self.aggregation)

    def identity_key(self, is_quantitative: bool) -> Hashable:
        return self.key_quantitative if is_quantitative else self.key_qualitative

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingAttribute):
            return NotImplemented
        return (self.name, self.aggregation, self.label) == (other.name, other.aggregation, other.label)

    def __repr__(self) -> str:
        return f"MappingAttribute({self.name!r}, aggregation={self.aggregation!r})"


def find_duplicates(attributes: list[MappingAttribute], is_quantitative: bool) -> list[int]:
    """Return the positions of attributes whose identity key was already seen."""
    seen: set[Hashable] = set()
    out: list[int] = []
    for idx, attr in enumerate(attributes):
        key = attr.identity_key(is_quantitative)
        if key in seen:
            out.append(idx)
            continue
        seen.add(key)
    return out
