"""Dataset schema: the data attributes a visual model's data exposes."""

from __future__ import annotations

from typing import Any


class DataAttribute:
    def __init__(self, name: str, type_ref: str, *, level: str | None = None, label: str | None = None) -> None:
        self.name = name
        self.type = type_ref
        self.level = level
        self.label = label

    def __repr__(self) -> str:
        return f"DataAttribute({self.name!r}, type={self.type!r}, level={self.level!r})"

    def __str__(self) -> str:
        return self.label or self.name


class DataAttributes:
    """Attributes of a data table, kept in declaration order and looked up by name."""

    def __init__(self, attributes: list[DataAttribute] | None = None) -> None:
        self._by_name: dict[str, DataAttribute] = {}
        for attr in attributes or []:
            self.add(attr)

    def add(self, attribute: DataAttribute) -> None:
        self._by_name[attribute.name] = attribute

    def get(self, name: str | None) -> DataAttribute | None:
        if not isinstance(name, str):
            return None
        return self._by_name.get(name)


class DataTable:
    def __init__(self, attributes: list[DataAttribute] | None = None) -> None:
        self.attributes = DataAttributes(attributes)

    @classmethod
    def from_spec(cls, spec: dict[str, Any]) -> DataTable:
        return cls(
            [
                DataAttribute(a["name"], a["type"], level=a.get("level"), label=a.get("label"))
                for a in spec.get("attributes", [])
            ]
        )
