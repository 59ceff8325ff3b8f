"""Build value types, role types, a visual model and its mappings from a configuration bundle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .data import DataTable
from .datatypes import TypeRegistry, default_registry
from .mapping import RoleMapping
from .messages import MessageBundle
from .model import RoleProperty, VisualModel
from .role_type import ROOT_ROLE_TYPE_ID, RoleMappingType

logger = logging.getLogger(__name__)


@dataclass
class LoadedBundle:
    registry: TypeRegistry
    root: RoleMappingType
    role_types: dict[str, RoleMappingType]
    model: VisualModel


def load_data_types(data_types: list[dict[str, Any]], registry: TypeRegistry | None = None) -> TypeRegistry:
    registry = registry if registry is not None else default_registry()
    for entry in data_types:
        registry.define(entry["id"], entry["base"], is_abstract=entry.get("isAbstract", False))
    return registry


def load_role_types(roles: list[dict[str, Any]], root: RoleMappingType) -> dict[str, RoleMappingType]:
    """Create role types in declaration order; each base must be declared before its subtypes."""
    role_types: dict[str, RoleMappingType] = {ROOT_ROLE_TYPE_ID: root}
    for entry in roles:
        base = role_types[entry.get("base") or ROOT_ROLE_TYPE_ID]
        role_types[entry["id"]] = base.extend(
            entry["id"],
            levels=entry.get("levels"),
            data_type=entry.get("dataType"),
            is_abstract=entry.get("isAbstract", False),
        )
    return role_types


def load_model(
    cfg: dict[str, Any],
    role_types: dict[str, RoleMappingType],
    messages: MessageBundle | None = None,
) -> VisualModel:
    properties = [
        RoleProperty(
            prop["name"],
            role_types[prop["type"]],
            is_required=prop.get("isRequired", False),
            count_min=prop.get("countMin", 0),
            count_max=prop.get("countMax"),
            label=prop.get("label"),
        )
        for prop in cfg["model"]["roles"]
    ]
    data = DataTable.from_spec(cfg["data"]) if cfg.get("data") is not None else None
    model = VisualModel(properties, data=data, messages=messages)

    for prop in properties:
        spec = (cfg.get("mappings") or {}).get(prop.name)
        mapping = RoleMapping(
            prop.mapping_type,
            level=spec.get("level") if spec else None,
            attributes=spec.get("attributes") if spec else None,
        )
        model.set_mapping(prop.name, mapping)
    logger.debug("loaded visual model with roles %s", [p.name for p in properties])
    return model


def load_bundle(cfg: dict[str, Any]) -> LoadedBundle:
    """Load a normalized bundle.

    Raises the type-level errors of `vizrole.errors` when a data type or role
    type definition breaks a type rule.
    """
    registry = load_data_types(cfg.get("dataTypes", []))
    root = RoleMappingType.create_root(registry)
    role_types = load_role_types(cfg["roles"], root)
    messages = MessageBundle(cfg.get("messages") or None)
    model = load_model(cfg, role_types, messages)
    return LoadedBundle(registry=registry, root=root, role_types=role_types, model=model)
