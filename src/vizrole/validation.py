"""Validation layer: visual role mapping validation and configuration bundle contracts."""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING, Any

from . import levels as ml
from .attribute import AGGREGATIONS, find_duplicates
from .errors import build_error_envelope, combine_errors
from .messages import MessageBundle, bundle as default_bundle, format_level_list
from .resolution import level_effective, lowest_level_in_valid_attributes, role_level_compatible_with
from .role_type import ROOT_ROLE_TYPE_ID

if TYPE_CHECKING:
    from .mapping import RoleMapping

Errors = list[dict[str, Any]]


class ValidationError(ValueError):
    """Raised when configuration bundle contracts are violated."""


def _ensure(condition: bool, message: str) -> None:
    if not condition:
        raise ValidationError(message)


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(x, str) for x in value)


def _is_label(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value != "")


# region mapping validation
def _messages(mapping: RoleMapping) -> MessageBundle:
    model = mapping.model
    return model.messages if model is not None else default_bundle


def _role_label(mapping: RoleMapping) -> Any:
    return mapping.model_property or mapping.type


def _error(mapping: RoleMapping, kind: str, params: dict[str, Any], details: dict[str, Any]) -> dict[str, Any]:
    return build_error_envelope(kind, _messages(mapping).format(kind, params), details)


def _validate_base(mapping: RoleMapping) -> Errors:
    role = _role_label(mapping)
    errors: Errors = []
    for idx, attr in enumerate(mapping.attributes):
        if not isinstance(attr.name, str) or attr.name == "":
            errors.append(
                _error(mapping, "AttributeNameRequired", {"index": idx, "role": role}, {"role": str(role), "index": idx})
            )
        elif attr.aggregation not in AGGREGATIONS:
            errors.append(
                _error(
                    mapping,
                    "AggregationNotInDomain",
                    {"name": attr.name, "aggregation": attr.aggregation, "role": role, "aggregations": ", ".join(AGGREGATIONS)},
                    {"role": str(role), "index": idx, "name": attr.name, "aggregation": attr.aggregation},
                )
            )
    return errors


def _validate_data_props(mapping: RoleMapping) -> Errors:
    """Every mapped attribute must be defined in data and have a type compatible with the role's data type."""
    data = mapping.model.data  # type: ignore[union-attr]
    data_attrs = data.attributes if data is not None else None
    role_data_type = mapping.type.data_type
    role = _role_label(mapping)
    registry = mapping.type.registry

    errors: Errors = []
    for idx, attr in enumerate(mapping.attributes):
        data_attr = data_attrs.get(attr.name) if data_attrs is not None else None
        if data_attr is None:
            errors.append(
                _error(
                    mapping,
                    "AttributeNotDefinedInData",
                    {"name": attr.name, "role": role},
                    {"role": str(role), "index": idx, "name": attr.name},
                )
            )
            continue

        data_attr_type = registry.get(data_attr.type)
        if data_attr_type is None or not data_attr_type.is_subtype_of(role_data_type):
            errors.append(
                _error(
                    mapping,
                    "AttributeDataTypeNotSubtypeOfRoleType",
                    {"name": attr.name, "dataType": data_attr.type, "role": role, "roleDataType": role_data_type},
                    {
                        "role": str(role),
                        "index": idx,
                        "name": attr.name,
                        "dataType": str(data_attr.type),
                        "roleDataType": role_data_type.id,
                    },
                )
            )
    return errors


def _validate_level(mapping: RoleMapping) -> Errors:
    """The fixed level must be a role level and the attributes' level must be compatible with the role levels."""
    all_role_levels = mapping.type.levels
    role = _role_label(mapping)
    role_levels_text = format_level_list(all_role_levels)
    role_level_keys = [level.key for level in all_role_levels]

    level = mapping.level
    if level is not None:
        if level not in all_role_levels:
            return [
                _error(
                    mapping,
                    "LevelNotOneOfRoleLevels",
                    {"role": role, "level": level, "roleLevels": role_levels_text},
                    {"role": str(role), "level": level.key, "roleLevels": role_level_keys},
                )
            ]
        role_levels = [level]
    else:
        role_levels = list(all_role_levels)

    data_level = lowest_level_in_valid_attributes(mapping)
    if data_level is not None and role_level_compatible_with(data_level, role_levels) is None:
        return [
            _error(
                mapping,
                "AttributesLevelNotCompatibleWithRoleLevels",
                {"role": role, "dataLevel": data_level.label, "roleLevels": role_levels_text},
                {"role": str(role), "dataLevel": data_level.key, "roleLevels": role_level_keys},
            )
        ]
    return []


def _validate_dupl_mapping_attrs(mapping: RoleMapping) -> Errors:
    """Mapped attributes must not repeat their identity key under the effective level."""
    level = level_effective(mapping)
    if level is None:
        return []
    attributes = mapping.attributes
    if len(attributes) <= 1:
        return []

    role = _role_label(mapping)
    data = mapping.model.data  # type: ignore[union-attr]
    is_quant = ml.is_quantitative(level)

    errors: Errors = []
    for idx in find_duplicates(list(attributes), is_quant):
        attr = attributes[idx]
        data_attr = data.attributes.get(attr.name) if data is not None else None
        display_name = attr.label or (data_attr if data_attr is not None else attr.name)
        details = {"role": str(role), "index": idx, "name": attr.name}
        if is_quant:
            errors.append(
                _error(
                    mapping,
                    "AttributeAndAggregationDuplicate",
                    {"name": display_name, "aggregation": attr.aggregation, "role": role},
                    {**details, "aggregation": attr.aggregation},
                )
            )
        else:
            errors.append(_error(mapping, "AttributeDuplicate", {"name": display_name, "role": role}, details))
    return errors


def validate_mapping(mapping: RoleMapping) -> Errors | None:
    """Validate a visual role mapping and return its errors, or `None` when valid.

    1. Base validation of the mapped attributes; failures stop validation.
    2. The mapping must be owned by a visual model role; otherwise nothing else is checked.
    3. Mapped attributes must be defined in the model's data, with a compatible data type.
    4. A fixed level must be one of the role's levels, and the attributes' level must be
       compatible with the role's levels.
    5. Only when everything else is valid: mapped attributes must not be duplicates, by
       name and aggregation under a quantitative effective level, by name otherwise.
    """
    errors = combine_errors(None, _validate_base(mapping))
    if errors:
        return errors

    if mapping.model is None or mapping.model_property is None:
        return [
            build_error_envelope(
                "NoOwnerVisualModel",
                _messages(mapping).format("NoOwnerVisualModel"),
                {"roleType": mapping.type.id},
            )
        ]

    errors = combine_errors(errors, _validate_data_props(mapping))
    errors = combine_errors(errors, _validate_level(mapping))
    if not errors:
        errors = combine_errors(errors, _validate_dupl_mapping_attrs(mapping))
    return errors
# endregion


# region bundle contracts
def validate_data_types(data_types: Any) -> None:
    _ensure(isinstance(data_types, list), "dataTypes must be an array")
    ids: list[str] = []
    for idx, entry in enumerate(data_types):
        _ensure(isinstance(entry, dict), f"dataTypes[{idx}] must be object")
        type_id = entry.get("id")
        _ensure(isinstance(type_id, str) and type_id != "", f"dataTypes[{idx}].id is required")
        base = entry.get("base")
        _ensure(isinstance(base, str) and base != "", f"dataTypes[{idx}].base is required")
        _ensure(isinstance(entry.get("isAbstract", False), bool), f"dataTypes[{idx}].isAbstract must be boolean")
        ids.append(type_id)
    _ensure(len(ids) == len(set(ids)), "dataTypes ids must be unique")


def validate_roles(roles: Any) -> None:
    _ensure(isinstance(roles, list), "roles must be an array")
    declared: set[str] = {ROOT_ROLE_TYPE_ID}
    for idx, entry in enumerate(roles):
        _ensure(isinstance(entry, dict), f"roles[{idx}] must be object")
        role_id = entry.get("id")
        _ensure(isinstance(role_id, str) and role_id != "", f"roles[{idx}].id is required")
        _ensure(role_id not in declared, f"roles[{idx}].id must be unique")
        base = entry.get("base")
        if base is not None:
            _ensure(isinstance(base, str) and base in declared, f"roles[{idx}].base must reference an earlier role")
        levels = entry.get("levels")
        if levels is not None:
            _ensure(_is_str_list(levels), f"roles[{idx}].levels must be an array of strings")
            for level in levels:
                _ensure(ml.get_level(level) is not None, f"roles[{idx}].levels: '{level}' is not a measurement level")
        data_type = entry.get("dataType")
        if data_type is not None:
            _ensure(isinstance(data_type, str) and data_type != "", f"roles[{idx}].dataType must be non-empty string")
        _ensure(isinstance(entry.get("isAbstract", False), bool), f"roles[{idx}].isAbstract must be boolean")
        declared.add(role_id)


def validate_model_spec(model: Any, roles: list[dict[str, Any]]) -> None:
    _ensure(isinstance(model, dict), "model must be an object")
    props = model.get("roles")
    _ensure(isinstance(props, list), "model.roles must be an array")
    role_ids = {entry["id"] for entry in roles}
    names: list[str] = []
    for idx, prop in enumerate(props):
        _ensure(isinstance(prop, dict), f"model.roles[{idx}] must be object")
        name = prop.get("name")
        _ensure(isinstance(name, str) and name != "", f"model.roles[{idx}].name is required")
        names.append(name)
        _ensure(prop.get("type") in role_ids, f"model.roles[{idx}].type must reference a declared role")
        _ensure(isinstance(prop.get("isRequired", False), bool), f"model.roles[{idx}].isRequired must be boolean")
        _ensure(_is_label(prop.get("label")), f"model.roles[{idx}].label must be non-empty string")
        count_min = prop.get("countMin", 0)
        _ensure(
            isinstance(count_min, int) and not isinstance(count_min, bool) and count_min >= 0,
            f"model.roles[{idx}].countMin must be non-negative integer",
        )
        count_max = prop.get("countMax")
        if count_max is not None:
            _ensure(
                isinstance(count_max, int) and not isinstance(count_max, bool) and count_max >= count_min,
                f"model.roles[{idx}].countMax must be integer not less than countMin",
            )
    _ensure(len(names) == len(set(names)), "model.roles names must be unique")


def validate_data_spec(data: Any) -> None:
    if data is None:
        return
    _ensure(isinstance(data, dict), "data must be an object or null")
    attributes = data.get("attributes")
    _ensure(isinstance(attributes, list), "data.attributes must be an array")
    names: list[str] = []
    for idx, attr in enumerate(attributes):
        _ensure(isinstance(attr, dict), f"data.attributes[{idx}] must be object")
        name = attr.get("name")
        _ensure(isinstance(name, str) and name != "", f"data.attributes[{idx}].name is required")
        names.append(name)
        _ensure(isinstance(attr.get("type"), str) and attr["type"] != "", f"data.attributes[{idx}].type is required")
        level = attr.get("level")
        _ensure(level is None or isinstance(level, str), f"data.attributes[{idx}].level must be string or null")
        _ensure(_is_label(attr.get("label")), f"data.attributes[{idx}].label must be non-empty string")
    _ensure(len(names) == len(set(names)), "data.attributes names must be unique")


def validate_mappings_spec(mappings: Any, model: dict[str, Any]) -> None:
    _ensure(isinstance(mappings, dict), "mappings must be an object")
    slot_names = {prop["name"] for prop in model["roles"]}
    for slot, spec in mappings.items():
        _ensure(slot in slot_names, f"mappings['{slot}'] must reference a model role")
        _ensure(isinstance(spec, dict), f"mappings['{slot}'] must be object")
        level = spec.get("level")
        if level is not None:
            _ensure(ml.get_level(level) is not None, f"mappings['{slot}'].level: '{level}' is not a measurement level")
        attributes = spec.get("attributes", [])
        _ensure(isinstance(attributes, list), f"mappings['{slot}'].attributes must be an array")
        for idx, attr in enumerate(attributes):
            _ensure(isinstance(attr, (dict, str)), f"mappings['{slot}'].attributes[{idx}] must be object or string")
            if isinstance(attr, dict):
                _ensure(_is_label(attr.get("label")), f"mappings['{slot}'].attributes[{idx}].label must be non-empty string")


def validate_messages_spec(messages: Any) -> None:
    _ensure(isinstance(messages, dict), "messages must be an object")
    for key, template in messages.items():
        _ensure(isinstance(template, str) and template.strip() != "", f"messages['{key}'] must be non-empty string")


def normalize_bundle(bundle: dict[str, Any]) -> dict[str, Any]:
    _ensure(isinstance(bundle, dict), "bundle must be an object")
    cfg = deepcopy(bundle)
    cfg.setdefault("dataTypes", [])
    cfg.setdefault("data", None)
    cfg.setdefault("mappings", {})
    cfg.setdefault("messages", {})
    for slot, spec in cfg["mappings"].items():
        if isinstance(spec, dict):
            spec.setdefault("level", None)
            spec.setdefault("attributes", [])
            spec["attributes"] = [{"name": a} if isinstance(a, str) else a for a in spec["attributes"]]
        else:
            raise ValidationError(f"mappings['{slot}'] must be object")
    return cfg


def validate_bundle_inputs(bundle: dict[str, Any]) -> dict[str, Any] | None:
    """Validate bundle sections in order and return a validation envelope on failure."""
    try:
        _ensure(isinstance(bundle, dict), "bundle must be object")
        for section in ("roles", "model"):
            _ensure(section in bundle, f"missing required section: {section}")
    except ValidationError as exc:
        return build_error_envelope("Validation", f"bundle: {exc}", {"section": "bundle"})

    checks = (
        ("dataTypes", lambda: validate_data_types(bundle.get("dataTypes", []))),
        ("roles", lambda: validate_roles(bundle["roles"])),
        ("model", lambda: validate_model_spec(bundle["model"], bundle["roles"])),
        ("data", lambda: validate_data_spec(bundle.get("data"))),
        ("mappings", lambda: validate_mappings_spec(bundle.get("mappings", {}), bundle["model"])),
        ("messages", lambda: validate_messages_spec(bundle.get("messages", {}))),
    )
    for section, check in checks:
        try:
            check()
        except ValidationError as exc:
            return build_error_envelope("Validation", f"{section}: {exc}", {"section": section})
    return None
# endregion
