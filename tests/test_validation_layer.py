from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from vizrole.errors import ArgumentInvalidError, build_error_envelope, combine_errors, is_envelope  # noqa: E402
from vizrole.validation import (  # noqa: E402
    ValidationError,
    normalize_bundle,
    validate_bundle_inputs,
    validate_data_spec,
    validate_data_types,
    validate_mappings_spec,
    validate_messages_spec,
    validate_model_spec,
    validate_roles,
)


def _data_types() -> list[dict]:
    return [{"id": "currency", "base": "number"}]


def _roles() -> list[dict]:
    return [
        {"id": "category", "levels": ["nominal", "ordinal"], "dataType": "string"},
        {"id": "measure", "levels": ["quantitative"], "dataType": "number"},
        {"id": "color", "levels": ["nominal", "quantitative"]},
    ]


def _model() -> dict:
    return {
        "roles": [
            {"name": "rows", "type": "category", "isRequired": True},
            {"name": "measures", "type": "measure", "countMin": 1, "countMax": 2},
            {"name": "color", "type": "color"},
        ]
    }


def _data() -> dict:
    return {
        "attributes": [
            {"name": "country", "type": "string", "level": "nominal"},
            {"name": "sales", "type": "currency", "level": "quantitative"},
        ]
    }


def _mappings() -> dict:
    return {
        "rows": {"attributes": ["country"]},
        "measures": {"level": "quantitative", "attributes": [{"name": "sales", "aggregation": "avg"}]},
    }


def _bundle() -> dict:
    return {
        "dataTypes": _data_types(),
        "roles": _roles(),
        "model": _model(),
        "data": _data(),
        "mappings": _mappings(),
    }


def test_validation_layer_accepts_valid_minimal_inputs() -> None:
    validate_data_types(_data_types())
    validate_roles(_roles())
    validate_model_spec(_model(), _roles())
    validate_data_spec(_data())
    validate_data_spec(None)
    validate_mappings_spec(_mappings(), _model())


def test_data_types_reject_duplicate_ids() -> None:
    with pytest.raises(ValidationError, match="dataTypes ids must be unique"):
        validate_data_types(_data_types() * 2)


def test_roles_reject_unknown_level() -> None:
    roles = _roles()
    roles[0]["levels"] = ["nominal", "interval"]
    with pytest.raises(ValidationError, match="interval"):
        validate_roles(roles)


def test_roles_require_base_to_be_declared_earlier() -> None:
    roles = _roles()
    roles[0]["base"] = "measure"
    with pytest.raises(ValidationError, match="base"):
        validate_roles(roles)


def test_roles_accept_root_as_base_but_not_as_id() -> None:
    validate_roles([{"id": "color", "base": "mapping", "levels": ["nominal"]}])
    with pytest.raises(ValidationError, match="unique"):
        validate_roles([{"id": "mapping", "levels": ["nominal"]}])


def test_model_rejects_undeclared_role_type() -> None:
    model = _model()
    model["roles"][2]["type"] = "shape"
    with pytest.raises(ValidationError, match="type"):
        validate_model_spec(model, _roles())


def test_model_rejects_count_max_below_count_min() -> None:
    model = _model()
    model["roles"][1]["countMax"] = 0
    with pytest.raises(ValidationError, match="countMax"):
        validate_model_spec(model, _roles())


def test_data_rejects_duplicate_attribute_names() -> None:
    data = _data()
    data["attributes"].append({"name": "country", "type": "string"})
    with pytest.raises(ValidationError, match="names must be unique"):
        validate_data_spec(data)


def test_mappings_reject_unknown_slot_and_level() -> None:
    with pytest.raises(ValidationError, match="model role"):
        validate_mappings_spec({"shape": {"attributes": []}}, _model())
    with pytest.raises(ValidationError, match="interval"):
        validate_mappings_spec({"rows": {"level": "interval"}}, _model())


def test_labels_must_be_non_empty_strings() -> None:
    model = _model()
    model["roles"][0]["label"] = 5
    with pytest.raises(ValidationError, match="label"):
        validate_model_spec(model, _roles())
    data = _data()
    data["attributes"][0]["label"] = 7
    with pytest.raises(ValidationError, match="label"):
        validate_data_spec(data)
    with pytest.raises(ValidationError, match="label"):
        validate_mappings_spec({"rows": {"attributes": [{"name": "country", "label": ""}]}}, _model())


def test_messages_must_be_non_empty_strings() -> None:
    validate_messages_spec({"ValueRequired": "Fill {role}"})
    with pytest.raises(ValidationError, match="AttributeNotDefinedInData"):
        validate_messages_spec({"AttributeNotDefinedInData": ""})
    with pytest.raises(ValidationError, match="CountMax"):
        validate_messages_spec({"CountMax": 5})


def test_normalize_bundle_fills_defaults() -> None:
    cfg = normalize_bundle({"roles": _roles(), "model": _model(), "mappings": {"rows": {"attributes": ["country"]}}})
    assert cfg["dataTypes"] == []
    assert cfg["data"] is None
    assert cfg["messages"] == {}
    assert cfg["mappings"]["rows"] == {"level": None, "attributes": [{"name": "country"}]}


def test_normalize_bundle_does_not_mutate_input() -> None:
    bundle = _bundle()
    normalize_bundle(bundle)
    assert bundle == _bundle()


def test_error_envelope_shape() -> None:
    env = build_error_envelope("Validation", "bad input", {"section": "roles"})
    assert set(env.keys()) == {"error", "reason", "details"}
    assert env["error"] == "Validation"
    assert env["reason"] == "bad input"
    assert env["details"] == {"section": "roles"}
    assert is_envelope(env)


def test_error_envelope_rejects_unknown_kind_and_empty_reason() -> None:
    with pytest.raises(ArgumentInvalidError):
        build_error_envelope("Unknown", "reason")
    with pytest.raises(ArgumentInvalidError):
        build_error_envelope("Validation", "")


def test_combine_errors_keeps_none_for_no_errors() -> None:
    env = build_error_envelope("NoOwnerVisualModel", "detached")
    assert combine_errors(None, []) is None
    assert combine_errors(None, [env]) == [env]
    assert combine_errors([env], [env]) == [env, env]


def test_validate_bundle_inputs_returns_none_when_valid() -> None:
    assert validate_bundle_inputs(_bundle()) is None


@pytest.mark.parametrize(
    ("mutate", "section_hint"),
    [
        (lambda b: b.pop("roles"), "bundle"),
        (lambda b: b["dataTypes"].append({"id": "currency", "base": "number"}), "dataTypes"),
        (lambda b: b["roles"][0].update({"levels": ["interval"]}), "roles"),
        (lambda b: b["model"]["roles"][0].update({"type": "missing"}), "model"),
        (lambda b: b["data"]["attributes"][0].pop("type"), "data"),
        (lambda b: b["mappings"].update({"shape": {}}), "mappings"),
        (lambda b: b.update({"messages": []}), "messages"),
    ],
)
def test_validate_bundle_inputs_maps_failures_to_validation_envelope(mutate, section_hint) -> None:
    bundle = _bundle()
    mutate(bundle)
    env = validate_bundle_inputs(bundle)
    assert isinstance(env, dict)
    assert set(env.keys()) == {"error", "reason", "details"}
    assert env["error"] == "Validation"
    assert section_hint in env["reason"]
    assert env["details"]["section"] == section_hint


def test_validate_bundle_inputs_envelope_is_deterministic_for_same_invalid_input() -> None:
    bundle = _bundle()
    bundle["roles"][0]["levels"] = ["interval"]
    assert validate_bundle_inputs(bundle) == validate_bundle_inputs(bundle)
