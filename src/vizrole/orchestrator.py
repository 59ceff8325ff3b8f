"""End-to-end validation orchestration (bundle contracts -> type loading -> model validation)."""

from __future__ import annotations

import logging
from typing import Any

from .errors import ArgumentInvalidError, ArgumentRequiredError, OperationInvalidError, build_error_envelope
from .levels import MeasurementLevel
from .loader import load_bundle
from .validation import normalize_bundle, validate_bundle_inputs

logger = logging.getLogger(__name__)


def _level_key(level: MeasurementLevel | None) -> str | None:
    return level.key if level is not None else None


def run_validation_pipeline(bundle: dict[str, Any]) -> dict[str, Any]:
    """Validate a configuration bundle and return the role report or an error envelope."""
    validation_envelope = validate_bundle_inputs(bundle)
    if validation_envelope is not None:
        return validation_envelope

    cfg = normalize_bundle(bundle)
    try:
        loaded = load_bundle(cfg)
    except (ArgumentInvalidError, ArgumentRequiredError) as exc:
        return build_error_envelope("TypeDefinition", str(exc), {"argument": exc.name})
    except OperationInvalidError as exc:
        return build_error_envelope("TypeDefinition", str(exc), {})
    logger.debug("loaded %d role types", len(loaded.role_types))

    model = loaded.model
    roles: list[dict[str, Any]] = []
    for prop in model.properties:
        mapping = model.get_mapping(prop.name)
        roles.append(
            {
                "role": prop.name,
                "type": prop.mapping_type.id,
                "levels": [level.key for level in prop.mapping_type.levels],
                "dataType": prop.mapping_type.data_type.id,
                "isMapped": mapping.is_mapped if mapping is not None else False,
                "level": _level_key(mapping.level) if mapping is not None else None,
                "levelAuto": _level_key(mapping.level_auto) if mapping is not None else None,
                "levelEffective": _level_key(mapping.level_effective) if mapping is not None else None,
            }
        )

    errors = model.validate() or []
    logger.debug("model validation produced %d error(s)", len(errors))
    return {
        "isValid": len(errors) == 0,
        "roles": roles,
        "errors": errors,
    }
