"""Error taxonomy: fail-fast type errors and validation error envelopes."""

from __future__ import annotations

from typing import Any

MAPPING_ERROR_KINDS = frozenset(
    {
        "NoOwnerVisualModel",
        "AttributeNotDefinedInData",
        "AttributeDataTypeNotSubtypeOfRoleType",
        "LevelNotOneOfRoleLevels",
        "AttributesLevelNotCompatibleWithRoleLevels",
        "AttributeDuplicate",
        "AttributeAndAggregationDuplicate",
    }
)

BASE_ERROR_KINDS = frozenset({"AttributeNameRequired", "AggregationNotInDomain"})

CARDINALITY_ERROR_KINDS = frozenset({"ValueRequired", "CountMin", "CountMax"})

PIPELINE_ERROR_KINDS = frozenset({"Validation", "TypeDefinition"})

ERROR_KINDS = MAPPING_ERROR_KINDS | BASE_ERROR_KINDS | CARDINALITY_ERROR_KINDS | PIPELINE_ERROR_KINDS


class ArgumentRequiredError(ValueError):
    """Raised when a required argument resolves to an empty value."""

    def __init__(self, name: str, message: str = "") -> None:
        super().__init__(message or f"Argument '{name}' is required.")
        self.name = name


class ArgumentInvalidError(ValueError):
    """Raised when an argument value violates a type-level rule."""

    def __init__(self, name: str, message: str = "") -> None:
        super().__init__(message or f"Argument '{name}' is invalid.")
        self.name = name


class OperationInvalidError(RuntimeError):
    """Raised when an operation is not allowed in the object's current state."""


def build_error_envelope(error: str, reason: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build an error envelope of one of the known error kinds."""
    if error not in ERROR_KINDS:
        raise ArgumentInvalidError("error", f"Unknown error kind: {error}")
    if not isinstance(reason, str) or reason == "":
        raise ArgumentInvalidError("reason", "reason must be non-empty string")
    payload: dict[str, Any] = {
        "error": error,
        "reason": reason,
        "details": details if details is not None else {},
    }
    return payload


def is_envelope(payload: Any) -> bool:
    return isinstance(payload, dict) and set(payload.keys()) == {"error", "reason", "details"}


def combine_errors(errors: list[dict[str, Any]] | None, new_errors: list[dict[str, Any]] | None) -> list[dict[str, Any]] | None:
    """Concatenate two error lists, keeping `None` for "no errors"."""
    if not new_errors:
        return errors
    if not errors:
        return list(new_errors)
    return errors + list(new_errors)
