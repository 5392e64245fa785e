"""
Validation for selector configuration.

Validates:
- Option types
- Numeric ranges
- Action name lists
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

BOOL_OPTIONS = (
    "tick_manually",
    "ignore_zero_score",
    "invert_scoring",
    "invert_priority",
    "randomize_on_equality",
    "can_run_without_body",
)

NON_NEGATIVE_OPTIONS = (
    "equality_tolerance",
    "minimum_dwell_seconds",
)


@dataclass
class ValidationError:
    """A validation error."""
    field: str
    message: str
    value: str = ""


class ValidationResult:
    """Result of validation check."""

    def __init__(self):
        self.errors: List[ValidationError] = []

    def add_error(self, field: str, message: str, value: str = "") -> None:
        self.errors.append(ValidationError(field, message, value))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.errors.extend(other.errors)
        return self

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self, context: str = "Validation") -> None:
        if not self.is_valid:
            msgs = [f"{e.field}: {e.message}" for e in self.errors]
            raise ValueError(f"{context} failed:\n" + "\n".join(msgs))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_action_names(names: Any) -> ValidationResult:
    """Validate the configured action list."""
    result = ValidationResult()

    if not isinstance(names, (list, tuple)):
        result.add_error("actions", "Must be a list of action names", str(names))
        return result

    seen = set()
    for name in names:
        if not isinstance(name, str) or not name:
            result.add_error("actions", "Action names must be non-empty strings", str(name))
        elif name in seen:
            result.add_error("actions", "Duplicate action name", name)
        seen.add(name)

    return result


def validate_selector_config(data: Dict[str, Any]) -> ValidationResult:
    """
    Validate a raw selector config mapping (e.g. parsed from YAML).

    Unknown keys are not errors; SelectorConfig.from_dict ignores them.
    """
    result = ValidationResult()

    if not isinstance(data, dict):
        result.add_error("config", "Must be a mapping", type(data).__name__)
        return result

    for key in BOOL_OPTIONS:
        if key in data and not isinstance(data[key], bool):
            result.add_error(key, "Must be true or false", str(data[key]))

    for key in NON_NEGATIVE_OPTIONS:
        if key not in data:
            continue
        value = data[key]
        if not _is_number(value):
            result.add_error(key, "Must be a number", str(value))
        elif value < 0:
            result.add_error(key, "Must be >= 0", str(value))

    seed = data.get("random_seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        result.add_error("random_seed", "Must be an integer or null", str(seed))

    if "actions" in data:
        result.merge(validate_action_names(data["actions"]))

    return result
