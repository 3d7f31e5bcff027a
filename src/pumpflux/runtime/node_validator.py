"""Default-value initialization and field validation for node configs."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from pumpflux.core.models import InputField, Node, NodeTypeDefinition
from pumpflux.runtime.placeholder_resolver import PlaceholderResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationError:
    """A problem with one field of one node, shown next to that field."""

    node_id: str
    field: str
    message: str


def default_for(field: InputField) -> Any:
    """Initial value for a field the node's config does not set yet.

    Precedence: declared default, then False for booleans, 0 for numbers,
    the first option for constrained fields, otherwise an empty string.
    """
    if field.has_default:
        return field.default_value
    if field.type == "boolean":
        return False
    if field.type == "number":
        return 0
    if field.options:
        return field.options[0].value
    return ""


def initialize_defaults(node: Node, definition: Optional[NodeTypeDefinition]) -> Node:
    """Return a copy of node with every declared field present in its config.

    Fields already in the config are never overwritten.
    """
    new_node = node.model_copy(deep=True)
    if definition is None:
        return new_node
    for field in definition.input_fields:
        if field.name not in new_node.data.config:
            new_node.data.config[field.name] = default_for(field)
    return new_node


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def _check_number(node_id: str, field: InputField, value: Any) -> list[ValidationError]:
    if isinstance(value, bool):
        return [ValidationError(node_id, field.name, f"{field.name} must be a number")]
    try:
        number = float(value)
    except (TypeError, ValueError):
        return [ValidationError(node_id, field.name, f"{field.name} must be a number")]

    errors = []
    rules = field.validation
    if rules and rules.min is not None and number < rules.min:
        errors.append(ValidationError(node_id, field.name, f"{field.name} must be at least {rules.min:g}"))
    if rules and rules.max is not None and number > rules.max:
        errors.append(ValidationError(node_id, field.name, f"{field.name} must be at most {rules.max:g}"))
    return errors


def _check_string(node_id: str, field: InputField, value: Any) -> list[ValidationError]:
    if not isinstance(value, str):
        return [ValidationError(node_id, field.name, f"{field.name} must be a string")]

    errors = []
    rules = field.validation
    if rules is None:
        return errors
    if rules.min_length and len(value) < rules.min_length:
        errors.append(
            ValidationError(node_id, field.name, f"{field.name} must be at least {rules.min_length} characters")
        )
    if rules.max_length and len(value) > rules.max_length:
        errors.append(
            ValidationError(node_id, field.name, f"{field.name} must be at most {rules.max_length} characters")
        )
    if rules.pattern:
        try:
            matched = re.search(rules.pattern, value) is not None
        except re.error as e:
            logger.warning(f"Ignoring invalid pattern for field '{field.name}': {e}")
            matched = True
        if not matched:
            errors.append(ValidationError(node_id, field.name, rules.message or f"{field.name} has invalid format"))
    return errors


_STRUCTURAL_TYPES: dict[str, tuple[type, str]] = {
    "boolean": (bool, "a boolean"),
    "array": (list, "an array"),
    "object": (dict, "an object"),
}


def validate_field(node_id: str, field: InputField, value: Any) -> list[ValidationError]:
    """Validate one config value against its declared field."""
    if _is_blank(value):
        if field.required:
            return [ValidationError(node_id, field.name, f"{field.name} is required")]
        return []

    # Placeholders are filled in at save time; their final value is unknown here
    if isinstance(value, str) and PlaceholderResolver.has_placeholders(value):
        return []

    if field.type == "number":
        return _check_number(node_id, field, value)
    if field.type in _STRUCTURAL_TYPES:
        expected, noun = _STRUCTURAL_TYPES[field.type]
        if not isinstance(value, expected):
            return [ValidationError(node_id, field.name, f"{field.name} must be {noun}")]
        return []
    if field.options and field.type == "select":
        allowed = [option.value for option in field.options]
        if value not in allowed:
            return [
                ValidationError(
                    node_id, field.name, f"{field.name} must be one of: {', '.join(str(a) for a in allowed)}"
                )
            ]
        return []
    return _check_string(node_id, field, value)


def validate_node(node: Node, definition: Optional[NodeTypeDefinition]) -> list[ValidationError]:
    """Validate a node's config against its node-type definition.

    A node without a definition fails with a single ``service`` error.
    """
    if definition is None:
        return [ValidationError(node.id, "service", "Invalid service configuration")]

    errors: list[ValidationError] = []
    for field in definition.input_fields:
        errors.extend(validate_field(node.id, field, node.data.config.get(field.name)))
    return errors
