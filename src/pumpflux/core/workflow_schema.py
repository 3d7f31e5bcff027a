"""JSON Schema for template workflow data and graph consistency checks.

Template payloads store their graph as ``{"nodes": [...], "edges": [...]}``,
either as an object or as a JSON string. ``load_workflow_data`` turns either
form into a dict and checks its shape; ``validate_graph`` checks that a graph
about to be saved is internally consistent.
"""

import json
import logging
from typing import Any, Union

from jsonschema import Draft7Validator

from pumpflux.core.exceptions import TemplateDataError, WorkflowValidationError

logger = logging.getLogger(__name__)

WORKFLOW_DATA_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "nodes": {"type": "array", "items": {"type": "object"}},
        "edges": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": ["string", "number"]},
                    "source": {"type": ["string", "number"]},
                    "target": {"type": ["string", "number"]},
                    "label": {"type": ["string", "null"]},
                },
            },
        },
    },
}

_validator = Draft7Validator(WORKFLOW_DATA_SCHEMA)


def _format_path(path: list) -> str:
    """Format a jsonschema path like ``edges[0].source``."""
    formatted = ""
    for component in path:
        if isinstance(component, int):
            formatted += f"[{component}]"
        else:
            if formatted:
                formatted += "."
            formatted += str(component)
    return formatted or "root"


def load_workflow_data(raw: Union[str, dict[str, Any]]) -> dict[str, Any]:
    """Parse and shape-check a template's workflow data.

    Args:
        raw: Workflow data as a dict or a JSON string

    Returns:
        Dict with ``nodes`` and ``edges`` lists (missing keys become [])

    Raises:
        TemplateDataError: If the data is not JSON or has the wrong shape
    """
    data: Any = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise TemplateDataError(f"Invalid JSON in workflow data: {e}") from e

    errors = sorted(_validator.iter_errors(data), key=lambda err: list(err.absolute_path))
    if errors:
        error = errors[0]
        path = _format_path(list(error.absolute_path))
        raise TemplateDataError(f"Invalid workflow data at {path}: {error.message}")

    return {"nodes": data.get("nodes") or [], "edges": data.get("edges") or []}


def validate_graph(nodes: list[dict[str, Any]], edges: list[dict[str, Any]]) -> None:
    """Check node ids are unique and every edge points at an existing node.

    Raises:
        WorkflowValidationError: On the first inconsistency found
    """
    seen: set[str] = set()
    for i, node in enumerate(nodes):
        node_id = str(node.get("id"))
        if node_id in seen:
            raise WorkflowValidationError(f"Duplicate node ID '{node_id}' at nodes[{i}]")
        seen.add(node_id)

    for i, edge in enumerate(edges):
        for end in ("source", "target"):
            if str(edge.get(end)) not in seen:
                raise WorkflowValidationError(
                    f"Edge edges[{i}].{end} references non-existent node '{edge.get(end)}'. "
                    f"Change to one of: {sorted(seen)}"
                )
