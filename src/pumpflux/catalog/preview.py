"""Read-only summary of a template's workflow graph.

Template graphs come from the server in more than one shape (an object or a
JSON string, under ``workflowData`` or legacy top-level ``nodes``/``edges``).
Anything malformed is logged and treated as an empty graph so a preview never
fails.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from pumpflux.core.exceptions import TemplateDataError
from pumpflux.core.models import Edge, Node, WorkflowTemplate, coerce_nodes
from pumpflux.core.workflow_schema import load_workflow_data
from pumpflux.runtime.placeholder_resolver import PlaceholderResolver

logger = logging.getLogger(__name__)


def _raw_graph(template: WorkflowTemplate) -> dict[str, Any]:
    if template.workflow_data is not None:
        return load_workflow_data(template.workflow_data)

    if template.nodes is None and template.edges is None:
        return {"nodes": [], "edges": []}

    def _part(value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                raise TemplateDataError(f"Invalid JSON in template graph: {e}", template.id) from e
        return value or []

    return load_workflow_data({"nodes": _part(template.nodes), "edges": _part(template.edges)})


def parse_workflow_data(template: WorkflowTemplate, strict: bool = False) -> tuple[list[Node], list[Edge]]:
    """Extract nodes and edges from a template.

    Args:
        template: Template as returned by the API
        strict: Raise instead of degrading to an empty graph

    Returns:
        Tuple of (nodes, edges); both empty if the stored data is malformed

    Raises:
        TemplateDataError: Only with strict=True, if the data is malformed
    """
    try:
        raw = _raw_graph(template)
    except TemplateDataError as e:
        if strict:
            raise
        logger.error(
            f"Error parsing workflow data for template {template.id}: {e}",
            extra={"template_id": template.id, "data_type": type(template.workflow_data).__name__},
        )
        return [], []

    nodes, rejected = coerce_nodes(raw["nodes"])
    if rejected:
        logger.warning(f"Template {template.id}: skipped {len(rejected)} malformed node(s)")

    edges: list[Edge] = []
    for raw_edge in raw["edges"]:
        try:
            edges.append(Edge.model_validate(raw_edge))
        except ValidationError:
            logger.warning(f"Template {template.id}: skipped malformed edge {raw_edge!r}")

    logger.debug(
        "Parsed workflow data",
        extra={"template_id": template.id, "nodes_count": len(nodes), "edges_count": len(edges)},
    )
    return nodes, edges


@dataclass
class TemplatePreview:
    """What a user sees before choosing a template."""

    template: WorkflowTemplate
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    @classmethod
    def from_template(cls, template: WorkflowTemplate) -> "TemplatePreview":
        nodes, edges = parse_workflow_data(template)
        return cls(template=template, nodes=nodes, edges=edges)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def node_type_summary(self) -> str:
        """Count nodes per type, e.g. ``"1 trigger, 2 actions"``."""
        counts: dict[str, int] = {}
        for node in self.nodes:
            node_type = node.type or "unknown"
            counts[node_type] = counts.get(node_type, 0) + 1
        return ", ".join(f"{count} {node_type}{'s' if count > 1 else ''}" for node_type, count in counts.items())

    def placeholders(self) -> list[str]:
        return PlaceholderResolver.collect_placeholders(self.nodes)

    def config_dump(self) -> dict[str, dict[str, Any]]:
        """Raw config per node id."""
        return {node.id: dict(node.data.config) for node in self.nodes}

    def node_label(self, node_id: str) -> str:
        for node in self.nodes:
            if node.id == node_id:
                return node.data.label
        return node_id
