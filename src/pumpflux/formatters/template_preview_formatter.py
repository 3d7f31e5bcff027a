"""Formatter for a single template preview."""

import json

from pumpflux.catalog.preview import TemplatePreview
from pumpflux.core.security_utils import mask_if_secret


def format_template_preview(preview: TemplatePreview, show_config: bool = True) -> str:
    """Describe a template's graph: nodes, connections and required credentials.

    Args:
        preview: Parsed template preview
        show_config: Include each node's config

    Returns:
        Formatted text
    """
    template = preview.template
    lines = [f"{template.name}  [{template.id}]", "─" * 40]

    if template.description:
        lines.append(template.description)
    meta = [
        f"Category: {template.category}" if template.category else "",
        f"Complexity: {template.level}" if template.level else "",
        f"Popularity: {template.popularity}",
    ]
    lines.append(" | ".join(m for m in meta if m))
    if template.tags:
        lines.append(f"Tags: {', '.join(template.tags)}")

    if preview.is_empty:
        lines.append("\nThis template has no nodes.")
        return "\n".join(lines)

    lines.append(f"\nNodes: {preview.node_type_summary()}")
    for node in preview.nodes:
        service = f" ({node.data.service})" if node.data.service else ""
        lines.append(f"  • {node.data.label}{service}  [{node.type}]")
        if show_config and node.data.config:
            for key, value in node.data.config.items():
                shown = value if isinstance(value, str) else json.dumps(value)
                lines.append(f"      {key}: {mask_if_secret(key, shown)}")

    if preview.edges:
        lines.append("\nConnections:")
        for edge in preview.edges:
            label = f" ({edge.label})" if edge.label else ""
            lines.append(f"  {preview.node_label(edge.source)} → {preview.node_label(edge.target)}{label}")

    placeholders = preview.placeholders()
    if placeholders:
        lines.append("\nCredentials required:")
        lines.extend(f"  - {name}" for name in placeholders)

    return "\n".join(lines)
