"""Formatters for node-type definitions."""

from pumpflux.core.models import NodeTypeDefinition


def format_node_type_list(definitions: list[NodeTypeDefinition]) -> str:
    """One line per node type, grouped by category."""
    if not definitions:
        return "No node types defined."

    grouped: dict[str, list[NodeTypeDefinition]] = {}
    for definition in definitions:
        grouped.setdefault(definition.category or "uncategorized", []).append(definition)

    lines = []
    for category in sorted(grouped):
        lines.append(f"\n{category}:")
        lines.append("─" * (len(category) + 1))
        for definition in sorted(grouped[category], key=lambda d: d.name):
            ident = f"[{definition.id}] " if definition.id is not None else ""
            title = definition.display_name or definition.name
            lines.append(f"  {ident}{definition.name}  {title}")

    lines.append(f"\nTotal: {len(definitions)} node {'type' if len(definitions) == 1 else 'types'}")
    return "\n".join(lines).lstrip("\n")


def format_node_type(definition: NodeTypeDefinition) -> str:
    """Full description of one node type, including its input fields."""
    lines = [definition.display_name or definition.name, "─" * 40]
    if definition.id is not None:
        lines.append(f"ID: {definition.id}")
    lines.append(f"Name: {definition.name}")
    if definition.category:
        lines.append(f"Category: {definition.category}")
    if definition.description:
        lines.append(definition.description)

    if not definition.input_fields:
        lines.append("\nNo input fields.")
        return "\n".join(lines)

    lines.append("\nInput fields:")
    for field in definition.input_fields:
        flags = [field.type, "required" if field.required else "optional"]
        lines.append(f"  {field.name} ({', '.join(flags)})")
        if field.description:
            lines.append(f"      {field.description}")
        if field.has_default:
            lines.append(f"      default: {field.default_value!r}")
        if field.options:
            lines.append(f"      options: {', '.join(str(o.value) for o in field.options)}")
        rules = field.validation
        if rules is not None:
            parts = [
                f"{name}={value}"
                for name, value in (
                    ("min", rules.min),
                    ("max", rules.max),
                    ("min_length", rules.min_length),
                    ("max_length", rules.max_length),
                    ("pattern", rules.pattern),
                )
                if value is not None
            ]
            if parts:
                lines.append(f"      rules: {', '.join(parts)}")
    return "\n".join(lines)
