"""Formatter for the template catalog listing.

Usage:
    >>> from pumpflux.formatters.template_list_formatter import format_template_list
    >>> print(format_template_list(templates, favorites={3}))
    Workflow Templates:
    ────────────────────────────────────────

    ★ [3] Lead Sync  (crm, simple)
        Copy new leads into a sheet
    ...
"""

from typing import Iterable, Optional

from pumpflux.core.models import WorkflowTemplate

RULE_WIDTH = 40


def format_template_list(
    templates: list[WorkflowTemplate],
    favorites: Iterable[int] = (),
    counts: Optional[dict[str, int]] = None,
) -> str:
    """Format templates as a readable list.

    Args:
        templates: Templates already filtered and sorted
        favorites: Favorite ids, marked with a star
        counts: Optional category counts shown as a footer

    Returns:
        Formatted text
    """
    if not templates:
        return _format_empty_list()

    favorite_ids = set(favorites)
    lines = ["Workflow Templates:", "─" * RULE_WIDTH]

    for template in templates:
        marker = "★" if template.id in favorite_ids else " "
        details = ", ".join(part for part in (template.category, template.level) if part)
        heading = f"{marker} [{template.id}] {template.name}"
        lines.append(f"\n{heading}  ({details})" if details else f"\n{heading}")
        if template.description:
            lines.append(f"    {template.description}")
        if template.tags:
            lines.append(f"    tags: {', '.join(template.tags)}")

    count = len(templates)
    lines.append(f"\nTotal: {count} {'template' if count == 1 else 'templates'}")

    if counts:
        lines.append("Categories: " + ", ".join(f"{name} ({n})" for name, n in counts.items()))

    return "\n".join(lines)


def _format_empty_list() -> str:
    lines = [
        "No templates match.",
        "",
        "Try:",
        "  1. Clearing filters: pumpflux templates list",
        "  2. Searching more broadly: pumpflux templates list --search <word>",
    ]
    return "\n".join(lines)
