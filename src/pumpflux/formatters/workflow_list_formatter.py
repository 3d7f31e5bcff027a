"""Formatter for locally saved workflows.

Usage:
    >>> from pumpflux.formatters.workflow_list_formatter import format_workflow_list
    >>> print(format_workflow_list(WorkflowManager().list_all()))
    Saved Workflows:
    ────────────────────────────────────────

    lead-sync-workflow
      Lead Sync Workflow: copy new leads into a sheet

    Total: 1 workflow
"""

from typing import Any


def format_workflow_list(workflows: list[dict[str, Any]]) -> str:
    """Format workflow records from ``WorkflowManager.list_all()``."""
    if not workflows:
        return _format_empty_list()

    lines = ["Saved Workflows:", "─" * 40]

    for wf in workflows:
        key = wf.get("key") or wf.get("name", "Unknown")
        summary = wf.get("name", "")
        if wf.get("description"):
            summary = f"{summary}: {wf['description']}"
        lines.append(f"\n{key}")
        lines.append(f"  {summary or 'No description'}")

    count = len(workflows)
    plural = "workflow" if count == 1 else "workflows"
    lines.append(f"\nTotal: {count} {plural}")

    return "\n".join(lines)


def _format_empty_list() -> str:
    lines = [
        "No workflows saved locally yet.",
        "",
        "To save one:",
        "  1. Find a template: pumpflux templates list",
        "  2. Set it up offline: pumpflux templates setup <id> --local",
    ]
    return "\n".join(lines)
