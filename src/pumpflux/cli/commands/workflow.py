"""Commands for workflows saved locally with ``templates setup --local``."""

import json
import sys

import click

from pumpflux.cli.context import AppContext
from pumpflux.core.exceptions import WorkflowNotFoundError, WorkflowValidationError
from pumpflux.core.workflow_manager import WorkflowManager, slugify
from pumpflux.formatters.workflow_list_formatter import format_workflow_list


@click.group(name="workflow")
def workflow() -> None:
    """Manage locally saved workflows."""
    pass


@workflow.command(name="list")
@click.argument("filter_pattern", required=False)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_workflows(app: AppContext, filter_pattern: str | None, output_json: bool) -> None:
    """List saved workflows.

    Filter by keywords (space-separated AND logic):
        pumpflux workflow list sheets
        pumpflux workflow list sheets slack
    """
    workflows = app.workflow_manager().list_all()

    if filter_pattern:
        keywords = [k.strip().lower() for k in filter_pattern.split() if k.strip()]
        workflows = [
            w
            for w in workflows
            if all(k in f"{w.get('name', '')} {w.get('description', '')}".lower() for k in keywords)
        ]

    if output_json:
        click.echo(json.dumps(workflows, indent=2))
        return

    click.echo(format_workflow_list(workflows))


def _handle_workflow_not_found(name: str, wm: WorkflowManager) -> None:
    click.echo(f"❌ Workflow '{name}' not found.", err=True)
    target = slugify(name)
    suggestions = [w.get("key", "") for w in wm.list_all() if target and target[:4] in w.get("key", "")]
    if suggestions:
        click.echo("\nDid you mean:", err=True)
        for s in suggestions[:5]:
            click.echo(f"  - {s}", err=True)
    sys.exit(1)


@workflow.command(name="show")
@click.argument("name")
@click.pass_obj
def show_workflow(app: AppContext, name: str) -> None:
    """Print a saved workflow as JSON."""
    wm = app.workflow_manager()
    try:
        record = wm.load(name)
    except WorkflowNotFoundError:
        _handle_workflow_not_found(name, wm)
        return
    except WorkflowValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(json.dumps(record, indent=2))


@workflow.command(name="delete")
@click.argument("name")
@click.option("--force", is_flag=True, help="Skip confirmation")
@click.pass_obj
def delete_workflow(app: AppContext, name: str, force: bool) -> None:
    """Delete a saved workflow."""
    wm = app.workflow_manager()
    if not wm.exists(name):
        _handle_workflow_not_found(name, wm)
        return

    if not force:
        click.confirm(f"Delete workflow '{name}'?", abort=True)

    try:
        wm.delete(name)
    except WorkflowValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"✓ Deleted workflow '{name}'")
