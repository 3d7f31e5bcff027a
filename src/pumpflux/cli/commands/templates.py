"""Template catalog commands: list, show, create, setup."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from pumpflux.catalog.filters import ALL, COMPLEXITY_LEVELS, SORT_OPTIONS, TemplateFilter, category_counts
from pumpflux.catalog.preview import TemplatePreview
from pumpflux.cli.context import AppContext, ClickNavigator, ClickNotifier
from pumpflux.cli.wizard_prompts import prompt_wizard
from pumpflux.core.exceptions import (
    ApiError,
    CredentialsIncompleteError,
    PumpfluxError,
    TemplateNotFoundError,
)
from pumpflux.core.models import TemplateDraft, WorkflowTemplate
from pumpflux.core.sinks import ApiWorkflowSink, LocalWorkflowSink, WorkflowSink
from pumpflux.core.template_setup import TemplateWorkflowSetup
from pumpflux.core.user_errors import NodeTypeMissingError
from pumpflux.core.workflow_schema import load_workflow_data, validate_graph
from pumpflux.formatters.template_list_formatter import format_template_list
from pumpflux.formatters.template_preview_formatter import format_template_preview
from pumpflux.runtime.placeholder_resolver import PlaceholderResolver


@click.group(name="templates")
def templates() -> None:
    """Browse workflow templates and create workflows from them."""
    pass


@templates.command(name="list")
@click.option("--search", "-s", default="", help="Match name, description or tags")
@click.option("--category", "-c", default=ALL, show_default=True, help="Only this category")
@click.option(
    "--complexity",
    type=click.Choice([ALL, *COMPLEXITY_LEVELS]),
    default=ALL,
    show_default=True,
    help="Only this complexity",
)
@click.option("--sort", type=click.Choice(SORT_OPTIONS), default="name", show_default=True)
@click.option("--favorites", "favorites_only", is_flag=True, help="Only favorite templates")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_templates(
    app: AppContext,
    search: str,
    category: str,
    complexity: str,
    sort: str,
    favorites_only: bool,
    output_json: bool,
) -> None:
    """List templates, filtered and sorted.

    Examples:
        pumpflux templates list --search sheets
        pumpflux templates list --category marketing --sort popular
        pumpflux templates list --favorites
    """
    template_filter = TemplateFilter(
        search=search, category=category, complexity=complexity, favorites_only=favorites_only, sort=sort
    )
    try:
        fetched = app.client.list_templates(template_filter.to_query_params())
    except ApiError as e:
        app.fail_api(e)

    favorite_ids = app.favorites().ids
    shown = template_filter.apply(fetched, favorite_ids)

    if output_json:
        click.echo(json.dumps([t.to_api() for t in shown], indent=2))
        return

    click.echo(format_template_list(shown, favorite_ids, counts=category_counts(fetched)))


def _fetch_template(app: AppContext, template_id: int) -> WorkflowTemplate:
    try:
        return app.client.get_template(template_id)
    except TemplateNotFoundError:
        click.echo(f"❌ Template {template_id} not found.", err=True)
        click.echo("  List available templates: pumpflux templates list", err=True)
        sys.exit(1)
    except ApiError as e:
        app.fail_api(e)


@templates.command(name="show")
@click.argument("template_id", type=int)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--no-config", is_flag=True, help="Hide node configuration values")
@click.pass_obj
def show_template(app: AppContext, template_id: int, output_json: bool, no_config: bool) -> None:
    """Preview a template's nodes, connections and required credentials."""
    preview = TemplatePreview.from_template(_fetch_template(app, template_id))

    if output_json:
        payload = {
            "template": preview.template.to_api(),
            "nodes": [node.to_api() for node in preview.nodes],
            "edges": [edge.to_api() for edge in preview.edges],
            "summary": preview.node_type_summary(),
            "credentials": preview.placeholders(),
            "favorite": app.favorites().is_favorite(template_id),
        }
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(format_template_preview(preview, show_config=not no_config))


def _load_draft(file_path: str) -> TemplateDraft:
    try:
        data = json.loads(Path(file_path).read_text(encoding="utf-8"))
        draft = TemplateDraft.model_validate(data)
        if draft.workflow_data is not None:
            graph = load_workflow_data(draft.workflow_data)
            validate_graph(graph["nodes"], graph["edges"])
        return draft
    except json.JSONDecodeError as e:
        click.echo(f"Error: {file_path} is not valid JSON: {e}", err=True)
    except ValidationError as e:
        click.echo(f"Error: {file_path} is not a valid template:\n{e}", err=True)
    except PumpfluxError as e:
        click.echo(f"Error: {file_path} has invalid workflow data: {e}", err=True)
    sys.exit(1)


@templates.command(name="create")
@click.option("--file", "file_path", type=click.Path(exists=True, dir_okay=False), required=True)
@click.pass_obj
def create_template(app: AppContext, file_path: str) -> None:
    """Publish a new template from a JSON file.

    The file needs a name (3+ characters), a description (10+ characters),
    a category and at least one tag. Difficulty is easy, medium or hard.

    Examples:
        pumpflux templates create --file lead-sync.json
    """
    draft = _load_draft(file_path)
    try:
        created = app.client.create_template(draft)
    except ApiError as e:
        if e.status_code == 400:
            click.echo(f"Error: the server rejected the template: {e}", err=True)
            sys.exit(1)
        app.fail_api(e)
    click.echo(f"✓ Created template '{created.name}' (id {created.id})")


def _parse_credentials(values: tuple[str, ...]) -> list[tuple[str, str]]:
    pairs = []
    for item in values:
        if "=" not in item:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{item}'", param_hint="--credential")
        key, value = item.split("=", 1)
        pairs.append((key, value))
    return pairs


@templates.command(name="setup")
@click.argument("template_id", type=int)
@click.option("--name", "-n", help="Workflow name (default: '<template> Workflow')")
@click.option("--description", "-d", help="Workflow description (default: the template's)")
@click.option("--credential", "credentials", multiple=True, metavar="KEY=VALUE", help="Fill a placeholder")
@click.option("--configure", is_flag=True, help="Walk through each node's configuration")
@click.option("--local", is_flag=True, help="Save to the local workflow directory instead of the server")
@click.option("--no-input", is_flag=True, help="Never prompt; fail if a credential is missing")
@click.pass_obj
def setup_template(
    app: AppContext,
    template_id: int,
    name: Optional[str],
    description: Optional[str],
    credentials: tuple[str, ...],
    configure: bool,
    local: bool,
    no_input: bool,
) -> None:
    """Create a workflow from a template.

    Placeholders such as ${API_KEY} or {{SHEET_ID}} in the template's node
    configs are filled from --credential values, or prompted for.

    Examples:
        pumpflux templates setup 3 --credential SPREADSHEET_ID=1AbC
        pumpflux templates setup 3 --configure --local
    """
    pairs = _parse_credentials(credentials)

    sink: WorkflowSink = LocalWorkflowSink(app.workflow_manager()) if local else ApiWorkflowSink(app.client)
    setup = TemplateWorkflowSetup(app.client, sink, ClickNotifier(), ClickNavigator())

    if not setup.load(template_id):
        click.echo(f"  {setup.error}", err=True)
        sys.exit(1)

    if name:
        setup.workflow_name = name
    if description is not None:
        setup.description = description

    for key, value in pairs:
        try:
            setup.set_credential(key, value)
        except KeyError as e:
            click.echo(f"Error: {e.args[0]}", err=True)
            sys.exit(1)

    if configure:
        try:
            applied = setup.configure(prompt_wizard)
        except NodeTypeMissingError as e:
            app.fail(e)
        if not applied:
            click.echo("Configuration not applied.", err=True)
            sys.exit(1)

    for missing in setup.missing_credentials:
        if no_input:
            break
        value = click.prompt(missing, hide_input=PlaceholderResolver.is_secret(missing))
        setup.set_credential(missing, value)

    try:
        record = setup.save()
    except CredentialsIncompleteError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo("  Provide them with --credential KEY=VALUE", err=True)
        sys.exit(1)

    if record is None:
        click.echo(f"  {setup.error}", err=True)
        sys.exit(1)

    if local:
        click.echo(f"Saved to: {app.workflow_manager().get_path(setup.workflow_name)}")
    elif record.get("id") is not None:
        click.echo(f"Workflow ID: {record['id']}")
