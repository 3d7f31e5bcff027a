"""Node-type definition commands."""

import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from pumpflux.cli.context import AppContext
from pumpflux.core.exceptions import ApiError, NodeTypeNotFoundError
from pumpflux.core.models import NodeTypeDefinition
from pumpflux.formatters.node_type_formatter import format_node_type, format_node_type_list


@click.group(name="node-types")
def node_types() -> None:
    """Inspect and manage node-type definitions."""
    pass


def _load_definition(file_path: str) -> NodeTypeDefinition:
    try:
        data = json.loads(Path(file_path).read_text(encoding="utf-8"))
        return NodeTypeDefinition.model_validate(data)
    except json.JSONDecodeError as e:
        click.echo(f"Error: {file_path} is not valid JSON: {e}", err=True)
    except ValidationError as e:
        click.echo(f"Error: {file_path} is not a valid node-type definition:\n{e}", err=True)
    sys.exit(1)


def _not_found(what: str) -> None:
    click.echo(f"❌ Node type {what} not found.", err=True)
    click.echo("  List node types: pumpflux node-types list", err=True)
    sys.exit(1)


@node_types.command(name="list")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_node_types(app: AppContext, output_json: bool) -> None:
    """List node types defined on the server."""
    try:
        definitions = app.client.list_node_types()
    except ApiError as e:
        app.fail_api(e)

    if output_json:
        click.echo(json.dumps([d.to_api() for d in definitions], indent=2))
    else:
        click.echo(format_node_type_list(definitions))


@node_types.command(name="show")
@click.argument("identifier")
@click.option("--node-id", "by_node_id", is_flag=True, help="Treat IDENTIFIER as a workflow node id")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def show_node_type(app: AppContext, identifier: str, by_node_id: bool, output_json: bool) -> None:
    """Show one node type by numeric id, name, or (with --node-id) workflow node id."""
    try:
        if by_node_id:
            definition = app.client.get_node_type_by_node_id(identifier)
        elif identifier.isdigit():
            definition = app.client.get_node_type(int(identifier))
        else:
            definition = app.client.get_node_type_by_name(identifier)
    except NodeTypeNotFoundError:
        _not_found(f"'{identifier}'")
        return
    except ApiError as e:
        app.fail_api(e)

    if output_json:
        click.echo(json.dumps(definition.to_api(), indent=2))
    else:
        click.echo(format_node_type(definition))


@node_types.command(name="create")
@click.option("--file", "file_path", type=click.Path(exists=True, dir_okay=False), required=True)
@click.pass_obj
def create_node_type(app: AppContext, file_path: str) -> None:
    """Create a node type from a JSON definition file."""
    definition = _load_definition(file_path)
    try:
        created = app.client.create_node_type(definition)
    except ApiError as e:
        app.fail_api(e)
    click.echo(f"✓ Created node type '{created.name}' (id {created.id})")


@node_types.command(name="update")
@click.argument("node_type_id", type=int)
@click.option("--file", "file_path", type=click.Path(exists=True, dir_okay=False), required=True)
@click.pass_obj
def update_node_type(app: AppContext, node_type_id: int, file_path: str) -> None:
    """Replace a node type with the definition in a JSON file."""
    definition = _load_definition(file_path)
    try:
        updated = app.client.update_node_type(node_type_id, definition)
    except NodeTypeNotFoundError:
        _not_found(str(node_type_id))
        return
    except ApiError as e:
        app.fail_api(e)
    click.echo(f"✓ Updated node type '{updated.name}' (id {node_type_id})")


@node_types.command(name="delete")
@click.argument("node_type_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def delete_node_type(app: AppContext, node_type_id: int, yes: bool) -> None:
    """Delete a node type."""
    if not yes:
        click.confirm(f"Delete node type {node_type_id}?", abort=True)
    try:
        app.client.delete_node_type(node_type_id)
    except NodeTypeNotFoundError:
        _not_found(str(node_type_id))
        return
    except ApiError as e:
        app.fail_api(e)
    click.echo(f"✓ Deleted node type {node_type_id}")
