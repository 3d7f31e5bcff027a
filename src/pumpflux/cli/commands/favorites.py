"""Favorite template commands."""

import click

from pumpflux.cli.context import AppContext
from pumpflux.core.exceptions import ApiError
from pumpflux.formatters.template_list_formatter import format_template_list


@click.group(name="favorites")
def favorites() -> None:
    """Manage favorite templates."""
    pass


@favorites.command(name="list")
@click.option("--ids-only", is_flag=True, help="Print ids without contacting the server")
@click.pass_obj
def list_favorites(app: AppContext, ids_only: bool) -> None:
    """Show favorite templates."""
    ids = app.favorites().ids
    if not ids:
        click.echo("No favorite templates yet.")
        click.echo("  Add one: pumpflux favorites toggle <template-id>")
        return

    if not ids_only:
        try:
            templates = app.client.list_templates()
        except ApiError as e:
            click.echo(f"Warning: could not fetch template details ({e})", err=True)
        else:
            click.echo(format_template_list([t for t in templates if t.id in ids], ids))
            return

    for template_id in ids:
        click.echo(str(template_id))


@favorites.command(name="toggle")
@click.argument("template_id", type=int)
@click.pass_obj
def toggle_favorite(app: AppContext, template_id: int) -> None:
    """Add a template to favorites, or remove it if already there."""
    app.favorites().toggle(template_id)
