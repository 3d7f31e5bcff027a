"""Entry point for the pumpflux command line."""

import click

from pumpflux import __version__
from pumpflux.cli.commands.favorites import favorites
from pumpflux.cli.commands.node_types import node_types
from pumpflux.cli.commands.settings import settings
from pumpflux.cli.commands.templates import templates
from pumpflux.cli.commands.workflow import workflow
from pumpflux.cli.context import AppContext
from pumpflux.cli.logging_config import configure_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs and technical error details")
@click.version_option(__version__, prog_name="pumpflux")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Browse PumpFlux workflow templates and turn them into workflows."""
    configure_logging(verbose)
    app = ctx.ensure_object(AppContext)
    app.verbose = app.verbose or verbose


cli.add_command(templates)
cli.add_command(favorites)
cli.add_command(node_types)
cli.add_command(workflow)
cli.add_command(settings)


def cli_main() -> None:
    """Console-script entry point."""
    cli()
