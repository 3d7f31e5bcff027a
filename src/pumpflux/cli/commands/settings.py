"""Settings management CLI commands."""

import json
import os
import sys

import click
from pydantic import ValidationError

from pumpflux.cli.context import AppContext
from pumpflux.core.security_utils import mask_value
from pumpflux.core.settings import PumpfluxSettings


@click.group()
def settings() -> None:
    """Manage pumpflux settings."""
    pass


@settings.command()
@click.pass_obj
def init(app: AppContext) -> None:
    """Initialize settings file with defaults."""
    manager = app.settings_manager

    if manager.settings_path.exists():
        click.confirm(f"Settings file already exists at {manager.settings_path}. Overwrite?", abort=True)

    default_settings = PumpfluxSettings()
    manager.save(default_settings)

    click.echo(f"Created settings file at: {manager.settings_path}")
    click.echo("\nDefault settings:")
    click.echo(json.dumps(default_settings.model_dump(), indent=2))


@settings.command()
@click.pass_obj
def show(app: AppContext) -> None:
    """Show current settings. The API token is masked."""
    manager = app.settings_manager
    current = manager.load()

    settings_dict = current.model_dump()
    if settings_dict["api"].get("token"):
        settings_dict["api"]["token"] = mask_value(settings_dict["api"]["token"])

    click.echo(f"Settings file: {manager.settings_path}")
    click.echo("\nCurrent settings:")
    click.echo(json.dumps(settings_dict, indent=2))

    overrides = [name for name in ("PUMPFLUX_API_URL", "PUMPFLUX_API_TOKEN", "PUMPFLUX_TIMEOUT") if os.getenv(name)]
    if overrides:
        click.echo(f"\n⚠️  Overridden by environment: {', '.join(overrides)}")


@settings.command(name="set-api-url")
@click.argument("url")
@click.pass_obj
def set_api_url(app: AppContext, url: str) -> None:
    """Set the PumpFlux API base URL.

    Example:
        pumpflux settings set-api-url https://pumpflux.example.com
    """
    try:
        app.settings_manager.set_api_url(url)
    except ValidationError as e:
        click.echo(f"Error: {e.errors()[0]['msg']}", err=True)
        sys.exit(1)
    click.echo(f"✓ API URL set to {url.rstrip('/')}")


@settings.command(name="set-token")
@click.argument("token", required=False)
@click.option("--clear", is_flag=True, help="Remove the stored token")
@click.pass_obj
def set_token(app: AppContext, token: str | None, clear: bool) -> None:
    """Store the API bearer token (prompted for if omitted)."""
    if clear:
        app.settings_manager.set_api_token(None)
        click.echo("✓ API token cleared")
        return

    if not token:
        token = click.prompt("API token", hide_input=True)
    app.settings_manager.set_api_token(token)
    click.echo(f"✓ API token set ({mask_value(token)})")
