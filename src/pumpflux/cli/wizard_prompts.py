"""Interactive terminal driver for the node configuration wizard."""

import json
import logging
from typing import Any

import click

from pumpflux.core.models import InputField
from pumpflux.core.user_errors import NodeTypeMissingError
from pumpflux.runtime.node_config_wizard import NodeConfigWizard
from pumpflux.runtime.placeholder_resolver import PlaceholderResolver

logger = logging.getLogger(__name__)


def _parse_number(text: str) -> Any:
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    # Left as typed; validation reports it
    return text


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def prompt_field(field: InputField, current: Any) -> Any:
    """Ask for one field value, showing the current value as the default."""
    label = field.label or field.name
    if field.required:
        label = f"{label} *"

    if field.type == "boolean":
        return click.confirm(label, default=bool(current))

    if field.options:
        choices = [str(option.value) for option in field.options]
        default = str(current) if str(current) in choices else choices[0]
        picked = click.prompt(label, type=click.Choice(choices), default=default)
        # Hand back the option's own value (not its string form)
        return next(option.value for option in field.options if str(option.value) == picked)

    if field.type in ("array", "object"):
        shown = json.dumps(current) if not isinstance(current, str) else current
        return _parse_json(click.prompt(f"{label} (JSON)", default=shown, show_default=True))

    hide = PlaceholderResolver.is_secret(field.name)
    text = click.prompt(
        label,
        default="" if current is None else str(current),
        show_default=not hide,
        hide_input=hide,
    )
    return _parse_number(text) if field.type == "number" else text


def prompt_wizard(wizard: NodeConfigWizard) -> bool:
    """Prompt through every step, then confirm the review.

    Returns:
        True to submit the configured nodes

    Raises:
        NodeTypeMissingError: If a node's service has no definition
    """
    while not wizard.in_review:
        node = wizard.current_node
        definition = wizard.current_definition
        assert node is not None

        click.echo(f"\n[{wizard.describe_state()}] {node.data.label}")
        if definition is None:
            raise NodeTypeMissingError(node.data.service or node.type, wizard.catalog.names())
        if definition.description:
            click.echo(f"  {definition.description}")

        for field in definition.input_fields:
            wizard.set_field(field.name, prompt_field(field, node.data.config.get(field.name)))

        if not wizard.next():
            for error in wizard.validation_errors:
                click.echo(f"  - {error.message}", err=True)

    click.echo("\nReview:")
    for node in wizard.nodes:
        click.echo(f"  {node.data.label}")
        for key, value in node.data.config.items():
            shown = "***" if PlaceholderResolver.is_secret(key) and value else value
            click.echo(f"      {key}: {shown}")
    return click.confirm("Use this configuration?", default=True)
