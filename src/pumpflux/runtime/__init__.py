"""Node configuration: placeholder resolution, validation and the config wizard."""

from .node_config_wizard import NodeConfigWizard
from .node_types import NodeTypeCatalog
from .node_validator import ValidationError, default_for, initialize_defaults, validate_node
from .placeholder_resolver import PlaceholderResolver

__all__ = [
    "NodeConfigWizard",
    "NodeTypeCatalog",
    "PlaceholderResolver",
    "ValidationError",
    "default_for",
    "initialize_defaults",
    "validate_node",
]
