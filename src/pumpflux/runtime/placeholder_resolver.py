"""Placeholder detection and credential substitution for node configs.

Template nodes carry placeholder tokens in their config values where a
user-supplied secret or parameter belongs. Two spellings are recognised:
``${name}`` and ``{{name}}``. Names are taken verbatim (no trimming).

Scanning depth: top-level string values of ``data.config`` plus the string
values of any dict directly under it (for example a ``mapping`` sub-object).
Extraction and substitution always walk the same depth, so applying a
complete credential map leaves nothing left to extract.
"""

import copy
import logging
import re
from collections.abc import Iterable
from typing import Any, Callable, Union

from pumpflux.core.models import Node
from pumpflux.core.security_utils import is_secret_name

logger = logging.getLogger(__name__)

NodeLike = Union[Node, dict[str, Any]]


class PlaceholderResolver:
    """Finds placeholder names in node configs and fills them in."""

    # ${name} or {{name}}; groups: (dollar_name, mustache_name)
    # Names never contain braces, so "${{X}}" reads as a literal "$" before {{X}}
    # Unclosed tokens such as "${name" or "{{name}" never match
    PLACEHOLDER_PATTERN = re.compile(r"\$\{([^{}]+)\}|\{\{([^{}]+)\}\}")

    @staticmethod
    def has_placeholders(value: Any) -> bool:
        """Check if value contains placeholder tokens anywhere in its structure."""
        if isinstance(value, str):
            return PlaceholderResolver.PLACEHOLDER_PATTERN.search(value) is not None
        elif isinstance(value, dict):
            return any(PlaceholderResolver.has_placeholders(v) for v in value.values())
        elif isinstance(value, list):
            return any(PlaceholderResolver.has_placeholders(item) for item in value)
        return False

    @staticmethod
    def extract_placeholders(value: str) -> list[str]:
        """Extract distinct placeholder names from one string, in order of appearance.

        Examples:
            >>> PlaceholderResolver.extract_placeholders("Bearer ${token} for {{user}}")
            ['token', 'user']
        """
        names: list[str] = []
        for match in PlaceholderResolver.PLACEHOLDER_PATTERN.finditer(value):
            name = match.group(1) if match.group(1) is not None else match.group(2)
            if name not in names:
                names.append(name)
        return names

    @staticmethod
    def _config_of(node: NodeLike) -> dict[str, Any]:
        if isinstance(node, Node):
            return node.data.config
        data = node.get("data") if isinstance(node, dict) else None
        config = data.get("config") if isinstance(data, dict) else None
        return config if isinstance(config, dict) else {}

    @staticmethod
    def _iter_strings(config: dict[str, Any]) -> Iterable[str]:
        """Yield the string values within scanning depth."""
        for value in config.values():
            if isinstance(value, str):
                yield value
            elif isinstance(value, dict):
                for nested in value.values():
                    if isinstance(nested, str):
                        yield nested

    @staticmethod
    def _map_strings(config: dict[str, Any], fn: Callable[[str], str]) -> dict[str, Any]:
        """Return a copy of config with fn applied to every string within scanning depth."""
        result: dict[str, Any] = {}
        for key, value in config.items():
            if isinstance(value, str):
                result[key] = fn(value)
            elif isinstance(value, dict):
                result[key] = {k: fn(v) if isinstance(v, str) else copy.deepcopy(v) for k, v in value.items()}
            else:
                result[key] = copy.deepcopy(value)
        return result

    @staticmethod
    def collect_placeholders(nodes: Iterable[NodeLike]) -> list[str]:
        """Collect every distinct placeholder name referenced by the nodes' configs.

        Args:
            nodes: Node models or raw node dicts

        Returns:
            Names in order of first appearance, without duplicates
        """
        names: list[str] = []
        for node in nodes:
            for text in PlaceholderResolver._iter_strings(PlaceholderResolver._config_of(node)):
                for name in PlaceholderResolver.extract_placeholders(text):
                    if name not in names:
                        names.append(name)
        return names

    @staticmethod
    def build_credential_map(nodes: Iterable[NodeLike]) -> dict[str, str]:
        """Build the credential map for a set of nodes: one empty entry per placeholder.

        Examples:
            >>> nodes = [{"id": "1", "type": "action", "data": {"label": "Sheets",
            ...     "config": {"spreadsheet_id": "${spreadsheet_id}", "sheet_name": "Sheet1"}}}]
            >>> PlaceholderResolver.build_credential_map(nodes)
            {'spreadsheet_id': ''}
        """
        return {name: "" for name in PlaceholderResolver.collect_placeholders(nodes)}

    @staticmethod
    def resolve_string(value: str, credentials: dict[str, str]) -> str:
        """Replace every placeholder whose name is in credentials.

        Replacement is a single pass, so a substituted value is never
        scanned again. Unknown names stay as they are.
        """

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1) if match.group(1) is not None else match.group(2)
            if name in credentials:
                return credentials[name]
            logger.debug(f"No credential for placeholder '{name}'", extra={"placeholder": name})
            return match.group(0)

        return PlaceholderResolver.PLACEHOLDER_PATTERN.sub(_replace, value)

    @staticmethod
    def apply_credentials(nodes: Iterable[NodeLike], credentials: dict[str, str]) -> list[Any]:
        """Substitute credential values into the nodes' configs.

        The input nodes are left untouched; new nodes are returned in the same
        form (Node models or dicts) they were given. Empty values are
        substituted like any other.
        """

        def _fill(text: str) -> str:
            return PlaceholderResolver.resolve_string(text, credentials)

        updated: list[Any] = []
        for node in nodes:
            new_config = PlaceholderResolver._map_strings(PlaceholderResolver._config_of(node), _fill)
            if isinstance(node, Node):
                new_node = node.model_copy(deep=True)
                new_node.data.config = new_config
                updated.append(new_node)
            elif isinstance(node, dict) and isinstance(node.get("data"), dict):
                new_raw = copy.deepcopy(node)
                new_raw["data"]["config"] = new_config
                updated.append(new_raw)
            else:
                updated.append(copy.deepcopy(node))
        return updated

    @staticmethod
    def missing_credentials(credentials: dict[str, str], nodes: Iterable[NodeLike] = ()) -> list[str]:
        """Names that still need a value: blank entries plus placeholders absent from the map."""
        missing = [name for name, value in credentials.items() if not value.strip()]
        for name in PlaceholderResolver.collect_placeholders(nodes):
            if name not in credentials and name not in missing:
                missing.append(name)
        return missing

    @staticmethod
    def credentials_complete(credentials: dict[str, str], nodes: Iterable[NodeLike] = ()) -> bool:
        """True when every placeholder has a non-blank value."""
        return not PlaceholderResolver.missing_credentials(credentials, nodes)

    @staticmethod
    def is_secret(name: str) -> bool:
        """Whether input for this credential should be hidden."""
        return is_secret_name(name)
