"""Lookup of node-type definitions for workflow nodes."""

import logging
from typing import Any, Optional

from pumpflux.core.exceptions import ApiError
from pumpflux.core.models import Node, NodeTypeDefinition
from pumpflux.core.services import SERVICE_REGISTRY

logger = logging.getLogger(__name__)


class NodeTypeCatalog:
    """Resolves a node to the definition that describes its config fields.

    Backend definitions win; the built-in service registry fills the gaps so
    the wizard still works against a server with an empty node-type table.
    """

    def __init__(self, definitions: Optional[list[NodeTypeDefinition]] = None, include_builtin: bool = True):
        self._by_name: dict[str, NodeTypeDefinition] = {}
        self._by_id: dict[int, NodeTypeDefinition] = {}

        if include_builtin:
            for service in SERVICE_REGISTRY.values():
                self._by_name[service.name] = service.as_node_type()

        for definition in definitions or []:
            self.add(definition)

    @classmethod
    def from_client(cls, client: Any, include_builtin: bool = True) -> "NodeTypeCatalog":
        """Build a catalog from the API, degrading to built-ins if the fetch fails."""
        try:
            definitions = client.list_node_types()
        except ApiError as e:
            logger.warning(f"Could not fetch node types, using built-in services only: {e}")
            definitions = []
        return cls(definitions, include_builtin=include_builtin)

    def add(self, definition: NodeTypeDefinition) -> None:
        self._by_name[definition.name] = definition
        if definition.id is not None:
            self._by_id[definition.id] = definition

    def get(self, name: str) -> Optional[NodeTypeDefinition]:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return sorted(self._by_name)

    def resolve(self, node: Node) -> Optional[NodeTypeDefinition]:
        """Find the definition for a node.

        Resolution order: explicit ``node_type_id``, then the ``service``
        tag. Nodes without either have no definition.
        """
        node_type_id = node.data.node_type_id
        if node_type_id is not None and node_type_id in self._by_id:
            return self._by_id[node_type_id]
        if node.data.service:
            return self._by_name.get(node.data.service)
        return None

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
