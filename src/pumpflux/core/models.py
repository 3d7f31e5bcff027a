"""Data models for templates, nodes, edges and node-type definitions.

The API speaks camelCase JSON (``workflowData``, ``inputFields``,
``defaultValue``); models accept both that and snake_case and serialize back
to camelCase with ``to_api()``.
"""

import json
import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class ApiModel(BaseModel):
    """Base for models exchanged with the REST API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )

    def to_api(self) -> dict[str, Any]:
        """Dump as the camelCase JSON the API expects."""
        return self.model_dump(by_alias=True, mode="json")


# ============================================================================
# Workflow graph
# ============================================================================


class Position(ApiModel):
    x: float = 0
    y: float = 0


class NodeData(ApiModel):
    """Payload of a workflow node.

    ``service`` is the tag selecting which config schema applies; see
    ``typed_config()`` and ``pumpflux.core.services``.
    """

    label: str
    service: Optional[str] = None
    event: Optional[str] = None
    action: Optional[str] = None
    node_type_id: Optional[int] = None
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("config", mode="before")
    @classmethod
    def _none_config_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    def typed_config(self) -> Optional[BaseModel]:
        """Validate ``config`` against the service's own schema.

        Returns:
            The service-specific config model, or None when the service is
            unknown or has no schema.

        Raises:
            pydantic.ValidationError: If the config does not fit the schema
        """
        from pumpflux.core.services import get_service

        definition = get_service(self.service)
        if definition is None:
            return None
        return definition.config_model.model_validate(self.config)


class Node(ApiModel):
    """A single step in a workflow graph (trigger, action or function)."""

    id: str
    type: str
    position: Position = Field(default_factory=Position)
    data: NodeData


class Edge(ApiModel):
    """A directed connection between two nodes. Never mutated."""

    id: str
    source: str
    target: str
    label: Optional[str] = None


def coerce_nodes(raw_nodes: list[Any]) -> tuple[list[Node], list[Any]]:
    """Split raw node payloads into valid Node models and rejected items.

    A node is structurally valid when it has ``id``, ``type`` and a ``data``
    object carrying a ``label``.

    Returns:
        Tuple of (valid nodes, rejected raw items)
    """
    valid: list[Node] = []
    rejected: list[Any] = []
    for raw in raw_nodes:
        if isinstance(raw, Node):
            valid.append(raw)
            continue
        try:
            valid.append(Node.model_validate(raw))
        except ValidationError as e:
            logger.debug(f"Skipping invalid node: {e.error_count()} error(s)", extra={"node": raw})
            rejected.append(raw)
    return valid, rejected


# ============================================================================
# Templates
# ============================================================================


class WorkflowTemplate(ApiModel):
    """A predefined node/edge graph users can clone into a new workflow.

    ``workflow_data`` (or the legacy top-level ``nodes``/``edges``) is kept
    raw: servers send it as an object or as a JSON string, and parsing it is
    the preview's job so a malformed payload never breaks the catalog.
    """

    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    complexity: Optional[str] = None
    difficulty: Optional[str] = None
    popularity: int = 0
    is_official: bool = False
    image_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    workflow_data: Any = None
    nodes: Any = None
    edges: Any = None

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v

    @field_validator("popularity", mode="before")
    @classmethod
    def _none_popularity(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def level(self) -> Optional[str]:
        """Complexity, falling back to difficulty (servers use either name)."""
        return self.complexity or self.difficulty


class TemplateDraft(ApiModel):
    """A new template submitted to ``POST /api/workflow/templates``.

    Field rules mirror the server's create form, so an invalid draft fails
    locally with a pydantic error instead of a round trip.
    """

    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    category: str = Field(min_length=1)
    tags: list[str] = Field(min_length=1)
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    is_public: bool = True
    version: str = "1.0.0"
    workflow_data: Optional[dict[str, Any]] = None

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v


# ============================================================================
# Node-type definitions
# ============================================================================


class FieldOption(ApiModel):
    label: Optional[str] = None
    value: Any

    @model_validator(mode="after")
    def _label_defaults_to_value(self) -> "FieldOption":
        if self.label is None:
            self.label = str(self.value)
        return self


class FieldValidation(ApiModel):
    """Field-level validation rules supplied by a node-type definition."""

    min: Optional[float] = None
    max: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    message: Optional[str] = None


class InputField(ApiModel):
    """A declared input of a node type."""

    name: str
    type: str = "string"
    label: Optional[str] = None
    description: Optional[str] = None
    placeholder: Optional[str] = None
    required: bool = False
    default_value: Any = None
    options: list[FieldOption] = Field(default_factory=list)
    validation: Optional[FieldValidation] = None

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, v: Any) -> Any:
        # Options arrive as ["a", "b"] or [{"label": "A", "value": "a"}]
        if v is None:
            return []
        return [{"label": str(o), "value": o} if not isinstance(o, dict) else o for o in v]

    @property
    def has_default(self) -> bool:
        """True when the definition explicitly declared a default value."""
        return "default_value" in self.model_fields_set


class NodeTypeDefinition(ApiModel):
    """Backend definition of a node type: its field schema and rules."""

    id: Optional[int] = None
    name: str
    display_name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    input_fields: list[InputField] = Field(default_factory=list)
    output_fields: list[Any] = Field(default_factory=list)

    @field_validator("input_fields", "output_fields", mode="before")
    @classmethod
    def _parse_field_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                logger.warning("Ignoring unparseable field list on node type")
                return []
        return v if isinstance(v, list) else []

    def get_field(self, name: str) -> Optional[InputField]:
        for field in self.input_fields:
            if field.name == name:
                return field
        return None


# ============================================================================
# Saved workflow
# ============================================================================


class Workflow(ApiModel):
    """A workflow built from a configured template, ready to persist."""

    id: Optional[int] = None
    name: str
    description: str = ""
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
