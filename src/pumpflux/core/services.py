"""Built-in third-party services and their node config schemas.

A node's ``data.service`` tag selects one ``ServiceDefinition``; each
definition owns a pydantic model describing that service's config. The
registry doubles as a fallback source of node-type definitions when the
backend has none for a service.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from pumpflux.core.models import InputField, NodeTypeDefinition


class ServiceConfig(BaseModel):
    """Base for service config schemas. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")


class GoogleSheetsConfig(ServiceConfig):
    spreadsheet_id: str = Field(description="ID from the spreadsheet URL")
    sheet_name: str = Field(description="Tab to read from or append to")
    value_input_option: str = Field(default="RAW", description="RAW or USER_ENTERED")


class FacebookConfig(ServiceConfig):
    facebook_credential_id: str = Field(description="Connected Facebook account")


class HubspotConfig(ServiceConfig):
    hubspot_credential_id: str = Field(description="Connected HubSpot account")


class SlackConfig(ServiceConfig):
    slack_credential_id: str = Field(description="Connected Slack workspace")
    channel: str = Field(default="", description="Channel to post to, e.g. #sales")


class PipedriveConfig(ServiceConfig):
    pipedrive_credential_id: str = Field(description="Connected Pipedrive account")


class AnthropicClaudeConfig(ServiceConfig):
    api_key: str = Field(description="Anthropic API key")
    prompt: str = Field(description="Prompt sent for each row")
    sheet_id: str = Field(description="Spreadsheet receiving the results")
    max_tokens: int = Field(default=1024, description="Upper bound on response length")


_FIELD_TYPES: dict[Any, str] = {
    str: "string",
    int: "number",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


@dataclass(frozen=True)
class ServiceDefinition:
    """One variant of the node-data union, keyed by ``name``."""

    name: str
    display_name: str
    config_model: type[ServiceConfig]

    @property
    def required_fields(self) -> list[str]:
        return [name for name, info in self.config_model.model_fields.items() if info.is_required()]

    def as_node_type(self) -> NodeTypeDefinition:
        """Describe this service as a node-type definition for the wizard."""
        fields = []
        for name, info in self.config_model.model_fields.items():
            field_kwargs: dict[str, Any] = {
                "name": name,
                "type": _FIELD_TYPES.get(info.annotation, "string"),
                "label": name.replace("_", " ").title(),
                "description": info.description,
                "required": info.is_required(),
            }
            if not info.is_required():
                field_kwargs["default_value"] = info.default
            fields.append(InputField(**field_kwargs))
        return NodeTypeDefinition(name=self.name, display_name=self.display_name, input_fields=fields)


SERVICE_REGISTRY: dict[str, ServiceDefinition] = {
    definition.name: definition
    for definition in (
        ServiceDefinition("google-sheets", "Google Sheets", GoogleSheetsConfig),
        ServiceDefinition("facebook", "Facebook Lead Ads", FacebookConfig),
        ServiceDefinition("hubspot", "HubSpot", HubspotConfig),
        ServiceDefinition("slack", "Slack", SlackConfig),
        ServiceDefinition("pipedrive", "Pipedrive", PipedriveConfig),
        ServiceDefinition("anthropic-claude", "Anthropic Claude", AnthropicClaudeConfig),
    )
}


def get_service(name: Optional[str]) -> Optional[ServiceDefinition]:
    """Look up a service definition by its tag."""
    if not name:
        return None
    return SERVICE_REGISTRY.get(name)
