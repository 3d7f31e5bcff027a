"""Tests for the built-in service registry."""

from pumpflux.core.models import Node
from pumpflux.core.services import SERVICE_REGISTRY, get_service


class TestServiceRegistry:
    def test_known_services(self):
        assert {"google-sheets", "facebook", "hubspot", "slack", "pipedrive", "anthropic-claude"} <= set(
            SERVICE_REGISTRY
        )

    def test_get_service(self):
        assert get_service("slack").display_name == "Slack"
        assert get_service(None) is None
        assert get_service("unknown") is None

    def test_required_fields(self):
        assert get_service("google-sheets").required_fields == ["spreadsheet_id", "sheet_name"]

    def test_as_node_type(self):
        definition = get_service("anthropic-claude").as_node_type()
        max_tokens = definition.get_field("max_tokens")
        assert max_tokens.type == "number"
        assert max_tokens.has_default
        assert max_tokens.default_value == 1024
        api_key = definition.get_field("api_key")
        assert api_key.required
        assert not api_key.has_default

    def test_untagged_node_has_no_typed_config(self):
        node = Node.model_validate({"id": "a", "type": "action", "data": {"label": "A"}})
        assert node.data.typed_config() is None
