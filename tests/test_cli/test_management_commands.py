"""Tests for favorites, node-types, workflow and settings commands."""

import json
from unittest.mock import Mock

import pytest
from click.testing import CliRunner

from pumpflux.cli.context import AppContext
from pumpflux.cli.main import cli
from pumpflux.core.exceptions import ApiError, NodeTypeNotFoundError
from pumpflux.core.models import NodeTypeDefinition, Workflow
from pumpflux.core.workflow_manager import WorkflowManager


@pytest.fixture
def client(template):
    client = Mock()
    client.list_templates.return_value = [template]
    return client


@pytest.fixture
def app(tmp_path, client):
    return AppContext(home=tmp_path / "home", client=client)


def invoke(app, args, input=None):
    return CliRunner().invoke(cli, args, obj=app, input=input)


class TestFavoritesCommands:
    def test_empty(self, app):
        result = invoke(app, ["favorites", "list"])
        assert "No favorite templates yet." in result.output

    def test_toggle_and_list(self, app):
        assert "Template added to favorites" in invoke(app, ["favorites", "toggle", "7"]).output

        result = invoke(app, ["favorites", "list"])
        assert "★ [7] Lead Sync" in result.output

        assert "Template removed from favorites" in invoke(app, ["favorites", "toggle", "7"]).output

    def test_list_ids_when_api_down(self, app, client):
        invoke(app, ["favorites", "toggle", "7"])
        client.list_templates.side_effect = ApiError("down")

        result = invoke(app, ["favorites", "list"])

        assert result.exit_code == 0
        assert "could not fetch template details" in result.output
        assert result.output.strip().endswith("7")


class TestNodeTypesCommands:
    def test_list(self, app, client):
        client.list_node_types.return_value = [
            NodeTypeDefinition(id=1, name="slack", display_name="Slack", category="messaging")
        ]
        result = invoke(app, ["node-types", "list"])
        assert result.exit_code == 0
        assert "[1] slack  Slack" in result.output

    def test_show_by_name_and_id(self, app, client):
        client.get_node_type_by_name.return_value = NodeTypeDefinition(name="slack")
        client.get_node_type.return_value = NodeTypeDefinition(id=2, name="hubspot")

        assert "Name: slack" in invoke(app, ["node-types", "show", "slack"]).output
        assert "Name: hubspot" in invoke(app, ["node-types", "show", "2"]).output
        client.get_node_type.assert_called_once_with(2)

    def test_show_by_node_id(self, app, client):
        client.get_node_type_by_node_id.return_value = NodeTypeDefinition(name="slack")
        invoke(app, ["node-types", "show", "--node-id", "n2"])
        client.get_node_type_by_node_id.assert_called_once_with("n2")

    def test_show_not_found(self, app, client):
        client.get_node_type_by_name.side_effect = NodeTypeNotFoundError("missing", status_code=404)
        result = invoke(app, ["node-types", "show", "ghost"])
        assert result.exit_code == 1
        assert "Node type 'ghost' not found" in result.output

    def test_create_from_file(self, app, client, tmp_path):
        path = tmp_path / "webhook.json"
        path.write_text(json.dumps({"name": "webhook", "inputFields": [{"name": "url", "required": True}]}))
        client.create_node_type.return_value = NodeTypeDefinition(id=5, name="webhook")

        result = invoke(app, ["node-types", "create", "--file", str(path)])

        assert result.exit_code == 0
        assert "Created node type 'webhook' (id 5)" in result.output
        sent = client.create_node_type.call_args.args[0]
        assert sent.get_field("url").required

    def test_create_rejects_invalid_file(self, app, client, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"displayName": "no name"}')
        result = invoke(app, ["node-types", "create", "--file", str(path)])
        assert result.exit_code == 1
        client.create_node_type.assert_not_called()

    def test_update(self, app, client, tmp_path):
        path = tmp_path / "slack.json"
        path.write_text(json.dumps({"name": "slack"}))
        client.update_node_type.return_value = NodeTypeDefinition(id=3, name="slack")

        result = invoke(app, ["node-types", "update", "3", "--file", str(path)])

        assert "Updated node type 'slack' (id 3)" in result.output

    def test_delete_confirms(self, app, client):
        result = invoke(app, ["node-types", "delete", "3"], input="n\n")
        assert result.exit_code == 1
        client.delete_node_type.assert_not_called()

        result = invoke(app, ["node-types", "delete", "3", "--yes"])
        assert result.exit_code == 0
        client.delete_node_type.assert_called_once_with(3)


class TestWorkflowCommands:
    @pytest.fixture
    def saved(self, app):
        manager = WorkflowManager(app.home / "workflows")
        manager.save(Workflow(name="Lead Sync Workflow", description="rows to slack"))
        manager.save(Workflow(name="Invoice Digest"))
        return manager

    def test_list(self, app, saved):
        result = invoke(app, ["workflow", "list"])
        assert "lead-sync-workflow" in result.output
        assert "Total: 2 workflows" in result.output

    def test_list_filter_and_json(self, app, saved):
        data = json.loads(invoke(app, ["workflow", "list", "slack", "--json"]).output)
        assert [w["key"] for w in data] == ["lead-sync-workflow"]

    def test_list_empty(self, app):
        assert "No workflows saved locally yet." in invoke(app, ["workflow", "list"]).output

    def test_show(self, app, saved):
        data = json.loads(invoke(app, ["workflow", "show", "lead-sync-workflow"]).output)
        assert data["name"] == "Lead Sync Workflow"

    def test_show_missing_suggests(self, app, saved):
        result = invoke(app, ["workflow", "show", "lead-sync"])
        assert result.exit_code == 1
        assert "Did you mean" in result.output
        assert "lead-sync-workflow" in result.output

    def test_delete(self, app, saved):
        result = invoke(app, ["workflow", "delete", "invoice-digest", "--force"])
        assert result.exit_code == 0
        assert not saved.exists("invoice-digest")


class TestSettingsCommands:
    def test_init_and_show(self, app):
        result = invoke(app, ["settings", "init"])
        assert result.exit_code == 0
        assert (app.home / "settings.json").exists()

        result = invoke(app, ["settings", "show"])
        assert '"base_url": "http://localhost:5000"' in result.output

    def test_set_api_url(self, app):
        result = invoke(app, ["settings", "set-api-url", "https://pf.example.com/"])
        assert result.exit_code == 0
        data = json.loads((app.home / "settings.json").read_text())
        assert data["api"]["base_url"] == "https://pf.example.com"

    def test_set_api_url_invalid(self, app):
        result = invoke(app, ["settings", "set-api-url", "pf.example.com"])
        assert result.exit_code == 1
        assert "Must start with http://" in result.output

    def test_token_masked(self, app):
        invoke(app, ["settings", "set-token", "supersecret"])
        result = invoke(app, ["settings", "show"])
        assert "sup***" in result.output
        assert "supersecret" not in result.output

    def test_clear_token(self, app):
        invoke(app, ["settings", "set-token", "supersecret"])
        invoke(app, ["settings", "set-token", "--clear"])
        assert json.loads((app.home / "settings.json").read_text())["api"]["token"] is None

    def test_env_override_noted(self, app, monkeypatch):
        monkeypatch.setenv("PUMPFLUX_TIMEOUT", "5")
        assert "Overridden by environment: PUMPFLUX_TIMEOUT" in invoke(app, ["settings", "show"]).output
