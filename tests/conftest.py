"""Root-level test configuration and fixtures."""

import json

import pytest

from pumpflux.core.models import WorkflowTemplate
from pumpflux.core.notifications import RecordingNavigator, RecordingNotifier


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.pumpflux and its env overrides."""
    home = tmp_path / "pumpflux-home"
    monkeypatch.setenv("PUMPFLUX_HOME", str(home))
    for name in ("PUMPFLUX_API_URL", "PUMPFLUX_API_TOKEN", "PUMPFLUX_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture
def sheet_nodes():
    """A trigger reading a sheet and an action posting to Slack, both with placeholders."""
    return [
        {
            "id": "n1",
            "type": "trigger",
            "position": {"x": 0, "y": 0},
            "data": {
                "label": "New Row",
                "service": "google-sheets",
                "event": "new_row",
                "config": {"spreadsheet_id": "${SPREADSHEET_ID}", "sheet_name": "Leads"},
            },
        },
        {
            "id": "n2",
            "type": "action",
            "position": {"x": 250, "y": 0},
            "data": {
                "label": "Notify Sales",
                "service": "slack",
                "action": "send_message",
                "config": {"slack_credential_id": "{{SLACK_TOKEN}}", "channel": "#sales"},
            },
        },
    ]


@pytest.fixture
def sheet_edges():
    return [{"id": "e1", "source": "n1", "target": "n2"}]


@pytest.fixture
def template_payload(sheet_nodes, sheet_edges):
    """Template as the API returns it (camelCase, workflowData as a JSON string)."""
    return {
        "id": 7,
        "name": "Lead Sync",
        "description": "Copy new sheet rows to Slack",
        "category": "sales",
        "tags": ["sheets", "slack"],
        "complexity": "simple",
        "popularity": 42,
        "isOfficial": True,
        "createdAt": "2024-05-01T10:00:00Z",
        "workflowData": json.dumps({"nodes": sheet_nodes, "edges": sheet_edges}),
    }


@pytest.fixture
def template(template_payload):
    return WorkflowTemplate.model_validate(template_payload)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def navigator():
    return RecordingNavigator()
