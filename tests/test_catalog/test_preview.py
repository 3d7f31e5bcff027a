"""Tests for template preview parsing."""

import json

import pytest

from pumpflux.catalog.preview import TemplatePreview, parse_workflow_data
from pumpflux.core.exceptions import TemplateDataError
from pumpflux.core.models import WorkflowTemplate


def _template(**kwargs):
    return WorkflowTemplate(id=1, name="T", **kwargs)


class TestParseWorkflowData:
    def test_json_string(self, template):
        nodes, edges = parse_workflow_data(template)
        assert [n.id for n in nodes] == ["n1", "n2"]
        assert edges[0].source == "n1"

    def test_object(self, sheet_nodes, sheet_edges):
        nodes, edges = parse_workflow_data(_template(workflow_data={"nodes": sheet_nodes, "edges": sheet_edges}))
        assert len(nodes) == 2
        assert len(edges) == 1

    def test_legacy_fields_as_strings(self, sheet_nodes, sheet_edges):
        template = _template(nodes=json.dumps(sheet_nodes), edges=json.dumps(sheet_edges))
        nodes, edges = parse_workflow_data(template)
        assert len(nodes) == 2
        assert len(edges) == 1

    def test_no_graph_at_all(self):
        assert parse_workflow_data(_template()) == ([], [])

    @pytest.mark.parametrize(
        "data",
        ["{not json", '{"nodes": "oops"}', "[1, 2]", {"edges": [{"id": "e", "source": {}, "target": "b"}]}],
    )
    def test_malformed_degrades_to_empty(self, data):
        assert parse_workflow_data(_template(workflow_data=data)) == ([], [])

    def test_strict_raises(self):
        with pytest.raises(TemplateDataError):
            parse_workflow_data(_template(workflow_data="{not json"), strict=True)

    def test_missing_keys_default_to_empty(self):
        assert parse_workflow_data(_template(workflow_data={})) == ([], [])

    def test_malformed_nodes_skipped(self, sheet_nodes):
        data = {"nodes": [*sheet_nodes, {"id": "x"}], "edges": []}
        nodes, _ = parse_workflow_data(_template(workflow_data=data))
        assert [n.id for n in nodes] == ["n1", "n2"]

    def test_numeric_ids_become_strings(self):
        data = {
            "nodes": [{"id": 1, "type": "trigger", "data": {"label": "A"}}],
            "edges": [{"id": 9, "source": 1, "target": 1}],
        }
        nodes, edges = parse_workflow_data(_template(workflow_data=data))
        assert nodes[0].id == "1"
        assert edges[0].source == "1"


class TestTemplatePreview:
    def test_summary_and_placeholders(self, template):
        preview = TemplatePreview.from_template(template)
        assert preview.node_type_summary() == "1 trigger, 1 action"
        assert preview.placeholders() == ["SPREADSHEET_ID", "SLACK_TOKEN"]
        assert preview.config_dump()["n2"]["channel"] == "#sales"
        assert preview.node_label("n2") == "Notify Sales"

    def test_plural_summary(self, sheet_nodes):
        nodes = [sheet_nodes[0], {**sheet_nodes[1], "type": "trigger", "id": "n3"}]
        preview = TemplatePreview.from_template(_template(workflow_data={"nodes": nodes, "edges": []}))
        assert preview.node_type_summary() == "2 triggers"

    def test_empty(self):
        preview = TemplatePreview.from_template(_template(workflow_data="garbage"))
        assert preview.is_empty
        assert preview.node_type_summary() == ""
