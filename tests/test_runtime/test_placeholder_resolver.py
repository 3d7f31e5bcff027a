"""Tests for placeholder extraction and credential substitution."""

import copy

import pytest

from pumpflux.core.models import Node
from pumpflux.runtime.placeholder_resolver import PlaceholderResolver


def _node(config, node_id="n1"):
    return {"id": node_id, "type": "action", "data": {"label": "Step", "config": config}}


class TestExtractPlaceholders:
    """Test placeholder detection in single strings."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("${api_key}", ["api_key"]),
            ("{{sheet_id}}", ["sheet_id"]),
            ("Bearer ${token} for {{user}}", ["token", "user"]),
            ("${a} ${a} {{a}}", ["a"]),
            ("no tokens here", []),
            ("${unclosed", []),
            ("{{unclosed}", []),
            ("${ spaced }", [" spaced "]),
            ("${{X}}", ["X"]),
            ("{{{Y}}}", ["Y"]),
        ],
    )
    def test_extracts_names(self, text, expected):
        assert PlaceholderResolver.extract_placeholders(text) == expected

    def test_has_placeholders_recurses(self):
        assert PlaceholderResolver.has_placeholders({"a": [{"b": "${x}"}]})
        assert not PlaceholderResolver.has_placeholders({"a": [1, "plain"]})


class TestCollectPlaceholders:
    """Test scanning node configs."""

    def test_spreadsheet_example(self):
        """A single sheets node yields one empty credential entry."""
        nodes = [_node({"spreadsheet_id": "${spreadsheet_id}", "sheet_name": "Sheet1"})]
        assert PlaceholderResolver.build_credential_map(nodes) == {"spreadsheet_id": ""}

    def test_first_appearance_order_across_nodes(self, sheet_nodes):
        assert PlaceholderResolver.collect_placeholders(sheet_nodes) == ["SPREADSHEET_ID", "SLACK_TOKEN"]

    def test_scans_one_level_of_nested_dicts(self):
        nodes = [_node({"mapping": {"email": "${EMAIL_COLUMN}", "deeper": {"x": "${TOO_DEEP}"}}})]
        assert PlaceholderResolver.collect_placeholders(nodes) == ["EMAIL_COLUMN"]

    def test_lists_are_not_scanned(self):
        nodes = [_node({"recipients": ["${ADMIN_EMAIL}"]})]
        assert PlaceholderResolver.collect_placeholders(nodes) == []

    def test_accepts_models_and_tolerates_missing_config(self, sheet_nodes):
        models = [Node.model_validate(n) for n in sheet_nodes]
        assert PlaceholderResolver.collect_placeholders(models) == ["SPREADSHEET_ID", "SLACK_TOKEN"]
        assert PlaceholderResolver.collect_placeholders([{"id": "x", "data": {}}]) == []

    def test_no_side_effects(self, sheet_nodes):
        before = copy.deepcopy(sheet_nodes)
        PlaceholderResolver.collect_placeholders(sheet_nodes)
        assert sheet_nodes == before


class TestApplyCredentials:
    """Test substitution of credential values."""

    def test_replaces_both_spellings(self, sheet_nodes):
        result = PlaceholderResolver.apply_credentials(
            sheet_nodes, {"SPREADSHEET_ID": "1AbC", "SLACK_TOKEN": "xoxb-1"}
        )
        assert result[0]["data"]["config"]["spreadsheet_id"] == "1AbC"
        assert result[1]["data"]["config"]["slack_credential_id"] == "xoxb-1"

    def test_inputs_untouched(self, sheet_nodes):
        before = copy.deepcopy(sheet_nodes)
        PlaceholderResolver.apply_credentials(sheet_nodes, {"SPREADSHEET_ID": "1AbC"})
        assert sheet_nodes == before

    def test_complete_map_leaves_nothing_to_extract(self, sheet_nodes):
        credentials = {name: f"value-{name}" for name in PlaceholderResolver.collect_placeholders(sheet_nodes)}
        result = PlaceholderResolver.apply_credentials(sheet_nodes, credentials)
        assert PlaceholderResolver.collect_placeholders(result) == []

    def test_unknown_names_stay(self):
        result = PlaceholderResolver.apply_credentials([_node({"a": "${KNOWN}/${OTHER}"})], {"KNOWN": "k"})
        assert result[0]["data"]["config"]["a"] == "k/${OTHER}"

    def test_every_placeholder_in_one_value_replaced(self):
        nodes = [_node({"url": "${HOST}:{{PORT}}/${HOST}"})]
        result = PlaceholderResolver.apply_credentials(nodes, {"HOST": "db", "PORT": "5432"})
        assert result[0]["data"]["config"]["url"] == "db:5432/db"

    def test_dollar_before_mustache_stays_literal(self):
        result = PlaceholderResolver.apply_credentials([_node({"a": "${{X}}"})], {"X": "v"})
        assert result[0]["data"]["config"]["a"] == "$v"

    def test_empty_value_substituted(self):
        result = PlaceholderResolver.apply_credentials([_node({"a": "x${EMPTY}y"})], {"EMPTY": ""})
        assert result[0]["data"]["config"]["a"] == "xy"

    def test_substituted_values_are_not_rescanned(self):
        result = PlaceholderResolver.apply_credentials([_node({"a": "${A}"})], {"A": "${B}", "B": "nope"})
        assert result[0]["data"]["config"]["a"] == "${B}"

    def test_nested_dict_substituted_non_strings_kept(self):
        config = {"mapping": {"col": "{{COL}}", "n": 3}, "limit": 10, "flags": ["${COL}"]}
        result = PlaceholderResolver.apply_credentials([_node(config)], {"COL": "email"})
        new_config = result[0]["data"]["config"]
        assert new_config["mapping"] == {"col": "email", "n": 3}
        assert new_config["limit"] == 10
        assert new_config["flags"] == ["${COL}"]

    def test_returns_models_for_models(self, sheet_nodes):
        models = [Node.model_validate(n) for n in sheet_nodes]
        result = PlaceholderResolver.apply_credentials(models, {"SPREADSHEET_ID": "1AbC"})
        assert isinstance(result[0], Node)
        assert result[0].data.config["spreadsheet_id"] == "1AbC"
        assert models[0].data.config["spreadsheet_id"] == "${SPREADSHEET_ID}"


class TestCredentialsComplete:
    """Test readiness checks."""

    def test_blank_values_are_missing(self, sheet_nodes):
        credentials = {"SPREADSHEET_ID": "1AbC", "SLACK_TOKEN": "  "}
        assert PlaceholderResolver.missing_credentials(credentials, sheet_nodes) == ["SLACK_TOKEN"]
        assert not PlaceholderResolver.credentials_complete(credentials, sheet_nodes)

    def test_placeholder_absent_from_map_is_missing(self, sheet_nodes):
        assert PlaceholderResolver.missing_credentials({"SPREADSHEET_ID": "1AbC"}, sheet_nodes) == ["SLACK_TOKEN"]

    def test_complete(self, sheet_nodes):
        credentials = {"SPREADSHEET_ID": "1AbC", "SLACK_TOKEN": "xoxb"}
        assert PlaceholderResolver.credentials_complete(credentials, sheet_nodes)

    def test_empty_map_without_nodes_is_complete(self):
        assert PlaceholderResolver.credentials_complete({})

    @pytest.mark.parametrize(
        "name,secret",
        [("API_KEY", True), ("slack_token", True), ("db_password", True), ("SPREADSHEET_ID", False)],
    )
    def test_is_secret(self, name, secret):
        assert PlaceholderResolver.is_secret(name) is secret
