"""Tests for the node configuration wizard state machine."""

import pytest

from pumpflux.core.exceptions import WizardStateError
from pumpflux.core.notifications import DESTRUCTIVE
from pumpflux.runtime.node_config_wizard import NodeConfigWizard
from pumpflux.runtime.node_types import NodeTypeCatalog


@pytest.fixture
def catalog():
    return NodeTypeCatalog()


@pytest.fixture
def wizard(sheet_nodes, catalog, notifier):
    return NodeConfigWizard(sheet_nodes, catalog, notifier)


class TestConstruction:
    def test_initializes_defaults(self, wizard):
        """Undeclared fields get defaults; existing values are kept."""
        sheets = wizard.nodes[0].data.config
        assert sheets["value_input_option"] == "RAW"
        assert sheets["spreadsheet_id"] == "${SPREADSHEET_ID}"
        assert wizard.nodes[1].data.config["channel"] == "#sales"

    def test_starts_at_first_step(self, wizard):
        assert wizard.current_step == 0
        assert not wizard.in_review
        assert wizard.describe_state() == "step 1/2"
        assert wizard.progress == 0

    def test_skips_invalid_nodes_with_notification(self, sheet_nodes, catalog, notifier):
        broken = {"id": "bad", "type": "action", "data": {"config": {}}}
        wizard = NodeConfigWizard([*sheet_nodes, broken], catalog, notifier)

        assert wizard.node_count == 2
        assert notifier.notifications[0].title == "Invalid Node Configuration"
        assert notifier.notifications[0].variant == DESTRUCTIVE

    def test_no_nodes_starts_in_review(self, catalog):
        wizard = NodeConfigWizard([], catalog)
        assert wizard.in_review
        assert wizard.is_review
        assert wizard.current_node is None

    def test_does_not_mutate_input(self, sheet_nodes, catalog):
        NodeConfigWizard(sheet_nodes, catalog)
        assert "value_input_option" not in sheet_nodes[0]["data"]["config"]


class TestTransitions:
    def test_next_advances_then_reviews(self, wizard):
        assert wizard.next()
        assert wizard.current_step == 1
        assert wizard.progress == 50
        assert wizard.next()
        assert wizard.in_review
        assert wizard.progress == 100
        assert not wizard.next()

    def test_validation_failure_keeps_step(self, wizard, notifier):
        wizard.set_field("sheet_name", "")

        assert not wizard.next()
        assert wizard.current_step == 0
        assert wizard.errors_for("sheet_name") == ["sheet_name is required"]
        assert notifier.titles[-1] == "Validation Error"

    def test_errors_cleared_on_step_change(self, wizard):
        wizard.set_field("sheet_name", "")
        wizard.next()
        wizard.set_field("sheet_name", "Leads")

        assert wizard.next()
        assert wizard.validation_errors == []

    def test_unknown_service_blocks(self, catalog, notifier):
        node = {"id": "x", "type": "action", "data": {"label": "Mystery", "service": "fax-machine"}}
        wizard = NodeConfigWizard([node], catalog, notifier)

        assert not wizard.next()
        assert wizard.errors_for("service") == ["Invalid service configuration"]

    def test_back(self, wizard):
        assert not wizard.back()
        wizard.next()
        wizard.next()
        assert wizard.back()
        assert not wizard.in_review
        assert wizard.current_step == 1
        assert wizard.back()
        assert wizard.current_step == 0

    def test_set_field_during_review_raises(self, wizard):
        wizard.next()
        wizard.next()
        with pytest.raises(WizardStateError):
            wizard.set_field("channel", "#general")


class TestSubmit:
    def _to_review(self, wizard):
        while not wizard.in_review:
            assert wizard.next()

    def test_submit_before_review_raises(self, wizard):
        with pytest.raises(WizardStateError):
            wizard.submit(lambda nodes: None)

    def test_submit_passes_configured_nodes(self, wizard):
        wizard.set_field("sheet_name", "Prospects")
        self._to_review(wizard)
        received = []

        assert wizard.submit(received.extend)
        assert received[0].data.config["sheet_name"] == "Prospects"
        # Callback gets copies
        received[0].data.config["sheet_name"] = "changed"
        assert wizard.nodes[0].data.config["sheet_name"] == "Prospects"

    def test_submit_failure_is_reported(self, wizard, notifier):
        self._to_review(wizard)

        def explode(nodes):
            raise RuntimeError("backend down")

        assert not wizard.submit(explode)
        assert notifier.titles[-1] == "Error"
        assert not wizard.is_submitting
        assert wizard.in_review
        assert wizard.submit(lambda nodes: None)
