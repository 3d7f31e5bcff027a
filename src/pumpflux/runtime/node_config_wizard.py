"""Step-by-step configuration of a template's nodes.

The wizard is a small state machine: ``Step(i)`` for each node, then a
terminal ``Review``. ``next()`` only advances when the active node passes
validation; ``submit()`` hands the edited nodes to a completion callback.

Example:
    >>> wizard = NodeConfigWizard(nodes, NodeTypeCatalog())
    >>> wizard.set_field("sheet_name", "Leads")
    >>> wizard.next()
    True
    >>> wizard.in_review
    True
    >>> wizard.submit(save_nodes)
    True
"""

import logging
from typing import Any, Callable, Optional

from pumpflux.core.exceptions import WizardStateError
from pumpflux.core.models import Node, NodeTypeDefinition, coerce_nodes
from pumpflux.core.notifications import DESTRUCTIVE, LoggingNotifier, Notifier
from pumpflux.runtime.node_types import NodeTypeCatalog
from pumpflux.runtime.node_validator import ValidationError, initialize_defaults, validate_node

logger = logging.getLogger(__name__)


class NodeConfigWizard:
    """Walks the user through each node's config, one node per step."""

    def __init__(
        self,
        nodes: list[Any],
        catalog: NodeTypeCatalog,
        notifier: Optional[Notifier] = None,
    ):
        """Initialize the wizard.

        Args:
            nodes: Node models or raw node dicts; structurally invalid ones are skipped
            catalog: Source of node-type definitions
            notifier: Receives validation and completion messages
        """
        self.catalog = catalog
        self.notifier: Notifier = notifier or LoggingNotifier()

        valid, rejected = coerce_nodes(list(nodes))
        if rejected:
            logger.warning(f"Skipping {len(rejected)} invalid node(s)")
            self.notifier.notify(
                "Invalid Node Configuration",
                "Some nodes have invalid configuration. They will be skipped.",
                DESTRUCTIVE,
            )

        self.nodes: list[Node] = [initialize_defaults(node, catalog.resolve(node)) for node in valid]
        self.current_step = 0
        self.in_review = not self.nodes
        self.validation_errors: list[ValidationError] = []
        self.is_submitting = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def current_node(self) -> Optional[Node]:
        """The node being edited, or None while in review."""
        if self.in_review:
            return None
        return self.nodes[self.current_step]

    @property
    def current_definition(self) -> Optional[NodeTypeDefinition]:
        node = self.current_node
        return self.catalog.resolve(node) if node is not None else None

    @property
    def is_review(self) -> bool:
        return self.in_review

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.node_count - 1

    @property
    def progress(self) -> int:
        """Percentage of steps completed."""
        if self.in_review:
            return 100
        return int(self.current_step * 100 / self.node_count)

    def describe_state(self) -> str:
        if self.in_review:
            return "review"
        return f"step {self.current_step + 1}/{self.node_count}"

    def errors_for(self, field: str) -> list[str]:
        return [e.message for e in self.validation_errors if e.field == field]

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def set_field(self, name: str, value: Any) -> None:
        """Set one config field on the current node.

        Raises:
            WizardStateError: If called during review
        """
        node = self.current_node
        if node is None:
            raise WizardStateError("Cannot edit node configuration during review")
        node.data.config[name] = value

    def validate_current(self) -> bool:
        """Validate the current node, recording any errors."""
        node = self.current_node
        if node is None:
            self.validation_errors = []
            return True
        self.validation_errors = validate_node(node, self.catalog.resolve(node))
        return not self.validation_errors

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def next(self) -> bool:
        """Advance to the next step, or to review after the last node.

        Returns:
            True if the state changed. On validation failure the step stays
            where it is and ``validation_errors`` describes why.
        """
        if self.in_review:
            return False

        if not self.validate_current():
            logger.debug(
                f"Validation failed at {self.describe_state()}",
                extra={"errors": [e.message for e in self.validation_errors]},
            )
            self.notifier.notify("Validation Error", "Please fix the errors before proceeding.", DESTRUCTIVE)
            return False

        if self.is_last_step:
            self.in_review = True
        else:
            self.current_step += 1
        self.validation_errors = []
        return True

    def back(self) -> bool:
        """Return to the previous step, or leave review for the last node.

        Returns:
            True if the state changed
        """
        if self.in_review:
            if not self.nodes:
                return False
            self.in_review = False
        elif self.current_step > 0:
            self.current_step -= 1
        else:
            return False
        self.validation_errors = []
        return True

    def submit(self, on_complete: Callable[[list[Node]], Any]) -> bool:
        """Hand the configured nodes to on_complete.

        Failures raised by the callback are reported through the notifier;
        the wizard stays in review so the user can retry.

        Returns:
            True if the callback completed without raising

        Raises:
            WizardStateError: If called before reaching review
        """
        if not self.in_review:
            raise WizardStateError("Finish configuring every node before submitting")

        self.is_submitting = True
        try:
            on_complete([node.model_copy(deep=True) for node in self.nodes])
            return True
        except Exception:
            logger.exception("Error completing node configuration")
            self.notifier.notify("Error", "Failed to complete configuration. Please try again.", DESTRUCTIVE)
            return False
        finally:
            self.is_submitting = False
