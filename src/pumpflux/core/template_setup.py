"""Turning a template into a saved workflow.

``TemplateWorkflowSetup`` fetches a template, collects the credentials its
placeholders need, optionally runs the node configuration wizard, and saves
the resulting workflow through a ``WorkflowSink``.

Typical flow:
    >>> setup = TemplateWorkflowSetup(client, ApiWorkflowSink(client), notifier, navigator)
    >>> setup.load(7)
    True
    >>> setup.set_credential("SPREADSHEET_ID", "abc123")
    >>> setup.save()
    {'id': 12, 'name': 'Lead Sync Workflow', ...}
"""

import logging
from typing import Any, Callable, Optional

from pumpflux.catalog.preview import parse_workflow_data
from pumpflux.core.exceptions import ApiError, CredentialsIncompleteError, PumpfluxError, TemplateDataError
from pumpflux.core.models import Edge, Node, Workflow, WorkflowTemplate
from pumpflux.core.notifications import DESTRUCTIVE, LoggingNotifier, Navigator, Notifier
from pumpflux.core.sinks import WorkflowSink
from pumpflux.core.workflow_schema import validate_graph
from pumpflux.runtime.node_config_wizard import NodeConfigWizard
from pumpflux.runtime.node_types import NodeTypeCatalog
from pumpflux.runtime.placeholder_resolver import PlaceholderResolver

logger = logging.getLogger(__name__)

HOME_PATH = "/"


class _NoNavigation:
    def navigate(self, path: str) -> None:
        logger.debug(f"Navigation to {path} ignored")


class TemplateWorkflowSetup:
    """State of one template being turned into a workflow."""

    def __init__(
        self,
        client: Any,
        sink: WorkflowSink,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        catalog: Optional[NodeTypeCatalog] = None,
    ):
        self.client = client
        self.sink = sink
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.navigator: Navigator = navigator or _NoNavigation()
        self._catalog = catalog

        self.template: Optional[WorkflowTemplate] = None
        self.workflow_name = ""
        self.description = ""
        self.nodes: list[Node] = []
        self.edges: list[Edge] = []
        self.credentials: dict[str, str] = {}
        self.error: Optional[str] = None
        self.is_saving = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, template_id: int) -> bool:
        """Fetch a template and prepare the credential map.

        Returns:
            True if the template was fetched. Malformed graph data still
            counts as loaded, with no nodes or edges.
        """
        try:
            template = self.client.get_template(template_id)
        except ApiError as e:
            logger.error(f"Error fetching template {template_id}: {e}")
            self.error = str(e)
            self.notifier.notify("Error loading template", "Failed to fetch the workflow template.", DESTRUCTIVE)
            return False

        self.use_template(template)
        return True

    def use_template(self, template: WorkflowTemplate) -> None:
        """Prepare the setup from an already fetched template."""
        self.template = template
        self.workflow_name = f"{template.name} Workflow"
        self.description = template.description or ""
        self.error = None

        try:
            self.nodes, self.edges = parse_workflow_data(template, strict=True)
        except TemplateDataError as e:
            logger.error(f"Error parsing workflow data: {e}")
            self.nodes, self.edges = [], []
            self.notifier.notify("Error loading template", "Failed to load the workflow template data.", DESTRUCTIVE)

        self.credentials = PlaceholderResolver.build_credential_map(self.nodes)
        logger.debug(
            f"Prepared template {template.id}",
            extra={"nodes": len(self.nodes), "edges": len(self.edges), "credentials": list(self.credentials)},
        )

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def set_credential(self, name: str, value: str) -> None:
        """Fill one placeholder value.

        Raises:
            KeyError: If no node references the placeholder
        """
        if name not in self.credentials:
            known = ", ".join(self.credentials) or "none"
            raise KeyError(f"Unknown credential '{name}'. This template uses: {known}")
        self.credentials[name] = value

    @property
    def missing_credentials(self) -> list[str]:
        return PlaceholderResolver.missing_credentials(self.credentials, self.nodes)

    @property
    def credentials_complete(self) -> bool:
        return PlaceholderResolver.credentials_complete(self.credentials, self.nodes)

    # ------------------------------------------------------------------
    # Node configuration
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> NodeTypeCatalog:
        if self._catalog is None:
            self._catalog = NodeTypeCatalog.from_client(self.client)
        return self._catalog

    def configure(self, driver: Callable[[NodeConfigWizard], bool]) -> bool:
        """Run the node configuration wizard over the template's nodes.

        Args:
            driver: Moves the wizard to review (prompting the user, applying
                edits) and returns True to submit or False to cancel.

        Returns:
            True if the configured nodes replaced the current ones
        """
        wizard = NodeConfigWizard(self.nodes, self.catalog, self.notifier)
        if not driver(wizard):
            logger.debug("Node configuration cancelled")
            return False
        return wizard.submit(self._replace_nodes)

    def _replace_nodes(self, nodes: list[Node]) -> None:
        self.nodes = nodes
        # Edited configs may add or drop placeholders; keep values already entered
        previous = self.credentials
        self.credentials = {
            name: previous.get(name, "") for name in PlaceholderResolver.collect_placeholders(self.nodes)
        }

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def build_workflow(self) -> Workflow:
        """The workflow to save, with credentials substituted.

        Edges touching a node that was skipped as invalid are left out.
        """
        node_ids = {node.id for node in self.nodes}
        edges = []
        for edge in self.edges:
            if edge.source in node_ids and edge.target in node_ids:
                edges.append(edge.model_copy())
            else:
                logger.warning(f"Dropping edge '{edge.id}': {edge.source} -> {edge.target} references a skipped node")
        return Workflow(
            name=self.workflow_name.strip(),
            description=self.description,
            nodes=PlaceholderResolver.apply_credentials(self.nodes, self.credentials),
            edges=edges,
        )

    def save(self) -> Optional[dict[str, Any]]:
        """Substitute credentials and persist the workflow.

        Returns:
            The saved record, or None if saving failed (already notified)

        Raises:
            CredentialsIncompleteError: If any placeholder still lacks a value
        """
        missing = self.missing_credentials
        if missing:
            raise CredentialsIncompleteError(missing)

        self.is_saving = True
        try:
            workflow = self.build_workflow()
            if not workflow.name:
                raise PumpfluxError("Workflow name is required")
            validate_graph(
                [node.model_dump() for node in workflow.nodes],
                [edge.model_dump() for edge in workflow.edges],
            )
            record = self.sink.save_workflow(workflow, template_id=self.template.id if self.template else None)
        except PumpfluxError as e:
            logger.error(f"Error saving workflow: {e}")
            self.error = str(e)
            self.notifier.notify("Save failed", "There was a problem saving your workflow.", DESTRUCTIVE)
            return None
        finally:
            self.is_saving = False

        self.error = None
        self.notifier.notify("Workflow saved!", "Your customized workflow has been saved successfully.")
        self.navigator.navigate(HOME_PATH)
        return record
