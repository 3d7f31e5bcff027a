"""Destinations a configured workflow can be saved to."""

import logging
from typing import Any, Optional, Protocol

from pumpflux.core.models import Workflow
from pumpflux.core.workflow_manager import WorkflowManager

logger = logging.getLogger(__name__)


class WorkflowSink(Protocol):
    def save_workflow(self, workflow: Workflow, template_id: Optional[int] = None) -> dict[str, Any]: ...


class ApiWorkflowSink:
    """Saves through ``POST /api/workflows``."""

    def __init__(self, client: Any):
        self.client = client

    def save_workflow(self, workflow: Workflow, template_id: Optional[int] = None) -> dict[str, Any]:
        record = self.client.create_workflow(workflow)
        logger.info(f"Created workflow '{workflow.name}' on the server", extra={"template_id": template_id})
        return record


class LocalWorkflowSink:
    """Saves into the local workflow directory."""

    def __init__(self, manager: WorkflowManager):
        self.manager = manager

    def save_workflow(self, workflow: Workflow, template_id: Optional[int] = None) -> dict[str, Any]:
        return self.manager.save(workflow, template_id=template_id)
