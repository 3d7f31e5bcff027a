"""Local storage of configured workflows.

Workflows saved with ``--local`` live in ``~/.pumpflux/workflows/`` as one
JSON file each, wrapped with metadata. The file name is a slug of the
workflow name.
"""

import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pumpflux.core.exceptions import WorkflowExistsError, WorkflowNotFoundError, WorkflowValidationError
from pumpflux.core.models import Workflow

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 50


def slugify(name: str) -> str:
    """Turn a display name into a file-safe key, e.g. ``"CRM Sync!"`` -> ``"crm-sync"``."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


class WorkflowManager:
    """Manages locally saved workflows: save, load, list, delete."""

    def __init__(self, workflows_dir: Optional[Path] = None):
        """Initialize WorkflowManager.

        Args:
            workflows_dir: Directory to store workflows. Defaults to ~/.pumpflux/workflows/
        """
        if workflows_dir is None:
            workflows_dir = Path("~/.pumpflux/workflows")

        self.workflows_dir = Path(workflows_dir).expanduser().resolve()
        self.workflows_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"WorkflowManager initialized with directory: {self.workflows_dir}")

    def _key_for(self, name: str) -> str:
        key = slugify(name)
        if not key:
            raise WorkflowValidationError(f"Workflow name '{name}' has no letters or digits to build a file name from")
        return key

    def _perform_atomic_save(self, file_path: Path, temp_path: str) -> None:
        """Link the temp file into place, refusing to overwrite.

        Raises:
            WorkflowExistsError: If the target already exists
        """
        try:
            # os.link fails with EEXIST if the target exists
            os.link(temp_path, file_path)
            os.unlink(temp_path)
        except FileExistsError:
            os.unlink(temp_path)
            raise WorkflowExistsError(f"Workflow '{file_path.stem}' already exists") from None
        except OSError:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def save(self, workflow: Workflow, template_id: Optional[int] = None) -> dict[str, Any]:
        """Save a workflow with a metadata wrapper.

        Args:
            workflow: Configured workflow to store
            template_id: Template the workflow was created from, if any

        Returns:
            The stored record (metadata wrapper)

        Raises:
            WorkflowExistsError: If a workflow with the same key already exists
            WorkflowValidationError: If the name is unusable or the write fails
        """
        key = self._key_for(workflow.name)
        now = datetime.now(timezone.utc).isoformat()
        record = {
            "key": key,
            "name": workflow.name,
            "description": workflow.description,
            "template_id": template_id,
            "workflow": workflow.to_api(),
            "created_at": now,
            "updated_at": now,
            "version": "1.0.0",
        }

        file_path = self.workflows_dir / f"{key}.json"
        temp_fd, temp_path = tempfile.mkstemp(dir=self.workflows_dir, prefix=f".{key}.", suffix=".tmp")

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)

            self._perform_atomic_save(file_path, temp_path)

            logger.info(f"Saved workflow '{workflow.name}' to {file_path}")
            return record

        except WorkflowExistsError:
            raise
        except Exception as e:
            Path(temp_path).unlink(missing_ok=True)
            raise WorkflowValidationError(f"Failed to save workflow: {e}") from e

    def load(self, name: str) -> dict[str, Any]:
        """Load a stored record by name or key.

        Raises:
            WorkflowNotFoundError: If workflow doesn't exist
        """
        file_path = self.workflows_dir / f"{slugify(name)}.json"

        if not file_path.exists():
            raise WorkflowNotFoundError(f"Workflow '{name}' not found")

        try:
            with open(file_path, encoding="utf-8") as f:
                record = json.load(f)

            logger.debug(f"Loaded workflow '{name}' from {file_path}")
            return record  # type: ignore[no-any-return]

        except json.JSONDecodeError as e:
            raise WorkflowValidationError(f"Invalid JSON in workflow '{name}': {e}") from e

    def load_workflow(self, name: str) -> Workflow:
        """Load just the workflow payload as a model."""
        return Workflow.model_validate(self.load(name)["workflow"])

    def get_path(self, name: str) -> str:
        return str((self.workflows_dir / f"{slugify(name)}.json").resolve())

    def list_all(self) -> list[dict[str, Any]]:
        """List every readable workflow record, sorted by name."""
        workflows = []

        for file_path in self.workflows_dir.glob("*.json"):
            try:
                with open(file_path, encoding="utf-8") as f:
                    workflows.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load workflow from {file_path}: {e}")
                continue

        workflows.sort(key=lambda w: w.get("name", ""))
        return workflows

    def exists(self, name: str) -> bool:
        key = slugify(name)
        return bool(key) and (self.workflows_dir / f"{key}.json").exists()

    def delete(self, name: str) -> None:
        """Delete a workflow.

        Raises:
            WorkflowNotFoundError: If workflow doesn't exist
        """
        file_path = self.workflows_dir / f"{slugify(name)}.json"

        if not file_path.exists():
            raise WorkflowNotFoundError(f"Workflow '{name}' not found")

        try:
            file_path.unlink()
            logger.info(f"Deleted workflow '{name}'")
        except OSError as e:
            raise WorkflowValidationError(f"Failed to delete workflow '{name}': {e}") from e
