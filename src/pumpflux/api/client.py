"""Blocking HTTP client for the PumpFlux REST API.

All calls go through one ``requests.Session``. Transport failures and
non-2xx responses are translated into ``ApiError`` (or a not-found subclass)
with a message the CLI can show as is.
"""

import logging
import time
from typing import Any, Optional

import requests
from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from pumpflux.core.exceptions import ApiError, NodeTypeNotFoundError, TemplateNotFoundError
from pumpflux.core.models import NodeTypeDefinition, TemplateDraft, Workflow, WorkflowTemplate
from pumpflux.core.settings import ApiSettings

logger = logging.getLogger(__name__)


class PumpfluxClient:
    """Typed access to the template, node-type and workflow endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        token: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
        retry_wait: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_wait = retry_wait
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(cls, settings: ApiSettings, session: Optional[requests.Session] = None) -> "PumpfluxClient":
        return cls(
            base_url=settings.base_url,
            token=settings.token,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            retry_wait=settings.retry_wait,
            session=session,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        body: Optional[dict[str, Any]] = None,
        not_found: Optional[type[ApiError]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            ApiError: On transport failure, non-2xx status or a non-JSON body
        """
        url = self._url(path)
        logger.debug(f"{method} {url}", extra={"params": params})
        try:
            response = self.session.request(method, url, params=params, json=body, timeout=self.timeout)
        except requests.Timeout as e:
            raise ApiError(
                f"Request to {url} timed out after {self.timeout} seconds. "
                f"Try again or raise the timeout with PUMPFLUX_TIMEOUT.",
                url=url,
                original_error=e,
            ) from e
        except requests.ConnectionError as e:
            raise ApiError(
                f"Could not connect to {url}. Please check the API URL is correct and the server is running.",
                url=url,
                original_error=e,
            ) from e
        except requests.RequestException as e:
            raise ApiError(f"HTTP request failed: {e}", url=url, original_error=e) from e

        if response.status_code == 404 and not_found is not None:
            raise not_found(f"Not found: {path}", status_code=404, url=url)
        if not 200 <= response.status_code < 300:
            raise ApiError(f"{method} {path} failed: {_error_message(response)}", status_code=response.status_code, url=url)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned invalid JSON", status_code=response.status_code, url=url) from e

    def _request_with_retry(self, method: str, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Like ``_request`` but retries transport errors and 5xx responses.

        Waits ``retry_wait`` seconds before the second attempt and doubles the
        wait after each further failure.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_wait),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=time.sleep,
            reraise=True,
        )
        return retrying(self._request, method, path, params=params)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def list_templates(self, params: Optional[dict[str, str]] = None) -> list[WorkflowTemplate]:
        """Fetch the template catalog.

        Args:
            params: Optional ``search``/``category``/``complexity``/``sort`` query

        Returns:
            Templates; an empty list when the server sends anything but an array
        """
        payload = self._request_with_retry("GET", "/api/workflow/templates", params=params or None)
        if not isinstance(payload, list):
            logger.warning(f"Expected a list of templates, got {type(payload).__name__}; treating as empty")
            return []

        templates = []
        for item in payload:
            try:
                templates.append(WorkflowTemplate.model_validate(item))
            except ValueError as e:
                logger.warning(f"Skipping malformed template entry: {e}")
        return templates

    def get_template(self, template_id: int) -> WorkflowTemplate:
        payload = self._request("GET", f"/api/workflow/templates/{template_id}", not_found=TemplateNotFoundError)
        try:
            return WorkflowTemplate.model_validate(payload)
        except ValueError as e:
            raise ApiError(f"Template {template_id} has an unexpected shape: {e}") from e

    def create_template(self, draft: TemplateDraft) -> WorkflowTemplate:
        """Publish a new template; returns the stored template with its id."""
        payload = self._request("POST", "/api/workflow/templates", body=draft.to_api())
        try:
            return WorkflowTemplate.model_validate(payload)
        except ValueError as e:
            raise ApiError(f"Created template has an unexpected shape: {e}") from e

    # ------------------------------------------------------------------
    # Node types
    # ------------------------------------------------------------------

    def list_node_types(self) -> list[NodeTypeDefinition]:
        payload = self._request("GET", "/api/workflow/node-types")
        if not isinstance(payload, list):
            logger.warning(f"Expected a list of node types, got {type(payload).__name__}; treating as empty")
            return []

        definitions = []
        for item in payload:
            try:
                definitions.append(NodeTypeDefinition.model_validate(item))
            except ValueError as e:
                logger.warning(f"Skipping malformed node type entry: {e}")
        return definitions

    def get_node_type(self, node_type_id: int) -> NodeTypeDefinition:
        payload = self._request("GET", f"/api/workflow/node-types/{node_type_id}", not_found=NodeTypeNotFoundError)
        return _node_type(payload)

    def get_node_type_by_name(self, name: str) -> NodeTypeDefinition:
        payload = self._request(
            "GET", f"/api/workflow/node-types/by-name/{name}", not_found=NodeTypeNotFoundError
        )
        return _node_type(payload)

    def get_node_type_by_node_id(self, node_id: str) -> NodeTypeDefinition:
        """Definition attached to a specific workflow node."""
        payload = self._request("GET", f"/api/node-types/by-node-id/{node_id}", not_found=NodeTypeNotFoundError)
        return _node_type(payload)

    def create_node_type(self, definition: NodeTypeDefinition) -> NodeTypeDefinition:
        body = definition.to_api()
        body.pop("id", None)
        payload = self._request("POST", "/api/node-types", body=body)
        return _node_type(payload)

    def update_node_type(self, node_type_id: int, definition: NodeTypeDefinition) -> NodeTypeDefinition:
        payload = self._request(
            "PUT", f"/api/node-types/{node_type_id}", body=definition.to_api(), not_found=NodeTypeNotFoundError
        )
        return _node_type(payload)

    def delete_node_type(self, node_type_id: int) -> None:
        self._request("DELETE", f"/api/node-types/{node_type_id}", not_found=NodeTypeNotFoundError)

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    def create_workflow(self, workflow: Workflow) -> dict[str, Any]:
        """Persist a new workflow; returns the server's record."""
        body = workflow.to_api()
        body.pop("id", None)
        payload = self._request("POST", "/api/workflows", body=body)
        return payload if isinstance(payload, dict) else {}


def _node_type(payload: Any) -> NodeTypeDefinition:
    try:
        return NodeTypeDefinition.model_validate(payload)
    except ValueError as e:
        raise ApiError(f"Node type has an unexpected shape: {e}") from e


def _is_retryable(error: BaseException) -> bool:
    """Transport failures (no status) and server errors are worth another try."""
    return isinstance(error, ApiError) and (error.status_code is None or error.status_code >= 500)


def _error_message(response: requests.Response) -> str:
    """Best-effort error text from an API error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason or "unknown error"
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)
