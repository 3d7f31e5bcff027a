"""Custom exceptions for pumpflux."""

from typing import Optional


class PumpfluxError(Exception):
    """Base exception for all pumpflux errors."""

    pass


class ApiError(PumpfluxError):
    """Error talking to the PumpFlux REST API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.url = url
        self.original_error = original_error

        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        if original_error:
            message = f"{message}\nOriginal error: {original_error!s}"

        super().__init__(message)


class TemplateNotFoundError(ApiError):
    """Raised when a workflow template does not exist on the server."""

    pass


class NodeTypeNotFoundError(ApiError):
    """Raised when a node-type definition does not exist on the server."""

    pass


class TemplateDataError(PumpfluxError):
    """Raised when a template's stored node/edge data cannot be parsed."""

    def __init__(self, message: str, template_id: Optional[int] = None):
        self.template_id = template_id
        if template_id is not None:
            message = f"Template {template_id}: {message}"
        super().__init__(message)


class CredentialsIncompleteError(PumpfluxError):
    """Raised when saving a workflow while placeholders are still unfilled."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing credential values: {', '.join(missing)}")


class WorkflowExistsError(PumpfluxError):
    """Raised when attempting to save a workflow that already exists."""

    pass


class WorkflowNotFoundError(PumpfluxError):
    """Raised when a workflow cannot be found."""

    pass


class WorkflowValidationError(PumpfluxError):
    """Raised when workflow validation fails."""

    pass


class WizardStateError(PumpfluxError):
    """Raised when a wizard action is not allowed in the current state."""

    pass
