"""
Exceptions raised by the Instance Group Image Deployer.
"""

import json
from typing import Dict, List, Optional


class DeploymentError(Exception):
    """Base class for every failure of a deployment step."""


class ComputeApiError(DeploymentError):
    """A Compute Engine API request failed before an operation was created."""

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        prefix = f"HTTP {status_code}" if status_code is not None else "Request error"
        super().__init__(f"{prefix}: {message}")


class NotFoundError(ComputeApiError):
    """The requested resource does not exist (HTTP 404)."""


class ConflictError(ComputeApiError):
    """The resource already exists (HTTP 409)."""


class OperationError(DeploymentError):
    """An accepted operation finished with one or more recorded errors."""

    def __init__(self, operation: str, phase: str, errors: List[Dict]):
        self.operation = operation
        self.phase = phase
        self.errors = errors
        payload = json.dumps({"errors": errors}, indent=2)
        super().__init__(f"{phase}: operation {operation} failed:\n{payload}")


class OperationTimeoutError(DeploymentError):
    """A bounded wait gave up before the remote work finished."""


class ComputeDisabledError(DeploymentError):
    """The project has no zones, so the Compute Engine API is not enabled."""


class GroupNotFoundError(DeploymentError):
    """No zone of the project hosts the requested instance group."""


class InvalidTemplateError(DeploymentError):
    """The base template cannot be turned into a versioned template."""
