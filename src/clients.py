"""
REST API client for Compute Engine (v1 API).
"""

import logging
import time
from typing import Dict, List, Optional

import google.auth
import google.auth.exceptions
import requests
from google.auth.transport.requests import AuthorizedSession

from errors import ComputeApiError, ConflictError, NotFoundError
from models import InstanceTemplate, ManagedInstance, Operation

logger = logging.getLogger(__name__)

API_BASE = "https://compute.googleapis.com/compute/v1"


class ComputeRestClient:
    """REST client for the Compute Engine v1 API, scoped to one project."""

    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    def __init__(
        self,
        project_id: str,
        timeout_s: int = 60,
        max_retries: int = 0,
        base_delay: float = 2.0,
    ):
        """
        Initialize the Compute REST client.

        Args:
            project_id: GCP project ID every request is scoped to
            timeout_s: Request timeout in seconds
            max_retries: Retries for throttling/server errors (0 disables retries)
            base_delay: Base delay for exponential backoff
        """
        self.project_id = project_id
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.base_delay = base_delay

        try:
            creds, _ = google.auth.default(
                scopes=["https://www.googleapis.com/auth/cloud-platform"]
            )
        except google.auth.exceptions.DefaultCredentialsError as e:
            raise ComputeApiError(None, f"Cannot load Google credentials: {e}") from e
        self.session = AuthorizedSession(creds)

    def _url(self, path: str) -> str:
        """Construct full API URL from a project-relative path."""
        return f"{API_BASE}/projects/{self.project_id}/{path.lstrip('/')}"

    def _request_with_retry(self, method: str, url: str, **kwargs) -> dict:
        """
        Execute an HTTP request, retrying throttling and server errors.

        Args:
            method: HTTP method (GET, POST)
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
            Dictionary with 'response' and 'status_code' keys

        Raises:
            ComputeApiError: If the request could not be sent after all attempts
        """
        for attempt in range(self.max_retries + 1):
            last_attempt = attempt == self.max_retries
            try:
                if method.upper() == "GET":
                    resp = self.session.get(url, timeout=self.timeout_s, **kwargs)
                elif method.upper() == "POST":
                    resp = self.session.post(url, timeout=self.timeout_s, **kwargs)
                else:
                    raise ValueError(f"Unsupported method: {method}")
            except requests.exceptions.RequestException as e:
                if last_attempt:
                    raise ComputeApiError(None, str(e)) from e
                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"Request error: {e}, attempt {attempt + 1}/{self.max_retries + 1}, waiting {delay:.1f}s..."
                )
                time.sleep(delay)
                continue

            if resp.status_code in self.RETRYABLE_STATUS_CODES and not last_attempt:
                delay = self._calculate_delay(attempt, resp)
                logger.warning(
                    f"Retryable error {resp.status_code} ({_error_message(resp)}), attempt {attempt + 1}/{self.max_retries + 1}, waiting {delay:.1f}s..."
                )
                time.sleep(delay)
                continue

            return {"response": resp, "status_code": resp.status_code}

        raise ComputeApiError(None, f"No attempt made for {method} {url}")

    def _calculate_delay(self, attempt: int, resp=None) -> float:
        """
        Calculate delay with exponential backoff and jitter.

        Args:
            attempt: Current attempt number
            resp: Optional response object (to check Retry-After header)

        Returns:
            Delay in seconds
        """
        if resp is not None and "Retry-After" in resp.headers:
            try:
                return float(resp.headers["Retry-After"])
            except ValueError:
                pass

        delay = self.base_delay * (2**attempt)
        jitter = delay * 0.2 * (0.5 - time.time() % 1)
        return min(delay + jitter, 60.0)

    def _call(self, method: str, path: str, action: str, **kwargs) -> Dict:
        """Send a request and return the decoded JSON body, mapping HTTP errors."""
        result = self._request_with_retry(method, self._url(path), **kwargs)
        resp = result["response"]
        _raise_for_status(resp, action)
        try:
            return resp.json()
        except ValueError as e:
            raise ComputeApiError(
                resp.status_code, f"{action} returned a non-JSON body: {resp.text[:200]}"
            ) from e

    # Instance templates

    def get_instance_template(self, name: str) -> InstanceTemplate:
        """
        Get a global instance template.

        Raises:
            NotFoundError: If the template does not exist
            ComputeApiError: If API call fails
        """
        data = self._call(
            "GET", f"global/instanceTemplates/{name}", f"Get instance template {name}"
        )
        return InstanceTemplate.from_api(data)

    def insert_instance_template(self, template: InstanceTemplate) -> Operation:
        """
        Create a global instance template.

        Raises:
            ConflictError: If a template with that name already exists
            ComputeApiError: If API call fails
        """
        data = self._call(
            "POST",
            "global/instanceTemplates",
            f"Insert instance template {template.name}",
            json=template.to_api(),
        )
        return Operation.from_api(data)

    # Zones and groups

    def list_zones(self) -> List[str]:
        """List the names of all zones visible to the project, across pages."""
        zones: List[str] = []
        page_token: Optional[str] = None

        while True:
            params = {}
            if page_token:
                params["pageToken"] = page_token

            data = self._call("GET", "zones", "List zones", params=params)
            zones.extend(item["name"] for item in data.get("items", []))

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return zones

    def get_instance_group(self, zone: str, group: str) -> Dict:
        """
        Get an instance group in a zone.

        Raises:
            NotFoundError: If the group does not exist in that zone
            ComputeApiError: If API call fails
        """
        return self._call(
            "GET",
            f"zones/{zone}/instanceGroups/{group}",
            f"Get instance group {group} in {zone}",
        )

    def set_instance_template(
        self, zone: str, group: str, template_link: str
    ) -> Operation:
        """Point a managed instance group at another instance template."""
        data = self._call(
            "POST",
            f"zones/{zone}/instanceGroupManagers/{group}/setInstanceTemplate",
            f"Set instance template of {group}",
            json={"instanceTemplate": template_link},
        )
        return Operation.from_api(data)

    def list_managed_instances(self, zone: str, group: str) -> List[ManagedInstance]:
        """List the members of a managed instance group, across pages."""
        instances: List[ManagedInstance] = []
        page_token: Optional[str] = None

        while True:
            params = {}
            if page_token:
                params["pageToken"] = page_token

            data = self._call(
                "POST",
                f"zones/{zone}/instanceGroupManagers/{group}/listManagedInstances",
                f"List managed instances of {group}",
                params=params,
            )
            instances.extend(
                ManagedInstance.from_api(item)
                for item in data.get("managedInstances", [])
            )

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        return instances

    def recreate_instances(
        self, zone: str, group: str, instances: List[str]
    ) -> Operation:
        """Ask the group manager to recreate the given instance URLs."""
        data = self._call(
            "POST",
            f"zones/{zone}/instanceGroupManagers/{group}/recreateInstances",
            f"Recreate instances of {group}",
            json={"instances": instances},
        )
        return Operation.from_api(data)

    # Operations

    def get_zone_operation(self, zone: str, name: str) -> Operation:
        data = self._call(
            "GET", f"zones/{zone}/operations/{name}", f"Get operation {name}"
        )
        return Operation.from_api(data)

    def get_region_operation(self, region: str, name: str) -> Operation:
        data = self._call(
            "GET", f"regions/{region}/operations/{name}", f"Get operation {name}"
        )
        return Operation.from_api(data)

    def get_global_operation(self, name: str) -> Operation:
        data = self._call("GET", f"global/operations/{name}", f"Get operation {name}")
        return Operation.from_api(data)


def _error_message(resp) -> str:
    """Extract the API error message from a response, falling back to raw text."""
    try:
        message = resp.json().get("error", {}).get("message", "")
    except ValueError:
        message = ""
    return message or resp.text[:200]


def _raise_for_status(resp, action: str) -> None:
    """Map a non-2xx response to the matching ComputeApiError subclass."""
    code = resp.status_code
    if 200 <= code < 300:
        return
    message = f"{action} failed: {_error_message(resp)}"
    if code == 404:
        raise NotFoundError(code, message)
    if code == 409:
        raise ConflictError(code, message)
    raise ComputeApiError(code, message)
