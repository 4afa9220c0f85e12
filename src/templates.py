"""
Instance template handling: version tokens, template lookup, mutation and
registration.

A version token is the trailing ``-`` separated segment of a resource name,
e.g. ``abc123`` in ``myapp-abc123``. Deploying a new image means creating a
new template whose name, self link and image source carry the new token.
"""

import copy
import logging
from typing import List

from errors import (
    ComputeDisabledError,
    ConflictError,
    GroupNotFoundError,
    InvalidTemplateError,
    NotFoundError,
)
from models import InstanceTemplate
from operations import OperationWaiter

logger = logging.getLogger(__name__)

APP_VERSION_KEY = "app_version"


def get_hash(name: str) -> str:
    """Return the substring after the last "-" of name, or "" without one."""
    i = name.rfind("-")
    if i < 0:
        return ""
    return name[i + 1 :]


def replace_hash(value: str, new_hash: str) -> str:
    """Replace the trailing version token of value; values without "-" are kept."""
    i = value.rfind("-")
    if i < 0:
        return value
    return value[: i + 1] + new_hash


def update_image(old: InstanceTemplate, new_hash: str) -> InstanceTemplate:
    """
    Build the template for a new version from an existing one.

    The name, self link and first disk image source get their version token
    replaced by new_hash, and the app_version metadata item is set to
    new_hash. Properties are deep-copied so the old template is left intact.

    Args:
        old: Template to derive from
        new_hash: Version token to deploy

    Returns:
        New, not yet registered, InstanceTemplate

    Raises:
        InvalidTemplateError: If old has no version token or no disk image
    """
    if not get_hash(old.name):
        raise InvalidTemplateError(
            f"template name {old.name!r} does not end in a version token"
        )

    properties = copy.deepcopy(old.properties)
    disks = properties.get("disks") or []
    params = disks[0].get("initializeParams", {}) if disks else {}
    if not params.get("sourceImage"):
        raise InvalidTemplateError(
            f"template {old.name!r} has no source image on its first disk"
        )
    params["sourceImage"] = replace_hash(params["sourceImage"], new_hash)

    for item in properties.get("metadata", {}).get("items", []):
        if item.get("key") == APP_VERSION_KEY:
            item["value"] = new_hash

    return InstanceTemplate(
        name=replace_hash(old.name, new_hash),
        self_link=replace_hash(old.self_link, new_hash),
        properties=properties,
        description=old.description,
    )


class TemplateManager:
    """Looks up templates and groups and registers new templates."""

    def __init__(self, api, waiter: OperationWaiter):
        self.api = api
        self.waiter = waiter

    def get_template(self, name: str) -> InstanceTemplate:
        """Fetch the base template; a missing template is not auto-created."""
        template = self.api.get_instance_template(name)
        logger.debug(
            f"Template {template.name}: image={template.source_image}, "
            f"{APP_VERSION_KEY}={template.metadata_value(APP_VERSION_KEY)}"
        )
        return template

    def find_group_zone(self, group: str) -> str:
        """
        Find the zone hosting an instance group.

        Raises:
            ComputeDisabledError: If the project has no zones
            GroupNotFoundError: If no zone hosts the group
            ComputeApiError: If a lookup fails for another reason
        """
        zones: List[str] = self.api.list_zones()
        if not zones:
            raise ComputeDisabledError(
                f"compute engine not enabled for project {self.api.project_id!r}"
            )

        for zone in zones:
            try:
                found = self.api.get_instance_group(zone, group)
            except NotFoundError:
                continue
            if found.get("name") == group:
                logger.info(f"Found group '{group}' in {zone}")
                return zone

        raise GroupNotFoundError(
            f"group {group!r} of project {self.api.project_id!r} not found in "
            f"{', '.join(zones)}"
        )

    def insert_template(self, template: InstanceTemplate) -> bool:
        """
        Register a template, treating "already exists" as success.

        Returns:
            True if the template was created, False if it already existed
        """
        try:
            op = self.api.insert_instance_template(template)
        except ConflictError:
            logger.info(f"template '{template.name}' already exists, NOT adding it again")
            return False

        logger.info(f"Creating template '{template.name}' (op={op.name})")
        self.waiter.wait(op, "creating template")
        return True
