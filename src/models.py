"""
Data models for the Instance Group Image Deployer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DONE = "DONE"
RUNNING = "RUNNING"

# Managed instance actions that mean the instance is already changing state
RECREATING = "RECREATING"
DELETING = "DELETING"


def resource_name(link: Optional[str]) -> str:
    """Reduce a resource URL such as .../zones/europe-west1-b to its last segment."""
    if not link:
        return ""
    return link.rstrip("/").split("/")[-1]


@dataclass
class InstanceTemplate:
    """Global instance template as returned by the Compute API."""

    name: str
    self_link: str
    properties: Dict[str, Any] = field(default_factory=dict)
    description: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "InstanceTemplate":
        return cls(
            name=data["name"],
            self_link=data.get("selfLink", ""),
            properties=data.get("properties", {}),
            description=data.get("description", ""),
        )

    def to_api(self) -> Dict[str, Any]:
        """Request body for instanceTemplates.insert (output-only fields omitted)."""
        body: Dict[str, Any] = {"name": self.name, "properties": self.properties}
        if self.description:
            body["description"] = self.description
        return body

    @property
    def source_image(self) -> str:
        """Image source of the first disk, or "" when there is none."""
        disks = self.properties.get("disks") or []
        if not disks:
            return ""
        return disks[0].get("initializeParams", {}).get("sourceImage", "")

    def metadata_value(self, key: str) -> Optional[str]:
        items = self.properties.get("metadata", {}).get("items", [])
        for item in items:
            if item.get("key") == key:
                return item.get("value")
        return None


@dataclass
class Operation:
    """Compute Engine long-running operation."""

    name: str
    status: str
    zone: str = ""
    region: str = ""
    progress: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    operation_type: str = ""
    target_link: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Operation":
        return cls(
            name=data["name"],
            status=data.get("status", ""),
            zone=resource_name(data.get("zone")),
            region=resource_name(data.get("region")),
            progress=data.get("progress", 0),
            errors=(data.get("error") or {}).get("errors", []),
            operation_type=data.get("operationType", ""),
            target_link=data.get("targetLink", ""),
        )

    @property
    def scope(self) -> str:
        """One of "zone", "region" or "global"."""
        if self.zone:
            return "zone"
        if self.region:
            return "region"
        return "global"

    @property
    def done(self) -> bool:
        return self.status == DONE

    @property
    def failed(self) -> bool:
        return len(self.errors) > 0


@dataclass
class ManagedInstance:
    """Snapshot of a managed instance group member."""

    instance: str  # full instance URL
    instance_status: str
    current_action: str = "NONE"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ManagedInstance":
        return cls(
            instance=data.get("instance", ""),
            instance_status=data.get("instanceStatus", ""),
            current_action=data.get("currentAction", "NONE"),
        )

    @property
    def short_name(self) -> str:
        return resource_name(self.instance)


@dataclass
class DeploymentResult:
    """Outcome of a deployment run, used for the final report."""

    project_id: str
    group: str
    version: str
    zone: str = ""
    template_name: str = ""
    template_link: str = ""
    template_created: bool = False
    recreated: int = 0
    dry_run: bool = False
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    duration_seconds: Optional[float] = None
