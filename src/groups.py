"""
Managed instance group updates: switching templates and rolling recreation.
"""

import logging
from typing import List, Optional, Sequence

from models import DELETING, RECREATING, RUNNING
from operations import OperationWaiter

logger = logging.getLogger(__name__)


class GroupManager:
    """Repoints a managed instance group and recreates its instances."""

    def __init__(self, api, waiter: OperationWaiter):
        self.api = api
        self.waiter = waiter

    def set_template(self, group: str, zone: str, template_link: str) -> None:
        """Point the group at template_link and wait for the change to apply."""
        op = self.api.set_instance_template(zone, group, template_link)
        logger.info(f"Setting template of '{group}' to {template_link} (op={op.name})")
        self.waiter.wait(op, "updating group")

    def list_managed_instances(
        self,
        group: str,
        zone: str,
        accept_actions: Optional[Sequence[str]] = None,
        reject_actions: Optional[Sequence[str]] = None,
        running_only: bool = True,
    ) -> List[str]:
        """
        List members of a group, filtered by status and current action.

        Args:
            group: Managed instance group name
            zone: Zone of the group
            accept_actions: If non-empty, keep only members in one of these actions
            reject_actions: Drop members in one of these actions
            running_only: Keep only members whose status is RUNNING

        Returns:
            Instance URLs of the matching members
        """
        accept = set(accept_actions or ())
        reject = set(reject_actions or ())

        instances: List[str] = []
        for member in self.api.list_managed_instances(zone, group):
            if running_only and member.instance_status != RUNNING:
                continue
            if member.current_action in reject:
                continue
            if accept and member.current_action not in accept:
                continue
            instances.append(member.instance)
        return instances

    def recreate_all(self, group: str, zone: str) -> int:
        """
        Recreate every running instance that is not already changing state.

        Waits until no member of the group is RECREATING any more, whatever
        its status; a recreated instance passes through STOPPING, STAGING etc.

        Returns:
            Number of instances recreated
        """
        instances = self.list_managed_instances(
            group, zone, reject_actions=[RECREATING, DELETING]
        )

        # Don't re-create empty pool members
        if not instances:
            logger.info(f"No running instances to re-create in '{group}'")
            return 0

        op = self.api.recreate_instances(zone, group, instances)
        logger.info(f"re-creating {len(instances)} instances")
        self.waiter.wait(op, "re-create instances")

        started = self.waiter.clock()
        polls = 0
        while True:
            busy = self.list_managed_instances(
                group, zone, accept_actions=[RECREATING], running_only=False
            )
            polls += 1
            if not busy:
                return len(instances)
            logger.info(f"{len(busy)}/{len(instances)} still re-creating...")
            self.waiter.check_bounds(started, polls, f"re-create instances in '{group}'")
            self.waiter.sleep(self.waiter.poll_interval)
