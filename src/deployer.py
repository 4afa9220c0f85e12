"""
Rolling image deployment for a Compute Engine managed instance group.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from clients import ComputeRestClient
from config import DeployerConfig
from groups import GroupManager
from models import DELETING, RECREATING, DeploymentResult, resource_name
from operations import OperationWaiter
from templates import APP_VERSION_KEY, TemplateManager, update_image

logger = logging.getLogger(__name__)


class ImageDeployer:
    """Deploys a new image version to one managed instance group."""

    def __init__(
        self,
        config: DeployerConfig,
        api: Optional[ComputeRestClient] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the deployer.

        Args:
            config: Validated deployment configuration
            api: Compute client; one is created for config.project_id if omitted
            sleep: Sleep function used by every polling loop
            clock: Monotonic clock used for the optional max wait
        """
        self.config = config
        self.api = api or ComputeRestClient(
            project_id=config.project_id, max_retries=config.max_retries
        )

        self.waiter = OperationWaiter(
            self.api,
            poll_interval=config.poll_interval,
            max_wait=config.max_wait,
            sleep=sleep,
            clock=clock,
        )
        self.templates = TemplateManager(self.api, self.waiter)
        self.groups = GroupManager(self.api, self.waiter)

    def run(self) -> DeploymentResult:
        """
        Execute the deployment.

        Stages run strictly in order: find zone, read base template, derive
        and register the new template, repoint the group, recreate instances.

        Returns:
            DeploymentResult describing what was done

        Raises:
            DeploymentError: If any stage fails; nothing is rolled back
        """
        cfg = self.config
        result = DeploymentResult(
            project_id=cfg.project_id,
            group=cfg.group,
            version=cfg.version,
            dry_run=cfg.dry_run,
            start_time=time.time(),
        )

        logger.info("=" * 70)
        logger.info("Managed Instance Group Image Deployment")
        logger.info("=" * 70)
        logger.info(f"Project: {cfg.project_id}")
        logger.info(f"Group: {cfg.group}")
        logger.info(f"Base template: {cfg.template}")
        logger.info(f"Image: {cfg.image} (version {cfg.version})")
        logger.info(f"Dry run: {cfg.dry_run}")
        logger.info(f"Poll interval: {cfg.poll_interval}s")
        if cfg.max_wait is not None:
            logger.info(f"Max wait per stage: {cfg.max_wait}s")
        logger.info(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        logger.info("=" * 70)

        result.zone = self.templates.find_group_zone(cfg.group)
        base = self.templates.get_template(cfg.template)
        new = update_image(base, cfg.version)
        result.template_name = new.name
        result.template_link = new.self_link

        if cfg.dry_run:
            self._log_dry_run(result, new.source_image)
        else:
            result.template_created = self.templates.insert_template(new)
            self.groups.set_template(cfg.group, result.zone, new.self_link)
            result.recreated = self.groups.recreate_all(cfg.group, result.zone)

        result.end_time = time.time()
        result.duration_seconds = result.end_time - result.start_time
        self._print_report(result)
        if not cfg.dry_run:
            logger.info(
                f"Successfully deployed '{cfg.version}' to {cfg.project_id}:{cfg.group}"
            )
        return result

    def _log_dry_run(self, result: DeploymentResult, image: str) -> None:
        instances = self.groups.list_managed_instances(
            result.group, result.zone, reject_actions=[RECREATING, DELETING]
        )
        logger.info(f"DRY RUN: Would create template {result.template_name}")
        logger.info(f"DRY RUN:   image: {image}")
        logger.info(f"DRY RUN:   {APP_VERSION_KEY}: {result.version}")
        logger.info(
            f"DRY RUN: Would set template of {result.group} ({result.zone}) "
            f"to {result.template_link}"
        )
        logger.info(f"DRY RUN: Would re-create {len(instances)} instance(s)")
        for inst in instances:
            logger.info(f"  {resource_name(inst)}")

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.0f}s"

    def _print_report(self, result: DeploymentResult):
        """Print a short summary of the deployment."""
        logger.info("")
        logger.info("=" * 70)
        logger.info("DEPLOYMENT REPORT")
        logger.info("=" * 70)
        logger.info(f"Version:          {result.version}")
        logger.info(f"Zone:             {result.zone}")
        logger.info(f"Template:         {result.template_name}")
        if not result.dry_run:
            created = "created" if result.template_created else "already existed"
            logger.info(f"Template status:  {created}")
            logger.info(f"Re-created:       {result.recreated} instance(s)")
        logger.info(
            f"Total duration:   {self._format_duration(result.duration_seconds or 0)}"
        )
        logger.info("=" * 70)
