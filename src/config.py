"""
Configuration management for the Instance Group Image Deployer.
"""

from dataclasses import dataclass
from typing import Optional

from templates import get_hash

TEMPLATE_SUFFIX = "-defaults"


class ConfigError(ValueError):
    """Raised when command-line settings are invalid."""


@dataclass
class DeployerConfig:
    """Configuration for a deployment run."""

    project_id: str
    template: str
    image: str
    group: str
    poll_interval: float = 1.0
    max_wait: Optional[float] = None
    max_retries: int = 0
    dry_run: bool = False
    verbose: bool = False
    log_file: Optional[str] = "instance-group-deploy.log"

    @property
    def version(self) -> str:
        """Version token carried by the target image name."""
        return get_hash(self.image)

    def validate(self) -> None:
        """
        Check the settings before anything talks to the API.

        Raises:
            ConfigError: On the first invalid setting
        """
        if not self.project_id:
            raise ConfigError("project name cannot be empty")
        if not self.template:
            raise ConfigError("template name cannot be empty")
        if not self.template.endswith(TEMPLATE_SUFFIX):
            raise ConfigError(f"template name must end in {TEMPLATE_SUFFIX}")
        if not self.image:
            raise ConfigError("image name cannot be empty")
        if not self.version:
            raise ConfigError("image name does not contain git hash")
        if not self.group:
            raise ConfigError("group name cannot be empty")
        if self.poll_interval <= 0:
            raise ConfigError("poll interval must be positive")
        if self.max_wait is not None and self.max_wait <= 0:
            raise ConfigError("max wait must be positive")
        if self.max_retries < 0:
            raise ConfigError("max retries cannot be negative")

    @classmethod
    def from_args(cls, args) -> "DeployerConfig":
        """
        Create configuration from command-line arguments.

        Args:
            args: Parsed argparse arguments

        Returns:
            DeployerConfig instance
        """
        return cls(
            project_id=args.project,
            template=args.template,
            image=args.image,
            group=args.group,
            poll_interval=args.poll_interval,
            max_wait=args.max_wait,
            max_retries=args.max_retries,
            dry_run=args.dry_run,
            verbose=args.verbose,
            log_file=args.log_file,
        )
