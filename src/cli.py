"""Console entry point for the Instance Group Image Deployer CLI."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List

from config import ConfigError, DeployerConfig
from deployer import ImageDeployer
from errors import DeploymentError
from log_utils import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description=(
            "Roll a new machine image out to a Compute Engine managed instance group.\n\n"
            "A new instance template is derived from the -defaults template by swapping\n"
            "the version token, the group is pointed at it and every running instance\n"
            "is recreated."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Example:\n"
            "  igm-deploy -project my-project -template app-web-defaults \\\n"
            "      -image myapp-abc123 -group web-group"
        ),
    )
    parser.add_argument(
        "-project", "--project", default="", help="project which we talk about"
    )
    parser.add_argument(
        "-template",
        "--template",
        default="",
        help="Template where we take our defaults from (must end in -defaults)",
    )
    parser.add_argument(
        "-image",
        "--image",
        default="",
        help="System image to which we want to update (e.g. myapp-abc123)",
    )
    parser.add_argument(
        "-group", "--group", default="", help="instance group which we want to update"
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=1.0,
        metavar="SECONDS",
        help="Time between operation and instance status checks (default: 1.0)",
    )
    parser.add_argument(
        "--max-wait",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Give up waiting on a stage after this long (default: wait forever)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=0,
        metavar="N",
        help=(
            "Retry throttled (429) and server (5xx) API errors up to N times with "
            "exponential backoff (default: 0, fail on the first error)"
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and print the new template without changing anything",
    )
    parser.add_argument(
        "--log-file",
        default="instance-group-deploy.log",
        help="Log file path (default: instance-group-deploy.log)",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: List[str] | None = None) -> int:
    """CLI main for console_scripts entry point."""
    parser = build_parser()
    args = parser.parse_args(args=argv)

    config = DeployerConfig.from_args(args)
    try:
        config.validate()
    except ConfigError as e:
        print(e, file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 2

    setup_logging(verbose=config.verbose, log_file=config.log_file)

    try:
        ImageDeployer(config).run()
    except DeploymentError as e:
        logger.error(
            f"Deployment of '{config.version}' to "
            f"{config.project_id}:{config.group} failed: {e}"
        )
        return 1
    return 0
