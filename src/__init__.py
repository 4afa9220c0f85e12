"""
Managed Instance Group Image Deployer.
"""

from clients import ComputeRestClient
from config import DeployerConfig
from deployer import ImageDeployer
from log_utils import setup_logging
from models import DeploymentResult, InstanceTemplate, ManagedInstance, Operation
from operations import OperationWaiter
from templates import get_hash, update_image

__all__ = [
    "ComputeRestClient",
    "DeployerConfig",
    "ImageDeployer",
    "setup_logging",
    "DeploymentResult",
    "InstanceTemplate",
    "ManagedInstance",
    "Operation",
    "OperationWaiter",
    "get_hash",
    "update_image",
]
