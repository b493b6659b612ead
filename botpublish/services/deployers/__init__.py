"""Deployment orchestrators with provider abstraction."""

from botpublish.config import get_config

from .base import BaseDeployer, DeployLogger
from .null import NullDeployer
from .zip import ZipDeployer

__all__ = [
    "BaseDeployer",
    "DeployLogger",
    "NullDeployer",
    "ZipDeployer",
    "get_deployer",
]


def get_deployer() -> BaseDeployer:
    """
    Build the configured deployer.

    Falls back to NullDeployer for unknown providers.
    """
    deploy = get_config().deploy

    if deploy.provider == "zip":
        return ZipDeployer(
            url_template=deploy.zip_deploy_url,
            timeout_seconds=deploy.timeout_seconds,
            exclude_dirs=deploy.exclude_dirs,
        )
    return NullDeployer()
