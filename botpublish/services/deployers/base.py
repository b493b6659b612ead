"""Abstract base class for deployment orchestrators."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

# Progress callback; messages may be strings or structured payloads
DeployLogger = Callable[[Any], None]


class BaseDeployer(ABC):
    """Abstract base class for deployment providers."""

    provider_name: str = "unknown"

    @abstractmethod
    async def deploy(
        self,
        project_path: Path,
        *,
        subscription_id: str,
        access_token: str,
        publish_name: str,
        environment: str,
        luis_authoring_key: str | None = None,
        luis_authoring_region: str | None = None,
        logger: DeployLogger,
    ) -> None:
        """
        Deploy a staged bot project.

        Args:
            project_path: Staged project folder
            subscription_id: Cloud subscription hosting the provisioned resources
            access_token: Bearer token for the deployment endpoint
            publish_name: Base name of the provisioned resources
            environment: Environment suffix (e.g. "dev", "prod")
            luis_authoring_key: Optional LUIS authoring key
            luis_authoring_region: Optional LUIS authoring region
            logger: Callback receiving progress messages

        Raises:
            DeploymentError: If the deployment fails
        """
        pass
