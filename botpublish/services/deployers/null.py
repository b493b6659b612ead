"""Null deployer - succeeds without contacting any cloud service."""

from pathlib import Path

from .base import BaseDeployer, DeployLogger


class NullDeployer(BaseDeployer):
    """
    Deployer that only reports what it would deploy.

    Use for local development or when no deployment target is configured.
    """

    provider_name = "null"

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
        file_count = sum(1 for p in project_path.rglob("*") if p.is_file())
        logger(f"Deploying {file_count} files from {project_path.name} to {publish_name}-{environment}")
        if luis_authoring_key:
            logger(f"LUIS authoring region: {luis_authoring_region or 'westus'}")
        logger("Deployment skipped (null deployer)")
