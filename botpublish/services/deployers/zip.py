"""Zip deploy provider - pushes the staged project to an App Service Kudu endpoint."""

import asyncio
import io
import zipfile
from pathlib import Path

import httpx

from botpublish.core.exceptions import DeploymentError
from botpublish.core.logging import get_logger

from .base import BaseDeployer, DeployLogger

logger = get_logger(__name__)


def build_zip(project_path: Path, exclude_dirs: list[str] | None = None) -> bytes:
    """Zip a project folder in memory, skipping excluded top-level directories."""
    excluded = set(exclude_dirs or [])
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for path in sorted(project_path.rglob("*")):
            relative = path.relative_to(project_path)
            if not path.is_file() or relative.parts[0] in excluded:
                continue
            archive.write(path, relative.as_posix())
    return buffer.getvalue()


class ZipDeployer(BaseDeployer):
    """Deploy by uploading a zip of the staged project."""

    provider_name = "zip"

    def __init__(
        self,
        url_template: str = "https://{publish_name}-{environment}.scm.azurewebsites.net/api/zipdeploy",
        timeout_seconds: float = 600.0,
        exclude_dirs: list[str] | None = None,
    ) -> None:
        """
        Initialize the zip deployer.

        Args:
            url_template: Deploy endpoint, formatted with publish_name and environment
            timeout_seconds: HTTP timeout for the upload
            exclude_dirs: Top-level project directories left out of the archive
        """
        self.url_template = url_template
        self.timeout = timeout_seconds
        self.exclude_dirs = exclude_dirs if exclude_dirs is not None else ["bin", "obj", ".git"]

    def deploy_url(self, publish_name: str, environment: str) -> str:
        return self.url_template.format(publish_name=publish_name, environment=environment)

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
        url = self.deploy_url(publish_name, environment)

        logger("Packing up the bot service ...")
        archive = await asyncio.to_thread(build_zip, project_path, self.exclude_dirs)
        logger(f"Packed {len(archive)} bytes")

        logger(f"Publishing to {url} ...")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    content=archive,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Content-Type": "application/zip",
                    },
                )
        except httpx.TimeoutException as e:
            raise DeploymentError(f"Deployment timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise DeploymentError(f"Deployment request failed: {e}") from e

        if response.status_code >= 400:
            logger({"status": response.status_code, "body": response.text[:2000]})
            raise DeploymentError(
                f"Deployment endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        logger("Publish To Azure Success!")
        _log_deploy(subscription_id, publish_name, environment, response.status_code)


def _log_deploy(subscription_id: str, publish_name: str, environment: str, status: int) -> None:
    logger.bind(
        subscription_id=subscription_id,
        publish_name=publish_name,
        environment=environment,
        status=status,
    ).info("zip_deploy_completed")
