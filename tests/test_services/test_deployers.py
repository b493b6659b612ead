"""Tests for deployment providers."""

import io
import zipfile
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from botpublish.core.exceptions import DeploymentError
from botpublish.services.deployers import NullDeployer, ZipDeployer
from botpublish.services.deployers.zip import build_zip

pytestmark = pytest.mark.asyncio


@pytest.fixture
def project_dir(tmp_path):
    project = tmp_path / "project"
    (project / "ComposerDialogs").mkdir(parents=True)
    (project / "ComposerDialogs" / "mybot.dialog").write_text("{}")
    (project / "Program.cs").write_text("// runtime")
    (project / "bin").mkdir()
    (project / "bin" / "stale.dll").write_text("binary")
    return project


def _deploy_kwargs(log):
    return {
        "subscription_id": "sub",
        "access_token": "token",
        "publish_name": "mybot",
        "environment": "dev",
        "logger": log,
    }


class TestNullDeployer:
    """Tests for NullDeployer."""

    async def test_reports_and_succeeds(self, project_dir):
        messages = []

        await NullDeployer().deploy(project_dir, **_deploy_kwargs(messages.append))

        assert any("mybot-dev" in m for m in messages)


class TestZipDeployer:
    """Tests for ZipDeployer."""

    async def test_build_zip_skips_excluded_dirs(self, project_dir):
        archive = zipfile.ZipFile(io.BytesIO(build_zip(project_dir, ["bin"])))

        names = set(archive.namelist())
        assert names == {"ComposerDialogs/mybot.dialog", "Program.cs"}

    async def test_deploy_url(self):
        deployer = ZipDeployer()
        assert deployer.deploy_url("mybot", "dev") == "https://mybot-dev.scm.azurewebsites.net/api/zipdeploy"

    async def test_successful_upload(self, project_dir):
        messages = []
        post = AsyncMock(return_value=httpx.Response(200))

        with patch.object(httpx.AsyncClient, "post", post):
            await ZipDeployer().deploy(project_dir, **_deploy_kwargs(messages.append))

        post.assert_awaited_once()
        _, kwargs = post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer token"
        assert kwargs["headers"]["Content-Type"] == "application/zip"
        assert "Publish To Azure Success!" in messages

    async def test_error_status_raises(self, project_dir):
        messages = []
        post = AsyncMock(return_value=httpx.Response(409, text="Conflict"))

        with patch.object(httpx.AsyncClient, "post", post):
            with pytest.raises(DeploymentError) as exc_info:
                await ZipDeployer().deploy(project_dir, **_deploy_kwargs(messages.append))

        assert exc_info.value.status_code == 409
        assert {"status": 409, "body": "Conflict"} in messages

    async def test_timeout_raises(self, project_dir):
        post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with patch.object(httpx.AsyncClient, "post", post):
            with pytest.raises(DeploymentError, match="timed out"):
                await ZipDeployer(timeout_seconds=1).deploy(project_dir, **_deploy_kwargs(lambda m: None))

    async def test_transport_error_raises(self, project_dir):
        post = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with patch.object(httpx.AsyncClient, "post", post):
            with pytest.raises(DeploymentError, match="request failed"):
                await ZipDeployer().deploy(project_dir, **_deploy_kwargs(lambda m: None))
