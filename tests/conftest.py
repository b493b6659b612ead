"""
Pytest configuration and fixtures for botpublish tests.

Provides:
- Temporary publish root and runtime template
- A controllable stub deployer
- A publish coordinator wired to both
- Test client for API testing
- Factory fixtures for profiles and projects
"""

import asyncio
import json
import uuid
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from botpublish.main import app
from botpublish.schemas.publish import BotFile, BotProject, PublishProfile
from botpublish.services.deployers import BaseDeployer
from botpublish.services.history_store import HistoryStore
from botpublish.services.publisher import PublishCoordinator, get_publisher
from botpublish.services.staging import StagingWorkspace


class StubDeployer(BaseDeployer):
    """
    Deployer whose outcome is controlled by the test.

    Each deploy waits on a gate so tests can observe the in-flight 202 state
    before letting the deploy finish.
    """

    provider_name = "stub"

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.error: Exception | None = None
        self.gate = asyncio.Event()
        self.gate.set()

    def hold(self) -> None:
        """Block deploys until release() is called."""
        self.gate.clear()

    def release(self) -> None:
        self.gate.set()

    async def deploy(self, project_path, *, logger, **kwargs) -> None:
        self.calls.append({"project_path": project_path, **kwargs})
        logger("Deploying stub")
        logger({"step": "upload", "ok": self.error is None})
        await self.gate.wait()
        if self.error is not None:
            raise self.error


@pytest.fixture
def runtime_dir(tmp_path: Path) -> Path:
    """Minimal runtime template with a deployment settings file."""
    runtime = tmp_path / "runtime"
    runtime.mkdir()
    (runtime / "Program.cs").write_text("// runtime entrypoint")
    (runtime / "appsettings.deployment.json").write_text(
        json.dumps({"bot": "runtime", "MicrosoftAppId": ""}, indent=4)
    )
    return runtime


@pytest.fixture
def workspace(tmp_path: Path) -> StagingWorkspace:
    return StagingWorkspace(tmp_path / "publishBots", "ComposerDialogs")


@pytest.fixture
def deployer() -> StubDeployer:
    return StubDeployer()


@pytest.fixture
def deployer_factory():
    """Factory for additional stub deployers."""
    return StubDeployer


@pytest.fixture
def publisher(deployer: StubDeployer, workspace: StagingWorkspace, runtime_dir: Path) -> PublishCoordinator:
    return PublishCoordinator(
        deployer=deployer,
        workspace=workspace,
        history=HistoryStore(),
        default_template_path=runtime_dir,
    )


@pytest.fixture
def profile_factory():
    """Factory for publishing profiles."""

    def _create_profile(
        name: str = "production",
        access_token: str | None = "test-token",
        provision: dict | None = None,
        **overrides,
    ) -> PublishProfile:
        if provision is None:
            provision = {"MicrosoftAppId": "app-id", "MicrosoftAppPassword": "app-password"}
        data = {
            "name": name,
            "settings": {"feature": {"useLUIS": False}},
            "subscription_id": "00000000-0000-0000-0000-000000000001",
            "publish_name": "mybot",
            "environment": "dev",
            "location": "westus",
            "provision": provision,
            "access_token": access_token,
        }
        data.update(overrides)
        return PublishProfile(**data)

    return _create_profile


@pytest.fixture
def project_factory():
    """Factory for bot projects."""

    def _create_project(
        bot_id: str | None = None,
        name: str = "mybot",
        files: list[BotFile] | None = None,
        settings: dict | None = None,
    ) -> BotProject:
        if bot_id is None:
            bot_id = f"bot-{uuid.uuid4().hex[:8]}"
        if files is None:
            files = [
                BotFile(relative_path="mybot.dialog", content='{"$kind": "Microsoft.AdaptiveDialog"}'),
                BotFile(relative_path="language-generation/en-us/common.lg", content="# Greeting\n- Hi"),
            ]
        return BotProject(id=bot_id, name=name, files=files, settings=settings or {})

    return _create_project


@pytest_asyncio.fixture
async def client(publisher: PublishCoordinator) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with the publisher override."""
    app.dependency_overrides[get_publisher] = lambda: publisher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await publisher.wait_for_pending()
    app.dependency_overrides.clear()
