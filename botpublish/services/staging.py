"""
On-disk staging of a bot for deployment.

Each deploy attempt gets a project folder under the publish root named by its
resource key. The layout is:

    <publish_root>/<resource_key>/                      runtime code
    <publish_root>/<resource_key>/appsettings.deployment.json
    <publish_root>/<resource_key>/<bot_folder>/...      declarative assets
    <publish_root>/<resource_key>/<bot_folder>/settings/appsettings.json
"""

import json
import shutil
import uuid
from pathlib import Path
from typing import Any

from botpublish.config import get_settings
from botpublish.core.exceptions import StagingError
from botpublish.core.logging import get_logger
from botpublish.schemas.publish import BotFile, BotProject, PublishProfile

logger = get_logger(__name__)

DEPLOYMENT_SETTINGS_FILE = "appsettings.deployment.json"
BOT_SETTINGS_FILE = Path("settings") / "appsettings.json"


def derive_resource_key(project: BotProject, profile: PublishProfile) -> str:
    """
    Derive the staging key for one (project, profile, credentials) tuple.

    The subscription id scopes a UUID5 namespace and the full tuple is hashed
    inside it, so identical inputs map to the same key and any differing field
    (including credentials) maps to a different one.
    """
    provision = profile.provision or {}
    namespace = uuid.uuid5(uuid.NAMESPACE_URL, f"subscription:{profile.subscription_id}")
    parts = [
        project.name,
        profile.subscription_id,
        profile.publish_name,
        profile.location,
        profile.environment,
        provision.get("MicrosoftAppPassword"),
        profile.luis_authoring_key,
        profile.luis_authoring_region,
    ]
    # JSON keeps field boundaries and None distinct from ""
    return str(uuid.uuid5(namespace, json.dumps(parts)))


class StagingWorkspace:
    """Filesystem layout and operations for staged deploys."""

    def __init__(self, publish_root: str | Path | None = None, bot_folder_name: str | None = None):
        settings = get_settings()
        self.publish_root = Path(publish_root or settings.publish_root).resolve()
        self.bot_folder_name = bot_folder_name or settings.bot_folder_name

    def project_folder(self, resource_key: str) -> Path:
        return self.publish_root / resource_key

    def bot_folder(self, resource_key: str) -> Path:
        return self.project_folder(resource_key) / self.bot_folder_name

    def settings_path(self, resource_key: str) -> Path:
        return self.bot_folder(resource_key) / BOT_SETTINGS_FILE

    def deployment_settings_path(self, resource_key: str) -> Path:
        return self.project_folder(resource_key) / DEPLOYMENT_SETTINGS_FILE

    def stage(
        self,
        resource_key: str,
        files: list[BotFile],
        settings: dict[str, Any],
        runtime_path: str | Path,
    ) -> Path:
        """
        Materialize bot assets, settings and runtime code into a clean folder.

        Args:
            resource_key: Staging key from derive_resource_key
            files: Declarative bot assets
            settings: Bot settings written to the staged appsettings.json
            runtime_path: Runtime code copied into the project folder

        Returns:
            The staged project folder

        Raises:
            StagingError: If the runtime is missing or files cannot be written
        """
        project_folder = self.project_folder(resource_key)
        bot_folder = self.bot_folder(resource_key)
        runtime = Path(runtime_path)

        if not runtime.is_dir():
            raise StagingError(f"Runtime code not found at {runtime}")

        try:
            # Always start from an empty folder
            if project_folder.exists():
                shutil.rmtree(project_folder)
            bot_folder.mkdir(parents=True, exist_ok=True)

            for file in files:
                file_path = (bot_folder / file.relative_path).resolve()
                if not file_path.is_relative_to(bot_folder.resolve()):
                    raise StagingError(f"Bot file escapes the bot folder: {file.relative_path}")
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_path.write_text(file.content, encoding="utf-8")

            settings_path = self.settings_path(resource_key)
            settings_path.parent.mkdir(parents=True, exist_ok=True)
            settings_path.write_text(json.dumps(settings, indent=4), encoding="utf-8")

            shutil.copytree(runtime, project_folder, dirs_exist_ok=True)
        except OSError as e:
            raise StagingError(f"Failed to stage bot: {e}") from e

        logger.bind(
            resource_key=resource_key,
            files=len(files),
            runtime=str(runtime),
        ).debug("bot_staged")
        return project_folder

    def merge_deployment_settings(self, resource_key: str, provision: dict[str, Any]) -> dict[str, Any]:
        """Overlay provisioned resource metadata onto the deployment settings file."""
        path = self.deployment_settings_path(resource_key)
        current: dict[str, Any] = {}
        if path.exists():
            try:
                current = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise StagingError(f"Unreadable {DEPLOYMENT_SETTINGS_FILE}: {e}") from e

        merged = {**current, **provision}
        try:
            path.write_text(json.dumps(merged, indent=4), encoding="utf-8")
        except OSError as e:
            raise StagingError(f"Failed to write {DEPLOYMENT_SETTINGS_FILE}: {e}") from e
        return merged

    def cleanup(self, resource_key: str) -> None:
        """Remove a staged project folder; a missing folder is fine."""
        project_folder = self.project_folder(resource_key)
        try:
            shutil.rmtree(project_folder)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.bind(resource_key=resource_key, error=str(e)).warning("staging_cleanup_failed")
