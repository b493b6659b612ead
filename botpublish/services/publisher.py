"""
Publish coordinator.

Stages a bot, validates the profile, accepts a job and runs the deployment in
the background. Job state moves through the in-flight status table into the
history store:

    publish() -> 202 in JobStatusTable -> deploy task -> 200/500 in HistoryStore

Every path returns a status-coded JobRecord; no publish error reaches the
caller as an exception.
"""

import asyncio
import json
import uuid
from pathlib import Path
from typing import Any

from botpublish.config import get_config, get_settings
from botpublish.core.datetime_utils import utc_now
from botpublish.core.exceptions import PublishValidationError
from botpublish.core.logging import get_logger
from botpublish.schemas.publish import (
    STATUS_ACCEPTED,
    STATUS_FAILED,
    STATUS_NOT_FOUND,
    STATUS_SUCCESS,
    BotProject,
    HistoryEntry,
    JobRecord,
    PublishMetadata,
    PublishProfile,
    PublishResult,
)
from botpublish.services.deployers import BaseDeployer, get_deployer
from botpublish.services.history_store import HistoryStore
from botpublish.services.staging import StagingWorkspace, derive_resource_key
from botpublish.services.status_table import JobStatusTable

logger = get_logger(__name__)

MISSING_ACCESS_TOKEN = "Required field `accessToken` is missing from publishing profile."
MISSING_PROVISION = (
    "no successful created resource in Azure according to your config, "
    "please run provision script to do the provision"
)


class JobLog:
    """Accumulated progress messages for one deploy job."""

    def __init__(self, first: str | None = None) -> None:
        self._lines: list[str] = [first] if first else []

    def __call__(self, message: Any) -> None:
        if isinstance(message, str):
            self._lines.append(message)
        else:
            self._lines.append(json.dumps(message, indent=2, default=str))

    def text(self) -> str:
        return "\n".join(self._lines)


class PublishCoordinator:
    """Owns job status and history for one process."""

    def __init__(
        self,
        deployer: BaseDeployer,
        workspace: StagingWorkspace,
        history: HistoryStore | None = None,
        status_table: JobStatusTable | None = None,
        default_template_path: str | Path | None = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            deployer: Deployment orchestrator invoked once per job
            workspace: Staging area for bot assets and runtime code
            history: Terminal outcomes store (in-memory if omitted)
            status_table: In-flight jobs table (fresh if omitted)
            default_template_path: Runtime code used unless the project ejected its own
        """
        self.deployer = deployer
        self.workspace = workspace
        self.histories = history if history is not None else HistoryStore()
        self.publishing_bots = status_table if status_table is not None else JobStatusTable()
        self.default_template_path = default_template_path
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending_jobs(self) -> int:
        """Number of deploy tasks still running."""
        return len(self._tasks)

    async def publish(
        self,
        profile: PublishProfile,
        project: BotProject,
        metadata: PublishMetadata | None = None,
        user: Any = None,
    ) -> JobRecord:
        """
        Stage a bot and start an asynchronous deployment.

        Returns immediately with a 202 record for an accepted job, or a 500
        record if the profile cannot be published. The deployment outcome is
        recorded in history when the background task completes.
        """
        metadata = metadata or PublishMetadata()
        bot_id = project.id
        profile_name = profile.name
        job_id = str(uuid.uuid4())
        resource_key = derive_resource_key(project, profile)
        log = JobLog("Publish starting...")
        log_ctx = logger.bind(bot_id=bot_id, profile=profile_name, job_id=job_id)

        try:
            runtime_path = project.custom_runtime_path or profile.template_path or self.default_template_path
            if not runtime_path:
                raise PublishValidationError("No runtime template path configured for this profile.")

            await asyncio.to_thread(
                self.workspace.stage,
                resource_key,
                project.files,
                profile.settings,
                runtime_path,
            )

            if not profile.access_token:
                raise PublishValidationError(MISSING_ACCESS_TOKEN)
            if profile.provision is None:
                raise PublishValidationError(MISSING_PROVISION)

            await asyncio.to_thread(
                self.workspace.merge_deployment_settings,
                resource_key,
                profile.provision,
            )
        except Exception as e:
            error = getattr(e, "message", None) or str(e)
            log_ctx.bind(error=error).warning("publish_rejected")
            log(error)
            response = JobRecord(
                status=STATUS_FAILED,
                result=PublishResult(
                    id=job_id,
                    time=utc_now(),
                    message=error or "Publish Fail",
                    log=log.text(),
                    comment=metadata.comment,
                ),
            )
            self.histories.update_history(bot_id, profile_name, response.to_history_entry())
            await asyncio.to_thread(self.workspace.cleanup, resource_key)
            return response

        response = JobRecord(
            status=STATUS_ACCEPTED,
            result=PublishResult(
                id=job_id,
                time=utc_now(),
                message="Accepted for publishing.",
                log=log.text(),
                comment=metadata.comment,
            ),
        )
        self.publishing_bots.add_loading_status(bot_id, profile_name, response)
        log_ctx.bind(resource_key=resource_key).info("publish_accepted")

        task = asyncio.create_task(
            self._create_and_deploy(self.deployer, bot_id, profile_name, job_id, resource_key, profile, log),
            name=f"deploy:{bot_id}:{profile_name}:{job_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        # Callers get a snapshot; the table's record moves on to 200/500
        return response.model_copy(deep=True)

    async def _create_and_deploy(
        self,
        deployer: BaseDeployer,
        bot_id: str,
        profile_name: str,
        job_id: str,
        resource_key: str,
        profile: PublishProfile,
        log: JobLog,
    ) -> None:
        log_ctx = logger.bind(bot_id=bot_id, profile=profile_name, job_id=job_id)
        try:
            await deployer.deploy(
                self.workspace.project_folder(resource_key),
                subscription_id=profile.subscription_id,
                access_token=profile.access_token or "",
                publish_name=profile.publish_name,
                environment=profile.environment,
                luis_authoring_key=profile.luis_authoring_key,
                luis_authoring_region=profile.luis_authoring_region,
                logger=log,
            )
        except Exception as e:
            log_ctx.bind(error=str(e)).error("deploy_failed")
            message = getattr(e, "message", None) or str(e) or "publish error"
            self._complete(bot_id, profile_name, job_id, STATUS_FAILED, message, log)
        else:
            log_ctx.info("deploy_succeeded")
            self._complete(bot_id, profile_name, job_id, STATUS_SUCCESS, "Success", log)
        finally:
            await asyncio.to_thread(self.workspace.cleanup, resource_key)

    def _complete(
        self,
        bot_id: str,
        profile_name: str,
        job_id: str,
        status: int,
        message: str,
        log: JobLog,
    ) -> None:
        record = self.publishing_bots.get_loading_status(bot_id, profile_name, job_id)
        if record is None:
            logger.bind(bot_id=bot_id, profile=profile_name, job_id=job_id).debug("job_already_removed")
            return

        record.status = status
        record.result.message = message
        record.result.log = log.text()
        self.histories.update_history(bot_id, profile_name, record.to_history_entry())
        self.publishing_bots.remove_loading_status(bot_id, profile_name, job_id)

    async def get_status(self, profile: PublishProfile, project: BotProject, user: Any = None) -> JobRecord:
        """Latest in-flight job, else newest history entry, else a 404 record."""
        status = self.publishing_bots.get_loading_status(project.id, profile.name)
        if status is not None:
            return status.model_copy(deep=True)

        current = self.histories.get_history(project.id, profile.name)
        if current:
            return current[0].to_job_record()

        return JobRecord(status=STATUS_NOT_FOUND, result=PublishResult(message="bot not published"))

    async def history(self, profile: PublishProfile, project: BotProject, user: Any = None) -> list[HistoryEntry]:
        """All recorded outcomes for the bot and profile, newest first."""
        return self.histories.get_history(project.id, profile.name)

    async def wait_for_pending(self) -> None:
        """Wait for every running deploy task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


_publisher_instance: PublishCoordinator | None = None


def get_publisher() -> PublishCoordinator:
    """
    Get the process-wide publish coordinator.

    Built on first use from settings; history is hydrated from disk when
    persistence is enabled.
    """
    global _publisher_instance
    if _publisher_instance is not None:
        return _publisher_instance

    settings = get_settings()
    config = get_config()
    _publisher_instance = PublishCoordinator(
        deployer=get_deployer(),
        workspace=StagingWorkspace(settings.publish_root, settings.bot_folder_name),
        history=HistoryStore(config.history.file, persist=config.history.persist),
        default_template_path=settings.default_template_path,
    )
    return _publisher_instance


def reset_publisher() -> None:
    """Reset the coordinator instance. Useful for testing."""
    global _publisher_instance
    _publisher_instance = None
