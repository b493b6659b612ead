"""Publish API endpoints."""

from fastapi import APIRouter, Response

from botpublish.dependencies import Publisher
from botpublish.schemas.publish import BotProject, HistoryEntry, JobRecord, PublishProfile, PublishRequest

router = APIRouter()


def _lookup(bot_id: str, profile_name: str) -> tuple[PublishProfile, BotProject]:
    """Status and history queries only need the bot id and profile name."""
    return PublishProfile(name=profile_name), BotProject(id=bot_id, name=bot_id)


@router.post("/publish", response_model=JobRecord)
async def publish_bot(body: PublishRequest, response: Response, publisher: Publisher) -> JobRecord:
    """
    Publish a bot with a profile.

    Returns 202 with the accepted job while the deployment runs in the
    background, or 500 if the profile is missing credentials or provisioning.
    """
    record = await publisher.publish(body.profile, body.project, body.metadata)
    response.status_code = record.status
    return record


@router.get("/publish/{bot_id}/{profile_name}/status", response_model=JobRecord)
async def get_publish_status(
    bot_id: str,
    profile_name: str,
    response: Response,
    publisher: Publisher,
) -> JobRecord:
    """
    Get the latest publish status for a bot and profile.

    Reports the running job if there is one, otherwise the most recent
    history entry, otherwise 404.
    """
    profile, project = _lookup(bot_id, profile_name)
    record = await publisher.get_status(profile, project)
    response.status_code = record.status
    return record


@router.get("/publish/{bot_id}/{profile_name}/history", response_model=list[HistoryEntry])
async def get_publish_history(bot_id: str, profile_name: str, publisher: Publisher) -> list[HistoryEntry]:
    """List publish outcomes for a bot and profile, newest first."""
    profile, project = _lookup(bot_id, profile_name)
    return await publisher.history(profile, project)
