"""Publish request, job status and history models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Job status codes
STATUS_ACCEPTED = 202
STATUS_SUCCESS = 200
STATUS_FAILED = 500
STATUS_NOT_FOUND = 404


class BotFile(BaseModel):
    """A declarative bot asset relative to the bot folder."""

    model_config = ConfigDict(populate_by_name=True)

    relative_path: str = Field(alias="relativePath")
    content: str = ""


class BotProject(BaseModel):
    """The bot project being published."""

    id: str
    name: str
    files: list[BotFile] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)

    @property
    def custom_runtime_path(self) -> str | None:
        """Path of an ejected runtime, if the project declares one."""
        runtime = self.settings.get("runtime") or {}
        if runtime.get("customRuntime") is True and runtime.get("path"):
            return str(runtime["path"])
        return None


class PublishProfile(BaseModel):
    """Publishing profile for one bot target (e.g. "production")."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    settings: dict[str, Any] = Field(default_factory=dict)
    template_path: str | None = Field(default=None, alias="templatePath")
    subscription_id: str = Field(default="", alias="subscriptionID")
    publish_name: str = Field(default="", alias="publishName")
    environment: str = "dev"
    location: str = ""
    luis_authoring_key: str | None = Field(default=None, alias="luisAuthoringKey")
    luis_authoring_region: str | None = Field(default=None, alias="luisAuthoringRegion")
    provision: dict[str, Any] | None = None
    access_token: str | None = Field(default=None, alias="accessToken")


class PublishMetadata(BaseModel):
    """Caller-supplied metadata for a publish."""

    comment: str | None = None


class PublishResult(BaseModel):
    """Result payload of a publish job."""

    id: str | None = None
    time: datetime | None = None
    message: str
    log: str | None = None
    comment: str | None = None


class JobRecord(BaseModel):
    """Status envelope of a publish job."""

    status: int
    result: PublishResult

    def to_history_entry(self) -> "HistoryEntry":
        """Snapshot this record as an immutable history entry."""
        return HistoryEntry(status=self.status, **self.result.model_dump())


class HistoryEntry(BaseModel):
    """Immutable record of a terminal publish outcome."""

    model_config = ConfigDict(frozen=True)

    status: int
    id: str | None = None
    time: datetime | None = None
    message: str
    log: str | None = None
    comment: str | None = None

    def to_job_record(self) -> JobRecord:
        """Reshape into the status/result envelope."""
        return JobRecord(
            status=self.status,
            result=PublishResult(**self.model_dump(exclude={"status"})),
        )


class PublishRequest(BaseModel):
    """Body of POST /api/publish."""

    profile: PublishProfile
    project: BotProject
    metadata: PublishMetadata = Field(default_factory=PublishMetadata)
