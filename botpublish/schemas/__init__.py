from botpublish.schemas.publish import (
    STATUS_ACCEPTED,
    STATUS_FAILED,
    STATUS_NOT_FOUND,
    STATUS_SUCCESS,
    BotFile,
    BotProject,
    HistoryEntry,
    JobRecord,
    PublishMetadata,
    PublishProfile,
    PublishRequest,
    PublishResult,
)

__all__ = [
    "STATUS_ACCEPTED",
    "STATUS_FAILED",
    "STATUS_NOT_FOUND",
    "STATUS_SUCCESS",
    "BotFile",
    "BotProject",
    "HistoryEntry",
    "JobRecord",
    "PublishMetadata",
    "PublishProfile",
    "PublishRequest",
    "PublishResult",
]
