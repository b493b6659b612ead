"""Publish error taxonomy.

None of these escape the publish coordinator: validation failures become a
synchronous 500 result and deployment failures move the job to 500. A bot
with no job and no history is reported with a synthetic 404 record, not an
exception.
"""


class PublishError(Exception):
    """Base class for publish failures."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class PublishValidationError(PublishError):
    """Profile is missing a credential or provisioned resource metadata."""


class StagingError(PublishError):
    """Bot assets or runtime code could not be staged on disk."""


class DeploymentError(PublishError):
    """The deployment orchestrator reported a failure."""

    def __init__(self, message: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
