"""Centralized datetime utilities for consistent timezone handling.

Publish results and history entries carry naive UTC timestamps so that the
persisted history file round-trips without timezone suffixes.

Usage:
    from botpublish.core.datetime_utils import utc_now

    record.result.time = utc_now()
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC time as naive datetime.

    Replaces deprecated datetime.utcnow().
    """
    return datetime.now(UTC).replace(tzinfo=None)

