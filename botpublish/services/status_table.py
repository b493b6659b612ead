"""In-flight publish job tracking.

Jobs are kept per (bot, profile) in acceptance order. The tail of a list is
the latest job for that key, which is what status polling reports. A record
leaves the table once its deploy completes and lives on only in history.
"""

from collections import defaultdict

from botpublish.schemas.publish import JobRecord


class JobStatusTable:
    """Ordered in-flight job records keyed by bot id and profile name."""

    def __init__(self) -> None:
        self._jobs: dict[str, dict[str, list[JobRecord]]] = defaultdict(dict)

    def add_loading_status(self, bot_id: str, profile_name: str, record: JobRecord) -> None:
        """Append a record to the tail of the key's list."""
        self._jobs[bot_id].setdefault(profile_name, []).append(record)

    def get_loading_status(
        self,
        bot_id: str,
        profile_name: str,
        job_id: str | None = None,
    ) -> JobRecord | None:
        """
        Look up a job record without mutating the table.

        Args:
            bot_id: Bot the job belongs to
            profile_name: Publishing profile name
            job_id: Specific job to find; the latest job when omitted

        Returns:
            The matching record, or None if there is none
        """
        records = self._records(bot_id, profile_name)
        if not records:
            return None
        if job_id:
            return next((r for r in records if r.result.id == job_id), None)
        return records[-1]

    def remove_loading_status(
        self,
        bot_id: str,
        profile_name: str,
        job_id: str,
    ) -> JobRecord | None:
        """Remove a job record by id, keeping the others in order."""
        records = self._records(bot_id, profile_name)
        for index, record in enumerate(records):
            if record.result.id == job_id:
                return records.pop(index)
        return None

    def count(self, bot_id: str, profile_name: str) -> int:
        """Number of tracked jobs for a key."""
        return len(self._records(bot_id, profile_name))

    def __len__(self) -> int:
        return sum(len(records) for profiles in self._jobs.values() for records in profiles.values())

    def _records(self, bot_id: str, profile_name: str) -> list[JobRecord]:
        # .get() so that reads never create containers
        profiles = self._jobs.get(bot_id)
        if not profiles:
            return []
        return profiles.get(profile_name, [])
