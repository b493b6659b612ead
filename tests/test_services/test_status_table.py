"""Tests for the in-flight job status table."""

import pytest

from botpublish.schemas.publish import JobRecord, PublishResult
from botpublish.services.status_table import JobStatusTable


def _record(job_id: str, status: int = 202) -> JobRecord:
    return JobRecord(status=status, result=PublishResult(id=job_id, message="Accepted for publishing."))


class TestJobStatusTable:
    """Tests for JobStatusTable."""

    @pytest.fixture
    def table(self):
        return JobStatusTable()

    def test_add_then_remove_restores_length(self, table):
        """Removing an added job should return it and restore the prior length."""
        table.add_loading_status("bot", "prod", _record("a"))
        before = table.count("bot", "prod")

        record = _record("b")
        table.add_loading_status("bot", "prod", record)
        removed = table.remove_loading_status("bot", "prod", "b")

        assert removed is record
        assert table.count("bot", "prod") == before

    @pytest.mark.parametrize("order", [["a", "b", "c"], ["c", "a", "b"], ["b"]])
    def test_get_without_job_id_returns_latest(self, table, order):
        """Latest status is the most recently added record."""
        for job_id in order:
            table.add_loading_status("bot", "prod", _record(job_id))

        latest = table.get_loading_status("bot", "prod")

        assert latest is not None
        assert latest.result.id == order[-1]

    def test_get_by_job_id(self, table):
        """Should find a specific job regardless of its position."""
        for job_id in ["a", "b", "c"]:
            table.add_loading_status("bot", "prod", _record(job_id))

        assert table.get_loading_status("bot", "prod", "a").result.id == "a"
        assert table.get_loading_status("bot", "prod", "missing") is None

    def test_get_is_pure_read(self, table):
        """Lookups should not create keys or change lengths."""
        assert table.get_loading_status("bot", "prod") is None
        assert table.get_loading_status("bot", "prod", "a") is None
        assert len(table) == 0
        assert "bot" not in table._jobs

    def test_remove_on_absent_key_returns_none(self, table):
        """Removing from an unknown key is a no-op."""
        assert table.remove_loading_status("unknown", "prod", "a") is None
        assert len(table) == 0

    def test_remove_on_empty_list_returns_none(self, table):
        """A key whose list has been emptied should not raise on remove or get."""
        table.add_loading_status("bot", "prod", _record("a"))
        table.remove_loading_status("bot", "prod", "a")

        assert table.remove_loading_status("bot", "prod", "a") is None
        assert table.get_loading_status("bot", "prod") is None

    def test_remove_unknown_id_leaves_others(self, table):
        """An unknown job id must not remove any other record."""
        table.add_loading_status("bot", "prod", _record("a"))
        table.add_loading_status("bot", "prod", _record("b"))

        assert table.remove_loading_status("bot", "prod", "zzz") is None
        assert table.count("bot", "prod") == 2
        assert table.get_loading_status("bot", "prod").result.id == "b"

    def test_remove_preserves_order(self, table):
        """Remaining records keep their relative order."""
        for job_id in ["a", "b", "c", "d"]:
            table.add_loading_status("bot", "prod", _record(job_id))

        table.remove_loading_status("bot", "prod", "b")

        ids = [r.result.id for r in table._records("bot", "prod")]
        assert ids == ["a", "c", "d"]

    def test_keys_are_independent(self, table):
        """Profiles and bots should not see each other's jobs."""
        table.add_loading_status("bot", "prod", _record("a"))
        table.add_loading_status("bot", "staging", _record("b"))
        table.add_loading_status("other", "prod", _record("c"))

        table.remove_loading_status("bot", "prod", "a")

        assert table.get_loading_status("bot", "prod") is None
        assert table.get_loading_status("bot", "staging").result.id == "b"
        assert table.get_loading_status("other", "prod").result.id == "c"
        assert len(table) == 2
