"""Publish history per (bot, profile), optionally persisted to a JSON file."""

import json
from collections import defaultdict
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from botpublish.core.logging import get_logger
from botpublish.schemas.publish import HistoryEntry

logger = get_logger(__name__)

# bot id -> profile name -> entries, newest first
HistoryTable = dict[str, dict[str, list[HistoryEntry]]]

_history_adapter = TypeAdapter(HistoryTable)


class HistoryStore:
    """
    Newest-first log of terminal publish outcomes.

    When persistence is enabled the whole table is loaded from the history
    file at construction and rewritten on every update. Otherwise history
    lives only for the lifetime of the process.
    """

    def __init__(self, history_file: str | Path | None = None, persist: bool = False) -> None:
        """
        Initialize the store.

        Args:
            history_file: JSON file holding the persisted table
            persist: Whether to load from and write to history_file
        """
        self._path = Path(history_file) if history_file else None
        self._persist = persist and self._path is not None
        self._histories: HistoryTable = defaultdict(dict)

        if persist and self._path is not None:
            self._load(self._path)

    @property
    def persistent(self) -> bool:
        return self._persist

    def get_history(self, bot_id: str, profile_name: str) -> list[HistoryEntry]:
        """Return the key's entries newest-first, or an empty list."""
        profiles = self._histories.get(bot_id)
        if not profiles:
            return []
        return list(profiles.get(profile_name, []))

    def update_history(self, bot_id: str, profile_name: str, entry: HistoryEntry) -> None:
        """Insert an entry at the head of the key's history."""
        self._histories[bot_id].setdefault(profile_name, []).insert(0, entry)
        if self._persist and self._path is not None:
            self._save(self._path)

    def _load(self, path: Path) -> None:
        if not path.exists():
            logger.bind(path=str(path)).debug("history_file_missing")
            return

        try:
            loaded = _history_adapter.validate_json(path.read_bytes())
        except OSError as e:
            logger.bind(path=str(path), error=str(e)).error("history_load_failed")
            self._persist = False
            return
        except ValidationError as e:
            logger.bind(path=str(path), error=str(e)).error("history_load_failed")
            self._set_aside(path)
            return

        self._histories = defaultdict(dict, loaded)
        logger.bind(path=str(path), bots=len(loaded)).info("history_loaded")

    def _set_aside(self, path: Path) -> None:
        """Move an unreadable history file out of the way before it is rewritten."""
        corrupt = path.with_name(f"{path.name}.corrupt")
        try:
            path.replace(corrupt)
        except OSError as e:
            # Leave the file untouched and stop writing to it
            logger.bind(path=str(path), error=str(e)).error("history_set_aside_failed")
            self._persist = False
            return
        logger.bind(path=str(path), moved_to=str(corrupt)).warning("history_set_aside")

    def _save(self, path: Path) -> None:
        data = _history_adapter.dump_python(dict(self._histories), mode="json")
        tmp = path.with_name(f"{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, indent=2))
            tmp.replace(path)
        except OSError as e:
            # In-memory history stays authoritative for this process
            logger.bind(path=str(path), error=str(e)).error("history_save_failed")


def read_history_file(history_file: str | Path) -> HistoryTable:
    """Read a persisted history table without constructing a store."""
    path = Path(history_file)
    if not path.exists():
        return {}
    return _history_adapter.validate_json(path.read_bytes())
