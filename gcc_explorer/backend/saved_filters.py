"""
Per-user saved filter sets, persisted to a single JSON file.

File layout:
    {
        "next_id": 4,
        "users": {
            "<user id>": [{"id": 1, "name": "...", "filters": {...},
                           "createdAt": "...", "updatedAt": null}, ...]
        }
    }
"""
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from defaults import with_filter_defaults
from errors import SavedFilterNotFoundError, SavedFilterValidationError
from models import Filters, SavedFilter


logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _empty_state() -> dict[str, Any]:
    return {"next_id": 1, "users": {}}


def _next_free_id(users: dict[str, list]) -> int:
    """One past the highest integer id stored for any user."""
    ids = [
        entry["id"]
        for entries in users.values()
        for entry in entries
        if isinstance(entry, dict) and isinstance(entry.get("id"), int)
    ]
    return max(ids, default=0) + 1


class SavedFilterStore:
    """JSON-file key-value store of named filter sets, keyed by user id."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, Any]:
        """Load the file state; an unreadable or malformed file reads as empty."""
        if not self.path.exists():
            return _empty_state()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            logger.error("Could not read saved filters file %s: %s", self.path, exc)
            return _empty_state()

        if not isinstance(raw, dict):
            logger.error("Saved filters file %s has an unexpected layout", self.path)
            return _empty_state()

        users = raw.get("users", {})
        if not isinstance(users, dict):
            logger.error("Saved filters file %s: 'users' is not an object, ignoring it", self.path)
            users = {}
        users = {uid: entries for uid, entries in users.items() if isinstance(entries, list)}

        next_id = raw.get("next_id")
        if isinstance(next_id, bool) or not isinstance(next_id, int) or next_id < 1:
            next_id = _next_free_id(users)

        return {"next_id": next_id, "users": users}

    def _write(self, state: dict[str, Any]) -> None:
        """Write atomically using temp file + replace."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=2, default=str)
        os.replace(temp_path, self.path)
        logger.debug("Wrote saved filters to %s", self.path)

    @staticmethod
    def _parse_entry(entry: dict) -> SavedFilter | None:
        try:
            data = dict(entry)
            data["filters"] = with_filter_defaults(entry.get("filters"))
            return SavedFilter.model_validate(data)
        except (ValidationError, TypeError) as exc:
            logger.error("Skipping corrupt saved filter entry %r: %s", entry.get("id"), exc)
            return None

    @staticmethod
    def _dump_entry(saved: SavedFilter) -> dict:
        return saved.model_dump(mode="json", by_alias=True)

    def _entries(self, state: dict, user_id: str) -> list[dict]:
        entries = state["users"].get(user_id, [])
        return [e for e in entries if isinstance(e, dict)]

    @staticmethod
    def _validate_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise SavedFilterValidationError("Filter set name must not be empty")
        return name

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def list_filters(self, user_id: str) -> list[SavedFilter]:
        """All filter sets of a user, newest first."""
        with self._lock:
            state = self._read()
        parsed = [self._parse_entry(e) for e in self._entries(state, user_id)]
        saved = [s for s in parsed if s is not None]
        return sorted(saved, key=lambda s: (s.created_at, s.id), reverse=True)

    def get_filter(self, user_id: str, filter_id: int) -> SavedFilter:
        for saved in self.list_filters(user_id):
            if saved.id == filter_id:
                return saved
        raise SavedFilterNotFoundError(user_id, filter_id)

    def save_filter(self, user_id: str, name: str, filters: Filters | dict) -> SavedFilter:
        name = self._validate_name(name)
        with self._lock:
            state = self._read()
            saved = SavedFilter(
                id=int(state["next_id"]),
                name=name,
                filters=with_filter_defaults(filters),
                created_at=_now(),
            )
            state["next_id"] = saved.id + 1
            state["users"].setdefault(user_id, []).append(self._dump_entry(saved))
            self._write(state)

        logger.info("Saved filter set %d (%s) for user %s", saved.id, saved.name, user_id)
        return saved

    def update_filter(self, user_id: str, filter_id: int, name: str, filters: Filters | dict) -> SavedFilter:
        name = self._validate_name(name)
        with self._lock:
            state = self._read()
            entries = state["users"].get(user_id, [])
            for index, entry in enumerate(entries):
                if isinstance(entry, dict) and entry.get("id") == filter_id:
                    current = self._parse_entry(entry)
                    if current is None:
                        break
                    updated = current.model_copy(update={
                        "name": name,
                        "filters": with_filter_defaults(filters),
                        "updated_at": _now(),
                    })
                    entries[index] = self._dump_entry(updated)
                    self._write(state)
                    logger.info("Updated filter set %d for user %s", filter_id, user_id)
                    return updated

        raise SavedFilterNotFoundError(user_id, filter_id)

    def delete_filter(self, user_id: str, filter_id: int) -> SavedFilter:
        """Remove a filter set and return what was deleted."""
        with self._lock:
            state = self._read()
            entries = state["users"].get(user_id, [])
            for index, entry in enumerate(entries):
                if isinstance(entry, dict) and entry.get("id") == filter_id:
                    removed = entries.pop(index)
                    self._write(state)
                    logger.info("Deleted filter set %d for user %s", filter_id, user_id)
                    return self._parse_entry(removed) or SavedFilter(
                        id=filter_id,
                        name=str(removed.get("name", "")),
                        filters=Filters(),
                        created_at=_now(),
                    )

        raise SavedFilterNotFoundError(user_id, filter_id)
