"""Entry Source: where captured thoughts live.

The personalization engine only ever reads entries and, after a
successful analysis, writes tags/mood back. ``EntrySource`` is that
two-call contract; ``JsonEntrySource`` is the file-backed implementation
used by the CLI, following the same load-on-init / save-after-write
pattern as the insight store.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field

from scatterbrain.entries.models import Entry
from scatterbrain.errors import StoreWriteError
from scatterbrain.fileio import write_through

logger = logging.getLogger(__name__)

ENTRIES_FILENAME = ".scatterbrain-entries.json"


class EntrySource(Protocol):
    """Read + write-back interface used by the engine."""

    async def list_entries(self, user_id: str) -> list[Entry]:
        """Return the user's entries, newest first."""
        ...

    async def annotate(
        self,
        user_id: str,
        entry_id: str,
        *,
        tags: list[str],
        mood: str | None,
        context: dict[str, Any],
    ) -> None:
        """Mark an entry processed and record its analysis tags and mood.

        A cancelled call must only raise once its write has landed.
        """
        ...


class _EntryData(BaseModel):
    """Internal wrapper for JSON serialization."""

    entries: list[Entry] = Field(default_factory=list)


class JsonEntrySource:
    """One JSON file of entries per user under ``root``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def _path(self, user_id: str) -> Path:
        return self._root / user_id / ENTRIES_FILENAME

    def _load(self, user_id: str) -> _EntryData:
        path = self._path(user_id)
        if not path.exists():
            return _EntryData()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return _EntryData.model_validate(raw)
        except (json.JSONDecodeError, ValueError):
            logger.warning("Corrupt entry file at %s, treating as empty", path)
            return _EntryData()

    def _save(self, user_id: str, data: _EntryData) -> None:
        path = self._path(user_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(data.model_dump_json(indent=2), encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            raise StoreWriteError(f"Could not write entries for {user_id}: {exc}") from exc

    # ── Read operations ──────────────────────────────────────────

    async def list_entries(self, user_id: str) -> list[Entry]:
        data = self._load(user_id)
        return sorted(data.entries, key=lambda e: e.created_at, reverse=True)

    async def get(self, user_id: str, entry_id: str) -> Entry | None:
        for entry in self._load(user_id).entries:
            if entry.id == entry_id:
                return entry
        return None

    async def count(self, user_id: str) -> int:
        return len(self._load(user_id).entries)

    # ── Write operations ─────────────────────────────────────────

    async def add_entry(
        self,
        user_id: str,
        body: str,
        *,
        title: str | None = None,
        created_at: datetime | None = None,
    ) -> Entry:
        """Capture a new entry and return it."""
        entry = Entry(
            id=uuid.uuid4().hex,
            title=title,
            body=body,
            created_at=created_at or datetime.now(tz=UTC),
        )
        data = self._load(user_id)
        data.entries.append(entry)
        await write_through(self._save, user_id, data)
        logger.debug("Captured entry %s for %s", entry.id, user_id)
        return entry

    async def annotate(
        self,
        user_id: str,
        entry_id: str,
        *,
        tags: list[str],
        mood: str | None,
        context: dict[str, Any],
    ) -> None:
        data = self._load(user_id)
        for index, entry in enumerate(data.entries):
            if entry.id == entry_id:
                data.entries[index] = entry.model_copy(
                    update={
                        "tags": list(tags),
                        "mood": mood,
                        "context": context,
                        "is_processed": True,
                        "processed_at": datetime.now(tz=UTC),
                    }
                )
                break
        else:
            raise KeyError(entry_id)
        await write_through(self._save, user_id, data)
