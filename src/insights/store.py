"""JSON-backed local insight store.

All records live in one JSON file per user, loaded on init. Secondary
indices (themes, starred, archived, created_at order) are kept in memory
and rebuilt incrementally.

Every write persists the candidate record set first and only then swaps
it into memory, so a failed write leaves readers on the previous
snapshot. File persistence is serialized by a store-wide lock;
read-modify-write on a single record additionally holds that record's
lock, so two concurrent updates to one insight both land.
"""

from __future__ import annotations

import asyncio
import bisect
import json
import logging
import re
import time
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from scatterbrain.errors import InvalidTransitionError, StoreNotFoundError, StoreWriteError
from scatterbrain.fileio import write_through
from scatterbrain.insights.models import (
    ACTION_FIELDS,
    ActionKind,
    InsightFilters,
    InsightUpdate,
    StoredInsight,
)

logger = logging.getLogger(__name__)

STORE_FILENAME = ".scatterbrain-insights.json"

MIN_SEARCH_TERM_LENGTH = 4

_WORD_RE = re.compile(r"\b\w+\b")


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    records: list[StoredInsight] = Field(default_factory=list)


def generate_search_terms(text: str, themes: Iterable[str] = ()) -> list[str]:
    """Lowercased words longer than three characters, plus theme labels."""
    terms: list[str] = []
    for word in _WORD_RE.findall(text.lower()):
        if len(word) >= MIN_SEARCH_TERM_LENGTH and word not in terms:
            terms.append(word)
    for theme in themes:
        label = theme.strip().lower()
        if label and label not in terms:
            terms.append(label)
    return terms


def _new_id() -> str:
    return f"insight_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


# Archived records are terminal except for starring
_ARCHIVED_MUTABLE = frozenset({"starred", "archived"})


def _check_mutable(record: StoredInsight, changes: dict[str, Any]) -> None:
    if not record.archived:
        return
    if changes.get("archived") is False:
        raise InvalidTransitionError(f"Insight {record.id} is archived and cannot be restored")
    blocked = sorted(set(changes) - _ARCHIVED_MUTABLE)
    if blocked:
        raise InvalidTransitionError(
            f"Insight {record.id} is archived; only starring is allowed "
            f"(tried to change {', '.join(blocked)})"
        )


class InsightStore:
    """Async CRUD, filtering and search over a user's stored insights.

    Args:
        data_dir: Directory holding the store file (usually the user dir).
        max_records: Maximum number of records; 0 means unlimited.
    """

    def __init__(self, data_dir: Path, max_records: int = 0) -> None:
        self._path = data_dir / STORE_FILENAME
        self._max_records = max_records
        self._write_lock = asyncio.Lock()
        self._record_locks: dict[str, asyncio.Lock] = {}

        self._records: dict[str, StoredInsight] = {}
        self._by_theme: dict[str, set[str]] = {}
        self._starred: set[str] = set()
        self._archived: set[str] = set()
        self._order: list[tuple[datetime, str]] = []

        for record in self._load().records:
            self._records[record.id] = record
            self._index(record)

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _StoreData:
        if not self._path.exists():
            return _StoreData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt insight store at %s, starting fresh", self._path)
            return _StoreData()

    def _write(self, records: list[StoredInsight]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(_StoreData(records=records).model_dump_json(indent=2), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            raise StoreWriteError(f"Could not write insight store {self._path}: {exc}") from exc

    def _index(self, record: StoredInsight) -> None:
        for theme in record.themes:
            self._by_theme.setdefault(theme, set()).add(record.id)
        if record.starred:
            self._starred.add(record.id)
        if record.archived:
            self._archived.add(record.id)
        bisect.insort(self._order, (record.created_at, record.id))

    def _unindex(self, record: StoredInsight) -> None:
        for theme in record.themes:
            ids = self._by_theme.get(theme)
            if ids is None:
                continue
            ids.discard(record.id)
            if not ids:
                del self._by_theme[theme]
        self._starred.discard(record.id)
        self._archived.discard(record.id)
        key = (record.created_at, record.id)
        pos = bisect.bisect_left(self._order, key)
        if pos < len(self._order) and self._order[pos] == key:
            del self._order[pos]

    def _lock_for(self, insight_id: str) -> asyncio.Lock:
        lock = self._record_locks.get(insight_id)
        if lock is None:
            lock = self._record_locks[insight_id] = asyncio.Lock()
        return lock

    def _require(self, insight_id: str) -> StoredInsight:
        record = self._records.get(insight_id)
        if record is None:
            raise StoreNotFoundError(insight_id)
        return record

    async def _commit(
        self,
        new: StoredInsight | None,
        *,
        remove: str | None = None,
        enforce_quota: bool = False,
    ) -> None:
        """Persist a changed record set, then publish it to memory."""
        async with self._write_lock:
            if enforce_quota and self._max_records and len(self._records) >= self._max_records:
                raise StoreWriteError(
                    f"Insight storage full ({self._max_records} records); "
                    "delete some to continue"
                )
            candidate = dict(self._records)
            if remove is not None:
                candidate.pop(remove, None)
            if new is not None:
                candidate[new.id] = new

            try:
                await write_through(self._write, list(candidate.values()))
            except asyncio.CancelledError:
                # Already on disk; memory must follow
                self._publish(candidate, new, remove)
                raise
            self._publish(candidate, new, remove)

    def _publish(
        self,
        candidate: dict[str, StoredInsight],
        new: StoredInsight | None,
        remove: str | None,
    ) -> None:
        old = self._records.get(remove if remove is not None else new.id)
        if old is not None:
            self._unindex(old)
        if new is not None:
            self._index(new)
        self._records = candidate

    async def _replace(self, insight_id: str, **changes: Any) -> StoredInsight:
        """Read-modify-write one record under its lock."""
        async with self._lock_for(insight_id):
            current = self._require(insight_id)
            _check_mutable(current, changes)
            if "themes" in changes:
                changes["search_terms"] = generate_search_terms(
                    current.source_text, changes["themes"]
                )
            updated = current.model_copy(update=changes)
            await self._commit(updated)
            return updated

    # ── Write operations ─────────────────────────────────────────

    async def save(
        self,
        source_text: str,
        generated_payload: dict[str, Any],
        themes: Iterable[str] = (),
    ) -> str:
        """Store a new insight and return its id.

        Raises:
            StoreWriteError: If the quota is reached or the write fails.
        """
        themes = list(themes)
        record = StoredInsight(
            id=_new_id(),
            source_text=source_text,
            generated_payload=generated_payload,
            created_at=datetime.now(tz=UTC),
            themes=themes,
            search_terms=generate_search_terms(source_text, themes),
        )
        await self._commit(record, enforce_quota=True)
        logger.debug("Saved insight %s (%d themes)", record.id, len(themes))
        return record.id

    async def update(self, insight_id: str, update: InsightUpdate) -> StoredInsight:
        """Merge the explicitly set fields of ``update`` into a record.

        Raises:
            StoreNotFoundError: If the id does not exist.
            InvalidTransitionError: If the record is archived and the update
                touches anything but ``starred``.
        """
        return await self._replace(insight_id, **update.changes())

    async def archive(self, insight_id: str) -> StoredInsight:
        return await self._replace(insight_id, archived=True)

    async def toggle_star(self, insight_id: str) -> bool:
        """Flip the starred flag and return its new value."""
        async with self._lock_for(insight_id):
            current = self._require(insight_id)
            updated = current.model_copy(update={"starred": not current.starred})
            await self._commit(updated)
            return updated.starred

    async def track_action(
        self,
        insight_id: str,
        kind: ActionKind | str,
        payload: dict[str, Any] | None = None,
    ) -> StoredInsight:
        """Append a timestamped action to the record's action log.

        Raises:
            StoreNotFoundError: If the id does not exist.
            InvalidTransitionError: If the record is archived.
        """
        field = ACTION_FIELDS[ActionKind(kind)]
        entry = {**(payload or {}), "timestamp": datetime.now(tz=UTC).isoformat()}
        async with self._lock_for(insight_id):
            current = self._require(insight_id)
            _check_mutable(current, {"user_actions": field})
            actions = current.user_actions
            logged = [*getattr(actions, field), entry]
            updated = current.model_copy(
                update={"user_actions": actions.model_copy(update={field: logged})}
            )
            await self._commit(updated)
            return updated

    async def delete(self, insight_id: str) -> None:
        """Hard-delete a record.

        Raises:
            StoreNotFoundError: If the id does not exist.
        """
        async with self._lock_for(insight_id):
            self._require(insight_id)
            await self._commit(None, remove=insight_id)
        self._record_locks.pop(insight_id, None)
        logger.debug("Deleted insight %s", insight_id)

    # ── Read operations ──────────────────────────────────────────

    async def get(self, insight_id: str) -> StoredInsight | None:
        return self._records.get(insight_id)

    async def count(self) -> int:
        return len(self._records)

    async def themes(self) -> dict[str, int]:
        """Theme label → number of records carrying it."""
        return {theme: len(ids) for theme, ids in sorted(self._by_theme.items())}

    async def query(self, filters: InsightFilters | None = None) -> list[StoredInsight]:
        """Return records matching every set filter, newest first."""
        filters = filters or InsightFilters()
        records = self._records
        if filters.limit == 0:
            return []

        candidates: set[str] | None = None
        if filters.themes is not None:
            candidates = set()
            for theme in filters.themes:
                candidates |= self._by_theme.get(theme, set())
        if filters.starred is not None:
            starred = self._starred if filters.starred else set(records) - self._starred
            candidates = starred if candidates is None else candidates & starred
        if filters.archived:
            candidates = (
                set(self._archived) if candidates is None else candidates & self._archived
            )

        results: list[StoredInsight] = []
        for created_at, insight_id in reversed(self._order):
            if candidates is not None and insight_id not in candidates:
                continue
            if not filters.archived and insight_id in self._archived:
                continue
            if filters.date_range is not None and not filters.date_range.contains(created_at):
                continue
            results.append(records[insight_id])
            if filters.limit is not None and len(results) >= filters.limit:
                break
        return results

    async def search(self, term: str) -> list[StoredInsight]:
        """Case-insensitive search over source text, search terms and themes.

        A blank term returns the default query.
        """
        needle = term.strip().lower()
        if not needle:
            return await self.query()
        return [
            record
            for record in await self.query()
            if needle in record.source_text.lower()
            or any(needle in t for t in record.search_terms)
            or any(needle in theme.lower() for theme in record.themes)
        ]
