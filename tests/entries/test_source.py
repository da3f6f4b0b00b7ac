"""Tests for JsonEntrySource: file-backed entry source."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from scatterbrain.entries.models import Entry
from scatterbrain.entries.source import ENTRIES_FILENAME, JsonEntrySource

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class TestEntryModel:
    def test_naive_timestamps_assumed_utc(self):
        entry = Entry(id="1", body="x", created_at=datetime(2026, 3, 1, 9, 0))
        assert entry.created_at.tzinfo is UTC

    def test_text_joins_title_and_body(self):
        assert Entry(id="1", title="Idea", body="body", created_at=NOW).text == "Idea body"
        assert Entry(id="1", body="body", created_at=NOW).text == " body"


class TestJsonEntrySource:
    @pytest.mark.asyncio
    async def test_add_and_list_newest_first(self, tmp_path: Path):
        source = JsonEntrySource(tmp_path)
        old = await source.add_entry("alice", "older", created_at=NOW - timedelta(days=1))
        new = await source.add_entry("alice", "newer", title="T", created_at=NOW)

        entries = await source.list_entries("alice")
        assert [e.id for e in entries] == [new.id, old.id]
        assert entries[0].title == "T"
        assert (tmp_path / "alice" / ENTRIES_FILENAME).exists()

    @pytest.mark.asyncio
    async def test_users_isolated(self, tmp_path: Path):
        source = JsonEntrySource(tmp_path)
        await source.add_entry("alice", "hers")
        assert await source.list_entries("bob") == []
        assert await source.count("alice") == 1

    @pytest.mark.asyncio
    async def test_get(self, tmp_path: Path):
        source = JsonEntrySource(tmp_path)
        entry = await source.add_entry("alice", "x")
        assert await source.get("alice", entry.id) == entry
        assert await source.get("alice", "missing") is None

    @pytest.mark.asyncio
    async def test_annotate(self, tmp_path: Path):
        source = JsonEntrySource(tmp_path)
        entry = await source.add_entry("alice", "x", created_at=NOW)

        await source.annotate(
            "alice", entry.id, tags=["pricing"], mood="curious", context={"tier": "basic"}
        )

        stored = await JsonEntrySource(tmp_path).get("alice", entry.id)
        assert stored is not None
        assert stored.tags == ["pricing"]
        assert stored.mood == "curious"
        assert stored.context == {"tier": "basic"}
        assert stored.is_processed is True
        assert stored.processed_at is not None
        # Authored fields never change
        assert stored.body == "x"
        assert stored.created_at == NOW

    @pytest.mark.asyncio
    async def test_annotate_missing_entry(self, tmp_path: Path):
        source = JsonEntrySource(tmp_path)
        with pytest.raises(KeyError):
            await source.annotate("alice", "nope", tags=[], mood=None, context={})

    @pytest.mark.asyncio
    async def test_corrupt_file_is_empty(self, tmp_path: Path, caplog):
        path = tmp_path / "alice" / ENTRIES_FILENAME
        path.parent.mkdir(parents=True)
        path.write_text("not json")
        assert await JsonEntrySource(tmp_path).list_entries("alice") == []
        assert "Corrupt entry file" in caplog.text
