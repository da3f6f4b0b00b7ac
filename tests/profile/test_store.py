"""Tests for ProfileStore: JSON-backed per-user profile persistence."""

from datetime import UTC, datetime

import pytest
from scatterbrain.errors import StoreWriteError
from scatterbrain.profile.services import build_profile
from scatterbrain.profile.store import PROFILE_FILENAME, ProfileStore

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def _profile():
    return build_profile(
        [{"id": "1", "body": "docker and kubernetes", "created_at": NOW}], now=NOW
    )


class TestProfileStore:
    def test_missing_returns_none(self, tmp_path):
        assert ProfileStore(tmp_path).load("alice") is None

    def test_round_trip(self, tmp_path):
        store = ProfileStore(tmp_path)
        profile = _profile()
        store.save("alice", profile)

        assert (tmp_path / "alice" / PROFILE_FILENAME).exists()
        assert store.load("alice") == profile

    def test_users_are_isolated(self, tmp_path):
        store = ProfileStore(tmp_path)
        store.save("alice", _profile())
        assert store.load("bob") is None

    def test_corrupt_file_ignored(self, tmp_path, caplog):
        path = tmp_path / "alice" / PROFILE_FILENAME
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        assert ProfileStore(tmp_path).load("alice") is None
        assert "Corrupt profile" in caplog.text

    def test_write_failure_raises(self, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("a file where a directory should be")

        with pytest.raises(StoreWriteError):
            ProfileStore(blocker).save("alice", _profile())
