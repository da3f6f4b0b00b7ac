"""JSON-backed per-user profile persistence.

One file per user. A profile is written whole and read whole; there is
no partial update path.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from scatterbrain.errors import StoreWriteError
from scatterbrain.profile.models import UserProfile

logger = logging.getLogger(__name__)

PROFILE_FILENAME = ".scatterbrain-profile.json"


class ProfileStore:
    """Loads and saves ``UserProfile`` values under ``root/<user_id>/``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def _path(self, user_id: str) -> Path:
        return self._root / user_id / PROFILE_FILENAME

    def load(self, user_id: str) -> UserProfile | None:
        """Return the stored profile, or None if missing or unreadable."""
        path = self._path(user_id)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return UserProfile.model_validate(raw)
        except (json.JSONDecodeError, ValueError):
            logger.warning("Corrupt profile at %s, ignoring", path)
            return None

    def save(self, user_id: str, profile: UserProfile) -> None:
        path = self._path(user_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(profile.model_dump_json(indent=2), encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            raise StoreWriteError(f"Could not write profile for {user_id}: {exc}") from exc
