"""Per-user session facade tying the three components together.

``Scatterbrain`` owns the current profile value and the user's insight
store. Profile rebuilds produce a new frozen value that is swapped in
whole; callers holding the previous one keep a consistent snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from scatterbrain.config import ScatterbrainConfig
from scatterbrain.entries.models import Entry
from scatterbrain.entries.source import EntrySource
from scatterbrain.insights.models import ActionKind, InsightFilters, StoredInsight
from scatterbrain.insights.store import InsightStore
from scatterbrain.intelligence.backend import GenerativeBackend
from scatterbrain.intelligence.models import Insight
from scatterbrain.intelligence.services import AnalysisEngine
from scatterbrain.intelligence.tiers import Tier, tier_for_count
from scatterbrain.profile.models import UserProfile
from scatterbrain.profile.patterns import KeywordTables, load_tables
from scatterbrain.profile.services import build_profile, needs_rebuild
from scatterbrain.profile.store import ProfileStore

logger = logging.getLogger(__name__)


class Scatterbrain:
    """One user's personalization session.

    Args:
        config: Loaded configuration; ``config.user.id`` selects the user.
        entry_source: Where entries are read from and annotated.
        backend: Generative backend for tiered analysis.
        store: Insight store; defaults to one under the user's data dir.
        profile_store: Profile persistence; defaults to the data dir.
        tables: Keyword tables; defaults to ``[profile] tables_file``.
    """

    def __init__(
        self,
        config: ScatterbrainConfig,
        entry_source: EntrySource,
        backend: GenerativeBackend,
        *,
        store: InsightStore | None = None,
        profile_store: ProfileStore | None = None,
        tables: KeywordTables | None = None,
    ) -> None:
        self.config = config
        self.user_id = config.user.id
        self._entries = entry_source
        self._engine = AnalysisEngine(backend)
        self._tables = tables or load_tables(config.profile.tables_file)
        self.store = store or InsightStore(
            config.storage.user_dir(self.user_id),
            max_records=config.storage.max_records,
        )
        self._profile_store = profile_store or ProfileStore(config.storage.path)
        self._profile: UserProfile | None = self._profile_store.load(self.user_id)

    @property
    def profile(self) -> UserProfile | None:
        return self._profile

    # ── Profile ──────────────────────────────────────────────────

    async def build_profile(self, *, force: bool = False) -> UserProfile:
        """Return an up-to-date profile, rebuilding only when entries grew."""
        entries = await self._entries.list_entries(self.user_id)
        return self._refresh_profile(entries, force=force)

    def _refresh_profile(self, entries: list[Entry], *, force: bool = False) -> UserProfile:
        current = self._profile
        if current is not None and not force and not needs_rebuild(current, len(entries)):
            return current

        profile = build_profile(
            entries,
            self._tables,
            recent_days=self.config.profile.recent_days,
            top_n=self.config.profile.top_n,
        )
        self._profile_store.save(self.user_id, profile)
        self._profile = profile
        logger.info(
            "Rebuilt profile for %s from %d entries (top interest: %s)",
            self.user_id,
            len(entries),
            profile.top_interest or "none",
        )
        return profile

    async def current_tier(self) -> tuple[Tier, int]:
        entries = await self._entries.list_entries(self.user_id)
        return tier_for_count(len(entries)), len(entries)

    # ── Analysis ─────────────────────────────────────────────────

    async def analyze(self, entry_id: str, *, save: bool = True) -> tuple[Insight, str | None]:
        """Analyze one entry, keep the result, then annotate the entry.

        The profile, the entry count and the history all come from one
        listing of the entry source. Nothing is written unless the backend
        answer parses. The insight is saved before the entry is annotated;
        if annotating fails, the saved insight is deleted again.

        Returns the insight and the stored insight id (None when not saved).

        Raises:
            KeyError: If the entry does not exist.
            GenerationError: If the backend fails or answers malformed.
            StoreWriteError: If the insight cannot be stored.
        """
        history = await self._entries.list_entries(self.user_id)
        entry = next((e for e in history if e.id == entry_id), None)
        if entry is None:
            raise KeyError(entry_id)
        profile = self._refresh_profile(history)

        insight = await self._engine.analyze(entry, profile, len(history), history)

        insight_id = None
        if save:
            insight_id = await self.store.save(
                entry.text.strip(), insight.to_payload(), insight.themes
            )
        try:
            await self._entries.annotate(
                self.user_id,
                entry.id,
                tags=insight.themes,
                mood=insight.mood,
                context={
                    "intelligence_level": str(insight.intelligence_level),
                    "personalization_score": insight.personalization_score,
                    "analyzed_at": insight.generated_at.isoformat(),
                },
            )
        except Exception:
            if insight_id is not None:
                logger.warning(
                    "Annotating entry %s failed; removing insight %s", entry.id, insight_id
                )
                await self.store.delete(insight_id)
            raise
        return insight, insight_id

    # ── Stored insights ──────────────────────────────────────────

    async def save_insight(
        self,
        source_text: str,
        generated_payload: dict[str, Any],
        themes: Iterable[str] = (),
    ) -> str:
        return await self.store.save(source_text, generated_payload, themes)

    async def query_insights(self, filters: InsightFilters | None = None) -> list[StoredInsight]:
        return await self.store.query(filters)

    async def search_insights(self, term: str) -> list[StoredInsight]:
        return await self.store.search(term)

    async def toggle_star(self, insight_id: str) -> bool:
        return await self.store.toggle_star(insight_id)

    async def archive_insight(self, insight_id: str) -> StoredInsight:
        return await self.store.archive(insight_id)

    async def delete_insight(self, insight_id: str) -> None:
        await self.store.delete(insight_id)

    async def track_action(
        self,
        insight_id: str,
        kind: ActionKind | str,
        payload: dict[str, Any] | None = None,
    ) -> StoredInsight:
        return await self.store.track_action(insight_id, kind, payload)
