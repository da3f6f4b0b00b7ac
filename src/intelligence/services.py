"""Tiered analysis orchestration.

``AnalysisEngine.analyze`` is the only place the engine suspends: one
awaited backend call. Everything before it (tier selection, context,
prompt) and after it (parsing, metadata) is pure, so a cancelled call
leaves nothing half-done.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import TypeAdapter, ValidationError

from scatterbrain.entries.models import Entry
from scatterbrain.errors import GenerationParseError
from scatterbrain.intelligence.backend import GenerativeBackend
from scatterbrain.intelligence.models import Analysis, AnalysisContext, Insight
from scatterbrain.intelligence.prompts import build_instruction
from scatterbrain.intelligence.tiers import (
    Tier,
    adaptive_features,
    growth_indicators,
    progression_status,
    tier_for_count,
)
from scatterbrain.llm import strip_json_fences
from scatterbrain.profile.models import UserProfile

logger = logging.getLogger(__name__)

# Entries (newest first) whose tags count as "recent themes"
RECENT_THEME_WINDOW = 10

_ANALYSIS_ADAPTER: TypeAdapter[Analysis] = TypeAdapter(Analysis)


# ---------------------------------------------------------------------------
# Pure steps
# ---------------------------------------------------------------------------


def select_tier(entry_count: int) -> Tier:
    """Tier for this call, recomputed from the entry count every time.

    A missing profile does not lower the tier; ``build_context`` supplies
    generic personalization inputs instead.
    """
    return tier_for_count(entry_count)


def recent_themes(
    history: Sequence[Entry], window: int = RECENT_THEME_WINDOW
) -> list[tuple[str, int]]:
    """Rank tags from the newest ``window`` entries by frequency.

    Ties keep first-seen order (newest entry first).
    """
    newest = sorted(history, key=lambda e: e.created_at, reverse=True)[:window]
    counts: Counter[str] = Counter()
    for entry in newest:
        counts.update(entry.tags)
    return counts.most_common()


def explanation_complexity(history: Sequence[Entry]) -> str:
    if not history:
        return "concise"
    average = sum(len(e.body) for e in history) / len(history)
    if average > 200:
        return "detailed"
    if average > 100:
        return "moderate"
    return "concise"


def build_context(
    profile: UserProfile | None,
    history: Sequence[Entry],
    entry_count: int,
) -> AnalysisContext:
    if profile is None:
        return AnalysisContext(entry_count=entry_count)
    return AnalysisContext(
        entry_count=entry_count,
        top_interest=profile.top_interest or "general",
        tone=str(profile.dominant_tone),
        complexity=explanation_complexity(history),
        recent_themes=recent_themes(history),
        expertise_areas=profile.expertise_areas(),
    )


def personalization_score(profile: UserProfile | None, distinct_themes: int) -> int:
    interests = len(profile.primary_interests) if profile is not None else 0
    score = min(60, 20 * interests) + min(30, 5 * distinct_themes) + 10
    return min(100, score)


def parse_analysis(raw: str, tier: Tier) -> Analysis:
    """Validate backend output against the schema for ``tier``.

    Raises:
        GenerationParseError: If the text is not a JSON object of that shape.
    """
    cleaned = strip_json_fences(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise GenerationParseError(f"{tier} analysis was not valid JSON: {exc}", raw=raw) from exc
    if not isinstance(data, dict):
        raise GenerationParseError(
            f"{tier} analysis must be a JSON object, got {type(data).__name__}", raw=raw
        )

    data["tier"] = tier.value
    try:
        return _ANALYSIS_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise GenerationParseError(
            f"{tier} analysis did not match the expected shape "
            f"({exc.error_count()} validation error(s))",
            raw=raw,
        ) from exc


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


class AnalysisEngine:
    """Selects a tier, calls the backend once, and returns a validated Insight."""

    def __init__(self, backend: GenerativeBackend) -> None:
        self._backend = backend

    async def analyze(
        self,
        entry: Entry,
        profile: UserProfile | None,
        entry_count: int,
        history: Sequence[Entry] = (),
    ) -> Insight:
        """Analyze one entry at the tier its owner has unlocked.

        Args:
            entry: The entry to analyze.
            profile: The owner's current profile, or None if never built.
            entry_count: The owner's total number of entries.
            history: The owner's entries, used for recent themes and style.

        Raises:
            GenerationBackendError: Backend unavailable or failed.
            GenerationParseError: Backend output had the wrong shape.
        """
        tier = select_tier(entry_count)
        context = build_context(profile, history, entry_count)
        payload = build_instruction(tier, entry, context)

        logger.info(
            "Running %s analysis for entry %s (%d entries)", tier, entry.id, entry_count
        )
        raw = await self._backend.complete(payload)
        analysis = parse_analysis(raw, tier)

        return Insight(
            entry_id=entry.id,
            analysis=analysis,
            intelligence_level=tier,
            entry_count=entry_count,
            adaptive_features=adaptive_features(tier),
            personalization_score=personalization_score(profile, context.distinct_theme_count),
            progression_status=progression_status(entry_count),
            growth_indicators=growth_indicators(tier),
            generated_at=datetime.now(tz=UTC),
        )
