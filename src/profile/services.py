"""Interest profile building and profile-derived helpers.

Everything here is deterministic and side-effect free: the same entries,
tables and ``now`` always produce the same profile. Callers decide when
to rebuild (see ``needs_rebuild``) and whether to persist the result.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from scatterbrain.entries.models import Entry
from scatterbrain.errors import ProfileBuildError
from scatterbrain.profile.models import (
    AdaptiveSources,
    ContentPreferences,
    ExpertiseLevel,
    InterestScore,
    RecommendedSources,
    Tone,
    UserProfile,
)
from scatterbrain.profile.patterns import DEFAULT_TABLES, KeywordTables

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RECENT_DAYS = 7
RECENT_WEIGHT = 2
TOP_INTERESTS = 5
INTERMEDIATE_MIN_BODY_LENGTH = 200
EXPERT_MIN_TERMS = 2

MAX_FORMATS = 8
MAX_PLATFORMS = 6
MAX_FORUMS = 10
MAX_KEYWORDS = 20

DEFAULT_FORMATS = ["blog_post", "social_media_post", "quick_note"]


# ---------------------------------------------------------------------------
# Per-entry signals
# ---------------------------------------------------------------------------


def match_categories(text: str, tables: KeywordTables = DEFAULT_TABLES) -> dict[str, list[str]]:
    """Return category → keywords found in ``text``.

    Matching is plain substring containment on lowercased text, so short
    keywords also hit inside longer words ("art" in "start").
    """
    normalized = text.lower()
    found: dict[str, list[str]] = {}
    for category, pattern in tables.categories.items():
        hits = [kw for kw in pattern.keywords if kw.lower() in normalized]
        if hits:
            found[category] = hits
    return found


def assess_expertise(
    entry: Entry,
    category: str,
    tables: KeywordTables = DEFAULT_TABLES,
) -> ExpertiseLevel:
    """Estimate expertise shown by a single entry for one category."""
    pattern = tables.categories.get(category)
    if pattern is None or not pattern.expert_terms:
        return ExpertiseLevel.BEGINNER
    normalized = entry.text.lower()
    matches = sum(1 for term in pattern.expert_terms if term in normalized)
    if matches >= EXPERT_MIN_TERMS:
        return ExpertiseLevel.EXPERT
    if len(entry.body) > INTERMEDIATE_MIN_BODY_LENGTH and matches >= 1:
        return ExpertiseLevel.INTERMEDIATE
    return ExpertiseLevel.BEGINNER


def determine_tone(text: str, tables: KeywordTables = DEFAULT_TABLES) -> Tone:
    """Return the tone with the most lexicon hits.

    Ties (including no hits at all) go to the earliest declared ``Tone``.
    """
    normalized = text.lower()
    hits = {
        tone: sum(1 for word in tables.tone_words(tone) if word in normalized) for tone in Tone
    }
    return max(Tone, key=lambda tone: hits[tone])


# ---------------------------------------------------------------------------
# Profile building
# ---------------------------------------------------------------------------


@dataclass
class _Tally:
    category: str
    last_seen_at: datetime
    score: int = 0
    recent: int = 0
    total: int = 0
    keywords: list[str] = field(default_factory=list)

    def add(self, matched: list[str], weight: int, seen_at: datetime) -> None:
        self.score += len(matched) * weight
        self.total += 1
        if weight == RECENT_WEIGHT:
            self.recent += 1
        for kw in matched:
            if kw not in self.keywords:
                self.keywords.append(kw)
        if seen_at > self.last_seen_at:
            self.last_seen_at = seen_at

    def freeze(self) -> InterestScore:
        return InterestScore(
            category=self.category,
            score=self.score,
            matched_keywords=list(self.keywords),
            recent_mention_count=self.recent,
            total_mention_count=self.total,
            last_seen_at=self.last_seen_at,
        )


def _coerce_entry(raw: Entry | Mapping[str, Any]) -> Entry:
    if isinstance(raw, Entry):
        return raw
    if isinstance(raw, Mapping):
        try:
            return Entry.model_validate(raw)
        except ValidationError as exc:
            raise ProfileBuildError(
                f"malformed entry {raw.get('id', '?')!r}: {exc.error_count()} validation error(s)"
            ) from exc
    raise ProfileBuildError(f"unsupported entry type {type(raw).__name__}")


def _dedupe(items: Iterable[str], limit: int) -> list[str]:
    seen: list[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen[:limit]


def build_profile(
    entries: Iterable[Entry | Mapping[str, Any]],
    tables: KeywordTables = DEFAULT_TABLES,
    *,
    now: datetime | None = None,
    recent_days: int = RECENT_DAYS,
    top_n: int = TOP_INTERESTS,
) -> UserProfile:
    """Mine entries into a fresh ``UserProfile``.

    Never raises: entries that fail validation are logged and skipped. An
    empty history yields an empty profile with a casual tone.

    Args:
        entries: The user's full entry history, in any order.
        tables: Keyword tables to match against.
        now: Reference time for recency weighting and ``last_updated_at``.
        recent_days: Entries at most this old count double.
        top_n: Number of primary interests to keep.
    """
    now = now or datetime.now(tz=UTC)
    entries = list(entries)
    recent_cutoff = now - timedelta(days=recent_days)

    tallies: dict[str, _Tally] = {}
    expertise: dict[str, ExpertiseLevel] = {}
    tone_votes: Counter[Tone] = Counter()

    for raw in entries:
        try:
            entry = _coerce_entry(raw)
        except ProfileBuildError as exc:
            logger.warning("Skipping entry during profile build: %s", exc)
            continue

        tone_votes[determine_tone(entry.text, tables)] += 1
        weight = RECENT_WEIGHT if entry.created_at >= recent_cutoff else 1

        for category, matched in match_categories(entry.text, tables).items():
            tally = tallies.get(category)
            if tally is None:
                tally = tallies[category] = _Tally(category, entry.created_at)
            tally.add(matched, weight, entry.created_at)

            # Expertise only ever moves up
            level = assess_expertise(entry, category, tables)
            current = expertise.get(category, ExpertiseLevel.BEGINNER)
            expertise[category] = level if level.rank > current.rank else current

    ranked = sorted(
        tallies.values(),
        key=lambda t: (-t.score, -t.last_seen_at.timestamp(), t.category),
    )
    primary = [t.freeze() for t in ranked[:top_n]]

    dominant_tone = max(Tone, key=lambda tone: tone_votes[tone])

    formats: list[str] = []
    platforms: list[str] = []
    forums: list[str] = []
    keywords: list[str] = []
    for interest in primary:
        keywords.extend(interest.matched_keywords)
        pattern = tables.categories.get(interest.category)
        if pattern is None:
            continue
        formats.extend(pattern.content_formats)
        platforms.extend(pattern.platforms)
        forums.extend(pattern.forums)

    profile = UserProfile(
        primary_interests=primary,
        expertise_level=expertise,
        dominant_tone=dominant_tone,
        content_preferences=ContentPreferences(
            formats=_dedupe(formats, MAX_FORMATS),
            platforms=_dedupe(platforms, MAX_PLATFORMS),
        ),
        recommended_sources=RecommendedSources(
            forums=_dedupe(forums, MAX_FORUMS),
            platforms=_dedupe(platforms, MAX_PLATFORMS),
            keywords=_dedupe(keywords, MAX_KEYWORDS),
        ),
        last_updated_at=now,
        entry_count_at_build=len(entries),
    )
    logger.debug(
        "Built profile from %d entries: %d categories, tone=%s",
        len(entries),
        len(tallies),
        dominant_tone,
    )
    return profile


def needs_rebuild(profile: UserProfile | None, current_entry_count: int) -> bool:
    """True when the entry source has grown past what the profile saw."""
    if profile is None:
        return True
    return profile.entry_count_at_build < current_entry_count


# ---------------------------------------------------------------------------
# Profile-derived helpers
# ---------------------------------------------------------------------------


def adaptive_sources(
    profile: UserProfile | None,
    tables: KeywordTables = DEFAULT_TABLES,
    topic: str | None = None,
) -> AdaptiveSources:
    """Pick research communities and keywords that fit the user's interests."""
    if profile is None or not profile.has_interests:
        return AdaptiveSources(
            reddit=["r/all", "r/todayilearned"],
            forums=["Hacker News", "Reddit"],
            keywords=[topic] if topic else ["trending", "popular"],
        )

    if topic:
        lowered = topic.lower()
        relevant = [
            interest
            for interest in profile.primary_interests
            if interest.category in lowered
            or any(kw.lower() in lowered for kw in interest.matched_keywords)
        ]
    else:
        relevant = profile.primary_interests[:3]
    if not relevant:
        relevant = [profile.primary_interests[0]]

    reddit: list[str] = []
    forums: list[str] = []
    keywords: list[str] = [topic] if topic else []
    for interest in relevant:
        pattern = tables.categories.get(interest.category)
        if pattern is None:
            continue
        reddit.extend(f for f in pattern.forums if f.startswith("r/"))
        forums.extend(f for f in pattern.forums if not f.startswith("r/"))
        keywords.extend(interest.matched_keywords[:5])

    return AdaptiveSources(
        reddit=_dedupe(reddit, 8),
        forums=_dedupe(forums, 6),
        keywords=_dedupe(keywords, 15),
    )


def personalized_formats(profile: UserProfile | None) -> list[str]:
    if profile is None or not profile.has_interests:
        return list(DEFAULT_FORMATS)
    return profile.content_preferences.formats[:6]


def profile_strength(profile: UserProfile | None) -> int:
    """Total score across primary interests."""
    if profile is None:
        return 0
    return sum(interest.score for interest in profile.primary_interests)
