"""Profile domain models: pure Pydantic v2 data types.

A ``UserProfile`` is an immutable value. Rebuilding produces a new one
that callers swap in; nothing mutates a profile in place.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ExpertiseLevel(StrEnum):
    """How sophisticated a user's writing about a category is."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        return _EXPERTISE_RANK[self]


_EXPERTISE_RANK = {
    ExpertiseLevel.BEGINNER: 0,
    ExpertiseLevel.INTERMEDIATE: 1,
    ExpertiseLevel.EXPERT: 2,
}


class Tone(StrEnum):
    """Writing tone. Declaration order is the tie-break order."""

    CASUAL = "casual"
    PROFESSIONAL = "professional"
    ENTHUSIASTIC = "enthusiastic"
    ANALYTICAL = "analytical"


class InterestScore(BaseModel):
    """Accumulated evidence for one interest category."""

    model_config = ConfigDict(frozen=True)

    category: str
    score: int
    matched_keywords: list[str] = Field(default_factory=list)
    recent_mention_count: int = 0
    total_mention_count: int = 0
    last_seen_at: datetime


class ContentPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    formats: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)


class RecommendedSources(BaseModel):
    model_config = ConfigDict(frozen=True)

    forums: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class UserProfile(BaseModel):
    """Interest profile mined from a user's entries.

    ``primary_interests`` holds at most five categories, highest score
    first. ``entry_count_at_build`` records how many entries the profile
    was built from so callers can tell when it is stale.
    """

    model_config = ConfigDict(frozen=True)

    primary_interests: list[InterestScore] = Field(default_factory=list)
    expertise_level: dict[str, ExpertiseLevel] = Field(default_factory=dict)
    dominant_tone: Tone = Tone.CASUAL
    content_preferences: ContentPreferences = Field(default_factory=ContentPreferences)
    recommended_sources: RecommendedSources = Field(default_factory=RecommendedSources)
    last_updated_at: datetime
    entry_count_at_build: int = 0

    @property
    def top_interest(self) -> str | None:
        if not self.primary_interests:
            return None
        return self.primary_interests[0].category

    @property
    def has_interests(self) -> bool:
        return bool(self.primary_interests)

    def expertise_areas(self, minimum: ExpertiseLevel = ExpertiseLevel.INTERMEDIATE) -> list[str]:
        """Categories at or above ``minimum``, in primary-interest order first."""
        ordered = [i.category for i in self.primary_interests]
        ordered += sorted(c for c in self.expertise_level if c not in ordered)
        return [
            c
            for c in ordered
            if c in self.expertise_level and self.expertise_level[c].rank >= minimum.rank
        ]


class AdaptiveSources(BaseModel):
    """Research sources tailored to a profile (and optionally a topic)."""

    reddit: list[str] = Field(default_factory=list)
    forums: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
