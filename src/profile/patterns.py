"""Keyword tables driving interest, expertise and tone detection.

The tables are configuration, not state: ``KeywordTables`` is frozen, its
mappings are read-only, and it is passed into the builder explicitly.
``DEFAULT_TABLES`` ships with the package; ``load_tables`` reads a
replacement from TOML::

    [categories.cooking]
    keywords = ["recipe", "bake", "sourdough"]
    forums = ["r/Cooking"]
    content_formats = ["recipe_card"]
    platforms = ["instagram"]
    expert_terms = ["hydration", "maillard"]

    [tones]
    casual = ["lol", "tbh"]
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from scatterbrain.profile.models import Tone

logger = logging.getLogger(__name__)


class CategoryPattern(BaseModel):
    """Static knowledge attached to one interest category."""

    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...]
    forums: tuple[str, ...] = ()
    content_formats: tuple[str, ...] = ()
    platforms: tuple[str, ...] = ()
    expert_terms: tuple[str, ...] = ()


_DEFAULT_CATEGORIES: Mapping[str, CategoryPattern] = MappingProxyType({
    "technology": CategoryPattern(
        keywords=(
            "api", "code", "programming", "software", "ai", "ml", "javascript", "react",
            "node", "database", "cloud", "aws", "docker", "kubernetes", "saas", "startup",
            "tech", "development", "frontend", "backend", "mobile", "web", "app",
        ),
        forums=(
            "r/programming", "r/webdev", "r/javascript", "r/MachineLearning",
            "Hacker News", "Stack Overflow",
        ),
        content_formats=("technical_blog", "tutorial", "github_readme", "dev_twitter"),
        platforms=("dev.to", "medium", "twitter", "linkedin", "github"),
        expert_terms=(
            "architecture", "scalability", "optimization", "microservices", "devops", "ci/cd",
        ),
    ),
    "gaming": CategoryPattern(
        keywords=(
            "game", "gaming", "esports", "twitch", "stream", "pokemon", "nintendo", "ps5",
            "xbox", "pc", "mobile gaming", "indie", "mmorpg", "fps", "rpg", "strategy",
        ),
        forums=("r/gaming", "r/GameDev", "r/pcgaming", "r/nintendo", "r/pokemon"),
        content_formats=("review", "guide", "stream_highlight", "tiktok_reaction"),
        platforms=("youtube", "twitch", "tiktok", "reddit", "discord"),
        expert_terms=("meta", "competitive", "esports", "tournament", "professional"),
    ),
    "music": CategoryPattern(
        keywords=(
            "music", "song", "album", "artist", "band", "guitar", "piano", "drums", "vocals",
            "recording", "studio", "mix", "master", "bluegrass", "jazz", "rock", "pop",
            "hip hop", "electronic",
        ),
        forums=("r/WeAreTheMusicMakers", "r/edmproduction", "r/Guitar", "r/piano"),
        content_formats=("song_analysis", "playlist_curation", "artist_spotlight", "tutorial"),
        platforms=("youtube", "spotify", "instagram", "soundcloud", "bandcamp"),
        expert_terms=("mastering", "production", "mixing", "recording", "studio"),
    ),
    "business": CategoryPattern(
        keywords=(
            "business", "startup", "entrepreneur", "marketing", "sales", "revenue", "profit",
            "strategy", "growth", "funding", "investor", "product", "market", "customer",
            "b2b", "b2c", "saas", "freelance",
        ),
        forums=("r/entrepreneur", "r/startups", "IndieHackers", "Product Hunt"),
        content_formats=("case_study", "thought_leadership", "industry_analysis", "how_to"),
        platforms=("linkedin", "medium", "company_blog", "twitter"),
        expert_terms=("metrics", "kpis", "conversion", "retention", "churn", "valuation"),
    ),
    "creative": CategoryPattern(
        keywords=(
            "art", "design", "creative", "illustration", "photography", "video", "animation",
            "drawing", "painting", "sculpture", "digital art", "graphic design", "ui", "ux",
            "brand",
        ),
        forums=("r/art", "r/Design", "r/photography", "r/graphic_design"),
        content_formats=("portfolio_piece", "design_breakdown", "creative_process", "inspiration"),
        platforms=("behance", "dribbble", "instagram", "artstation"),
        expert_terms=("portfolio", "client", "brief", "campaign", "brand guidelines"),
    ),
    "fitness": CategoryPattern(
        keywords=(
            "fitness", "workout", "gym", "exercise", "health", "nutrition", "diet", "training",
            "cardio", "strength", "yoga", "running", "cycling", "bodybuilding", "crossfit",
        ),
        forums=("r/fitness", "r/bodybuilding", "r/running", "r/yoga"),
        content_formats=("workout_plan", "progress_update", "fitness_tip", "nutrition_guide"),
        platforms=("instagram", "youtube", "tiktok", "strava"),
        expert_terms=("macros", "periodization", "progressive overload", "biomechanics"),
    ),
    "lifestyle": CategoryPattern(
        keywords=(
            "life", "personal", "mindfulness", "productivity", "goals", "habits", "wellness",
            "travel", "food", "cooking", "family", "relationships", "self improvement",
        ),
        forums=("r/getmotivated", "r/productivity", "r/selfimprovement", "r/cooking"),
        content_formats=("personal_story", "life_tip", "reflection", "advice"),
        platforms=("instagram", "medium", "tiktok", "pinterest"),
    ),
})

_DEFAULT_TONES: Mapping[Tone, tuple[str, ...]] = MappingProxyType({
    Tone.CASUAL: ("lol", "tbh", "omg", "cool", "awesome", "fun"),
    Tone.PROFESSIONAL: ("strategy", "implement", "analyze", "optimize", "leverage", "execute"),
    Tone.ENTHUSIASTIC: ("amazing", "incredible", "love", "passion", "excited", "fantastic"),
    Tone.ANALYTICAL: ("data", "metrics", "analysis", "research", "study", "evidence"),
})


class KeywordTables(BaseModel):
    """Category, expertise and tone lexicons used by the profile builder."""

    model_config = ConfigDict(frozen=True)

    categories: Mapping[str, CategoryPattern] = Field(default_factory=lambda: _DEFAULT_CATEGORIES)
    tones: Mapping[Tone, tuple[str, ...]] = Field(default_factory=lambda: _DEFAULT_TONES)

    @field_validator("categories", "tones", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping) -> Mapping:
        return MappingProxyType(dict(value))

    @field_serializer("categories", "tones")
    def _plain_dict(self, value: Mapping) -> dict:
        return dict(value)

    def tone_words(self, tone: Tone) -> tuple[str, ...]:
        return self.tones.get(tone, ())


DEFAULT_TABLES = KeywordTables()


def load_tables(path: str | Path | None) -> KeywordTables:
    """Load keyword tables from TOML, falling back to the defaults.

    Sections omitted from the file keep their default contents.
    """
    if not path:
        return DEFAULT_TABLES
    toml_path = Path(path).expanduser()
    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
        tables = KeywordTables.model_validate(data)
    except (tomllib.TOMLDecodeError, OSError, ValidationError) as exc:
        logger.warning("Failed to load keyword tables from %s: %s", toml_path, exc)
        return DEFAULT_TABLES
    logger.info("Loaded %d interest categories from %s", len(tables.categories), toml_path)
    return tables
