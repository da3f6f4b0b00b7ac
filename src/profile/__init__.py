"""Interest profile: mines entries into interests, expertise and tone."""

from scatterbrain.profile.models import (
    AdaptiveSources,
    ContentPreferences,
    ExpertiseLevel,
    InterestScore,
    RecommendedSources,
    Tone,
    UserProfile,
)
from scatterbrain.profile.patterns import (
    DEFAULT_TABLES,
    CategoryPattern,
    KeywordTables,
    load_tables,
)
from scatterbrain.profile.services import (
    adaptive_sources,
    build_profile,
    needs_rebuild,
    personalized_formats,
    profile_strength,
)
from scatterbrain.profile.store import PROFILE_FILENAME, ProfileStore

__all__ = [
    "DEFAULT_TABLES",
    "PROFILE_FILENAME",
    "AdaptiveSources",
    "CategoryPattern",
    "ContentPreferences",
    "ExpertiseLevel",
    "InterestScore",
    "KeywordTables",
    "ProfileStore",
    "RecommendedSources",
    "Tone",
    "UserProfile",
    "adaptive_sources",
    "build_profile",
    "load_tables",
    "needs_rebuild",
    "personalized_formats",
    "profile_strength",
]
