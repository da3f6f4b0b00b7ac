"""Progressive intelligence tiers.

``TIER_THRESHOLDS`` is the one table that maps entry counts to tiers.
Tier selection, progression messages and growth indicators all read it,
so a status display can never disagree with the tier actually used.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Tier(StrEnum):
    """Analysis depth, from least to most personalized."""

    BASIC = "basic"
    ENHANCED = "enhanced"
    ADAPTIVE = "adaptive"
    GENIUS = "genius"


# Minimum entry count that unlocks each tier, in ascending order.
TIER_THRESHOLDS: tuple[tuple[Tier, int], ...] = (
    (Tier.BASIC, 0),
    (Tier.ENHANCED, 4),
    (Tier.ADAPTIVE, 11),
    (Tier.GENIUS, 25),
)

TIER_MAX_TOKENS: dict[Tier, int] = {
    Tier.BASIC: 1500,
    Tier.ENHANCED: 2500,
    Tier.ADAPTIVE: 3500,
    Tier.GENIUS: 4500,
}

TIER_DISPLAY_NAMES: dict[Tier, str] = {
    Tier.BASIC: "Basic Analysis",
    Tier.ENHANCED: "Enhanced Analysis",
    Tier.ADAPTIVE: "Adaptive Intelligence",
    Tier.GENIUS: "Genius Mode",
}

_UNLOCK_PITCH: dict[Tier, str] = {
    Tier.ENHANCED: "with personal insights",
    Tier.ADAPTIVE: "with pattern recognition",
    Tier.GENIUS: "with strategic insights",
}

ADAPTIVE_FEATURES: dict[Tier, tuple[str, ...]] = {
    Tier.BASIC: (
        "Basic analysis",
        "Encouraging feedback",
        "Simple content suggestions",
        "Getting started guidance",
    ),
    Tier.ENHANCED: (
        "Interest-aware analysis",
        "Personal connections",
        "Enhanced content suggestions",
        "Growth opportunities identification",
    ),
    Tier.ADAPTIVE: (
        "Pattern recognition",
        "Personalized content suite",
        "Strategic insights",
        "Cross-platform optimization",
        "Community recommendations",
    ),
    Tier.GENIUS: (
        "Meta-cognitive analysis",
        "Thought leadership positioning",
        "Sophisticated content strategy",
        "Innovation opportunity detection",
        "Strategic influence expansion",
        "Predictive insights",
        "Expert networking suggestions",
    ),
}

_GROWTH_CURRENT: dict[Tier, str] = {
    Tier.BASIC: "Building foundation",
    Tier.ENHANCED: "Learning your patterns",
    Tier.ADAPTIVE: "Personalized insights active",
    Tier.GENIUS: "Maximum intelligence achieved",
}


class ProgressionStatus(BaseModel):
    """Human-readable distance to the next tier."""

    level: str
    message: str
    unlock_soon: str | None = None
    entries_to_next: int = 0


class GrowthIndicator(BaseModel):
    current: str
    next: str
    progress: int


def tier_for_count(entry_count: int) -> Tier:
    """Return the highest tier whose threshold ``entry_count`` reaches."""
    selected = Tier.BASIC
    for tier, threshold in TIER_THRESHOLDS:
        if entry_count >= threshold:
            selected = tier
    return selected


def next_tier(tier: Tier) -> Tier | None:
    tiers = [t for t, _ in TIER_THRESHOLDS]
    index = tiers.index(tier)
    return tiers[index + 1] if index + 1 < len(tiers) else None


def unlock_threshold(tier: Tier) -> int:
    return dict(TIER_THRESHOLDS)[tier]


def adaptive_features(tier: Tier) -> list[str]:
    return list(ADAPTIVE_FEATURES[tier])


def progression_status(entry_count: int) -> ProgressionStatus:
    current = tier_for_count(entry_count)
    upcoming = next_tier(current)
    if current is Tier.BASIC:
        level = "Getting Started"
    else:
        level = f"{TIER_DISPLAY_NAMES[current]} Active"

    if upcoming is None:
        return ProgressionStatus(
            level=level,
            message=(
                "Maximum intelligence level achieved! "
                "Every thought now receives genius-level analysis."
            ),
        )

    remaining = unlock_threshold(upcoming) - entry_count
    noun = "thought" if remaining == 1 else "thoughts"
    name = TIER_DISPLAY_NAMES[upcoming]
    return ProgressionStatus(
        level=level,
        message=f"Add {remaining} more {noun} to unlock {name} {_UNLOCK_PITCH[upcoming]}!",
        unlock_soon=name,
        entries_to_next=remaining,
    )


def growth_indicators(tier: Tier) -> GrowthIndicator:
    tiers = [t for t, _ in TIER_THRESHOLDS]
    progress = round(100 * (tiers.index(tier) + 1) / len(tiers))
    upcoming = next_tier(tier)
    if upcoming is None:
        next_step = "Continue adding thoughts for even deeper insights"
    else:
        next_step = (
            f"Reach {unlock_threshold(upcoming)} thoughts to unlock {TIER_DISPLAY_NAMES[upcoming]}"
        )
    return GrowthIndicator(current=_GROWTH_CURRENT[tier], next=next_step, progress=progress)
