"""Progressive intelligence: tier selection and tiered analysis."""

from scatterbrain.intelligence.backend import ClaudeBackend, GenerativeBackend
from scatterbrain.intelligence.models import (
    AdaptiveAnalysis,
    Analysis,
    AnalysisContext,
    BasicAnalysis,
    EnhancedAnalysis,
    GeniusAnalysis,
    Insight,
    InstructionPayload,
)
from scatterbrain.intelligence.prompts import build_instruction
from scatterbrain.intelligence.services import (
    AnalysisEngine,
    build_context,
    parse_analysis,
    personalization_score,
    select_tier,
)
from scatterbrain.intelligence.tiers import (
    TIER_MAX_TOKENS,
    TIER_THRESHOLDS,
    GrowthIndicator,
    ProgressionStatus,
    Tier,
    adaptive_features,
    growth_indicators,
    progression_status,
    tier_for_count,
)

__all__ = [
    "TIER_MAX_TOKENS",
    "TIER_THRESHOLDS",
    "AdaptiveAnalysis",
    "Analysis",
    "AnalysisContext",
    "AnalysisEngine",
    "BasicAnalysis",
    "ClaudeBackend",
    "EnhancedAnalysis",
    "GenerativeBackend",
    "GeniusAnalysis",
    "GrowthIndicator",
    "Insight",
    "InstructionPayload",
    "ProgressionStatus",
    "Tier",
    "adaptive_features",
    "build_context",
    "build_instruction",
    "growth_indicators",
    "parse_analysis",
    "personalization_score",
    "progression_status",
    "select_tier",
    "tier_for_count",
]
