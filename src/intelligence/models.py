"""Tiered analysis data types.

Each tier asks the backend for a different JSON shape, so each tier has
its own schema. ``Analysis`` is a tagged union on ``tier``: code holding a
``BasicAnalysis`` simply has no ``meta_analysis`` attribute to misread.
The backend speaks camelCase; fields are snake_case with camel aliases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from scatterbrain.intelligence.tiers import GrowthIndicator, ProgressionStatus, Tier


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


class ContentSuggestion(_Schema):
    platform: str = ""
    format: str = ""
    angle: str = ""
    audience: str = ""


class AdaptiveContentPiece(ContentSuggestion):
    cross_platform_strategy: str = ""


class AdaptiveRecommendations(_Schema):
    next_topics: list[str] = Field(default_factory=list)
    skill_development: list[str] = Field(default_factory=list)
    community_connections: list[str] = Field(default_factory=list)


class StrategicContext(_Schema):
    thought_evolution: str = ""
    pattern_recognition: str = ""
    expertise_areas: list[str] = Field(default_factory=list)


class GeniusContentPiece(_Schema):
    platform: str = ""
    format: str = ""
    strategic_angle: str = ""
    audience_segmentation: str = ""
    thought_leadership_potential: str = ""
    viral_mechanics: str = ""
    cross_platform_orchestration: str = ""


class MetaAnalysis(_Schema):
    cognitive_patterns: str = ""
    innovation_potential: str = ""
    intellectual_connections: str = ""


class PowerUserRecommendations(_Schema):
    thought_leadership_opportunities: list[str] = Field(default_factory=list)
    community_building: list[str] = Field(default_factory=list)
    knowledge_monetization: list[str] = Field(default_factory=list)
    influence_expansion: list[str] = Field(default_factory=list)
    expert_networking: list[str] = Field(default_factory=list)


class PredictiveOutlook(_Schema):
    predictive_insights: list[str] = Field(default_factory=list)
    emerging_opportunities: list[str] = Field(default_factory=list)
    strategic_pivots: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Per-tier results
# ---------------------------------------------------------------------------


class _BaseAnalysis(_Schema):
    summary: str
    key_insights: list[str] = Field(default_factory=list)
    themes: list[str]
    mood: str


class BasicAnalysis(_BaseAnalysis):
    tier: Literal["basic"] = "basic"
    encouragement: str = ""
    next_steps: list[str] = Field(default_factory=list)
    content_suggestion: ContentSuggestion | None = None


class EnhancedAnalysis(_BaseAnalysis):
    tier: Literal["enhanced"] = "enhanced"
    personal_connections: list[str] = Field(default_factory=list)
    content_suggestions: list[ContentSuggestion] = Field(default_factory=list)
    actionable_insights: list[str] = Field(default_factory=list)
    growth_opportunities: list[str] = Field(default_factory=list)


class AdaptiveAnalysis(_BaseAnalysis):
    tier: Literal["adaptive"] = "adaptive"
    personalized_connections: list[str] = Field(default_factory=list)
    adaptive_content_suite: list[AdaptiveContentPiece] = Field(default_factory=list)
    strategic_insights: list[str] = Field(default_factory=list)
    thought_evolution: str = ""
    adaptive_recommendations: AdaptiveRecommendations = Field(
        default_factory=AdaptiveRecommendations
    )


class GeniusAnalysis(_BaseAnalysis):
    tier: Literal["genius"] = "genius"
    strategic_context: StrategicContext = Field(default_factory=StrategicContext)
    genius_content_strategy: list[GeniusContentPiece] = Field(default_factory=list)
    meta_analysis: MetaAnalysis = Field(default_factory=MetaAnalysis)
    power_user_recommendations: PowerUserRecommendations = Field(
        default_factory=PowerUserRecommendations
    )
    adaptive_intelligence: PredictiveOutlook = Field(default_factory=PredictiveOutlook)


Analysis = Annotated[
    BasicAnalysis | EnhancedAnalysis | AdaptiveAnalysis | GeniusAnalysis,
    Field(discriminator="tier"),
]


# ---------------------------------------------------------------------------
# Engine inputs and outputs
# ---------------------------------------------------------------------------


class AnalysisContext(BaseModel):
    """Personalization inputs derived from the profile and entry history."""

    entry_count: int = 0
    top_interest: str = "general"
    tone: str = "casual"
    complexity: str = "concise"
    recent_themes: list[tuple[str, int]] = Field(default_factory=list)
    expertise_areas: list[str] = Field(default_factory=list)

    @property
    def distinct_theme_count(self) -> int:
        return len(self.recent_themes)


class InstructionPayload(BaseModel):
    """What gets sent to the generative backend for one analysis."""

    tier: Tier
    system_prompt: str
    user_prompt: str
    max_tokens: int


class Insight(BaseModel):
    """A validated analysis plus the metadata the engine derives itself."""

    entry_id: str
    analysis: Analysis
    intelligence_level: Tier
    entry_count: int
    adaptive_features: list[str] = Field(default_factory=list)
    personalization_score: int
    progression_status: ProgressionStatus
    growth_indicators: GrowthIndicator
    generated_at: datetime

    @property
    def themes(self) -> list[str]:
        return self.analysis.themes

    @property
    def mood(self) -> str:
        return self.analysis.mood

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict for persistence alongside the source text."""
        return self.model_dump(mode="json")
