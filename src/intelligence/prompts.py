"""LLM prompts for tiered thought analysis.

Each builder returns the system and user prompt for one tier. Higher
tiers reference more of the user's profile and ask for a richer JSON
shape; the shapes here must stay in step with ``intelligence.models``.
"""

from __future__ import annotations

from scatterbrain.entries.models import Entry
from scatterbrain.intelligence.models import AnalysisContext, InstructionPayload
from scatterbrain.intelligence.tiers import TIER_MAX_TOKENS, Tier

_JSON_ONLY = "Return ONLY the JSON object, no other text."


def _quote(entry: Entry) -> str:
    text = entry.body.strip()
    if entry.title:
        text = f"{entry.title.strip()}\n\n{text}"
    return f'"""\n{text}\n"""'


def _basic_prompts(entry: Entry, ctx: AnalysisContext) -> tuple[str, str]:
    system = (
        "You are a helpful thought analyst. Provide clear, encouraging analysis "
        "for a new user just starting their thought journey."
    )
    user = f"""Analyze this thought and provide a simple, encouraging JSON response:

{_quote(entry)}

Provide this structure:
{{
  "summary": "Simple, clear summary (1-2 sentences)",
  "keyInsights": ["Simple insight 1", "Simple insight 2"],
  "themes": ["theme1", "theme2"],
  "mood": "detected mood",
  "encouragement": "Encouraging message about their thought journey",
  "nextSteps": ["Simple action they could take"],
  "contentSuggestion": {{
    "platform": "best platform for this thought",
    "format": "simple format like 'short post' or 'note'"
  }}
}}

{_JSON_ONLY}"""
    return system, user


def _enhanced_prompts(entry: Entry, ctx: AnalysisContext) -> tuple[str, str]:
    interest = ctx.top_interest
    system = (
        f"You are an intelligent thought analyst learning about this user's {interest} "
        "interests. Provide more detailed analysis with personal touches."
    )
    user = f"""Analyze this thought from someone interested in {interest} with a {ctx.tone} tone:

{_quote(entry)}

Provide this enhanced JSON structure:
{{
  "summary": "Detailed summary connecting to their {interest} interests",
  "keyInsights": ["Insight 1", "Insight 2", "Insight 3"],
  "themes": ["theme1", "theme2", "theme3"],
  "mood": "detected mood",
  "personalConnections": ["How this connects to their {interest} interests"],
  "contentSuggestions": [
    {{
      "platform": "platform",
      "format": "format",
      "angle": "content angle for this format",
      "audience": "target audience"
    }}
  ],
  "actionableInsights": ["Specific actions they could take"],
  "growthOpportunities": ["Ways to develop this thought further"]
}}

{_JSON_ONLY}"""
    return system, user


def _adaptive_prompts(entry: Entry, ctx: AnalysisContext) -> tuple[str, str]:
    interest = ctx.top_interest
    themes = ", ".join(theme for theme, _ in ctx.recent_themes[:3]) or "(none yet)"
    system = (
        f"You are an adaptive AI assistant that knows this user has {ctx.entry_count} "
        f"thoughts, is interested in {interest}, and recently thinks about: {themes}. "
        "Provide highly personalized analysis."
    )
    user = f"""Analyze this thought from your regular user who has {ctx.entry_count} thoughts \
and prefers {ctx.complexity} explanations:

{_quote(entry)}

Consider their interest in {interest} and recent themes: {themes}

Provide this adaptive JSON structure:
{{
  "summary": "Personalized summary referencing their thought patterns",
  "keyInsights": ["Deep insight 1", "Deep insight 2", "Deep insight 3"],
  "themes": ["theme1", "theme2", "theme3"],
  "mood": "detected mood",
  "personalizedConnections": [
    "How this builds on their previous {themes} thoughts",
    "Connection to their {interest} interests"
  ],
  "adaptiveContentSuite": [
    {{
      "platform": "platform optimized for their style",
      "format": "format matching their {ctx.complexity} preference",
      "angle": "personalized angle",
      "audience": "their typical audience",
      "crossPlatformStrategy": "how to adapt across platforms"
    }}
  ],
  "strategicInsights": ["Strategic recommendations based on their pattern"],
  "thoughtEvolution": "How this thought shows growth from their {ctx.entry_count} thoughts",
  "adaptiveRecommendations": {{
    "nextTopics": ["Topics they might explore next"],
    "skillDevelopment": ["Skills to develop based on their interests"],
    "communityConnections": ["Relevant communities for their {interest} interests"]
  }}
}}

{_JSON_ONLY}"""
    return system, user


def _genius_prompts(entry: Entry, ctx: AnalysisContext) -> tuple[str, str]:
    interest = ctx.top_interest
    themes = ", ".join(f"{theme}({count})" for theme, count in ctx.recent_themes[:5])
    themes = themes or "(none yet)"
    expertise = ", ".join(ctx.expertise_areas) or interest
    system = (
        f"You are a genius-level AI assistant analyzing thoughts from a power user with "
        f"{ctx.entry_count} thoughts. This user has demonstrated deep thinking patterns in "
        f"{interest} and consistently explores: {themes}. Provide sophisticated, strategic "
        "analysis that matches their advanced thinking level."
    )
    user = f"""Analyze this thought from your power user ({ctx.entry_count} thoughts) who has \
established expertise in {expertise}:

{_quote(entry)}

Their thinking patterns show depth in: {themes}
Their style: {ctx.complexity} with {ctx.tone} tone

Provide this genius-level JSON structure:
{{
  "summary": "Strategic summary connecting to their established thought architecture",
  "keyInsights": ["Strategic insight 1", "Strategic insight 2", "Strategic insight 3", "Meta insight"],
  "themes": ["theme1", "theme2", "theme3", "theme4"],
  "mood": "detected mood",
  "strategicContext": {{
    "thoughtEvolution": "How this builds on their {ctx.entry_count} thought journey",
    "patternRecognition": "Deeper patterns in their thinking",
    "expertiseAreas": ["Areas where they show expertise"]
  }},
  "geniusContentStrategy": [
    {{
      "platform": "optimal platform for maximum impact",
      "format": "sophisticated format",
      "strategicAngle": "unique positioning angle",
      "audienceSegmentation": "detailed audience analysis",
      "thoughtLeadershipPotential": "how this positions them as a thought leader",
      "viralMechanics": "elements that could drive engagement",
      "crossPlatformOrchestration": "coordinated multi-platform strategy"
    }}
  ],
  "metaAnalysis": {{
    "cognitivePatterns": "Deep cognitive patterns observed",
    "innovationPotential": "Innovation opportunities in this thought",
    "intellectualConnections": "Connections to broader intellectual frameworks"
  }},
  "powerUserRecommendations": {{
    "thoughtLeadershipOpportunities": ["Opportunities to lead in their field"],
    "communityBuilding": ["Ways to build community around their ideas"],
    "knowledgeMonetization": ["Ways to monetize their expertise"],
    "influenceExpansion": ["Strategies to expand their influence"],
    "expertNetworking": ["High-value connections to pursue"]
  }},
  "adaptiveIntelligence": {{
    "predictiveInsights": ["Predictions about where their thinking is heading"],
    "emergingOpportunities": ["Emerging opportunities aligned with their expertise"],
    "strategicPivots": ["Strategic directions they might consider"]
  }}
}}

{_JSON_ONLY}"""
    return system, user


_BUILDERS = {
    Tier.BASIC: _basic_prompts,
    Tier.ENHANCED: _enhanced_prompts,
    Tier.ADAPTIVE: _adaptive_prompts,
    Tier.GENIUS: _genius_prompts,
}


def build_instruction(tier: Tier, entry: Entry, ctx: AnalysisContext) -> InstructionPayload:
    """Build the backend instruction for analyzing ``entry`` at ``tier``."""
    system, user = _BUILDERS[tier](entry, ctx)
    return InstructionPayload(
        tier=tier,
        system_prompt=system,
        user_prompt=user,
        max_tokens=TIER_MAX_TOKENS[tier],
    )
