"""Local insight store: persisted analysis results with indexed lookup."""

from scatterbrain.insights.models import (
    ActionKind,
    DateRange,
    InsightFilters,
    InsightUpdate,
    StoredInsight,
    UserActions,
)
from scatterbrain.insights.store import STORE_FILENAME, InsightStore, generate_search_terms

__all__ = [
    "STORE_FILENAME",
    "ActionKind",
    "DateRange",
    "InsightFilters",
    "InsightStore",
    "InsightUpdate",
    "StoredInsight",
    "UserActions",
    "generate_search_terms",
]
