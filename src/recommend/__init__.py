"""Repository recommendations from a skill profile."""

from .engine import RecommendationEngine, RecommendationError
from .filters import build_search_filters
from .models import FilterOverrides, ScoredRecommendation, SearchFilter, SkillProfile
from .scoring import calculate_match_score, generate_reasons

__all__ = [
    "RecommendationEngine",
    "RecommendationError",
    "build_search_filters",
    "FilterOverrides",
    "ScoredRecommendation",
    "SearchFilter",
    "SkillProfile",
    "calculate_match_score",
    "generate_reasons",
]
