"""Skill and contribution analysis over a user's GitHub footprint."""

from .contributions import ContributionAggregator, ContributionHistory, compute_stats, summarize
from .skills import SkillAnalysisResult, SkillAnalyzer

__all__ = [
    "ContributionAggregator",
    "ContributionHistory",
    "compute_stats",
    "summarize",
    "SkillAnalysisResult",
    "SkillAnalyzer",
]
