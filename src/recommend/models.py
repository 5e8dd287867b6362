"""Recommendation inputs and outputs."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from github_api.models import Issue, Repository
from shared_types import ExperienceLevel


class SkillProfile(BaseModel):
    """Languages, frameworks, interests and experience driving recommendations."""

    languages: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER

    @field_validator("languages", "frameworks", "interests", mode="before")
    @classmethod
    def _dedupe(cls, v):
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            return v
        seen: list[str] = []
        keys: set[str] = set()
        for item in v:
            if not isinstance(item, str):
                return v
            item = item.strip()
            if item and item.lower() not in keys:
                keys.add(item.lower())
                seen.append(item)
        return seen

    def is_empty(self) -> bool:
        return not (self.languages or self.frameworks or self.interests)


@dataclass
class SearchFilter:
    """One repository search. ``None`` star bounds mean unbounded."""

    language: Optional[str] = None
    min_stars: Optional[int] = None
    max_stars: Optional[int] = None
    has_good_first_issues: bool = False
    topics: list[str] = field(default_factory=list)

    def to_query(self) -> str:
        """GitHub search syntax: space-joined qualifiers."""
        parts = ["is:public", "archived:false"]
        if self.language:
            parts.append(f"language:{self.language}")
        if self.has_good_first_issues:
            parts.append("good-first-issues:>0")
        parts.extend(f"topic:{topic}" for topic in self.topics)
        if self.min_stars is not None:
            parts.append(f"stars:>={self.min_stars}")
        if self.max_stars is not None:
            parts.append(f"stars:<={self.max_stars}")
        return " ".join(parts)


class FilterOverrides(BaseModel):
    """Caller-supplied fields that replace the computed filter values."""

    language: Optional[str] = None
    min_stars: Optional[int] = Field(default=None, ge=0)
    max_stars: Optional[int] = Field(default=None, ge=0)
    has_good_first_issues: Optional[bool] = None
    topics: Optional[list[str]] = None

    def apply(self, search: SearchFilter) -> SearchFilter:
        for name, value in self.model_dump(exclude_none=True).items():
            setattr(search, name, value)
        return search


@dataclass
class ScoredRecommendation:
    repository: Repository
    match_score: int
    reasons: list[str]
    suggested_issues: list[Issue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "repository": self.repository.model_dump(mode="json"),
            "match_score": self.match_score,
            "reasons": list(self.reasons),
            "suggested_issues": [issue.model_dump(mode="json") for issue in self.suggested_issues],
        }
