"""Turn a skill profile into repository search filters."""

from typing import Optional

from recommend.models import FilterOverrides, SearchFilter, SkillProfile
from shared_types import ExperienceLevel

# (min_stars, max_stars) per experience level; None is unbounded
STAR_BOUNDS: dict[ExperienceLevel, tuple[int, Optional[int]]] = {
    ExperienceLevel.BEGINNER: (10, 5000),
    ExperienceLevel.INTERMEDIATE: (50, 20000),
    ExperienceLevel.ADVANCED: (100, None),
}

DEFAULT_FILTER = SearchFilter(min_stars=10, max_stars=1000, has_good_first_issues=True)


def star_bounds(level: ExperienceLevel) -> tuple[int, Optional[int]]:
    return STAR_BOUNDS.get(level, STAR_BOUNDS[ExperienceLevel.BEGINNER])


def build_search_filters(
    skills: SkillProfile, overrides: Optional[FilterOverrides] = None
) -> list[SearchFilter]:
    """One filter per language; topic-only when there are only interests; else a default.

    Fields set in ``overrides`` replace the computed values on every filter.
    """
    min_stars, max_stars = star_bounds(skills.experience_level)
    beginner = skills.experience_level == ExperienceLevel.BEGINNER

    filters = [
        SearchFilter(
            language=language.lower(),
            min_stars=min_stars,
            max_stars=max_stars,
            has_good_first_issues=beginner,
            topics=list(skills.interests),
        )
        for language in skills.languages
    ]
    if not skills.languages and skills.interests:
        filters.append(
            SearchFilter(
                min_stars=min_stars,
                max_stars=max_stars,
                has_good_first_issues=beginner,
                topics=list(skills.interests),
            )
        )
    if not filters:
        filters.append(
            SearchFilter(
                min_stars=DEFAULT_FILTER.min_stars,
                max_stars=DEFAULT_FILTER.max_stars,
                has_good_first_issues=DEFAULT_FILTER.has_good_first_issues,
            )
        )

    if overrides is not None:
        filters = [overrides.apply(f) for f in filters]
    return filters
