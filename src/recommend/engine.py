"""Recommendation engine: search, deduplicate, score, attach issues."""

import asyncio
from typing import Iterable, Optional

import structlog

from github_api import GitHubApiError, GitHubClient, Issue, Repository
from recommend.filters import build_search_filters
from recommend.models import FilterOverrides, ScoredRecommendation, SearchFilter, SkillProfile
from recommend.personalize import gather_personalization
from recommend.scoring import calculate_match_score, generate_reasons
from shared_types import ExperienceLevel

logger = structlog.get_logger()

SEARCH_RESULTS_PER_FILTER = 50
MAX_SCORED_CANDIDATES = 20
MAX_SUGGESTED_ISSUES = 3
TRENDING_MIN_STARS = 100


class RecommendationError(Exception):
    """Recommendations could not be produced at all.

    ``upstream`` holds the GitHub failure behind it, when there is one.
    """

    def __init__(self, message: str, upstream: Optional[GitHubApiError] = None):
        super().__init__(message)
        self.upstream = upstream


def dedupe_by_id(repositories: Iterable[Repository]) -> list[Repository]:
    """First occurrence of each repository id, order preserved."""
    seen: set[int] = set()
    unique = []
    for repo in repositories:
        if repo.id not in seen:
            seen.add(repo.id)
            unique.append(repo)
    return unique


class RecommendationEngine:
    def __init__(self, client: GitHubClient):
        self.client = client

    async def search_candidates(self, filters: list[SearchFilter]) -> list[Repository]:
        """Run one search per filter and union the results by id.

        A failing filter is logged and skipped. If every filter fails the
        last error is raised as ``RecommendationError``.
        """
        found: list[Repository] = []
        last_error: Optional[GitHubApiError] = None
        failures = 0
        for search in filters:
            query = search.to_query()
            try:
                found.extend(
                    await self.client.search_repositories(
                        query, sort="stars", order="desc", per_page=SEARCH_RESULTS_PER_FILTER
                    )
                )
            except GitHubApiError as e:
                failures += 1
                last_error = e
                logger.warning("recommend.search_failed", query=query, error=str(e))

        if filters and failures == len(filters):
            raise RecommendationError("Failed to search repositories", upstream=last_error)

        unique = dedupe_by_id(found)
        logger.info("recommend.candidates_found", filters=len(filters), unique=len(unique))
        return unique

    async def get_suggested_issues(self, repo: Repository, skills: SkillProfile) -> list[Issue]:
        """Up to three open issues; beginners get good-first-issues when any exist."""
        try:
            owner, name = repo.split_full_name()
            if skills.experience_level == ExperienceLevel.BEGINNER:
                good_first = await self.client.list_good_first_issues(owner, name)
                if good_first:
                    return good_first[:MAX_SUGGESTED_ISSUES]
            issues = await self.client.list_repo_issues(owner, name)
            return issues[:MAX_SUGGESTED_ISSUES]
        except (GitHubApiError, ValueError) as e:
            logger.warning("recommend.issues_failed", repo=repo.full_name, error=str(e))
            return []

    async def score_candidates(
        self, candidates: list[Repository], skills: SkillProfile
    ) -> list[ScoredRecommendation]:
        """Score the first 20 candidates and sort by score (stable)."""
        selected = candidates[:MAX_SCORED_CANDIDATES]
        issue_lists = await asyncio.gather(
            *(self.get_suggested_issues(repo, skills) for repo in selected)
        )
        recommendations = [
            ScoredRecommendation(
                repository=repo,
                match_score=calculate_match_score(repo, skills),
                reasons=generate_reasons(repo, skills),
                suggested_issues=issues,
            )
            for repo, issues in zip(selected, issue_lists)
        ]
        recommendations.sort(key=lambda r: r.match_score, reverse=True)
        return recommendations

    async def get_recommendations(
        self, skills: SkillProfile, overrides: Optional[FilterOverrides] = None
    ) -> list[ScoredRecommendation]:
        logger.info(
            "recommend.started",
            languages=skills.languages,
            interests=skills.interests,
            level=str(skills.experience_level),
        )
        filters = build_search_filters(skills, overrides)
        candidates = await self.search_candidates(filters)
        recommendations = await self.score_candidates(candidates, skills)
        logger.info("recommend.complete", count=len(recommendations))
        return recommendations

    async def get_personalized_recommendations(
        self,
        skills: SkillProfile,
        username: str,
        overrides: Optional[FilterOverrides] = None,
    ) -> list[ScoredRecommendation]:
        """Recommendations with a pool widened by stars and follows.

        Repositories owned by ``username`` or recently contributed to are
        excluded before scoring.
        """
        context = await gather_personalization(self.client, skills, username)
        filters = build_search_filters(skills, overrides) + context.extra_filters
        searched = await self.search_candidates(filters)
        candidates = [
            repo
            for repo in dedupe_by_id([*searched, *context.owner_repositories])
            if not context.excludes(repo)
        ]
        logger.info(
            "recommend.personalized_candidates",
            username=username,
            candidates=len(candidates),
            excluded_recent=len(context.recent_repositories),
        )
        return await self.score_candidates(candidates, skills)

    async def trending(self, language: str, limit: int = 10) -> list[Repository]:
        """Well-starred repositories for one language, intermediate profile."""
        skills = SkillProfile(languages=[language], experience_level=ExperienceLevel.INTERMEDIATE)
        overrides = FilterOverrides(min_stars=TRENDING_MIN_STARS, has_good_first_issues=False)
        recommendations = await self.get_recommendations(skills, overrides)
        return [r.repository for r in recommendations[: max(0, limit)]]
