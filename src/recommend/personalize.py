"""Candidate-pool expansion from a user's stars, follows and recent activity.

Every step is independent and fault tolerant: a failed GitHub call leaves
that step empty and personalization carries on with what it has.
"""

import asyncio
from dataclasses import dataclass, field

import structlog

from github_api import GitHubApiError, GitHubClient, Repository
from recommend.filters import star_bounds
from recommend.models import SearchFilter, SkillProfile
from shared_types import CONTRIBUTION_EVENT_TYPES

logger = structlog.get_logger()

STARRED_LIMIT = 100
FOLLOWING_LIMIT = 100
STARRED_TOPICS = 5
STARRED_LANGUAGES = 3
STARRED_OWNERS = 5
FOLLOWED_USERS = 10
REPOS_PER_OWNER = 30


@dataclass
class PersonalizationContext:
    username: str
    extra_filters: list[SearchFilter] = field(default_factory=list)
    owner_repositories: list[Repository] = field(default_factory=list)
    recent_repositories: set[str] = field(default_factory=set)

    def excludes(self, repo: Repository) -> bool:
        """Owned by the user, or a repository they recently contributed to."""
        if repo.owner_login.lower() == self.username.lower():
            return True
        return repo.full_name.lower() in self.recent_repositories


def _ranked(values: list[str]) -> list[str]:
    """Distinct values by frequency, ties in first-seen order."""
    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return [v for v, _ in sorted(counts.items(), key=lambda item: item[1], reverse=True)]


def starred_topics(starred: list[Repository], limit: int = STARRED_TOPICS) -> list[str]:
    return _ranked([t.lower() for repo in starred for t in repo.topics])[:limit]


def starred_languages(
    starred: list[Repository], skills: SkillProfile, limit: int = STARRED_LANGUAGES
) -> list[str]:
    """Languages common among starred repos that the profile does not list yet."""
    known = {lang.lower() for lang in skills.languages}
    ranked = _ranked([repo.language.lower() for repo in starred if repo.language])
    return [lang for lang in ranked if lang not in known][:limit]


def starred_owners(starred: list[Repository], username: str, limit: int = STARRED_OWNERS) -> list[str]:
    owners: list[str] = []
    for repo in starred:
        login = repo.owner_login
        if login and login.lower() != username.lower() and login not in owners:
            owners.append(login)
    return owners[:limit]


def expansion_filters(
    topics: list[str], languages: list[str], skills: SkillProfile
) -> list[SearchFilter]:
    """One search per starred topic and per new language, at the profile's star bounds."""
    min_stars, max_stars = star_bounds(skills.experience_level)
    filters = [SearchFilter(min_stars=min_stars, max_stars=max_stars, topics=[t]) for t in topics]
    filters.extend(
        SearchFilter(language=lang, min_stars=min_stars, max_stars=max_stars) for lang in languages
    )
    return filters


async def _starred(client: GitHubClient) -> list[Repository]:
    try:
        return await client.list_starred(per_page=STARRED_LIMIT)
    except GitHubApiError as e:
        logger.warning("personalize.starred_failed", error=str(e))
        return []


async def _following(client: GitHubClient) -> list[str]:
    try:
        return await client.list_following(per_page=FOLLOWING_LIMIT)
    except GitHubApiError as e:
        logger.warning("personalize.following_failed", error=str(e))
        return []


async def recent_contributions(client: GitHubClient, username: str) -> set[str]:
    """Lower-cased ``owner/repo`` names from the user's public event feed."""
    try:
        events = await client.list_public_events(username)
    except GitHubApiError as e:
        logger.warning("personalize.events_failed", username=username, error=str(e))
        return set()
    return {
        event.repo.name.lower()
        for event in events
        if event.type in CONTRIBUTION_EVENT_TYPES and event.repo is not None
    }


async def owner_repositories(client: GitHubClient, owners: list[str]) -> list[Repository]:
    """Repositories listed directly per owner; a failing owner is skipped."""
    repositories: list[Repository] = []
    for owner in owners:
        try:
            repositories.extend(await client.list_owner_repos(owner, per_page=REPOS_PER_OWNER))
        except GitHubApiError as e:
            logger.warning("personalize.owner_repos_failed", owner=owner, error=str(e))
    return repositories


async def gather_personalization(
    client: GitHubClient, skills: SkillProfile, username: str
) -> PersonalizationContext:
    starred, following, recent = await asyncio.gather(
        _starred(client),
        _following(client),
        recent_contributions(client, username),
    )

    topics = starred_topics(starred)
    languages = starred_languages(starred, skills)
    owners = starred_owners(starred, username)
    for login in following[:FOLLOWED_USERS]:
        if login not in owners and login.lower() != username.lower():
            owners.append(login)

    context = PersonalizationContext(
        username=username,
        extra_filters=expansion_filters(topics, languages, skills),
        owner_repositories=await owner_repositories(client, owners),
        recent_repositories=recent,
    )
    logger.info(
        "personalize.context_built",
        username=username,
        starred=len(starred),
        topics=topics,
        languages=languages,
        owners=len(owners),
        recent=len(recent),
    )
    return context
