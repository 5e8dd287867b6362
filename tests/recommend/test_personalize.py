"""Tests for personalization from stars, follows and recent activity."""

from unittest.mock import AsyncMock

import pytest

from github_api import GitHubApiError
from github_api.models import Event
from recommend.engine import RecommendationEngine
from recommend.models import SkillProfile
from recommend.personalize import (
    PersonalizationContext,
    expansion_filters,
    gather_personalization,
    recent_contributions,
    starred_languages,
    starred_owners,
    starred_topics,
)
from shared_types import ExperienceLevel


def _event(kind, repo):
    return Event.model_validate({"type": kind, "repo": {"name": repo}})


class TestStarredSignals:
    def test_topics_ranked_by_frequency(self, make_repo):
        starred = [
            make_repo("a", topics=["CLI", "rust"]),
            make_repo("b", topics=["rust", "wasm"]),
            make_repo("c", topics=["rust", "cli"]),
        ]
        assert starred_topics(starred) == ["rust", "cli", "wasm"]

    def test_topics_limited_to_five(self, make_repo):
        starred = [make_repo("a", topics=[f"t{i}" for i in range(8)])]
        assert len(starred_topics(starred)) == 5

    def test_languages_exclude_known(self, make_repo):
        starred = [
            make_repo("a", language="Python"),
            make_repo("b", language="Rust"),
            make_repo("c", language="Rust"),
            make_repo("d", language="Zig"),
            make_repo("e", language="Elixir"),
            make_repo("f", language="Nim"),
            make_repo("g"),
        ]
        skills = SkillProfile(languages=["python"])
        assert starred_languages(starred, skills) == ["rust", "zig", "elixir"]

    def test_owners_skip_self_and_duplicates(self, make_repo):
        starred = [
            make_repo("a", owner="torvalds"),
            make_repo("b", owner="Octo"),
            make_repo("c", owner="torvalds"),
            make_repo("d", owner="gvanrossum"),
        ]
        assert starred_owners(starred, "octo") == ["torvalds", "gvanrossum"]

    def test_expansion_filters_use_profile_bounds(self):
        skills = SkillProfile(experience_level=ExperienceLevel.ADVANCED)
        filters = expansion_filters(["rust"], ["zig"], skills)
        assert [f.to_query() for f in filters] == [
            "is:public archived:false topic:rust stars:>=100",
            "is:public archived:false language:zig stars:>=100",
        ]


class TestRecentContributions:
    @pytest.mark.asyncio
    async def test_contribution_events_only(self, mock_github):
        mock_github.list_public_events = AsyncMock(
            return_value=[
                _event("PushEvent", "Acme/Widget"),
                _event("WatchEvent", "acme/starred-only"),
                _event("IssueCommentEvent", "acme/docs"),
            ]
        )
        assert await recent_contributions(mock_github, "octo") == {"acme/widget", "acme/docs"}

    @pytest.mark.asyncio
    async def test_failure_gives_empty_set(self, mock_github):
        mock_github.list_public_events = AsyncMock(side_effect=GitHubApiError(None, "timeout"))
        assert await recent_contributions(mock_github, "octo") == set()


class TestGatherPersonalization:
    @pytest.mark.asyncio
    async def test_every_step_fault_tolerant(self, mock_github):
        for name in ("list_starred", "list_following", "list_public_events"):
            setattr(mock_github, name, AsyncMock(side_effect=GitHubApiError(401, "Bad credentials")))

        context = await gather_personalization(mock_github, SkillProfile(languages=["go"]), "octo")

        assert context.extra_filters == []
        assert context.owner_repositories == []
        assert context.recent_repositories == set()

    @pytest.mark.asyncio
    async def test_followed_users_added_as_owners(self, mock_github, make_repo):
        mock_github.list_starred = AsyncMock(return_value=[make_repo("a", owner="alice")])
        mock_github.list_following = AsyncMock(return_value=["alice", "bob", "octo"] + [f"u{i}" for i in range(20)])

        async def owner_repos(owner, per_page=30):
            if owner == "bob":
                raise GitHubApiError(404, "Not Found")
            return [make_repo(f"{owner}-lib", owner=owner)]

        mock_github.list_owner_repos = AsyncMock(side_effect=owner_repos)

        context = await gather_personalization(mock_github, SkillProfile(), "octo")

        owners = [call.args[0] for call in mock_github.list_owner_repos.await_args_list]
        assert owners[:2] == ["alice", "bob"]
        assert "octo" not in owners
        # alice from stars, then the first ten follows minus alice and octo
        assert len(owners) == 9
        assert [r.owner_login for r in context.owner_repositories][:2] == ["alice", "u0"]


class TestContextExcludes:
    def test_own_and_recent_repositories(self, make_repo):
        context = PersonalizationContext(username="Octo", recent_repositories={"acme/widget"})
        assert context.excludes(make_repo("mine", owner="octo"))
        assert context.excludes(make_repo("Widget", owner="Acme"))
        assert not context.excludes(make_repo("other", owner="acme"))


class TestPersonalizedRecommendations:
    @pytest.mark.asyncio
    async def test_pool_excludes_own_and_recent(self, mock_github, make_repo):
        own = make_repo("dotfiles", owner="octo", language="Go")
        recent = make_repo("widget", owner="acme", language="Go")
        fresh = make_repo("server", owner="acme", language="Go")
        from_owner = make_repo("kernel", owner="torvalds", language="C")

        mock_github.search_repositories = AsyncMock(return_value=[own, recent, fresh])
        mock_github.list_starred = AsyncMock(return_value=[make_repo("x", owner="torvalds", topics=["os"])])
        mock_github.list_owner_repos = AsyncMock(return_value=[from_owner, fresh])
        mock_github.list_public_events = AsyncMock(return_value=[_event("PullRequestEvent", "acme/widget")])

        skills = SkillProfile(languages=["go"], experience_level=ExperienceLevel.INTERMEDIATE)
        result = await RecommendationEngine(mock_github).get_personalized_recommendations(skills, "octo")

        assert [r.repository.full_name for r in result] == ["acme/server", "torvalds/kernel"]
        queries = [call.args[0] for call in mock_github.search_repositories.await_args_list]
        assert len(queries) == 2
        assert "topic:os" in queries[1]
