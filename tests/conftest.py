"""Shared test fixtures for ContriBuddy."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from github_api.models import Issue, Repository  # noqa: E402

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_repo():
    """Factory for validated Repository models."""
    counter = {"id": 1000}

    def _make(name="project", owner="octo", **fields):
        counter["id"] += 1
        data = {
            "id": counter["id"],
            "name": name,
            "full_name": f"{owner}/{name}",
            "html_url": f"https://github.com/{owner}/{name}",
            "owner": {"login": owner},
            "updated_at": NOW.isoformat(),
        }
        data.update(fields)
        return Repository.model_validate(data)

    return _make


@pytest.fixture
def make_issue():
    """Factory for validated Issue models."""
    counter = {"n": 0}

    def _make(title="Fix typo", **fields):
        counter["n"] += 1
        data = {
            "id": 5000 + counter["n"],
            "number": counter["n"],
            "title": title,
            "html_url": f"https://github.com/octo/project/issues/{counter['n']}",
            "created_at": NOW.isoformat(),
        }
        data.update(fields)
        return Issue.model_validate(data)

    return _make


@pytest.fixture
def mock_github():
    """GitHubClient stand-in: every API method is an AsyncMock with an empty result."""
    client = MagicMock()
    for name in (
        "list_user_repos",
        "list_owner_repos",
        "list_public_events",
        "list_starred",
        "list_following",
        "list_repo_issues",
        "list_good_first_issues",
        "list_repo_commits",
        "search_repositories",
    ):
        setattr(client, name, AsyncMock(return_value=[]))
    client.get_languages = AsyncMock(return_value={})
    client.get_file_content = AsyncMock()
    client.get_pull_request = AsyncMock()
    client.get_repository = AsyncMock()
    client.get_authenticated_user = AsyncMock()
    client.search_issues = AsyncMock()
    client.close = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client
