"""Tests for contribution history endpoints."""

from unittest.mock import AsyncMock

import pytest

from github_api import GitHubApiError
from github_api.models import PullRequestDetail, SearchPage


@pytest.fixture
def history_data(store_token, mock_github, make_issue):
    store_token("1001")
    pr = make_issue(
        "Add docs",
        repository_url="https://api.github.com/repos/acme/widget",
        pull_request={"merged_at": None},
    )

    async def search_issues(query, page=1, per_page=100, **kw):
        return SearchPage(total_count=1, items=[pr] if "type:pr" in query else [])

    mock_github.search_issues = AsyncMock(side_effect=search_issues)
    mock_github.get_pull_request = AsyncMock(
        return_value=PullRequestDetail(number=1, additions=4, deletions=2, changed_files=1)
    )
    return mock_github


def test_own_history(client, auth_headers, history_data):
    res = client.get("/api/contribution-history", headers=auth_headers)

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["username"] == "octo"
    assert data["summary"]["total_pull_requests"] == 1
    assert data["pull_requests"][0]["repository"]["full_name"] == "acme/widget"
    assert data["stats"]["total_additions"] == 4
    months = data["stats"]["monthly_activity"]
    assert len(months) == 12
    assert all(m["total"] == m["pull_requests"] + m["issues"] + m["commits"] for m in months)


def test_other_user_history(client, auth_headers, history_data):
    history_data.get_pull_request = AsyncMock(side_effect=GitHubApiError(404, "Not Found"))

    res = client.get("/api/contribution-history/hubot", headers=auth_headers)

    assert res.status_code == 200
    assert res.json()["data"]["username"] == "hubot"
    queries = [call.args[0] for call in history_data.search_issues.await_args_list]
    assert "author:hubot type:pr" in queries


def test_summary_is_condensed(client, auth_headers, history_data):
    res = client.get("/api/contribution-history/stats/summary", headers=auth_headers)

    assert res.status_code == 200
    data = res.json()["data"]
    assert "pull_requests" not in data
    assert len(data["stats"]["monthly_activity"]) == 6
    assert data["summary"]["total_contributions"] == 1


def test_history_requires_auth(client):
    assert client.get("/api/contribution-history").status_code == 401
