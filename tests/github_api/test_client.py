"""Tests for the async GitHub client, driven through httpx.MockTransport."""

import json

import httpx
import pytest

from github_api import GitHubApiError, GitHubClient, NotFoundError, RateLimitError
from github_api.rate_limit import TokenBucketRateLimiter
from observability import metrics


def _client(handler, token="ghp_testtoken"):
    return GitHubClient(
        token=token,
        transport=httpx.MockTransport(handler),
        rate_limiter=TokenBucketRateLimiter(requests_per_second=1000.0, burst=100),
    )


def _repo_json(id=1, name="demo", owner="octo", **extra):
    data = {"id": id, "name": name, "full_name": f"{owner}/{name}", "owner": {"login": owner}}
    data.update(extra)
    return data


class TestHeaders:
    @pytest.mark.asyncio
    async def test_required_headers_sent(self):
        seen = {}

        def handler(request: httpx.Request):
            seen.update(request.headers)
            return httpx.Response(200, json={"id": 1, "login": "octo"})

        async with _client(handler) as client:
            await client.get_authenticated_user()

        assert seen["accept"] == "application/vnd.github+json"
        assert seen["x-github-api-version"] == "2022-11-28"
        assert seen["user-agent"] == "ContriBuddy-App"
        assert seen["authorization"] == "Bearer ghp_testtoken"

    @pytest.mark.asyncio
    async def test_no_authorization_without_token(self):
        seen = {}

        def handler(request: httpx.Request):
            seen.update(request.headers)
            return httpx.Response(200, json=[])

        async with _client(handler, token=None) as client:
            await client.list_user_repos("octo")

        assert "authorization" not in seen


class TestErrors:
    @pytest.mark.asyncio
    async def test_404_is_not_found(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Not Found"})

        async with _client(handler) as client:
            with pytest.raises(NotFoundError) as exc:
                await client.get_repository("octo", "missing")

        assert exc.value.status == 404
        assert exc.value.message == "Not Found"

    @pytest.mark.asyncio
    async def test_403_rate_limit_message(self):
        def handler(request):
            return httpx.Response(
                403,
                json={"message": "API rate limit exceeded for user"},
                headers={"x-ratelimit-remaining": "5", "x-ratelimit-reset": "1700000000"},
            )

        async with _client(handler) as client:
            with pytest.raises(RateLimitError) as exc:
                await client.search_repositories("is:public")

        assert exc.value.reset_at is not None
        assert int(exc.value.reset_at.timestamp()) == 1700000000

    @pytest.mark.asyncio
    async def test_429_with_exhausted_remaining(self):
        def handler(request):
            return httpx.Response(429, json={"message": "slow down"}, headers={"x-ratelimit-remaining": "0"})

        limiter = TokenBucketRateLimiter(requests_per_second=1000.0, burst=100, max_reset_wait=0.0)
        client = GitHubClient(transport=httpx.MockTransport(handler), rate_limiter=limiter)
        with pytest.raises(RateLimitError):
            await client.get("/rate")
        await client.close()

    @pytest.mark.asyncio
    async def test_403_without_rate_limit_is_generic(self):
        def handler(request):
            return httpx.Response(403, json={"message": "Resource not accessible"})

        async with _client(handler) as client:
            with pytest.raises(GitHubApiError) as exc:
                await client.get("/user/starred")

        assert not isinstance(exc.value, RateLimitError)
        assert exc.value.status == 403
        assert "Resource not accessible" in str(exc.value)

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        async with _client(handler) as client:
            with pytest.raises(GitHubApiError) as exc:
                await client.get("/user")

        assert exc.value.status is None

    @pytest.mark.asyncio
    async def test_error_counter_recorded(self):
        metrics.reset()

        def handler(request):
            return httpx.Response(500, json={"message": "oops"})

        async with _client(handler) as client:
            with pytest.raises(GitHubApiError):
                await client.get("/user")

        assert metrics.get("github.requests") == 1
        assert metrics.get("github.errors.500") == 1


class TestTypedHelpers:
    @pytest.mark.asyncio
    async def test_list_user_repos_params_and_models(self):
        captured = {}

        def handler(request: httpx.Request):
            captured["path"] = request.url.path
            captured["params"] = dict(request.url.params)
            return httpx.Response(200, json=[_repo_json(topics=None), {"bogus": True}])

        async with _client(handler) as client:
            repos = await client.list_user_repos("octo", per_page=50, sort="updated", repo_type="all")

        assert captured["path"] == "/users/octo/repos"
        assert captured["params"] == {"type": "all", "sort": "updated", "per_page": "50"}
        # malformed item dropped, null topics normalised
        assert len(repos) == 1
        assert repos[0].topics == []

    @pytest.mark.asyncio
    async def test_list_repo_issues_filters_pull_requests(self):
        captured = {}

        def handler(request: httpx.Request):
            captured["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json=[
                    {"id": 1, "number": 1, "title": "Bug", "created_at": "2025-01-01T00:00:00Z"},
                    {
                        "id": 2,
                        "number": 2,
                        "title": "PR",
                        "created_at": "2025-01-01T00:00:00Z",
                        "pull_request": {"url": "x"},
                    },
                ],
            )

        async with _client(handler) as client:
            issues = await client.list_good_first_issues("octo", "demo")

        assert [i.number for i in issues] == [1]
        assert captured["params"]["labels"] == "good first issue,good-first-issue,beginner-friendly"
        assert captured["params"]["state"] == "open"

    @pytest.mark.asyncio
    async def test_search_issues_page(self):
        def handler(request: httpx.Request):
            assert request.url.params["q"] == "author:octo type:pr"
            assert request.url.params["page"] == "2"
            return httpx.Response(
                200,
                json={
                    "total_count": 1,
                    "items": [
                        {
                            "id": 9,
                            "number": 4,
                            "title": "Add docs",
                            "created_at": "2025-01-01T00:00:00Z",
                            "repository_url": "https://api.github.com/repos/acme/widget",
                            "pull_request": {"merged_at": None},
                        }
                    ],
                },
            )

        async with _client(handler) as client:
            page = await client.search_issues("author:octo type:pr", page=2)

        assert page.total_count == 1
        assert page.items[0].repository_full_name == "acme/widget"

    @pytest.mark.asyncio
    async def test_file_content_decoded(self):
        import base64

        raw = json.dumps({"dependencies": {"react": "^18"}})
        encoded = base64.encodebytes(raw.encode()).decode()

        def handler(request):
            return httpx.Response(200, json={"content": encoded, "encoding": "base64"})

        async with _client(handler) as client:
            content = await client.get_file_content("octo", "demo", "package.json")

        assert json.loads(content.decoded()) == {"dependencies": {"react": "^18"}}

    @pytest.mark.asyncio
    async def test_list_following_logins(self):
        def handler(request):
            return httpx.Response(200, json=[{"login": "alice"}, {"login": "bob"}, {}])

        async with _client(handler) as client:
            assert await client.list_following() == ["alice", "bob"]



class TestMalformedBodies:
    @pytest.mark.asyncio
    async def test_non_json_success_body(self):
        metrics.reset()

        def handler(request):
            return httpx.Response(200, text="<html>unicorn</html>")

        async with _client(handler) as client:
            with pytest.raises(GitHubApiError) as exc:
                await client.get_repository("a", "b")

        assert exc.value.status == 200
        assert exc.value.path == "/repos/a/b"
        assert "Invalid JSON" in str(exc.value)
        assert metrics.get("github.errors.invalid_json") == 1

    @pytest.mark.asyncio
    async def test_body_not_matching_model(self):
        def handler(request):
            return httpx.Response(200, json=["not", "a", "pull"])

        async with _client(handler) as client:
            with pytest.raises(GitHubApiError) as exc:
                await client.get_pull_request("o/r", 7)

        assert not isinstance(exc.value, (NotFoundError, RateLimitError))
        assert exc.value.path == "/repos/o/r/pulls/7"

    @pytest.mark.asyncio
    async def test_search_body_of_wrong_shape_is_empty(self):
        def handler(request):
            return httpx.Response(200, json=[1, 2, 3])

        async with _client(handler) as client:
            assert await client.search_repositories("language:go") == []
            page = await client.search_issues("author:octo")

        assert page.items == []
        assert page.total_count == 0
