"""Async GitHub REST/Search client."""

from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from github_api.errors import GitHubApiError, NotFoundError, RateLimitError
from github_api.models import (
    CommitItem,
    Event,
    FileContent,
    GitHubUser,
    Issue,
    PullRequestDetail,
    Repository,
    SearchPage,
)
from github_api.rate_limit import TokenBucketRateLimiter
from observability import metrics

logger = structlog.get_logger()

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_ACCEPT = "application/vnd.github+json"
USER_AGENT = "ContriBuddy-App"

GOOD_FIRST_ISSUE_LABELS = ["good first issue", "good-first-issue", "beginner-friendly"]

M = TypeVar("M", bound=BaseModel)


class GitHubClient:
    """Thin async wrapper over one ``httpx.AsyncClient``.

    Returns validated models or raises ``GitHubApiError`` subclasses. There is
    no retry here; callers decide whether to retry, skip, or abort. Every call
    first takes a token from the shared rate limiter.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_BASE,
        user_agent: str = USER_AGENT,
        rate_limiter: Optional[TokenBucketRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter()
        headers = {
            "Accept": GITHUB_ACCEPT,
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # --- raw ---

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        """Issue one call and return the parsed JSON body."""
        await self.rate_limiter.acquire()
        metrics.counter("github.requests")
        with metrics.timer("github.request"):
            try:
                response = await self.client.request(method, path, params=params, json=json)
            except httpx.RequestError as e:
                metrics.counter("github.errors.transport")
                logger.warning("github.request_error", path=path, error=str(e))
                raise GitHubApiError(None, f"Request to GitHub failed: {e}", path) from e

        self.rate_limiter.update_from_headers(response.headers)
        if response.is_error:
            metrics.counter(f"github.errors.{response.status_code}")
            raise _error_from_response(response, path)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            metrics.counter("github.errors.invalid_json")
            logger.warning("github.invalid_json", path=path, status=response.status_code)
            raise GitHubApiError(response.status_code, "Invalid JSON from GitHub", path) from e

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    # --- users ---

    async def get_authenticated_user(self) -> GitHubUser:
        return _parse_one(GitHubUser, await self.get("/user"), "/user")

    async def list_user_repos(
        self,
        username: str,
        per_page: int = 100,
        sort: str = "updated",
        repo_type: str = "public",
    ) -> list[Repository]:
        data = await self.get(
            f"/users/{username}/repos",
            params={"type": repo_type, "sort": sort, "per_page": per_page},
        )
        return _parse_list(Repository, data, "list_user_repos")

    async def list_owner_repos(self, owner: str, per_page: int = 30) -> list[Repository]:
        """Public repos of any owner, most recently pushed first."""
        data = await self.get(
            f"/users/{owner}/repos",
            params={"type": "owner", "sort": "pushed", "per_page": per_page},
        )
        return _parse_list(Repository, data, "list_owner_repos")

    async def list_public_events(self, username: str, per_page: int = 100) -> list[Event]:
        data = await self.get(f"/users/{username}/events/public", params={"per_page": per_page})
        return _parse_list(Event, data, "list_public_events")

    async def list_starred(self, per_page: int = 100) -> list[Repository]:
        data = await self.get("/user/starred", params={"per_page": per_page})
        return _parse_list(Repository, data, "list_starred")

    async def list_following(self, per_page: int = 100) -> list[str]:
        """Logins the authenticated user follows."""
        data = await self.get("/user/following", params={"per_page": per_page})
        return [u["login"] for u in data or [] if isinstance(u, dict) and u.get("login")]

    # --- repositories ---

    async def get_repository(self, owner: str, repo: str) -> Repository:
        path = f"/repos/{owner}/{repo}"
        return _parse_one(Repository, await self.get(path), path)

    async def get_languages(self, owner: str, repo: str) -> dict[str, int]:
        data = await self.get(f"/repos/{owner}/{repo}/languages")
        if not isinstance(data, dict):
            return {}
        return {k: int(v) for k, v in data.items() if isinstance(v, (int, float))}

    async def get_file_content(self, owner: str, repo: str, path: str) -> FileContent:
        url = f"/repos/{owner}/{repo}/contents/{path}"
        return _parse_one(FileContent, await self.get(url), url)

    async def list_repo_issues(
        self,
        owner: str,
        repo: str,
        labels: Optional[list[str]] = None,
        per_page: int = 20,
    ) -> list[Issue]:
        """Open issues newest first, pull requests filtered out."""
        params: dict[str, Any] = {
            "state": "open",
            "per_page": per_page,
            "sort": "created",
            "direction": "desc",
        }
        if labels:
            params["labels"] = ",".join(labels)
        data = await self.get(f"/repos/{owner}/{repo}/issues", params=params)
        issues = _parse_list(Issue, data, "list_repo_issues")
        return [i for i in issues if not i.is_pull_request]

    async def list_good_first_issues(self, owner: str, repo: str) -> list[Issue]:
        return await self.list_repo_issues(owner, repo, labels=GOOD_FIRST_ISSUE_LABELS)

    async def get_pull_request(self, full_name: str, number: int) -> PullRequestDetail:
        path = f"/repos/{full_name}/pulls/{number}"
        return _parse_one(PullRequestDetail, await self.get(path), path)

    async def list_repo_commits(
        self, full_name: str, author: str, per_page: int = 20
    ) -> list[CommitItem]:
        data = await self.get(
            f"/repos/{full_name}/commits",
            params={"author": author, "per_page": per_page},
        )
        return _parse_list(CommitItem, data, "list_repo_commits")

    # --- search ---

    async def search_repositories(
        self,
        query: str,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = 50,
    ) -> list[Repository]:
        data = await self.get(
            "/search/repositories",
            params={"q": query, "sort": sort, "order": order, "per_page": per_page},
        )
        items = data.get("items", []) if isinstance(data, dict) else []
        return _parse_list(Repository, items, "search_repositories")

    async def search_issues(
        self,
        query: str,
        page: int = 1,
        per_page: int = 100,
        sort: str = "created",
        order: str = "desc",
    ) -> SearchPage[Issue]:
        data = await self.get(
            "/search/issues",
            params={"q": query, "page": page, "per_page": per_page, "sort": sort, "order": order},
        )
        if not isinstance(data, dict):
            data = {}
        return SearchPage[Issue](
            total_count=data.get("total_count", 0),
            incomplete_results=data.get("incomplete_results", False),
            items=_parse_list(Issue, data.get("items", []), "search_issues"),
        )


def _parse_one(model: type[M], data: Any, path: str) -> M:
    """Validate a single-object body; a mismatch is a GitHub error, not a crash."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        metrics.counter("github.errors.invalid_payload")
        logger.warning("github.payload_invalid", path=path, model=model.__name__, errors=e.error_count())
        raise GitHubApiError(None, f"Unexpected {model.__name__} payload from GitHub", path) from e


def _parse_list(model: type[M], data: Any, context: str) -> list[M]:
    """Validate each item, dropping (and logging) malformed ones."""
    if not isinstance(data, list):
        return []
    items = []
    for raw in data:
        try:
            items.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "github.payload_invalid",
                context=context,
                model=model.__name__,
                errors=e.error_count(),
            )
    return items


def _error_from_response(response: httpx.Response, path: str) -> GitHubApiError:
    """Map an error response to the typed error hierarchy."""
    try:
        body = response.json()
        message = body.get("message") if isinstance(body, dict) else None
    except ValueError:
        message = None
    message = message or response.reason_phrase or "GitHub request failed"
    status = response.status_code

    if status == 404:
        return NotFoundError(status, message, path)

    remaining = response.headers.get("x-ratelimit-remaining")
    if status in (403, 429) and ("rate limit" in message.lower() or remaining == "0"):
        reset_at = None
        reset = response.headers.get("x-ratelimit-reset")
        if reset and reset.isdigit():
            reset_at = datetime.fromtimestamp(int(reset), tz=timezone.utc)
        return RateLimitError(status, message, path, reset_at=reset_at)

    return GitHubApiError(status, message, path)
