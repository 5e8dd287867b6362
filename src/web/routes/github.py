"""Thin GitHub proxy endpoints using the service token."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from github_api import GitHubClient
from recommend import SearchFilter
from web.deps import get_server_client
from web.models import ok

router = APIRouter(prefix="/api/github", tags=["github"])


def _split(value: Optional[str]) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()] if value else []


@router.get("/repositories/search")
async def search_repositories(
    language: Optional[str] = None,
    min_stars: Optional[int] = Query(default=None, ge=0),
    max_stars: Optional[int] = Query(default=None, ge=0),
    has_good_first_issues: bool = False,
    topics: Optional[str] = None,
    client: GitHubClient = Depends(get_server_client),
):
    search = SearchFilter(
        language=language,
        min_stars=min_stars,
        max_stars=max_stars,
        has_good_first_issues=has_good_first_issues,
        topics=_split(topics),
    )
    repositories = await client.search_repositories(search.to_query())
    return ok(
        {
            "repositories": [r.model_dump(mode="json") for r in repositories],
            "count": len(repositories),
        }
    )


@router.get("/repositories/{owner}/{repo}")
async def repository(owner: str, repo: str, client: GitHubClient = Depends(get_server_client)):
    return ok((await client.get_repository(owner, repo)).model_dump(mode="json"))


@router.get("/repositories/{owner}/{repo}/issues")
async def repository_issues(
    owner: str,
    repo: str,
    labels: Optional[str] = None,
    client: GitHubClient = Depends(get_server_client),
):
    issues = await client.list_repo_issues(owner, repo, labels=_split(labels) or None)
    return ok({"issues": [i.model_dump(mode="json") for i in issues], "count": len(issues)})


@router.get("/repositories/{owner}/{repo}/good-first-issues")
async def good_first_issues(owner: str, repo: str, client: GitHubClient = Depends(get_server_client)):
    issues = await client.list_good_first_issues(owner, repo)
    return ok({"issues": [i.model_dump(mode="json") for i in issues], "count": len(issues)})
