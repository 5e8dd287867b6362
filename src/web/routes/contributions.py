"""Contribution history endpoints."""

from fastapi import APIRouter, Depends

from analysis import ContributionAggregator, summarize
from github_api import GitHubClient
from web.auth import get_current_user
from web.deps import get_user_client
from web.models import ok

router = APIRouter(prefix="/api/contribution-history", tags=["contributions"])


@router.get("")
async def my_history(
    user: dict = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_client),
):
    return ok((await ContributionAggregator(client).analyze(user["login"])).to_dict())


@router.get("/stats/summary")
async def my_summary(
    user: dict = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_client),
):
    history = await ContributionAggregator(client).analyze(user["login"])
    return ok(summarize(history))


@router.get("/{username}")
async def user_history(
    username: str,
    user: dict = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_client),
):
    return ok((await ContributionAggregator(client).analyze(username)).to_dict())
