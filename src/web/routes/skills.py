"""Skill analysis endpoints with a per-user cached result."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from analysis import SkillAnalyzer
from github_api import GitHubClient
from web.auth import get_current_user
from web.deps import get_analysis_store, get_token_store, get_user_client
from web.models import ok
from web.store import AnalysisStore, EncryptedTokenStore

logger = structlog.get_logger()

router = APIRouter(prefix="/api/skills", tags=["skills"])


@router.post("/analyze")
async def analyze(
    user: dict = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_client),
    analyses: AnalysisStore = Depends(get_analysis_store),
):
    github_user = await client.get_authenticated_user()
    result = jsonable_encoder(await SkillAnalyzer(client).analyze(github_user.login))

    await analyses.set(
        user["id"],
        {
            **result,
            "analyzed_at": datetime.now(timezone.utc).isoformat(),
            "github_user": {
                "login": github_user.login,
                "name": github_user.name,
                "avatar_url": github_user.avatar_url,
            },
        },
    )
    logger.info("skills.analysis_stored", user_id=user["id"], confidence=result["confidence"])
    return ok(result)


@router.get("/my-analysis")
async def my_analysis(
    user: dict = Depends(get_current_user),
    analyses: AnalysisStore = Depends(get_analysis_store),
):
    analysis = await analyses.get(user["id"])
    if analysis is None:
        return ok(None, message="No analysis found. Please run an analysis first.")
    return ok(analysis)


@router.delete("/my-analysis")
async def clear_analysis(
    user: dict = Depends(get_current_user),
    analyses: AnalysisStore = Depends(get_analysis_store),
):
    await analyses.delete(user["id"])
    return ok(None, message="Analysis cleared")


@router.get("/status")
async def status(
    user: dict = Depends(get_current_user),
    tokens: EncryptedTokenStore = Depends(get_token_store),
    analyses: AnalysisStore = Depends(get_analysis_store),
):
    analysis = await analyses.get(user["id"])
    return ok(
        {
            "has_github_token": await tokens.contains(user["id"]),
            "has_analysis": analysis is not None,
            "last_analyzed_at": analysis.get("analyzed_at") if analysis else None,
            "github_user": analysis.get("github_user") if analysis else None,
        }
    )
