"""Recommendation endpoints: generic, personalized, trending."""

import time
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Query

from github_api import GitHubClient
from recommend import RecommendationEngine, SkillProfile
from web.auth import get_current_user
from web.deps import get_server_client, get_user_client
from web.errors import ValidationError
from web.models import RecommendationRequest, ok

logger = structlog.get_logger()

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


def _require_skills(skills: SkillProfile) -> None:
    if skills.is_empty():
        raise ValidationError("At least one skill, framework, or interest must be provided")


def _result(recommendations: list, started: float) -> dict:
    elapsed_ms = int((time.monotonic() - started) * 1000)
    return ok(
        {
            "recommendations": [r.to_dict() for r in recommendations],
            "total_count": len(recommendations),
            "processing_time": elapsed_ms,
        },
        message=f"Generated {len(recommendations)} recommendations in {elapsed_ms}ms",
    )


@router.post("/generate")
async def generate(
    body: RecommendationRequest,
    client: GitHubClient = Depends(get_server_client),
):
    _require_skills(body.skills)
    started = time.monotonic()
    recommendations = await RecommendationEngine(client).get_recommendations(
        body.skills, body.filters
    )
    return _result(recommendations, started)


@router.post("/personalized")
async def personalized(
    body: RecommendationRequest,
    user: dict = Depends(get_current_user),
    client: GitHubClient = Depends(get_user_client),
):
    _require_skills(body.skills)
    started = time.monotonic()
    recommendations = await RecommendationEngine(client).get_personalized_recommendations(
        body.skills, user["login"], body.filters
    )
    return _result(recommendations, started)


@router.get("/trending/{language}")
async def trending(
    language: str,
    limit: int = Query(default=10, ge=1, le=50),
    client: GitHubClient = Depends(get_server_client),
):
    repositories = await RecommendationEngine(client).trending(language, limit)
    return ok(
        {
            "language": language,
            "repositories": [r.model_dump(mode="json") for r in repositories],
            "count": len(repositories),
        }
    )


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "recommendations",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
