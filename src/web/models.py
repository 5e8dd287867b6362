"""Pydantic request schemas and response helpers for the web API."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from recommend import FilterOverrides, SkillProfile


class RecommendationRequest(BaseModel):
    skills: SkillProfile
    filters: Optional[FilterOverrides] = None


class OAuthCallback(BaseModel):
    code: str = Field(..., min_length=1)


def ok(data: Any, message: Optional[str] = None) -> dict:
    """Success envelope: ``{"success": true, "data": ..., "message"?: ...}``."""
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body
