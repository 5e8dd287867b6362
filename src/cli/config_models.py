"""Pydantic configuration models for ContriBuddy."""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from shared_types import ExperienceLevel


def _expand_env(value: Optional[str]) -> Optional[str]:
    """Resolve a ``${VAR}`` placeholder against the environment."""
    if value and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1], "")
    return value


class GitHubConfig(BaseModel):
    """GitHub API access."""

    token: Optional[str] = None
    api_base: str = "https://api.github.com"
    user_agent: str = "ContriBuddy-App"
    timeout: float = 30.0


class RateLimitConfig(BaseModel):
    """Token bucket pacing for GitHub calls."""

    requests_per_second: float = 15.0
    burst: int = 10
    max_reset_wait: float = 60.0

    @field_validator("requests_per_second")
    @classmethod
    def validate_rate(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"requests_per_second must be positive, got {v}")
        return v


class RecommendationConfig(BaseModel):
    """Defaults for CLI recommendation runs."""

    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    trending_limit: int = 10


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class AppConfig(BaseModel):
    """Main configuration model."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    recommendations: RecommendationConfig = Field(default_factory=RecommendationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} patterns in secrets."""
        self.github.token = _expand_env(self.github.token)
        return self

    def apply_env(self) -> "AppConfig":
        """``GITHUB_TOKEN`` in the environment wins over the file value."""
        self.github.token = os.environ.get("GITHUB_TOKEN") or self.github.token
        return self
