"""Typed errors raised by the GitHub API client."""

from datetime import datetime
from typing import Optional


class GitHubApiError(Exception):
    """GitHub call failed. ``status`` is None for transport failures."""

    def __init__(self, status: Optional[int], message: str, path: str = ""):
        super().__init__(message)
        self.status = status
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"GitHub API {self.status}: {self.message}"


class RateLimitError(GitHubApiError):
    """Primary or secondary rate limit hit (403/429)."""

    def __init__(
        self,
        status: int,
        message: str,
        path: str = "",
        reset_at: Optional[datetime] = None,
    ):
        super().__init__(status, message, path)
        self.reset_at = reset_at


class NotFoundError(GitHubApiError):
    """Resource does not exist or is not visible to the token."""
