"""GitHub REST/Search API access."""

from .client import GitHubClient
from .errors import GitHubApiError, NotFoundError, RateLimitError
from .models import Issue, Repository
from .rate_limit import TokenBucketRateLimiter

__all__ = [
    "GitHubClient",
    "GitHubApiError",
    "NotFoundError",
    "RateLimitError",
    "Issue",
    "Repository",
    "TokenBucketRateLimiter",
]
