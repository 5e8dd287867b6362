"""Dependency injection for FastAPI routes."""

import hashlib
import os
from functools import lru_cache
from typing import AsyncIterator, Callable, Optional

import structlog
from fastapi import Depends

from github_api import GitHubClient, TokenBucketRateLimiter
from web.auth import get_current_user
from web.errors import ConfigurationError, NotAuthenticatedError
from web.store import AnalysisStore, EncryptedTokenStore, InMemoryStore, UserStore

logger = structlog.get_logger()

ClientFactory = Callable[[Optional[str]], GitHubClient]


@lru_cache
def get_user_store() -> UserStore:
    return InMemoryStore()


@lru_cache
def get_analysis_store() -> AnalysisStore:
    return InMemoryStore()


@lru_cache
def _token_backend() -> InMemoryStore[str]:
    return InMemoryStore()


def get_secret_key() -> str:
    """Get Fernet secret key from env."""
    key = os.getenv("SECRET_KEY")
    if not key:
        raise ConfigurationError("SECRET_KEY env var required for token encryption")
    return key


def get_token_store(secret_key: str = Depends(get_secret_key)) -> EncryptedTokenStore:
    return EncryptedTokenStore(_token_backend(), secret_key)


@lru_cache(maxsize=256)
def _rate_limiter(token_digest: str) -> TokenBucketRateLimiter:
    return TokenBucketRateLimiter()


def shared_rate_limiter(token: Optional[str]) -> TokenBucketRateLimiter:
    """Process-wide limiter per GitHub token, so an exhausted quota holds across requests.

    Keyed by a digest so raw tokens are not kept as cache keys.
    """
    digest = hashlib.sha256(token.encode()).hexdigest() if token else ""
    return _rate_limiter(digest)


def get_client_factory() -> ClientFactory:
    """How GitHub clients are built; tests override this."""
    return lambda token: GitHubClient(token=token, rate_limiter=shared_rate_limiter(token))


async def get_server_client(
    factory: ClientFactory = Depends(get_client_factory),
) -> AsyncIterator[GitHubClient]:
    """Client authenticated with the service's own GITHUB_TOKEN (if any)."""
    client = factory(os.getenv("GITHUB_TOKEN"))
    try:
        yield client
    finally:
        await client.close()


async def get_user_token(
    user: dict = Depends(get_current_user),
    tokens: EncryptedTokenStore = Depends(get_token_store),
) -> str:
    token = await tokens.get(user["id"])
    if not token:
        raise NotAuthenticatedError("GitHub access token not found. Please re-authenticate.")
    return token


async def get_user_client(
    token: str = Depends(get_user_token),
    factory: ClientFactory = Depends(get_client_factory),
) -> AsyncIterator[GitHubClient]:
    """Client acting as the signed-in user."""
    client = factory(token)
    try:
        yield client
    finally:
        await client.close()
