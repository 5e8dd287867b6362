"""Shared CLI utilities."""

import asyncio
import sys
from typing import Awaitable, Callable, TypeVar

import structlog
from rich.console import Console

from cli.config import load_config_model
from cli.config_models import AppConfig
from github_api import GitHubApiError, GitHubClient, RateLimitError, TokenBucketRateLimiter

console = Console()
logger = structlog.get_logger()

T = TypeVar("T")


def get_config() -> AppConfig:
    try:
        return load_config_model()
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)


def make_client(config: AppConfig) -> GitHubClient:
    """GitHub client with the configured token and pacing."""
    limits = config.rate_limit
    return GitHubClient(
        token=config.github.token,
        base_url=config.github.api_base,
        user_agent=config.github.user_agent,
        timeout=config.github.timeout,
        rate_limiter=TokenBucketRateLimiter(
            requests_per_second=limits.requests_per_second,
            burst=limits.burst,
            max_reset_wait=limits.max_reset_wait,
        ),
    )


def run_with_client(config: AppConfig, work: Callable[[GitHubClient], Awaitable[T]]) -> T:
    """Run ``work`` on a fresh client; GitHub failures exit with status 1."""

    async def _run() -> T:
        async with make_client(config) as client:
            return await work(client)

    try:
        return asyncio.run(_run())
    except RateLimitError as e:
        reset = f" (resets {e.reset_at:%H:%M UTC})" if e.reset_at else ""
        console.print(f"[red]GitHub rate limit reached[/], try again later{reset}.")
        sys.exit(1)
    except GitHubApiError as e:
        console.print(f"[red]GitHub error:[/] {e}")
        sys.exit(1)
