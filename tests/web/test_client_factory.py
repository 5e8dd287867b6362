"""Tests for GitHub client construction in the web layer."""

import time

import pytest

from web.deps import get_client_factory, shared_rate_limiter


@pytest.mark.asyncio
async def test_clients_for_one_token_share_a_limiter():
    factory = get_client_factory()
    first, second, other = factory("gho_shared"), factory("gho_shared"), factory("gho_other")
    try:
        assert first.rate_limiter is second.rate_limiter
        assert first.rate_limiter is not other.rate_limiter
        assert first.rate_limiter is shared_rate_limiter("gho_shared")
    finally:
        for client in (first, second, other):
            await client.close()


@pytest.mark.asyncio
async def test_exhausted_quota_carries_over_to_next_request():
    factory = get_client_factory()
    first = factory("gho_exhausted")
    first.rate_limiter.update_from_headers(
        {"x-ratelimit-remaining": "0", "x-ratelimit-reset": str(int(time.time()) + 30)}
    )
    await first.close()

    second = factory("gho_exhausted")
    try:
        assert second.rate_limiter._blocked_until > time.monotonic()
    finally:
        await second.close()


def test_anonymous_clients_share_a_limiter():
    assert shared_rate_limiter(None) is shared_rate_limiter("")
