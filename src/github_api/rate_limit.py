"""Token-bucket pacing for GitHub calls, fed by GitHub's rate-limit headers."""

import asyncio
import time
from typing import Mapping, Optional

import structlog

logger = structlog.get_logger()


class TokenBucketRateLimiter:
    """Async token bucket.

    Allows burst requests up to bucket size, then enforces steady-state
    rate. When GitHub reports an exhausted quota the bucket is drained and
    held closed until the reported reset time (bounded by ``max_reset_wait``).
    """

    def __init__(
        self,
        requests_per_second: float = 15.0,
        burst: int = 10,
        max_reset_wait: float = 60.0,
    ):
        self.rate = requests_per_second
        self.max_tokens = burst
        self.max_reset_wait = max_reset_wait
        self._tokens = float(burst)
        self._last_refill = time.monotonic()
        self._blocked_until = 0.0
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.max_tokens, self._tokens + elapsed * self.rate)
        self._last_refill = now

    async def acquire(self) -> None:
        """Acquire a token, waiting if necessary."""
        async with self._lock:
            pause = self._blocked_until - time.monotonic()
            if pause > 0:
                await asyncio.sleep(pause)
            self._refill()
            while self._tokens < 1.0:
                await asyncio.sleep((1.0 - self._tokens) / self.rate)
                self._refill()
            self._tokens -= 1.0

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Hold the bucket closed when GitHub says the quota is spent."""
        remaining = _int_header(headers, "x-ratelimit-remaining")
        if remaining is None or remaining > 0:
            return
        reset = _int_header(headers, "x-ratelimit-reset")
        wait = self.max_reset_wait
        if reset is not None:
            wait = min(self.max_reset_wait, max(0.0, reset - time.time()))
        self._tokens = 0.0
        self._blocked_until = time.monotonic() + wait
        logger.warning("github.rate_limit_exhausted", wait_seconds=round(wait, 1))

    @property
    def available_tokens(self) -> float:
        """Current available tokens (for monitoring)."""
        self._refill()
        return self._tokens


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
