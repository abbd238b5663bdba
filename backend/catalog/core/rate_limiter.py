"""In-process rate limiting with the token bucket algorithm."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class TokenBucket:
    """Bucket state for one client."""

    tokens: float
    last_refill: float
    last_seen: float


@dataclass
class RateLimitResult:
    """Result of rate limit check."""

    allowed: bool
    remaining: int
    limit: int
    retry_after: int | None = None

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class RateLimiter:
    """Per-client token buckets held in memory.

    Buckets start full at ``burst`` tokens and refill continuously at ``rate``
    tokens per second. Buckets untouched for ``idle_timeout`` seconds are
    dropped by ``sweep``. ``check`` and ``sweep`` take the same lock, so a
    bucket is never removed while a request is being charged against it.
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        idle_timeout: float = 180.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0 or burst < 1:
            raise ValueError("rate must be positive and burst at least 1")
        self.rate = rate
        self.burst = burst
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._buckets)

    async def check(self, key: str, cost: int = 1) -> RateLimitResult:
        """Charge ``cost`` tokens to ``key``'s bucket if it holds enough."""
        async with self._lock:
            now = self._clock()
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(tokens=float(self.burst), last_refill=now, last_seen=now)
                self._buckets[key] = bucket
            else:
                elapsed = max(0.0, now - bucket.last_refill)
                bucket.tokens = min(float(self.burst), bucket.tokens + elapsed * self.rate)
                bucket.last_refill = now
            bucket.last_seen = now

            if bucket.tokens >= cost:
                bucket.tokens -= cost
                return RateLimitResult(
                    allowed=True,
                    remaining=int(bucket.tokens),
                    limit=self.burst,
                )

            deficit = cost - bucket.tokens
            return RateLimitResult(
                allowed=False,
                remaining=0,
                limit=self.burst,
                retry_after=max(1, math.ceil(deficit / self.rate)),
            )

    async def sweep(self) -> int:
        """Forget buckets idle for longer than ``idle_timeout``. Returns how many."""
        async with self._lock:
            cutoff = self._clock() - self.idle_timeout
            stale = [key for key, bucket in self._buckets.items() if bucket.last_seen < cutoff]
            for key in stale:
                del self._buckets[key]
        if stale:
            logger.debug("Reclaimed %d idle rate-limit bucket(s)", len(stale))
        return len(stale)

    async def run_sweeper(self, interval: float, stop: asyncio.Event) -> None:
        """Call ``sweep`` every ``interval`` seconds until ``stop`` is set."""
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                await self.sweep()
