"""Client-side pacing of Notion API calls.

Notion allows roughly three requests per second per integration.
:class:`AsyncTokenBucket` refills at ``rate_rps`` tokens per second up to
a ``burst`` ceiling; a caller that finds the bucket empty awaits until
its token would have arrived.
"""

from __future__ import annotations

import asyncio
import time


class AsyncTokenBucket:
    """Token bucket shared by every coroutine using one transport.

    Parameters
    ----------
    rate_rps:
        Refill rate in tokens per second.
    burst:
        Bucket capacity.  A full bucket lets *burst* calls through at once.
    """

    __slots__ = ("_lock", "burst", "last_refill", "rate", "tokens")

    def __init__(self, rate_rps: float, burst: int = 10) -> None:
        if rate_rps <= 0:
            raise ValueError(f"rate_rps must be > 0, got {rate_rps}")
        if burst < 1:
            raise ValueError(f"burst must be >= 1, got {burst}")

        self.rate: float = rate_rps
        self.burst: int = burst
        self.tokens: float = float(burst)
        self.last_refill: float = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self, now: float) -> None:
        self.tokens = min(self.burst, self.tokens + (now - self.last_refill) * self.rate)
        self.last_refill = now

    async def acquire(self, tokens: int = 1) -> float:
        """Take *tokens* from the bucket and return the seconds spent waiting."""
        async with self._lock:
            self._refill(time.monotonic())
            if self.tokens >= tokens:
                self.tokens -= tokens
                return 0.0
            wait = (tokens - self.tokens) / self.rate
            self.tokens = 0.0

        # Sleep outside the lock so other coroutines can refill and proceed.
        await asyncio.sleep(wait)
        return wait
