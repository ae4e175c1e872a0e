"""
Token-bucket rate limiter for RPC calls.

One instance per run, shared by every RPC-issuing stage. Capacity equals the
configured requests-per-second and the bucket refills continuously at the
same rate, so bursts up to `rps` are allowed and the sustained rate never
exceeds it.
"""

from __future__ import annotations

import asyncio
import time


class RateLimiter:
    """
    Global token bucket: capacity max(1, `rps`), refill `rps` tokens/second.

    acquire() waits for a token and debits it under a single asyncio.Lock,
    so concurrent acquirers never consume the same refilled token; waiters
    are served in lock order (FIFO). An unconfigured limiter never blocks.
    """

    def __init__(self, rps: float | None = None) -> None:
        self._lock = asyncio.Lock()
        self._rps = 0.0
        self._capacity = 0.0
        self._tokens = 0.0
        self._last_refill = time.monotonic()
        self._configured = False
        if rps is not None:
            self.configure(rps)

    def configure(self, rps: float) -> None:
        """Set the rate and start with a full bucket (never smaller than one token)."""
        if rps <= 0:
            raise ValueError("rps must be positive")
        self._rps = float(rps)
        self._capacity = max(1.0, float(rps))
        self._tokens = self._capacity
        self._last_refill = time.monotonic()
        self._configured = True

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def rps(self) -> float:
        return self._rps

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._capacity, self._tokens + elapsed * self._rps)
        self._last_refill = now

    def available_tokens(self) -> float:
        """Current token count after refill (for logging/tests)."""
        if not self._configured:
            return 0.0
        self._refill()
        return self._tokens

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        if not self._configured:
            return
        async with self._lock:
            self._refill()
            while self._tokens < 1.0:
                await asyncio.sleep((1.0 - self._tokens) / self._rps)
                self._refill()
            self._tokens -= 1.0
