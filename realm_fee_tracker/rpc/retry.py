"""
Retry wrapper for RPC operations.

Throttle, call, and back off on failure: every attempt first acquires from
the shared RateLimiter, failed attempts wait base * 2**attempt (capped)
before the next try, and exhaustion raises RetryExhausted naming the
operation and wrapping the last error.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from realm_fee_tracker.core.exceptions import RetryExhausted
from realm_fee_tracker.rpc.rate_limiter import RateLimiter
from realm_fee_tracker.tracker_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_SEC = 1.0
DEFAULT_MAX_DELAY_SEC = 10.0


@dataclass(frozen=True)
class RetryPolicy:
    """max_retries retries after the first attempt; delays in seconds."""

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_sec: float = DEFAULT_BASE_DELAY_SEC
    max_delay_sec: float = DEFAULT_MAX_DELAY_SEC

    def backoff(self, attempt: int) -> float:
        """Delay after failed attempt number `attempt` (0-based)."""
        return min(self.base_delay_sec * (2 ** attempt), self.max_delay_sec)


class RetryingCaller:
    """Runs single-round-trip RPC operations under the rate limit with retry/backoff."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._policy = policy or RetryPolicy()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def call(self, operation: Callable[[], Awaitable[T]], name: str) -> T:
        """
        Execute `operation` (a zero-arg coroutine factory) with throttle and retry.

        Raises:
            RetryExhausted: all max_retries + 1 attempts failed.
        """
        attempts = self._policy.max_retries + 1
        last_error: Exception | None = None
        for attempt in range(attempts):
            await self._rate_limiter.acquire()
            try:
                return await operation()
            except Exception as e:
                last_error = e
                if attempt + 1 < attempts:
                    delay = self._policy.backoff(attempt)
                    logger.warning(
                        "rpc_retry",
                        operation=name,
                        attempt=attempt + 1,
                        max_retries=self._policy.max_retries,
                        delay_sec=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)
        logger.error("rpc_give_up", operation=name, attempts=attempts, error=str(last_error))
        raise RetryExhausted(name, attempts, last_error) from last_error
