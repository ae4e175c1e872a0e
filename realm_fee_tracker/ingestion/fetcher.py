"""
Bounded-concurrency transaction fetch.

Signatures are fetched in sequential waves of at most `max_concurrency`;
inside a wave every getTransaction runs concurrently (each throttled by the
shared limiter through RetryingCaller) and the wave completes when all have
settled. Every fetch resolves to a tagged FetchOutcome, so one failing
signature never aborts the batch.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from realm_fee_tracker.constants import DEFAULT_MAX_CONCURRENCY
from realm_fee_tracker.core.exceptions import RetryExhausted
from realm_fee_tracker.rpc.client import SolanaRpcClient
from realm_fee_tracker.rpc.retry import RetryingCaller
from realm_fee_tracker.tracker_logging import get_logger, short

logger = get_logger(__name__)


class FetchStatus(str, Enum):
    FETCHED = "fetched"
    ABSENT = "absent"  # node returned no transaction (pruned / expired ledger data)
    FAILED = "failed"  # retries exhausted


@dataclass(frozen=True)
class FetchOutcome:
    signature: str
    status: FetchStatus
    transaction: dict[str, Any] | None = None
    error: str | None = None


class TransactionFetcher:
    """Fetches full transactions for a signature list, wave by wave."""

    def __init__(
        self,
        client: SolanaRpcClient,
        caller: RetryingCaller,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._client = client
        self._caller = caller
        self._max_concurrency = max_concurrency

    async def _fetch_one(self, signature: str) -> FetchOutcome:
        try:
            tx = await self._caller.call(
                lambda: self._client.get_transaction(signature),
                f"getTransaction({short(signature)})",
            )
        except RetryExhausted as e:
            logger.warning("transaction_fetch_failed", signature=short(signature), error=str(e))
            return FetchOutcome(signature, FetchStatus.FAILED, error=str(e))
        if tx is None:
            return FetchOutcome(signature, FetchStatus.ABSENT)
        return FetchOutcome(signature, FetchStatus.FETCHED, transaction=tx)

    async def fetch_outcomes(self, signatures: Sequence[str]) -> list[FetchOutcome]:
        """One outcome per signature, in input order."""
        outcomes: list[FetchOutcome] = []
        total = len(signatures)
        for start in range(0, total, self._max_concurrency):
            wave = signatures[start:start + self._max_concurrency]
            logger.debug(
                "transaction_wave",
                first=start + 1,
                last=start + len(wave),
                total=total,
            )
            outcomes.extend(await asyncio.gather(*(self._fetch_one(sig) for sig in wave)))
        return outcomes

    async def fetch_all(self, signatures: Sequence[str]) -> dict[str, dict[str, Any] | None]:
        """signature -> raw transaction, or None when absent or failed. Keys keep input order."""
        outcomes = await self.fetch_outcomes(signatures)
        counts = {status.value: 0 for status in FetchStatus}
        for outcome in outcomes:
            counts[outcome.status.value] += 1
        logger.info("transactions_fetched", total=len(outcomes), **counts)
        return {outcome.signature: outcome.transaction for outcome in outcomes}
