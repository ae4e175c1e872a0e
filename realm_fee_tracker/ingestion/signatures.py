"""
Time-windowed signature discovery.

Pages backwards through getSignaturesForAddress for an address and keeps
the successful signatures whose block time falls inside the inclusive
[start, end] window. Results from several addresses (token-owner record,
vote records, wallet) are merged and deduplicated into one newest-first
list that drives the transaction fetch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from realm_fee_tracker.core.exceptions import RetryExhausted
from realm_fee_tracker.rpc.client import MAX_SIGNATURES_PER_REQUEST, SolanaRpcClient
from realm_fee_tracker.rpc.models import SignatureRecord
from realm_fee_tracker.rpc.retry import RetryingCaller
from realm_fee_tracker.tracker_logging import get_logger, short

logger = get_logger(__name__)


def merge_signatures(*signature_lists: Iterable[SignatureRecord]) -> list[SignatureRecord]:
    """
    Merge signature lists: first occurrence of each signature wins, then
    stable sort by block_time descending (missing block_time sorts as 0).
    """
    by_signature: dict[str, SignatureRecord] = {}
    for records in signature_lists:
        for record in records:
            if record.signature not in by_signature:
                by_signature[record.signature] = record
    return sorted(by_signature.values(), key=lambda r: r.block_time or 0, reverse=True)


@dataclass
class SignatureSources:
    """Per-source discovery results, kept separate for logging before the merge."""

    token_owner_record: list[SignatureRecord] = field(default_factory=list)
    vote_records: list[SignatureRecord] = field(default_factory=list)
    wallet: list[SignatureRecord] = field(default_factory=list)

    def merged(self) -> list[SignatureRecord]:
        return merge_signatures(self.token_owner_record, self.vote_records, self.wallet)

    def counts(self) -> dict[str, int]:
        return {
            "token_owner_record": len(self.token_owner_record),
            "vote_records": len(self.vote_records),
            "wallet": len(self.wallet),
        }


class SignatureDiscovery:
    """Enumerates in-window signatures for addresses through the retrying caller."""

    def __init__(
        self,
        client: SolanaRpcClient,
        caller: RetryingCaller,
        start_timestamp: int,
        end_timestamp: int,
        *,
        page_size: int = MAX_SIGNATURES_PER_REQUEST,
    ) -> None:
        if start_timestamp > end_timestamp:
            raise ValueError("start_timestamp must not be after end_timestamp")
        if not (1 <= page_size <= MAX_SIGNATURES_PER_REQUEST):
            raise ValueError(f"page_size must be between 1 and {MAX_SIGNATURES_PER_REQUEST}")
        self._client = client
        self._caller = caller
        self._start = start_timestamp
        self._end = end_timestamp
        self._page_size = page_size

    async def discover(self, address: str) -> list[SignatureRecord]:
        """
        All non-errored signatures for `address` in [start, end], newest first.

        Raises:
            RetryExhausted: a page could not be fetched.
        """
        kept: list[SignatureRecord] = []
        before: str | None = None
        pages = 0
        reached_start = False

        while not reached_start:
            pages += 1
            page = await self._caller.call(
                lambda cursor=before: self._client.get_signatures_for_address(
                    address, before=cursor, limit=self._page_size
                ),
                "getSignaturesForAddress",
            )
            if not page:
                break

            for record in page:
                if record.block_time is None or record.errored:
                    continue
                if record.block_time > self._end:
                    continue
                if record.block_time < self._start:
                    reached_start = True
                    break
                kept.append(record)

            before = page[-1].signature
            if len(page) < self._page_size:
                break

        logger.debug(
            "signatures_discovered",
            address=short(address),
            pages=pages,
            kept=len(kept),
        )
        return kept

    async def discover_many(self, addresses: Iterable[str]) -> list[SignatureRecord]:
        """
        Discover each address in turn; an address whose lookup exhausts its
        retries is skipped with a warning and the rest still contribute.
        """
        collected: list[SignatureRecord] = []
        for address in addresses:
            try:
                collected.extend(await self.discover(address))
            except RetryExhausted as e:
                logger.warning(
                    "signature_source_skipped",
                    address=short(address),
                    error=str(e),
                )
        return collected

    async def discover_sources(
        self,
        wallet: str,
        token_owner_record: str | None,
        vote_records: Iterable[str] = (),
    ) -> SignatureSources:
        """
        Query the three sources. Without a token-owner record only the
        wallet is scanned.
        """
        sources = SignatureSources()
        if token_owner_record is not None:
            sources.token_owner_record = await self.discover_many([token_owner_record])
            sources.vote_records = await self.discover_many(vote_records)
        sources.wallet = await self.discover_many([wallet])
        logger.info("signature_sources_scanned", wallet_id=short(wallet), **sources.counts())
        return sources
