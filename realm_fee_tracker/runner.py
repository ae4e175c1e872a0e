"""
Tracking pipeline: one stateless, read-only run for a wallet and a realm.

    liveness probe -> realm -> token-owner record -> vote records
    -> signature discovery (3 sources) -> merge -> batch fetch
    -> classify + cost -> aggregate -> TrackingResult

Every RPC request goes through one RetryingCaller bound to one RateLimiter.
Configuration and connectivity problems abort the run; per-address and
per-signature failures only reduce coverage.
"""

from __future__ import annotations

import asyncio
from typing import Any

from realm_fee_tracker.analysis.aggregator import aggregate
from realm_fee_tracker.analysis.classifier import TransactionClassifier
from realm_fee_tracker.analysis.models import ClassifiedTransaction, TrackingResult
from realm_fee_tracker.config.env import mask_rpc_url
from realm_fee_tracker.config.settings import TrackerSettings
from realm_fee_tracker.core.dates import format_day
from realm_fee_tracker.ingestion.fetcher import TransactionFetcher
from realm_fee_tracker.ingestion.governance_accounts import GovernanceAccounts
from realm_fee_tracker.ingestion.signatures import SignatureDiscovery
from realm_fee_tracker.rpc.client import INSTRUCTION_DATA_ENCODING, SolanaRpcClient
from realm_fee_tracker.rpc.models import SignatureRecord
from realm_fee_tracker.rpc.rate_limiter import RateLimiter
from realm_fee_tracker.rpc.retry import RetryingCaller, RetryPolicy
from realm_fee_tracker.tracker_logging import get_logger, short

logger = get_logger(__name__)


def resolve_block_time(record: SignatureRecord | None, tx: dict[str, Any] | None) -> int | None:
    """Block time from the signature record, falling back to the transaction body."""
    if record is not None and record.block_time:
        return record.block_time
    if tx:
        block_time = tx.get("blockTime")
        if isinstance(block_time, int) and block_time:
            return block_time
    return None


def classify_transactions(
    signatures: list[SignatureRecord],
    transactions: dict[str, dict[str, Any] | None],
    classifier: TransactionClassifier,
    wallet_address: str,
) -> list[ClassifiedTransaction]:
    """Classify fetched transactions in discovery order; drop rejected ones."""
    records = {record.signature: record for record in signatures}
    accepted: list[ClassifiedTransaction] = []
    for signature, tx in transactions.items():
        block_time = resolve_block_time(records.get(signature), tx)
        if not block_time:
            continue
        classified = classifier.evaluate(signature, tx, wallet_address, block_time)
        if classified is not None:
            accepted.append(classified)
    return accepted


async def run_tracker(
    settings: TrackerSettings,
    client: SolanaRpcClient,
    *,
    retry_policy: RetryPolicy | None = None,
    data_encoding: str = INSTRUCTION_DATA_ENCODING,
) -> TrackingResult:
    """
    Run the full pipeline against `client`.

    Raises:
        ConfigurationError: realm not found or not a governance realm.
        RetryExhausted: RPC unreachable for the liveness probe or realm lookup.
    """
    wallet = settings.wallet_address
    logger.info(
        "tracker_run_started",
        realm_id=settings.realm_id,
        wallet_id=wallet,
        start=format_day(settings.start_timestamp),
        end=format_day(settings.end_timestamp),
        rps=settings.rps,
    )

    limiter = RateLimiter(settings.rps)
    caller = RetryingCaller(limiter, retry_policy)

    block_height = await caller.call(client.get_block_height, "getBlockHeight")
    logger.info("rpc_connected", block_height=block_height)

    accounts = GovernanceAccounts(client, caller, settings.governance_program_id)
    realm = await accounts.load_realm(settings.realm_id)
    token_owner_record: str | None = accounts.token_owner_record_for(realm, wallet)
    vote_records: list[str] = []
    if await accounts.token_owner_record_exists(token_owner_record):
        logger.info("token_owner_record_found", token_owner_record=token_owner_record)
        vote_records = await accounts.find_vote_records(token_owner_record)
    else:
        logger.warning(
            "token_owner_record_missing",
            token_owner_record=token_owner_record,
            message="wallet may not have deposited governance tokens; scanning wallet only",
        )
        token_owner_record = None

    discovery = SignatureDiscovery(
        client, caller, settings.start_timestamp, settings.end_timestamp
    )
    sources = await discovery.discover_sources(wallet, token_owner_record, vote_records)
    signatures = sources.merged()
    logger.info("signatures_merged", unique=len(signatures), **sources.counts())
    if not signatures:
        logger.warning("no_signatures_in_window", wallet_id=short(wallet))
        return aggregate([])

    fetcher = TransactionFetcher(client, caller, settings.max_concurrency)
    transactions = await fetcher.fetch_all([record.signature for record in signatures])

    classifier = TransactionClassifier(
        settings.governance_program_id, data_encoding=data_encoding
    )
    accepted = classify_transactions(signatures, transactions, classifier, wallet)
    result = aggregate(accepted)
    logger.info(
        "tracker_run_finished",
        wallet_id=short(wallet),
        governance_transactions=result.total_count,
        total_cost_lamports=result.total_cost,
    )
    return result


async def _run_with_default_client(
    settings: TrackerSettings,
    retry_policy: RetryPolicy | None,
) -> TrackingResult:
    logger.info("rpc_client_opening", rpc_url=mask_rpc_url(settings.rpc_url))
    async with SolanaRpcClient(settings.rpc_url) as client:
        return await run_tracker(settings, client, retry_policy=retry_policy)


def track(settings: TrackerSettings, *, retry_policy: RetryPolicy | None = None) -> TrackingResult:
    """Synchronous entry point: open an RPC client for settings.rpc_url and run."""
    return asyncio.run(_run_with_default_client(settings, retry_policy))
