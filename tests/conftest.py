"""
Pytest fixtures for Realm Fee Tracker tests.

FakeRpcClient stands in for SolanaRpcClient: it serves canned accounts,
signature pages and transactions, records every call, and can be told to
fail specific requests. make_tx builds jsonParsed-shaped getTransaction
results so tests run without Solana RPC.
"""

from __future__ import annotations

from typing import Any

import pytest

from realm_fee_tracker.constants import GOVERNANCE_PROGRAM_ID
from realm_fee_tracker.core.exceptions import TransportError
from realm_fee_tracker.rpc.models import AccountInfo, ProgramAccount, SignatureRecord
from realm_fee_tracker.rpc.rate_limiter import RateLimiter
from realm_fee_tracker.rpc.retry import RetryingCaller, RetryPolicy

WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
OTHER_WALLET = "So11111111111111111111111111111111111111112"
REALM = "Vote111111111111111111111111111111111111111"
COMMUNITY_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SYSTEM_PROGRAM = "11111111111111111111111111111111"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

# 2024-01-01 00:00:00 UTC .. 2024-01-31 23:59:59 UTC
WINDOW_START = 1704067200
WINDOW_END = 1706745599

NO_RETRY_DELAY = RetryPolicy(max_retries=2, base_delay_sec=0.0, max_delay_sec=0.0)


def make_tx(
    fee_payer: str = WALLET,
    *,
    fee: int = 5000,
    pre_balance: int = 1_000_000_000,
    post_balance: int | None = None,
    logs: list[str] | None = None,
    instructions: list[dict[str, Any]] | None = None,
    inner: list[dict[str, Any]] | None = None,
    extra_keys: list[str] | None = None,
    block_time: int | None = WINDOW_START + 3600,
    slot: int = 250_000_000,
) -> dict[str, Any]:
    """jsonParsed getTransaction result; fee payer is account key 0."""
    keys = [fee_payer] + list(extra_keys or [])
    if post_balance is None:
        post_balance = pre_balance - fee
    pre = [pre_balance] + [0] * (len(keys) - 1)
    post = [post_balance] + [0] * (len(keys) - 1)
    meta: dict[str, Any] = {
        "err": None,
        "fee": fee,
        "preBalances": pre,
        "postBalances": post,
        "logMessages": list(logs or []),
        "innerInstructions": [{"index": 0, "instructions": inner}] if inner else [],
    }
    return {
        "slot": slot,
        "blockTime": block_time,
        "meta": meta,
        "transaction": {
            "signatures": ["sig"],
            "message": {
                "accountKeys": [
                    {"pubkey": key, "signer": i == 0, "writable": True}
                    for i, key in enumerate(keys)
                ],
                "instructions": list(instructions or []),
            },
        },
    }


def governance_logs(name: str) -> list[str]:
    return [
        f"Program {GOVERNANCE_PROGRAM_ID} invoke [1]",
        f"Program log: GOVERNANCE-INSTRUCTION: {name}",
        f"Program {GOVERNANCE_PROGRAM_ID} success",
    ]


def sig_record(signature: str, block_time: int | None, *, errored: bool = False) -> SignatureRecord:
    return SignatureRecord(signature=signature, slot=1, block_time=block_time, errored=errored)


class FakeRpcClient:
    """
    In-memory SolanaRpcClient double.

    signatures: address -> records newest first (paged by `before`/`limit`).
    fail_methods / fail_signatures / fail_addresses make matching calls raise
    TransportError.
    """

    def __init__(
        self,
        *,
        accounts: dict[str, AccountInfo] | None = None,
        program_accounts: list[ProgramAccount] | None = None,
        signatures: dict[str, list[SignatureRecord]] | None = None,
        transactions: dict[str, dict[str, Any]] | None = None,
        block_height: int = 300_000_000,
    ) -> None:
        self.accounts = dict(accounts or {})
        self.program_accounts = list(program_accounts or [])
        self.signatures = dict(signatures or {})
        self.transactions = dict(transactions or {})
        self.block_height = block_height
        self.fail_methods: set[str] = set()
        self.fail_signatures: set[str] = set()
        self.fail_addresses: set[str] = set()
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    async def __aenter__(self) -> "FakeRpcClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.closed = True

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_methods:
            raise TransportError(f"{method}: HTTP 503", code=503)

    async def get_block_height(self) -> int:
        self.calls.append(("getBlockHeight", None))
        self._maybe_fail("getBlockHeight")
        return self.block_height

    async def get_account_info(self, address: str) -> AccountInfo | None:
        self.calls.append(("getAccountInfo", address))
        self._maybe_fail("getAccountInfo")
        if address in self.fail_addresses:
            raise TransportError("getAccountInfo: HTTP 503", code=503)
        return self.accounts.get(address)

    async def get_program_accounts(self, program_id: str, **filters: Any) -> list[ProgramAccount]:
        self.calls.append(("getProgramAccounts", filters))
        self._maybe_fail("getProgramAccounts")
        return list(self.program_accounts)

    async def get_signatures_for_address(
        self,
        address: str,
        *,
        before: str | None = None,
        limit: int = 1000,
    ) -> list[SignatureRecord]:
        self.calls.append(("getSignaturesForAddress", (address, before, limit)))
        self._maybe_fail("getSignaturesForAddress")
        if address in self.fail_addresses:
            raise TransportError("getSignaturesForAddress: timeout")
        records = self.signatures.get(address, [])
        start = 0
        if before is not None:
            names = [r.signature for r in records]
            start = names.index(before) + 1
        return records[start:start + limit]

    async def get_transaction(self, signature: str) -> dict[str, Any] | None:
        self.calls.append(("getTransaction", signature))
        self._maybe_fail("getTransaction")
        if signature in self.fail_signatures:
            raise TransportError("getTransaction: HTTP 429", code=429)
        return self.transactions.get(signature)

    def calls_for(self, method: str) -> list[Any]:
        return [arg for name, arg in self.calls if name == method]


@pytest.fixture
def fake_client() -> FakeRpcClient:
    return FakeRpcClient()


@pytest.fixture
def caller() -> RetryingCaller:
    """Unthrottled caller with no backoff delay."""
    return RetryingCaller(RateLimiter(), NO_RETRY_DELAY)
