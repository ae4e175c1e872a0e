"""
End-to-end tests for the tracking pipeline against FakeRpcClient.
"""

from __future__ import annotations

import asyncio

import base58
import pytest
from solders.pubkey import Pubkey

from conftest import (
    COMMUNITY_MINT,
    NO_RETRY_DELAY,
    OTHER_WALLET,
    REALM,
    SYSTEM_PROGRAM,
    WALLET,
    WINDOW_END,
    WINDOW_START,
    FakeRpcClient,
    governance_logs,
    make_tx,
    sig_record,
)
from realm_fee_tracker import runner
from realm_fee_tracker.analysis.categories import ActionCategory
from realm_fee_tracker.config.settings import TrackerSettings
from realm_fee_tracker.constants import GOVERNANCE_CHAT_PROGRAM_ID, GOVERNANCE_PROGRAM_ID
from realm_fee_tracker.core.exceptions import ConfigurationError, RetryExhausted
from realm_fee_tracker.ingestion.governance_accounts import derive_token_owner_record
from realm_fee_tracker.rpc.models import AccountInfo, ProgramAccount
from realm_fee_tracker.runner import resolve_block_time, run_tracker, track

VOTE_RECORD = "SysvarC1ock11111111111111111111111111111111"
TOR = derive_token_owner_record(REALM, COMMUNITY_MINT, WALLET)


def _settings(**kwargs) -> TrackerSettings:
    values = dict(
        realm_id=REALM,
        wallet_address=WALLET,
        start_timestamp=WINDOW_START,
        end_timestamp=WINDOW_END,
        rpc_url="http://localhost:8899",
        rps=1000,
        max_concurrency=2,
    )
    values.update(kwargs)
    return TrackerSettings(**values)


def _realm_account() -> AccountInfo:
    return AccountInfo(GOVERNANCE_PROGRAM_ID, bytes([16]) + bytes(Pubkey.from_string(COMMUNITY_MINT)) + bytes(60))


def _vote_record_account() -> ProgramAccount:
    data = bytes(8) + bytes(Pubkey.from_string(TOR)) + bytes(160)
    return ProgramAccount(VOTE_RECORD, AccountInfo(GOVERNANCE_PROGRAM_ID, data))


def _gov_ix(*data: int) -> dict:
    return {"programId": GOVERNANCE_PROGRAM_ID, "accounts": [], "data": base58.b58encode(bytes(data)).decode()}


def _run(client: FakeRpcClient, settings: TrackerSettings | None = None):
    return asyncio.run(run_tracker(settings or _settings(), client, retry_policy=NO_RETRY_DELAY))


def _client_with_realm(**kwargs) -> FakeRpcClient:
    accounts = {REALM: _realm_account(), TOR: AccountInfo(GOVERNANCE_PROGRAM_ID, bytes(150))}
    accounts.update(kwargs.pop("accounts", {}))
    return FakeRpcClient(accounts=accounts, **kwargs)


def test_two_votes_and_one_proposal():
    t = WINDOW_START + 1000
    client = _client_with_realm(
        signatures={WALLET: [sig_record("p1", t + 2), sig_record("v2", t + 1), sig_record("v1", t)]},
        transactions={
            "v1": make_tx(logs=governance_logs("CastVote"), fee=5000),
            "v2": make_tx(logs=governance_logs("CastVote"), fee=5000),
            "p1": make_tx(
                logs=governance_logs("CreateProposal"),
                fee=7000,
                pre_balance=1_000_000,
                post_balance=1_000_000 - 9000,
            ),
        },
    )
    result = _run(client)
    assert result.summary(ActionCategory.VOTE).count == 2
    assert result.summary(ActionCategory.VOTE).total_cost == 10_000
    assert result.summary(ActionCategory.PROPOSAL).count == 1
    assert result.summary(ActionCategory.PROPOSAL).total_cost == 9000
    assert result.total_count == 3
    assert result.total_cost == 19_000


def test_full_pipeline_filters_and_merges_sources():
    t = WINDOW_START + 10_000
    client = _client_with_realm(
        program_accounts=[_vote_record_account()],
        signatures={
            TOR: [sig_record("deposit", t + 10)],
            VOTE_RECORD: [sig_record("vote", t + 90)],
            WALLET: [
                sig_record("late", WINDOW_END + 5),
                sig_record("vote", t + 90),
                sig_record("comment", t + 80),
                sig_record("foreign", t + 70),
                sig_record("transfer", t + 60),
                sig_record("gone", t + 50),
                sig_record("flaky", t + 40),
                sig_record("reverted", t + 30, errored=True),
                sig_record("early", WINDOW_START - 5),
            ],
        },
        transactions={
            "deposit": make_tx(instructions=[_gov_ix(1, 0, 0)]),
            "vote": make_tx(logs=governance_logs("CastVote")),
            "comment": make_tx(instructions=[
                {"programId": GOVERNANCE_CHAT_PROGRAM_ID, "accounts": [], "data": base58.b58encode(b"\x00\x01").decode()},
            ]),
            "foreign": make_tx(OTHER_WALLET, extra_keys=[WALLET], logs=governance_logs("CastVote")),
            "transfer": make_tx(instructions=[{"programId": SYSTEM_PROGRAM, "parsed": {"type": "transfer"}}]),
            "reverted": make_tx(logs=governance_logs("CastVote")),
            "late": make_tx(logs=governance_logs("CastVote")),
            "early": make_tx(logs=governance_logs("CastVote")),
        },
    )
    client.fail_signatures.add("flaky")

    result = _run(client)

    assert [tx.signature for tx in result.transactions] == ["vote", "comment", "deposit"]
    assert result.summary(ActionCategory.VOTE).count == 1
    assert result.summary(ActionCategory.COMMENT).count == 1
    assert result.summary(ActionCategory.TOKEN_DEPOSIT).count == 1
    assert result.total_cost == 15_000

    fetched = client.calls_for("getTransaction")
    assert "vote" in fetched and fetched.count("vote") == 1
    for excluded in ("late", "early", "reverted"):
        assert excluded not in fetched


def test_missing_token_owner_record_scans_wallet_only():
    client = FakeRpcClient(
        accounts={REALM: _realm_account()},
        signatures={WALLET: [sig_record("v", WINDOW_START + 5)]},
        transactions={"v": make_tx(logs=governance_logs("CastVote"))},
    )
    result = _run(client)
    assert result.total_count == 1
    assert client.calls_for("getProgramAccounts") == []
    assert [c[0] for c in client.calls_for("getSignaturesForAddress")] == [WALLET]


def test_no_signatures_gives_empty_result():
    client = _client_with_realm()
    result = _run(client)
    assert result.is_empty
    assert client.calls_for("getTransaction") == []


def test_missing_realm_is_fatal():
    client = FakeRpcClient()
    with pytest.raises(ConfigurationError):
        _run(client)
    assert client.calls_for("getSignaturesForAddress") == []


def test_unreachable_rpc_is_fatal():
    client = _client_with_realm()
    client.fail_methods.add("getBlockHeight")
    with pytest.raises(RetryExhausted):
        _run(client)
    assert client.calls_for("getAccountInfo") == []


def test_track_opens_and_closes_client(monkeypatch):
    client = _client_with_realm(
        signatures={WALLET: [sig_record("v", WINDOW_START + 5)]},
        transactions={"v": make_tx(logs=governance_logs("RelinquishVote"))},
    )
    monkeypatch.setattr(runner, "SolanaRpcClient", lambda url: client)
    result = track(_settings(), retry_policy=NO_RETRY_DELAY)
    assert result.summary(ActionCategory.VOTE).count == 1
    assert client.closed


def test_resolve_block_time_fallbacks():
    assert resolve_block_time(sig_record("a", 100), {"blockTime": 200}) == 100
    assert resolve_block_time(sig_record("a", None), {"blockTime": 200}) == 200
    assert resolve_block_time(None, {"blockTime": 300}) == 300
    assert resolve_block_time(sig_record("a", None), {"blockTime": None}) is None
    assert resolve_block_time(None, None) is None


def test_token_owner_record_lookup_failure_falls_back_to_wallet():
    client = FakeRpcClient(
        accounts={REALM: _realm_account(), TOR: AccountInfo(GOVERNANCE_PROGRAM_ID, bytes(150))},
        signatures={WALLET: [sig_record("v", WINDOW_START + 5)]},
        transactions={"v": make_tx(logs=governance_logs("CastVote"))},
    )
    client.fail_addresses.add(TOR)
    result = _run(client)
    assert result.total_count == 1
    assert result.summary(ActionCategory.VOTE).count == 1
    assert client.calls_for("getProgramAccounts") == []
    assert [c[0] for c in client.calls_for("getSignaturesForAddress")] == [WALLET]
