"""
SPL Governance account lookups used as signature-discovery anchors.

Realm account layout (prefix we read):
- account_type: 1 byte (offset 0)
- community_mint: 32 bytes (offset 1)

TokenOwnerRecord PDA seeds: ["governance", realm, governing_token_mint, governing_token_owner].
VoteRecord accounts are located with getProgramAccounts: dataSize plus a
memcmp on the voter's token-owner record at a fixed offset.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey

from realm_fee_tracker.constants import GOVERNANCE_PROGRAM_ID
from realm_fee_tracker.core.exceptions import ConfigurationError, RetryExhausted
from realm_fee_tracker.rpc.client import SolanaRpcClient
from realm_fee_tracker.rpc.retry import RetryingCaller
from realm_fee_tracker.tracker_logging import get_logger, short

logger = get_logger(__name__)

PUBKEY_SIZE = 32
REALM_COMMUNITY_MINT_OFFSET = 1
TOKEN_OWNER_RECORD_MIN_SIZE = 100
GOVERNANCE_SEED = b"governance"

VOTE_RECORD_ACCOUNT_SIZE = 200
VOTE_RECORD_TOKEN_OWNER_RECORD_OFFSET = 8


@dataclass(frozen=True)
class RealmData:
    """Parsed realm fields needed for PDA derivation."""

    realm_id: str
    community_mint: str


def parse_realm_data(realm_id: str, data: bytes) -> RealmData:
    """Extract the community mint from raw realm account data."""
    end = REALM_COMMUNITY_MINT_OFFSET + PUBKEY_SIZE
    if len(data) < end:
        raise ConfigurationError(f"Realm account data too short: {len(data)} bytes")
    mint = Pubkey(bytes(data[REALM_COMMUNITY_MINT_OFFSET:end]))
    return RealmData(realm_id=realm_id, community_mint=str(mint))


def derive_token_owner_record(
    realm_id: str,
    governing_token_mint: str,
    wallet_address: str,
    program_id: str = GOVERNANCE_PROGRAM_ID,
) -> str:
    """TokenOwnerRecord PDA (base58) for a wallet in a realm."""
    seeds = [
        GOVERNANCE_SEED,
        bytes(Pubkey.from_string(realm_id)),
        bytes(Pubkey.from_string(governing_token_mint)),
        bytes(Pubkey.from_string(wallet_address)),
    ]
    pda, _bump = Pubkey.find_program_address(seeds, Pubkey.from_string(program_id))
    return str(pda)


def vote_record_matches(data: bytes, token_owner_record: str) -> bool:
    """True if the vote record's token-owner record field equals `token_owner_record`."""
    start = VOTE_RECORD_TOKEN_OWNER_RECORD_OFFSET
    end = start + PUBKEY_SIZE
    if len(data) < end:
        return False
    return bytes(data[start:end]) == bytes(Pubkey.from_string(token_owner_record))


class GovernanceAccounts:
    """Realm, token-owner record and vote record lookups (all via RetryingCaller)."""

    def __init__(
        self,
        client: SolanaRpcClient,
        caller: RetryingCaller,
        program_id: str = GOVERNANCE_PROGRAM_ID,
    ) -> None:
        self._client = client
        self._caller = caller
        self._program_id = program_id

    @property
    def program_id(self) -> str:
        return self._program_id

    async def load_realm(self, realm_id: str) -> RealmData:
        """
        Fetch and parse the realm account.

        Raises:
            ConfigurationError: realm missing, not a governance account, or too short.
            RetryExhausted: RPC unavailable.
        """
        info = await self._caller.call(
            lambda: self._client.get_account_info(realm_id), "getAccountInfo(realm)"
        )
        if info is None:
            raise ConfigurationError(f"Realm account {realm_id} not found on-chain")
        if info.owner != self._program_id:
            raise ConfigurationError(
                f"Account {realm_id} is not owned by the governance program {self._program_id}"
            )
        realm = parse_realm_data(realm_id, info.data)
        logger.info("realm_loaded", realm_id=short(realm_id), community_mint=realm.community_mint)
        return realm

    def token_owner_record_for(self, realm: RealmData, wallet_address: str) -> str:
        return derive_token_owner_record(
            realm.realm_id, realm.community_mint, wallet_address, self._program_id
        )

    async def token_owner_record_exists(self, token_owner_record: str) -> bool:
        """
        Account exists, is owned by the governance program, and is plausibly sized.

        A failed lookup counts as missing, so discovery falls back to the wallet.
        """
        try:
            info = await self._caller.call(
                lambda: self._client.get_account_info(token_owner_record),
                "getAccountInfo(tokenOwnerRecord)",
            )
        except RetryExhausted as e:
            logger.warning(
                "token_owner_record_lookup_failed",
                token_owner_record=short(token_owner_record),
                error=str(e),
            )
            return False
        if info is None:
            return False
        if info.owner != self._program_id:
            logger.warning(
                "token_owner_record_wrong_owner",
                token_owner_record=short(token_owner_record),
                owner=info.owner,
            )
            return False
        if len(info.data) < TOKEN_OWNER_RECORD_MIN_SIZE:
            logger.warning(
                "token_owner_record_too_small",
                token_owner_record=short(token_owner_record),
                size=len(info.data),
            )
            return False
        return True

    async def find_vote_records(self, token_owner_record: str) -> list[str]:
        """
        VoteRecord addresses cast by `token_owner_record`.

        The server-side filter is re-checked locally. A failed lookup degrades
        to an empty list with a warning.
        """
        try:
            accounts = await self._caller.call(
                lambda: self._client.get_program_accounts(
                    self._program_id,
                    data_size=VOTE_RECORD_ACCOUNT_SIZE,
                    memcmp_offset=VOTE_RECORD_TOKEN_OWNER_RECORD_OFFSET,
                    memcmp_bytes=token_owner_record,
                ),
                "getProgramAccounts(voteRecords)",
            )
        except RetryExhausted as e:
            logger.warning(
                "vote_records_lookup_failed",
                token_owner_record=short(token_owner_record),
                error=str(e),
            )
            return []

        addresses = [
            acc.address
            for acc in accounts
            if vote_record_matches(acc.account.data, token_owner_record)
        ]
        logger.info(
            "vote_records_found",
            token_owner_record=short(token_owner_record),
            returned=len(accounts),
            matched=len(addresses),
        )
        return addresses
