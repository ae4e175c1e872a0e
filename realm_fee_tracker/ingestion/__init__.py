# Ingestion: signature discovery across governance sources, batch transaction fetch.

from realm_fee_tracker.ingestion.fetcher import FetchOutcome, FetchStatus, TransactionFetcher
from realm_fee_tracker.ingestion.governance_accounts import GovernanceAccounts, RealmData
from realm_fee_tracker.ingestion.signatures import (
    SignatureDiscovery,
    SignatureSources,
    merge_signatures,
)

__all__ = [
    "FetchOutcome",
    "FetchStatus",
    "GovernanceAccounts",
    "RealmData",
    "SignatureDiscovery",
    "SignatureSources",
    "TransactionFetcher",
    "merge_signatures",
]
