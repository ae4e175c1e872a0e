"""
Solana RPC layer.

Async JSON-RPC transport, the run-wide token-bucket rate limiter, and the
retrying caller every RPC request in the pipeline goes through.
"""

from realm_fee_tracker.rpc.client import SolanaRpcClient
from realm_fee_tracker.rpc.models import AccountInfo, ProgramAccount, SignatureRecord
from realm_fee_tracker.rpc.rate_limiter import RateLimiter
from realm_fee_tracker.rpc.retry import RetryingCaller, RetryPolicy

__all__ = [
    "AccountInfo",
    "ProgramAccount",
    "RateLimiter",
    "RetryPolicy",
    "RetryingCaller",
    "SignatureRecord",
    "SolanaRpcClient",
]
