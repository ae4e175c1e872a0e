"""
Async Solana JSON-RPC transport over httpx.

Each public method performs exactly one HTTP round trip and raises
TransportError on any failure (network, HTTP status, JSON-RPC error object,
missing result), leaving retry and throttling to RetryingCaller.
"""

from __future__ import annotations

from typing import Any

import httpx

from realm_fee_tracker.core.exceptions import TransportError
from realm_fee_tracker.rpc.models import AccountInfo, ProgramAccount, SignatureRecord

DEFAULT_COMMITMENT = "confirmed"
DEFAULT_REQUEST_TIMEOUT_SEC = 60.0
MAX_SIGNATURES_PER_REQUEST = 1000
# jsonParsed: account keys as {pubkey, signer, writable}; raw instruction data as base58
TRANSACTION_ENCODING = "jsonParsed"
INSTRUCTION_DATA_ENCODING = "base58"

_MISSING = object()


class SolanaRpcClient:
    """
    Minimal async JSON-RPC client for the calls the tracker needs.

    Use as an async context manager, or pass an existing httpx.AsyncClient
    (the caller then owns its lifecycle).
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        commitment: str = DEFAULT_COMMITMENT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url.strip()
        self._commitment = commitment
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))
        self._request_id = 0

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _request(self, method: str, params: list[Any]) -> Any:
        """POST one JSON-RPC request; return its `result` (may be None)."""
        body = {
            "jsonrpc": "2.0",
            "id": self._next_id(),
            "method": method,
            "params": params,
        }
        try:
            resp = await self._client.post(self._rpc_url, json=body)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{method}: HTTP {e.response.status_code}", code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method}: {e.__class__.__name__}: {e}") from e
        except ValueError as e:
            raise TransportError(f"{method}: response is not JSON") from e
        if not isinstance(data, dict):
            raise TransportError(f"{method}: unexpected response envelope")
        if "error" in data and data["error"] is not None:
            err = data["error"]
            if isinstance(err, dict):
                raise TransportError(
                    f"Solana RPC error: {err.get('message', err)} (code={err.get('code')})",
                    code=err.get("code"),
                )
            raise TransportError(f"Solana RPC error: {err}")
        result = data.get("result", _MISSING)
        if result is _MISSING:
            raise TransportError(f"{method}: Solana RPC returned no result")
        return result

    async def get_signatures_for_address(
        self,
        address: str,
        *,
        before: str | None = None,
        limit: int = MAX_SIGNATURES_PER_REQUEST,
    ) -> list[SignatureRecord]:
        """One page of signatures, newest first."""
        opts: dict[str, Any] = {"limit": limit, "commitment": self._commitment}
        if before is not None:
            opts["before"] = before
        result = await self._request("getSignaturesForAddress", [address, opts])
        if not isinstance(result, list):
            raise TransportError("getSignaturesForAddress: result is not a list")
        return [
            SignatureRecord.from_rpc_item(item)
            for item in result
            if isinstance(item, dict) and "signature" in item
        ]

    async def get_account_info(self, address: str) -> AccountInfo | None:
        """Account owner and data, or None if the account does not exist."""
        result = await self._request(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self._commitment}],
        )
        value = (result or {}).get("value") if isinstance(result, dict) else None
        if value is None:
            return None
        return AccountInfo.from_rpc_value(value)

    async def get_program_accounts(
        self,
        program_id: str,
        *,
        data_size: int | None = None,
        memcmp_offset: int | None = None,
        memcmp_bytes: str | None = None,
    ) -> list[ProgramAccount]:
        """Accounts owned by program_id matching dataSize and a base58 memcmp filter."""
        filters: list[dict[str, Any]] = []
        if data_size is not None:
            filters.append({"dataSize": data_size})
        if memcmp_offset is not None and memcmp_bytes is not None:
            filters.append({"memcmp": {"offset": memcmp_offset, "bytes": memcmp_bytes}})
        opts: dict[str, Any] = {"encoding": "base64", "commitment": self._commitment}
        if filters:
            opts["filters"] = filters
        result = await self._request("getProgramAccounts", [program_id, opts])
        if not isinstance(result, list):
            raise TransportError("getProgramAccounts: result is not a list")
        return [ProgramAccount.from_rpc_item(item) for item in result if isinstance(item, dict)]

    async def get_transaction(self, signature: str) -> dict[str, Any] | None:
        """Full transaction with meta, or None when the node no longer has it."""
        result = await self._request(
            "getTransaction",
            [
                signature,
                {
                    "encoding": TRANSACTION_ENCODING,
                    "commitment": self._commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
        if result is None:
            return None
        if not isinstance(result, dict):
            raise TransportError("getTransaction: result is not an object")
        return result

    async def get_block_height(self) -> int:
        """Current block height; used as a liveness probe."""
        result = await self._request("getBlockHeight", [{"commitment": self._commitment}])
        try:
            return int(result)
        except (TypeError, ValueError) as e:
            raise TransportError(f"getBlockHeight: unexpected result {result!r}") from e
