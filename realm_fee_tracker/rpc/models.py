"""
Data models for RPC responses.

Normalized, immutable views over getSignaturesForAddress, getAccountInfo and
getProgramAccounts results. Transactions are kept as the raw getTransaction
dict (see analysis.classifier for how it is read).
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from realm_fee_tracker.core.exceptions import DataShapeError


@dataclass(frozen=True)
class SignatureRecord:
    """
    One getSignaturesForAddress entry.

    Used to build the fetch set and to supply block_time when the
    transaction body omits it.
    """

    signature: str
    slot: int
    block_time: int | None  # Unix timestamp; None if not available
    errored: bool = False
    memo: str | None = None
    confirmation_status: str | None = None  # processed | confirmed | finalized

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureRecord":
        """Build from a single getSignaturesForAddress result item."""
        block_time = item.get("blockTime")
        return cls(
            signature=item["signature"],
            slot=int(item.get("slot") or 0),
            block_time=int(block_time) if block_time is not None else None,
            errored=item.get("err") is not None,
            memo=item.get("memo"),
            confirmation_status=item.get("confirmationStatus"),
        )


def decode_account_data(data: Any) -> bytes:
    """
    Normalize RPC account data to bytes.

    Accepts ["<base64>", "base64"] (the encoding we request), a bare base64
    string, raw bytes, or a list of ints.
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, str):
        try:
            return base64.b64decode(data, validate=True)
        except ValueError as e:
            raise DataShapeError(f"Account data is not base64: {e}") from e
    if isinstance(data, (list, tuple)) and data:
        first = data[0]
        if isinstance(first, str):
            encoding = data[1] if len(data) > 1 else "base64"
            if encoding != "base64":
                raise DataShapeError(f"Unsupported account data encoding: {encoding}")
            return decode_account_data(first)
        if all(isinstance(b, int) for b in data):
            return bytes(data)
    if isinstance(data, (list, tuple)) and not data:
        return b""
    raise DataShapeError(f"Unrecognized account data shape: {type(data).__name__}")


@dataclass(frozen=True)
class AccountInfo:
    """getAccountInfo result (owner program + raw data)."""

    owner: str
    data: bytes
    lamports: int = 0

    @classmethod
    def from_rpc_value(cls, value: dict[str, Any]) -> "AccountInfo":
        return cls(
            owner=str(value.get("owner") or ""),
            data=decode_account_data(value.get("data")),
            lamports=int(value.get("lamports") or 0),
        )


@dataclass(frozen=True)
class ProgramAccount:
    """One getProgramAccounts entry."""

    address: str
    account: AccountInfo

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "ProgramAccount":
        return cls(
            address=str(item["pubkey"]),
            account=AccountInfo.from_rpc_value(item.get("account") or {}),
        )
