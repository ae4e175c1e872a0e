"""
Read-only accessors over raw getTransaction results.

Handles both `json` (string account keys, programIdIndex) and `jsonParsed`
(account key objects, programId) response shapes; missing or malformed
sections read as empty rather than raising.
"""

from __future__ import annotations

from typing import Any


def get_message(tx: dict[str, Any]) -> dict[str, Any]:
    """transaction.message, or {} when the body is missing or binary-encoded."""
    body = tx.get("transaction")
    if not isinstance(body, dict):
        return {}
    message = body.get("message")
    return message if isinstance(message, dict) else {}


def get_meta(tx: dict[str, Any]) -> dict[str, Any] | None:
    meta = tx.get("meta")
    return meta if isinstance(meta, dict) else None


def get_account_keys(tx: dict[str, Any]) -> list[str]:
    """
    Resolve accountKeys to base58 strings (handles json vs jsonParsed).
    For versioned transactions in json encoding, appends meta.loadedAddresses.
    """
    keys = get_message(tx).get("accountKeys") or []
    out: list[str] = []
    for key in keys:
        if isinstance(key, str):
            out.append(key)
        elif isinstance(key, dict):
            out.append(str(key.get("pubkey") or ""))
    if keys and isinstance(keys[0], str):
        loaded = (get_meta(tx) or {}).get("loadedAddresses") or {}
        for role in ("writable", "readonly"):
            out.extend(str(addr) for addr in loaded.get(role) or [])
    return out


def get_fee_payer(tx: dict[str, Any]) -> str | None:
    """The fee payer is always the first account key."""
    keys = get_account_keys(tx)
    return keys[0] if keys and keys[0] else None


def get_log_messages(tx: dict[str, Any]) -> list[str]:
    logs = (get_meta(tx) or {}).get("logMessages") or []
    return [line for line in logs if isinstance(line, str)] if isinstance(logs, list) else []


def top_level_instructions(tx: dict[str, Any]) -> list[dict[str, Any]]:
    ixs = get_message(tx).get("instructions") or []
    return [ix for ix in ixs if isinstance(ix, dict)]


def inner_instructions(tx: dict[str, Any]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for block in (get_meta(tx) or {}).get("innerInstructions") or []:
        if not isinstance(block, dict):
            continue
        out.extend(ix for ix in block.get("instructions") or [] if isinstance(ix, dict))
    return out


def get_program_id(instruction: dict[str, Any], account_keys: list[str]) -> str | None:
    """programId (jsonParsed) or programIdIndex -> account key (json)."""
    program_id = instruction.get("programId")
    if isinstance(program_id, str) and program_id:
        return program_id
    idx = instruction.get("programIdIndex")
    if isinstance(idx, int) and 0 <= idx < len(account_keys):
        return account_keys[idx]
    return None
