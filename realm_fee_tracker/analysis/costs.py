"""
Per-transaction cost: network fee plus rent deposit, in lamports.

The fee is the transaction's declared fee (always charged to the fee payer).
Rent is approximated from the wallet's own balance change:

    rent_deposit = max(0, (pre_balance - post_balance) - fee)

This captures accounts created (and funded) by the wallet in the same
transaction. It cannot separate a deposit from a refund made in the same
transaction; a refund simply lowers the delta.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from realm_fee_tracker.analysis.accessors import get_account_keys, get_meta
from realm_fee_tracker.core.exceptions import DataShapeError


@dataclass(frozen=True)
class TransactionCost:
    network_fee: int
    rent_deposit: int

    @property
    def total(self) -> int:
        return self.network_fee + self.rent_deposit


def _balance_at(balances: Any, index: int) -> int:
    if not isinstance(balances, list) or index >= len(balances):
        return 0
    value = balances[index]
    return int(value) if isinstance(value, int) else 0


def rent_from_balances(pre_balance: int, post_balance: int, fee: int) -> int:
    """max(0, balance delta - fee); never negative."""
    return max(0, (pre_balance - post_balance) - fee)


def calculate_cost(tx: dict[str, Any], wallet_address: str) -> TransactionCost:
    """
    Network fee and rent deposit paid by `wallet_address` in `tx`.

    Raises:
        DataShapeError: meta or fee missing.
    """
    meta = get_meta(tx)
    if meta is None:
        raise DataShapeError("Transaction has no meta")
    fee = meta.get("fee")
    if not isinstance(fee, int) or fee < 0:
        raise DataShapeError(f"Transaction fee missing or invalid: {fee!r}")

    keys = get_account_keys(tx)
    try:
        index = keys.index(wallet_address)
    except ValueError:
        return TransactionCost(network_fee=fee, rent_deposit=0)

    pre = _balance_at(meta.get("preBalances"), index)
    post = _balance_at(meta.get("postBalances"), index)
    return TransactionCost(network_fee=fee, rent_deposit=rent_from_balances(pre, post, fee))
