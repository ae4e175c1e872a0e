"""
Result models: classified transactions, per-category summaries, and the
TrackingResult handed to report rendering. All immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from realm_fee_tracker.analysis.categories import ActionCategory
from realm_fee_tracker.core.dates import format_timestamp


@dataclass(frozen=True)
class ClassifiedTransaction:
    """One governance transaction the tracked wallet paid for. Amounts in lamports."""

    signature: str
    block_time: int
    slot: int
    category: ActionCategory
    network_fee: int
    rent_deposit: int
    total_cost: int = field(init=False)
    display_time: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_cost", self.network_fee + self.rent_deposit)
        object.__setattr__(self, "display_time", format_timestamp(self.block_time))

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "block_time": self.block_time,
            "slot": self.slot,
            "category": self.category.value,
            "network_fee": self.network_fee,
            "rent_deposit": self.rent_deposit,
            "total_cost": self.total_cost,
            "display_time": self.display_time,
        }


@dataclass(frozen=True)
class CategorySummary:
    count: int = 0
    total_cost: int = 0


@dataclass(frozen=True)
class TrackingResult:
    """All accepted transactions plus one summary per category and grand totals."""

    transactions: tuple[ClassifiedTransaction, ...]
    summaries: dict[ActionCategory, CategorySummary]
    total_count: int
    total_cost: int

    def summary(self, category: ActionCategory) -> CategorySummary:
        return self.summaries.get(category, CategorySummary())

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0
