"""Pure fold of classified transactions into per-category and grand totals."""

from __future__ import annotations

from typing import Iterable

from realm_fee_tracker.analysis.categories import ActionCategory
from realm_fee_tracker.analysis.models import (
    CategorySummary,
    ClassifiedTransaction,
    TrackingResult,
)


def aggregate(transactions: Iterable[ClassifiedTransaction]) -> TrackingResult:
    """
    Summarize transactions by category. Every category gets a summary
    (zero when unused); input order is preserved in the result.
    """
    txs = tuple(transactions)
    counts = {category: 0 for category in ActionCategory}
    costs = {category: 0 for category in ActionCategory}
    for tx in txs:
        counts[tx.category] += 1
        costs[tx.category] += tx.total_cost
    summaries = {
        category: CategorySummary(count=counts[category], total_cost=costs[category])
        for category in ActionCategory
    }
    return TrackingResult(
        transactions=txs,
        summaries=summaries,
        total_count=len(txs),
        total_cost=sum(tx.total_cost for tx in txs),
    )
