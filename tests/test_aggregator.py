"""
Tests for aggregate(): per-category counts and costs plus grand totals.
"""

from __future__ import annotations

from realm_fee_tracker.analysis.aggregator import aggregate
from realm_fee_tracker.analysis.categories import ActionCategory
from realm_fee_tracker.analysis.models import ClassifiedTransaction


def _tx(sig: str, category: ActionCategory, fee: int = 5000, rent: int = 0, t: int = 1704067200):
    return ClassifiedTransaction(
        signature=sig,
        block_time=t,
        slot=1,
        category=category,
        network_fee=fee,
        rent_deposit=rent,
    )


def test_two_votes_and_a_proposal():
    result = aggregate([
        _tx("v1", ActionCategory.VOTE),
        _tx("v2", ActionCategory.VOTE),
        _tx("p1", ActionCategory.PROPOSAL, fee=7000, rent=2000),
    ])
    assert result.summary(ActionCategory.VOTE).count == 2
    assert result.summary(ActionCategory.VOTE).total_cost == 10_000
    assert result.summary(ActionCategory.PROPOSAL).count == 1
    assert result.summary(ActionCategory.PROPOSAL).total_cost == 9000
    assert result.total_count == 3
    assert result.total_cost == 19_000
    assert not result.is_empty


def test_every_category_is_present():
    result = aggregate([_tx("c", ActionCategory.COMMENT)])
    assert set(result.summaries) == set(ActionCategory)
    assert result.summary(ActionCategory.REFUND).count == 0
    assert result.summary(ActionCategory.REFUND).total_cost == 0


def test_totals_equal_sum_of_categories():
    txs = [
        _tx(f"s{i}", category, fee=5000 + i, rent=i * 10)
        for i, category in enumerate(ActionCategory)
    ]
    result = aggregate(txs)
    assert result.total_count == sum(s.count for s in result.summaries.values())
    assert result.total_cost == sum(s.total_cost for s in result.summaries.values())
    assert result.total_cost == sum(tx.total_cost for tx in txs)


def test_preserves_input_order():
    txs = [_tx("b", ActionCategory.VOTE), _tx("a", ActionCategory.VOTE)]
    assert [tx.signature for tx in aggregate(txs).transactions] == ["b", "a"]


def test_empty_input():
    result = aggregate([])
    assert result.is_empty
    assert result.total_cost == 0
    assert result.transactions == ()


def test_classified_transaction_derived_fields():
    tx = _tx("x", ActionCategory.DELEGATE, fee=5000, rent=1000, t=1704067200)
    assert tx.total_cost == 6000
    assert tx.display_time == "2024-01-01 00:00:00 UTC"
    assert tx.to_dict()["category"] == "Delegate"
