"""
Analysis: classify raw governance transactions, cost them, and aggregate
per-category totals into a TrackingResult.
"""

from realm_fee_tracker.analysis.aggregator import aggregate
from realm_fee_tracker.analysis.categories import ActionCategory
from realm_fee_tracker.analysis.classifier import TransactionClassifier
from realm_fee_tracker.analysis.costs import TransactionCost, calculate_cost
from realm_fee_tracker.analysis.models import (
    CategorySummary,
    ClassifiedTransaction,
    TrackingResult,
)

__all__ = [
    "ActionCategory",
    "CategorySummary",
    "ClassifiedTransaction",
    "TrackingResult",
    "TransactionClassifier",
    "TransactionCost",
    "aggregate",
    "calculate_cost",
]
