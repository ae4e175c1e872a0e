"""
Structured logging for Realm Fee Tracker.

Use get_logger() in every module; events are snake_case names with keyword
fields (wallet_id, signature, attempt, ...).
"""

from realm_fee_tracker.tracker_logging.logger import get_logger, short

__all__ = ["get_logger", "short"]
