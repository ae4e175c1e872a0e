"""
Configuration management for Realm Fee Tracker.

Loads the RPC endpoint from the environment (.env) and the tracking request
from config.json, validates both, and exposes a frozen TrackerSettings.
"""

from realm_fee_tracker.config.settings import TrackerSettings, load_settings  # noqa: F401

__all__ = ["TrackerSettings", "load_settings"]
