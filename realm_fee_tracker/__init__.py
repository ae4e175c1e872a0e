"""
Realm Fee Tracker: SOL fee and rent accounting for SPL Governance activity.

Discovers every transaction a wallet signed against one governance realm in a
date window, classifies each into an action category (vote, proposal,
comment, deposit, ...), and totals the network fees and rent deposits paid.
Modular architecture: rpc (transport, rate limit, retry), ingestion
(signature discovery, transaction fetch), analysis (classification, cost,
aggregation), report (CSV and console rendering).
"""

__version__ = "0.1.0"
