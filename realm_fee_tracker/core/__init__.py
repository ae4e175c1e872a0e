"""
Core utilities: exceptions and date helpers shared across the rpc,
ingestion, analysis and report layers.
"""
