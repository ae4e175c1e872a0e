"""
Report rendering for a TrackingResult: CSV file and console summary.
"""

from realm_fee_tracker.report.console import render_summary
from realm_fee_tracker.report.csv_report import (
    CSV_COLUMNS,
    SUMMARY_LABELS,
    lamports_to_sol,
    write_csv_report,
)

__all__ = [
    "CSV_COLUMNS",
    "SUMMARY_LABELS",
    "lamports_to_sol",
    "render_summary",
    "write_csv_report",
]
