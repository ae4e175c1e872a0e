"""Plain-text fee summary for the terminal."""

from __future__ import annotations

from realm_fee_tracker.analysis.categories import ActionCategory
from realm_fee_tracker.analysis.models import TrackingResult
from realm_fee_tracker.report.csv_report import SUMMARY_LABELS, TOTAL_LABEL, lamports_to_sol

RULE = "=" * 55
SEPARATOR = "-" * 55


def render_summary(
    result: TrackingResult,
    *,
    wallet_address: str | None = None,
    realm_id: str | None = None,
) -> str:
    """Summary block: one line per category with activity, then the total."""
    lines = [RULE, "  Transaction Fee Summary", RULE, ""]
    if result.is_empty:
        lines.append("  No governance transactions found for:")
        if wallet_address:
            lines.append(f"    Wallet: {wallet_address}")
        if realm_id:
            lines.append(f"    Realm: {realm_id}")
        lines.append("")
    width = max(len(label) for label in SUMMARY_LABELS.values())
    for category in ActionCategory:
        summary = result.summary(category)
        if summary.count == 0 and category not in (
            ActionCategory.VOTE,
            ActionCategory.PROPOSAL,
            ActionCategory.COMMENT,
        ):
            continue
        lines.append(
            f"  {SUMMARY_LABELS[category] + ':':<{width + 1}} {summary.count:>5} | "
            f"{lamports_to_sol(summary.total_cost)} SOL paid in tx fees"
        )
    lines += [
        "",
        SEPARATOR,
        f"  {TOTAL_LABEL}: {result.total_count} | Total Paid: "
        f"{lamports_to_sol(result.total_cost)} SOL in tx fees",
        SEPARATOR,
    ]
    return "\n".join(lines)
