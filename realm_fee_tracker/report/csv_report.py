"""
CSV report: one row per governance transaction (oldest first), followed by
a summary section with one line per category and the grand total.
"""

from __future__ import annotations

import csv
from pathlib import Path

from realm_fee_tracker.analysis.categories import ActionCategory
from realm_fee_tracker.analysis.models import TrackingResult
from realm_fee_tracker.constants import LAMPORTS_PER_SOL
from realm_fee_tracker.tracker_logging import get_logger

logger = get_logger(__name__)

CSV_COLUMNS = [
    "Transaction Signature",
    "Date/Time",
    "Block/Slot",
    "Transaction Type",
    "Transaction Fee (SOL)",
    "Rent Cost (SOL)",
    "Total Cost (SOL)",
]

SUMMARY_LABELS: dict[ActionCategory, str] = {
    ActionCategory.VOTE: "Votes Casted",
    ActionCategory.PROPOSAL: "Proposals Created",
    ActionCategory.COMMENT: "Comments Posted",
    ActionCategory.TOKEN_DEPOSIT: "Token Deposits",
    ActionCategory.TOKEN_WITHDRAWAL: "Token Withdrawals",
    ActionCategory.DELEGATE: "Delegations",
    ActionCategory.EXECUTE_TRANSACTION: "Execute Transactions",
    ActionCategory.SIGNATORY: "Signatory Actions",
    ActionCategory.PROPOSAL_INSTRUCTION: "Proposal Instructions",
    ActionCategory.GOVERNANCE_ADMIN: "Governance Admin",
    ActionCategory.REFUND: "Refunds",
    ActionCategory.OTHER_GOVERNANCE: "Other Governance",
}
TOTAL_LABEL = "Total DAO Interactions"


def lamports_to_sol(lamports: int) -> str:
    """Lamports -> SOL with 9 decimals, e.g. 5000 -> '0.000005000'."""
    return f"{lamports / LAMPORTS_PER_SOL:.9f}"


def write_csv_report(
    result: TrackingResult,
    wallet_address: str,
    output_dir: str | Path = ".",
) -> Path:
    """Write <wallet>.csv into output_dir and return its path."""
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{wallet_address}.csv"

    rows = sorted(result.transactions, key=lambda tx: tx.block_time)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for tx in rows:
            writer.writerow([
                tx.signature,
                tx.display_time,
                tx.slot,
                tx.category.value,
                lamports_to_sol(tx.network_fee),
                lamports_to_sol(tx.rent_deposit),
                lamports_to_sol(tx.total_cost),
            ])
        writer.writerow([])
        writer.writerow(["--- SUMMARY ---"])
        writer.writerow([])
        for category in ActionCategory:
            summary = result.summary(category)
            writer.writerow([
                SUMMARY_LABELS[category],
                summary.count,
                f"{lamports_to_sol(summary.total_cost)} SOL",
            ])
        writer.writerow([])
        writer.writerow([TOTAL_LABEL, result.total_count, f"{lamports_to_sol(result.total_cost)} SOL"])

    logger.info("csv_report_written", path=str(path), rows=len(rows))
    return path
