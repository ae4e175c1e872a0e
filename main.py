"""
Command-line entrypoint: track governance fees for one wallet in one realm.

Reads config.json (realm_id, wallet_address, start_date, end_date, rps,
max_concurrency), resolves the RPC URL from the environment / .env, runs the
tracker, writes <wallet>.csv and prints a summary to stdout.

Env: SOLANA_RPC_URL or RPC_URL or HELIUS_API_KEY, LOG_LEVEL, LOG_FORMAT.

Usage:
  python main.py
  python main.py --config other.json --output-dir reports --rps 5
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Configure structured logging before other imports that may log
from realm_fee_tracker.tracker_logging import get_logger

logger = get_logger("main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Track transaction fees and rent a wallet paid for SPL Governance actions in a realm.",
    )
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json (default: ./config.json)")
    parser.add_argument("--output-dir", type=Path, default=Path("."), help="Directory for <wallet>.csv (default: current directory)")
    parser.add_argument("--rps", type=int, default=None, help="Override requests per second to the RPC endpoint")
    parser.add_argument("--concurrency", type=int, default=None, help="Override max concurrent transaction fetches")
    parser.add_argument("--no-csv", action="store_true", help="Print the summary only; do not write the CSV report")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run one tracking pass. Returns the process exit code."""
    from realm_fee_tracker.config import load_settings
    from realm_fee_tracker.core.exceptions import ConfigurationError, TrackerError
    from realm_fee_tracker.report import render_summary, write_csv_report
    from realm_fee_tracker.runner import track

    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            overrides={"rps": args.rps, "max_concurrency": args.concurrency},
        )
    except ConfigurationError as e:
        logger.error("main_config_error", error=str(e))
        return 1

    try:
        result = track(settings)
    except ConfigurationError as e:
        logger.error("main_config_error", error=str(e))
        return 1
    except TrackerError as e:
        logger.error("main_tracker_failed", error=str(e))
        return 1

    if not args.no_csv:
        path = write_csv_report(result, settings.wallet_address, args.output_dir)
        print(f"Report saved to: {path}")
    print(render_summary(result, wallet_address=settings.wallet_address, realm_id=settings.realm_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
