from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from remit_reconcile.events import LoggingSink
from remit_reconcile.logging_config import setup_logging
from remit_reconcile.pipeline import ReconcileOptions, run
from remit_reconcile.schema import HEADER_SCAN_ROWS


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Match submission claims against a remittance report by identifier.")
    parser.add_argument(
        "--source",
        type=Path,
        required=True,
        help="Remittance workbook (.xlsx/.xls/.csv) whose amounts are summed per identifier.",
    )
    parser.add_argument(
        "--target",
        type=Path,
        required=True,
        help="Submission workbook whose rows are split into matched/unmatched.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory for matched_records.xlsx and unmatched_records.xlsx (default: output/).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run matching only, do not write workbooks.",
    )
    parser.add_argument(
        "--header-scan-rows",
        type=int,
        default=HEADER_SCAN_ROWS,
        help=f"How many leading rows to consider when detecting the header (default: {HEADER_SCAN_ROWS}).",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit diagnostic events as JSON log lines.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log header detection and matching diagnostics.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging(level=logging.INFO if args.verbose else logging.WARNING, format_as_json=args.log_json)
    options = ReconcileOptions(
        source_path=args.source,
        target_path=args.target,
        output_dir=args.output_dir,
        dry_run=args.dry_run,
        header_scan_rows=args.header_scan_rows,
    )
    try:
        result = run(options, sink=LoggingSink())
    except (FileNotFoundError, ValueError) as exc:
        logging.getLogger("remit_reconcile").error("reconciliation failed: %s", exc)
        return 1

    print("=== Reconciliation complete ===")
    print(f"Remittance ID field: {result.source_roles.id_field} | amount field: {result.source_roles.amount_field}")
    print(f"Submission ID field: {result.target_roles.id_field}")
    print(
        f"Found {result.matched} matching rows and {result.unmatched} unmatched rows "
        f"out of {result.target_rows} total submission rows ({result.unique_source_ids} unique remittance IDs)."
    )
    if result.matched_path:
        print(f"Matched: {result.matched_path}")
    if result.unmatched_path:
        print(f"Unmatched: {result.unmatched_path}")
    if options.dry_run:
        print("Dry-run mode, no workbooks written.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
