"""Asset Compliance Reconciler: command-line entry point.

Reconciles an inventory export against Intune, Jamf and Defender reports
and prints the dashboard statistics as JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from analysis.pipeline import ReconciliationError, run_reconciliation
from config.compliance_policies import COMPLIANCE_POLICIES
from config.settings import ReconcileConfig, load_config
from utils.exporter import export_csv, export_excel

logger = logging.getLogger("reconciler")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile an asset inventory against device-management reports.")
    parser.add_argument("inventory", type=Path, help="Inventory export (CSV or XLSX)")
    parser.add_argument("--intune", type=Path, help="Intune device report")
    parser.add_argument("--jamf", type=Path, help="Jamf computer/device report")
    parser.add_argument("--defender", type=Path, help="Defender device inventory")
    parser.add_argument("--config", type=Path, help="JSON file with exemption lists and prefixes")
    parser.add_argument("--policy", choices=sorted(COMPLIANCE_POLICIES), help="Compliance policy generation")
    parser.add_argument("--label", help="Period label for the snapshot")
    parser.add_argument("--csv", type=Path, help="Write the asset list as CSV")
    parser.add_argument("--xlsx", type=Path, help="Write a Summary/Assets/Orphans workbook")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else ReconcileConfig()
        if args.policy:
            config = config.with_policy(args.policy)
    except (OSError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    try:
        snapshot = run_reconciliation(
            args.inventory,
            args.intune,
            args.jamf,
            args.defender,
            config=config,
            period_label=args.label,
        )
    except ReconciliationError as exc:
        print(f"Error: {exc} ({exc.__cause__})", file=sys.stderr)
        return 1

    print(json.dumps(snapshot.stats.to_dict(), indent=2, ensure_ascii=False))

    if args.csv:
        args.csv.write_bytes(export_csv(snapshot.assets))
        logger.info("Wrote %s", args.csv)
    if args.xlsx:
        args.xlsx.write_bytes(export_excel(snapshot, config.policy_name))
        logger.info("Wrote %s", args.xlsx)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
