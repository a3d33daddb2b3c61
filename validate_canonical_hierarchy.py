"""Validate a canonical badge file against the CSV requirement ids.

Exits non-zero when any issue is found so it can gate a data refresh.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from badge_merge.validate import validate_canonical

DEFAULT_CANONICAL = Path("data/bsa-data-canonical.json")
DEFAULT_CSV_IDS = Path("data/csv-requirement-ids.json")
DEFAULT_REPORT = Path("data/hierarchy-verification-report.json")
ISSUES_PER_TYPE = 5


def configure_logging(verbosity: int) -> None:
    level = logging.DEBUG if verbosity > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate canonical merit badge hierarchy and structure.")
    parser.add_argument("--canonical", type=Path, default=DEFAULT_CANONICAL, help="Canonical JSON to check.")
    parser.add_argument("--csv-ids", type=Path, default=DEFAULT_CSV_IDS, help="CSV-ID JSON (optional).")
    parser.add_argument("--report", type=Path, default=DEFAULT_REPORT, help="Where to write the JSON report.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        canonical = json.loads(args.canonical.read_text(encoding="utf-8"))
        csv_data = json.loads(args.csv_ids.read_text(encoding="utf-8")) if args.csv_ids.exists() else None
        result = validate_canonical(canonical, csv_data)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        logging.error(f"Validation could not run: {e}")
        return 1

    summary = result.summary()
    logging.info(
        f"{summary['totalBadges']} badges, {summary['totalVersions']} versions, "
        f"{summary['totalRequirements']} requirements "
        f"({summary['totalHeaders']} headers, {summary['totalCompletable']} completable)"
    )
    for issue_type, count in sorted(summary["issuesByType"].items(), key=lambda kv: -kv[1]):
        logging.info(f"  {issue_type}: {count}")

    for stats in result.stats:
        if not stats.issues:
            continue
        logging.debug(f"{stats.badge} v{stats.version}: {len(stats.issues)} issues, max depth {stats.max_depth}")
        shown = {}
        for issue in stats.issues:
            shown[issue.type] = shown.get(issue.type, 0) + 1
            if shown[issue.type] <= ISSUES_PER_TYPE:
                logging.debug(f"    {issue.type}: {issue.details}")

    args.report.parent.mkdir(parents=True, exist_ok=True)
    args.report.write_text(json.dumps(result.to_dict(), indent=2) + "\n", encoding="utf-8")
    logging.info(f"Detailed report saved to: {args.report}")

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
