"""Merge CSV requirement ids with scraped UI data into the canonical badge file.

Inputs:
    * CSV-ID JSON produced by ``parse_achievement_csv.py``
    * Scraped UI JSON from the requirement scraper (optional; without it every
      badge degrades to a flat, description-less list of CSV ids)

Outputs:
    * Canonical JSON (badges -> versions -> requirement tree)
    * Discrepancy report JSON (items a human should review)
    * Optional review workbook (.xlsx)
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from badge_merge.config import DEFAULT_CONFIG, load_merge_config
from badge_merge.merger import merge, summarize

DEFAULT_CSV_IDS = Path("data/csv-requirement-ids.json")
DEFAULT_SCRAPED = Path("data/merit-badge-requirements-scraped.json")
DEFAULT_CANONICAL_OUT = Path("data/bsa-data-canonical-new.json")
DEFAULT_DISCREPANCY_OUT = Path("data/discrepancy-report.json")
SAMPLE_DISCREPANCIES = 5


def configure_logging(verbosity: int) -> None:
    level = logging.DEBUG if verbosity > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Merge authoritative CSV requirement ids with scraped requirement trees.",
    )
    parser.add_argument("--csv-ids", type=Path, default=DEFAULT_CSV_IDS, help="CSV-ID extraction JSON.")
    parser.add_argument("--scraped", type=Path, default=DEFAULT_SCRAPED, help="Scraped UI JSON (optional).")
    parser.add_argument("--out", type=Path, default=DEFAULT_CANONICAL_OUT, help="Canonical output JSON path.")
    parser.add_argument(
        "--discrepancies",
        type=Path,
        default=DEFAULT_DISCREPANCY_OUT,
        help="Discrepancy report JSON path.",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML merge config (option table, flags).")
    parser.add_argument("--review-xlsx", type=Path, default=None, help="Also write a review workbook here.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    return parser.parse_args(argv)


def load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_merge_config(args.config) if args.config else DEFAULT_CONFIG
    except (FileNotFoundError, ValueError) as e:
        logging.error(f"Failed to load merge config: {e}")
        return 1

    if not args.csv_ids.exists():
        logging.error(f"CSV data not found: {args.csv_ids}")
        logging.error("Run: python parse_achievement_csv.py <achievement-export.csv>")
        return 1

    try:
        csv_data = load_json(args.csv_ids)
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Failed to read {args.csv_ids}: {e}")
        return 1

    scraped_data = None
    if args.scraped.exists():
        try:
            scraped_data = load_json(args.scraped)
        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Failed to read {args.scraped}: {e}")
            return 1
        logging.info(f"Loaded scraped UI data from {args.scraped}")
    else:
        logging.warning(f"No scraped UI data at {args.scraped}; proceeding with CSV-only merge")

    try:
        canonical, report = merge(csv_data, scraped_data, config)
    except ValueError as e:
        logging.error(f"Malformed input: {e}")
        return 1

    totals = summarize(canonical)
    logging.info(
        f"Merged {totals['badges']} badges, {totals['versions']} versions, {totals['requirements']} requirements"
    )
    logging.info(f"Discrepancies: {report.total_discrepancies}")
    for dtype, count in report.by_type.items():
        logging.info(f"  {dtype}: {count}")

    write_json(args.out, canonical.to_dict())
    logging.info(f"Canonical output: {args.out}")
    write_json(args.discrepancies, report.to_dict())
    logging.info(f"Discrepancy report: {args.discrepancies}")

    for i, d in enumerate(report.discrepancies[:SAMPLE_DISCREPANCIES], start=1):
        logging.info(f"  {i}. [{d.type.value}] {d.badge_name} v{d.version_year}: {d.description}")
    if report.total_discrepancies > SAMPLE_DISCREPANCIES:
        logging.info(f"  ... and {report.total_discrepancies - SAMPLE_DISCREPANCIES} more")

    if args.review_xlsx:
        from badge_merge.export import write_review_workbook

        write_review_workbook(canonical, report, args.review_xlsx)

    return 0


if __name__ == "__main__":
    sys.exit(main())
