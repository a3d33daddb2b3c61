"""Extract merit badge requirement ids from a troop achievement export CSV.

Writes the CSV-ID JSON consumed by ``merge_csv_with_ui.py``.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from badge_merge.achievement_csv import parse_achievement_csv

DEFAULT_OUTPUT = Path("data/csv-requirement-ids.json")
SAMPLE_BADGES = 5
SAMPLE_IDS = 8


def configure_logging(verbosity: int) -> None:
    level = logging.DEBUG if verbosity > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Parse an achievement export CSV into requirement ids.")
    parser.add_argument("csv_path", type=Path, help="Path to the achievement export CSV.")
    parser.add_argument("--out", type=Path, default=DEFAULT_OUTPUT, help="Output JSON path.")
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
        result = parse_achievement_csv(args.csv_path)
    except (FileNotFoundError, ValueError) as e:
        logging.error(str(e))
        return 1

    logging.info(f"Merit badge requirement rows: {result.merit_badge_requirement_rows}")
    for badge in result.badges[:SAMPLE_BADGES]:
        sample = ", ".join(badge.requirement_ids[:SAMPLE_IDS])
        more = "..." if len(badge.requirement_ids) > SAMPLE_IDS else ""
        logging.debug(f"{badge.badge_name} ({badge.version_year}): {len(badge.requirement_ids)} ids: {sample}{more}")

    args.out.parent.mkdir(parents=True, exist_ok=True)
    with args.out.open("w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        f.write("\n")
    logging.info(f"Output written to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
