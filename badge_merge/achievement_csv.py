"""
Extract merit badge requirement ids from the troop achievement export CSV.

Each export row is one scout's progress on one advancement item. Rows whose
``advancementtype`` ends in " Merit Badge Requirements" belong to a merit
badge; ``advancement`` holds the requirement id exactly as the tracking system
stores it ("1a", "3a[1]", "4a1 Triathlon Option") and ``version`` the
requirement year. Blank ids are header rows and are counted but not kept.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

import pandas as pd

from .requirement_number import natural_sort_key
from .schema import CsvBadgeVersion

REQUIRED_COLUMNS = ("advancementtype", "advancement", "version")
MERIT_BADGE_SUFFIX = " Merit Badge Requirements"
_YEAR_RE = re.compile(r"^\s*(\d+)")


def extract_badge_name(advancement_type: str) -> Optional[str]:
    """Strip the " Merit Badge Requirements" suffix; None for other advancement types."""
    if not advancement_type.endswith(MERIT_BADGE_SUFFIX):
        return None
    return advancement_type[: -len(MERIT_BADGE_SUFFIX)]


@dataclass
class CsvParseResult:
    csv_path: str
    total_rows: int
    merit_badge_requirement_rows: int
    badges: List[CsvBadgeVersion] = field(default_factory=list)
    generated_at: str = ""

    @property
    def unique_badge_versions(self) -> int:
        return len(self.badges)

    @property
    def unique_badges(self) -> int:
        return len({b.badge_name for b in self.badges})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "csvPath": self.csv_path,
            "totalRows": self.total_rows,
            "meritBadgeRequirementRows": self.merit_badge_requirement_rows,
            "uniqueBadgeVersions": self.unique_badge_versions,
            "uniqueBadges": self.unique_badges,
            "badges": [b.to_dict() for b in self.badges],
        }


def _read_export(csv_path: Path) -> pd.DataFrame:
    try:
        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except pd.errors.EmptyDataError as exc:
        raise ValueError(f"CSV file is empty: {csv_path}") from exc
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required column(s) in {csv_path.name}: {', '.join(missing)}")
    return df


def parse_achievement_csv(csv_path: Union[str, Path], generated_at: Optional[str] = None) -> CsvParseResult:
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Achievement CSV not found: {csv_path}")

    df = _read_export(csv_path)

    grouped: Dict[Tuple[str, int], Set[str]] = {}
    occurrences: Dict[Tuple[str, int], int] = {}
    merit_rows = 0

    rows = df[list(REQUIRED_COLUMNS)].itertuples(index=False, name=None)
    for row_number, (advancement_type, advancement, version) in enumerate(rows, start=2):
        badge_name = extract_badge_name(advancement_type)
        if badge_name is None:
            continue
        merit_rows += 1

        year_match = _YEAR_RE.match(version)
        if not year_match:
            logging.warning(f'Invalid version year "{version}" for {badge_name}, row {row_number}')
            continue
        version_year = int(year_match.group(1))

        key = (badge_name, version_year)
        ids = grouped.setdefault(key, set())
        occurrences[key] = occurrences.get(key, 0) + 1

        advancement = advancement.strip()
        if advancement:
            ids.add(advancement)

    badges = [
        CsvBadgeVersion(
            badge_name=name,
            version_year=year,
            requirement_ids=tuple(sorted(ids, key=natural_sort_key)),
            total_occurrences=occurrences[(name, year)],
        )
        for (name, year), ids in grouped.items()
    ]
    badges.sort(key=lambda b: (b.badge_name, b.version_year))

    result = CsvParseResult(
        csv_path=csv_path.name,
        total_rows=len(df),
        merit_badge_requirement_rows=merit_rows,
        badges=badges,
        generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
    )
    logging.info(
        f"Parsed {result.total_rows} rows from {csv_path.name}: "
        f"{result.unique_badges} badges, {result.unique_badge_versions} badge versions"
    )
    return result
