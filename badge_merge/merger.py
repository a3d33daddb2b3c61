"""
Merge authoritative CSV requirement ids with the scraped UI tree.

* Ids present in the CSV are completable requirements and keep the CSV id.
* Scraped rows with no CSV match become headers with a synthesized id.
* Parent/child edges come from ``build_hierarchy`` over the processed rows.

Nothing here raises on data-quality problems; every unresolved item becomes a
``Discrepancy`` for a human to review.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .config import DEFAULT_CONFIG, MergeConfig
from .hierarchy import ProcessedRequirement, build_hierarchy, count_requirements
from .matching import find_match
from .options import OptionContextTracker
from .schema import (
    CanonicalBadge,
    CanonicalOutput,
    CanonicalRequirement,
    CanonicalVersion,
    CsvBadgeVersion,
    CsvData,
    Discrepancy,
    DiscrepancyReport,
    DiscrepancyType,
    RequirementLink,
    ScrapedBadgeVersion,
    ScrapedData,
)


def slugify(name: str) -> str:
    value = re.sub(r"[^a-z0-9]+", "_", (name or "").lower())
    return value.strip("_")


def scraped_key(badge_name: str, version_year: int) -> str:
    return f"{badge_name.lower()}:{version_year}"


def placeholder_id(parent_number: Optional[str], label: str, index: int) -> str:
    return f"header_{parent_number or '0'}_{label or index}"


def _csv_only_version(csv_version: CsvBadgeVersion) -> CanonicalVersion:
    requirements = [
        CanonicalRequirement(
            scoutbook_id=req_id,
            requirement_number=req_id,
            description="",
            is_header=False,
            display_order=idx,
        )
        for idx, req_id in enumerate(csv_version.requirement_ids)
    ]
    return CanonicalVersion(version_year=csv_version.version_year, requirements=requirements)


def merge_badge_version(
    csv_version: CsvBadgeVersion,
    scraped_version: Optional[ScrapedBadgeVersion],
    config: Optional[MergeConfig] = None,
) -> Tuple[CanonicalVersion, List[Discrepancy]]:
    """Merge one badge + year; returns the canonical version and its discrepancies."""
    config = config or DEFAULT_CONFIG
    badge_name = csv_version.badge_name
    version_year = csv_version.version_year

    if scraped_version is None:
        logging.debug(f"No scrape for {badge_name} {version_year}; using CSV ids only")
        missing = Discrepancy(
            type=DiscrepancyType.BADGE_NOT_ACCESSIBLE,
            badge_name=badge_name,
            version_year=version_year,
            description=f"No scraped UI data found for {badge_name} version {version_year}",
            suggested_action="Run scraper on this badge version",
        )
        return _csv_only_version(csv_version), [missing]

    tracker = OptionContextTracker(config)
    outstanding: List[str] = list(csv_version.requirement_ids)
    processed: List[ProcessedRequirement] = []
    unmatched_checkboxes: List[Tuple[int, str]] = []

    for index, scraped in enumerate(scraped_version.requirements):
        position = tracker.observe(scraped)
        label = scraped.display_label

        matched_id: Optional[str] = None
        if label:
            matched_id = find_match(
                outstanding,
                label,
                scraped.parent_number,
                position.option,
                current_letter=position.letter,
                letter_is_header=position.letter_is_header,
            )
            if matched_id is not None:
                outstanding.remove(matched_id)

        if matched_id is None and scraped.has_checkbox:
            unmatched_checkboxes.append((index, label))

        processed.append(
            ProcessedRequirement(
                scoutbook_id=matched_id or placeholder_id(scraped.parent_number, label, index),
                requirement_number=label,
                description=scraped.description,
                is_header=matched_id is None,
                display_order=index,
                has_checkbox=scraped.has_checkbox,
                links=tuple(RequirementLink(url=l.url, text=l.text, type=l.type) for l in scraped.links),
            )
        )

    discrepancies: List[Discrepancy] = [
        Discrepancy(
            type=DiscrepancyType.CSV_NOT_IN_UI,
            badge_name=badge_name,
            version_year=version_year,
            scoutbook_id=csv_id,
            description=f'CSV requirement ID "{csv_id}" not found in scraped UI',
            suggested_action="Verify badge was fully expanded during scrape, or ID format mismatch",
        )
        for csv_id in outstanding
    ]

    if config.report_unmatched_checkboxes:
        for index, label in unmatched_checkboxes:
            discrepancies.append(
                Discrepancy(
                    type=DiscrepancyType.UI_NOT_MATCHED,
                    badge_name=badge_name,
                    version_year=version_year,
                    ui_label=label,
                    description=f'Scraped item {index} ("{label or "unlabeled"}") has a checkbox but no CSV id',
                    suggested_action="Check whether the CSV export omits this requirement or the label format changed",
                )
            )

    requirements = build_hierarchy(processed, config.main_requirement_max)
    logging.debug(
        f"{badge_name} {version_year}: {len(processed)} rows, "
        f"{len(csv_version.requirement_ids) - len(outstanding)} matched, {len(outstanding)} unmatched CSV ids"
    )
    return CanonicalVersion(version_year=version_year, requirements=requirements), discrepancies


def _coerce_csv(csv_data: Union[CsvData, Mapping[str, Any]]) -> CsvData:
    if isinstance(csv_data, CsvData):
        return csv_data
    return CsvData.from_dict(csv_data)


def _coerce_scraped(scraped_data: Union[ScrapedData, Mapping[str, Any], None]) -> Optional[ScrapedData]:
    if scraped_data is None or isinstance(scraped_data, ScrapedData):
        return scraped_data
    return ScrapedData.from_dict(scraped_data)


def merge(
    csv_data: Union[CsvData, Mapping[str, Any]],
    scraped_data: Union[ScrapedData, Mapping[str, Any], None] = None,
    config: Optional[MergeConfig] = None,
    generated_at: Optional[str] = None,
) -> Tuple[CanonicalOutput, DiscrepancyReport]:
    """
    Build the canonical catalog and discrepancy report.

    Accepts either the parsed dataclasses or the raw JSON objects. Malformed
    top-level input raises ``ValueError``; everything else is reported.
    """
    config = config or DEFAULT_CONFIG
    csv = _coerce_csv(csv_data)
    scraped = _coerce_scraped(scraped_data)
    generated_at = generated_at or datetime.now(timezone.utc).isoformat()

    scraped_map: Dict[str, ScrapedBadgeVersion] = {}
    if scraped is not None:
        for badge in scraped.badges:
            key = scraped_key(badge.badge_name, badge.version_year)
            if key in scraped_map:
                logging.warning(f"Duplicate scrape for {badge.badge_name} {badge.version_year}; keeping the last one")
            scraped_map[key] = badge

    badge_map: Dict[str, List[CsvBadgeVersion]] = {}
    for version in csv.badges:
        badge_map.setdefault(version.badge_name.lower(), []).append(version)

    discrepancies: List[Discrepancy] = []
    merit_badges: List[CanonicalBadge] = []
    used_scrapes = set()

    for versions in badge_map.values():
        badge_name = versions[0].badge_name
        canonical_versions: List[CanonicalVersion] = []

        for csv_version in versions:
            key = scraped_key(badge_name, csv_version.version_year)
            if key in scraped_map:
                used_scrapes.add(key)
            canonical_version, found = merge_badge_version(csv_version, scraped_map.get(key), config)
            canonical_versions.append(canonical_version)
            discrepancies.extend(found)

        canonical_versions.sort(key=lambda v: v.version_year, reverse=True)
        merit_badges.append(
            CanonicalBadge(
                code=slugify(badge_name),
                name=badge_name,
                category=None,
                is_eagle_required=config.is_eagle_required(badge_name),
                is_active=True,
                versions=canonical_versions,
            )
        )

    if config.report_orphan_scrapes:
        for key, badge in scraped_map.items():
            if key in used_scrapes:
                continue
            discrepancies.append(
                Discrepancy(
                    type=DiscrepancyType.VERSION_MISMATCH,
                    badge_name=badge.badge_name,
                    version_year=badge.version_year,
                    description=f"Scraped {badge.badge_name} version {badge.version_year} has no CSV counterpart",
                    suggested_action="Confirm the version year in the scrape or re-export the achievement CSV",
                )
            )

    merit_badges.sort(key=lambda b: b.name.lower())

    canonical = CanonicalOutput(generated_at=generated_at, source=config.source, merit_badges=merit_badges)
    report = DiscrepancyReport.from_discrepancies(discrepancies, generated_at)
    return canonical, report


def summarize(canonical: CanonicalOutput) -> Dict[str, int]:
    versions = [v for b in canonical.merit_badges for v in b.versions]
    return {
        "badges": len(canonical.merit_badges),
        "versions": len(versions),
        "requirements": sum(count_requirements(v.requirements) for v in versions),
    }
