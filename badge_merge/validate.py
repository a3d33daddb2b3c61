"""
Structural checks over a canonical catalog.

Runs after a merge (or over a hand-edited canonical file) and reports
requirements with no description, headers with no children, duplicate
display orders among siblings, duplicate ids within a version, and CSV ids
that never made it into the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Union

from .hierarchy import max_depth
from .schema import CanonicalOutput, CanonicalRequirement, CsvData


@dataclass(frozen=True)
class ValidationIssue:
    badge: str
    version: int
    type: str
    details: str
    requirement: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"badge": self.badge, "version": self.version, "type": self.type}
        if self.requirement is not None:
            out["requirement"] = self.requirement
        out["details"] = self.details
        return out


@dataclass
class VersionStats:
    badge: str
    version: int
    total_requirements: int = 0
    headers: int = 0
    completable: int = 0
    max_depth: int = 0
    issues: List[ValidationIssue] = field(default_factory=list)


@dataclass
class ValidationResult:
    stats: List[VersionStats]

    @property
    def issues(self) -> List[ValidationIssue]:
        return [issue for s in self.stats for issue in s.issues]

    @property
    def issues_by_type(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for issue in self.issues:
            counts[issue.type] = counts.get(issue.type, 0) + 1
        return counts

    @property
    def ok(self) -> bool:
        return not self.issues

    def summary(self) -> Dict[str, Any]:
        return {
            "totalBadges": len({s.badge for s in self.stats}),
            "totalVersions": len(self.stats),
            "totalRequirements": sum(s.total_requirements for s in self.stats),
            "totalHeaders": sum(s.headers for s in self.stats),
            "totalCompletable": sum(s.completable for s in self.stats),
            "issueCount": len(self.issues),
            "issuesByType": self.issues_by_type,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "versionsWithIssues": [
                {
                    "badge": s.badge,
                    "version": s.version,
                    "stats": {
                        "totalRequirements": s.total_requirements,
                        "headers": s.headers,
                        "completable": s.completable,
                        "maxDepth": s.max_depth,
                    },
                    "issues": [i.to_dict() for i in s.issues],
                }
                for s in self.stats
                if s.issues
            ],
        }


def _check_level(
    reqs: Sequence[CanonicalRequirement],
    stats: VersionStats,
    seen: Set[str],
    depth: int,
) -> None:
    orders: Set[int] = set()

    for req in reqs:
        if req.scoutbook_id in seen:
            stats.issues.append(
                ValidationIssue(
                    stats.badge,
                    stats.version,
                    "duplicate_scoutbook_id",
                    f"Requirement id {req.scoutbook_id} appears more than once",
                    requirement=req.scoutbook_id,
                )
            )
        seen.add(req.scoutbook_id)

        if not req.description.strip():
            stats.issues.append(
                ValidationIssue(
                    stats.badge,
                    stats.version,
                    "missing_description",
                    f"Requirement {req.requirement_number} ({req.scoutbook_id}) has no description",
                    requirement=req.scoutbook_id,
                )
            )

        if req.is_header:
            stats.headers += 1
            if not req.children:
                stats.issues.append(
                    ValidationIssue(
                        stats.badge,
                        stats.version,
                        "empty_header_children",
                        f"Header {req.requirement_number} ({req.scoutbook_id}) has no children",
                        requirement=req.scoutbook_id,
                    )
                )
        else:
            stats.completable += 1

        if req.display_order in orders:
            stats.issues.append(
                ValidationIssue(
                    stats.badge,
                    stats.version,
                    "duplicate_display_order",
                    f"Duplicate display_order {req.display_order} at depth {depth}",
                )
            )
        orders.add(req.display_order)

        if req.children:
            _check_level(req.children, stats, seen, depth + 1)


def validate_canonical(
    canonical: Union[CanonicalOutput, Mapping[str, Any]],
    csv_data: Union[CsvData, Mapping[str, Any], None] = None,
) -> ValidationResult:
    if not isinstance(canonical, CanonicalOutput):
        canonical = CanonicalOutput.from_dict(canonical)
    if csv_data is not None and not isinstance(csv_data, CsvData):
        csv_data = CsvData.from_dict(csv_data)

    csv_ids: Dict[str, Sequence[str]] = {}
    if csv_data is not None:
        for badge in csv_data.badges:
            csv_ids[f"{badge.badge_name}|{badge.version_year}"] = badge.requirement_ids

    all_stats: List[VersionStats] = []
    for badge in canonical.merit_badges:
        for version in badge.versions:
            stats = VersionStats(badge=badge.name, version=version.version_year)
            seen: Set[str] = set()
            _check_level(version.requirements, stats, seen, 0)

            for csv_id in csv_ids.get(f"{badge.name}|{version.version_year}", ()):
                if csv_id not in seen:
                    stats.issues.append(
                        ValidationIssue(
                            badge.name,
                            version.version_year,
                            "missing_csv_id",
                            f'CSV ID "{csv_id}" not found in canonical data',
                            requirement=csv_id,
                        )
                    )

            stats.total_requirements = stats.headers + stats.completable
            stats.max_depth = max_depth(version.requirements)
            all_stats.append(stats)

    return ValidationResult(stats=all_stats)
