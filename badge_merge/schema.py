"""
Data model for the CSV/UI requirement merge.

Inputs are the CSV-ID extraction result and the scraped UI result; outputs are
the canonical badge catalog and the discrepancy report. Each dataclass carries
a ``from_dict``/``to_dict`` pair that reads or writes the JSON shape the
surrounding scripts load and save.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


def _require(data: Mapping[str, Any], key: str, context: str) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"{context} must be an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ValueError(f"Missing required field '{key}' in {context}")
    return data[key]


def _require_list(data: Mapping[str, Any], key: str, context: str) -> List[Any]:
    value = _require(data, key, context)
    if not isinstance(value, list):
        raise ValueError(f"Field '{key}' in {context} must be a list")
    return value


def _as_year(value: Any, context: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid versionYear {value!r} in {context}") from exc


def _uniq(seq: Sequence[str]) -> Tuple[str, ...]:
    seen = set()
    ordered: List[str] = []
    for val in seq:
        if val in seen:
            continue
        seen.add(val)
        ordered.append(val)
    return tuple(ordered)


########################
# INPUT: CSV IDS
########################


@dataclass(frozen=True)
class CsvBadgeVersion:
    """Authoritative requirement ids for one badge + version year."""

    badge_name: str
    version_year: int
    requirement_ids: Tuple[str, ...] = ()
    total_occurrences: int = 0

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CsvBadgeVersion":
        context = "CSV badge entry"
        name = str(_require(data, "badgeName", context))
        year = _as_year(_require(data, "versionYear", context), f"{context} '{name}'")
        raw_ids = data.get("requirementIds") or []
        ids = _uniq([str(i) for i in raw_ids])
        return CsvBadgeVersion(
            badge_name=name,
            version_year=year,
            requirement_ids=ids,
            total_occurrences=int(data.get("totalOccurrences", 0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "badgeName": self.badge_name,
            "versionYear": self.version_year,
            "requirementIds": list(self.requirement_ids),
            "totalOccurrences": self.total_occurrences,
        }


@dataclass(frozen=True)
class CsvData:
    badges: Tuple[CsvBadgeVersion, ...]
    generated_at: str = ""

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CsvData":
        badges = _require_list(data, "badges", "CSV data")
        return CsvData(
            badges=tuple(CsvBadgeVersion.from_dict(b) for b in badges),
            generated_at=str(data.get("generatedAt", "")),
        )


########################
# INPUT: SCRAPED UI
########################


def _entries(value: Any, context: str) -> List[Mapping[str, Any]]:
    """Per-item lists: non-object entries are dropped with a warning."""
    if value is None:
        return []
    if not isinstance(value, list):
        logging.warning(f"Ignoring {context}: expected a list, got {type(value).__name__}")
        return []
    kept = [item for item in value if isinstance(item, Mapping)]
    if len(kept) != len(value):
        logging.warning(f"Skipped {len(value) - len(kept)} malformed entries in {context}")
    return kept


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class ScrapedLink:
    url: str
    text: str = ""
    type: str = "external"
    context: str = ""

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScrapedLink":
        return ScrapedLink(
            url=str(data.get("url") or ""),
            text=str(data.get("text", "") or ""),
            type=str(data.get("type", "external") or "external"),
            context=str(data.get("context", "") or ""),
        )


@dataclass(frozen=True)
class ScrapedRequirement:
    """One visually rendered requirement node, in document order."""

    display_label: str = ""
    description: str = ""
    parent_number: Optional[str] = None
    visual_depth: int = 0
    has_checkbox: bool = False
    links: Tuple[ScrapedLink, ...] = ()

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScrapedRequirement":
        if not isinstance(data, Mapping):
            raise ValueError("Scraped requirement must be an object")
        label = str(data.get("displayLabel") or "")
        parent = data.get("parentNumber")
        return ScrapedRequirement(
            display_label=label,
            description=str(data.get("description") or ""),
            parent_number=str(parent) if parent not in (None, "") else None,
            visual_depth=_as_int(data.get("visualDepth")),
            has_checkbox=bool(data.get("hasCheckbox", False)),
            links=tuple(ScrapedLink.from_dict(l) for l in _entries(data.get("links"), f"links of '{label}'")),
        )


@dataclass(frozen=True)
class ScrapedBadgeVersion:
    badge_name: str
    version_year: int
    requirements: Tuple[ScrapedRequirement, ...] = ()

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScrapedBadgeVersion":
        context = "scraped badge entry"
        name = str(_require(data, "badgeName", context))
        year = _as_year(_require(data, "versionYear", context), f"{context} '{name}'")
        reqs = _entries(data.get("requirements"), f"requirements of {name} {year}")
        return ScrapedBadgeVersion(
            badge_name=name,
            version_year=year,
            requirements=tuple(ScrapedRequirement.from_dict(r) for r in reqs),
        )


@dataclass(frozen=True)
class ScrapedData:
    badges: Tuple[ScrapedBadgeVersion, ...]

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "ScrapedData":
        badges = _require_list(data, "badges", "scraped data")
        return ScrapedData(badges=tuple(ScrapedBadgeVersion.from_dict(b) for b in badges))


########################
# WALK STATE
########################


@dataclass(frozen=True)
class HierarchyPosition:
    """Where the tracker believes the current item sits in the outline."""

    main_req: Optional[str] = None
    option: Optional[str] = None
    letter: Optional[str] = None
    letter_is_header: bool = False


########################
# OUTPUT: CANONICAL
########################


@dataclass(frozen=True)
class RequirementLink:
    url: str
    text: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "text": self.text, "type": self.type}


@dataclass
class CanonicalRequirement:
    scoutbook_id: str
    requirement_number: str
    description: str
    is_header: bool
    display_order: int
    parent_scoutbook_id: Optional[str] = None
    links: List[RequirementLink] = field(default_factory=list)
    children: List["CanonicalRequirement"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scoutbook_id": self.scoutbook_id,
            "requirement_number": self.requirement_number,
            "description": self.description,
            "is_header": self.is_header,
            "display_order": self.display_order,
            "parent_scoutbook_id": self.parent_scoutbook_id,
            "links": [l.to_dict() for l in self.links],
            "children": [c.to_dict() for c in self.children],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CanonicalRequirement":
        return CanonicalRequirement(
            scoutbook_id=str(_require(data, "scoutbook_id", "canonical requirement")),
            requirement_number=str(data.get("requirement_number", "") or ""),
            description=str(data.get("description", "") or ""),
            is_header=bool(data.get("is_header", False)),
            display_order=int(data.get("display_order", 0) or 0),
            parent_scoutbook_id=data.get("parent_scoutbook_id"),
            links=[
                RequirementLink(str(l.get("url", "")), str(l.get("text", "")), str(l.get("type", "")))
                for l in data.get("links") or []
            ],
            children=[CanonicalRequirement.from_dict(c) for c in data.get("children") or []],
        )


@dataclass
class CanonicalVersion:
    version_year: int
    requirements: List[CanonicalRequirement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version_year": self.version_year,
            "requirements": [r.to_dict() for r in self.requirements],
        }


@dataclass
class CanonicalBadge:
    code: str
    name: str
    category: Optional[str]
    is_eagle_required: bool
    is_active: bool
    versions: List[CanonicalVersion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "is_eagle_required": self.is_eagle_required,
            "is_active": self.is_active,
            "versions": [v.to_dict() for v in self.versions],
        }


@dataclass
class CanonicalOutput:
    generated_at: str
    source: str
    merit_badges: List[CanonicalBadge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "source": self.source,
            "merit_badges": [b.to_dict() for b in self.merit_badges],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "CanonicalOutput":
        badges: List[CanonicalBadge] = []
        for entry in _require_list(data, "merit_badges", "canonical output"):
            name = str(_require(entry, "name", "canonical badge"))
            versions = [
                CanonicalVersion(
                    version_year=_as_year(_require(v, "version_year", f"canonical badge '{name}'"), name),
                    requirements=[CanonicalRequirement.from_dict(r) for r in v.get("requirements") or []],
                )
                for v in entry.get("versions") or []
            ]
            badges.append(
                CanonicalBadge(
                    code=str(entry.get("code", "") or ""),
                    name=name,
                    category=entry.get("category"),
                    is_eagle_required=bool(entry.get("is_eagle_required", False)),
                    is_active=bool(entry.get("is_active", True)),
                    versions=versions,
                )
            )
        return CanonicalOutput(
            generated_at=str(data.get("generated_at", "")),
            source=str(data.get("source", "")),
            merit_badges=badges,
        )


########################
# OUTPUT: DISCREPANCIES
########################


class DiscrepancyType(str, Enum):
    CSV_NOT_IN_UI = "csv_not_in_ui"
    UI_NOT_MATCHED = "ui_not_matched"
    BADGE_NOT_ACCESSIBLE = "badge_not_accessible"
    AMBIGUOUS_MATCH = "ambiguous_match"
    VERSION_MISMATCH = "version_mismatch"


@dataclass(frozen=True)
class Discrepancy:
    type: DiscrepancyType
    badge_name: str
    version_year: int
    description: str
    suggested_action: str
    scoutbook_id: Optional[str] = None
    ui_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": self.type.value,
            "badgeName": self.badge_name,
            "versionYear": self.version_year,
        }
        if self.scoutbook_id is not None:
            out["scoutbookId"] = self.scoutbook_id
        if self.ui_label is not None:
            out["uiLabel"] = self.ui_label
        out["description"] = self.description
        out["suggestedAction"] = self.suggested_action
        return out


@dataclass
class DiscrepancyReport:
    generated_at: str
    total_discrepancies: int
    by_type: Dict[str, int]
    discrepancies: List[Discrepancy] = field(default_factory=list)

    @staticmethod
    def from_discrepancies(discrepancies: Sequence[Discrepancy], generated_at: str) -> "DiscrepancyReport":
        by_type: Dict[str, int] = {}
        for d in discrepancies:
            by_type[d.type.value] = by_type.get(d.type.value, 0) + 1
        return DiscrepancyReport(
            generated_at=generated_at,
            total_discrepancies=len(discrepancies),
            by_type=by_type,
            discrepancies=list(discrepancies),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "total_discrepancies": self.total_discrepancies,
            "by_type": dict(self.by_type),
            "discrepancies": [d.to_dict() for d in self.discrepancies],
        }
