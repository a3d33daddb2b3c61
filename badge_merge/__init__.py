"""
Merit badge requirement reconciliation: merges authoritative CSV requirement
ids with the scraped requirement tree into one canonical catalog plus a
discrepancy report.
"""

from .config import (  # noqa: F401
    DEFAULT_CONFIG,
    MergeConfig,
    load_merge_config,
    merge_config_from_dict,
)

from .schema import (  # noqa: F401
    CanonicalBadge,
    CanonicalOutput,
    CanonicalRequirement,
    CanonicalVersion,
    CsvBadgeVersion,
    CsvData,
    Discrepancy,
    DiscrepancyReport,
    DiscrepancyType,
    HierarchyPosition,
    RequirementLink,
    ScrapedBadgeVersion,
    ScrapedData,
    ScrapedLink,
    ScrapedRequirement,
)

from .normalize import LabelKind, classify_label, label_level, normalize_id  # noqa: F401
from .matching import find_match, ids_match  # noqa: F401
from .options import OptionContextTracker, extract_option_name  # noqa: F401
from .hierarchy import ProcessedRequirement, build_hierarchy, count_requirements  # noqa: F401
from .merger import merge, merge_badge_version  # noqa: F401

__all__ = [
    "DEFAULT_CONFIG",
    "MergeConfig",
    "load_merge_config",
    "merge_config_from_dict",
    "CanonicalBadge",
    "CanonicalOutput",
    "CanonicalRequirement",
    "CanonicalVersion",
    "CsvBadgeVersion",
    "CsvData",
    "Discrepancy",
    "DiscrepancyReport",
    "DiscrepancyType",
    "HierarchyPosition",
    "RequirementLink",
    "ScrapedBadgeVersion",
    "ScrapedData",
    "ScrapedLink",
    "ScrapedRequirement",
    "LabelKind",
    "classify_label",
    "label_level",
    "normalize_id",
    "find_match",
    "ids_match",
    "OptionContextTracker",
    "extract_option_name",
    "ProcessedRequirement",
    "build_hierarchy",
    "count_requirements",
    "merge",
    "merge_badge_version",
]
