from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

import yaml

# Option header wording -> the short token the CSV ids carry. Checked in order,
# so longer phrases sit ahead of the single words they contain.
DEFAULT_OPTION_MAPPINGS: Mapping[str, str] = MappingProxyType(
    {
        "beef cattle": "beef",
        "dairying": "dairy",
        "dairy": "dairy",
        "horse": "horse",
        "sheep": "sheep",
        "hog": "hog",
        "avian": "avian",
        "rabbit": "rabbit",
        "poultry": "avian",
        "ice skating": "ice",
        "ice": "ice",
        "inline skating": "line",
        "inline": "line",
        "roller skating": "roll",
        "rolling": "roll",
        "roll": "roll",
        "board": "board",
        "skateboard": "board",
        "alpine skiing": "alpine",
        "alpine": "alpine",
        "nordic skiing": "nordic",
        "nordic": "nordic",
        "snowshoe": "shoe",
        "snowshoeing": "shoe",
        "snowboard": "snow",
        "snow": "snow",
        "triathlon": "triathlon",
        "duathlon": "duathlon",
        "aquathlon": "aquathlon",
        "aquabike": "aquabike",
        "group 1": "grp 1",
        "group 2": "grp 2",
        "group h": "grp h",
        "group i": "grp i",
        "opt 1": "opt 1",
        "opt 2": "opt 2",
        "opt 3": "opt 3",
        "opt a": "opt a",
        "opt b": "opt b",
        "opt c": "opt c",
    }
)

# Cycling/Hiking/Swimming, Emergency Preparedness/Lifesaving and
# Environmental Science/Sustainability are either-or slots; all count.
DEFAULT_EAGLE_REQUIRED: Tuple[str, ...] = (
    "Camping",
    "Citizenship in the Community",
    "Citizenship in the Nation",
    "Citizenship in the World",
    "Communication",
    "Cooking",
    "Cycling",
    "Emergency Preparedness",
    "Environmental Science",
    "Family Life",
    "First Aid",
    "Hiking",
    "Lifesaving",
    "Personal Fitness",
    "Personal Management",
    "Swimming",
    "Sustainability",
)

DEFAULT_SOURCE = "merge_csv_with_ui.py"
MAIN_REQUIREMENT_MAX = 20


@dataclass(frozen=True)
class MergeConfig:
    option_mappings: Mapping[str, str] = field(default_factory=lambda: DEFAULT_OPTION_MAPPINGS)
    eagle_required: Tuple[str, ...] = DEFAULT_EAGLE_REQUIRED
    source: str = DEFAULT_SOURCE
    main_requirement_max: int = MAIN_REQUIREMENT_MAX
    report_unmatched_checkboxes: bool = False
    report_orphan_scrapes: bool = False

    def is_eagle_required(self, badge_name: str) -> bool:
        lowered = badge_name.strip().lower()
        return any(lowered == name.lower() for name in self.eagle_required)


DEFAULT_CONFIG = MergeConfig()


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"1", "true", "yes", "on", "0", "false", "no", "off"}:
        return value.strip().lower() in {"1", "true", "yes", "on"}
    raise ValueError(f"'{key}' must be a boolean, got {value!r}")


def merge_config_from_dict(data: Mapping[str, Any], base: MergeConfig = DEFAULT_CONFIG) -> MergeConfig:
    """
    Overlay a parsed config document on ``base``.

    ``option_mappings`` entries are added ahead of the base table so a site
    override wins over a built-in phrase. ``replace_option_mappings: true``
    drops the built-in table entirely.
    """

    updates: Dict[str, Any] = {}

    mappings = data.get("option_mappings")
    if mappings is not None:
        if not isinstance(mappings, Mapping):
            raise ValueError("'option_mappings' must be a mapping of phrase -> short name")
        extra = {str(k).lower(): str(v).lower() for k, v in mappings.items()}
        if data.get("replace_option_mappings"):
            combined = extra
        else:
            combined = {**extra, **{k: v for k, v in base.option_mappings.items() if k not in extra}}
        updates["option_mappings"] = MappingProxyType(combined)

    eagle = data.get("eagle_required")
    if eagle is not None:
        if isinstance(eagle, str):
            eagle = [eagle]
        if not isinstance(eagle, (list, tuple)):
            raise ValueError("'eagle_required' must be a list of badge names")
        updates["eagle_required"] = tuple(str(name) for name in eagle)

    if "source" in data:
        updates["source"] = str(data["source"])

    if "main_requirement_max" in data:
        try:
            updates["main_requirement_max"] = int(data["main_requirement_max"])
        except (TypeError, ValueError) as exc:
            raise ValueError("'main_requirement_max' must be an integer") from exc

    for key in ("report_unmatched_checkboxes", "report_orphan_scrapes"):
        if key in data:
            updates[key] = _parse_bool(data[key], key)

    known = {
        "option_mappings",
        "replace_option_mappings",
        "eagle_required",
        "source",
        "main_requirement_max",
        "report_unmatched_checkboxes",
        "report_orphan_scrapes",
    }
    for key in data:
        if key not in known:
            logging.warning(f"Ignoring unknown merge config key: {key}")

    return replace(base, **updates)


def load_merge_config(config_path: Path) -> MergeConfig:
    if not config_path.exists():
        raise FileNotFoundError(f"Merge config file not found: {config_path}")

    raw_text = config_path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse YAML config at {config_path}") from exc

    if parsed is None:
        return DEFAULT_CONFIG
    if not isinstance(parsed, dict):
        raise ValueError("Merge config must be a mapping at the top level.")

    return merge_config_from_dict(parsed)
