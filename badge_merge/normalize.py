"""Requirement label normalization and classification."""

from __future__ import annotations

import re
from enum import Enum

from .config import MAIN_REQUIREMENT_MAX

_BRACKETS_RE = re.compile(r"[()\[\]]")
_LABEL_PUNCT_RE = re.compile(r"[()\[\].]")
_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_DOT_RE = re.compile(r"[.\s]+$")
_NUMBER_RE = re.compile(r"^\d+$")
_LETTER_RE = re.compile(r"^[a-z]$", re.IGNORECASE)
_COMPOSITE_RE = re.compile(r"^(\d+)([a-z])?(\d)?", re.IGNORECASE)

# Unlabeled rows whose description names an option or activity group.
OPTION_HEADER_RE = re.compile(
    r"Option|Swimming|Biking|Running|Cycling|Ice|Inline|Alpine|Nordic", re.IGNORECASE
)


def normalize_id(value: str) -> str:
    """
    Canonicalize a requirement id so "2(a)", "2a" and "2a." compare equal.

    Drops ``()[]``, the trailing period, collapses whitespace and lowercases.
    Runs of trailing periods go together so the result is a fixed point.
    """
    if not value:
        return ""
    cleaned = _BRACKETS_RE.sub("", value)
    cleaned = _TRAILING_DOT_RE.sub("", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip().lower()


def strip_label(label: str) -> str:
    return _LABEL_PUNCT_RE.sub("", label or "").strip()


def is_wrapped(label: str) -> bool:
    """True for labels rendered as "(1)" or "[a]"."""
    return (label or "").strip()[:1] in ("(", "[")


def is_number(value: str) -> bool:
    return bool(_NUMBER_RE.match(value or ""))


def is_letter(value: str) -> bool:
    return bool(_LETTER_RE.match(value or ""))


def is_main_number(label: str, main_max: int = MAIN_REQUIREMENT_MAX) -> bool:
    """A bare (unwrapped) number small enough to be a top-level requirement."""
    clean = strip_label(label)
    return is_number(clean) and int(clean) <= main_max and not is_wrapped(label)


class LabelKind(str, Enum):
    MAIN_NUMBER = "main_number"
    LETTER = "letter"
    SUB_NUMBER = "sub_number"
    COMPOSITE = "composite"
    NAMED_OPTION = "named_option"
    UNLABELED = "unlabeled"
    UNKNOWN = "unknown"


def classify_label(label: str, description: str = "", main_max: int = MAIN_REQUIREMENT_MAX) -> LabelKind:
    if not (label or "").strip():
        if OPTION_HEADER_RE.search(description or ""):
            return LabelKind.NAMED_OPTION
        return LabelKind.UNLABELED

    clean = strip_label(label)
    if is_number(clean):
        if is_wrapped(label):
            return LabelKind.SUB_NUMBER
        if int(clean) <= main_max:
            return LabelKind.MAIN_NUMBER
        return LabelKind.COMPOSITE
    if is_letter(clean):
        return LabelKind.LETTER
    if _COMPOSITE_RE.match(clean):
        return LabelKind.COMPOSITE
    return LabelKind.UNKNOWN


_KIND_LEVELS = {
    LabelKind.MAIN_NUMBER: 0,
    LabelKind.UNLABELED: 0,
    LabelKind.NAMED_OPTION: 1,
    LabelKind.UNKNOWN: 1,
    LabelKind.LETTER: 2,
    LabelKind.SUB_NUMBER: 3,
}


def label_level(label: str, description: str = "", main_max: int = MAIN_REQUIREMENT_MAX) -> int:
    """Depth band for a header row: 0 main, 1 option, 2 letter, 3 sub-item."""
    kind = classify_label(label, description, main_max)
    if kind is not LabelKind.COMPOSITE:
        return _KIND_LEVELS[kind]

    match = _COMPOSITE_RE.match(strip_label(label))
    if match.group(3):
        return 3
    if match.group(2):
        return 2
    return 0
