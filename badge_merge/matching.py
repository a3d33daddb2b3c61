"""
Decide whether a CSV requirement id and a scraped display label denote the
same requirement.

CSV ids encode position inconsistently across badges and years: plain
concatenation ("2a"), brackets ("2d[1]"), parentheses ("3a(1)"), trailing
option names ("6a avian") and spelled-out options ("5 Option A(1)"). The rules
below are tried in priority order and the first hit wins; there is no scoring.
"""

from __future__ import annotations

import re
from typing import Optional

from .normalize import is_letter, is_number, normalize_id

_OPTION_LETTER_ID_RE = re.compile(r"^(\d+)\s+Option\s+([A-Z])\s*\((\d+)\)", re.IGNORECASE)
_OPTION_LETTER_SUB_ID_RE = re.compile(r"^(\d+)\s+Option\s+([A-Z])\s*\((\d+)\)\(([a-z])\)", re.IGNORECASE)
_PUNCT_TO_SPACE_RE = re.compile(r"[()\[\]]")
_WHITESPACE_RE = re.compile(r"\s+")


def _spaced(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value.lower()).strip()


def _match_under_letter_header(csv_id: str, norm_csv: str, norm_ui: str, parent: str, letter: str) -> bool:
    csv_lower = csv_id.lower()
    if csv_lower == f"{parent}{letter}[{norm_ui}]":
        return True
    if norm_csv == f"{parent}{letter}{norm_ui}":
        return True
    return csv_lower == f"{parent}{letter}({norm_ui})"


def _match_with_option(
    csv_id: str,
    norm_csv: str,
    ui_label: str,
    norm_ui: str,
    parent: str,
    option: str,
    letter: Optional[str],
) -> bool:
    csv_lower = csv_id.lower()

    if norm_csv == normalize_id(f"{parent}{ui_label} {option}"):
        return True

    base_id = normalize_id(parent + ui_label)
    if option in csv_lower and csv_lower.startswith(base_id):
        return True

    # "2a Opt a"
    if is_letter(option) and _spaced(csv_id) == f"{parent}{norm_ui} opt {option}".lower():
        return True

    # "2a[1] Ice"
    if letter and is_number(norm_ui):
        if csv_lower == f"{parent}{letter}[{norm_ui}] {option}".lower():
            return True

    return False


def _match_spelled_option(csv_id: str, norm_ui: str, parent: str, option: str) -> bool:
    if is_letter(option):
        # "5 Option A(1)"
        match = _OPTION_LETTER_ID_RE.match(csv_id)
        if match and match.group(1) == parent and match.group(2).lower() == option and match.group(3) == norm_ui:
            return True
        # "5 Option A(1)(a)"
        match = _OPTION_LETTER_SUB_ID_RE.match(csv_id)
        if match and match.group(1) == parent and match.group(2).lower() == option:
            if norm_ui in (match.group(3), match.group(4)):
                return True

    if is_number(option):
        spaced = _spaced(_PUNCT_TO_SPACE_RE.sub(" ", csv_id))
        if spaced == f"{parent} option {option} {norm_ui}":
            return True

    return False


def ids_match(
    csv_id: str,
    ui_label: str,
    parent_number: Optional[str] = None,
    current_option: Optional[str] = None,
    *,
    current_letter: Optional[str] = None,
    letter_is_header: bool = False,
    allow_prefix: bool = True,
) -> bool:
    """
    Return True when ``csv_id`` names the scraped item labelled ``ui_label``.

    ``parent_number`` is the main requirement the item renders under and
    ``current_option`` the option context from the tracker. When the item sits
    under a letter that is itself a header, a numeric label only matches the
    letter-qualified forms ("2d[1]", "2d1", "2d(1)"), never a bare number.

    The prefix rule is last and never applies to a purely numeric label: "10"
    names requirement 10, not its first child "10a".
    """
    norm_csv = normalize_id(csv_id)
    norm_ui = normalize_id(ui_label)

    if letter_is_header and current_letter and parent_number and is_number(norm_ui):
        return _match_under_letter_header(csv_id, norm_csv, norm_ui, parent_number, current_letter)

    if norm_csv == norm_ui:
        return True

    if parent_number and ui_label:
        if norm_csv == normalize_id(parent_number + ui_label):
            return True

    if current_option and parent_number and ui_label:
        if _match_with_option(csv_id, norm_csv, ui_label, norm_ui, parent_number, current_option, current_letter):
            return True

    if current_option and parent_number and is_number(norm_ui):
        if _match_spelled_option(csv_id, norm_ui, parent_number, current_option):
            return True

    if not allow_prefix or is_number(norm_ui):
        return False

    # Multi-part ids like "4a1 Triathlon Option"
    return len(norm_ui) > 1 and norm_csv.startswith(norm_ui)


def find_match(
    candidates,
    ui_label: str,
    parent_number: Optional[str] = None,
    current_option: Optional[str] = None,
    *,
    current_letter: Optional[str] = None,
    letter_is_header: bool = False,
) -> Optional[str]:
    """
    First candidate id accepted by :func:`ids_match`, in candidate order.

    Every candidate is tried against the exact rules before any candidate is
    accepted on the prefix rule alone.
    """
    candidates = list(candidates)
    for allow_prefix in (False, True):
        for csv_id in candidates:
            if ids_match(
                csv_id,
                ui_label,
                parent_number,
                current_option,
                current_letter=current_letter,
                letter_is_header=letter_is_header,
                allow_prefix=allow_prefix,
            ):
                return csv_id
    return None
