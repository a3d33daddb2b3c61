"""
Requirement number format helpers.

The achievement export writes numbers in parenthetical form ("6A(a)(1)",
"9b(2)"); older data and display code use the run-together form ("6Aa1",
"9b2"). These helpers convert between the two, pull out the structural
parts, and provide a natural sort order for id lists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

_BASE_RE = re.compile(r"^(\d+)")
_OPTION_LETTER_RE = re.compile(r"^\d+([A-Z])")
_PAREN_GROUP_RE = re.compile(r"\(([^)]+)\)")
_DISPLAY_SPLIT_RE = re.compile(r"^(\d+[A-Za-z]?)(.*)$")
_DISPLAY_OPTION_RE = re.compile(r"^(\d+)([A-Z])(\d+)([a-z])?$")
_DISPLAY_SIMPLE_SUB_RE = re.compile(r"^(\d+)([a-z])(\d+)$")
_NATURAL_CHUNK_RE = re.compile(r"(\d+)")


def to_display_format(scoutbook: str) -> str:
    """
    "6A(a)(1)" -> "6Aa1", "9b(2)" -> "9b2"; ids with no parenthetical part pass through.
    """
    if not scoutbook:
        return ""
    match = _DISPLAY_SPLIT_RE.match(scoutbook)
    if not match:
        return scoutbook
    base, rest = match.groups()
    if not rest:
        return base
    groups = _PAREN_GROUP_RE.findall(rest)
    if not groups:
        return scoutbook
    return base + "".join(groups)


def to_scoutbook_format(display: str) -> str:
    """
    Best-effort reverse of :func:`to_display_format`.

    "6A1a" could be "6A(1)(a)" or "6A(a)(1)"; the letter-first form is
    assumed. Prefer the stored CSV id wherever one exists.
    """
    if not display:
        return ""
    match = _DISPLAY_OPTION_RE.match(display)
    if match:
        num, option, sub_num, detail = match.groups()
        if detail:
            return f"{num}{option}({detail})({sub_num})"
        return f"{num}{option}({sub_num})"
    match = _DISPLAY_SIMPLE_SUB_RE.match(display)
    if match:
        num, letter, sub_num = match.groups()
        return f"{num}{letter}({sub_num})"
    return display


def normalize_to_scoutbook(value: str) -> str:
    if not value:
        return ""
    if "(" in value:
        return value.strip()
    return to_scoutbook_format(value.strip())


def extract_base_number(requirement_number: str) -> str:
    match = _BASE_RE.match(requirement_number or "")
    return match.group(1) if match else requirement_number


def extract_option_letter(requirement_number: str) -> Optional[str]:
    """Uppercase option letter right after the base number ("6B(a)" -> "B")."""
    match = _OPTION_LETTER_RE.match(requirement_number or "")
    return match.group(1) if match else None


def is_option_requirement(requirement_number: str) -> bool:
    return extract_option_letter(requirement_number) is not None


def parent_requirement_number(requirement_number: str) -> Optional[str]:
    """
    "6A(a)(1)" -> "6A(a)", "6A" -> "6", "9b" -> "9", "1" -> None.
    """
    if not requirement_number:
        return None
    match = re.match(r"^(.+)\([^)]+\)$", requirement_number)
    if match:
        return match.group(1)
    match = re.match(r"^(\d+)[a-z]$", requirement_number)
    if match:
        return match.group(1)
    match = re.match(r"^(.+[0-9A-Z])([a-z])$", requirement_number)
    if match:
        return match.group(1)
    match = re.match(r"^(\d+)[A-Z]$", requirement_number)
    if match:
        return match.group(1)
    return None


def nesting_depth(requirement_number: str) -> int:
    if not requirement_number:
        return 0
    depth = 1 if re.match(r"^\d+[A-Za-z]", requirement_number) else 0
    return depth + len(_PAREN_GROUP_RE.findall(requirement_number))


@dataclass(frozen=True)
class RequirementComponents:
    base_number: str
    option_letter: Optional[str]
    sub_requirements: Tuple[str, ...]
    depth: int
    original: str


def parse_requirement_number(requirement_number: str) -> RequirementComponents:
    subs: List[str] = _PAREN_GROUP_RE.findall(requirement_number or "")
    if not subs:
        simple = re.match(r"^\d+([a-z])$", requirement_number or "")
        if simple:
            subs = [simple.group(1)]
    return RequirementComponents(
        base_number=extract_base_number(requirement_number),
        option_letter=extract_option_letter(requirement_number),
        sub_requirements=tuple(subs),
        depth=nesting_depth(requirement_number),
        original=requirement_number,
    )


def natural_sort_key(value: str) -> Tuple[Tuple[int, Union[int, str]], ...]:
    """Sort key that orders "2" < "10" and "2a" < "2b" < "10a"."""
    parts = _NATURAL_CHUNK_RE.split((value or "").lower())
    return tuple((0, int(p)) if p.isdigit() else (1, p) for p in parts if p)


def compare_requirement_numbers(a: str, b: str) -> int:
    def parts(value: str) -> Tuple[int, str, str]:
        base = extract_base_number(value)
        return (int(base) if base.isdigit() else 0, extract_option_letter(value) or "", _BASE_RE.sub("", value))

    pa, pb = parts(a), parts(b)
    return (pa > pb) - (pa < pb)
