"""
Option-context tracking for the scraped requirement walk.

Badges such as Animal Science or Skating split a main requirement into named
options ("Avian Option", "Option A—Sprinting"). The scrape renders those as
unlabeled rows; the rows that follow carry labels like "(a)" whose CSV id
includes the option ("6a avian"). The tracker carries that context forward
in document order so the matcher can build the composite id.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

from .config import DEFAULT_CONFIG, MergeConfig
from .normalize import is_letter, is_main_number, strip_label
from .schema import HierarchyPosition, ScrapedRequirement

_OPTION_LETTER_RE = re.compile(r"^Option\s+([A-Z])(?:\s*[—\-–.\s]|$)", re.IGNORECASE)
_OPTION_NUMBER_RE = re.compile(r"^Option\s+(\d+)(?:\s*[—\-–.\s]|$)", re.IGNORECASE)
_TRAILING_OPTION_RE = re.compile(r"^(.+?)\s*Option$", re.IGNORECASE)


def _phrase_at_word_start(phrase: str, text: str) -> bool:
    return re.search(r"(?<![a-z])" + re.escape(phrase), text) is not None


def extract_option_name(description: str, option_mappings: Mapping[str, str]) -> Optional[str]:
    """
    Short option token for an option header description, or None.

    "Option A—Sprinting" -> "a", "Option 2" -> "2", "Beef Cattle Option" ->
    "beef" (via the mapping table), "Llama Option" -> "llama" (first word).
    """
    text = (description or "").strip()
    if not text:
        return None

    match = _OPTION_LETTER_RE.match(text)
    if match:
        return match.group(1).lower()

    match = _OPTION_NUMBER_RE.match(text)
    if match:
        return match.group(1)

    lowered = text.lower()
    for phrase, short_name in option_mappings.items():
        if _phrase_at_word_start(phrase, lowered):
            return short_name

    match = _TRAILING_OPTION_RE.match(text)
    if match:
        return match.group(1).strip().split()[0].lower()

    return None


class OptionContextTracker:
    """
    Linear state machine over scraped items; no backtracking.

    If the scrape omits the main-number row that would reset it, the option
    context stays stale for the rows that follow.
    """

    def __init__(self, config: Optional[MergeConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.main_req: Optional[str] = None
        self.current_option: Optional[str] = None
        self.current_letter: Optional[str] = None
        self.letter_is_header = False

    @property
    def position(self) -> HierarchyPosition:
        return HierarchyPosition(
            main_req=self.main_req,
            option=self.current_option,
            letter=self.current_letter,
            letter_is_header=self.letter_is_header,
        )

    def observe(self, item: ScrapedRequirement) -> HierarchyPosition:
        """Advance past ``item`` and return the context it should be matched in."""
        label = item.display_label or ""

        if not label and item.description:
            option = extract_option_name(item.description, self.config.option_mappings)
            if option:
                self.current_option = option
                self.current_letter = None
                self.letter_is_header = False

        if is_main_number(label, self.config.main_requirement_max):
            self.main_req = strip_label(label)
            self.current_option = None
            self.current_letter = None
            self.letter_is_header = False

        clean = strip_label(label)
        if is_letter(clean):
            self.current_letter = clean.lower()
            self.letter_is_header = not item.has_checkbox

        return self.position
