from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

from .config import MAIN_REQUIREMENT_MAX
from .normalize import label_level
from .schema import CanonicalRequirement, RequirementLink


@dataclass(frozen=True)
class ProcessedRequirement:
    """A scraped row after matching, ready for tree building."""

    scoutbook_id: str
    requirement_number: str
    description: str
    is_header: bool
    display_order: int
    has_checkbox: bool = False
    links: Tuple[RequirementLink, ...] = field(default_factory=tuple)


def build_hierarchy(
    items: Sequence[ProcessedRequirement],
    main_max: int = MAIN_REQUIREMENT_MAX,
) -> List[CanonicalRequirement]:
    """
    Rebuild the requirement forest from the flat, document-ordered list.

    Header depth comes from the label pattern (see ``label_level``); a
    completable row sits one level under the current header and never closes
    it. Only headers pop the stack, and only headers are pushed, so leaves
    are always childless. Sibling order is document order.
    """
    roots: List[CanonicalRequirement] = []
    stack: List[Tuple[CanonicalRequirement, int]] = []

    for item in items:
        node = CanonicalRequirement(
            scoutbook_id=item.scoutbook_id,
            requirement_number=item.requirement_number,
            description=item.description,
            is_header=item.is_header,
            display_order=item.display_order,
            parent_scoutbook_id=None,
            links=list(item.links),
            children=[],
        )

        if item.is_header:
            level = label_level(item.requirement_number, item.description, main_max)
            while stack and stack[-1][1] >= level:
                stack.pop()
        else:
            level = stack[-1][1] + 1 if stack else 0

        if stack:
            parent = stack[-1][0]
            node.parent_scoutbook_id = parent.scoutbook_id
            parent.children.append(node)
        else:
            roots.append(node)

        if item.is_header:
            stack.append((node, level))

    return roots


def iter_requirements(
    forest: Sequence[CanonicalRequirement], depth: int = 0
) -> Iterator[Tuple[CanonicalRequirement, int]]:
    """Depth-first, pre-order walk yielding ``(node, depth)``."""
    for node in forest:
        yield node, depth
        yield from iter_requirements(node.children, depth + 1)


def count_requirements(forest: Sequence[CanonicalRequirement]) -> int:
    return sum(1 for _ in iter_requirements(forest))


def max_depth(forest: Sequence[CanonicalRequirement]) -> int:
    """Nesting depth below the roots; 0 for a flat list."""
    deepest_parent = max((depth for node, depth in iter_requirements(forest) if node.children), default=-1)
    return deepest_parent + 1
