#!/usr/bin/env python3
"""
Selection Resolver

Turns a free-text selection token (a 1-based number or an exact name) into
exactly one item of a numbered list shown to the operator. Name matching is
exact and case-sensitive; close names only feed the "did you mean" hint of
the error message.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence

from rapidfuzz import fuzz, process

from config import SUGGESTION_LIMIT, SUGGESTION_SCORE_CUTOFF, UNNAMED_ITEM
from src.core.errors import (
    AmbiguousSelectionError,
    SelectionNotFoundError,
    SelectionOutOfRangeError,
)
from src.core.field_resolver import first_present

# Plain ASCII digits only; "+2", "1_0" and other scripts' digits are names
INDEX_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class SelectableItem:
    """One numbered entry of a selection list"""
    index: int  # 1-based display index
    name: str
    item: Any


def build_selectable_items(objects: Iterable[Any], name_candidates: Sequence[str],
                           fallback_candidates: Sequence[str] = ()) -> List[SelectableItem]:
    """
    Number remote objects from 1 and resolve a display name for each.

    Args:
        objects: Remote objects in service order
        name_candidates: Field names tried for the display name
        fallback_candidates: Field names tried when no display name is present

    Returns:
        List of SelectableItem
    """
    items = []
    for position, obj in enumerate(objects, start=1):
        name = first_present(obj, name_candidates)
        if name is None:
            name = first_present(obj, fallback_candidates, UNNAMED_ITEM)
        items.append(SelectableItem(position, str(name).strip(), obj))
    return items


def _suggest(token: str, names: List[str]) -> List[str]:
    matches = process.extract(
        token,
        names,
        scorer=fuzz.WRatio,
        limit=SUGGESTION_LIMIT,
        score_cutoff=SUGGESTION_SCORE_CUTOFF,
    )
    seen = []
    for name, _score, _idx in matches:
        if name not in seen:
            seen.append(name)
    return seen


def resolve_selection(items: Sequence[SelectableItem], token: str) -> SelectableItem:
    """
    Resolve a selection token to a single item.

    Args:
        items: Numbered items as displayed
        token: A 1-based index or an exact display name

    Returns:
        The selected item

    Raises:
        SelectionOutOfRangeError: numeric token outside 1..len(items)
        SelectionNotFoundError: no item has that name
        AmbiguousSelectionError: several items share that name
    """
    token = (token or "").strip()
    if not token:
        raise SelectionNotFoundError(token)

    if INDEX_RE.fullmatch(token):
        number = int(token)
        if number < 1 or number > len(items):
            raise SelectionOutOfRangeError(number, len(items))
        return items[number - 1]

    matches = [item for item in items if item.name == token]
    if not matches:
        raise SelectionNotFoundError(token, _suggest(token, [item.name for item in items]))
    if len(matches) > 1:
        raise AmbiguousSelectionError(token, [item.index for item in matches])
    return matches[0]


def format_selection_table(items: Sequence[SelectableItem]) -> str:
    """Render the numbered list the way it is shown to the operator"""
    if not items:
        return "(no items)"
    width = len(str(len(items)))
    return "\n".join(f"  [{item.index:>{width}}] {item.name}" for item in items)
