"""Capture validation for Casino.

A played card captures by rank (every matching loose card and pair at
once), by build (each build it can capture is its own option), and by
sum (two or more numeric items whose build values add up to the card's
value). A selection is legal when it is exactly covered by disjoint
capture sets.
"""

from __future__ import annotations

import logging
from typing import Sequence

from casino_engine.cards import Card, can_rank_capture_build_value
from casino_engine.config import DEFAULT_RULES, RuleConfig
from casino_engine.table import Build, LooseCard, Pair, TableItem, has_valid_id, id_signature

logger = logging.getLogger(__name__)

CaptureSet = tuple[TableItem, ...]


def _rank_match_sets(played_card: Card, items: Sequence[TableItem], rules: RuleConfig) -> list[CaptureSet]:
    matches = [
        item
        for item in items
        if isinstance(item, (LooseCard, Pair)) and item.rank == played_card.rank
    ]
    if not matches:
        return []
    sets = [tuple(matches)]
    if rules.allow_partial_rank_match and len(matches) > 1:
        sets.extend((item,) for item in matches)
    return sets


def _build_match_sets(played_card: Card, items: Sequence[TableItem], rules: RuleConfig) -> list[CaptureSet]:
    return [
        (item,)
        for item in items
        if isinstance(item, Build)
        and can_rank_capture_build_value(played_card.rank, item.value, rules)
    ]


def _combination_sets(played_card: Card, items: Sequence[TableItem], rules: RuleConfig) -> list[CaptureSet]:
    """Subsets of two or more numeric items summing to the played card's value."""
    if played_card.is_face:
        return []
    target = played_card.build_value

    combinable: list[tuple[TableItem, int]] = []
    for item in items:
        match item:
            case LooseCard(card=card) if not card.is_face:
                combinable.append((item, card.build_value))
            case Build() if rules.combine_builds_in_captures and not item.is_compound:
                combinable.append((item, item.value))

    results: list[CaptureSet] = []

    def backtrack(start: int, current: list[TableItem], remaining: int) -> None:
        if remaining == 0:
            if len(current) >= 2:
                results.append(tuple(current))
            return
        for k in range(start, len(combinable)):
            item, value = combinable[k]
            if value > remaining:
                continue
            current.append(item)
            backtrack(k + 1, current, remaining - value)
            current.pop()

    backtrack(0, [], target)
    return results


def get_valid_captures(
    played_card: Card | None,
    table_items: Sequence[TableItem],
    *,
    player: int | None = None,
    rules: RuleConfig = DEFAULT_RULES,
) -> list[CaptureSet]:
    """Find every set of table items ``played_card`` can capture.

    Args:
        played_card: The card played from hand.
        table_items: Current items on the table.
        player: The capturing player. With ``capture_requires_control``,
            builds and pairs controlled by anyone else are left out.
        rules: Rule variant switches.

    Returns:
        Distinct capture sets in generation order: the rank match first,
        then build matches, then sum combinations.
    """
    if played_card is None:
        return []
    items = [item for item in table_items if has_valid_id(item)]
    if len(items) != len(table_items):
        logger.error("Ignoring malformed table items while generating captures")
    if rules.capture_requires_control and player is not None:
        items = [item for item in items if find_uncontrolled((item,), player) is None]

    candidates = (
        _rank_match_sets(played_card, items, rules)
        + _build_match_sets(played_card, items, rules)
        + _combination_sets(played_card, items, rules)
    )

    unique: list[CaptureSet] = []
    seen: set[tuple[int, ...]] = set()
    for capture_set in candidates:
        signature = id_signature(capture_set)
        if signature not in seen:
            seen.add(signature)
            unique.append(capture_set)
    return unique


def find_capture_cover(
    selected_items: Sequence[TableItem], valid_sets: Sequence[CaptureSet]
) -> list[CaptureSet] | None:
    """Cover the selection exactly with disjoint capture sets.

    Returns the sets used, or None if the selection is empty, contains an
    item twice, or cannot be covered without leftovers.
    """
    if not selected_items:
        return None
    selected_ids = {item.id for item in selected_items}
    if len(selected_ids) != len(selected_items):
        return None

    usable = [s for s in valid_sets if s and {item.id for item in s} <= selected_ids]

    def cover(remaining: frozenset[int]) -> list[CaptureSet] | None:
        if not remaining:
            return []
        # Some set must cover the smallest remaining id.
        anchor = min(remaining)
        for capture_set in usable:
            ids = {item.id for item in capture_set}
            if anchor in ids and ids <= remaining:
                rest = cover(remaining - ids)
                if rest is not None:
                    return [capture_set, *rest]
        return None

    return cover(frozenset(selected_ids))


def is_valid_multi_capture_selection(
    selected_items: Sequence[TableItem], valid_sets: Sequence[CaptureSet]
) -> bool:
    """Whether the selection is exactly one or more disjoint capture sets."""
    return find_capture_cover(selected_items, valid_sets) is not None


def find_uncontrolled(selected_items: Sequence[TableItem], player: int) -> TableItem | None:
    """The first build or pair in the selection that ``player`` does not control."""
    for item in selected_items:
        if isinstance(item, (Build, Pair)) and item.controller != player:
            return item
    return None
