"""Build validation for Casino.

A build is declared by playing a card onto a selection of table items.
The selection is split into a *summing group*, whose values are added to
the played card to reach the build value, and zero or more *cascading
groups*, each of which already sums to that value on its own. Several
values can be reachable from one selection; they are tried in a fixed
order and the first one the player can legally hold for is used.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from casino_engine.cards import (
    MAX_BUILD_VALUE,
    Card,
    Rank,
    can_rank_capture_build_value,
    rank_for_build_value,
)
from casino_engine.config import DEFAULT_RULES, RuleConfig
from casino_engine.results import BuildValidation
from casino_engine.table import (
    Build,
    LooseCard,
    Pair,
    TableItem,
    cards_of,
    has_valid_id,
    item_value,
)

logger = logging.getLogger(__name__)

Plan = tuple[list[int], list[list[int]]]


def _subsets_with_sum(
    indices: Sequence[int], values: Sequence[int], target: int
) -> Iterator[list[int]]:
    """Yield subsets of ``indices`` whose values sum to ``target``."""

    def backtrack(start: int, current: list[int], remaining: int) -> Iterator[list[int]]:
        if remaining == 0:
            yield list(current)
            return
        for k in range(start, len(indices)):
            value = values[indices[k]]
            if value <= 0 or value > remaining:
                continue
            current.append(indices[k])
            yield from backtrack(k + 1, current, remaining - value)
            current.pop()

    if target < 0:
        return
    yield from backtrack(0, [], target)


def partition_into_groups(values: Sequence[int], target: int) -> list[list[int]] | None:
    """Split ``values`` into groups that each sum to ``target``.

    Returns the groups as lists of indices into ``values`` (an empty list
    for empty input), or None when no such partition exists.
    """
    if target <= 0:
        return None
    if not values:
        return []
    if any(v <= 0 or v > target for v in values) or sum(values) % target:
        return None

    n = len(values)
    dead_ends: set[int] = set()

    def solve(remaining: int) -> list[list[int]] | None:
        if remaining == 0:
            return []
        if remaining in dead_ends:
            return None
        # The lowest unassigned index must land in some group; try each.
        first = (remaining & -remaining).bit_length() - 1
        others = [i for i in range(first + 1, n) if remaining >> i & 1]
        for rest in _subsets_with_sum(others, values, target - values[first]):
            group = [first, *rest]
            mask = 0
            for i in group:
                mask |= 1 << i
            tail = solve(remaining & ~mask)
            if tail is not None:
                return [group, *tail]
        dead_ends.add(remaining)
        return None

    return solve((1 << n) - 1)


def find_summing_partition(
    played_value: int, values: Sequence[int], target: int
) -> Plan | None:
    """Find how a selection can make a build of ``target``.

    Returns ``(summing, groups)``: indices whose values plus
    ``played_value`` equal ``target``, and index groups covering the rest
    that each sum to ``target``. None if the selection cannot do it.
    """
    if target < 1 or target > MAX_BUILD_VALUE:
        return None
    all_indices = list(range(len(values)))
    for summing in _subsets_with_sum(all_indices, values, target - played_value):
        chosen = set(summing)
        rest = [i for i in all_indices if i not in chosen]
        groups = partition_into_groups([values[i] for i in rest], target)
        if groups is not None:
            return summing, [[rest[j] for j in group] for group in groups]
    return None


def candidate_targets(played_value: int, full_sum: int) -> list[int]:
    """Order in which build values are tried.

    The plain sum of everything comes first, then the played card's own
    value, then every other value from low to high.
    """
    ordered = [full_sum, played_value, *range(1, MAX_BUILD_VALUE + 1)]
    seen: list[int] = []
    for value in ordered:
        if 1 <= value <= MAX_BUILD_VALUE and value not in seen:
            seen.append(value)
    return seen


def find_holding_card(
    value: int, played_card: Card, hand: Sequence[Card], rules: RuleConfig = DEFAULT_RULES
) -> Card | None:
    """First card in ``hand``, besides the played card, that can capture a build of ``value``."""
    for card in hand:
        if card != played_card and can_rank_capture_build_value(card.rank, value, rules):
            return card
    return None


def has_holding_card(
    value: int, played_card: Card, hand: Sequence[Card], rules: RuleConfig = DEFAULT_RULES
) -> bool:
    """Whether ``hand``, apart from the played card, can capture a build of ``value``."""
    return find_holding_card(value, played_card, hand, rules) is not None


def find_duplicate_build(
    target_rank: Rank,
    player: int,
    table_items: Sequence[TableItem],
    build_being_modified: Build | None = None,
) -> Build | None:
    """Another build ``player`` controls for the same capturing rank, if any."""
    for item in table_items:
        if not isinstance(item, Build) or item.controller != player:
            continue
        if build_being_modified is not None and item.id == build_being_modified.id:
            continue
        rank = item.target_rank or rank_for_build_value(item.value)
        if rank == target_rank:
            return item
    return None


def _fail(message: str) -> BuildValidation:
    return BuildValidation(is_valid=False, message=message)


def _check_selection(
    played_card: Card | None,
    selected_items: Sequence[TableItem],
    hand: Sequence[Card],
    player: int,
) -> BuildValidation | Build | None:
    """Selection rules. Returns a failure, the build being modified, or None."""
    if played_card is None or not selected_items:
        return _fail("Select a card from hand and items from the table.")
    if not all(has_valid_id(item) for item in selected_items):
        logger.error(f"Build selection contains malformed items: {selected_items!r}")
        return _fail("Internal error: invalid items selected.")
    if played_card not in hand:
        return _fail(f"{played_card} is not in your hand.")

    if played_card.is_face:
        return _fail("Cannot use a face card to declare a build.")
    for item in selected_items:
        if isinstance(item, LooseCard) and item.card.is_face:
            return _fail(f"Cannot build with the face card {item.card}.")

    builds: list[Build] = []
    for item in selected_items:
        match item:
            case LooseCard():
                pass
            case Pair():
                return _fail("Cannot build with a pair.")
            case Build() if item.is_compound:
                return _fail("Cannot build on a compound build.")
            case Build():
                builds.append(item)

    if len(builds) > 1:
        return _fail("Cannot select more than one existing build.")
    if builds and builds[0].controller != player:
        return _fail("Cannot modify a build you don't control.")
    return builds[0] if builds else None


def _check_target(
    value: int,
    played_card: Card,
    hand: Sequence[Card],
    table_items: Sequence[TableItem],
    player: int,
    build_being_modified: Build | None,
    rules: RuleConfig,
) -> BuildValidation | None:
    target_rank = rank_for_build_value(value)
    if target_rank is None:
        return _fail(f"Resulting build value ({value}) is invalid (must be 1-10).")
    if not has_holding_card(value, played_card, hand, rules):
        return _fail(f"You need a {target_rank.symbol} in hand to capture a build of {value}.")
    if find_duplicate_build(target_rank, player, table_items, build_being_modified):
        return _fail(f"You already control a build for rank {target_rank.symbol}.")
    return None


def validate_build(
    played_card: Card | None,
    selected_items: Sequence[TableItem],
    hand: Sequence[Card],
    table_items: Sequence[TableItem],
    player: int,
    *,
    declared_value: int | None = None,
    rules: RuleConfig = DEFAULT_RULES,
) -> BuildValidation:
    """Decide whether ``played_card`` can build with ``selected_items``.

    Args:
        played_card: Card played from hand (must still be in ``hand``).
        selected_items: Loose cards and at most one simple build of the player's.
        hand: The player's hand, including the played card.
        table_items: Everything currently on the table.
        player: The acting player.
        declared_value: Only accept a build of this value.
        rules: Rule variant switches.

    Returns:
        BuildValidation describing the build or why it was rejected.
    """
    checked = _check_selection(played_card, selected_items, hand, player)
    if isinstance(checked, BuildValidation):
        return checked
    build_being_modified = checked

    if declared_value is not None and rank_for_build_value(declared_value) is None:
        return _fail(f"Resulting build value ({declared_value}) is invalid (must be 1-10).")

    values = [item_value(item) for item in selected_items]
    played_value = played_card.build_value
    full_sum = played_value + sum(values)
    if declared_value is not None:
        targets = [declared_value]
    else:
        targets = candidate_targets(played_value, full_sum)

    plans: list[tuple[int, Plan]] = []
    for value in targets:
        plan = find_summing_partition(played_value, values, value)
        if plan is not None:
            plans.append((value, plan))

    if not plans:
        if declared_value is not None:
            return _fail(f"Selected cards cannot make a build of {declared_value}.")
        # A full sum within range is always reachable, so it must be too high.
        return _fail(f"Build value {full_sum} exceeds the maximum of {MAX_BUILD_VALUE}.")

    first_failure: BuildValidation | None = None
    for value, (summing, groups) in plans:
        failure = _check_target(
            value, played_card, hand, table_items, player, build_being_modified, rules
        )
        if failure is not None:
            first_failure = first_failure or failure
            continue

        target_rank = rank_for_build_value(value)
        is_modification = build_being_modified is not None
        if is_modification:
            message = f"Adding to build {target_rank.symbol}. New value: {value}."
        else:
            message = f"Creating build {target_rank.symbol} with value {value}."
        logger.debug(f"Build accepted for player {player}: {message}")
        return BuildValidation(
            is_valid=True,
            message=message,
            build_value=value,
            target_rank=target_rank,
            is_modification=is_modification,
            target_build=build_being_modified,
            holding_card=find_holding_card(value, played_card, hand, rules),
            summing_items=tuple(selected_items[i] for i in summing),
            cascading_groups=tuple(
                tuple(selected_items[i] for i in group) for group in groups
            ),
        )

    return first_failure


def assemble_build(
    validation: BuildValidation, played_card: Card, player: int, build_id: int
) -> Build:
    """Create the table build described by a successful validation.

    The played card and the summing items form the first group; each
    cascading group follows as its own group. A modified build keeps
    ``build_id`` of the original and passes to ``player``.
    """
    groups = [(played_card, *cards_of(validation.summing_items))]
    groups.extend(tuple(cards_of(group)) for group in validation.cascading_groups)
    return Build(
        id=build_id,
        value=validation.build_value,
        groups=tuple(groups),
        controller=player,
        target_rank=validation.target_rank,
    )
