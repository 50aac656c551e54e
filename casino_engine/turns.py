"""Turn orchestration for Casino.

Each handler validates an action and, if it is legal, returns a new table
snapshot. Rejected actions hand back the table they were given, untouched.
"""

from __future__ import annotations

import logging
from typing import Sequence

from casino_engine.actions import Action, BuildAction, CaptureAction, PairAction
from casino_engine.build_logic import assemble_build, validate_build
from casino_engine.capture_logic import (
    CaptureSet,
    find_capture_cover,
    find_uncontrolled,
    get_valid_captures,
)
from casino_engine.cards import Card
from casino_engine.config import DEFAULT_RULES, RuleConfig
from casino_engine.pair_logic import validate_pair
from casino_engine.results import IllegalActionError, TurnResult
from casino_engine.table import (
    IdAllocator,
    LooseCard,
    Pair,
    TableItem,
    cards_of,
    has_valid_id,
    without_ids,
)

logger = logging.getLogger(__name__)


def _selection_problem(
    selected_items: Sequence[TableItem], table_items: Sequence[TableItem]
) -> str | None:
    """Check the selection refers to current table items, each once."""
    if not all(has_valid_id(item) for item in selected_items):
        logger.error(f"Selection contains malformed items: {selected_items!r}")
        return "Internal error: invalid items selected."
    on_table = {item.id: item for item in table_items}
    seen: set[int] = set()
    for item in selected_items:
        if item.id in seen:
            return f"{item} was selected more than once."
        seen.add(item.id)
        if on_table.get(item.id) != item:
            logger.error(f"Selected item {item!r} is not on the table")
            return f"{item} is not on the table."
    return None


def handle_build(
    played_card: Card | None,
    selected_items: Sequence[TableItem],
    player: int,
    table_items: Sequence[TableItem],
    hand: Sequence[Card],
    *,
    ids: IdAllocator,
    declared_value: int | None = None,
    rules: RuleConfig = DEFAULT_RULES,
) -> TurnResult:
    """Create a build, or extend one the player controls.

    Consumed items leave the table. A new build is appended; an extended
    build keeps its id and its place on the table.
    """
    table_items = tuple(table_items)
    problem = _selection_problem(selected_items, table_items)
    if problem is not None:
        return TurnResult(success=False, table_items=table_items, message=problem)

    validation = validate_build(
        played_card,
        selected_items,
        hand,
        table_items,
        player,
        declared_value=declared_value,
        rules=rules,
    )
    if not validation.is_valid:
        return TurnResult(success=False, table_items=table_items, message=validation.message)

    if validation.is_modification:
        build_id = validation.target_build.id
    else:
        build_id = ids.next_id()
    build = assemble_build(validation, played_card, player, build_id)

    consumed = {item.id for item in selected_items}
    new_items: list[TableItem] = []
    for item in table_items:
        if item.id == build.id:
            new_items.append(build)
        elif item.id not in consumed:
            new_items.append(item)
    if not validation.is_modification:
        new_items.append(build)

    kind = "Compound" if build.is_compound else "Simple"
    message = f"Player {player} built {build.value}. ({kind})"
    logger.debug(f"{message} Cards: {' '.join(str(c) for c in build.cards)}")
    return TurnResult(success=True, table_items=tuple(new_items), message=message)


def handle_pair(
    played_card: Card | None,
    selected_items: Sequence[TableItem],
    player: int,
    table_items: Sequence[TableItem],
    hand: Sequence[Card],
    *,
    ids: IdAllocator,
) -> TurnResult:
    """Create a pair, or add to an existing one.

    The pair passes to ``player`` either way.
    """
    table_items = tuple(table_items)
    problem = _selection_problem(selected_items, table_items)
    if problem is not None:
        return TurnResult(success=False, table_items=table_items, message=problem)

    validation = validate_pair(played_card, selected_items, hand)
    if not validation.is_valid:
        return TurnResult(success=False, table_items=table_items, message=validation.message)

    loose_cards = [item.card for item in selected_items if isinstance(item, LooseCard)]
    existing = validation.target_pair
    if existing is not None:
        pair = Pair(
            id=existing.id,
            rank=validation.rank,
            cards=(*existing.cards, played_card, *loose_cards),
            controller=player,
        )
    else:
        pair = Pair(
            id=ids.next_id(),
            rank=validation.rank,
            cards=(played_card, *loose_cards),
            controller=player,
        )

    consumed = {item.id for item in selected_items}
    new_items: list[TableItem] = []
    for item in table_items:
        if item.id == pair.id:
            new_items.append(pair)
        elif item.id not in consumed:
            new_items.append(item)
    if existing is None:
        new_items.append(pair)

    message = f"Player {player} paired {validation.rank.symbol}s."
    logger.debug(message)
    return TurnResult(success=True, table_items=tuple(new_items), message=message)


def _next_cascade(
    played_card: Card, table_items: Sequence[TableItem], player: int, rules: RuleConfig
) -> CaptureSet | None:
    """The next capture set the played card takes on its own, if any."""
    options = get_valid_captures(played_card, table_items, player=player, rules=rules)
    return options[0] if options else None


def handle_capture(
    played_card: Card | None,
    selected_items: Sequence[TableItem],
    player: int,
    table_items: Sequence[TableItem],
    hand: Sequence[Card],
    *,
    scores: tuple[int, int] = (0, 0),
    last_capturer: int | None = None,
    rules: RuleConfig = DEFAULT_RULES,
) -> TurnResult:
    """Capture the selected items, then anything else the card can still take.

    The selection must be exactly covered by disjoint capture sets. After
    it is removed the played card keeps capturing, one set at a time,
    until nothing on the remaining table is capturable. Clearing a table
    that was not empty scores one sweep point.
    """
    table_items = tuple(table_items)

    def reject(message: str) -> TurnResult:
        return TurnResult(
            success=False,
            table_items=table_items,
            message=message,
            scores=scores,
            last_capturer=last_capturer,
        )

    if played_card is None or not selected_items:
        return reject("Select a card from hand and items from the table to capture.")
    problem = _selection_problem(selected_items, table_items)
    if problem is not None:
        return reject(problem)
    if played_card not in hand:
        return reject(f"{played_card} is not in your hand.")

    if rules.capture_requires_control:
        foreign = find_uncontrolled(selected_items, player)
        if foreign is not None:
            logger.warning(f"Player {player} tried to capture {foreign} they do not control")
            return reject(f"Cannot capture {foreign}: it is controlled by player {foreign.controller}.")

    options = get_valid_captures(played_card, table_items, player=player, rules=rules)
    if not options:
        return reject(f"{played_card} cannot capture anything on the table.")
    if find_capture_cover(selected_items, options) is None:
        return reject("Invalid capture selection.")

    taken: list[TableItem] = list(selected_items)
    remaining = without_ids(table_items, {item.id for item in selected_items})
    cascaded: list[CaptureSet] = []
    if rules.cascading_captures:
        while remaining:
            next_set = _next_cascade(played_card, remaining, player, rules)
            if next_set is None:
                break
            logger.debug(f"Cascading capture with {played_card}: {[str(i) for i in next_set]}")
            cascaded.append(next_set)
            taken.extend(next_set)
            remaining = without_ids(remaining, {item.id for item in next_set})

    new_scores = list(scores)
    swept = bool(table_items) and not remaining
    message = f"Player {player} captured {len(taken)} item(s)."
    if cascaded:
        message += f" {len(cascaded)} more capture(s) followed."
    if swept:
        new_scores[player] += 1
        message += " Sweep!"
        logger.info(f"Player {player} swept the table with {played_card}")

    return TurnResult(
        success=True,
        table_items=remaining,
        message=message,
        scores=(new_scores[0], new_scores[1]),
        last_capturer=player,
        captured_cards=(played_card, *cards_of(taken)),
        swept=swept,
        cascaded=tuple(cascaded),
    )


def execute_action(
    action: Action,
    player: int,
    table_items: Sequence[TableItem],
    hand: Sequence[Card],
    *,
    ids: IdAllocator,
    scores: tuple[int, int] = (0, 0),
    last_capturer: int | None = None,
    rules: RuleConfig = DEFAULT_RULES,
) -> TurnResult:
    """Dispatch an action to its handler.

    Scores and the last capturer pass through untouched for builds and
    pairs so every result carries the running totals.

    Raises:
        IllegalActionError: If the action type is unknown.
    """
    match action:
        case BuildAction():
            result = handle_build(
                action.card,
                action.selected,
                player,
                table_items,
                hand,
                ids=ids,
                declared_value=action.declared_value,
                rules=rules,
            )
        case PairAction():
            result = handle_pair(action.card, action.selected, player, table_items, hand, ids=ids)
        case CaptureAction():
            return handle_capture(
                action.card,
                action.selected,
                player,
                table_items,
                hand,
                scores=scores,
                last_capturer=last_capturer,
                rules=rules,
            )
        case _:
            raise IllegalActionError(f"Unknown action type: {type(action)}")

    return result.with_totals(scores, last_capturer)
