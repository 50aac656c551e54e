"""Pair validation for Casino."""

from __future__ import annotations

import logging
from typing import Sequence

from casino_engine.cards import Card
from casino_engine.results import PairValidation
from casino_engine.table import Build, LooseCard, Pair, TableItem, has_valid_id

logger = logging.getLogger(__name__)


def _fail(message: str) -> PairValidation:
    return PairValidation(is_valid=False, message=message)


def validate_pair(
    played_card: Card | None, selected_items: Sequence[TableItem], hand: Sequence[Card]
) -> PairValidation:
    """Decide whether ``played_card`` can pair with ``selected_items``.

    Pairs go by rank alone, so face cards pair like any other card and no
    holding card is required. The selection may hold loose cards and at
    most one existing pair, all of the played card's rank.
    """
    if played_card is None or not selected_items:
        return _fail("Select a card from hand and items from the table to pair.")
    if not all(has_valid_id(item) for item in selected_items):
        logger.error(f"Pair selection contains malformed items: {selected_items!r}")
        return _fail("Internal error: invalid items selected for pair.")
    if played_card not in hand:
        return _fail(f"{played_card} is not in your hand.")

    rank = played_card.rank
    existing_pair: Pair | None = None
    for item in selected_items:
        match item:
            case LooseCard(card=card):
                if card.rank != rank:
                    return _fail(f"Selection rank mismatch: {card} is not a {rank.symbol}.")
            case Pair():
                if item.rank != rank:
                    return _fail(
                        f"Selection rank mismatch: cannot add a {rank.symbol} "
                        f"to a pair of {item.rank.symbol}s."
                    )
                if existing_pair is not None:
                    return _fail("Cannot pair with more than one existing pair.")
                existing_pair = item
            case Build():
                return _fail("Cannot pair with a build; only cards or a pair of the same rank.")
            case _:
                return _fail("Cannot pair with non-card/non-pair item.")

    return PairValidation(
        is_valid=True,
        message=f"Pairing {rank.symbol}s.",
        rank=rank,
        target_pair=existing_pair,
    )
