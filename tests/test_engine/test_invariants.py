"""Seeded random playouts checking table invariants after every turn."""

import random
from collections import Counter

import pytest

from casino_engine.actions import BuildAction, CaptureAction, PairAction
from casino_engine.capture_logic import get_valid_captures
from casino_engine.cards import can_rank_capture_build_value, create_deck
from casino_engine.config import DEFAULT_RULES, RuleConfig
from casino_engine.scoring import calculate_scores
from casino_engine.table import Build, IdAllocator, LooseCard, Pair, cards_of
from casino_engine.turns import execute_action

RULE_VARIANTS = [
    DEFAULT_RULES,
    RuleConfig(face_cards_capture_ten=True, allow_partial_rank_match=True),
    RuleConfig(capture_requires_control=True, cascading_captures=False),
]


def candidate_actions(rng, card, table, rules):
    options = get_valid_captures(card, table, rules=rules)
    if options:
        yield CaptureAction(card=card, selected=rng.choice(options))

    buildable = [
        item
        for item in table
        if (isinstance(item, LooseCard) and not item.card.is_face)
        or (isinstance(item, Build) and not item.is_compound)
    ]
    if buildable:
        k = rng.randint(1, min(2, len(buildable)))
        yield BuildAction(card=card, selected=tuple(rng.sample(buildable, k)))

    same_rank = tuple(
        item for item in table if isinstance(item, LooseCard) and item.rank == card.rank
    )
    if same_rank:
        yield PairAction(card=card, selected=same_rank)


def check_table(table, piles, hands, stock):
    ids = [item.id for item in table]
    assert len(ids) == len(set(ids))

    held = Counter(cards_of(table))
    for cards in (*piles, *hands, stock):
        held.update(cards)
    assert held == Counter(create_deck())

    build_ranks = set()
    for item in table:
        if isinstance(item, Build):
            assert 1 <= item.value <= 10
            assert item.is_consistent()
            key = (item.controller, item.target_rank)
            assert key not in build_ranks
            build_ranks.add(key)
        elif isinstance(item, Pair):
            assert len(item.cards) >= 2
            assert all(card.rank == item.rank for card in item.cards)


def play_out(seed, rules):
    rng = random.Random(seed)
    deck = create_deck()
    rng.shuffle(deck)

    ids = IdAllocator()
    hands = [deck[:4], deck[4:8]]
    table = ids.lay_out(deck[8:12])
    stock = deck[12:]
    piles = ([], [])
    scores = (0, 0)
    last_capturer = None
    player = 0

    while any(hands) or stock:
        if not any(hands):
            hands = [stock[:4], stock[4:8]]
            stock = stock[8:]
        hand = hands[player]
        card = rng.choice(hand)

        for action in candidate_actions(rng, card, table, rules):
            result = execute_action(
                action,
                player,
                table,
                hand,
                ids=ids,
                scores=scores,
                last_capturer=last_capturer,
                rules=rules,
            )
            if not result.success:
                assert result.table_items == table
                assert result.scores == scores
                continue
            if isinstance(action, BuildAction):
                build = next(
                    item
                    for item in result.table_items
                    if isinstance(item, Build) and card in item.cards
                )
                assert build.controller == player
                assert any(
                    other != card and can_rank_capture_build_value(other.rank, build.value, rules)
                    for other in hand
                )
            if isinstance(action, CaptureAction):
                assert result.captured_cards[0] == card
                piles[player].extend(result.captured_cards)
                assert result.scores[player] - scores[player] == (1 if result.swept else 0)
            table = result.table_items
            scores = result.scores
            last_capturer = result.last_capturer
            break
        else:
            table = (*table, ids.loose(card))

        hands[player] = [c for c in hand if c != card]
        check_table(table, piles, hands, stock)
        player = 1 - player

    return table, piles, scores, last_capturer


class TestRandomPlayouts:
    @pytest.mark.parametrize("rules", RULE_VARIANTS)
    @pytest.mark.parametrize("seed", range(15))
    def test_invariants_hold(self, seed, rules):
        table, piles, scores, last_capturer = play_out(seed, rules)
        assert len(piles[0]) + len(piles[1]) + len(cards_of(table)) == 52

        # Whatever is left goes to the last player to capture.
        if last_capturer is not None:
            piles[last_capturer].extend(cards_of(table))
        final = calculate_scores(piles[0], piles[1], *scores)
        assert final.p1_score >= scores[0]
        assert final.p2_score >= scores[1]

    def test_playout_is_deterministic(self):
        assert play_out(3, DEFAULT_RULES) == play_out(3, DEFAULT_RULES)
