"""Tests for card models and value lookups."""

import pickle

import pytest

from casino_engine.cards import (
    Card,
    Rank,
    Suit,
    build_value,
    can_rank_capture_build_value,
    capture_value,
    count_value,
    create_deck,
    rank_for_build_value,
)
from casino_engine.config import RuleConfig


class TestRank:
    def test_rank_values(self):
        assert Rank.ACE.value == 1
        assert Rank.TEN.value == 10
        assert Rank.KING.value == 13

    def test_rank_symbols(self):
        assert Rank.ACE.symbol == "A"
        assert Rank.TEN.symbol == "10"
        assert Rank.JACK.symbol == "J"
        assert Rank.QUEEN.symbol == "Q"
        assert Rank.KING.symbol == "K"

    def test_from_symbol(self):
        assert Rank.from_symbol("A") is Rank.ACE
        assert Rank.from_symbol("10") is Rank.TEN
        assert Rank.from_symbol("q") is Rank.QUEEN
        assert Rank.from_symbol("1") is None
        assert Rank.from_symbol("Z") is None

    def test_face_ranks(self):
        assert [r for r in Rank if r.is_face] == [Rank.JACK, Rank.QUEEN, Rank.KING]


class TestValueFunctions:
    def test_count_value(self):
        assert count_value(Rank.ACE) == 1
        assert count_value(Rank.SEVEN) == 7
        assert count_value(Rank.JACK) == 10
        assert count_value(Rank.KING) == 10

    def test_build_value(self):
        assert build_value(Rank.ACE) == 1
        assert build_value(Rank.TEN) == 10
        assert build_value(Rank.JACK) == 0
        assert build_value(Rank.QUEEN) == 0

    def test_capture_value(self):
        assert capture_value(Rank.ACE) == 14
        assert capture_value(Rank.TWO) == 2
        assert capture_value(Rank.JACK) == 11
        assert capture_value(Rank.QUEEN) == 12
        assert capture_value(Rank.KING) == 13

    def test_symbols_accepted(self):
        assert count_value("K") == 10
        assert build_value("A") == 1
        assert capture_value("A") == 14

    @pytest.mark.parametrize("bad", ["", "X", "0", "11", None, 5])
    def test_invalid_input_is_zero(self, bad):
        assert count_value(bad) == 0
        assert build_value(bad) == 0
        assert capture_value(bad) == 0


class TestBuildRanks:
    def test_rank_for_build_value(self):
        assert rank_for_build_value(1) is Rank.ACE
        assert rank_for_build_value(7) is Rank.SEVEN
        assert rank_for_build_value(10) is Rank.TEN
        assert rank_for_build_value(0) is None
        assert rank_for_build_value(11) is None

    def test_capture_by_matching_rank(self):
        assert can_rank_capture_build_value(Rank.ACE, 1)
        assert can_rank_capture_build_value(Rank.SIX, 6)
        assert not can_rank_capture_build_value(Rank.SIX, 7)

    def test_face_cards_capture_ten_is_configurable(self):
        assert not can_rank_capture_build_value(Rank.KING, 10)
        assert not can_rank_capture_build_value(Rank.KING, 10, RuleConfig())
        rules = RuleConfig(face_cards_capture_ten=True)
        assert can_rank_capture_build_value(Rank.KING, 10, rules)
        assert can_rank_capture_build_value(Rank.JACK, 10, rules)
        assert not can_rank_capture_build_value(Rank.KING, 9, rules)

    def test_out_of_range_build_never_captured(self):
        assert not can_rank_capture_build_value(Rank.ACE, 14)
        assert not can_rank_capture_build_value(Rank.TEN, 0)


class TestCard:
    def test_card_creation(self):
        card = Card(Rank.ACE, Suit.SPADES)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES

    def test_card_singleton(self):
        """Same rank/suit should return same instance."""
        assert Card(Rank.ACE, Suit.SPADES) is Card(Rank.ACE, Suit.SPADES)

    def test_suit_rank_key(self):
        assert Card(Rank.TEN, Suit.DIAMONDS).suit_rank == "D10"
        assert Card(Rank.ACE, Suit.SPADES).suit_rank == "SA"
        assert Card(Rank.KING, Suit.HEARTS).suit_rank == "HK"

    def test_card_string(self):
        assert str(Card(Rank.ACE, Suit.SPADES)) == "A♠"
        assert repr(Card(Rank.ACE, Suit.SPADES)) == "Card(ACE, SPADES)"

    def test_card_values(self):
        queen = Card(Rank.QUEEN, Suit.CLUBS)
        assert queen.is_face
        assert queen.count_value == 10
        assert queen.build_value == 0
        assert queen.capture_value == 12

    def test_card_equality_and_hash(self):
        assert Card(Rank.TWO, Suit.CLUBS) == Card(Rank.TWO, Suit.CLUBS)
        assert Card(Rank.TWO, Suit.CLUBS) != Card(Rank.TWO, Suit.HEARTS)
        assert len({Card(Rank.TWO, Suit.CLUBS), Card(Rank.TWO, Suit.CLUBS)}) == 1

    def test_pickle_keeps_interning(self):
        card = Card(Rank.TEN, Suit.DIAMONDS)
        assert pickle.loads(pickle.dumps(card)) is card


class TestDeck:
    def test_deck_has_52_unique_cards(self):
        deck = create_deck()
        assert len(deck) == 52
        assert len({card.suit_rank for card in deck}) == 52
