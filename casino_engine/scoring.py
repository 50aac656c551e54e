"""End-of-hand scoring for Casino."""

from __future__ import annotations

from typing import Sequence

from casino_engine.cards import Card, Rank, Suit
from casino_engine.results import PileScore, ScoreResult

MOST_CARDS_THRESHOLD = 26
MOST_CARDS_POINTS = 3
MOST_SPADES_POINTS = 1

BIG_CASINO = Card(Rank.TEN, Suit.DIAMONDS)
LITTLE_CASINO = Card(Rank.TWO, Suit.SPADES)


def score_pile(pile: Sequence[Card]) -> PileScore:
    """Count what one capture pile holds towards scoring."""
    return PileScore(
        card_count=len(pile),
        spades=sum(1 for card in pile if card.suit == Suit.SPADES),
        aces=sum(1 for card in pile if card.rank == Rank.ACE),
        big_casino=BIG_CASINO in pile,
        little_casino=LITTLE_CASINO in pile,
    )


def calculate_scores(
    player1_pile: Sequence[Card],
    player2_pile: Sequence[Card],
    player1_score: int = 0,
    player2_score: int = 0,
) -> ScoreResult:
    """Add end-of-hand points to the running scores.

    Most cards (more than 26) is worth 3 and most spades 1, neither
    awarded on a tie. Each ace is worth 1, the ten of diamonds 2 and the
    two of spades 1.
    """
    first = score_pile(player1_pile)
    second = score_pile(player2_pile)
    p1_score = player1_score + first.card_points
    p2_score = player2_score + second.card_points

    if first.card_count > MOST_CARDS_THRESHOLD and second.card_count <= MOST_CARDS_THRESHOLD:
        p1_score += MOST_CARDS_POINTS
    elif second.card_count > MOST_CARDS_THRESHOLD and first.card_count <= MOST_CARDS_THRESHOLD:
        p2_score += MOST_CARDS_POINTS

    if first.spades > second.spades:
        p1_score += MOST_SPADES_POINTS
    elif second.spades > first.spades:
        p2_score += MOST_SPADES_POINTS

    return ScoreResult(p1_score=p1_score, p2_score=p2_score)
