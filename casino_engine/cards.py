"""Card, Suit, and Rank models and the value lookups for Casino."""

from __future__ import annotations

from enum import IntEnum
from functools import total_ordering
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from casino_engine.config import RuleConfig

MAX_BUILD_VALUE = 10


class Suit(IntEnum):
    """Card suits."""

    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3

    def __str__(self) -> str:
        return self.symbol

    @property
    def symbol(self) -> str:
        return {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }[self]

    @property
    def letter(self) -> str:
        return self.name[0]


class Rank(IntEnum):
    """Card ranks (Ace=1 through King=13)."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        return self.symbol

    @property
    def symbol(self) -> str:
        if self.value == 1:
            return "A"
        elif self.value <= 10:
            return str(self.value)
        else:
            return self.name[0]

    @property
    def is_face(self) -> bool:
        """Whether this is a face rank (J, Q, K)."""
        return self.value >= 11

    @classmethod
    def from_symbol(cls, symbol: str) -> Rank | None:
        """Parse a rank symbol such as ``"A"``, ``"10"`` or ``"K"``."""
        for rank in cls:
            if rank.symbol == symbol.strip().upper():
                return rank
        return None


def _coerce_rank(rank: Rank | str | None) -> Rank | None:
    if isinstance(rank, Rank):
        return rank
    if isinstance(rank, str):
        return Rank.from_symbol(rank)
    return None


def count_value(rank: Rank | str) -> int:
    """Card-counting value: Ace=1, numerals face value, J/Q/K=10."""
    rank = _coerce_rank(rank)
    if rank is None:
        return 0
    return 10 if rank.is_face else rank.value


def build_value(rank: Rank | str) -> int:
    """Value used when summing builds and combinations (J/Q/K are unusable)."""
    rank = _coerce_rank(rank)
    if rank is None or rank.is_face:
        return 0
    return rank.value


def capture_value(rank: Rank | str) -> int:
    """High-ace ordering value: Ace=14, J=11, Q=12, K=13."""
    rank = _coerce_rank(rank)
    if rank is None:
        return 0
    return 14 if rank == Rank.ACE else rank.value


def rank_for_build_value(value: int) -> Rank | None:
    """The capturing rank of a build of ``value``, or None outside 1..10."""
    if value < 1 or value > MAX_BUILD_VALUE:
        return None
    return Rank(value)


def can_rank_capture_build_value(
    rank: Rank, value: int, rules: RuleConfig | None = None
) -> bool:
    """Whether a card of ``rank`` captures a build worth ``value``."""
    target = rank_for_build_value(value)
    if target is None:
        return False
    if rank == target:
        return True
    face_ten = rules is not None and rules.face_cards_capture_ten
    return face_ten and value == 10 and rank.is_face


@total_ordering
class Card:
    """A playing card.

    Cards are immutable, interned and comparable. ``suit_rank`` is the
    stable string key (suit letter + rank symbol, e.g. ``D10``).
    """

    __slots__ = ("_rank", "_suit")

    # Pre-computed card instances for the standard 52-card deck
    _instances: ClassVar[dict[tuple[Rank, Suit], Card]] = {}

    def __new__(cls, rank: Rank, suit: Suit) -> Card:
        key = (rank, suit)
        if key not in cls._instances:
            instance = object.__new__(cls)
            instance._rank = rank
            instance._suit = suit
            cls._instances[key] = instance
        return cls._instances[key]

    @property
    def rank(self) -> Rank:
        return self._rank

    @property
    def suit(self) -> Suit:
        return self._suit

    @property
    def suit_rank(self) -> str:
        return f"{self._suit.letter}{self._rank.symbol}"

    @property
    def is_face(self) -> bool:
        """Whether this is a face card (J, Q, K)."""
        return self._rank.is_face

    @property
    def count_value(self) -> int:
        return count_value(self._rank)

    @property
    def build_value(self) -> int:
        return build_value(self._rank)

    @property
    def capture_value(self) -> int:
        return capture_value(self._rank)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self._rank == other._rank and self._suit == other._suit

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        if self._rank != other._rank:
            return self._rank < other._rank
        return self._suit < other._suit

    def __hash__(self) -> int:
        return hash((self._rank, self._suit))

    def __reduce__(self) -> tuple:
        """Unpickle through the constructor so cards stay interned."""
        return (Card, (self._rank, self._suit))

    def __repr__(self) -> str:
        return f"Card({self._rank.name}, {self._suit.name})"

    def __str__(self) -> str:
        return f"{self._rank.symbol}{self._suit.symbol}"


def create_deck() -> list[Card]:
    """Create a standard 52-card deck."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]
