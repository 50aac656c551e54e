"""Table item models for Casino.

Items on the table form a closed set of variants: a loose card, a build,
or a pair. Every item carries an integer id handed out by an
``IdAllocator``; ids are never reused within a game.
"""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Iterable, Sequence

from casino_engine.cards import Card, Rank


class ItemType(IntEnum):
    """Kind of table item."""

    CARD = auto()
    BUILD = auto()
    PAIR = auto()


@dataclass(frozen=True, slots=True)
class TableItem(ABC):
    """Base class for everything that can lie on the table."""

    id: int

    # Every variant also exposes ``cards``, the physical cards it holds.

    @property
    @abstractmethod
    def item_type(self) -> ItemType:
        """The kind of this item."""
        ...


@dataclass(frozen=True, slots=True)
class LooseCard(TableItem):
    """A single card lying loose on the table."""

    card: Card

    @property
    def item_type(self) -> ItemType:
        return ItemType.CARD

    @property
    def cards(self) -> tuple[Card, ...]:
        return (self.card,)

    @property
    def rank(self) -> Rank:
        return self.card.rank

    def __str__(self) -> str:
        return str(self.card)


@dataclass(frozen=True, slots=True)
class Build(TableItem):
    """Cards promised to be captured together by a card of ``target_rank``.

    Attributes:
        value: Declared build value (1-10)
        groups: Card groups, each summing (build values) to ``value``
        controller: Player who owns the build (0 or 1)
        target_rank: Rank needed to capture the build
    """

    value: int
    groups: tuple[tuple[Card, ...], ...]
    controller: int
    target_rank: Rank | None = None

    @property
    def item_type(self) -> ItemType:
        return ItemType.BUILD

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(card for group in self.groups for card in group)

    @property
    def is_compound(self) -> bool:
        """Whether the build holds more than one independently summed group."""
        return len(self.groups) > 1

    def is_consistent(self) -> bool:
        """Whether every group sums to the declared value without face cards."""
        return all(
            group
            and not any(card.is_face for card in group)
            and sum(card.build_value for card in group) == self.value
            for group in self.groups
        )

    def __str__(self) -> str:
        kind = "compound build" if self.is_compound else "build"
        return f"{kind} of {self.value} [{' '.join(str(c) for c in self.cards)}]"


@dataclass(frozen=True, slots=True)
class Pair(TableItem):
    """Two or more cards of identical rank grouped together."""

    rank: Rank
    cards: tuple[Card, ...]
    controller: int

    @property
    def item_type(self) -> ItemType:
        return ItemType.PAIR

    def __str__(self) -> str:
        return f"pair of {self.rank.symbol}s [{' '.join(str(c) for c in self.cards)}]"


class IdAllocator:
    """Hands out monotonically increasing table item ids.

    One allocator belongs to one game session. Allocation is serialized so
    a session may be shared between threads.
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)

    def loose(self, card: Card) -> LooseCard:
        """Wrap a card dealt to the table."""
        return LooseCard(id=self.next_id(), card=card)

    def lay_out(self, cards: Iterable[Card]) -> tuple[LooseCard, ...]:
        """Wrap several dealt cards, in order."""
        return tuple(self.loose(card) for card in cards)


def has_valid_id(item: object) -> bool:
    """Whether ``item`` is a table item with a usable id."""
    if not isinstance(item, TableItem):
        return False
    return isinstance(item.id, int) and not isinstance(item.id, bool) and item.id >= 0


def item_value(item: TableItem) -> int:
    """Build value an item contributes to a sum (0 if it cannot contribute)."""
    match item:
        case LooseCard(card=card):
            return card.build_value
        case Build():
            return 0 if item.is_compound else item.value
        case Pair():
            return 0
    return 0


def cards_of(items: Iterable[TableItem]) -> list[Card]:
    """Flatten items into their physical cards."""
    return [card for item in items for card in item.cards]


def id_signature(items: Iterable[TableItem]) -> tuple[int, ...]:
    """Order-independent key for a set of items."""
    return tuple(sorted(item.id for item in items))


def without_ids(items: Sequence[TableItem], ids: set[int]) -> tuple[TableItem, ...]:
    """Return the items whose id is not in ``ids``."""
    return tuple(item for item in items if item.id not in ids)
