"""Structured results returned by the validators and the turn orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from casino_engine.cards import Card, Rank
    from casino_engine.table import Build, TableItem


class IllegalActionError(Exception):
    """Raised when a rejected action is forced through."""

    pass


@dataclass(frozen=True, slots=True)
class BuildValidation:
    """Outcome of build validation.

    Attributes:
        is_valid: Whether the build may be made
        message: Human-readable explanation
        build_value: Resulting value of the build
        target_rank: Rank needed to capture the build
        is_modification: Whether an existing build is extended
        target_build: The build being extended, if any
        holding_card: Card kept in hand that can capture the build
        summing_items: Items added to the played card to reach the value
        cascading_groups: Item groups that each already sum to the value
    """

    is_valid: bool
    message: str
    build_value: int | None = None
    target_rank: Rank | None = None
    is_modification: bool = False
    target_build: Build | None = None
    holding_card: Card | None = None
    summing_items: tuple[TableItem, ...] = ()
    cascading_groups: tuple[tuple[TableItem, ...], ...] = ()

    @property
    def cascading_items(self) -> tuple[TableItem, ...]:
        return tuple(item for group in self.cascading_groups for item in group)


@dataclass(frozen=True, slots=True)
class PairValidation:
    """Outcome of pair validation."""

    is_valid: bool
    message: str
    rank: Rank | None = None
    target_pair: TableItem | None = None


@dataclass(frozen=True, slots=True)
class TurnResult:
    """Outcome of an orchestrated action.

    On failure ``table_items`` is the table that was passed in, untouched.

    Attributes:
        success: Whether the action was applied
        table_items: New table snapshot
        message: Human-readable outcome
        scores: Running scores (player 0, player 1), when the action carries them
        last_capturer: Last player to capture, if any
        captured_cards: Cards moved to the capturer's pile (played card first)
        swept: Whether the capture cleared the table
        cascaded: Capture sets taken automatically after the selection
    """

    success: bool
    table_items: tuple[TableItem, ...]
    message: str
    scores: tuple[int, int] | None = None
    last_capturer: int | None = None
    captured_cards: tuple[Card, ...] = ()
    swept: bool = False
    cascaded: tuple[tuple[TableItem, ...], ...] = ()

    def with_totals(self, scores: tuple[int, int], last_capturer: int | None) -> TurnResult:
        """Return new result carrying the given running totals."""
        return TurnResult(
            success=self.success,
            table_items=self.table_items,
            message=self.message,
            scores=scores,
            last_capturer=last_capturer,
            captured_cards=self.captured_cards,
            swept=self.swept,
            cascaded=self.cascaded,
        )

    def raise_for_failure(self) -> TurnResult:
        """Return self, or raise IllegalActionError if the action was rejected."""
        if not self.success:
            raise IllegalActionError(self.message)
        return self


@dataclass(frozen=True, slots=True)
class PileScore:
    """Scoring breakdown for one capture pile."""

    card_count: int
    spades: int
    aces: int
    big_casino: bool
    little_casino: bool

    @property
    def card_points(self) -> int:
        """Points from aces, the ten of diamonds and the two of spades."""
        return self.aces + (2 if self.big_casino else 0) + (1 if self.little_casino else 0)


@dataclass(frozen=True, slots=True)
class ScoreResult:
    """Running scores after end-of-hand scoring."""

    p1_score: int
    p2_score: int

    @property
    def as_tuple(self) -> tuple[int, int]:
        return (self.p1_score, self.p2_score)
