"""Action types for Casino."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from casino_engine.cards import Card
    from casino_engine.table import TableItem


class ActionType(IntEnum):
    """Type of action."""

    BUILD = auto()
    PAIR = auto()
    CAPTURE = auto()


@dataclass(frozen=True, slots=True)
class Action(ABC):
    """Base class for all actions: a card played onto a table selection."""

    card: Card
    selected: tuple[TableItem, ...]

    @property
    @abstractmethod
    def action_type(self) -> ActionType:
        """The type of this action."""
        ...

    @abstractmethod
    def __str__(self) -> str:
        """Human-readable action description."""
        ...

    def _selection_str(self) -> str:
        return ", ".join(str(item) for item in self.selected) or "nothing"


@dataclass(frozen=True, slots=True)
class BuildAction(Action):
    """Build with the played card, optionally naming the value to build."""

    declared_value: int | None = None

    @property
    def action_type(self) -> ActionType:
        return ActionType.BUILD

    def __str__(self) -> str:
        suffix = f" for {self.declared_value}" if self.declared_value is not None else ""
        return f"Build {self.card} on {self._selection_str()}{suffix}"


@dataclass(frozen=True, slots=True)
class PairAction(Action):
    """Pair the played card with same-rank cards or a pair."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.PAIR

    def __str__(self) -> str:
        return f"Pair {self.card} with {self._selection_str()}"


@dataclass(frozen=True, slots=True)
class CaptureAction(Action):
    """Capture the selected items with the played card."""

    @property
    def action_type(self) -> ActionType:
        return ActionType.CAPTURE

    def __str__(self) -> str:
        return f"Capture {self._selection_str()} with {self.card}"
