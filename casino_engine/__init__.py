"""Casino card game rule engine."""

from casino_engine.cards import Card, Rank, Suit, build_value, capture_value, count_value
from casino_engine.config import DEFAULT_RULES, RuleConfig
from casino_engine.table import Build, IdAllocator, ItemType, LooseCard, Pair, TableItem
from casino_engine.actions import Action, BuildAction, PairAction, CaptureAction
from casino_engine.results import IllegalActionError, TurnResult, ScoreResult
from casino_engine.build_logic import validate_build
from casino_engine.pair_logic import validate_pair
from casino_engine.capture_logic import get_valid_captures, is_valid_multi_capture_selection
from casino_engine.turns import execute_action, handle_build, handle_capture, handle_pair
from casino_engine.scoring import calculate_scores

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "build_value",
    "capture_value",
    "count_value",
    "DEFAULT_RULES",
    "RuleConfig",
    "Build",
    "IdAllocator",
    "ItemType",
    "LooseCard",
    "Pair",
    "TableItem",
    "Action",
    "BuildAction",
    "PairAction",
    "CaptureAction",
    "IllegalActionError",
    "TurnResult",
    "ScoreResult",
    "validate_build",
    "validate_pair",
    "get_valid_captures",
    "is_valid_multi_capture_selection",
    "execute_action",
    "handle_build",
    "handle_capture",
    "handle_pair",
    "calculate_scores",
]
