"""xogame package.

N x N tic-tac-toe core: board rules, heuristic AI, persisted move history
and timed replay, plus a small terminal CLI.

Convenience imports are exposed for common workflows.
"""

from .errors import (
    EmptyHistoryError,
    GameError,
    HistoryParseError,
    InvalidSizeError,
    OccupiedCellError,
    OutOfBoundsError,
)
from .game_basics import GameStatus, apply_move, create_board, evaluate
from .history import HistorySnapshot, HistoryStore
from .legality import is_legal
from .planner import best_move, select_move
from .session import GameSession

__all__ = [
    "create_board",
    "apply_move",
    "evaluate",
    "GameStatus",
    "is_legal",
    "select_move",
    "best_move",
    "HistorySnapshot",
    "HistoryStore",
    "GameSession",
    "GameError",
    "InvalidSizeError",
    "OutOfBoundsError",
    "OccupiedCellError",
    "HistoryParseError",
    "EmptyHistoryError",
]
