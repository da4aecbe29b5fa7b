"""
Move legality gate for interactive input, plus the game-mode table that
decides who controls each side.
"""
from typing import Dict, Tuple

from .game_basics import Grid, GameStatus, X, in_bounds

HUMAN = "human"
AI = "ai"
CONTROLLERS = (HUMAN, AI)

# mode -> (controller of X, controller of O)
GAME_MODES: Dict[str, Tuple[str, str]] = {
    "human-vs-human": (HUMAN, HUMAN),
    "human-vs-ai": (HUMAN, AI),
    "ai-vs-human": (AI, HUMAN),
    "ai-vs-ai": (AI, AI),
}
DEFAULT_MODE = "human-vs-human"


def controllers_for(mode: str) -> Tuple[str, str]:
    try:
        return GAME_MODES[mode]
    except KeyError:
        raise ValueError(f"Unknown game mode: {mode!r}") from None


def controller_of(mode: str, player: str) -> str:
    x_ctrl, o_ctrl = controllers_for(mode)
    return x_ctrl if player == X else o_ctrl


def is_legal(
    board: Grid,
    row: int,
    col: int,
    status: GameStatus,
    is_replaying: bool,
    current_controller: str,
) -> bool:
    if is_replaying:
        return False
    if status.is_over:
        return False
    # humans never move on the AI's turn; pending AI input is dropped, not queued
    if current_controller == AI:
        return False
    if not in_bounds(board, row, col):
        return False
    return board[row][col] is None
