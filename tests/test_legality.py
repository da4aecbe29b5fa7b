import pytest

from xogame.game_basics import GameStatus, apply_move, create_board
from xogame.legality import AI, GAME_MODES, HUMAN, controller_of, controllers_for, is_legal

IN_PROGRESS = GameStatus.in_progress()


def test_legal_move_on_empty_cell():
    assert is_legal(create_board(3), 0, 0, IN_PROGRESS, False, HUMAN)


@pytest.mark.parametrize("row, col, status, replaying, ctrl", [
    (0, 0, IN_PROGRESS, True, HUMAN),
    (0, 0, GameStatus.won("X"), False, HUMAN),
    (0, 0, GameStatus.draw(), False, HUMAN),
    (0, 0, IN_PROGRESS, False, AI),
    (1, 1, IN_PROGRESS, False, HUMAN),
    (3, 0, IN_PROGRESS, False, HUMAN),
    (0, -1, IN_PROGRESS, False, HUMAN),
])
def test_illegal_moves(row, col, status, replaying, ctrl):
    board = apply_move(create_board(3), 1, 1, "X")
    assert not is_legal(board, row, col, status, replaying, ctrl)


def test_game_modes_map_to_controllers():
    assert list(GAME_MODES) == ["human-vs-human", "human-vs-ai", "ai-vs-human", "ai-vs-ai"]
    assert controllers_for("human-vs-ai") == (HUMAN, AI)
    assert controllers_for("ai-vs-human") == (AI, HUMAN)
    assert controller_of("ai-vs-human", "X") == AI
    assert controller_of("ai-vs-human", "O") == HUMAN
    with pytest.raises(ValueError):
        controllers_for("robot-party")
