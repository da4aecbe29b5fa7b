import numpy as np
import pytest

from xogame.game_basics import board_from_rows, create_board, empty_cells, evaluate, GameStatus, apply_move
from xogame.planner import best_move, random_move, select_move
from xogame.tactics import (
    blocking_moves,
    first_blocking_move,
    first_winning_move,
    fork_moves,
    immediate_winning_moves,
    positional_fallback,
)


def B(rows):
    return board_from_rows(rows)


def test_hard_takes_center_on_empty_board():
    assert select_move(create_board(3), "X", "hard") == (1, 1)
    assert best_move(create_board(4), "X") == (2, 2)
    assert best_move(create_board(7), "O") == (3, 3)


def test_hard_prefers_own_win_over_block():
    b = B([["X", "X", None], ["O", "O", None], [None, None, None]])
    assert select_move(b, "O", "hard") == (1, 2)


def test_hard_blocks_when_no_win():
    b = B([["X", "X", None], [None, "O", None], [None, None, None]])
    assert first_winning_move(b, "O") is None
    assert select_move(b, "O", "hard") == (0, 2)


def test_hard_falls_back_to_first_free_corner_on_3x3():
    b = B([["X", None, None], [None, "O", None], [None, None, None]])
    assert best_move(b, "X") == (0, 2)


def test_hard_prefers_center_before_corners_on_3x3():
    b = B([["X", None, None], [None, None, None], [None, None, None]])
    assert positional_fallback(b) == (1, 1)
    assert best_move(b, "O") == (1, 1)


def test_hard_random_fallback_on_large_board_picks_empty_cell():
    b = apply_move(create_board(5), 0, 0, "X")
    rng = np.random.default_rng(3)
    for _ in range(20):
        mv = best_move(b, "O", rng)
        assert mv in empty_cells(b)


def test_first_win_is_row_major():
    b = B([["X", None, "X"], [None, None, None], ["X", None, None]])
    # top row, left column and anti-diagonal are all one short
    assert immediate_winning_moves(b, "X") == [(0, 1), (1, 0), (1, 1)]
    assert first_winning_move(b, "X") == (0, 1)
    assert blocking_moves(b, "O") == [(0, 1), (1, 0), (1, 1)]
    assert first_blocking_move(b, "O") == (0, 1)


def test_scan_does_not_mutate_board():
    b = B([["X", "X", None], ["O", "O", None], [None, None, None]])
    before = b
    immediate_winning_moves(b, "X")
    fork_moves(b, "X")
    assert b == before


def test_fork_moves():
    b = B([["X", None, None], [None, "O", None], [None, None, "X"]])
    forks = fork_moves(b, "X")
    assert (0, 2) in forks and (2, 0) in forks


def test_full_board_has_no_move():
    b = B([["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]])
    for diff in ("easy", "medium", "hard"):
        assert select_move(b, "X", diff) is None
    assert random_move(b) is None


def test_easy_is_seeded_and_legal():
    b = apply_move(create_board(4), 1, 1, "X")
    a = [random_move(b, np.random.default_rng(7)) for _ in range(3)]
    c = [random_move(b, np.random.default_rng(7)) for _ in range(3)]
    assert a == c
    assert all(mv in empty_cells(b) for mv in a)


def test_easy_covers_all_cells_eventually():
    b = apply_move(create_board(3), 1, 1, "X")
    rng = np.random.default_rng(0)
    seen = {select_move(b, "O", "easy", rng) for _ in range(300)}
    assert seen == set(empty_cells(b))


def test_medium_mixes_strategies():
    # Hard always wins here at (0,2); easy picks at random.
    b = B([["O", "O", None], ["X", "X", None], [None, None, "X"]])
    rng = np.random.default_rng(11)
    picks = [select_move(b, "O", "medium", rng) for _ in range(200)]
    assert all(p in empty_cells(b) for p in picks)
    wins = sum(1 for p in picks if p == (0, 2))
    assert 60 < wins < 200
    assert any(p != (0, 2) for p in picks)


def test_unknown_difficulty():
    with pytest.raises(ValueError):
        select_move(create_board(3), "X", "impossible")


def test_hard_move_completes_the_win():
    b = B([[None, "O", "X"], [None, "X", "O"], [None, None, None]])
    mv = select_move(b, "X", "hard")
    assert evaluate(apply_move(b, *mv, "X")) == GameStatus.won("X")
