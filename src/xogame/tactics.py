"""
Tactics and simple motifs: immediate wins/blocks, forks, opening squares.
Notes:
- Everything here is one ply deep. Candidates are tried on a single scratch
  grid that is written and restored in place, so a scan costs one copy.
- Scans are row-major, so the "first" move of a kind is deterministic.
"""
from typing import Iterator, List, Optional, Tuple

from .game_basics import Grid, empty_cells, get_winner, is_empty_board, opponent

Move = Tuple[int, int]

CORNERS_3X3 = [(0, 0), (0, 2), (2, 0), (2, 2)]


def _winning_cells(board: Grid, player: str) -> Iterator[Move]:
    scratch = [list(row) for row in board]
    for r, c in empty_cells(board):
        scratch[r][c] = player
        try:
            if get_winner(scratch) == player:
                yield (r, c)
        finally:
            scratch[r][c] = None


def immediate_winning_moves(board: Grid, player: str) -> List[Move]:
    return list(_winning_cells(board, player))


def first_winning_move(board: Grid, player: str) -> Optional[Move]:
    return next(_winning_cells(board, player), None)


def blocking_moves(board: Grid, player: str) -> List[Move]:
    return immediate_winning_moves(board, opponent(player))


def first_blocking_move(board: Grid, player: str) -> Optional[Move]:
    return first_winning_move(board, opponent(player))


def fork_moves(board: Grid, player: str) -> List[Move]:
    forks: List[Move] = []
    scratch = [list(row) for row in board]
    for r, c in empty_cells(board):
        scratch[r][c] = player
        if get_winner(scratch) is None and len(immediate_winning_moves(scratch, player)) >= 2:
            forks.append((r, c))
        scratch[r][c] = None
    return forks


def center_cell(board: Grid) -> Move:
    n = len(board)
    return (n // 2, n // 2)


def opening_move(board: Grid) -> Optional[Move]:
    return center_cell(board) if is_empty_board(board) else None


def positional_fallback(board: Grid) -> Optional[Move]:
    """Center, then corners in fixed order. Only defined for the classic 3x3 board."""
    if len(board) != 3:
        return None
    if board[1][1] is None:
        return (1, 1)
    for r, c in CORNERS_3X3:
        if board[r][c] is None:
            return (r, c)
    return None
