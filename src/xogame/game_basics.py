"""
Game basics: board representation, moves, winner/draw checks, conversions.
Notes:
- A board is a square tuple of row tuples; a cell is None (empty), "X" or "O".
- Boards are values: apply_move returns a new board and never touches the old one.
- Only a full row, column or diagonal of one symbol wins, so an N x N board
  needs N in a row. X always starts.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidSizeError, OccupiedCellError, OutOfBoundsError

X = "X"
O = "O"
PLAYERS = (X, O)
MIN_SIZE = 3
MAX_SIZE = 10

Cell = Optional[str]
Row = Tuple[Cell, ...]
Board = Tuple[Row, ...]
# Anything indexable as grid[row][col]; evaluate() also accepts mutable scratch grids.
Grid = Sequence[Sequence[Cell]]

IN_PROGRESS = "in_progress"
WON = "won"
DRAW = "draw"


@dataclass(frozen=True)
class GameStatus:
    state: str
    winner: Optional[str] = None

    @classmethod
    def in_progress(cls) -> "GameStatus":
        return cls(IN_PROGRESS)

    @classmethod
    def won(cls, player: str) -> "GameStatus":
        return cls(WON, player)

    @classmethod
    def draw(cls) -> "GameStatus":
        return cls(DRAW)

    @property
    def is_over(self) -> bool:
        return self.state != IN_PROGRESS


def check_size(size: object) -> int:
    if isinstance(size, bool) or not isinstance(size, int) or not MIN_SIZE <= size <= MAX_SIZE:
        raise InvalidSizeError(size, MIN_SIZE, MAX_SIZE)
    return size


def create_board(size: int) -> Board:
    n = check_size(size)
    return tuple(tuple(None for _ in range(n)) for _ in range(n))


def opponent(player: str) -> str:
    if player == X:
        return O
    if player == O:
        return X
    raise ValueError(f"Unknown player: {player!r}")


def in_bounds(board: Grid, row: int, col: int) -> bool:
    n = len(board)
    return 0 <= row < n and 0 <= col < n


def apply_move(board: Board, row: int, col: int, player: str) -> Board:
    if player not in PLAYERS:
        raise ValueError(f"Unknown player: {player!r}")
    if not in_bounds(board, row, col):
        raise OutOfBoundsError(row, col, len(board))
    occupant = board[row][col]
    if occupant is not None:
        raise OccupiedCellError(row, col, occupant)
    new_row = board[row][:col] + (player,) + board[row][col + 1:]
    # untouched rows are shared with the previous board
    return board[:row] + (new_row,) + board[row + 1:]


def _line_owner(cells: Iterable[Cell]) -> Cell:
    it = iter(cells)
    first = next(it)
    if first is None:
        return None
    for v in it:
        if v != first:
            return None
    return first


def get_winner(board: Grid) -> Cell:
    """Owner of the first complete line: rows, then columns, then both diagonals."""
    n = len(board)
    for r in range(n):
        w = _line_owner(board[r])
        if w is not None:
            return w
    for c in range(n):
        w = _line_owner(board[r][c] for r in range(n))
        if w is not None:
            return w
    w = _line_owner(board[i][i] for i in range(n))
    if w is not None:
        return w
    return _line_owner(board[i][n - 1 - i] for i in range(n))


def is_full(board: Grid) -> bool:
    return all(cell is not None for row in board for cell in row)


def is_empty_board(board: Grid) -> bool:
    return all(cell is None for row in board for cell in row)


def is_draw(board: Grid) -> bool:
    return is_full(board) and get_winner(board) is None


def evaluate(board: Grid) -> GameStatus:
    w = get_winner(board)
    if w is not None:
        return GameStatus.won(w)
    if is_full(board):
        return GameStatus.draw()
    return GameStatus.in_progress()


def empty_cells(board: Grid) -> List[Tuple[int, int]]:
    return [(r, c) for r, row in enumerate(board) for c, cell in enumerate(row) if cell is None]


def get_piece_counts(board: Grid) -> Tuple[int, int]:
    x = sum(row.count(X) for row in board)
    o = sum(row.count(O) for row in board)
    return x, o


def current_player(board: Grid) -> str:
    x, o = get_piece_counts(board)
    return X if x == o else O


def board_from_rows(rows: object) -> Board:
    """Validate nested lists (e.g. decoded JSON) and freeze them into a Board."""
    if not isinstance(rows, (list, tuple)):
        raise ValueError("board must be a list of rows")
    n = len(rows)
    check_size(n)
    out = []
    for r, row in enumerate(rows):
        if not isinstance(row, (list, tuple)) or len(row) != n:
            raise ValueError(f"board row {r} must be a list of {n} cells")
        for c, cell in enumerate(row):
            if cell is not None and cell not in PLAYERS:
                raise ValueError(f"board cell ({r}, {c}) must be 'X', 'O' or null, got {cell!r}")
        out.append(tuple(row))
    return tuple(out)


def board_to_rows(board: Grid) -> List[List[Cell]]:
    return [list(row) for row in board]


def serialize_board(board: Grid) -> str:
    return '/'.join(''.join(cell or '.' for cell in row) for row in board)


def deserialize_board(board_str: str) -> Board:
    rows = [r for r in board_str.strip().split('/')]
    decoded = []
    for r in rows:
        if any(ch not in '.XO' for ch in r):
            raise ValueError(f"Invalid board row {r!r}: use '.', 'X' or 'O'")
        decoded.append([None if ch == '.' else ch for ch in r])
    return board_from_rows(decoded)


def render_board(board: Grid) -> str:
    n = len(board)
    width = len(str(n - 1))
    header = ' ' * (width + 1) + ' '.join(str(c).rjust(width) for c in range(n))
    lines = [header]
    for r, row in enumerate(board):
        cells = ' '.join((cell or '.').rjust(width) for cell in row)
        lines.append(f"{str(r).rjust(width)} {cells}")
    return '\n'.join(lines)
