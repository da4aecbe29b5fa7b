"""
Error taxonomy for the game core.

All of these are recoverable: the session catches move errors at the input
boundary and the CLI maps any GameError to exit code 2.
"""
from __future__ import annotations


class GameError(Exception):
    """Base class for every error raised by xogame."""


class InvalidSizeError(GameError, ValueError):
    def __init__(self, size: object, min_size: int, max_size: int) -> None:
        super().__init__(f"Board size must be an integer in [{min_size}, {max_size}], got {size!r}")
        self.size = size


class IllegalMoveError(GameError):
    """A move that cannot be applied to the board as given."""


class OutOfBoundsError(IllegalMoveError, ValueError):
    def __init__(self, row: int, col: int, size: int) -> None:
        super().__init__(f"Cell ({row}, {col}) is outside a {size}x{size} board")
        self.row = row
        self.col = col


class OccupiedCellError(IllegalMoveError):
    def __init__(self, row: int, col: int, occupant: str) -> None:
        super().__init__(f"Cell ({row}, {col}) is already taken by {occupant}")
        self.row = row
        self.col = col


class HistoryParseError(GameError, ValueError):
    """History blob could not be decoded; the existing log is untouched."""

    def __init__(self, message: str, index: int | None = None) -> None:
        if index is not None:
            message = f"entry {index}: {message}"
        super().__init__(message)
        self.index = index


class EmptyHistoryError(GameError):
    def __init__(self) -> None:
        super().__init__("No history to replay")
