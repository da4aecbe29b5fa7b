"""
Move history: immutable snapshots, the JSON blob codec, and the store that
keeps the log in memory and in a blob slot.

Wire shape (one object per applied move, oldest first):
  {"board": [["X", null, ...], ...], "winner": "X"|"O"|null, "isXNext": bool,
   "timestamp": ISO-8601, "gameMode": str, "size": int, "aiDifficulty": str}
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import HistoryParseError
from .game_basics import PLAYERS, Board, board_from_rows, board_to_rows
from .legality import DEFAULT_MODE, GAME_MODES
from .planner import DIFFICULTIES, MEDIUM
from .storage import BlobStore

DEFAULT_SLOT = "gameHistory"
DEFAULT_DIFFICULTY = MEDIUM


def utc_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class HistorySnapshot:
    board: Board
    winner: Optional[str]
    is_x_next: bool
    timestamp: str
    game_mode: str = DEFAULT_MODE
    size: int = 3
    ai_difficulty: str = DEFAULT_DIFFICULTY

    @classmethod
    def capture(
        cls,
        board: Board,
        winner: Optional[str],
        is_x_next: bool,
        game_mode: str,
        ai_difficulty: str,
        now: Optional[datetime] = None,
    ) -> "HistorySnapshot":
        # Board values are immutable tuples, so holding one is already a deep copy.
        return cls(
            board=board,
            winner=winner,
            is_x_next=is_x_next,
            timestamp=utc_timestamp(now),
            game_mode=game_mode,
            size=len(board),
            ai_difficulty=ai_difficulty,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "board": board_to_rows(self.board),
            "winner": self.winner,
            "isXNext": self.is_x_next,
            "timestamp": self.timestamp,
            "gameMode": self.game_mode,
            "size": self.size,
            "aiDifficulty": self.ai_difficulty,
        }

    @classmethod
    def from_dict(cls, data: object, index: Optional[int] = None) -> "HistorySnapshot":
        if not isinstance(data, dict):
            raise HistoryParseError("entry must be an object", index)
        if "board" not in data:
            raise HistoryParseError("missing 'board'", index)
        try:
            board = board_from_rows(data["board"])
        except ValueError as e:
            raise HistoryParseError(str(e), index) from e

        winner = data.get("winner")
        if winner is not None and winner not in PLAYERS:
            raise HistoryParseError(f"'winner' must be 'X', 'O' or null, got {winner!r}", index)

        if "isXNext" not in data:
            raise HistoryParseError("missing 'isXNext'", index)
        is_x_next = data["isXNext"]
        if not isinstance(is_x_next, bool):
            raise HistoryParseError("'isXNext' must be a boolean", index)

        timestamp = data.get("timestamp")
        if not isinstance(timestamp, str):
            raise HistoryParseError("'timestamp' must be an ISO-8601 string", index)
        try:
            parse_timestamp(timestamp)
        except ValueError as e:
            raise HistoryParseError(f"bad 'timestamp' {timestamp!r}", index) from e

        game_mode = data.get("gameMode", DEFAULT_MODE)
        if not isinstance(game_mode, str) or game_mode not in GAME_MODES:
            raise HistoryParseError(f"unknown 'gameMode' {game_mode!r}", index)

        difficulty = data.get("aiDifficulty", DEFAULT_DIFFICULTY)
        if not isinstance(difficulty, str) or difficulty not in DIFFICULTIES:
            raise HistoryParseError(f"unknown 'aiDifficulty' {difficulty!r}", index)

        size = data.get("size", len(board))
        if isinstance(size, bool) or not isinstance(size, int) or size != len(board):
            raise HistoryParseError(f"'size' {size!r} does not match a {len(board)}x{len(board)} board", index)

        return cls(
            board=board,
            winner=winner,
            is_x_next=is_x_next,
            timestamp=timestamp,
            game_mode=game_mode,
            size=size,
            ai_difficulty=difficulty,
        )


HistoryLog = Tuple[HistorySnapshot, ...]
HistoryInput = Union[str, bytes, Sequence[Union[HistorySnapshot, Dict[str, Any]]]]


def parse_history(data: object) -> HistoryLog:
    if not isinstance(data, list):
        raise HistoryParseError("history must be a JSON array")
    out: List[HistorySnapshot] = []
    for i, item in enumerate(data):
        if isinstance(item, HistorySnapshot):
            out.append(item)
        else:
            out.append(HistorySnapshot.from_dict(item, i))
    return tuple(out)


def loads_history(text: Union[str, bytes]) -> HistoryLog:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HistoryParseError(f"not valid JSON: {e}") from e
    return parse_history(data)


def dumps_history(log: Iterable[HistorySnapshot], indent: Optional[int] = 2) -> str:
    return json.dumps([s.to_dict() for s in log], indent=indent)


class HistoryStore:
    """Append-only snapshot log mirrored to one blob slot.

    Every mutation writes the full log to the store first and only then
    updates memory, so a failed write leaves both sides as they were.
    """

    def __init__(self, store: BlobStore, slot: str = DEFAULT_SLOT) -> None:
        self._store = store
        self.slot = slot
        self._log: HistoryLog = ()

    @classmethod
    def open(cls, store: BlobStore, slot: str = DEFAULT_SLOT) -> "HistoryStore":
        hs = cls(store, slot)
        hs.load()
        return hs

    def load(self) -> int:
        blob = self._store.get(self.slot)
        if blob is None:
            self._log = ()
            return 0
        try:
            self._log = loads_history(blob)
        except HistoryParseError as e:
            logging.error("Failed to load game history from slot %r: %s", self.slot, e)
            self._log = ()
            return 0
        logging.info("Loaded %d history entries", len(self._log))
        return len(self._log)

    @property
    def entries(self) -> HistoryLog:
        return self._log

    def __len__(self) -> int:
        return len(self._log)

    def __iter__(self) -> Iterator[HistorySnapshot]:
        return iter(self._log)

    def __getitem__(self, index: int) -> HistorySnapshot:
        return self._log[index]

    def _persist(self, log: HistoryLog) -> None:
        self._store.set(self.slot, dumps_history(log, indent=None))

    def append(self, snapshot: HistorySnapshot) -> None:
        new_log = self._log + (snapshot,)
        self._persist(new_log)
        self._log = new_log

    def replace_all(self, new_log: HistoryInput) -> HistoryLog:
        if isinstance(new_log, (str, bytes)):
            parsed = loads_history(new_log)
        else:
            parsed = parse_history(list(new_log) if isinstance(new_log, tuple) else new_log)
        self._persist(parsed)
        self._log = parsed
        logging.info("Replaced history with %d entries", len(parsed))
        return parsed

    def clear(self) -> None:
        self._store.delete(self.slot)
        if not self._log:
            return
        self._log = ()
        logging.info("Cleared history")

    def export(self, indent: Optional[int] = 2) -> str:
        return dumps_history(self._log, indent=indent)
