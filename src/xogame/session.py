"""
GameSession: the one object that owns a game in progress.

It holds the board, turn and derived status, the history store, the replay
controller and the scheduler, and is the only thing that mutates them.

Control flow for a move:
  click -> is_legal -> apply_move -> evaluate -> history append -> commit
        -> (side to move is AI) schedule AI after ai_delay -> apply ...

Every board change bumps a generation counter and cancels the pending AI
call. A deferred AI call that fires with an old generation does nothing.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .config import Settings
from .errors import IllegalMoveError
from .game_basics import (
    O,
    X,
    Board,
    GameStatus,
    apply_move,
    check_size,
    create_board,
    evaluate,
    render_board,
)
from .history import HistoryInput, HistoryLog, HistorySnapshot, HistoryStore
from .legality import AI, controller_of, controllers_for, is_legal
from .planner import DIFFICULTIES, select_move
from .replay import ReplayController
from .scheduler import Cancellable, ManualScheduler, Scheduler
from .tactics import Move


class GameSession:
    def __init__(
        self,
        history: HistoryStore,
        settings: Optional[Settings] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.history = history
        self.scheduler: Scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.rng = rng if rng is not None else np.random.default_rng(self.settings.seed)
        self._size = check_size(self.settings.size)
        controllers_for(self.settings.game_mode)
        self._mode = self.settings.game_mode
        self._difficulty = self.settings.ai_difficulty
        self.replay = ReplayController(
            self.scheduler,
            on_frame=self._load_frame,
            on_finish=self._replay_finished,
            interval=self.settings.replay_interval,
        )
        self._generation = 0
        self._ai_task: Optional[Cancellable] = None
        self._board: Board = create_board(self._size)
        self._is_x_next = True
        self._status = GameStatus.in_progress()
        self.reset()

    # -- read-only state -------------------------------------------------

    @property
    def board(self) -> Board:
        return self._board

    @property
    def size(self) -> int:
        return self._size

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def winner(self) -> Optional[str]:
        return self._status.winner

    @property
    def is_x_next(self) -> bool:
        return self._is_x_next

    @property
    def current_player(self) -> str:
        return X if self._is_x_next else O

    @property
    def current_controller(self) -> str:
        return controller_of(self._mode, self.current_player)

    @property
    def game_mode(self) -> str:
        return self._mode

    @property
    def ai_difficulty(self) -> str:
        return self._difficulty

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_replaying(self) -> bool:
        return self.replay.is_playing

    @property
    def ai_thinking(self) -> bool:
        return self._ai_task is not None

    def render(self) -> str:
        return render_board(self._board)

    # -- configuration ---------------------------------------------------

    def reset(self) -> None:
        if self.replay.is_playing:
            self.replay.stop()
        self._commit(create_board(self._size), True)
        logging.debug("New %dx%d game (%s)", self._size, self._size, self._mode)
        self._maybe_schedule_ai()

    def set_size(self, size: int) -> None:
        self._size = check_size(size)
        self.reset()

    def set_mode(self, mode: str) -> None:
        controllers_for(mode)
        self._mode = mode
        self.reset()

    def set_difficulty(self, difficulty: str) -> None:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty!r}")
        self._difficulty = difficulty

    # -- moves -----------------------------------------------------------

    def click(self, row: int, col: int) -> bool:
        """Human input. Illegal input is ignored; returns whether a move was made."""
        if not is_legal(self._board, row, col, self._status, self.is_replaying, self.current_controller):
            logging.debug("Ignored input at (%s, %s)", row, col)
            return False
        try:
            self._play(row, col)
        except IllegalMoveError as e:
            logging.debug("Ignored input: %s", e)
            return False
        return True

    def _play(self, row: int, col: int) -> None:
        player = self.current_player
        board = apply_move(self._board, row, col, player)
        status = evaluate(board)
        is_x_next = not self._is_x_next
        if not self.is_replaying:
            # written before the move is committed; a failed write means no move
            self.history.append(
                HistorySnapshot.capture(board, status.winner, is_x_next, self._mode, self._difficulty)
            )
        self._commit(board, is_x_next)
        logging.debug("%s -> (%d, %d)", player, row, col)
        if status.is_over:
            logging.info("Game over: %s", f"{status.winner} wins" if status.winner else "draw")
        self._maybe_schedule_ai()

    def _commit(self, board: Board, is_x_next: bool) -> None:
        self._generation += 1
        self._cancel_ai()
        self._board = board
        self._is_x_next = is_x_next
        self._status = evaluate(board)

    # -- AI --------------------------------------------------------------

    def _cancel_ai(self) -> None:
        if self._ai_task is not None:
            self._ai_task.cancel()
            self._ai_task = None

    def _maybe_schedule_ai(self) -> None:
        if self.is_replaying or self._status.is_over or self.current_controller != AI:
            return
        self._cancel_ai()
        generation = self._generation
        self._ai_task = self.scheduler.call_later(self.settings.ai_delay, lambda: self._run_ai(generation))

    def _run_ai(self, generation: int) -> None:
        if generation != self._generation:
            logging.debug("Dropped stale AI move (generation %d, now %d)", generation, self._generation)
            return
        self._ai_task = None
        if self.is_replaying or self._status.is_over or self.current_controller != AI:
            return
        move = self.plan_move()
        if move is None:
            return
        self._play(*move)

    def plan_move(self) -> Optional[Move]:
        return select_move(self._board, self.current_player, self._difficulty, self.rng)

    # -- history ---------------------------------------------------------

    def import_history(self, blob: HistoryInput) -> HistoryLog:
        log = self.history.replace_all(blob)
        self.reset()
        return log

    def export_history(self) -> str:
        return self.history.export()

    def clear_history(self) -> None:
        self.history.clear()

    # -- replay ----------------------------------------------------------

    def start_replay(self) -> None:
        self.replay.start(self.history.entries)
        self._commit(create_board(self._size), True)

    def stop_replay(self) -> None:
        if self.replay.stop():
            self.reset()

    def _load_frame(self, snapshot: HistorySnapshot, index: int) -> None:
        self._commit(snapshot.board, snapshot.is_x_next)
        logging.debug("Replay frame %d/%d", index + 1, self.replay.total)

    def _replay_finished(self) -> None:
        # play resumes from the last frame shown
        self._maybe_schedule_ai()
