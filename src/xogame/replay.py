"""
Timed, non-interactive playback of a stored history log.

Idle --start()--> Playing(0) --tick--> Playing(1) ... --tick past end--> Idle
Playing --stop()--> Idle

Each tick hands one snapshot to ``on_frame``. The log is frozen when playback
starts, so later appends or imports do not change a running replay.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple

from .errors import EmptyHistoryError
from .history import HistorySnapshot
from .scheduler import Cancellable, Scheduler

IDLE = "idle"
PLAYING = "playing"
DEFAULT_INTERVAL = 1.0


class ReplayController:
    def __init__(
        self,
        scheduler: Scheduler,
        on_frame: Callable[[HistorySnapshot, int], None],
        on_finish: Optional[Callable[[], None]] = None,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("replay interval must be > 0")
        self._scheduler = scheduler
        self._on_frame = on_frame
        self._on_finish = on_finish
        self.interval = interval
        self.state = IDLE
        self._frames: Tuple[HistorySnapshot, ...] = ()
        self._next = 0
        self._task: Optional[Cancellable] = None
        self._generation = 0

    @property
    def is_playing(self) -> bool:
        return self.state == PLAYING

    @property
    def index(self) -> int:
        """Index of the next frame to show."""
        return self._next

    @property
    def total(self) -> int:
        return len(self._frames)

    @property
    def progress(self) -> str:
        shown = max(self._next, 1) if self._frames else 0
        return f"{shown}/{self.total}"

    def start(self, history: Sequence[HistorySnapshot]) -> None:
        if len(history) == 0:
            raise EmptyHistoryError()
        self._cancel_task()
        self._frames = tuple(history)
        self._next = 0
        self.state = PLAYING
        logging.info("Replay started: %d frames every %.2fs", len(self._frames), self.interval)
        self._schedule()

    def stop(self) -> bool:
        """Abort playback. Returns False if nothing was playing."""
        if self.state != PLAYING:
            return False
        self._cancel_task()
        self.state = IDLE
        logging.info("Replay stopped at %s", self.progress)
        return True

    def _cancel_task(self) -> None:
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _schedule(self) -> None:
        generation = self._generation
        self._task = self._scheduler.call_later(self.interval, lambda: self._tick(generation))

    def _tick(self, generation: int) -> None:
        if generation != self._generation or self.state != PLAYING:
            return
        self._task = None
        if self._next >= len(self._frames):
            self.state = IDLE
            logging.info("Replay finished (%d frames)", len(self._frames))
            if self._on_finish is not None:
                self._on_finish()
            return
        frame = self._frames[self._next]
        index = self._next
        self._next += 1
        self._on_frame(frame, index)
        if self.state == PLAYING and generation == self._generation:
            self._schedule()
