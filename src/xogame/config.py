"""
Session settings. Defaults match a fresh game: 3x3, human vs human, medium AI.

Environment overrides (all optional): XO_SIZE, XO_MODE, XO_DIFFICULTY,
XO_AI_DELAY, XO_REPLAY_INTERVAL, XO_SEED, XO_DATA_DIR.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from .game_basics import check_size
from .history import DEFAULT_SLOT
from .legality import DEFAULT_MODE, controllers_for
from .paths import data_dir
from .planner import DIFFICULTIES, MEDIUM
from .replay import DEFAULT_INTERVAL as DEFAULT_REPLAY_INTERVAL

DEFAULT_AI_DELAY = 0.5


@dataclass
class Settings:
    size: int = 3
    game_mode: str = DEFAULT_MODE
    ai_difficulty: str = MEDIUM
    ai_delay: float = DEFAULT_AI_DELAY
    replay_interval: float = DEFAULT_REPLAY_INTERVAL
    seed: Optional[int] = None
    data_dir: Path = field(default_factory=data_dir)
    history_slot: str = DEFAULT_SLOT

    def __post_init__(self) -> None:
        check_size(self.size)
        controllers_for(self.game_mode)
        if self.ai_difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {self.ai_difficulty!r}")
        if self.ai_delay < 0:
            raise ValueError("ai_delay must be >= 0")
        if self.replay_interval <= 0:
            raise ValueError("replay_interval must be > 0")
        self.data_dir = Path(self.data_dir)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "Settings":
        env = os.environ if environ is None else environ
        values: dict = {}

        def _get(name: str, key: str, conv) -> None:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return
            try:
                values[key] = conv(raw.strip())
            except ValueError as e:
                raise ValueError(f"Invalid {name}={raw!r}: {e}") from e

        _get("XO_SIZE", "size", int)
        _get("XO_MODE", "game_mode", str)
        _get("XO_DIFFICULTY", "ai_difficulty", str.lower)
        _get("XO_AI_DELAY", "ai_delay", float)
        _get("XO_REPLAY_INTERVAL", "replay_interval", float)
        _get("XO_SEED", "seed", int)
        _get("XO_DATA_DIR", "data_dir", Path)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
