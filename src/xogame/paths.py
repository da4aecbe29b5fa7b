"""Where the saved game history lives.

XO_DATA_DIR wins outright; otherwise history goes to ``data/`` under the
project root (XO_REPO_ROOT, then the enclosing git checkout, then CWD).
"""

from __future__ import annotations

import os
from pathlib import Path

_GIT_SEARCH_DEPTH = 5


def _find_git_root(start: Path) -> Path | None:
    for cur in [start, *start.parents][:_GIT_SEARCH_DEPTH]:
        if (cur / ".git").exists():
            return cur
    return None


def repo_root() -> Path:
    env = os.getenv("XO_REPO_ROOT")
    if env:
        return Path(env)
    return _find_git_root(Path(__file__).resolve()) or Path.cwd()


def data_dir() -> Path:
    """Directory holding ``gameHistory.json``; not created here."""
    env = os.getenv("XO_DATA_DIR")
    return Path(env) if env else repo_root() / "data"
