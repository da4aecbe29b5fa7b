import asyncio
from pathlib import Path

import pytest

from xogame.config import Settings
from xogame.errors import InvalidSizeError
from xogame.paths import data_dir, repo_root
from xogame.scheduler import AsyncioScheduler, ManualScheduler


def test_manual_scheduler_orders_and_cancels():
    sched = ManualScheduler()
    calls = []
    sched.call_later(2.0, lambda: calls.append("b"))
    h = sched.call_later(1.0, lambda: calls.append("x"))
    sched.call_later(1.0, lambda: calls.append("a"))
    h.cancel()
    assert sched.pending == 2
    assert sched.advance(1.5) == 1
    assert calls == ["a"]
    assert sched.now == 1.5
    sched.advance(1.0)
    assert calls == ["a", "b"]
    with pytest.raises(ValueError):
        sched.call_later(-1, lambda: None)


def test_manual_scheduler_callbacks_can_reschedule():
    sched = ManualScheduler()
    ticks = []

    def tick():
        ticks.append(sched.now)
        if len(ticks) < 3:
            sched.call_later(1.0, tick)

    sched.call_later(1.0, tick)
    assert sched.run_all() == 3
    assert ticks == [1.0, 2.0, 3.0]


def test_asyncio_scheduler_fires_and_cancels():
    loop = asyncio.new_event_loop()
    try:
        sched = AsyncioScheduler(loop)
        calls = []
        sched.call_later(0.01, lambda: calls.append(1))
        h = sched.call_later(0.01, lambda: calls.append(2))
        h.cancel()
        loop.run_until_complete(asyncio.sleep(0.05))
        assert calls == [1]
    finally:
        loop.close()


def test_settings_from_env():
    env = {
        "XO_SIZE": "5",
        "XO_MODE": "ai-vs-ai",
        "XO_DIFFICULTY": "Hard",
        "XO_AI_DELAY": "0",
        "XO_REPLAY_INTERVAL": "0.25",
        "XO_SEED": "9",
        "XO_DATA_DIR": "/tmp/xo-data",
    }
    s = Settings.from_env(env)
    assert (s.size, s.game_mode, s.ai_difficulty) == (5, "ai-vs-ai", "hard")
    assert s.ai_delay == 0.0 and s.replay_interval == 0.25 and s.seed == 9
    assert s.data_dir == Path("/tmp/xo-data")
    assert Settings.from_env(env, size=4, seed=None).size == 4
    assert Settings.from_env(env, seed=None).seed == 9


@pytest.mark.parametrize("env, exc", [
    ({"XO_SIZE": "12"}, InvalidSizeError),
    ({"XO_SIZE": "three"}, ValueError),
    ({"XO_MODE": "solo"}, ValueError),
    ({"XO_DIFFICULTY": "expert"}, ValueError),
    ({"XO_AI_DELAY": "-1"}, ValueError),
    ({"XO_REPLAY_INTERVAL": "0"}, ValueError),
])
def test_settings_invalid(env, exc):
    with pytest.raises(exc):
        Settings.from_env(env)


def test_data_dir_prefers_cwd_when_no_git_and_no_env(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("XO_REPO_ROOT", raising=False)
    monkeypatch.delenv("XO_DATA_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    import xogame.paths as P

    monkeypatch.setattr(P, "_find_git_root", lambda start: None)
    assert repo_root() == tmp_path
    assert data_dir() == tmp_path / "data"


def test_data_dir_env_override(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("XO_DATA_DIR", str(tmp_path / "hist"))
    assert data_dir() == tmp_path / "hist"
    assert Settings().data_dir == tmp_path / "hist"


def test_repo_root_env_and_git_lookup(tmp_path: Path, monkeypatch):
    import xogame.paths as P

    monkeypatch.delenv("XO_DATA_DIR", raising=False)
    monkeypatch.setenv("XO_REPO_ROOT", str(tmp_path))
    assert data_dir() == tmp_path / "data"

    (tmp_path / ".git").mkdir()
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert P._find_git_root(nested) == tmp_path
    assert P._find_git_root(tmp_path / "a" / "b" / "c" / "d" / "e") is None
