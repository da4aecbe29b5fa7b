import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from xogame.cli import main

SRC = Path(__file__).resolve().parent.parent / "src"


def _run_cli(args: list[str], cwd: Path, stdin: str = "") -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(SRC), env.get("PYTHONPATH", "")])
    env["XO_DATA_DIR"] = str(cwd / "data")
    exe = [sys.executable, "-m", "xogame.cli"]
    return subprocess.run(exe + args, cwd=cwd, capture_output=True, text=True, input=stdin, env=env)


def test_cli_ai_scenarios(tmp_path: Path):
    r = _run_cli(["ai", "--board", ".../.../..."], cwd=tmp_path)
    assert r.returncode == 0
    assert r.stdout.strip() == "1 1"
    r = _run_cli(["ai", "--board", "XX./OO./...", "--player", "O"], cwd=tmp_path)
    assert r.stdout.strip() == "1 2"
    r = _run_cli(["ai", "--board", "X../.O./...", "--player", "X"], cwd=tmp_path)
    assert r.stdout.strip() == "0 2"
    assert "wins=" in r.stderr and "forks=" in r.stderr


@pytest.mark.parametrize("bad", ["abc", "XX/OO", "X../.O./..", "..Q/.../..."])
def test_cli_ai_rejects_bad_boards(tmp_path: Path, bad: str):
    r = _run_cli(["ai", "--board", bad], cwd=tmp_path)
    assert r.returncode == 2


def test_cli_play_history_replay(tmp_path: Path):
    r = _run_cli(["play", "--mode", "human-vs-human"], cwd=tmp_path, stdin="0 0\n1 1\n0 1\n9 9\nq\n")
    assert r.returncode == 0
    assert "Move not allowed" in r.stderr
    stored = json.loads((tmp_path / "data" / "gameHistory.json").read_text())
    assert len(stored) == 3

    r = _run_cli(["history", "show"], cwd=tmp_path)
    assert r.returncode == 0
    assert r.stdout.count("#") == 3

    out = tmp_path / "export.json"
    r = _run_cli(["history", "export", "--out", str(out)], cwd=tmp_path)
    assert r.returncode == 0
    assert json.loads(out.read_text()) == stored

    r = _run_cli(["replay", "--interval", "0.01", "--no-wait"], cwd=tmp_path)
    assert r.returncode == 0
    assert "Replaying: 3/3" in r.stdout

    r = _run_cli(["history", "clear"], cwd=tmp_path)
    assert r.returncode == 0
    r = _run_cli(["replay", "--no-wait"], cwd=tmp_path)
    assert r.returncode == 2
    assert "No history to replay" in r.stderr

    r = _run_cli(["history", "import", str(out)], cwd=tmp_path)
    assert r.returncode == 0
    assert len(json.loads((tmp_path / "data" / "gameHistory.json").read_text())) == 3


def test_cli_play_rejects_bad_size(tmp_path: Path):
    r = _run_cli(["play", "--size", "11"], cwd=tmp_path, stdin="q\n")
    assert r.returncode == 2
    assert "Board size" in r.stderr


def test_cli_import_bad_file_keeps_history(tmp_path: Path):
    _run_cli(["play"], cwd=tmp_path, stdin="1 1\nq\n")
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([{"isXNext": True, "timestamp": "2024-01-01T00:00:00Z"}]))
    r = _run_cli(["history", "import", str(bad)], cwd=tmp_path)
    assert r.returncode == 2
    assert "missing 'board'" in r.stderr
    assert len(json.loads((tmp_path / "data" / "gameHistory.json").read_text())) == 1


def test_cli_ai_vs_ai_game_finishes(tmp_path: Path):
    r = _run_cli(
        ["--seed", "3", "play", "--mode", "ai-vs-ai", "--difficulty", "hard", "--ai-delay", "0"],
        cwd=tmp_path,
        stdin="q\n",
    )
    assert r.returncode == 0
    assert "Winner" in r.stdout or "Draw" in r.stdout


def test_main_in_process(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("XO_DATA_DIR", str(tmp_path / "d"))
    assert main(["history", "show"]) == 0
    assert "No history." in capsys.readouterr().out
    assert main([]) == 0
    monkeypatch.setenv("XO_SIZE", "11")
    assert main(["history", "show"]) == 2


def test_cli_help_smoke(tmp_path: Path):
    for args in (["--help"], ["play", "--help"], ["ai", "--help"], ["history", "--help"], ["replay", "--help"]):
        r = _run_cli(args, cwd=tmp_path)
        assert r.returncode == 0
        assert r.stdout
