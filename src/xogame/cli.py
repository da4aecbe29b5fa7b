from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

from .config import Settings
from .errors import GameError
from .export import history_rows, write_history_json, write_history_table
from .game_basics import current_player, deserialize_board
from .history import HistoryStore
from .legality import GAME_MODES, controller_of
from .planner import DIFFICULTIES, select_move
from .scheduler import ManualScheduler
from .session import GameSession
from .storage import DirectoryBlobStore
from .tactics import blocking_moves, fork_moves, immediate_winning_moves


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="xo", description="N x N tic-tac-toe with AI opponents and replay")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--seed", type=int, default=None, help="Seed for AI randomness")
    p.add_argument(
        "--data-dir", type=Path, default=None, help="Directory holding the persisted history (default: ./data)"
    )

    p_play = sub.add_parser("play", help="Play in the terminal; enter moves as 'row col'")
    p_play.add_argument("--size", type=int, default=None, help="Board size, 3..10")
    p_play.add_argument("--mode", choices=sorted(GAME_MODES), default=None, help="Who controls X and O")
    p_play.add_argument("--difficulty", choices=DIFFICULTIES, default=None, help="AI difficulty")
    p_play.add_argument("--ai-delay", type=float, default=None, help="Seconds the AI 'thinks' before moving")

    p_ai = sub.add_parser("ai", help="Ask the AI for a move on a board")
    p_ai.add_argument("--board", required=True, help="Rows joined by '/', cells '.', 'X', 'O', e.g. X../.O./...")
    p_ai.add_argument("--player", choices=["X", "O"], default=None, help="Side to move (default: inferred)")
    p_ai.add_argument("--difficulty", choices=DIFFICULTIES, default="hard")

    p_hist = sub.add_parser("history", help="Stored move history")
    g = p_hist.add_subparsers(dest="subcmd")
    g.add_parser("show", help="List stored snapshots")
    p_export = g.add_parser("export", help="Write history to a file")
    p_export.add_argument("--out", type=Path, default=Path("gameHistory.json"), help="Output file or directory")
    p_export.add_argument(
        "--format",
        choices=["json", "csv", "parquet", "both"],
        default="json",
        help="json (re-importable, default) or a summary table: csv, parquet, both",
    )
    p_import = g.add_parser("import", help="Replace stored history with a JSON file")
    p_import.add_argument("path", type=Path)
    g.add_parser("clear", help="Delete all stored history")

    p_replay = sub.add_parser("replay", help="Play back stored history frame by frame")
    p_replay.add_argument("--interval", type=float, default=None, help="Seconds between frames")
    p_replay.add_argument("--no-wait", action="store_true", help="Print frames without sleeping")

    return p


def _open_session(ns: argparse.Namespace, **overrides) -> tuple[GameSession, ManualScheduler]:
    settings = Settings.from_env(data_dir=ns.data_dir, seed=ns.seed, **overrides)
    store = HistoryStore.open(DirectoryBlobStore(settings.data_dir), settings.history_slot)
    scheduler = ManualScheduler()
    return GameSession(store, settings=settings, scheduler=scheduler), scheduler


def _print_state(session: GameSession) -> None:
    print(session.render())
    st = session.status
    if st.winner:
        print(f"Winner: {st.winner} ({_controller_label(session, st.winner)})")
    elif st.is_over:
        print("Draw!")
    else:
        print(f"Turn: {session.current_player}" + (" (AI thinking...)" if session.ai_thinking else ""))


def _controller_label(session: GameSession, player: str) -> str:
    return controller_of(session.game_mode, player)


def _run_ai_turns(session: GameSession, scheduler: ManualScheduler) -> None:
    delay = session.settings.ai_delay
    while session.ai_thinking:
        if delay > 0:
            time.sleep(delay)
        scheduler.advance(delay)
        _print_state(session)


def _cmd_play(ns: argparse.Namespace) -> int:
    session, scheduler = _open_session(
        ns, size=ns.size, game_mode=ns.mode, ai_difficulty=ns.difficulty, ai_delay=ns.ai_delay
    )
    _print_state(session)
    _run_ai_turns(session, scheduler)
    for line in sys.stdin:
        cmd = line.strip().lower()
        if not cmd:
            continue
        if cmd in ("q", "quit", "exit"):
            break
        if cmd in ("n", "new"):
            session.reset()
        else:
            parts = cmd.replace(",", " ").split()
            if len(parts) != 2 or not all(p.lstrip("-").isdigit() for p in parts):
                logging.warning("Enter a move as 'row col', 'new' or 'q'")
                continue
            if not session.click(int(parts[0]), int(parts[1])):
                logging.warning("Move not allowed")
                continue
        _print_state(session)
        _run_ai_turns(session, scheduler)
    return 0


def _cmd_ai(ns: argparse.Namespace) -> int:
    try:
        board = deserialize_board(ns.board)
    except ValueError as e:
        logging.error("Invalid board string: %s", e)
        return 2
    player = ns.player or current_player(board)
    rng = np.random.default_rng(ns.seed)
    move = select_move(board, player, ns.difficulty, rng)
    logging.info(
        "to_move=%s wins=%s blocks=%s forks=%s",
        player,
        immediate_winning_moves(board, player),
        blocking_moves(board, player),
        fork_moves(board, player),
    )
    if move is None:
        print("none")
    else:
        print(f"{move[0]} {move[1]}")
    return 0


def _cmd_history(ns: argparse.Namespace) -> int:
    session, _ = _open_session(ns)
    history = session.history
    if ns.subcmd == "show":
        if len(history) == 0:
            print("No history.")
            return 0
        for row in history_rows(history):
            result = {"draw": "draw", "in_progress": "-"}.get(row["result"], f"winner {row['result']}")
            mode = row["game_mode"]
            diff = f" | AI {row['ai_difficulty']}" if "ai" in mode else ""
            print(f"#{row['index']} {result} {row['timestamp']} | {mode}{diff} | {row['size']}x{row['size']}")
        return 0
    if ns.subcmd == "export":
        if ns.format == "json":
            path = write_history_json(history, ns.out)
            print(path)
        else:
            out = ns.out if ns.out.suffix == "" else ns.out.parent
            for path in write_history_table(history, out, format=ns.format).values():
                print(path)
        return 0
    if ns.subcmd == "import":
        try:
            text = ns.path.read_text(encoding="utf-8")
        except OSError as e:
            logging.error("Cannot read %s: %s", ns.path, e)
            return 2
        log = session.import_history(text)
        logging.info("Imported %d entries", len(log))
        return 0
    if ns.subcmd == "clear":
        session.clear_history()
        return 0
    logging.error("Choose one of: show, export, import, clear")
    return 2


def _cmd_replay(ns: argparse.Namespace) -> int:
    session, scheduler = _open_session(ns, replay_interval=ns.interval)
    session.start_replay()
    interval = session.replay.interval
    while session.is_replaying:
        if not ns.no_wait:
            time.sleep(interval)
        scheduler.advance(interval)
        if session.is_replaying:
            print(f"Replaying: {session.replay.progress}")
            print(session.render())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if getattr(ns, "version", False):
        try:
            from importlib.metadata import version as _ver

            print(_ver("xogame"))
        except Exception:
            print("unknown")
        return 0

    commands = {
        "play": _cmd_play,
        "ai": _cmd_ai,
        "history": _cmd_history,
        "replay": _cmd_replay,
    }
    handler = commands.get(ns.cmd)
    if handler is None:
        parser.print_help()
        return 0
    try:
        return handler(ns)
    except GameError as e:
        logging.error("%s", e)
        return 2
    except ValueError as e:
        logging.error("Invalid configuration: %s", e)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
