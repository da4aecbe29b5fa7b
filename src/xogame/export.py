"""
History export helpers.

- JSON: the same wire shape the store persists, for download and re-import.
- Table: one summary row per snapshot (the history panel view), written as
  CSV, or Parquet when pandas + pyarrow are installed.
"""
from __future__ import annotations

import csv
import importlib.util
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .game_basics import get_piece_counts, serialize_board
from .history import HistorySnapshot, dumps_history

EXPORT_FILENAME = "gameHistory.json"
TABLE_FIELDS = [
    "index",
    "result",
    "timestamp",
    "game_mode",
    "ai_difficulty",
    "size",
    "x_pieces",
    "o_pieces",
    "next_player",
    "board",
]


def write_history_json(history: Iterable[HistorySnapshot], path: Path) -> Path:
    path = Path(path)
    if path.is_dir():
        path = path / EXPORT_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_history(history, indent=2), encoding="utf-8")
    logging.info("Wrote history JSON: %s", path)
    return path


def snapshot_result(snapshot: HistorySnapshot) -> str:
    if snapshot.winner is not None:
        return snapshot.winner
    x, o = get_piece_counts(snapshot.board)
    if x + o == snapshot.size * snapshot.size:
        return "draw"
    return "in_progress"


def history_rows(history: Iterable[HistorySnapshot]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for i, snap in enumerate(history, start=1):
        x, o = get_piece_counts(snap.board)
        rows.append({
            "index": i,
            "result": snapshot_result(snap),
            "timestamp": snap.timestamp,
            "game_mode": snap.game_mode,
            "ai_difficulty": snap.ai_difficulty,
            "size": snap.size,
            "x_pieces": x,
            "o_pieces": o,
            "next_player": "X" if snap.is_x_next else "O",
            "board": serialize_board(snap.board),
        })
    return rows


def write_history_table(history: Iterable[HistorySnapshot], out: Path, format: str = "csv") -> Dict[str, Path]:
    fmt = (format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {format}")
    out = Path(out)
    out.mkdir(parents=True, exist_ok=True)
    rows = history_rows(history)
    written: Dict[str, Path] = {}

    have_parquet = (
        importlib.util.find_spec("pandas") is not None
        and importlib.util.find_spec("pyarrow") is not None
    )
    if fmt == "parquet" and not have_parquet:
        # nothing written yet
        raise RuntimeError(
            "Parquet dependencies not available (install pandas and pyarrow). "
            "Use pip install .[parquet] to enable parquet support."
        )

    if fmt in {"csv", "both"}:
        csv_path = out / "game_history.csv"
        with csv_path.open("w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=TABLE_FIELDS)
            w.writeheader()
            for r in rows:
                w.writerow(r)
        written["csv"] = csv_path
        logging.info("Wrote CSV: %s (%d rows)", csv_path, len(rows))

    if fmt in {"parquet", "both"}:
        if have_parquet:
            import pandas as pd  # type: ignore

            pq_path = out / "game_history.parquet"
            pd.DataFrame(rows, columns=TABLE_FIELDS).to_parquet(pq_path)
            written["parquet"] = pq_path
            logging.info("Wrote Parquet: %s", pq_path)
        else:
            logging.warning(
                "Parquet dependencies not available (install pandas and pyarrow). Proceeding with CSV only."
            )
    return written
