"""
AI move selection for the three difficulty tiers.

easy   - uniform random empty cell
hard   - greedy one-ply heuristic: opening center, win, block, 3x3 center and
         corners, then random
medium - coin flip per move between easy and hard

This is deliberately not a search: hard misses forks and double threats.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .game_basics import Grid, empty_cells
from .tactics import Move, first_blocking_move, first_winning_move, opening_move, positional_fallback

EASY = "easy"
MEDIUM = "medium"
HARD = "hard"
DIFFICULTIES = (EASY, MEDIUM, HARD)
MEDIUM_RANDOM_RATE = 0.5


def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def random_move(board: Grid, rng: Optional[np.random.Generator] = None) -> Optional[Move]:
    cells = empty_cells(board)
    if not cells:
        return None
    r, c = cells[int(_rng(rng).integers(len(cells)))]
    return (r, c)


def best_move(board: Grid, player: str, rng: Optional[np.random.Generator] = None) -> Optional[Move]:
    mv = opening_move(board)
    if mv is not None:
        return mv
    mv = first_winning_move(board, player)
    if mv is not None:
        logging.debug("planner: %s takes winning cell %s", player, mv)
        return mv
    mv = first_blocking_move(board, player)
    if mv is not None:
        logging.debug("planner: %s blocks at %s", player, mv)
        return mv
    mv = positional_fallback(board)
    if mv is not None:
        return mv
    return random_move(board, rng)


def select_move(
    board: Grid,
    player: str,
    difficulty: str,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Move]:
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"Unknown difficulty: {difficulty!r}")
    if not empty_cells(board):
        return None
    rng = _rng(rng)
    if difficulty == EASY:
        return random_move(board, rng)
    if difficulty == HARD:
        return best_move(board, player, rng)
    if rng.random() < MEDIUM_RANDOM_RATE:
        return random_move(board, rng)
    return best_move(board, player, rng)
