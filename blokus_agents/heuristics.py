"""
Shared scoring helpers for the Blokus strategies.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from blokus_engine.board import TURN_ORDER, Board, Color
from blokus_engine.move_generator import Move

# Weight of each open diagonal corner relative to one owned cell
OPEN_CORNER_WEIGHT = 0.3


def score_board(grid: np.ndarray, color: Color, corner_weight: float = OPEN_CORNER_WEIGHT) -> float:
    """
    Evaluate a grid from one color's point of view.

    Score = owned cells + corner_weight * empty cells that touch the color
    diagonally (places future pieces can grow from).

    Args:
        grid: Occupancy grid indexed as grid[y, x]
        color: Color to evaluate for
        corner_weight: Bonus per open diagonal cell

    Returns:
        Heuristic score
    """
    own = grid == color.value
    padded = np.pad(own, 1)
    diagonal = padded[:-2, :-2] | padded[:-2, 2:] | padded[2:, :-2] | padded[2:, 2:]
    open_corners = np.count_nonzero((grid == 0) & diagonal)
    return float(np.count_nonzero(own)) + corner_weight * float(open_corners)


def simulate(board: Board, move: Move, color: Color) -> Board:
    """Copy of `board` with `move` applied for `color`."""
    child = board.copy()
    child.apply(move.shape, move.origin, color)
    return child


def active_opponents(board: Board, color: Color) -> List[Color]:
    """Colors other than `color` that have not forfeited, in turn order after it."""
    index = TURN_ORDER.index(color)
    opponents = []
    for step in range(1, len(TURN_ORDER)):
        candidate = TURN_ORDER[(index + step) % len(TURN_ORDER)]
        if not board.forfeited.get(candidate, False):
            opponents.append(candidate)
    return opponents


def pick_random_top(scored: Sequence[Tuple[float, Move]], top_k: int,
                    rng: np.random.RandomState) -> Optional[Move]:
    """
    Pick uniformly among the `top_k` highest-scoring moves.

    Args:
        scored: (score, move) pairs
        top_k: How many of the best moves to choose from
        rng: Random state used for the pick

    Returns:
        The chosen move, or None if there are no moves
    """
    if not scored:
        return None
    ranked: List[Tuple[float, Move]] = sorted(scored, key=lambda item: item[0], reverse=True)
    top = ranked[:max(1, min(top_k, len(ranked)))]
    return top[rng.randint(len(top))][1]
