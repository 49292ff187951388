"""
Utility functions for generating test game states.
"""

from typing import Tuple

import numpy as np

from blokus_engine.board import START_CORNERS, TURN_ORDER, Color
from blokus_engine.game_state import GameState

MONOMINO = ((0, 0),)
DOMINO = ((0, 0), (1, 0))


def generate_random_valid_state(num_moves: int, seed: int = 0) -> Tuple[GameState, Color]:
    """
    Generate a random but valid game state by playing random legal moves.

    Moves go through the state machine (pick, place, end turn), so every
    invariant of a real game holds for the result.

    Args:
        num_moves: Number of moves to make
        seed: Random seed for reproducibility

    Returns:
        Tuple of (state, current_color) representing the final state
    """
    rng = np.random.RandomState(seed)
    state = GameState(seed=seed)

    moves_made = 0
    max_attempts = num_moves * 4  # Prevent infinite loops

    for _ in range(max_attempts):
        if moves_made >= num_moves or state.game_over:
            break

        moves = state.legal_moves()
        if not moves:
            if not state.forfeit():
                break
            continue

        move = moves[rng.randint(len(moves))]
        if state.place_move(move) and state.end_turn():
            moves_made += 1

    return state, state.current_color


def play_opening(state: GameState) -> None:
    """Every color places its monomino on its start corner, in turn order."""
    for color in TURN_ORDER:
        assert state.current_color == color
        assert state.pick_from_inventory(MONOMINO)
        assert state.place(MONOMINO, START_CORNERS[color])
        assert state.end_turn()
