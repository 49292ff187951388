"""
Greedy agent for Blokus: best immediate placement with randomized tie-breaks.
"""

from typing import Any, Dict, Optional

import numpy as np

from blokus_engine.board import Board, Color
from blokus_engine.move_generator import LegalMoveGenerator, Move

from .heuristics import OPEN_CORNER_WEIGHT, pick_random_top, score_board, simulate


class GreedyAgent:
    """
    Greedy agent:
    - Simulates every legal move
    - Scores the resulting board (own cells + open diagonal corners)
    - Picks randomly among the top few moves
    """

    is_human = False

    def __init__(self, seed: Optional[int] = None, top_k: int = 3, jitter: float = 0.4,
                 corner_weight: float = OPEN_CORNER_WEIGHT):
        """
        Initialize greedy agent.

        Args:
            seed: Random seed for reproducible behavior
            top_k: Number of best moves to choose among
            jitter: Upper bound of the random bonus added to each score
            corner_weight: Bonus per open diagonal corner
        """
        self.rng = np.random.RandomState(seed)
        self.move_generator = LegalMoveGenerator()
        self.top_k = top_k
        self.jitter = jitter
        self.corner_weight = corner_weight

    def select_move(self, color: Color, board: Board) -> Optional[Move]:
        """
        Select a move for `color`.

        Returns:
            Selected move, or None if no legal moves are available
        """
        legal_moves = self.move_generator.get_legal_moves(board, color)
        if not legal_moves:
            return None

        scored = [(self._evaluate_move(board, color, move), move) for move in legal_moves]
        return pick_random_top(scored, self.top_k, self.rng)

    def _evaluate_move(self, board: Board, color: Color, move: Move) -> float:
        child = simulate(board, move, color)
        return score_board(child.grid, color, self.corner_weight) + self.rng.random_sample() * self.jitter

    def get_action_info(self) -> Dict[str, Any]:
        """Get information about the agent."""
        return {
            "name": "GreedyAgent",
            "type": "greedy",
            "description": "Best immediate placement by board score, random among the top moves",
            "weights": {
                "top_k": self.top_k,
                "jitter": self.jitter,
                "corner_weight": self.corner_weight,
            },
        }

    def set_seed(self, seed: int):
        """Set random seed for reproducible behavior."""
        self.rng = np.random.RandomState(seed)
