"""
Defensive agent for Blokus with strategic preferences.
"""

import math
from typing import Any, Dict, Optional

import numpy as np

from blokus_engine.board import START_CORNERS, Board, Color
from blokus_engine.move_generator import LegalMoveGenerator, Move

from .heuristics import pick_random_top, score_board, simulate


class DefensiveAgent:
    """
    Defensive agent with strategic preferences:
    - Prefer large pieces early
    - Stay close to the starting corner while the position is young
    - Avoid crowding against other colors
    - Avoid the outer edge of the board
    """

    is_human = False

    def __init__(self, seed: Optional[int] = None, top_k: int = 3, jitter: float = 3.0):
        """
        Initialize defensive agent.

        Args:
            seed: Random seed for reproducible behavior
            top_k: Number of best moves to choose among
            jitter: Width of the random noise added to each score, centered on 0
        """
        self.rng = np.random.RandomState(seed)
        self.move_generator = LegalMoveGenerator()
        self.top_k = top_k
        self.jitter = jitter

        # Heuristic weights
        self.piece_size_weight = 3.0
        self.early_distance_weight = 0.6
        self.late_distance_weight = 0.3
        self.early_piece_count = 5
        self.board_score_weight = 0.4
        self.crowding_weight = 0.6
        self.edge_penalty = 1.0

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
        """
        Evaluate a move based on heuristics.

        Args:
            board: Current board snapshot
            color: Color making the move
            move: Move to evaluate

        Returns:
            Heuristic score for the move
        """
        score = 0.0

        # 1. Piece size preference (larger pieces are better)
        score += self.piece_size_weight * move.size

        # 2. Distance from the starting corner, weighted harder early on
        start_x, start_y = START_CORNERS[color]
        distance = math.hypot(move.origin[0] - start_x, move.origin[1] - start_y)
        if board.pieces_placed[color] < self.early_piece_count:
            score -= self.early_distance_weight * distance
        else:
            score -= self.late_distance_weight * distance

        # 3. Resulting board position
        child = simulate(board, move, color)
        score += self.board_score_weight * score_board(child.grid, color)

        # 4. Crowding: other colors around the piece
        score -= self.crowding_weight * self._count_crowding(board, color, move)

        # 5. Edge avoidance
        if self._touches_edge(board, move):
            score -= self.edge_penalty

        score += (self.rng.random_sample() - 0.5) * self.jitter
        return score

    def _count_crowding(self, board: Board, color: Color, move: Move) -> int:
        """Number of cells around the piece occupied by other colors."""
        cells = set(move.cells())
        neighbours = set()
        for x, y in cells:
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    neighbour = (x + dx, y + dy)
                    if neighbour not in cells:
                        neighbours.add(neighbour)

        crowded = 0
        for cell in neighbours:
            occupant = board.color_at(cell)
            if occupant is not None and occupant != color:
                crowded += 1
        return crowded

    def _touches_edge(self, board: Board, move: Move) -> bool:
        last = board.SIZE - 1
        return any(x in (0, last) or y in (0, last) for x, y in move.cells())

    def get_action_info(self) -> Dict[str, Any]:
        """Get information about the agent."""
        return {
            "name": "DefensiveAgent",
            "type": "defensive",
            "description": "Large pieces near home, away from opponents and edges, with random variety",
            "weights": {
                "piece_size": self.piece_size_weight,
                "early_distance": self.early_distance_weight,
                "late_distance": self.late_distance_weight,
                "board_score": self.board_score_weight,
                "crowding": self.crowding_weight,
                "edge_penalty": self.edge_penalty,
            },
        }

    def set_seed(self, seed: int):
        """Set random seed for reproducible behavior."""
        self.rng = np.random.RandomState(seed)

    def set_weights(self, weights: Dict[str, float]):
        """
        Set heuristic weights.

        Args:
            weights: Dictionary of weight names and values
        """
        if "piece_size" in weights:
            self.piece_size_weight = weights["piece_size"]
        if "early_distance" in weights:
            self.early_distance_weight = weights["early_distance"]
        if "late_distance" in weights:
            self.late_distance_weight = weights["late_distance"]
        if "board_score" in weights:
            self.board_score_weight = weights["board_score"]
        if "crowding" in weights:
            self.crowding_weight = weights["crowding"]
        if "edge_penalty" in weights:
            self.edge_penalty = weights["edge_penalty"]
