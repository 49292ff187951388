"""
Minimax agent for Blokus with alpha-beta pruning and a shallow look-ahead.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from blokus_engine.board import Board, Color
from blokus_engine.move_generator import LegalMoveGenerator, Move

from .heuristics import active_opponents, pick_random_top, score_board, simulate

logger = logging.getLogger(__name__)


class MinimaxAgent:
    """
    Paranoid minimax: after our move, the opponents reply with whichever move,
    by any active opponent, hurts our board score most.

    Plies alternate between our moves and the pooled replies of every active
    opponent. Each ply only expands the `beam_width` most promising moves per
    color (ordered by the immediate board score) to keep the search bounded.
    """

    is_human = False

    def __init__(self, seed: Optional[int] = None, depth: int = 2, beam_width: int = 8,
                 top_k: int = 2, jitter: float = 0.4):
        """
        Initialize minimax agent.

        Args:
            seed: Random seed for reproducible behavior
            depth: Plies searched, counting our own move
            beam_width: Moves expanded per color and ply
            top_k: Number of best root moves to choose among
            jitter: Upper bound of the random bonus added to each root score
        """
        if depth < 1:
            raise ValueError(f"depth must be at least 1, got {depth}")
        self.rng = np.random.RandomState(seed)
        self.move_generator = LegalMoveGenerator()
        self.depth = depth
        self.beam_width = beam_width
        self.top_k = top_k
        self.jitter = jitter
        self.nodes_searched = 0

    def select_move(self, color: Color, board: Board) -> Optional[Move]:
        """
        Select a move for `color`.

        Returns:
            Selected move, or None if no legal moves are available
        """
        legal_moves = self.move_generator.get_legal_moves(board, color)
        if not legal_moves:
            return None

        scored = self._score_root(board, color, legal_moves)
        logger.debug(f"Minimax[{color.label}]: {len(legal_moves)} root moves, "
                     f"{len(scored)} contenders, {self.nodes_searched} nodes")
        return pick_random_top(scored, self.top_k, self.rng)

    def _score_root(self, board: Board, color: Color, legal_moves: List[Move]) -> List[Tuple[float, Move]]:
        """
        Jittered scores of the root moves that can still make the top k.

        Once `top_k` exact values are known, each further move is searched
        with alpha set to the k-th best value minus the jitter. A move that
        fails low there cannot reach the top k even with the largest jitter
        and is dropped.
        """
        self.nodes_searched = 0
        exact: List[float] = []
        scored = []
        for move, child in self._expand(board, color, [(color, legal_moves)], maximizing=True):
            alpha = -math.inf
            if len(exact) >= self.top_k:
                alpha = sorted(exact, reverse=True)[self.top_k - 1] - self.jitter
            value = self._search(child, color, False, self.depth - 1, alpha, math.inf)
            if value <= alpha:
                continue
            exact.append(value)
            scored.append((value + self.rng.random_sample() * self.jitter, move))
        return scored

    def _search(self, board: Board, root: Color, maximizing: bool, depth: int,
                alpha: float, beta: float) -> float:
        self.nodes_searched += 1
        if depth <= 0:
            return score_board(board.grid, root)

        movers = [root] if maximizing else active_opponents(board, root)
        replies = []
        for mover in movers:
            moves = self.move_generator.get_legal_moves(board, mover)
            if moves:
                replies.append((mover, moves))
        if not replies:
            # Side to move passes; the ply is still consumed so the search terminates
            return self._search(board, root, not maximizing, depth - 1, alpha, beta)

        if maximizing:
            value = -math.inf
            for _, child in self._expand(board, root, replies, maximizing=True):
                value = max(value, self._search(child, root, False, depth - 1, alpha, beta))
                alpha = max(alpha, value)
                if alpha >= beta:
                    break
            return value

        value = math.inf
        for _, child in self._expand(board, root, replies, maximizing=False):
            value = min(value, self._search(child, root, True, depth - 1, alpha, beta))
            beta = min(beta, value)
            if alpha >= beta:
                break
        return value

    def _expand(self, board: Board, root: Color, replies: List[Tuple[Color, List[Move]]],
                maximizing: bool) -> List[Tuple[Move, Board]]:
        """
        Children of `board`, best-first for the side to move.

        Each mover's moves are cut to the beam width before the movers'
        children are pooled.
        """
        children = []
        for mover, moves in replies:
            ranked = []
            for move in moves:
                child = simulate(board, move, mover)
                ranked.append((score_board(child.grid, root), move, child))
            ranked.sort(key=lambda item: item[0], reverse=maximizing)
            children.extend(ranked[:self.beam_width])
        children.sort(key=lambda item: item[0], reverse=maximizing)
        return [(move, child) for _, move, child in children]

    def get_action_info(self) -> Dict[str, Any]:
        """Get information about the agent."""
        return {
            "name": "MinimaxAgent",
            "type": "minimax",
            "description": "Alpha-beta minimax against all opponents over a beam of moves, "
                           "random among the top root moves",
            "weights": {
                "depth": self.depth,
                "beam_width": self.beam_width,
                "top_k": self.top_k,
                "jitter": self.jitter,
            },
        }

    def set_seed(self, seed: int):
        """Set random seed for reproducible behavior."""
        self.rng = np.random.RandomState(seed)
