"""
Strategy protocol shared by every Blokus player controller.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from blokus_engine.board import Board, Color
from blokus_engine.move_generator import Move


class StrategyProtocol(Protocol):
    """
    Minimal contract for a player controller.

    `select_move` reads a board snapshot (grid, inventories, first-move and
    forfeit flags) and returns the move to play, or None when the color has
    no legal move or is controlled by a human.
    """

    is_human: bool

    def select_move(self, color: Color, board: Board) -> Optional[Move]:
        ...

    def get_action_info(self) -> Dict[str, Any]:
        ...


class HumanAgent:
    """Placeholder for a locally controlled color; never chooses a move."""

    is_human = True

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed

    def select_move(self, color: Color, board: Board) -> Optional[Move]:
        return None

    def get_action_info(self) -> Dict[str, Any]:
        return {
            "name": "HumanAgent",
            "type": "human",
            "description": "Moves are made through the input collaborator",
        }
