"""
Blokus game engine package.

This package contains the core game logic for Blokus, including:
- Polyomino geometry and canonical shapes
- Piece definitions
- Placement rules
- Board snapshots and the game state machine
- Legal move generation
- Scoring
"""

from .board import BOARD_SIZE, START_CORNERS, TURN_ORDER, Board, Color, PlacedPiece
from .game_state import ActionResult, GameState, InHandPiece, PieceSource, RejectReason
from .move_generator import LegalMoveGenerator, Move, enumerate_moves
from .pieces import PIECE_COUNT, Piece, PieceGenerator
from .rules import PlacementViolation, find_violation, is_legal_placement

__all__ = [
    'BOARD_SIZE', 'START_CORNERS', 'TURN_ORDER', 'Board', 'Color', 'PlacedPiece',
    'ActionResult', 'GameState', 'InHandPiece', 'PieceSource', 'RejectReason',
    'LegalMoveGenerator', 'Move', 'enumerate_moves',
    'PIECE_COUNT', 'Piece', 'PieceGenerator',
    'PlacementViolation', 'find_violation', 'is_legal_placement',
]
