"""
Legal move generator for Blokus game.
"""

import os
import time
import logging
from dataclasses import dataclass
from typing import Iterator, List, Set

import numpy as np

from .board import Board, Color, START_CORNERS
from .geometry import Cell, Shape, absolute_cells, bounds, canonicalize
from .pieces import orientations_of
from .rules import is_legal_placement

logger = logging.getLogger(__name__)

# Debug flag for move generation timing (controlled via environment variable)
MOVEGEN_DEBUG = bool(os.getenv("BLOKUS_MOVEGEN_DEBUG", ""))

# Frontier-anchored generation is the default; set to "0" to force the full-board scan
USE_FRONTIER_MOVEGEN = os.getenv("BLOKUS_USE_FRONTIER_MOVEGEN", "1") != "0"


@dataclass(frozen=True)
class Move:
    """A legal placement: one orientation of a piece at a board origin."""
    shape: Shape
    origin: Cell

    @property
    def canonical(self) -> Shape:
        return canonicalize(self.shape)

    @property
    def size(self) -> int:
        return len(self.shape)

    def cells(self) -> List[Cell]:
        """Board cells this move would occupy."""
        return absolute_cells(self.shape, self.origin)

    def __str__(self):
        return f"Move(cells={len(self.shape)}, origin={self.origin}, shape={self.shape})"


def _distinct(shapes: List[Shape]) -> List[Shape]:
    """Inventory is a multiset; search each canonical shape once."""
    seen = set()
    distinct = []
    for shape in shapes:
        if shape not in seen:
            seen.add(shape)
            distinct.append(shape)
    return distinct


class LegalMoveGenerator:
    """Generates all legal moves for a given board snapshot and color."""

    def get_legal_moves(self, board: Board, color: Color) -> List[Move]:
        """
        Get all legal moves for a color on the current board.

        This is a thin wrapper that delegates to either the frontier-based or
        the naive generator based on the USE_FRONTIER_MOVEGEN flag. Both
        produce the same set of moves.

        Args:
            board: Current board snapshot
            color: Color to generate moves for

        Returns:
            List of legal moves
        """
        if USE_FRONTIER_MOVEGEN:
            return self._get_legal_moves_frontier(board, color)
        return self._get_legal_moves_naive(board, color)

    def _get_legal_moves_naive(self, board: Board, color: Color) -> List[Move]:
        """
        Get all legal moves with a full-board scan.

        Every distinct inventory shape, in every orientation, is tried at
        every origin that keeps it on the board. This is the reference
        implementation the frontier generator is checked against.
        """
        start = time.perf_counter()
        moves = list(self._iter_naive(board, color))
        self._log_timing("naive", color, moves, start)
        return moves

    def _iter_naive(self, board: Board, color: Color) -> Iterator[Move]:
        grid = board.grid.tolist()
        size = board.SIZE
        first_placed = board.first_placed[color]
        start_corner = START_CORNERS[color]

        for canonical in _distinct(board.inventories.get(color, [])):
            for orientation in orientations_of(canonical):
                _, max_x, _, max_y = bounds(orientation)
                for y in range(size - max_y):
                    for x in range(size - max_x):
                        if is_legal_placement(orientation, (x, y), color.value, grid,
                                              first_placed, start_corner):
                            yield Move(orientation, (x, y))

    def _get_legal_moves_frontier(self, board: Board, color: Color) -> List[Move]:
        """
        Get all legal moves using frontier anchoring.

        Every legal piece covers at least one frontier cell (the start corner
        for a first move, otherwise an empty cell diagonal to the color's
        pieces), so only origins that put some cell of the piece on a frontier
        cell need to be checked.
        """
        start = time.perf_counter()
        moves = list(self._iter_frontier(board, color))
        self._log_timing("frontier", color, moves, start)
        return moves

    def _iter_frontier(self, board: Board, color: Color) -> Iterator[Move]:
        frontier = sorted(self.get_frontier(board, color))
        if not frontier:
            return

        grid = board.grid.tolist()
        first_placed = board.first_placed[color]
        start_corner = START_CORNERS[color]

        for canonical in _distinct(board.inventories.get(color, [])):
            for orientation in orientations_of(canonical):
                tried: Set[Cell] = set()
                for fx, fy in frontier:
                    for dx, dy in orientation:
                        origin = (fx - dx, fy - dy)
                        if origin in tried:
                            continue
                        tried.add(origin)
                        if is_legal_placement(orientation, origin, color.value, grid,
                                              first_placed, start_corner):
                            yield Move(orientation, origin)

    def get_frontier(self, board: Board, color: Color) -> Set[Cell]:
        """
        Cells a new piece of `color` could anchor on.

        Before the first placement this is the start corner (if still empty).
        Afterwards it is every empty cell that touches the color diagonally
        and does not share an edge with it.
        """
        grid = board.grid
        if not board.first_placed[color]:
            corner = START_CORNERS[color]
            return {corner} if grid[corner[1], corner[0]] == 0 else set()

        own = np.pad(grid == color.value, 1)
        edge = own[:-2, 1:-1] | own[2:, 1:-1] | own[1:-1, :-2] | own[1:-1, 2:]
        diagonal = own[:-2, :-2] | own[:-2, 2:] | own[2:, :-2] | own[2:, 2:]
        candidates = (grid == 0) & diagonal & ~edge
        ys, xs = np.nonzero(candidates)
        return {(int(x), int(y)) for x, y in zip(xs, ys)}

    def is_move_legal(self, board: Board, color: Color, move: Move) -> bool:
        """
        Check if a specific move is legal.

        The piece must still be in the color's inventory and the placement
        must pass the rule engine.
        """
        if move.canonical not in board.inventories.get(color, []):
            return False
        return board.can_place(move.shape, move.origin, color)

    def has_legal_moves(self, board: Board, color: Color) -> bool:
        """
        Check if a color has any legal move.

        Stops at the first legal placement found.
        """
        iterator = self._iter_frontier if USE_FRONTIER_MOVEGEN else self._iter_naive
        for _ in iterator(board, color):
            return True
        return False

    def _log_timing(self, mode: str, color: Color, moves: List[Move], start: float) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        # Debug timing hook (only logs at INFO when BLOKUS_MOVEGEN_DEBUG is set)
        if MOVEGEN_DEBUG:
            logger.info(f"MoveGen[{mode}]: color={color.label}, legal_moves={len(moves)}, elapsed_ms={elapsed_ms:.2f}")
        logger.debug(f"Legal move generation [{mode}]: {len(moves)} moves in {elapsed_ms:.2f}ms for color={color.label}")


def enumerate_moves(board: Board, color: Color) -> List[Move]:
    """Module-level convenience wrapper around LegalMoveGenerator.get_legal_moves."""
    return LegalMoveGenerator().get_legal_moves(board, color)
