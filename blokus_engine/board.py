"""
Blokus board snapshot: the 20x20 occupancy grid plus per-color inventory and
first-move flags.

The grid is never the source of truth. `GameState` owns the list of placed
pieces and rebuilds a `Board` from it whenever rules, move generation or the
AI need an occupancy view.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from .geometry import Cell, Shape, absolute_cells, canonicalize
from .rules import find_violation, is_legal_placement, PlacementViolation

BOARD_SIZE = 20


class Color(Enum):
    """Player colors, declared in turn order."""
    BLUE = 1
    YELLOW = 2
    RED = 3
    GREEN = 4

    @property
    def label(self) -> str:
        return self.name.lower()


TURN_ORDER: Tuple[Color, ...] = (Color.BLUE, Color.YELLOW, Color.RED, Color.GREEN)

START_CORNERS: Dict[Color, Cell] = {
    Color.RED: (0, 0),
    Color.YELLOW: (BOARD_SIZE - 1, 0),
    Color.GREEN: (0, BOARD_SIZE - 1),
    Color.BLUE: (BOARD_SIZE - 1, BOARD_SIZE - 1),
}

_CANONICAL_CACHE: Dict[Shape, Shape] = {}


def inventory_key(shape: Iterable[Cell]) -> Shape:
    """Canonical form under which a shape is held in an inventory."""
    key = tuple(tuple(cell) for cell in shape)
    canonical = _CANONICAL_CACHE.get(key)
    if canonical is None:
        canonical = canonicalize(key)
        _CANONICAL_CACHE[key] = canonical
    return canonical


@dataclass
class PlacedPiece:
    """A piece on the board, in the orientation it was placed."""
    shape: Shape
    origin: Cell
    color: Color
    asset: Optional[Any] = None  # opaque render handle, never inspected

    def cells(self) -> List[Cell]:
        return absolute_cells(self.shape, self.origin)

    def covers(self, cell: Cell) -> bool:
        return cell in self.cells()

    @property
    def canonical(self) -> Shape:
        return canonicalize(self.shape)


@dataclass
class Board:
    """
    Occupancy snapshot used by the rule engine, move generator and AI.

    - grid[y, x] == 0 means empty
    - grid[y, x] == color.value means that color occupies the cell
    """
    grid: np.ndarray = field(default_factory=lambda: np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8))
    inventories: Dict[Color, List[Shape]] = field(default_factory=dict)
    first_placed: Dict[Color, bool] = field(default_factory=lambda: {color: False for color in Color})
    pieces_placed: Dict[Color, int] = field(default_factory=lambda: {color: 0 for color in Color})
    forfeited: Dict[Color, bool] = field(default_factory=lambda: {color: False for color in Color})

    SIZE = BOARD_SIZE

    @classmethod
    def from_pieces(cls, placed_pieces: Iterable[PlacedPiece],
                    inventories: Optional[Dict[Color, List[Shape]]] = None,
                    forfeited: Optional[Dict[Color, bool]] = None) -> 'Board':
        """
        Build a snapshot from placed pieces.

        First-move flags are derived from which colors have pieces down, so
        the grid and the flags cannot disagree.
        Inventory entries may be in any orientation; they are stored
        canonically.
        """
        board = cls()
        for piece in placed_pieces:
            for x, y in piece.cells():
                board.grid[y, x] = piece.color.value
            board.pieces_placed[piece.color] += 1
            board.first_placed[piece.color] = True
        if inventories is not None:
            board.inventories = {color: [inventory_key(shape) for shape in shapes]
                                for color, shapes in inventories.items()}
        if forfeited is not None:
            board.forfeited = dict(forfeited)
        return board

    def is_valid_position(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.SIZE and 0 <= y < self.SIZE

    def color_at(self, cell: Cell) -> Optional[Color]:
        """Color occupying a cell, or None if empty or off-board."""
        if not self.is_valid_position(cell):
            return None
        value = int(self.grid[cell[1], cell[0]])
        return Color(value) if value else None

    def is_empty(self, cell: Cell) -> bool:
        return self.is_valid_position(cell) and self.grid[cell[1], cell[0]] == 0

    def start_corner(self, color: Color) -> Cell:
        return START_CORNERS[color]

    def can_place(self, shape: Shape, origin: Cell, color: Color) -> bool:
        """Check a placement for `color` against this snapshot."""
        return is_legal_placement(shape, origin, color.value, self.grid,
                                  self.first_placed[color], START_CORNERS[color])

    def violation(self, shape: Shape, origin: Cell, color: Color) -> Optional[PlacementViolation]:
        """First rule a placement breaks, or None if it is legal."""
        return find_violation(shape, origin, color.value, self.grid,
                              self.first_placed[color], START_CORNERS[color])

    def apply(self, shape: Shape, origin: Cell, color: Color) -> None:
        """
        Write a placement into this snapshot.

        Used for AI look-ahead on copies; no legality check is made here.
        """
        for x, y in absolute_cells(shape, origin):
            self.grid[y, x] = color.value
        inventory = self.inventories.get(color)
        if inventory is not None:
            canonical = canonicalize(shape)
            if canonical in inventory:
                inventory.remove(canonical)
        self.first_placed[color] = True
        self.pieces_placed[color] += 1

    def copy(self) -> 'Board':
        """Create a deep copy of the snapshot."""
        return Board(
            grid=self.grid.copy(),
            inventories={color: list(shapes) for color, shapes in self.inventories.items()},
            first_placed=dict(self.first_placed),
            pieces_placed=dict(self.pieces_placed),
            forfeited=dict(self.forfeited),
        )

    def count_cells(self, color: Color) -> int:
        return int(np.count_nonzero(self.grid == color.value))

    def to_rows(self) -> List[List[Optional[str]]]:
        """Grid as nested lists of color labels (None for empty)."""
        labels = {color.value: color.label for color in Color}
        return [[labels.get(int(value)) for value in row] for row in self.grid]

    def __str__(self) -> str:
        """String representation of the board."""
        result = []
        for row in self.grid:
            result.append("".join("." if value == 0 else str(value) for value in row))
        return "\n".join(result)
