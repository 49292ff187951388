"""
Blokus piece definitions: the 21 polyominoes every color starts with.
"""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from .geometry import Shape, all_orientations, canonicalize, normalize


@dataclass
class Piece:
    """Represents a Blokus piece."""
    id: int
    name: str
    shape: np.ndarray  # 2D array, rows are y and columns are x
    size: int  # Number of squares in the piece

    def __post_init__(self):
        """Validate piece after initialization."""
        if self.shape.ndim != 2:
            raise ValueError("Piece shape must be 2D")
        if np.sum(self.shape) != self.size:
            raise ValueError("Piece shape sum must equal size")

    @property
    def offsets(self) -> Shape:
        """Normalized (x, y) offsets of the piece as drawn."""
        return shape_to_offsets(self.shape)

    @property
    def canonical(self) -> Shape:
        """Orientation-independent identity of the piece."""
        return canonicalize(self.offsets)


def shape_to_offsets(shape: np.ndarray) -> Shape:
    """
    Convert a numpy shape array to normalized (x, y) offsets.

    Args:
        shape: 2D numpy array with 1s where cells are occupied

    Returns:
        Sorted tuple of (x, y) offsets, x being the column index
    """
    rows, cols = np.nonzero(shape)
    return normalize(zip(cols.tolist(), rows.tolist()))


class PieceGenerator:
    """Builds the standard Blokus piece set."""

    @staticmethod
    def get_all_pieces() -> List[Piece]:
        """Get all 21 Blokus pieces."""
        pieces = []

        pieces.append(Piece(1, "Monomino", np.array([[1]]), 1))
        pieces.append(Piece(2, "Domino", np.array([[1, 1]]), 2))
        pieces.append(Piece(3, "Tromino I", np.array([[1, 1, 1]]), 3))
        pieces.append(Piece(4, "Tromino L", np.array([[1, 0], [1, 1]]), 3))
        pieces.append(Piece(5, "Tetromino I", np.array([[1, 1, 1, 1]]), 4))
        pieces.append(Piece(6, "Tetromino O", np.array([[1, 1], [1, 1]]), 4))
        pieces.append(Piece(7, "Tetromino T", np.array([[1, 1, 1], [0, 1, 0]]), 4))
        pieces.append(Piece(8, "Tetromino L", np.array([[1, 0], [1, 0], [1, 1]]), 4))
        # S and Z tetrominoes are mirror images, so the set carries only one
        pieces.append(Piece(9, "Tetromino S", np.array([[0, 1, 1], [1, 1, 0]]), 4))
        pieces.append(Piece(10, "Pentomino F", np.array([[0, 1, 1], [1, 1, 0], [0, 1, 0]]), 5))
        pieces.append(Piece(11, "Pentomino I", np.array([[1, 1, 1, 1, 1]]), 5))
        pieces.append(Piece(12, "Pentomino L", np.array([[1, 0], [1, 0], [1, 0], [1, 1]]), 5))
        pieces.append(Piece(13, "Pentomino N", np.array([[1, 0], [1, 1], [0, 1], [0, 1]]), 5))
        pieces.append(Piece(14, "Pentomino P", np.array([[1, 1], [1, 1], [1, 0]]), 5))
        pieces.append(Piece(15, "Pentomino T", np.array([[1, 1, 1], [0, 1, 0], [0, 1, 0]]), 5))
        pieces.append(Piece(16, "Pentomino U", np.array([[1, 0, 1], [1, 1, 1]]), 5))
        pieces.append(Piece(17, "Pentomino V", np.array([[1, 0, 0], [1, 0, 0], [1, 1, 1]]), 5))
        pieces.append(Piece(18, "Pentomino W", np.array([[1, 0, 0], [1, 1, 0], [0, 1, 1]]), 5))
        pieces.append(Piece(19, "Pentomino X", np.array([[0, 1, 0], [1, 1, 1], [0, 1, 0]]), 5))
        pieces.append(Piece(20, "Pentomino Y", np.array([[1, 0], [1, 1], [1, 0], [1, 0]]), 5))
        pieces.append(Piece(21, "Pentomino Z", np.array([[1, 1, 0], [0, 1, 0], [0, 1, 1]]), 5))

        return pieces


PIECE_COUNT = 21

# Canonical shape of every piece in the starting set, in piece-id order
STARTING_SHAPES: List[Shape] = [piece.canonical for piece in PieceGenerator.get_all_pieces()]

_NAMES_BY_CANONICAL: Dict[Shape, str] = {
    piece.canonical: piece.name for piece in PieceGenerator.get_all_pieces()
}

_ORIENTATION_CACHE: Dict[Shape, List[Shape]] = {}


def starting_inventory() -> List[Shape]:
    """A fresh copy of the full canonical 21-piece set."""
    return list(STARTING_SHAPES)


def piece_name(shape: Shape) -> str:
    """Human-readable name of the piece a shape belongs to."""
    return _NAMES_BY_CANONICAL.get(canonicalize(shape), f"{len(shape)}-cell piece")


def orientations_of(canonical: Shape) -> List[Shape]:
    """
    Distinct orientations of a canonical shape.

    Cached per canonical shape; move generation calls this for every
    inventory entry on every search.
    """
    orientations = _ORIENTATION_CACHE.get(canonical)
    if orientations is None:
        orientations = all_orientations(canonical)
        _ORIENTATION_CACHE[canonical] = orientations
    return orientations
