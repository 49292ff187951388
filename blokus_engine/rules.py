"""
Placement rule engine.

Rules, checked in this order:
1. Every cell must be on the board.
2. No cell may overlap an occupied cell (any color).
3. No cell may share an edge with a cell of the same color.
4. First piece: must cover the color's start corner.
   Later pieces: must touch a cell of the same color diagonally.

`grid` is anything indexable as grid[y][x] (numpy array or nested lists)
holding 0 for empty cells and the color value otherwise.
"""

from enum import Enum
from typing import Optional, Sequence, Tuple

Cell = Tuple[int, int]

EDGE_NEIGHBORS = ((1, 0), (-1, 0), (0, 1), (0, -1))
CORNER_NEIGHBORS = ((1, 1), (1, -1), (-1, 1), (-1, -1))


class PlacementViolation(str, Enum):
    """Which rule a rejected placement broke."""
    OUT_OF_BOUNDS = "out_of_bounds"
    OVERLAP = "overlap"
    EDGE_CONTACT = "edge_contact"
    MISSING_START_CORNER = "missing_start_corner"
    NO_CORNER_CONTACT = "no_corner_contact"

    def describe(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    PlacementViolation.OUT_OF_BOUNDS: "piece extends past the edge of the board",
    PlacementViolation.OVERLAP: "piece overlaps an occupied cell",
    PlacementViolation.EDGE_CONTACT: "piece touches a same-colored piece along an edge",
    PlacementViolation.MISSING_START_CORNER: "first piece must cover the starting corner",
    PlacementViolation.NO_CORNER_CONTACT: "piece must touch a same-colored piece at a corner",
}


def find_violation(shape: Sequence[Cell], origin: Cell, color_value: int, grid,
                   first_placed: bool, start_corner: Cell) -> Optional[PlacementViolation]:
    """
    Return the first rule a placement breaks, or None if it is legal.

    Args:
        shape: Normalized (x, y) offsets of the piece
        origin: Board cell of the shape's local (0, 0)
        color_value: Value of the placing color in the grid
        grid: Occupancy grid indexed as grid[y][x]
        first_placed: Whether this color already has a piece on the board
        start_corner: The color's starting corner cell

    Returns:
        The violated rule, or None
    """
    size = len(grid)
    ox, oy = origin
    cells = [(ox + dx, oy + dy) for dx, dy in shape]

    # Bounds first so the remaining checks can index the grid freely
    for x, y in cells:
        if x < 0 or y < 0 or x >= size or y >= size:
            return PlacementViolation.OUT_OF_BOUNDS

    for x, y in cells:
        if grid[y][x] != 0:
            return PlacementViolation.OVERLAP

    touches_corner = False
    for x, y in cells:
        for dx, dy in EDGE_NEIGHBORS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < size and 0 <= ny < size and grid[ny][nx] == color_value:
                return PlacementViolation.EDGE_CONTACT

        if not touches_corner and first_placed:
            for dx, dy in CORNER_NEIGHBORS:
                nx, ny = x + dx, y + dy
                if 0 <= nx < size and 0 <= ny < size and grid[ny][nx] == color_value:
                    touches_corner = True
                    break

    if not first_placed:
        if tuple(start_corner) not in cells:
            return PlacementViolation.MISSING_START_CORNER
        return None

    if not touches_corner:
        return PlacementViolation.NO_CORNER_CONTACT
    return None


def is_legal_placement(shape: Sequence[Cell], origin: Cell, color_value: int, grid,
                       first_placed: bool, start_corner: Cell) -> bool:
    """True if the placement passes every rule."""
    return find_violation(shape, origin, color_value, grid, first_placed, start_corner) is None
