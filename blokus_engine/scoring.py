"""
Scoring: squares left in each color's inventory, and final rankings.

Fewer squares left is better; the color with the fewest unplaced squares wins.
"""

from typing import Dict, Iterable, List, Tuple

from .board import TURN_ORDER, Board, Color
from .geometry import Shape


def squares_left(inventory: Iterable[Shape]) -> int:
    """Total cells of all pieces not yet placed."""
    return sum(len(shape) for shape in inventory)


def squares_placed(board: Board, color: Color) -> int:
    """Cells a color has on the board."""
    return board.count_cells(color)


def squares_by_color(inventories: Dict[Color, List[Shape]]) -> Dict[Color, int]:
    return {color: squares_left(inventories.get(color, [])) for color in TURN_ORDER}


def final_rankings(inventories: Dict[Color, List[Shape]]) -> List[Tuple[Color, int]]:
    """
    Colors ordered from best to worst by squares left.

    Ties keep turn order.
    """
    squares = squares_by_color(inventories)
    ordered = sorted(TURN_ORDER, key=lambda color: (squares[color], TURN_ORDER.index(color)))
    return [(color, squares[color]) for color in ordered]


def winners(inventories: Dict[Color, List[Shape]]) -> List[Color]:
    """All colors sharing the lowest squares-left count."""
    rankings = final_rankings(inventories)
    best = rankings[0][1]
    return [color for color, squares in rankings if squares == best]
