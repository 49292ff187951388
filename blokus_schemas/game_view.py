"""
View schemas handed to the render collaborator.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .game_config import ColorName


class Position(BaseModel):
    """A board cell."""
    x: int = Field(ge=0, le=19)
    y: int = Field(ge=0, le=19)


class PlacedPieceView(BaseModel):
    """A piece on the board."""
    color: ColorName
    shape: List[List[int]] = Field(description="Normalized [x, y] offsets")
    origin: Position
    piece_name: str


class InHandView(BaseModel):
    """The piece currently being handled."""
    color: ColorName
    shape: List[List[int]] = Field(description="Offsets in the current orientation")
    source: str
    piece_name: str
    rotation: int = Field(ge=0, le=3)
    flip_h: bool
    flip_v: bool


class GameView(BaseModel):
    """Everything a renderer needs to draw one frame."""
    board: List[List[Optional[ColorName]]] = Field(description="20x20 grid indexed [y][x]")
    placed_pieces: List[PlacedPieceView]
    in_hand: Optional[InHandView] = None
    preview_origin: Optional[Position] = None
    preview_valid: bool = False
    inventories: Dict[ColorName, List[List[List[int]]]]
    squares_left: Dict[ColorName, int]
    start_corners: Dict[ColorName, Position]
    current_color: ColorName
    first_placed: Dict[ColorName, bool]
    forfeited: Dict[ColorName, bool]
    human_colors: List[ColorName] = Field(default_factory=list)
    placed_this_turn: bool
    turn_number: int
    game_over: bool


class RankingEntry(BaseModel):
    """One line of the final standings."""
    rank: int = Field(ge=1)
    color: ColorName
    squares_left: int = Field(ge=0)
    pieces_left: int = Field(ge=0)


class GameResult(BaseModel):
    """Final (or current) standings; fewer squares left ranks higher."""
    game_over: bool
    rankings: List[RankingEntry]
    winners: List[ColorName]
    turns_played: int
