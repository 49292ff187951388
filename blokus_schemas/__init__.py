"""
Pydantic schemas for Blokus configuration and views.
"""

from .game_config import ColorName, GameConfig, PlayerConfig, StrategyType, load_game_config
from .game_view import GameResult, GameView, InHandView, PlacedPieceView, Position, RankingEntry

__all__ = [
    "ColorName",
    "GameConfig",
    "PlayerConfig",
    "StrategyType",
    "load_game_config",
    "GameResult",
    "GameView",
    "InHandView",
    "PlacedPieceView",
    "Position",
    "RankingEntry",
]
