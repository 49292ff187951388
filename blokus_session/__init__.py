"""
Session driver tying the game state to configured players.
"""

from .game_session import GameSession, to_color_name, to_engine_color

__all__ = ["GameSession", "to_color_name", "to_engine_color"]
