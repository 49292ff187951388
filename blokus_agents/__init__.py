"""
Computer players for Blokus.
"""

from .defensive_agent import DefensiveAgent
from .gameplay_protocol import HumanAgent, StrategyProtocol
from .greedy_agent import GreedyAgent
from .minimax_agent import MinimaxAgent
from .registry import build_strategy, register_strategy

__all__ = [
    "DefensiveAgent",
    "GreedyAgent",
    "HumanAgent",
    "MinimaxAgent",
    "StrategyProtocol",
    "build_strategy",
    "register_strategy",
]
