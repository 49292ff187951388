"""
Strategy registry: builds a player controller from its configured name.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from blokus_agents.defensive_agent import DefensiveAgent
from blokus_agents.gameplay_protocol import HumanAgent, StrategyProtocol
from blokus_agents.greedy_agent import GreedyAgent
from blokus_agents.minimax_agent import MinimaxAgent

StrategyFactory = Callable[..., StrategyProtocol]


STRATEGY_FACTORIES: Dict[str, StrategyFactory] = {
    "human": HumanAgent,
    "greedy": GreedyAgent,
    "minimax": MinimaxAgent,
    "defensive": DefensiveAgent,
}


def register_strategy(name: str, factory: StrategyFactory) -> None:
    """Make a new strategy available to configuration by name."""
    STRATEGY_FACTORIES[name.lower()] = factory


def available_strategies() -> list:
    """Registered strategy names, sorted."""
    return sorted(STRATEGY_FACTORIES)


def build_strategy(strategy_type: Any, seed: Optional[int] = None,
                   parameters: Optional[Dict[str, Any]] = None) -> StrategyProtocol:
    """
    Build a strategy instance.

    Args:
        strategy_type: Registered name (or an enum whose value is one)
        seed: Random seed passed to the strategy
        parameters: Constructor keyword arguments; a nested "weights" mapping
            is applied through the strategy's set_weights

    Raises:
        ValueError: Unknown strategy name or parameters it does not accept
    """
    name = str(getattr(strategy_type, "value", strategy_type)).lower()
    factory = STRATEGY_FACTORIES.get(name)
    if factory is None:
        raise ValueError(f"Unknown strategy type: {strategy_type} "
                         f"(available: {', '.join(available_strategies())})")

    parameters = dict(parameters or {})
    weights = parameters.pop("weights", None)
    try:
        strategy = factory(seed=seed, **parameters)
    except TypeError as exc:
        raise ValueError(f"Invalid parameters for {name} strategy: {exc}") from exc

    if weights:
        if not hasattr(strategy, "set_weights"):
            raise ValueError(f"The {name} strategy has no adjustable weights")
        strategy.set_weights(weights)
    return strategy
