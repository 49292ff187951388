"""
Pydantic schemas for game configuration.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColorName(str, Enum):
    """Player colors as they appear in configuration and views."""
    BLUE = "blue"
    YELLOW = "yellow"
    RED = "red"
    GREEN = "green"


class StrategyType(str, Enum):
    """Who controls a color."""
    HUMAN = "human"
    GREEDY = "greedy"
    MINIMAX = "minimax"
    DEFENSIVE = "defensive"


class PlayerConfig(BaseModel):
    """Configuration for one color."""
    color: ColorName
    strategy: StrategyType = StrategyType.HUMAN
    seed: Optional[int] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


def _default_players() -> List[PlayerConfig]:
    return [
        PlayerConfig(color=ColorName.BLUE, strategy=StrategyType.HUMAN),
        PlayerConfig(color=ColorName.YELLOW, strategy=StrategyType.MINIMAX),
        PlayerConfig(color=ColorName.RED, strategy=StrategyType.GREEDY),
        PlayerConfig(color=ColorName.GREEN, strategy=StrategyType.DEFENSIVE),
    ]


class GameConfig(BaseModel):
    """Configuration for a Blokus game."""
    players: List[PlayerConfig] = Field(default_factory=_default_players, min_length=4, max_length=4)
    ai_delay_ms: int = Field(default=900, ge=0, le=60000, description="Pause before each computer turn")
    shuffle_inventory: bool = Field(default=True, description="Shuffle inventory order on reset")
    seed: Optional[int] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "players": [
                    {"color": "blue", "strategy": "human"},
                    {"color": "yellow", "strategy": "minimax", "parameters": {"depth": 2}},
                    {"color": "red", "strategy": "greedy", "seed": 7},
                    {"color": "green", "strategy": "defensive",
                     "parameters": {"weights": {"crowding": 1.0}}},
                ],
                "ai_delay_ms": 900,
                "shuffle_inventory": True,
            }
        }
    )

    @field_validator("players")
    @classmethod
    def _one_entry_per_color(cls, players: List[PlayerConfig]) -> List[PlayerConfig]:
        colors = [player.color for player in players]
        if len(set(colors)) != len(colors):
            raise ValueError(f"Each color must be configured exactly once, got {[c.value for c in colors]}")
        return players

    def player(self, color: Union[ColorName, str]) -> PlayerConfig:
        color = ColorName(color)
        for player in self.players:
            if player.color == color:
                return player
        raise KeyError(color)

    def human_colors(self) -> List[ColorName]:
        return [player.color for player in self.players if player.strategy == StrategyType.HUMAN]

    @classmethod
    def with_local_players(cls, count: int, **kwargs) -> 'GameConfig':
        """
        Default line-up with the first `count` colors in turn order played locally.

        Args:
            count: Number of human colors, clamped to 1..4
        """
        count = max(1, min(4, count))
        players = _default_players()
        for player in players[:count]:
            player.strategy = StrategyType.HUMAN
        return cls(players=players, **kwargs)


def load_game_config(path: Union[str, Path]) -> GameConfig:
    """
    Load a game configuration from a YAML or JSON file.

    Args:
        path: Path to a .yaml, .yml or .json file

    Returns:
        Validated configuration

    Raises:
        ValueError: Unsupported file extension
        pydantic.ValidationError: Invalid configuration values
    """
    path = Path(path)
    suffix = path.suffix.lower()
    with open(path, "r", encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix} (use .yaml, .yml or .json)")
    return GameConfig.model_validate(data)
