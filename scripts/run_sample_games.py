#!/usr/bin/env python3
"""
Play headless computer-only games and print the final standings.
"""

import argparse
import logging
import os
import sys
import time
from typing import List

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from blokus_agents.registry import available_strategies  # noqa: E402
from blokus_schemas.game_config import (  # noqa: E402
    ColorName, GameConfig, PlayerConfig, StrategyType, load_game_config
)
from blokus_session.game_session import GameSession  # noqa: E402
from blokus_utils.logging_setup import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)


DEFAULT_LINEUP = ["greedy", "minimax", "greedy", "defensive"]


def computer_only_config(seed: int, delay_ms: int, lineup: List[str]) -> GameConfig:
    return GameConfig(
        players=[
            PlayerConfig(color=color, strategy=StrategyType(name))
            for color, name in zip(ColorName, lineup)
        ],
        ai_delay_ms=delay_ms,
        seed=seed,
    )


def play_game(config: GameConfig, max_turns: int) -> GameSession:
    session = GameSession(config)
    turns = 0
    while not session.state.game_over and turns < max_turns:
        if session.is_human(session.state.current_color):
            raise ValueError("Sample games need every color to be computer-controlled")
        result = session.play_ai_turn()
        turns += 1
        if not result:
            logger.warning(f"Stopping game: {result.message}")
            break
    session.check_game_over()
    return session


def main(args: argparse.Namespace) -> None:
    setup_logging(getattr(logging, args.log_level.upper()), args.log_file)

    for game_index in range(args.games):
        seed = args.seed + game_index
        if args.config:
            config = load_game_config(args.config).model_copy(
                update={"seed": seed, "ai_delay_ms": args.delay_ms})
        else:
            config = computer_only_config(seed, args.delay_ms, args.lineup)

        started = time.time()
        session = play_game(config, args.max_turns)
        result = session.result()
        elapsed = time.time() - started

        print(f"game={game_index} seed={seed} turns={result.turns_played} "
              f"game_over={result.game_over} time={elapsed:.1f}s")
        for entry in result.rankings:
            print(f"  {entry.rank}. {entry.color.value:<6} squares_left={entry.squares_left} "
                  f"pieces_left={entry.pieces_left}")
        print(f"  winners: {', '.join(color.value for color in result.winners)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play headless Blokus games between computer players")
    parser.add_argument("--games", type=int, default=1, help="Number of games to play")
    parser.add_argument("--seed", type=int, default=0, help="Seed of the first game")
    parser.add_argument("--config", default=None, help="YAML or JSON game configuration")
    parser.add_argument("--lineup", nargs=4, default=DEFAULT_LINEUP, metavar="STRATEGY",
                        choices=[name for name in available_strategies() if name != "human"],
                        help="Strategies for blue, yellow, red and green")
    parser.add_argument("--delay-ms", type=int, default=0, help="Pause before each computer turn")
    parser.add_argument("--max-turns", type=int, default=400, help="Turn limit per game")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", default=None, help="Optional log file")
    main(parser.parse_args())
