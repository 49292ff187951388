"""
Game session: one GameState plus the controllers configured for each color.
"""

import logging
import time
from typing import Callable, Dict, Optional

from blokus_agents.gameplay_protocol import StrategyProtocol
from blokus_agents.registry import build_strategy
from blokus_engine.board import START_CORNERS, TURN_ORDER, Color
from blokus_engine.game_state import ActionResult, GameState, RejectReason
from blokus_engine.pieces import piece_name
from blokus_engine.scoring import final_rankings, squares_by_color, winners
from blokus_schemas.game_config import ColorName, GameConfig, PlayerConfig, StrategyType
from blokus_schemas.game_view import (
    GameResult, GameView, InHandView, PlacedPieceView, Position, RankingEntry
)

logger = logging.getLogger(__name__)


def to_color_name(color: Color) -> ColorName:
    return ColorName(color.label)


def to_engine_color(color) -> Color:
    return Color[ColorName(color).name]


class GameSession:
    """
    Drives one game: human colors act through the state machine directly,
    computer colors are played by `play_ai_turn` / `run_until_human`.
    """

    def __init__(self, config: Optional[GameConfig] = None, state: Optional[GameState] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize a session.

        Args:
            config: Game configuration (defaults to one human and three computer colors)
            state: Existing state to drive; a fresh one is created from the config otherwise
            sleep: Function used for the pause before each computer turn
        """
        self.config = config or GameConfig()
        self.state = state or GameState(seed=self.config.seed,
                                        shuffle_inventory=self.config.shuffle_inventory)
        self.strategies: Dict[Color, StrategyProtocol] = {}
        for player in self.config.players:
            self.strategies[to_engine_color(player.color)] = self._create_strategy(player)
        self._sleep = sleep
        self.created_at = time.time()
        self.last_updated = self.created_at

    def _create_strategy(self, player: PlayerConfig) -> StrategyProtocol:
        seed = player.seed
        if seed is None and self.config.seed is not None:
            seed = self.config.seed + TURN_ORDER.index(to_engine_color(player.color))
        return build_strategy(player.strategy, seed=seed, parameters=player.parameters)

    def set_strategy(self, color: Color, strategy: StrategyType, seed: Optional[int] = None,
                     parameters: Optional[dict] = None) -> None:
        """Switch who controls a color, e.g. hand a computer color to a local player."""
        player = PlayerConfig(color=to_color_name(color), strategy=strategy, seed=seed,
                              parameters=parameters or {})
        self.strategies[color] = self._create_strategy(player)
        logger.info(f"{color.label} is now controlled by {strategy.value}")

    def is_human(self, color: Color) -> bool:
        return self.strategies[color].is_human

    def is_ai(self, color: Color) -> bool:
        return not self.is_human(color)

    @property
    def ai_delay_seconds(self) -> float:
        return self.config.ai_delay_ms / 1000.0

    # ------------------------------------------------------------------
    # Turn cycle
    # ------------------------------------------------------------------

    def play_ai_turn(self) -> ActionResult:
        """
        Let the computer color whose turn it is move.

        The chosen move goes through the same pick / place / end-turn path a
        human uses. A color without a legal move forfeits.
        """
        state = self.state
        color = state.current_color
        if state.game_over:
            return ActionResult.rejected(RejectReason.GAME_OVER, "The game is over")
        if self.is_human(color):
            return ActionResult.rejected(RejectReason.WRONG_TURN_OWNER,
                                         f"{color.label} is controlled by a local player")

        if self.ai_delay_seconds > 0:
            self._sleep(self.ai_delay_seconds)

        move = self.strategies[color].select_move(color, state.snapshot())
        self.last_updated = time.time()
        if move is None:
            logger.warning(f"{color.label} has no valid move")
            result = state.forfeit(color)
            if not result:
                logger.warning(f"{color.label} cannot forfeit yet: {result.message}")
            return result

        result = state.place_move(move)
        if not result:
            logger.error(f"{color.label} chose a move the state rejected: {result.message}")
            return result

        return state.end_turn()

    def run_until_human(self, max_turns: Optional[int] = None) -> int:
        """
        Play computer turns until a local color is up or the game ends.

        Args:
            max_turns: Stop after this many computer turns

        Returns:
            Number of computer turns played
        """
        turns = 0
        while not self.state.game_over and self.is_ai(self.state.current_color):
            if max_turns is not None and turns >= max_turns:
                break
            result = self.play_ai_turn()
            turns += 1
            if not result:
                break
        return turns

    def end_human_turn(self) -> ActionResult:
        """End the local player's turn, then let the computer colors move."""
        result = self.state.end_turn()
        if result:
            self.last_updated = time.time()
            self.run_until_human()
        return result

    def forfeit_human(self) -> ActionResult:
        """Forfeit the current local color, then let the computer colors move."""
        color = self.state.current_color
        if not self.is_human(color):
            return ActionResult.rejected(RejectReason.WRONG_TURN_OWNER,
                                         f"{color.label} is not controlled by a local player")
        result = self.state.forfeit(color)
        if result:
            self.last_updated = time.time()
            self.run_until_human()
        return result

    def check_game_over(self) -> bool:
        return self.state.check_game_over()

    def reset(self) -> None:
        self.state.reset()
        self.last_updated = time.time()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def view(self) -> GameView:
        """Build the render collaborator's view of the current state."""
        state = self.state
        board = state.board()

        in_hand = None
        if state.in_hand is not None:
            piece = state.in_hand
            in_hand = InHandView(
                color=to_color_name(piece.color),
                shape=[list(cell) for cell in piece.shape],
                source=piece.source.value,
                piece_name=piece_name(piece.base_shape),
                rotation=piece.rotation,
                flip_h=piece.flip_h,
                flip_v=piece.flip_v,
            )

        preview_origin = None
        if state.preview_origin is not None and board.is_valid_position(state.preview_origin):
            preview_origin = Position(x=state.preview_origin[0], y=state.preview_origin[1])

        squares = squares_by_color(state.inventories)
        return GameView(
            board=[[ColorName(label) if label else None for label in row] for row in board.to_rows()],
            placed_pieces=[
                PlacedPieceView(
                    color=to_color_name(piece.color),
                    shape=[list(cell) for cell in piece.shape],
                    origin=Position(x=piece.origin[0], y=piece.origin[1]),
                    piece_name=piece_name(piece.shape),
                )
                for piece in state.placed_pieces
            ],
            in_hand=in_hand,
            preview_origin=preview_origin,
            preview_valid=state.preview_valid,
            inventories={
                to_color_name(color): [[list(cell) for cell in shape] for shape in state.inventories[color]]
                for color in TURN_ORDER
            },
            squares_left={to_color_name(color): squares[color] for color in TURN_ORDER},
            start_corners={
                to_color_name(color): Position(x=START_CORNERS[color][0], y=START_CORNERS[color][1])
                for color in TURN_ORDER
            },
            current_color=to_color_name(state.current_color),
            first_placed={to_color_name(color): state.first_placed[color] for color in TURN_ORDER},
            forfeited={to_color_name(color): state.forfeited[color] for color in TURN_ORDER},
            human_colors=[to_color_name(color) for color in TURN_ORDER if self.is_human(color)],
            placed_this_turn=state.placed_this_turn,
            turn_number=state.turn.turn_number,
            game_over=state.game_over,
        )

    def result(self) -> GameResult:
        """Standings by squares left."""
        state = self.state
        rankings = [
            RankingEntry(
                rank=index + 1,
                color=to_color_name(color),
                squares_left=squares,
                pieces_left=len(state.inventories[color]),
            )
            for index, (color, squares) in enumerate(final_rankings(state.inventories))
        ]
        return GameResult(
            game_over=state.game_over,
            rankings=rankings,
            winners=[to_color_name(color) for color in winners(state.inventories)],
            turns_played=state.turn.turn_number,
        )
