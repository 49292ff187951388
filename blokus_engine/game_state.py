"""
Game state machine: board ownership, inventories, turn flow, forfeits and the
single piece a player is currently handling.

Every rule decision goes through the rule engine. Rejected operations never
raise; they return an `ActionResult` carrying a reason tag so the UI can let
the player retry or cancel.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from .board import BOARD_SIZE, START_CORNERS, TURN_ORDER, Board, Color, PlacedPiece
from .geometry import Cell, Shape, canonicalize, normalize, orient, shape_to_ascii
from .move_generator import LegalMoveGenerator, Move
from .pieces import PIECE_COUNT, piece_name, starting_inventory

logger = logging.getLogger(__name__)

Listener = Callable[['GameState'], None]


class RejectReason(str, Enum):
    """Why an operation was rejected."""
    ILLEGAL_PLACEMENT = "illegal_placement"
    NO_PIECE_IN_HAND = "no_piece_in_hand"
    WRONG_TURN_OWNER = "wrong_turn_owner"
    TURN_NOT_READY = "turn_not_ready"
    FORFEIT_NOT_ALLOWED = "forfeit_not_allowed"
    PIECE_NOT_AVAILABLE = "piece_not_available"
    PIECE_IN_HAND = "piece_in_hand"
    ALREADY_PLACED = "already_placed"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a state-machine operation."""
    success: bool
    reason: Optional[RejectReason] = None
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> 'ActionResult':
        return cls(True, None, message)

    @classmethod
    def rejected(cls, reason: RejectReason, message: str) -> 'ActionResult':
        return cls(False, reason, message)

    def __bool__(self) -> bool:
        return self.success


class PieceSource(str, Enum):
    INVENTORY = "inventory"
    BOARD = "board"


@dataclass
class InHandPiece:
    """
    The piece a player is currently handling.

    The oriented shape is always rebuilt from `base_shape` plus the rotation
    count and flip flags.
    """
    base_shape: Shape
    color: Color
    source: PieceSource
    original: Optional[PlacedPiece] = None  # set when picked up from the board
    rotation: int = 0
    flip_h: bool = False
    flip_v: bool = False
    asset: Optional[Any] = None

    @property
    def shape(self) -> Shape:
        return orient(self.base_shape, self.rotation, self.flip_h, self.flip_v)

    @property
    def canonical(self) -> Shape:
        return canonicalize(self.base_shape)

    def rotate(self) -> None:
        self.rotation = (self.rotation + 1) % 4

    def flip_horizontal(self) -> None:
        # Mirroring the current view swaps the rotation direction
        self.flip_h = not self.flip_h
        self.rotation = (-self.rotation) % 4

    def flip_vertical(self) -> None:
        self.flip_v = not self.flip_v
        self.rotation = (-self.rotation) % 4


@dataclass
class TurnState:
    """Turn bookkeeping; a forfeited color is skipped for the rest of the game."""
    turn_order: tuple = TURN_ORDER
    current_turn_index: int = 0
    first_placed: Dict[Color, bool] = field(default_factory=lambda: {color: False for color in Color})
    forfeited: Dict[Color, bool] = field(default_factory=lambda: {color: False for color in Color})
    placed_this_turn: bool = False
    turn_number: int = 0

    @property
    def current_color(self) -> Color:
        return self.turn_order[self.current_turn_index]


class GameState:
    """
    Owns one game: placed pieces, inventories, turn state and the in-hand piece.

    Observers registered with `subscribe` are called after every completed
    mutation.
    """

    def __init__(self, seed: Optional[int] = None, shuffle_inventory: bool = True):
        """
        Initialize a fresh game.

        Args:
            seed: Seed for the inventory shuffle
            shuffle_inventory: Shuffle each color's inventory on reset
                (presentation only, never affects legality)
        """
        self.rng = np.random.RandomState(seed)
        self.shuffle_inventory = shuffle_inventory
        self.move_generator = LegalMoveGenerator()
        self.assets: Dict[Color, Any] = {}
        self._listeners: List[Listener] = []

        self.placed_pieces: List[PlacedPiece] = []
        self.inventories: Dict[Color, List[Shape]] = {}
        self.turn = TurnState()
        self.in_hand: Optional[InHandPiece] = None
        self.preview_origin: Optional[Cell] = None
        self.preview_valid = False
        self.game_over = False
        # Piece placed during the current turn, the only one that may be repositioned
        self._turn_piece: Optional[PlacedPiece] = None
        self._reset_state()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after each state change.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception(f"State listener {listener!r} failed")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def current_color(self) -> Color:
        return self.turn.current_color

    @property
    def first_placed(self) -> Dict[Color, bool]:
        return self.turn.first_placed

    @property
    def forfeited(self) -> Dict[Color, bool]:
        return self.turn.forfeited

    @property
    def placed_this_turn(self) -> bool:
        return self.turn.placed_this_turn

    def start_corner(self, color: Color) -> Cell:
        return START_CORNERS[color]

    def board(self) -> Board:
        """Occupancy snapshot rebuilt from the placed pieces."""
        return Board.from_pieces(self.placed_pieces, self.inventories, self.turn.forfeited)

    def snapshot(self) -> Board:
        """Independent board snapshot for AI search."""
        return self.board()

    def pieces_of(self, color: Color) -> List[PlacedPiece]:
        return [piece for piece in self.placed_pieces if piece.color == color]

    def piece_count(self, color: Color) -> int:
        """Inventory + placed + in-hand-from-board pieces; always PIECE_COUNT."""
        in_hand = 1 if (self.in_hand is not None and self.in_hand.color == color
                        and self.in_hand.source == PieceSource.BOARD) else 0
        return len(self.inventories[color]) + len(self.pieces_of(color)) + in_hand

    def active_colors(self) -> List[Color]:
        return [color for color in self.turn.turn_order if not self.turn.forfeited[color]]

    def set_assets(self, assets: Dict[Color, Any]) -> None:
        """Attach opaque per-color render handles to future pieces."""
        self.assets = dict(assets)
        self._emit()

    # ------------------------------------------------------------------
    # In-hand piece
    # ------------------------------------------------------------------

    def pick_from_inventory(self, shape: Shape) -> ActionResult:
        """
        Start handling an inventory piece for the current color.

        The piece stays in the inventory until it is successfully placed.
        """
        color = self.current_color
        if self.game_over:
            return self._reject(RejectReason.GAME_OVER, "The game is over")
        if self.in_hand is not None:
            return self._reject(RejectReason.PIECE_IN_HAND, "Place or cancel the piece in hand first")
        if self.turn.placed_this_turn:
            return self._reject(RejectReason.ALREADY_PLACED,
                                f"{color.label} already placed a piece this turn")

        base = normalize(shape)
        if canonicalize(base) not in self.inventories[color]:
            return self._reject(RejectReason.PIECE_NOT_AVAILABLE,
                                f"{piece_name(base)} is not in {color.label}'s inventory")

        self.in_hand = InHandPiece(base_shape=base, color=color, source=PieceSource.INVENTORY,
                                   asset=self.assets.get(color))
        self._clear_preview()
        self._emit()
        return ActionResult.ok(f"{color.label} picked up {piece_name(base)}")

    def pick_up(self, cell: Cell) -> Optional[InHandPiece]:
        """
        Lift the top-most placed piece covering `cell` back into the hand.

        Only the piece the current color placed during this turn can be picked
        up; earlier pieces are final.

        Returns:
            The in-hand piece, or None if nothing could be picked up
        """
        if self.game_over or self.in_hand is not None:
            return None

        for index in range(len(self.placed_pieces) - 1, -1, -1):
            piece = self.placed_pieces[index]
            if not piece.covers(tuple(cell)):
                continue
            if piece.color != self.current_color:
                logger.debug(f"Pick-up rejected at {cell}: piece belongs to {piece.color.label}")
                return None
            if piece is not self._turn_piece:
                logger.debug(f"Pick-up rejected at {cell}: piece was placed in an earlier turn")
                return None

            del self.placed_pieces[index]
            self._turn_piece = None
            self.turn.placed_this_turn = False
            self.turn.first_placed[piece.color] = bool(self.pieces_of(piece.color))
            self.in_hand = InHandPiece(base_shape=piece.shape, color=piece.color,
                                       source=PieceSource.BOARD, original=piece,
                                       asset=piece.asset)
            self._clear_preview()
            self._emit()
            return self.in_hand

        return None

    def rotate_in_hand(self) -> ActionResult:
        return self._transform_in_hand(InHandPiece.rotate)

    def flip_in_hand_h(self) -> ActionResult:
        return self._transform_in_hand(InHandPiece.flip_horizontal)

    def flip_in_hand_v(self) -> ActionResult:
        return self._transform_in_hand(InHandPiece.flip_vertical)

    def _transform_in_hand(self, transform: Callable[[InHandPiece], None]) -> ActionResult:
        if self.in_hand is None:
            return ActionResult.rejected(RejectReason.NO_PIECE_IN_HAND, "No piece in hand")
        transform(self.in_hand)
        if self.preview_origin is not None:
            self.preview_valid = self.can_place(self.in_hand.shape, self.preview_origin)
        self._emit()
        return ActionResult.ok()

    def cancel_in_hand(self) -> ActionResult:
        """
        Drop the in-hand piece without placing it.

        A piece lifted from the board goes back to its original placement; an
        inventory piece simply stays in the inventory. With nothing in hand
        this changes nothing.
        """
        if self.in_hand is None:
            return ActionResult.rejected(RejectReason.NO_PIECE_IN_HAND, "No piece in hand")

        piece = self.in_hand
        if piece.source == PieceSource.BOARD and piece.original is not None:
            self.placed_pieces.append(piece.original)
            self._turn_piece = piece.original
            self.turn.placed_this_turn = True
            self.turn.first_placed[piece.color] = True
        self.in_hand = None
        self._clear_preview()
        self._emit()
        return ActionResult.ok("Piece returned")

    def preview(self, origin: Optional[Cell]) -> bool:
        """
        Record where the in-hand piece is hovering and whether it fits there.

        Returns:
            Legality of dropping the piece at `origin`
        """
        if self.in_hand is None or origin is None:
            self._clear_preview()
        else:
            self.preview_origin = tuple(origin)
            self.preview_valid = self.can_place(self.in_hand.shape, self.preview_origin)
        self._emit()
        return self.preview_valid

    def _clear_preview(self) -> None:
        self.preview_origin = None
        self.preview_valid = False

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def can_place(self, shape: Shape, origin: Cell) -> bool:
        """Check a placement for the in-hand piece's color; False if nothing is in hand."""
        if self.in_hand is None:
            return False
        return self.board().can_place(normalize(shape), tuple(origin), self.in_hand.color)

    def place(self, shape: Optional[Shape], origin: Cell) -> ActionResult:
        """
        Drop the in-hand piece at `origin`.

        Args:
            shape: Orientation to place (must be the in-hand piece); None uses
                the in-hand orientation
            origin: Board cell of the shape's local (0, 0)

        Returns:
            Success, or the reason the placement was rejected. On rejection the
            state is unchanged and the piece stays in hand.
        """
        if self.game_over:
            return self._reject(RejectReason.GAME_OVER, "The game is over")
        if self.in_hand is None:
            return ActionResult.rejected(RejectReason.NO_PIECE_IN_HAND, "No piece in hand")

        piece = self.in_hand
        color = piece.color
        if color != self.current_color:
            return self._reject(RejectReason.WRONG_TURN_OWNER, f"It is not {color.label}'s turn")

        shape = piece.shape if shape is None else normalize(shape)
        if canonicalize(shape) != piece.canonical:
            return self._reject(RejectReason.ILLEGAL_PLACEMENT,
                                f"Shape does not match the {piece_name(piece.base_shape)} in hand")

        origin = tuple(origin)
        violation = self.board().violation(shape, origin, color)
        if violation is not None:
            return self._reject(RejectReason.ILLEGAL_PLACEMENT,
                                f"Illegal placement at {origin}: {violation.describe()}")

        placed = PlacedPiece(shape=shape, origin=origin, color=color,
                             asset=piece.asset if piece.asset is not None else self.assets.get(color))
        self.placed_pieces.append(placed)
        if piece.source == PieceSource.INVENTORY:
            self.inventories[color].remove(piece.canonical)
        self.turn.first_placed[color] = True
        self.turn.placed_this_turn = True
        self._turn_piece = placed
        self.in_hand = None
        self._clear_preview()

        logger.info(f"{color.label} placed {piece_name(shape)} at {origin}")
        logger.debug(f"Placed orientation:\n{shape_to_ascii(shape)}")
        self._emit()
        return ActionResult.ok(f"{color.label} placed {piece_name(shape)}")

    def place_move(self, move: Move) -> ActionResult:
        """Pick a move's piece from inventory and place it, as a player would."""
        result = self.pick_from_inventory(move.shape)
        if not result:
            return result
        result = self.place(move.shape, move.origin)
        if not result:
            self.cancel_in_hand()
        return result

    # ------------------------------------------------------------------
    # Turn flow
    # ------------------------------------------------------------------

    def end_turn(self) -> ActionResult:
        """
        Finish the current color's turn.

        Rejected while a piece is in hand or before the color has placed a
        piece this turn.
        """
        if self.game_over:
            return self._reject(RejectReason.GAME_OVER, "The game is over")
        color = self.current_color
        if self.in_hand is not None:
            return self._reject(RejectReason.TURN_NOT_READY, "Place or cancel the piece in hand first")
        if not self.turn.placed_this_turn:
            if not self.turn.first_placed[color]:
                message = f"{color.label} must place a piece covering its starting corner"
            else:
                message = f"{color.label} must place a piece before ending the turn"
            return self._reject(RejectReason.TURN_NOT_READY, message)

        self._advance_turn()
        self._emit()
        return ActionResult.ok(f"{color.label} ended its turn")

    def forfeit(self, color: Optional[Color] = None) -> ActionResult:
        """
        Permanently retire a color (the current one by default).

        Only allowed once every color has placed its first piece.
        """
        color = self.current_color if color is None else color
        if self.game_over:
            return self._reject(RejectReason.GAME_OVER, "The game is over")
        if not all(self.turn.first_placed.values()):
            return self._reject(RejectReason.FORFEIT_NOT_ALLOWED,
                                "Every color must place its first piece before anyone can forfeit")
        if self.turn.forfeited[color]:
            return self._reject(RejectReason.FORFEIT_NOT_ALLOWED, f"{color.label} has already forfeited")

        if self.in_hand is not None:
            self.cancel_in_hand()

        self.turn.forfeited[color] = True
        logger.info(f"{color.label} forfeits")
        if all(self.turn.forfeited.values()):
            self._set_game_over("every color has forfeited")
        elif color == self.current_color:
            self._advance_turn()
        self._emit()
        return ActionResult.ok(f"{color.label} forfeits")

    def _advance_turn(self) -> None:
        """Move to the next color that has not forfeited."""
        self.turn.placed_this_turn = False
        self._turn_piece = None
        self._clear_preview()
        count = len(self.turn.turn_order)
        for step in range(1, count + 1):
            index = (self.turn.current_turn_index + step) % count
            if not self.turn.forfeited[self.turn.turn_order[index]]:
                self.turn.current_turn_index = index
                self.turn.turn_number += 1
                return
        self._set_game_over("no active colors remain")

    def has_legal_moves(self, color: Color) -> bool:
        return self.move_generator.has_legal_moves(self.board(), color)

    def legal_moves(self, color: Optional[Color] = None) -> List[Move]:
        color = self.current_color if color is None else color
        return self.move_generator.get_legal_moves(self.board(), color)

    def check_game_over(self) -> bool:
        """
        End the game if no active color has a legal move.

        Returns:
            Whether the game is over
        """
        if self.game_over:
            return True
        board = self.board()
        if any(self.move_generator.has_legal_moves(board, color) for color in self.active_colors()):
            return False
        self._set_game_over("no active color has a legal move")
        self._emit()
        return True

    def _set_game_over(self, why: str) -> None:
        self.game_over = True
        self.in_hand = None
        self._clear_preview()
        logger.info(f"Game over: {why}")

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Restore the initial state of a new game."""
        self._reset_state()
        logger.info("Game reset")
        self._emit()

    def _reset_state(self) -> None:
        self.inventories = {}
        for color in Color:
            inventory = starting_inventory()
            if self.shuffle_inventory:
                order = self.rng.permutation(len(inventory))
                inventory = [inventory[i] for i in order]
            self.inventories[color] = inventory
        self.placed_pieces = []
        self.turn = TurnState()
        self.in_hand = None
        self._turn_piece = None
        self._clear_preview()
        self.game_over = False

    def _reject(self, reason: RejectReason, message: str) -> ActionResult:
        logger.debug(f"Rejected ({reason.value}): {message}")
        return ActionResult.rejected(reason, message)

    def __repr__(self) -> str:
        return (f"GameState(turn={self.current_color.label}, placed={len(self.placed_pieces)}, "
                f"game_over={self.game_over}, board={BOARD_SIZE}x{BOARD_SIZE})")
