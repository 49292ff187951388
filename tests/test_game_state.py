"""
Tests for the game state machine: placement, in-hand handling, turn flow,
forfeits, game over and observers.
"""

import itertools
import unittest

import numpy as np

from blokus_engine.board import START_CORNERS, TURN_ORDER, Color
from blokus_engine.game_state import GameState, PieceSource, RejectReason
from blokus_engine.geometry import canonicalize, flip_horizontal, flip_vertical, normalize
from blokus_engine.pieces import PIECE_COUNT, STARTING_SHAPES
from tests.utils_game_states import DOMINO, MONOMINO, generate_random_valid_state, play_opening

L_TETROMINO = ((0, 0), (0, 1), (0, 2), (1, 2))


def assert_invariants(test: unittest.TestCase, state: GameState):
    """Inventory conservation, no overlap and the placement rules hold for the whole board."""
    for color in Color:
        test.assertEqual(state.piece_count(color), PIECE_COUNT)
    cells = [cell for piece in state.placed_pieces for cell in piece.cells()]
    test.assertEqual(len(cells), len(set(cells)))

    owner = {}
    for index, piece in enumerate(state.placed_pieces):
        for cell in piece.cells():
            owner[cell] = (piece.color, index)
    for (x, y), (color, index) in owner.items():
        for neighbor in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            other = owner.get(neighbor)
            if other is not None and other[0] == color:
                test.assertEqual(other[1], index,
                                 f"{color.label} pieces share an edge at {(x, y)} and {neighbor}")

    board = state.board()
    for color in Color:
        pieces = state.pieces_of(color)
        test.assertEqual(board.first_placed[color], bool(pieces))
        if pieces:
            test.assertTrue(pieces[0].covers(START_CORNERS[color]),
                            f"first {color.label} piece misses its start corner")


class TestPlacementScenarios(unittest.TestCase):
    """Basic placement flow from a fresh game."""

    def setUp(self):
        self.state = GameState(seed=0)

    def test_first_piece_on_start_corner(self):
        state = self.state
        self.assertEqual(state.current_color, Color.BLUE)
        self.assertTrue(state.pick_from_inventory(MONOMINO))
        result = state.place(MONOMINO, (19, 19))
        self.assertTrue(result.success)
        self.assertEqual(len(state.inventories[Color.BLUE]), 20)
        self.assertNotIn(MONOMINO, state.inventories[Color.BLUE])
        self.assertTrue(state.first_placed[Color.BLUE])
        self.assertTrue(state.placed_this_turn)
        self.assertIsNone(state.in_hand)
        assert_invariants(self, state)

    def test_first_piece_off_start_corner(self):
        state = self.state
        state.pick_from_inventory(MONOMINO)
        result = state.place(MONOMINO, (0, 0))
        self.assertFalse(result.success)
        self.assertEqual(result.reason, RejectReason.ILLEGAL_PLACEMENT)
        self.assertEqual(len(state.inventories[Color.BLUE]), 21)
        self.assertFalse(state.first_placed[Color.BLUE])
        self.assertEqual(state.placed_pieces, [])
        self.assertIsNotNone(state.in_hand)

    def test_second_piece_needs_corner_contact(self):
        state = self.state
        play_opening(state)
        self.assertEqual(state.current_color, Color.BLUE)

        self.assertTrue(state.pick_from_inventory(DOMINO))
        rejected = state.place(DOMINO, (17, 19))
        self.assertEqual(rejected.reason, RejectReason.ILLEGAL_PLACEMENT)
        self.assertEqual(len(state.pieces_of(Color.BLUE)), 1)

        self.assertTrue(state.place(DOMINO, (17, 18)))
        self.assertEqual(len(state.pieces_of(Color.BLUE)), 2)
        self.assertNotIn(canonicalize(DOMINO), state.inventories[Color.BLUE])
        assert_invariants(self, state)

    def test_place_uses_hand_orientation(self):
        state = self.state
        state.pick_from_inventory(DOMINO)
        state.rotate_in_hand()
        self.assertEqual(state.in_hand.shape, ((0, 0), (0, 1)))
        self.assertTrue(state.place(None, (19, 18)))
        self.assertEqual(state.placed_pieces[0].cells(), [(19, 18), (19, 19)])

    def test_placement_logs_orientation(self):
        state = self.state
        state.pick_from_inventory(DOMINO)
        state.rotate_in_hand()
        with self.assertLogs("blokus_engine.game_state", level="DEBUG") as logs:
            state.place(None, (19, 18))
        self.assertIn("Placed orientation:\n#\n#", "\n".join(logs.output))

    def test_place_with_other_shape(self):
        state = self.state
        state.pick_from_inventory(DOMINO)
        result = state.place(MONOMINO, (19, 19))
        self.assertEqual(result.reason, RejectReason.ILLEGAL_PLACEMENT)
        self.assertEqual(state.placed_pieces, [])

    def test_place_with_empty_hand(self):
        result = self.state.place(MONOMINO, (19, 19))
        self.assertEqual(result.reason, RejectReason.NO_PIECE_IN_HAND)

    def test_can_place(self):
        state = self.state
        self.assertFalse(state.can_place(MONOMINO, (19, 19)))
        state.pick_from_inventory(MONOMINO)
        self.assertTrue(state.can_place(MONOMINO, (19, 19)))
        self.assertFalse(state.can_place(MONOMINO, (18, 19)))


class TestInHandPiece(unittest.TestCase):
    """Picking, transforming and cancelling the in-hand piece."""

    def setUp(self):
        self.state = GameState(seed=0)

    def test_four_rotations_restore_shape(self):
        state = self.state
        state.pick_from_inventory(L_TETROMINO)
        before = state.in_hand.shape
        for _ in range(4):
            self.assertTrue(state.rotate_in_hand())
        self.assertEqual(state.in_hand.shape, before)
        self.assertEqual(canonicalize(state.in_hand.shape), canonicalize(L_TETROMINO))

    def test_flip_mirrors_current_view(self):
        state = self.state
        state.pick_from_inventory(L_TETROMINO)
        state.rotate_in_hand()
        shown = state.in_hand.shape
        state.flip_in_hand_h()
        self.assertEqual(state.in_hand.shape, flip_horizontal(shown))
        shown = state.in_hand.shape
        state.flip_in_hand_v()
        self.assertEqual(state.in_hand.shape, flip_vertical(shown))

    def test_transform_sequences_keep_piece_identity(self):
        state = self.state
        state.pick_from_inventory(L_TETROMINO)
        transforms = [state.rotate_in_hand, state.flip_in_hand_h, state.flip_in_hand_v]
        for sequence in itertools.product(transforms, repeat=3):
            for transform in sequence:
                transform()
            self.assertEqual(canonicalize(state.in_hand.shape), canonicalize(L_TETROMINO))
            self.assertEqual(state.in_hand.shape, normalize(state.in_hand.shape))

    def test_transform_with_empty_hand(self):
        for operation in (self.state.rotate_in_hand, self.state.flip_in_hand_h, self.state.flip_in_hand_v):
            self.assertEqual(operation().reason, RejectReason.NO_PIECE_IN_HAND)

    def test_pick_any_orientation(self):
        rotated = ((0, 0), (1, 0), (2, 0), (0, 1))
        self.assertTrue(self.state.pick_from_inventory(rotated))
        self.assertEqual(self.state.in_hand.base_shape, normalize(rotated))
        self.assertEqual(self.state.in_hand.source, PieceSource.INVENTORY)

    def test_pick_second_piece(self):
        self.state.pick_from_inventory(MONOMINO)
        result = self.state.pick_from_inventory(DOMINO)
        self.assertEqual(result.reason, RejectReason.PIECE_IN_HAND)

    def test_pick_unavailable_piece(self):
        self.state.inventories[Color.BLUE].remove(MONOMINO)
        result = self.state.pick_from_inventory(MONOMINO)
        self.assertEqual(result.reason, RejectReason.PIECE_NOT_AVAILABLE)

    def test_pick_after_placing(self):
        state = self.state
        state.pick_from_inventory(MONOMINO)
        state.place(MONOMINO, (19, 19))
        result = state.pick_from_inventory(DOMINO)
        self.assertEqual(result.reason, RejectReason.ALREADY_PLACED)

    def test_cancel_inventory_piece(self):
        state = self.state
        state.pick_from_inventory(MONOMINO)
        self.assertTrue(state.cancel_in_hand())
        self.assertIsNone(state.in_hand)
        self.assertEqual(len(state.inventories[Color.BLUE]), 21)

    def test_cancel_is_idempotent(self):
        state = self.state
        calls = []
        state.subscribe(lambda s: calls.append(1))
        first = state.cancel_in_hand()
        second = state.cancel_in_hand()
        self.assertEqual(first.reason, RejectReason.NO_PIECE_IN_HAND)
        self.assertEqual(second.reason, RejectReason.NO_PIECE_IN_HAND)
        self.assertEqual(calls, [])
        assert_invariants(self, state)

    def test_preview(self):
        state = self.state
        self.assertFalse(state.preview((19, 19)))
        state.pick_from_inventory(MONOMINO)
        self.assertTrue(state.preview((19, 19)))
        self.assertEqual(state.preview_origin, (19, 19))
        self.assertFalse(state.preview((0, 0)))
        self.assertFalse(state.preview_valid)
        state.preview(None)
        self.assertIsNone(state.preview_origin)

    def test_preview_follows_rotation(self):
        state = self.state
        state.pick_from_inventory(DOMINO)
        self.assertTrue(state.preview((18, 19)))
        state.rotate_in_hand()
        self.assertFalse(state.preview_valid)


class TestRepositioning(unittest.TestCase):
    """Picking the piece placed this turn back up."""

    def setUp(self):
        self.state = GameState(seed=0)
        self.state.pick_from_inventory(MONOMINO)
        self.state.place(MONOMINO, (19, 19))

    def test_pick_up_this_turns_piece(self):
        state = self.state
        piece = state.pick_up((19, 19))
        self.assertIsNotNone(piece)
        self.assertEqual(piece.source, PieceSource.BOARD)
        self.assertEqual(state.placed_pieces, [])
        self.assertFalse(state.placed_this_turn)
        self.assertFalse(state.first_placed[Color.BLUE])
        self.assertEqual(len(state.inventories[Color.BLUE]), 20)
        assert_invariants(self, state)

        self.assertTrue(state.place(None, (19, 19)))
        self.assertEqual(len(state.inventories[Color.BLUE]), 20)
        self.assertTrue(state.end_turn())
        assert_invariants(self, state)

    def test_cancel_returns_piece_to_board(self):
        state = self.state
        state.pick_up((19, 19))
        self.assertTrue(state.cancel_in_hand())
        self.assertEqual(len(state.placed_pieces), 1)
        self.assertEqual(state.placed_pieces[0].origin, (19, 19))
        self.assertTrue(state.placed_this_turn)
        self.assertTrue(state.first_placed[Color.BLUE])
        self.assertTrue(state.end_turn())

    def test_pick_up_empty_cell(self):
        self.assertIsNone(self.state.pick_up((5, 5)))

    def test_earlier_turn_pieces_are_final(self):
        state = self.state
        state.end_turn()
        self.assertIsNone(state.pick_up((19, 19)))
        self.assertEqual(len(state.placed_pieces), 1)

    def test_other_colors_pieces(self):
        state = self.state
        state.end_turn()
        state.pick_from_inventory(MONOMINO)
        state.place(MONOMINO, (19, 0))
        self.assertIsNone(state.pick_up((19, 19)))
        self.assertIsNotNone(state.pick_up((19, 0)))


class TestTurnFlow(unittest.TestCase):
    """End turn, forfeit and game over."""

    def setUp(self):
        self.state = GameState(seed=0)

    def test_end_turn_before_placing(self):
        result = self.state.end_turn()
        self.assertEqual(result.reason, RejectReason.TURN_NOT_READY)
        self.assertEqual(self.state.current_color, Color.BLUE)

    def test_end_turn_with_piece_in_hand(self):
        state = self.state
        state.pick_from_inventory(MONOMINO)
        state.place(MONOMINO, (19, 19))
        state.pick_up((19, 19))
        self.assertEqual(state.end_turn().reason, RejectReason.TURN_NOT_READY)

    def test_turn_order(self):
        state = self.state
        seen = []
        for color in TURN_ORDER:
            seen.append(state.current_color)
            state.pick_from_inventory(MONOMINO)
            self.assertTrue(state.place(MONOMINO, START_CORNERS[color]))
            self.assertTrue(state.end_turn())
        self.assertEqual(seen, list(TURN_ORDER))
        self.assertEqual(state.current_color, Color.BLUE)
        self.assertEqual(state.turn.turn_number, 4)

    def test_forfeit_before_everyone_started(self):
        result = self.state.forfeit()
        self.assertEqual(result.reason, RejectReason.FORFEIT_NOT_ALLOWED)
        self.assertFalse(self.state.forfeited[Color.BLUE])

    def test_forfeited_colors_are_skipped(self):
        state = self.state
        play_opening(state)
        self.assertTrue(state.forfeit())
        self.assertEqual(state.current_color, Color.YELLOW)
        self.assertTrue(state.forfeit(Color.RED))
        self.assertEqual(state.current_color, Color.YELLOW)
        self.assertTrue(state.forfeit())
        self.assertEqual(state.current_color, Color.GREEN)
        self.assertFalse(state.game_over)
        self.assertEqual(state.active_colors(), [Color.GREEN])

    def test_forfeit_twice(self):
        state = self.state
        play_opening(state)
        state.forfeit(Color.RED)
        self.assertEqual(state.forfeit(Color.RED).reason, RejectReason.FORFEIT_NOT_ALLOWED)

    def test_forfeit_cancels_hand(self):
        state = self.state
        play_opening(state)
        state.pick_from_inventory(DOMINO)
        self.assertTrue(state.forfeit())
        self.assertIsNone(state.in_hand)
        assert_invariants(self, state)

    def test_empty_inventories_lead_to_game_over(self):
        state = self.state
        play_opening(state)
        for color in Color:
            state.inventories[color] = []
            self.assertEqual(state.legal_moves(color), [])
            self.assertFalse(state.has_legal_moves(color))

        for _ in TURN_ORDER:
            self.assertFalse(state.game_over)
            self.assertTrue(state.forfeit())
        self.assertTrue(state.game_over)

    def test_check_game_over(self):
        state = self.state
        self.assertFalse(state.check_game_over())
        play_opening(state)
        for color in Color:
            state.inventories[color] = []
        self.assertTrue(state.check_game_over())
        self.assertTrue(state.game_over)

    def test_operations_after_game_over(self):
        state = self.state
        play_opening(state)
        for color in TURN_ORDER:
            state.forfeit(color)
        self.assertTrue(state.game_over)
        self.assertEqual(state.pick_from_inventory(DOMINO).reason, RejectReason.GAME_OVER)
        self.assertEqual(state.end_turn().reason, RejectReason.GAME_OVER)
        self.assertEqual(state.forfeit().reason, RejectReason.GAME_OVER)


class TestObservers(unittest.TestCase):

    def test_listener_called_after_mutations(self):
        state = GameState(seed=0)
        calls = []
        unsubscribe = state.subscribe(lambda s: calls.append(s.placed_this_turn))
        state.pick_from_inventory(MONOMINO)
        state.place(MONOMINO, (19, 19))
        self.assertEqual(calls, [False, True])

        unsubscribe()
        state.end_turn()
        self.assertEqual(len(calls), 2)

    def test_rejected_operations_do_not_notify(self):
        state = GameState(seed=0)
        calls = []
        state.subscribe(lambda s: calls.append(1))
        state.end_turn()
        state.pick_from_inventory(((0, 0), (1, 1)))
        self.assertEqual(calls, [])

    def test_failing_listener_does_not_break_state(self):
        state = GameState(seed=0)

        def broken(_):
            raise RuntimeError("render failed")

        state.subscribe(broken)
        with self.assertLogs("blokus_engine.game_state", level="ERROR"):
            state.pick_from_inventory(MONOMINO)
        self.assertTrue(state.place(MONOMINO, (19, 19)))

    def test_assets_attached_to_pieces(self):
        state = GameState(seed=0)
        state.set_assets({Color.BLUE: "blue-texture"})
        state.pick_from_inventory(MONOMINO)
        state.place(MONOMINO, (19, 19))
        self.assertEqual(state.placed_pieces[0].asset, "blue-texture")


class TestResetAndSnapshots(unittest.TestCase):

    def test_reset_restores_initial_state(self):
        state, _ = generate_random_valid_state(10, seed=4)
        state.reset()
        self.assertEqual(state.placed_pieces, [])
        self.assertEqual(state.current_color, Color.BLUE)
        self.assertFalse(state.game_over)
        for color in Color:
            self.assertEqual(sorted(state.inventories[color]), sorted(STARTING_SHAPES))
            self.assertFalse(state.first_placed[color])
            self.assertFalse(state.forfeited[color])
        assert_invariants(self, state)

    def test_random_play_keeps_invariants(self):
        for seed in (1, 2):
            state, _ = generate_random_valid_state(20, seed=seed)
            assert_invariants(self, state)

    def test_random_operation_sequences_keep_invariants(self):
        # Mixes legal moves with arbitrary, mostly rejected, user actions
        for seed in (5, 6):
            rng = np.random.RandomState(seed)
            state = GameState(seed=seed)
            for _ in range(150):
                if state.game_over:
                    break
                color = state.current_color
                action = rng.randint(9)
                if action == 0:
                    inventory = state.inventories[color]
                    if inventory:
                        state.pick_from_inventory(inventory[rng.randint(len(inventory))])
                elif action == 1:
                    state.rotate_in_hand()
                elif action == 2:
                    state.flip_in_hand_h()
                elif action == 3:
                    state.flip_in_hand_v()
                elif action == 4:
                    state.place(None, (rng.randint(20), rng.randint(20)))
                elif action == 5:
                    pieces = state.pieces_of(color)
                    if pieces:
                        piece = pieces[rng.randint(len(pieces))]
                        state.pick_up(piece.cells()[0])
                elif action == 6:
                    state.cancel_in_hand()
                elif action == 7:
                    if not state.placed_this_turn and state.in_hand is None:
                        moves = state.legal_moves()
                        if moves:
                            state.place_move(moves[rng.randint(len(moves))])
                        else:
                            state.forfeit()
                else:
                    state.end_turn()
                assert_invariants(self, state)

    def test_inventory_shuffle_is_seeded(self):
        first = GameState(seed=3)
        second = GameState(seed=3)
        self.assertEqual(first.inventories, second.inventories)
        unshuffled = GameState(seed=3, shuffle_inventory=False)
        self.assertEqual(unshuffled.inventories[Color.RED], STARTING_SHAPES)

    def test_snapshot_is_independent(self):
        state = GameState(seed=0)
        snapshot = state.snapshot()
        snapshot.grid[0, 0] = Color.RED.value
        snapshot.inventories[Color.BLUE].clear()
        self.assertTrue(state.board().is_empty((0, 0)))
        self.assertEqual(len(state.inventories[Color.BLUE]), 21)


if __name__ == '__main__':
    unittest.main()
