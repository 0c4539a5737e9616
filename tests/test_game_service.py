import base64
import logging
import os
import threading
import unittest
from unittest import mock

# In-memory database before anything imports the engine
os.environ["DATABASE_URL"] = "sqlite://"

from database import Base, SessionLocal, engine  # noqa: E402
from errors import (  # noqa: E402
    CellOccupied,
    ConfigError,
    GameAlreadyFinished,
    GameNotFound,
    MalformedRequest,
    SwapNotAllowed,
    UnauthorizedCaller,
    WrongTurn,
)
from models.board import Board  # noqa: E402
from models.cell import Cell  # noqa: E402
from models.enums import MoveType  # noqa: E402
from models.game import GameRecord  # noqa: E402
from services.game_service import GameService  # noqa: E402
import services.utils as utils_mod  # noqa: E402


class _FixedClock:
    def __init__(self, height=100):
        self.height = height

    def __call__(self):
        return self.height


class TestGameService(unittest.TestCase):
    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()
        self.clock = _FixedClock()
        self.service = GameService(self.db, clock=self.clock)

    def tearDown(self):
        self.db.close()

    def _board(self, snapshot):
        return Board.from_bytes(snapshot["board"]["size"], base64.b64decode(snapshot["board"]["field"]))

    def _labels(self, index):
        record = self.db.get(GameRecord, index)
        return Board.from_bytes(record.size, record.labels)

    def test_given_several_games_when_created_then_indices_count_from_zero(self):
        self.assertEqual(self.service.create_game("a", "b", 3), 0)
        self.assertEqual(self.service.create_game("d", "c", 4), 1)
        index = self.service.create_game("x", "y")
        self.assertEqual(index, 2)

        game = self.service.get_game(index)
        self.assertEqual(game["first_player"], "x")
        self.assertEqual(game["second_player"], "y")
        self.assertEqual(game["turn"], 0)
        self.assertFalse(game["is_finished"])
        self.assertEqual(self._board(game), Board(11))
        self.assertEqual(game["current_block_height"], 100)
        self.assertIsNone(self.service.get_game(index + 1))

    def test_given_oversized_board_when_creating_then_config_error_and_nothing_stored(self):
        with self.assertRaises(ConfigError):
            self.service.create_game("a", "b", 20)
        self.assertEqual(len(self.service.store), 0)

    def test_given_opening_move_when_placed_then_only_that_cell_filled(self):
        index = self.service.create_game("alice", "bob", 5)
        game = self.service.make_move(index, "alice", MoveType.PLACE, Cell(3, 0))
        board = self._board(game)
        self.assertEqual(game["turn"], 1)
        for cell in board.cells():
            self.assertEqual(board.get(cell), 1 if cell == Cell(3, 0) else 0)

    def test_given_opening_move_when_second_player_swaps_then_stone_mirrored(self):
        index = self.service.create_game("alice", "bob", 5)
        self.service.make_move(index, "alice", "PLACE", Cell(3, 0))
        game = self.service.make_move(index, "bob", "SWAP")
        board = self._board(game)
        self.assertEqual(board.get(Cell(3, 0)), 0)
        self.assertEqual(board.get(Cell(0, 3)), 2)
        self.assertEqual(game["turn"], 2)
        labels = self._labels(index)
        self.assertEqual(labels.get(Cell(3, 0)), 0)
        self.assertEqual(labels.get(Cell(0, 3)), 1)

        with self.assertRaises(UnauthorizedCaller):
            self.service.make_move(index, "alice", "SWAP")
        with self.assertRaises(WrongTurn):
            self.service.make_move(index, "bob", "PLACE", Cell(1, 1))
        self.service.make_move(index, "alice", "PLACE", Cell(1, 1))
        with self.assertRaises(SwapNotAllowed):
            self.service.make_move(index, "bob", "SWAP")

    def test_given_connecting_stone_when_placed_then_finished_and_locked(self):
        index = self.service.create_game("alice", "bob", 3)
        moves = [
            ("alice", Cell(0, 0)), ("bob", Cell(2, 0)),
            ("alice", Cell(1, 1)), ("bob", Cell(2, 1)),
            ("alice", Cell(0, 2)), ("bob", Cell(2, 2)),
        ]
        for caller, cell in moves:
            game = self.service.make_move(index, caller, "PLACE", cell)
            self.assertFalse(game["is_finished"])

        game = self.service.make_move(index, "alice", "PLACE", Cell(0, 1))
        self.assertTrue(game["is_finished"])

        with self.assertRaises(GameAlreadyFinished):
            self.service.make_move(index, "bob", "PLACE", Cell(1, 0))
        self.assertEqual(self.service.get_game(index), game)
        self.assertEqual(self.service.get_game(index), self.service.get_game(index))

    def test_given_bad_requests_when_moving_then_rejected_without_state_change(self):
        index = self.service.create_game("alice", "bob", 5)
        self.service.make_move(index, "alice", "PLACE", Cell(2, 2))
        before = self.service.get_game(index)
        labels_before = self._labels(index).to_bytes()

        failing = [
            (GameNotFound, (99, "bob", "PLACE", Cell(0, 0))),
            (MalformedRequest, (index, "bob", "PLACE", None)),
            (MalformedRequest, (index, "bob", "SWAP", Cell(0, 0))),
            (MalformedRequest, (index, "bob", "RESIGN", None)),
            (UnauthorizedCaller, (index, "mallory", "PLACE", Cell(0, 0))),
            (WrongTurn, (index, "alice", "PLACE", Cell(0, 0))),
            (CellOccupied, (index, "bob", "PLACE", Cell(2, 2))),
        ]
        for _ in range(2):
            for error, args in failing:
                self.clock.height += 1
                with self.assertRaises(error):
                    self.service.make_move(*args)
                self.assertEqual(self.service.get_game(index), before)
                self.assertEqual(self._labels(index).to_bytes(), labels_before)

    def test_given_same_account_on_both_sides_when_placing_then_plays_colour_due(self):
        index = self.service.create_game("solo", "solo", 3)
        self.service.make_move(index, "solo", "PLACE", Cell(0, 0))
        game = self.service.make_move(index, "solo", "PLACE", Cell(1, 0))
        board = self._board(game)
        self.assertEqual(board.get(Cell(0, 0)), 1)
        self.assertEqual(board.get(Cell(1, 0)), 2)

    def test_given_block_height_changes_when_moving_then_audit_markers_follow(self):
        index = self.service.create_game("alice", "bob", 5)
        game = self.service.make_move(index, "alice", "PLACE", Cell(0, 0))
        self.assertEqual((game["current_block_height"], game["prev_block_height"]), (100, 0))
        self.clock.height = 105
        game = self.service.make_move(index, "bob", "PLACE", Cell(1, 0))
        self.assertEqual((game["current_block_height"], game["prev_block_height"]), (105, 100))

    def test_given_index_beyond_integer_column_when_looked_up_then_not_found(self):
        self.service.create_game("alice", "bob", 3)
        for index in (2 ** 31, 2 ** 64, 99999999999999999999, -1):
            self.assertIsNone(self.service.get_game(index))
            with self.assertRaises(GameNotFound):
                self.service.make_move(index, "alice", "PLACE", Cell(0, 0))

    def test_given_two_sessions_racing_same_turn_when_placing_then_one_move_wins(self):
        index = self.service.create_game("alice", "bob", 5)
        barrier = threading.Barrier(2)
        outcomes = []

        def play(cell):
            db = SessionLocal()
            try:
                service = GameService(db, clock=self.clock)
                barrier.wait(timeout=5)
                service.make_move(index, "alice", "PLACE", cell)
                outcomes.append("accepted")
            except WrongTurn:
                outcomes.append("wrong turn")
            finally:
                db.close()

        threads = [threading.Thread(target=play, args=(cell,)) for cell in (Cell(0, 0), Cell(4, 4))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        self.assertEqual(sorted(outcomes), ["accepted", "wrong turn"])
        game = self.service.get_game(index)
        self.assertEqual(game["turn"], 1)
        board = self._board(game)
        self.assertEqual(len([cell for cell in board.cells() if board.get(cell) != 0]), 1)

    def test_given_concurrent_creates_when_pushed_then_indices_distinct(self):
        barrier = threading.Barrier(4)
        indices = []

        def create(n):
            db = SessionLocal()
            try:
                barrier.wait(timeout=5)
                indices.append(GameService(db, clock=self.clock).create_game(f"p{n}", "q", 3))
            finally:
                db.close()

        threads = [threading.Thread(target=create, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        self.assertEqual(sorted(indices), [0, 1, 2, 3])
        self.assertEqual(len(self.service.store), 4)

    def test_given_debug_off_when_getting_game_then_board_not_decoded(self):
        index = self.service.create_game("alice", "bob", 3)
        with mock.patch.object(utils_mod.logger, "isEnabledFor", return_value=False), \
                mock.patch("services.utils.Board") as board_cls:
            self.assertEqual(self.service.get_game(index)["index"], index)
        board_cls.from_bytes.assert_not_called()

        with self.assertLogs("services.utils", level=logging.DEBUG) as logs:
            self.service.get_game(index)
        self.assertIn(f"Game {index} board:", logs.output[0])


if __name__ == "__main__":
    unittest.main()
