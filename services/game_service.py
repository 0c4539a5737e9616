import logging
import threading

from sqlalchemy.orm import Session

from config import get_config
from errors import GameAlreadyFinished, GameNotFound, HexGameError, UnauthorizedCaller
from models.board import Board, FIRST_COLOR, SECOND_COLOR
from models.game import GameRecord
from models.moves import Place, Swap, parse_move
from .connectivity import ConnectivityTracker
from .game_logic import HexGame
from .game_store import GameStore
from .utils import BlockClock, log_board, log_field

logger = logging.getLogger(__name__)

# one writer at a time: index allocation and read-check-write of a move
_write_lock = threading.Lock()


class GameService:
    def __init__(self, db: Session, clock=None):
        self.db = db
        self.store = GameStore(db)
        self.clock = clock or BlockClock(get_config().block_interval_seconds)

    def create_game(self, first_player: str, second_player: str, size: int = None) -> int:
        # game board and label board are created together and appended as one record
        if size is None:
            size = get_config().default_board_size
        game = HexGame(first_player, second_player, size, block_height=self.clock())
        tracker = ConnectivityTracker(game)

        record = GameRecord()
        self._save(record, game, tracker)
        with _write_lock:
            index = self.store.push(record)

        logger.info("Created game %d: %s vs %s on %dx%d", index, first_player, second_player, size, size)
        log_board("Created board:", game.board)
        return index

    def get_game(self, index: int):
        record = self.store.get(index)
        if record is None:
            return None
        log_field(f"Game {index} board:", record.size, record.field)
        return record.to_dict()

    def make_move(self, index: int, caller: str, move_type, cell=None) -> dict:
        with _write_lock:
            return self._make_move(index, caller, move_type, cell)

    def _make_move(self, index: int, caller: str, move_type, cell=None) -> dict:
        # Every check runs before the first write, so a rejected move leaves the
        # stored record exactly as it was.
        try:
            record = self.store.get(index, for_update=True)
            if record is None:
                raise GameNotFound("Game doesn't exist.")
            if record.is_finished:
                raise GameAlreadyFinished("Game is already finished!")

            move = parse_move(move_type, cell)
            game, tracker = self._load(record)
            old_board = game.board.copy()
            block_height = self.clock()

            if isinstance(move, Place):
                player = self._resolve_player(game, caller)
                game.place(move.cell, player, block_height)
                tracker.process_cell(move.cell)
            elif isinstance(move, Swap):
                if caller != game.second_player:
                    raise UnauthorizedCaller("Only the second player can apply the swap rule.")
                target = game.apply_swap(block_height)
                tracker.discard(target.reflect())
                tracker.process_cell(target)
        except HexGameError as e:
            self.db.rollback()
            logger.warning("Move rejected on game %s by %s: %s", index, caller, e.message)
            raise

        log_board("Old board:", old_board)
        log_board("New board:", game.board)
        if game.is_finished:
            logger.info("Game %d: %s player wins!", index,
                        "First" if game.winner == FIRST_COLOR else "Second")

        self._save(record, game, tracker)
        snapshot = record.to_dict()
        self.store.replace(index, record)
        return snapshot

    def _resolve_player(self, game: HexGame, caller: str) -> int:
        is_first = caller == game.first_player
        is_second = caller == game.second_player
        if is_first and is_second:
            # same account on both sides plays whichever colour is due
            return game.current_player
        if is_first:
            return FIRST_COLOR
        if is_second:
            return SECOND_COLOR
        raise UnauthorizedCaller("Incorrect predecessor account.")

    def _load(self, record: GameRecord):
        game = HexGame(record.first_player, record.second_player, record.size)
        game.turn = record.turn
        game.board = Board.from_bytes(record.size, record.field)
        game.current_block_height = record.current_block_height
        game.prev_block_height = record.prev_block_height
        game.is_finished = record.is_finished
        tracker = ConnectivityTracker(game, Board.from_bytes(record.size, record.labels))
        return game, tracker

    def _save(self, record: GameRecord, game: HexGame, tracker: ConnectivityTracker):
        record.first_player = game.first_player
        record.second_player = game.second_player
        record.turn = game.turn
        record.size = game.board.size
        record.field = game.board.to_bytes()
        record.labels = tracker.labels.to_bytes()
        record.current_block_height = game.current_block_height
        record.prev_block_height = game.prev_block_height
        record.is_finished = game.is_finished
