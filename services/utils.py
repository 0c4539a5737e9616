import logging
import time

from models.board import Board

logger = logging.getLogger(__name__)


class BlockClock:
    """Monotonic block counter: wall-clock time bucketed into fixed intervals."""

    def __init__(self, interval_seconds: float = 1.0):
        self.interval_seconds = interval_seconds

    def __call__(self) -> int:
        return int(time.time() // self.interval_seconds)


def log_board(title: str, board: Board):
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s\n%s", title, board.pretty())


def log_field(title: str, size: int, field: bytes):
    """Like log_board, but only decodes the stored bytes when DEBUG is on."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s\n%s", title, Board.from_bytes(size, field).pretty())
