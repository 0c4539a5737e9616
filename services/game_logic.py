import logging

from errors import CellOccupied, SwapNotAllowed, WrongTurn
from models.board import Board, FIRST_COLOR, SECOND_COLOR
from models.cell import Cell

logger = logging.getLogger(__name__)


class HexGame:
    """Turn state machine: players, turn counter, stones and the finished flag."""

    def __init__(self, first_player: str, second_player: str, size: int = 11,
                 block_height: int = 0):
        self.first_player = first_player
        self.second_player = second_player
        self.turn = 0
        self.board = Board(size)
        self.current_block_height = block_height
        self.prev_block_height = 0
        self.is_finished = False

    @property
    def current_player(self) -> int:
        return self.turn % 2 + 1

    @property
    def winner(self):
        """Player number who completed the chain, None while in progress."""
        if not self.is_finished:
            return None
        return FIRST_COLOR if self.turn % 2 == 1 else SECOND_COLOR

    def place(self, cell: Cell, player: int, block_height: int):
        """Put a stone of ``player``'s colour on an empty cell."""
        if self.board.get(cell) != 0:
            raise CellOccupied("Cell is already filled.")
        if self.current_player != player:
            other = "first" if self.current_player == FIRST_COLOR else "second"
            raise WrongTurn(f"It's {other} player turn now.")

        self.board.set(cell, player)
        self.turn += 1
        self._touch_block(block_height)

    def apply_swap(self, block_height: int) -> Cell:
        """Mirror the opening stone into a second-player stone.

        Returns the cell the new stone lands on; the opening cell is its reflection.
        """
        if self.turn != 1:
            raise SwapNotAllowed("Swap rule can be applied only on the second player first turn")

        cell = self.board.first_occupied()
        target = cell.reflect()
        self.board.set(cell, 0)
        self.board.set(target, SECOND_COLOR)
        self.turn += 1
        self._touch_block(block_height)
        logger.debug("Swapped (%d, %d) -> (%d, %d)", cell.x, cell.y, target.x, target.y)
        return target

    def _touch_block(self, block_height: int):
        # audit markers only, never consulted by the rules
        if block_height != self.current_block_height:
            self.prev_block_height = self.current_block_height
            self.current_block_height = block_height
