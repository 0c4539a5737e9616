from collections import deque
import logging

from models.board import Board, FIRST_COLOR
from models.cell import Cell
from .game_logic import HexGame

logger = logging.getLogger(__name__)

UNLABELED = 0
FIRST_EDGE = 1
SECOND_EDGE = 2


class ConnectivityTracker:
    """
    Incremental win detection.

    Keeps a label board the size of the game board. A labeled cell is known to
    be chained (through stones of its current colour) to that colour's first
    edge (label 1) or second edge (label 2). Colour 1 joins row y=0 to row
    y=size-1, colour 2 joins column x=0 to column x=size-1.
    """

    def __init__(self, game: HexGame, labels: Board = None):
        self.game = game
        self.labels = labels if labels is not None else Board(game.board.size)

    @property
    def size(self) -> int:
        return self.labels.size

    def touches_edges(self, cell: Cell, color: int) -> tuple[bool, bool]:
        if color == FIRST_COLOR:
            return cell.y == 0, cell.y + 1 == self.size
        return cell.x == 0, cell.x + 1 == self.size

    def _same_color_neighbours(self, cell: Cell, color: int) -> list[Cell]:
        board = self.game.board
        return [c for c in cell.neighbours(self.size) if board.get(c) == color]

    def process_cell(self, cell: Cell):
        """Update labels after a stone lands on ``cell``; flags the game on a win."""
        color = self.game.board.get(cell)
        edge1, edge2 = self.touches_edges(cell, color)
        friends = self._same_color_neighbours(cell, color)
        reaches1 = edge1 or any(self.labels.get(c) == FIRST_EDGE for c in friends)
        reaches2 = edge2 or any(self.labels.get(c) == SECOND_EDGE for c in friends)

        if reaches1 and reaches2:
            self._finish(cell)
        elif reaches1:
            self._flood(cell, color, FIRST_EDGE)
        elif reaches2:
            self._flood(cell, color, SECOND_EDGE)

    def _flood(self, start: Cell, color: int, border: int):
        self.labels.set(start, border)
        queue = deque([start])

        while queue:
            current = queue.popleft()
            fresh = [
                c for c in self._same_color_neighbours(current, color)
                if self.labels.get(c) != border
            ]
            # anything labeled here carries the other edge: the chains just met
            if any(self.labels.get(c) != UNLABELED for c in fresh):
                self._finish(start)
                return
            for c in fresh:
                self.labels.set(c, border)
                queue.append(c)

    def discard(self, cell: Cell):
        """Forget the label of a cell whose stone was taken back by the swap."""
        self.labels.set(cell, UNLABELED)

    def _finish(self, cell: Cell):
        self.game.is_finished = True
        logger.info("Chain completed by stone at (%d, %d) on turn %d", cell.x, cell.y, self.game.turn)
