# models/board.py
import numpy as np

from errors import ConfigError, InvalidValue, OutOfBounds
from .cell import Cell

MAX_BOARD_SIZE = 19

EMPTY = 0
FIRST_COLOR = 1
SECOND_COLOR = 2


class Board:
    """Square grid packed 2 bits per cell, four cells per byte.

    Cell (x, y) occupies bits ``index & 7`` and ``(index & 7) + 1`` of byte
    ``index // 8``, where ``index = (size * y + x) * 2``.
    """

    def __init__(self, size: int = 11):
        if size < 0 or size > MAX_BOARD_SIZE:
            raise ConfigError(f"The size of the field must be less or equal {MAX_BOARD_SIZE}")
        self.size = size
        self.field = np.zeros((size * size + 3) // 4, dtype=np.uint8)

    @classmethod
    def from_bytes(cls, size: int, data: bytes) -> "Board":
        board = cls(size)
        if len(data) != len(board.field):
            raise ConfigError(
                f"Field of a {size}x{size} board must be {len(board.field)} bytes, got {len(data)}"
            )
        board.field = np.frombuffer(data, dtype=np.uint8).copy()
        return board

    def to_bytes(self) -> bytes:
        return self.field.tobytes()

    def copy(self) -> "Board":
        return Board.from_bytes(self.size, self.to_bytes())

    def _locate(self, cell: Cell) -> tuple[int, int]:
        if not cell.in_bounds(self.size):
            raise OutOfBounds("Cell is out of bounds.")
        index = (self.size * cell.y + cell.x) * 2
        return index // 8, index & 7

    def get(self, cell: Cell) -> int:
        byte_index, bit_offset = self._locate(cell)
        return (int(self.field[byte_index]) >> bit_offset) & 3

    def set(self, cell: Cell, value: int):
        byte_index, bit_offset = self._locate(cell)
        if value not in (EMPTY, FIRST_COLOR, SECOND_COLOR):
            raise InvalidValue("Value is too big.")
        byte = int(self.field[byte_index])
        byte &= ~(3 << bit_offset) & 0xFF
        self.field[byte_index] = byte | (value << bit_offset)

    def coord_from_bit_index(self, n: int) -> Cell:
        """Inverse of the cell index: ``n`` counts bit pairs, not bits."""
        return Cell(n % self.size, n // self.size)

    def first_occupied(self):
        """First non-empty cell in storage order, or None on an empty board."""
        nonzero = np.flatnonzero(self.field)
        if nonzero.size == 0:
            return None
        byte_index = int(nonzero[0])
        byte = int(self.field[byte_index])
        pair = next(p for p in range(4) if (byte >> (2 * p)) & 3)
        return self.coord_from_bit_index(byte_index * 4 + pair)

    def cells(self):
        for y in range(self.size):
            for x in range(self.size):
                yield Cell(x, y)

    def pretty(self) -> str:
        """Rows shifted right by half a cell each, so hex adjacency is visible."""
        symbols = {EMPTY: ".", FIRST_COLOR: "X", SECOND_COLOR: "O"}
        lines = []
        for y in range(self.size):
            row = [symbols[self.get(Cell(x, y))] for x in range(self.size)]
            lines.append(" " * y + " ".join(row))
        return "\n".join(lines)

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self.size == other.size and self.to_bytes() == other.to_bytes()

    def __repr__(self):
        return f"Board(size={self.size}, field={self.to_bytes().hex()})"
