from dataclasses import dataclass
from typing import Optional, Union

from errors import MalformedRequest
from .cell import Cell
from .enums import MoveType


@dataclass(frozen=True)
class Place:
    cell: Cell


@dataclass(frozen=True)
class Swap:
    pass


Move = Union[Place, Swap]


def parse_move(move_type, cell: Optional[Cell] = None) -> Move:
    """Build the move variant, rejecting a cell that does not fit the move kind."""
    try:
        kind = MoveType(move_type.upper() if isinstance(move_type, str) else move_type)
    except ValueError:
        raise MalformedRequest(f"Unknown move type: {move_type!r}") from None

    if kind == MoveType.PLACE:
        if cell is None:
            raise MalformedRequest("PLACE requires a cell.")
        return Place(cell)
    if cell is not None:
        raise MalformedRequest("SWAP does not take a cell.")
    return Swap()
