from dataclasses import dataclass

from errors import MalformedRequest, OutOfBounds


# (dx, dy) of the six hex neighbours, in enumeration order
HEX_DIRECTIONS = [(-1, 0), (0, -1), (1, -1), (1, 0), (0, 1), (-1, 1)]


@dataclass(frozen=True)
class Cell:
    x: int
    y: int

    def in_bounds(self, size: int) -> bool:
        return 0 <= self.x < size and 0 <= self.y < size

    def neighbours(self, size: int) -> list["Cell"]:
        """Hex-adjacent cells that lie on a board of the given size."""
        if not self.in_bounds(size):
            raise OutOfBounds(f"Cell ({self.x}, {self.y}) is out of bounds.")
        result = []
        for dx, dy in HEX_DIRECTIONS:
            nx, ny = self.x + dx, self.y + dy
            if 0 <= nx < size and 0 <= ny < size:
                result.append(Cell(nx, ny))
        return result

    def reflect(self) -> "Cell":
        """Mirror across the main diagonal (used by the swap rule)."""
        return Cell(self.y, self.x)

    def to_dict(self):
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data) -> "Cell":
        if not isinstance(data, dict):
            raise MalformedRequest("Cell must be an object with integer x and y.")
        x, y = data.get("x"), data.get("y")
        # bool is an int subclass, reject it explicitly
        if any(not isinstance(v, int) or isinstance(v, bool) for v in (x, y)):
            raise MalformedRequest("Cell must be an object with integer x and y.")
        return cls(x, y)
