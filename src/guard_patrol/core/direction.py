from enum import Enum

from guard_patrol.common.constants import DIRECTION_SYMBOLS
from guard_patrol.common.constants import DIRECTIONS
from guard_patrol.common.errors import InvalidSymbol


class Direction(Enum):
    """
    Facing direction of the guard.

    The values index into `DIRECTIONS` and `DIRECTION_SYMBOLS`.
    """

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @classmethod
    def from_symbol(cls, symbol: str) -> "Direction":
        """
        Decode a guard marker (`^`, `v`, `<` or `>`).

        Raises:
            InvalidSymbol: If `symbol` is not a guard marker.
        """

        try:
            return cls(DIRECTION_SYMBOLS.index(symbol))
        except ValueError:
            raise InvalidSymbol(symbol) from None

    def symbol(self) -> str:
        return DIRECTION_SYMBOLS[self.value]

    @property
    def delta(self) -> tuple[int, int]:
        """Unit step `(d_row, d_col)` in this direction."""
        return DIRECTIONS[self.value]

    def rotate_right(self) -> "Direction":
        """Turn 90 degrees clockwise."""
        return _CLOCKWISE[self]

    def invert(self) -> "Direction":
        return _OPPOSITE[self]


_CLOCKWISE = {
    Direction.UP: Direction.RIGHT,
    Direction.RIGHT: Direction.DOWN,
    Direction.DOWN: Direction.LEFT,
    Direction.LEFT: Direction.UP,
}

_OPPOSITE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}
