from guard_patrol.common.types import GuardState
from guard_patrol.common.types import Pos
from guard_patrol.core.direction import Direction


class Guard:
    """
    Traversal state of the patrolling guard.

    Args:
        pos: Start position `(row, col)`.
        direction: Initial facing direction.
    """

    def __init__(self, pos: Pos, direction: Direction):
        self._pos = pos
        self._direction = direction

        # Append-only, one entry per simulation step, taken before the step
        self._history: list[GuardState] = []

    def __repr__(self) -> str:
        return (
            f"Guard(pos={self._pos}, direction={self._direction.name}, "
            f"steps={len(self._history)})"
        )

    def position(self) -> Pos:
        return self._pos

    def direction(self) -> Direction:
        return self._direction

    def record_snapshot(self) -> None:
        """Append the current `(pos, direction)` to the history."""
        self._history.append((self._pos, self._direction))

    def rotate(self) -> None:
        """Turn clockwise in place."""
        self._direction = self._direction.rotate_right()

    def relocate(self, pos: Pos) -> None:
        self._pos = pos

    def visited_cell_count(self) -> int:
        """
        Number of distinct cells in the history, regardless of facing.
        """

        return len({pos for pos, _ in self._history})

    def history(self) -> tuple[GuardState, ...]:
        return tuple(self._history)
