import numpy as np

from guard_patrol.common.errors import IncompleteHistory
from guard_patrol.common.errors import SimulationFinished
from guard_patrol.common.types import Pos
from guard_patrol.core.direction import Direction
from guard_patrol.core.grid import Cell
from guard_patrol.core.grid import CellKind
from guard_patrol.core.grid import Grid
from guard_patrol.core.grid import VISITED
from guard_patrol.core.guard import Guard
from guard_patrol.core.loop_analyzer import LoopReport
from guard_patrol.core.loop_analyzer import find_loop_obstacles


class Simulator:
    """
    Step-wise patrol simulation of a single guard on a grid.

    The simulator owns the grid and the guard for the whole run. It is
    either running or, once the guard has stepped off the grid, exited.

    Args:
        grid: Grid with the guard's start cell already marked.
        guard: Guard placed on its start cell.
    """

    def __init__(self, grid: Grid, guard: Guard):
        self._grid = grid
        self._guard = guard
        self._exited = False

    @classmethod
    def from_text(cls, text: str) -> "Simulator":
        """
        Build a simulator from a map.

        Raises:
            GridError: If the map violates the input format, see `Grid.build`.
        """

        grid, guard = Grid.build(text)
        return cls(grid, guard)

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def guard(self) -> Guard:
        return self._guard

    @property
    def is_exited(self) -> bool:
        return self._exited

    def step(self) -> bool:
        """
        Perform one state transition.

        Pipeline:
            1. Record the guard's current `(pos, direction)`.
            2. Look one cell ahead in the facing direction.
            3. If that cell is off the grid, mark the current cell visited
               and exit.
            4. If it is an obstacle, rotate clockwise in place.
            5. Otherwise move onto it, leaving a visited cell behind.

        Returns:
            True on the step where the guard leaves the grid, False otherwise.

        Raises:
            SimulationFinished: If the guard has already left the grid.
        """

        if self._exited:
            raise SimulationFinished("Guard has left the grid. Build a new simulator.")

        guard = self._guard
        grid = self._grid

        guard.record_snapshot()

        row, col = guard.position()
        d_row, d_col = guard.direction().delta
        next_row, next_col = row + d_row, col + d_col

        # Coordinates are signed: stepping past row or col 0 gives -1
        if not grid.is_in_bounds(next_row, next_col):
            grid.set_cell(row, col, VISITED)
            self._exited = True
            return True

        if grid.cell_at(next_row, next_col).kind is CellKind.OBSTACLE:
            guard.rotate()
            grid.set_cell(row, col, Cell.guard(guard.direction()))
            return False

        grid.set_cell(row, col, VISITED)
        guard.relocate((next_row, next_col))
        grid.set_cell(next_row, next_col, Cell.guard(guard.direction()))

        return False

    def run_to_completion(self) -> int:
        """
        Step until the guard leaves the grid.

        There is no step budget: the map must let the guard escape.

        Returns:
            Number of steps taken by this call.
        """

        steps = 1

        while not self.step():
            steps += 1

        return steps

    def current_view(
        self, max_rows: int, max_cols: int
    ) -> tuple[np.ndarray, int, int]:
        """
        Return the part of the grid that fits a `max_rows` x `max_cols`
        viewport.

        When the viewport covers the whole grid, the whole grid is returned
        with zero offsets. Otherwise the window is centered on the guard and
        clamped to the grid edges.

        Returns:
            (view, row_offset, col_offset): A read-only array of cell codes
            and the grid coordinates of its top-left cell.
        """

        rows, cols = self._grid.dimensions()

        if max_rows >= rows and max_cols >= cols:
            return self._grid.view(0, rows, 0, cols), 0, 0

        guard_row, guard_col = self._guard.position()

        row_start = _window_start(guard_row, max_rows, rows)
        col_start = _window_start(guard_col, max_cols, cols)
        row_end = min(rows, row_start + max_rows)
        col_end = min(cols, col_start + max_cols)

        return (
            self._grid.view(row_start, row_end, col_start, col_end),
            row_start,
            col_start,
        )

    def guard_snapshot(self) -> tuple[Pos, Direction, int]:
        """Return `(pos, direction, visited_cell_count)` for status display."""

        guard = self._guard
        return guard.position(), guard.direction(), guard.visited_cell_count()

    def loop_report(self, verbose: bool = False) -> LoopReport:
        """
        Analyze the finished run for loop-inducing obstacle positions.

        Raises:
            IncompleteHistory: If the guard is still on the grid.
        """

        if not self._exited:
            raise IncompleteHistory(
                "Guard is still on the grid. Run the simulation to completion first."
            )

        return find_loop_obstacles(self._guard.history(), verbose=verbose)


def _window_start(center: int, size: int, limit: int) -> int:
    # Keep the window inside [0, limit) while centering it where possible
    start = max(0, center - size // 2)
    return max(0, min(start, limit - size))
