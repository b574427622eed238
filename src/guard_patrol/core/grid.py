from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from guard_patrol.common.constants import EMPTY_CODE
from guard_patrol.common.constants import EMPTY_SYMBOL
from guard_patrol.common.constants import GUARD_CODE
from guard_patrol.common.constants import OBSTACLE_CODE
from guard_patrol.common.constants import OBSTACLE_SYMBOL
from guard_patrol.common.constants import VISITED_CODE
from guard_patrol.common.constants import VISITED_SYMBOL
from guard_patrol.common.errors import InvalidSymbol
from guard_patrol.common.errors import MalformedGrid
from guard_patrol.common.errors import MultipleGuardsFound
from guard_patrol.common.errors import NoGuardFound
from guard_patrol.common.types import CellCode
from guard_patrol.core.direction import Direction
from guard_patrol.core.guard import Guard


class CellKind(Enum):
    EMPTY = EMPTY_CODE
    OBSTACLE = OBSTACLE_CODE
    VISITED = VISITED_CODE
    GUARD = GUARD_CODE


@dataclass(frozen=True)
class Cell:
    """
    A single grid cell. `direction` is set only for `CellKind.GUARD`.
    """

    kind: CellKind
    direction: Optional[Direction] = None

    def __post_init__(self):
        if (self.kind is CellKind.GUARD) != (self.direction is not None):
            raise ValueError(
                f"A {self.kind.name} cell cannot have direction {self.direction}"
            )

    @classmethod
    def guard(cls, direction: Direction) -> "Cell":
        return cls(CellKind.GUARD, direction)

    @classmethod
    def from_code(cls, code: CellCode) -> "Cell":
        code = int(code)

        if code >= GUARD_CODE:
            return cls.guard(Direction(code - GUARD_CODE))

        return cls(CellKind(code))

    def to_code(self) -> CellCode:
        if self.kind is CellKind.GUARD:
            return GUARD_CODE + self.direction.value

        return self.kind.value

    def symbol(self) -> str:
        if self.kind is CellKind.GUARD:
            return self.direction.symbol()

        return _KIND_SYMBOLS[self.kind]


EMPTY = Cell(CellKind.EMPTY)
OBSTACLE = Cell(CellKind.OBSTACLE)
VISITED = Cell(CellKind.VISITED)

_KIND_SYMBOLS = {
    CellKind.EMPTY: EMPTY_SYMBOL,
    CellKind.OBSTACLE: OBSTACLE_SYMBOL,
    CellKind.VISITED: VISITED_SYMBOL,
}


class Grid:
    """
    Fixed-size map of cells, stored row-major as a numpy array of cell codes.

    Args:
        cells: 2D integer array of cell codes. The grid takes ownership of it.
    """

    def __init__(self, cells: np.ndarray):
        if cells.ndim != 2:
            raise MalformedGrid(f"Expected a 2D cell array, got {cells.ndim}D")

        self._cells = cells

    @classmethod
    def build(cls, text: str) -> tuple["Grid", Guard]:
        """
        Parse a map and locate the guard.

        Blank lines are dropped. Every remaining line must have the same
        length. Characters are read in row-major order:
            .           empty cell
            #           obstacle
            ^ v < >     guard start, facing up / down / left / right

        Args:
            text: The map, one row per line.

        Returns:
            (grid, guard): The grid with the start cell marked as the guard,
            and the guard placed on its start cell.

        Raises:
            MalformedGrid: If the map is empty or its lines differ in length.
            InvalidSymbol: If a character outside the alphabet is found.
            MultipleGuardsFound: If more than one guard start is found.
            NoGuardFound: If no guard start is found.
        """

        # Lines are not stripped: whitespace inside a row is an invalid symbol
        lines = [line for line in text.splitlines() if line.strip()]

        if not lines:
            raise MalformedGrid("Map is empty")

        row_length = len(lines[0])

        for row, line in enumerate(lines):
            if len(line) != row_length:
                raise MalformedGrid(
                    f"Line has length {len(line)}, expected {row_length}", row
                )

        cells = np.full((len(lines), row_length), EMPTY_CODE, dtype=np.int8)
        guard = None

        for row, line in enumerate(lines):
            for col, symbol in enumerate(line):
                if symbol == OBSTACLE_SYMBOL:
                    cells[row, col] = OBSTACLE_CODE
                elif symbol == EMPTY_SYMBOL:
                    continue
                else:
                    try:
                        direction = Direction.from_symbol(symbol)
                    except InvalidSymbol:
                        raise InvalidSymbol(symbol, row, col) from None

                    if guard is not None:
                        raise MultipleGuardsFound(
                            "Found a second guard start", row, col
                        )

                    guard = Guard((row, col), direction)
                    cells[row, col] = Cell.guard(direction).to_code()

        if guard is None:
            raise NoGuardFound("Map has no guard start")

        return cls(cells), guard

    def dimensions(self) -> tuple[int, int]:
        """Return `(rows, cols)`."""
        rows, cols = self._cells.shape
        return rows, cols

    def is_in_bounds(self, row: int, col: int) -> bool:
        rows, cols = self._cells.shape
        return 0 <= row < rows and 0 <= col < cols

    def cell_at(self, row: int, col: int) -> Cell:
        """
        Read a cell.

        Raises:
            IndexError: If `(row, col)` lies outside the grid.
        """

        if not self.is_in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the grid")

        return Cell.from_code(self._cells[row, col])

    def set_cell(self, row: int, col: int, cell: Cell) -> None:
        if not self.is_in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the grid")

        self._cells[row, col] = cell.to_code()

    def view(
        self, row_start: int, row_end: int, col_start: int, col_end: int
    ) -> np.ndarray:
        """
        Return a read-only window `[row_start:row_end, col_start:col_end]`
        of the cell codes. The window shares memory with the grid, so it
        reflects later simulation steps.
        """

        window = self._cells[row_start:row_end, col_start:col_end]
        window.flags.writeable = False

        return window

    def count(self, kind: CellKind) -> int:
        """Count the cells of a given kind."""

        if kind is CellKind.GUARD:
            return int(np.count_nonzero(self._cells >= GUARD_CODE))

        return int(np.count_nonzero(self._cells == kind.value))

    def render(self) -> str:
        """Render the grid in the map alphabet, visited cells as `X`."""
        return render_cells(self._cells)


def render_cells(cells: np.ndarray) -> str:
    return "\n".join(
        "".join(Cell.from_code(code).symbol() for code in row) for row in cells
    )
