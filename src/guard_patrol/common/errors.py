from typing import Optional


class GridError(ValueError):
    """
    Base class for input contract violations raised while building a grid.

    Args:
        message: Human readable description of the violation.
        row: Row of the offending cell or line, if known.
        col: Column of the offending cell, if known.
    """

    def __init__(
        self, message: str, row: Optional[int] = None, col: Optional[int] = None
    ):
        if row is not None and col is not None:
            message = f"{message} (row {row}, col {col})"
        elif row is not None:
            message = f"{message} (row {row})"

        super().__init__(message)
        self.row = row
        self.col = col


class MalformedGrid(GridError):
    """The input is empty or its lines do not all have the same length."""


class InvalidSymbol(GridError):
    """A character outside the map alphabet `. # ^ v < >` was found."""

    def __init__(
        self, symbol: str, row: Optional[int] = None, col: Optional[int] = None
    ):
        super().__init__(f"Invalid symbol: {symbol!r}", row, col)
        self.symbol = symbol


class MultipleGuardsFound(GridError):
    """A second guard start marker was found in the input."""


class NoGuardFound(GridError):
    """The input contains no guard start marker."""


class SimulationFinished(RuntimeError):
    """The guard has already left the grid; no further steps are possible."""


class IncompleteHistory(RuntimeError):
    """Loop analysis was requested before the guard left the grid."""
