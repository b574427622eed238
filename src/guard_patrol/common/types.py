from guard_patrol.core.direction import Direction

Pos = tuple[int, int]  # (row, col)
GuardState = tuple[Pos, Direction]  # one history entry: (pos, facing)
CellCode = int  # value stored in the grid array, see common.constants
