from pathlib import Path

VERBOSE = False

DEFAULT_INPUT_FILE = Path("input/example.txt")

# Unit steps (d_row, d_col), indexed by Direction value: UP, DOWN, LEFT, RIGHT
DIRECTIONS = [(-1, 0), (1, 0), (0, -1), (0, 1)]
DIRECTION_SYMBOLS = ["^", "v", "<", ">"]

EMPTY_SYMBOL = "."
OBSTACLE_SYMBOL = "#"
VISITED_SYMBOL = "X"

# Cell codes stored in the grid array. A guard cell is GUARD_CODE + direction.
EMPTY_CODE = 0
OBSTACLE_CODE = 1
VISITED_CODE = 2
GUARD_CODE = 3
