from dataclasses import dataclass
from dataclasses import field
from typing import Optional
from typing import Sequence

from guard_patrol.common.types import GuardState
from guard_patrol.common.types import Pos
from guard_patrol.core.direction import Direction

# Directions a turn event may carry when it follows a turn event facing the key.
# Consecutive turns of a real run always differ by one clockwise rotation.
TURN_TABLE: dict[Direction, tuple[Direction, Direction]] = {
    Direction.UP: (Direction.RIGHT, Direction.DOWN),
    Direction.DOWN: (Direction.LEFT, Direction.UP),
    Direction.LEFT: (Direction.UP, Direction.RIGHT),
    Direction.RIGHT: (Direction.DOWN, Direction.LEFT),
}


@dataclass
class LoopReport:
    """
    Result of the loop analysis.

    Attributes:
        obstacles: Inferred obstacle positions in discovery order. A position
            is listed once per window that produced it.
        turn_events: The turn events the windows were taken from.
    """

    obstacles: list[Pos] = field(default_factory=list)
    turn_events: list[GuardState] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.obstacles)

    def distinct(self) -> list[Pos]:
        """Obstacle positions without repeats, in first-seen order."""
        return list(dict.fromkeys(self.obstacles))


def turn_events(history: Sequence[GuardState]) -> list[GuardState]:
    """
    Extract the turn events from a guard history.

    A turn event is an entry whose direction differs from the entry just
    before it; for each such pair the later (post-turn) entry is kept.

    Args:
        history: Chronological `(pos, direction)` entries.

    Returns:
        The turn events, in chronological order.
    """

    return [
        after
        for before, after in zip(history, history[1:])
        if before[1] != after[1]
    ]


def is_coherent_turn(before: Direction, after: Direction) -> bool:
    """Check `after` against the turn table entry for `before`."""
    return after in TURN_TABLE[before]


def infer_obstacle(
    w0: GuardState, w1: GuardState, w2: GuardState
) -> Optional[Pos]:
    """
    Infer the obstacle that closes the rectangle traced by three turn events.

    The leg `w1 -> w2` is axis aligned, so its length is the larger of the
    row and column distances. The obstacle lies that far plus one cell from
    `w1`, along `w1`'s direction.

    Returns:
        The inferred position, or None if the window is not a coherent
        sequence of turns or the position would have a negative coordinate.
    """

    if not is_coherent_turn(w0[1], w1[1]):
        return None

    (row1, col1), direction = w1
    (row2, col2), _ = w2
    magnitude = max(abs(row2 - row1), abs(col2 - col1))

    d_row, d_col = direction.delta
    row = row1 + d_row * (magnitude + 1)
    col = col1 + d_col * (magnitude + 1)

    if row < 0 or col < 0:
        return None

    return row, col


def find_loop_obstacles(
    history: Sequence[GuardState], verbose: bool = False
) -> LoopReport:
    """
    Find every single obstacle placement that would close a patrol loop.

    A window of three consecutive turn events `[w0, w1, w2]` traces three
    sides of a rectangle; the obstacle inferred by `infer_obstacle` supplies
    the fourth corner. Windows whose turns are not coherent are skipped.

    The history should come from a run in which the guard left the grid.
    Fewer than three turn events give an empty report.

    Args:
        history: Chronological `(pos, direction)` entries of a finished run.
        verbose: If True, print the turn events and each accepted window.

    Returns:
        A `LoopReport` with the inferred positions (duplicates kept).
    """

    events = turn_events(history)
    report = LoopReport(turn_events=events)

    if verbose:
        print(f"Turn events: {len(events)}")
        for pos, direction in events:
            print(f"  {pos} {direction.name}")

    for i in range(len(events) - 2):
        w0, w1, w2 = events[i : i + 3]
        obstacle = infer_obstacle(w0, w1, w2)

        if obstacle is None:
            continue

        if verbose:
            print(f"Window {i}: {w0[0]} -> {w1[0]} -> {w2[0]} closes at {obstacle}")

        report.obstacles.append(obstacle)

    return report
