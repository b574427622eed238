import argparse
from dataclasses import dataclass
from pathlib import Path
import shutil
import sys
import time
from typing import Callable
from typing import Optional
from typing import Sequence

from matplotlib.axes import Axes
from matplotlib.colors import ListedColormap
from matplotlib.figure import Figure
import matplotlib.pyplot as plt
import numpy as np

from guard_patrol.common.constants import DEFAULT_INPUT_FILE
from guard_patrol.common.constants import EMPTY_CODE
from guard_patrol.common.constants import GUARD_CODE
from guard_patrol.common.constants import VERBOSE
from guard_patrol.common.errors import GridError
from guard_patrol.common.types import Pos
from guard_patrol.core.direction import Direction
from guard_patrol.core.grid import Cell
from guard_patrol.core.simulator import Simulator

# Terminal lines kept free below the view for the status line and prompt
STATUS_LINES = 3


@dataclass
class PatrolConfig:
    input_file: Path = DEFAULT_INPUT_FILE
    visualise: bool = True
    show_numbers: bool = False
    max_view: Optional[int] = None
    plot_file: Optional[Path] = None
    verbose: bool = VERBOSE


@dataclass
class PatrolReport:
    """
    Final result of a patrol run.

    Attributes:
        position: Last on-grid position of the guard.
        direction: Facing of the guard when it left the grid.
        visited_cell_count: Number of distinct cells the guard stood on.
        obstacles: Loop-inducing obstacle positions, duplicates kept.
    """

    position: Pos
    direction: Direction
    visited_cell_count: int
    obstacles: list[Pos]

    @property
    def obstacle_count(self) -> int:
        return len(self.obstacles)


def run(config: PatrolConfig) -> Optional[PatrolReport]:
    """
    Load a map, patrol it and print the report.

    With `config.visualise` the run is stepped interactively in the
    terminal, otherwise it runs to completion straight away. If the user
    quits before the guard leaves the grid, only the guard's current state
    is printed and the loop analysis is skipped.

    Args:
        config: Run options.

    Returns:
        The report, or None if the run was quit early.

    Raises:
        OSError: If the input file cannot be read.
        GridError: If the map violates the input format.
    """

    verbose = config.verbose

    simulator = Simulator.from_text(config.input_file.read_text())

    if verbose:
        rows, cols = simulator.grid.dimensions()
        print(f"Maze dimensions: {rows}x{cols}")

    if config.visualise:
        run_interactive(simulator, config)
    else:
        start = time.perf_counter()
        steps = run_to_completion(simulator, verbose=verbose)

        if verbose:
            end = time.perf_counter()
            print(f"Simulated {steps} steps in {end - start:.3f} seconds\n")

    if not simulator.is_exited:
        pos, direction, visited = simulator.guard_snapshot()
        print(f"Guard position:       {pos}")
        print(f"Guard direction:      {direction.name}")
        print(f"Visited Cell Count:   {visited}")
        print("Guard is still on the grid, loop analysis skipped.")
        return None

    report = build_report(simulator, verbose=verbose)
    print_report(report)

    if config.plot_file is not None:
        fig, _ = plot_patrol(simulator, report.obstacles)
        fig.tight_layout()
        config.plot_file.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(config.plot_file, dpi=150)
        plt.close(fig)

        if verbose:
            print(f"Saved plot to {config.plot_file}")

    return report


def advance_one_step(simulator: Simulator, verbose: bool = False) -> bool:
    """
    Advance the simulation by one step.

    Returns:
        True if the guard left the grid on this step.
    """

    exited = simulator.step()

    if verbose:
        pos, direction, visited = simulator.guard_snapshot()
        state = "exited" if exited else "on grid"
        print(f"Guard at {pos} facing {direction.name}, visited={visited} ({state})")

    return exited


def run_to_completion(simulator: Simulator, verbose: bool = False) -> int:
    """
    Advance until the guard leaves the grid.

    Returns:
        Number of steps taken.
    """

    steps = 1

    while not advance_one_step(simulator, verbose=verbose):
        steps += 1

    return steps


def build_report(simulator: Simulator, verbose: bool = False) -> PatrolReport:
    """
    Collect the final report of a finished run.

    Raises:
        IncompleteHistory: If the guard has not left the grid yet.
    """

    loop_report = simulator.loop_report(verbose=verbose)
    pos, direction, visited = simulator.guard_snapshot()

    return PatrolReport(
        position=pos,
        direction=direction,
        visited_cell_count=visited,
        obstacles=list(loop_report.obstacles),
    )


def print_report(report: PatrolReport) -> None:
    print("####### Part 1 #######")
    print(f"Guard position:       {report.position}")
    print(f"Guard direction:      {report.direction.name}")
    print(f"Visited Cell Count:   {report.visited_cell_count}")
    print("")
    print("####### Part 2 #######")
    print(f"New obstacles:        {report.obstacles}")
    print(f"New obstacles count:  {report.obstacle_count}")


def render_view(
    view: np.ndarray,
    row_offset: int = 0,
    col_offset: int = 0,
    show_numbers: bool = False,
) -> str:
    """
    Render a window of cell codes as text.

    Each cell takes a two-character column, separated by a space:
        .           empty cell
        #           obstacle
        X           visited cell
        ^ v < >     guard, facing up / down / left / right

    With `show_numbers`, a header of column numbers and a leading column of
    row numbers are added, both in grid coordinates (the offsets are added).
    Column numbers are printed modulo 100 to keep the two-character width.

    Args:
        view: 2D array of cell codes, e.g. from `Simulator.current_view`.
        row_offset: Grid row of the view's first row.
        col_offset: Grid column of the view's first column.
        show_numbers: If True, label rows and columns.

    Returns:
        The rendered view, one line per row.
    """

    n_rows, n_cols = view.shape
    lines = []

    if show_numbers:
        label_width = len(str(row_offset + max(n_rows - 1, 0)))
        header = " ".join(f"{(col_offset + c) % 100:<2d}" for c in range(n_cols))
        lines.append(f"{'':{label_width}s} {header}".rstrip())

    for r in range(n_rows):
        row_str = " ".join(f"{Cell.from_code(code).symbol():2s}" for code in view[r])

        if show_numbers:
            row_str = f"{row_offset + r:>{label_width}d} {row_str}"

        lines.append(row_str.rstrip())

    return "\n".join(lines)


def viewport_size(config: PatrolConfig) -> tuple[int, int]:
    """
    Number of grid rows and columns that fit the terminal.

    Every cell is three characters wide. `config.max_view` caps both
    dimensions and is never taken below 1.
    """

    terminal = shutil.get_terminal_size()

    reserved_lines = STATUS_LINES + (1 if config.show_numbers else 0)
    reserved_cols = 5 if config.show_numbers else 0

    rows = max(1, terminal.lines - reserved_lines)
    cols = max(1, (terminal.columns - reserved_cols) // 3)

    if config.max_view is not None:
        limit = max(1, config.max_view)
        rows = min(rows, limit)
        cols = min(cols, limit)

    return rows, cols


def run_interactive(
    simulator: Simulator,
    config: PatrolConfig,
    read_key: Callable[[str], str] = input,
) -> bool:
    """
    Step through the patrol from the terminal.

    Keys:
        m   move the guard one step
        q   quit

    Args:
        simulator: Simulation to drive.
        config: Run options (viewport limits, row/column numbers, verbosity).
        read_key: Prompt function, `input` by default.

    Returns:
        True if the guard left the grid, False if the user quit first.
    """

    while True:
        max_rows, max_cols = viewport_size(config)

        if config.verbose:
            print(f"Viewable grid size: {max_rows} rows, {max_cols} cols")

        view, row_offset, col_offset = simulator.current_view(max_rows, max_cols)
        print(render_view(view, row_offset, col_offset, config.show_numbers))

        pos, direction, visited = simulator.guard_snapshot()
        print(f"Guard {pos} {direction.symbol()}  visited: {visited}")

        try:
            key = read_key("[m]ove, [q]uit > ").strip().lower()
        except EOFError:
            return False

        if key == "q":
            return False

        if key == "m" and advance_one_step(simulator, verbose=config.verbose):
            return True


def plot_patrol(
    simulator: Simulator,
    obstacles: Sequence[Pos],
    fig: Optional[Figure] = None,
    ax: Optional[Axes] = None,
) -> tuple[Figure, Axes]:
    """
    Plot the grid, the guard's path and the inferred loop obstacles.

    Cells are drawn with `imshow` (empty white, obstacles black, visited
    light blue, guard red). The path connects the history positions in
    order and the obstacles are circled.

    No files are saved here; the caller is responsible for saving the
    figure (e.g. via `fig.savefig(...)`).

    Args:
        simulator: Simulation whose grid and history are drawn.
        obstacles: Loop-inducing obstacle positions to mark.
        fig: Optional figure to draw into, given together with `ax`.
        ax: Optional axes to draw into. If None, a new figure is created.

    Returns:
        (fig, ax): The figure and axes containing the plot.
    """

    if fig is None or ax is None:
        fig, ax = plt.subplots(figsize=(7, 7))

    rows, cols = simulator.grid.dimensions()

    # All guard facings share one color
    image = np.minimum(simulator.grid.view(0, rows, 0, cols), GUARD_CODE)
    cmap = ListedColormap(["white", "black", "lightskyblue", "red"])
    ax.imshow(image, cmap=cmap, vmin=EMPTY_CODE, vmax=GUARD_CODE)

    history = simulator.guard.history()

    if history:
        path = np.array([pos for pos, _ in history])
        ax.plot(path[:, 1], path[:, 0], color="tab:blue", linewidth=1, label="path")

    if obstacles:
        marks = np.array(obstacles)
        ax.scatter(
            marks[:, 1],
            marks[:, 0],
            s=120,
            facecolors="none",
            edgecolors="tab:orange",
            linewidths=2,
            label="loop obstacle",
        )

    _, _, visited = simulator.guard_snapshot()
    ax.set_title(
        f"Grid {rows}×{cols} (visited={visited}, loop obstacles={len(obstacles)})"
    )
    ax.set_xlabel("Column")
    ax.set_ylabel("Row")

    if history or obstacles:
        ax.legend(loc="upper right", fontsize=8)

    return fig, ax


def _positive_int(value: str) -> int:
    number = int(value)

    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")

    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Simulate a patrolling guard on a map")
    p.add_argument(
        "-i",
        "--input-file",
        type=Path,
        default=DEFAULT_INPUT_FILE,
        help="Map file to load",
    )
    p.add_argument(
        "-n",
        "--no-visualisation",
        action="store_true",
        help="Run to completion without stepping in the terminal",
    )
    p.add_argument(
        "-s", "--show-numbers", action="store_true", help="Label rows and columns"
    )
    p.add_argument(
        "-m",
        "--max",
        type=_positive_int,
        default=None,
        help="Max rows/cols shown in the view",
    )
    p.add_argument(
        "-p", "--plot-file", type=Path, default=None, help="Save a plot of the run"
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Print diagnostics")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = PatrolConfig(
        input_file=args.input_file,
        visualise=not args.no_visualisation,
        show_numbers=args.show_numbers,
        max_view=args.max,
        plot_file=args.plot_file,
        verbose=args.verbose or VERBOSE,
    )

    try:
        run(config)
    except (OSError, GridError) as e:
        print(e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
