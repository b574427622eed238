import pytest

from guard_patrol.common.errors import IncompleteHistory
from guard_patrol.common.errors import SimulationFinished
from guard_patrol.core.direction import Direction
from guard_patrol.core.grid import Cell
from guard_patrol.core.grid import CellKind
from guard_patrol.core.grid import VISITED
from guard_patrol.core.simulator import Simulator


def test_small_map_reference_run(small_map):
    """The 6x6 map: blocked at once, turns right and walks off the east edge."""
    simulator = Simulator.from_text(small_map)

    steps = simulator.run_to_completion()

    assert steps == 5
    assert simulator.is_exited
    assert simulator.guard.history() == (
        ((4, 2), Direction.UP),
        ((4, 2), Direction.RIGHT),
        ((4, 3), Direction.RIGHT),
        ((4, 4), Direction.RIGHT),
        ((4, 5), Direction.RIGHT),
    )
    assert simulator.guard_snapshot() == ((4, 5), Direction.RIGHT, 4)
    assert simulator.loop_report().obstacles == []


def test_sample_map_reference_run(sample_map):
    simulator = Simulator.from_text(sample_map)

    steps = simulator.run_to_completion()

    assert steps == 55
    assert len(simulator.guard.history()) == 55
    assert simulator.guard_snapshot() == ((9, 7), Direction.DOWN, 41)

    report = simulator.loop_report()
    assert report.count == 8


def test_grid_markings_after_run(finished_sample):
    grid = finished_sample.grid

    assert grid.count(CellKind.VISITED) == 41
    assert grid.count(CellKind.GUARD) == 0
    assert grid.count(CellKind.OBSTACLE) == 8
    assert grid.cell_at(9, 7) == VISITED


def test_runs_are_deterministic(sample_map):
    first = Simulator.from_text(sample_map)
    second = Simulator.from_text(sample_map)

    first.run_to_completion()
    second.run_to_completion()

    assert first.guard.history() == second.guard.history()
    assert first.grid.render() == second.grid.render()


def test_straight_path_visits_every_cell_to_the_edge():
    simulator = Simulator.from_text(".....\n..>..\n.....")

    simulator.run_to_completion()

    assert simulator.guard.visited_cell_count() == 3
    assert simulator.grid.render() == ".....\n..XXX\n....."


def test_exit_past_row_zero():
    simulator = Simulator.from_text("..\n^.")

    assert simulator.step() is False
    assert simulator.step() is True
    assert simulator.guard.position() == (0, 0)
    assert simulator.guard.visited_cell_count() == 2


def test_exit_past_col_zero():
    simulator = Simulator.from_text("<.")

    assert simulator.step() is True
    assert simulator.grid.render() == "X."


def test_step_returns_true_exactly_once(sample_map):
    simulator = Simulator.from_text(sample_map)

    results = []
    while not simulator.is_exited:
        results.append(simulator.step())

    assert results.count(True) == 1
    assert results[-1] is True

    with pytest.raises(SimulationFinished):
        simulator.step()


def test_collision_rotates_clockwise_without_moving():
    simulator = Simulator.from_text(".#.\n.^.\n...")

    assert simulator.step() is False
    assert simulator.guard.position() == (1, 1)
    assert simulator.guard.direction() == Direction.RIGHT
    assert simulator.grid.cell_at(1, 1) == Cell.guard(Direction.RIGHT)


def test_double_collision_turns_twice_in_place():
    simulator = Simulator.from_text(".#.\n.^#\n...")

    simulator.step()
    simulator.step()

    assert simulator.guard.position() == (1, 1)
    assert simulator.guard.direction() == Direction.DOWN

    simulator.run_to_completion()
    assert simulator.guard.position() == (2, 1)


def test_move_leaves_visited_cell_behind():
    simulator = Simulator.from_text("...\n.^.\n...")

    simulator.step()

    assert simulator.grid.cell_at(1, 1) == VISITED
    assert simulator.grid.cell_at(0, 1) == Cell.guard(Direction.UP)
    assert simulator.grid.count(CellKind.GUARD) == 1


def test_guard_walks_over_visited_cells():
    simulator = Simulator.from_text("#...\n...#\n^...\n..#.")

    simulator.run_to_completion()

    # up to row 1, right along row 1, down col 2, left along row 2 over the start
    history = simulator.guard.history()
    assert ((2, 0), Direction.UP) in history
    assert ((2, 0), Direction.LEFT) in history
    assert simulator.guard.visited_cell_count() == 6


def test_loop_report_requires_finished_run(sample_map):
    simulator = Simulator.from_text(sample_map)
    simulator.step()

    with pytest.raises(IncompleteHistory):
        simulator.loop_report()


def test_current_view_covers_whole_grid_when_it_fits(sample_map):
    simulator = Simulator.from_text(sample_map)

    view, row_offset, col_offset = simulator.current_view(10, 12)

    assert view.shape == (10, 10)
    assert (row_offset, col_offset) == (0, 0)
    assert not view.flags.writeable


def test_current_view_is_centered_on_guard(sample_map):
    simulator = Simulator.from_text(sample_map)

    view, row_offset, col_offset = simulator.current_view(4, 4)

    assert view.shape == (4, 4)
    assert (row_offset, col_offset) == (4, 2)
    assert Cell.from_code(view[2, 2]) == Cell.guard(Direction.UP)


def test_current_view_is_clamped_to_grid_edges(finished_sample):
    view, row_offset, col_offset = finished_sample.current_view(4, 4)

    assert view.shape == (4, 4)
    assert (row_offset, col_offset) == (6, 5)


def test_current_view_with_one_dimension_fitting(sample_map):
    simulator = Simulator.from_text(sample_map)

    view, row_offset, col_offset = simulator.current_view(20, 3)

    assert view.shape == (10, 3)
    assert (row_offset, col_offset) == (0, 3)
