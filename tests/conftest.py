import pytest

from guard_patrol.core.simulator import Simulator

SMALL_MAP = """
....#.
.....#
......
..#...
..^...
#.....
"""

SAMPLE_MAP = """
....#.....
.........#
..........
..#.......
.......#..
..........
.#..^.....
........#.
#.........
......#...
"""


@pytest.fixture
def small_map() -> str:
    return SMALL_MAP


@pytest.fixture
def sample_map() -> str:
    return SAMPLE_MAP


@pytest.fixture
def finished_sample() -> Simulator:
    simulator = Simulator.from_text(SAMPLE_MAP)
    simulator.run_to_completion()
    return simulator
