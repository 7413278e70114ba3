# tests/conftest.py
import random
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so the top-level modules import without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from online_helpers import GameTimer  # noqa: E402
from sudoku_session import SessionState  # noqa: E402
from sudoku_utils import PuzzleSpec, copy_board  # noqa: E402

SOLUTION = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]

INITIAL = [
    [5, 3, 0, 0, 7, 0, 0, 0, 0],
    [6, 0, 0, 1, 9, 5, 0, 0, 0],
    [0, 9, 0, 0, 0, 0, 0, 6, 0],
    [8, 0, 0, 0, 6, 0, 0, 0, 3],
    [4, 0, 0, 8, 0, 3, 0, 0, 1],
    [7, 0, 0, 0, 2, 0, 0, 0, 6],
    [0, 6, 0, 0, 0, 0, 2, 8, 0],
    [0, 0, 0, 4, 1, 9, 0, 0, 5],
    [0, 0, 0, 0, 8, 0, 0, 7, 9],
]


@pytest.fixture
def solution():
    return copy_board(SOLUTION)


@pytest.fixture
def initial():
    return copy_board(INITIAL)


@pytest.fixture
def puzzle_spec():
    return PuzzleSpec(INITIAL, SOLUTION, "easy")


@pytest.fixture
def one_blank_spec():
    almost = copy_board(SOLUTION)
    almost[8][8] = 0
    return PuzzleSpec(almost, SOLUTION, "easy")


@pytest.fixture
def full_spec():
    return PuzzleSpec(SOLUTION, SOLUTION, "easy")


def make_session(spec):
    session = SessionState(timer=GameTimer(), rng=random.Random(1234))
    session.start_game(spec, background_timer=False)
    return session


@pytest.fixture
def session(puzzle_spec):
    return make_session(puzzle_spec)


@pytest.fixture
def session_factory():
    return make_session
