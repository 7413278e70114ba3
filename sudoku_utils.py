# sudoku_utils.py
GRID_SIZE = 9
BOX_SIZE = 3
EMPTY = 0

DIFFICULTY_LEVELS = ("easy", "medium", "hard")
DEFAULT_DIFFICULTY = "easy"


def copy_board(board):
    if not board: return None
    return [list(row) for row in board]


def empty_board():
    return [[EMPTY for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]


def is_valid_digit(value, allow_empty=True):
    # bool is an int subclass; True must not pass for 1
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    low = EMPTY if allow_empty else 1
    return low <= value <= GRID_SIZE


def is_valid_grid(grid, allow_empty=True):
    if not isinstance(grid, (list, tuple)) or len(grid) != GRID_SIZE:
        return False
    for row in grid:
        if not isinstance(row, (list, tuple)) or len(row) != GRID_SIZE:
            return False
        if not all(is_valid_digit(v, allow_empty) for v in row):
            return False
    return True


def is_in_bounds(r, c):
    for idx in (r, c):
        if isinstance(idx, bool) or not isinstance(idx, int) or not (0 <= idx < GRID_SIZE):
            return False
    return True


def find_empty_cells(board):
    return [(r, c) for r in range(GRID_SIZE) for c in range(GRID_SIZE) if board[r][c] == EMPTY]


def is_board_full(board):
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            if board[r][c] == EMPTY:
                return False
    return True


def check_win(board, solution):
    """True iff every cell is filled and matches the solution."""
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            val = board[r][c]
            if val == EMPTY or val != solution[r][c]:
                return False
    return True


def find_conflicts(board, solution):
    """
    Cells holding a wrong digit compared with the solution.
    Empty cells are never conflicts.
    """
    conflicting_cells = set()
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            val = board[r][c]
            if val != EMPTY and val != solution[r][c]:
                conflicting_cells.add((r, c))
    return frozenset(conflicting_cells)


def parse_cell_value(value):
    """
    Normalizes player input to 0..9, or returns None when the input is not acceptable.
    Accepts None / "" / 0 for clearing, ints 1-9 and single digit strings as typed in a cell.
    """
    if value is None:
        return EMPTY
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return EMPTY
        # ASCII only: str.isdigit() also accepts "²" and full-width digits
        if len(value) != 1 or value not in "0123456789":
            return None
        value = int(value)
    if not is_valid_digit(value):
        return None
    return value


class PuzzleSpec:
    """
    The immutable (initial, solution) pair for one round, as delivered by the puzzle oracle.
    The lock mask is derived from `initial`: a cell is locked iff it holds a given digit.
    """

    __slots__ = ("_initial", "_solution", "_difficulty")

    def __init__(self, initial, solution, difficulty=DEFAULT_DIFFICULTY):
        if not is_valid_grid(initial):
            raise ValueError("Puzzle grid must be 9x9 with digits 0-9.")
        if not is_valid_grid(solution, allow_empty=False):
            raise ValueError("Solution grid must be 9x9 with digits 1-9.")
        self._initial = tuple(tuple(row) for row in initial)
        self._solution = tuple(tuple(row) for row in solution)
        self._difficulty = difficulty

    @classmethod
    def from_payload(cls, payload, difficulty=None):
        if not isinstance(payload, dict):
            raise ValueError("New game payload must be a JSON object.")
        level = difficulty or payload.get("difficulty") or DEFAULT_DIFFICULTY
        return cls(payload.get("puzzle"), payload.get("solution"), level)

    @property
    def initial(self):
        return copy_board(self._initial)

    @property
    def solution(self):
        return copy_board(self._solution)

    @property
    def difficulty(self):
        return self._difficulty

    def is_locked(self, r, c):
        return self._initial[r][c] != EMPTY

    def __repr__(self):
        givens = sum(1 for row in self._initial for v in row if v != EMPTY)
        return f"PuzzleSpec(difficulty={self._difficulty!r}, givens={givens})"
