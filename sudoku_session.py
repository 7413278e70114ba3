# sudoku_session.py
import random

from online_helpers import GameTimer
from sudoku_assist import reveal_hint, reveal_solution
from sudoku_utils import (
    EMPTY, copy_board, empty_board, is_in_bounds, is_board_full,
    check_win, find_conflicts, parse_cell_value,
)


class Activity:
    IDLE = "idle"
    ACTIVE = "active"
    WON = "won"
    STOPPED = "stopped"


class SessionState:
    """
    One round of Sudoku: the player's board, the hidden solution, the round timer and
    score eligibility. State only changes through the methods below; every property
    hands out a copy.
    """

    def __init__(self, timer=None, rng=None):
        self._timer = timer or GameTimer()
        self._rng = rng or random.Random()
        self._spec = None
        self._board = empty_board()
        self._activity = Activity.IDLE
        self._eligible = True
        self._conflicts = frozenset()
        self._last_hint = None

    # --- Observers ---
    @property
    def board(self):
        return copy_board(self._board)

    @property
    def initial(self):
        return self._spec.initial if self._spec else empty_board()

    @property
    def difficulty(self):
        return self._spec.difficulty if self._spec else None

    @property
    def activity(self):
        return self._activity

    @property
    def eligible(self):
        return self._eligible

    @property
    def elapsed(self):
        return self._timer.elapsed

    @property
    def conflicts(self):
        return self._conflicts

    @property
    def last_hint(self):
        return self._last_hint

    @property
    def can_submit_score(self):
        return self._activity == Activity.WON and self._eligible

    def is_locked(self, r, c):
        return self._spec is not None and self._spec.is_locked(r, c)

    def snapshot(self):
        return {
            "board": self.board,
            "initial": self.initial,
            "difficulty": self.difficulty,
            "activity": self._activity,
            "eligible": self._eligible,
            "elapsed": self.elapsed,
            "conflicts": self._conflicts,
            "last_hint": self._last_hint,
            "can_submit_score": self.can_submit_score,
        }

    # --- Lifecycle ---
    def start_game(self, spec, background_timer=True):
        self._spec = spec
        self._board = spec.initial
        self._eligible = True
        self._conflicts = frozenset()
        self._last_hint = None
        self._activity = Activity.ACTIVE
        self._timer.start(reset=True, background=background_timer)

    def stop_timer(self):
        self._timer.stop()

    # --- Player edits ---
    def edit_cell(self, r, c, value):
        """Writes a digit (or clears the cell). Anything not allowed is silently ignored."""
        if self._activity != Activity.ACTIVE or not is_in_bounds(r, c):
            return False
        if self._spec.is_locked(r, c):
            return False
        parsed = parse_cell_value(value)
        if parsed is None:
            return False

        self._board[r][c] = parsed
        # Editing a flagged cell retracts the flag whatever the new value is
        self._conflicts = self._conflicts - {(r, c)}
        if parsed != EMPTY and is_board_full(self._board):
            self._evaluate_win()
        return True

    def check_conflicts(self):
        if self._spec is None:
            return self._conflicts
        self._conflicts = find_conflicts(self._board, self._spec.solution)
        return self._conflicts

    def clear_conflicts(self):
        self._conflicts = frozenset()

    # --- Assists ---
    def hint(self):
        if self._activity != Activity.ACTIVE:
            return None
        cell = reveal_hint(self._board, self._spec.solution, self._rng)
        if cell is None:
            return None
        self._eligible = False
        self._last_hint = cell
        self._conflicts = self._conflicts - {cell}
        if is_board_full(self._board):
            self._evaluate_win()
        return cell

    def confirm_and_solve(self):
        """Reveals the whole solution. Only call after the player confirmed giving up."""
        if self._activity != Activity.ACTIVE:
            return False
        self._board = reveal_solution(self._spec.solution)
        self._eligible = False
        self._conflicts = frozenset()
        self._timer.stop()
        self._activity = Activity.STOPPED
        return True

    def _evaluate_win(self):
        if not check_win(self._board, self._spec.solution):
            return False
        # Timer first: the reported time must not move while the win is being handled
        self._timer.stop()
        self._activity = Activity.WON
        return True
