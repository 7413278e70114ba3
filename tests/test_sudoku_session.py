# tests/test_sudoku_session.py
import random

from online_helpers import GameTimer
from sudoku_session import Activity, SessionState
from sudoku_utils import empty_board, find_empty_cells


def test_new_session_is_idle():
    session = SessionState()
    assert session.activity == Activity.IDLE
    assert session.board == empty_board()
    assert session.elapsed == 0
    assert session.eligible
    assert not session.edit_cell(0, 2, 4)
    assert session.hint() is None
    assert not session.confirm_and_solve()
    assert session.check_conflicts() == frozenset()


def test_start_game_resets_everything(session, puzzle_spec):
    assert session.activity == Activity.ACTIVE
    assert session.board == puzzle_spec.initial
    assert session.eligible
    assert session.elapsed == 0
    assert session.conflicts == frozenset()


def test_valid_edit_changes_exactly_one_cell(session):
    before = session.board
    assert session.edit_cell(0, 2, 4)
    after = session.board
    assert after[0][2] == 4
    after[0][2] = before[0][2]
    assert after == before
    assert session.eligible


def test_clearing_a_cell(session):
    session.edit_cell(0, 2, 4)
    assert session.edit_cell(0, 2, "")
    assert session.board[0][2] == 0
    session.edit_cell(0, 2, "4")
    assert session.edit_cell(0, 2, None)
    assert session.board[0][2] == 0


def test_locked_cell_never_changes(session):
    for value in (1, 5, 9, 0, "", None):
        assert not session.edit_cell(0, 0, value)
        assert session.board[0][0] == 5


def test_invalid_values_and_coords_are_ignored(session):
    before = session.board
    for value in (10, -1, "x", "45", True, 3.5):
        assert not session.edit_cell(0, 2, value)
    assert not session.edit_cell(9, 0, 1)
    assert not session.edit_cell(-1, 0, 1)
    assert not session.edit_cell("0", 2, 1)
    assert session.board == before


def test_non_ascii_digits_are_ignored(session):
    assert not session.edit_cell(0, 2, "²")
    assert session.board[0][2] == 0
    session.edit_cell(0, 2, 4)
    for value in ("０", "３", "٣"):
        assert not session.edit_cell(0, 2, value)
    assert session.board[0][2] == 4


def test_is_locked_follows_givens(session):
    assert session.is_locked(0, 0)
    assert not session.is_locked(0, 2)
    assert not SessionState().is_locked(0, 0)


def test_board_reads_are_snapshots(session):
    board = session.board
    board[0][2] = 9
    assert session.board[0][2] == 0


def test_conflict_check_and_retraction_on_edit(session):
    session.edit_cell(2, 2, 1)  # solution is 8
    session.edit_cell(0, 2, 4)  # correct
    assert session.check_conflicts() == {(2, 2)}
    assert session.conflicts == {(2, 2)}

    # Still wrong, but the edit retracts the flag until the next check
    session.edit_cell(2, 2, 2)
    assert session.conflicts == frozenset()
    assert session.check_conflicts() == {(2, 2)}

    session.edit_cell(2, 2, 8)
    assert session.check_conflicts() == frozenset()


def test_checking_conflicts_does_not_touch_eligibility(session):
    session.edit_cell(2, 2, 1)
    session.check_conflicts()
    assert session.eligible
    session.clear_conflicts()
    assert session.conflicts == frozenset()


def test_filling_last_cell_correctly_wins_and_stops_timer(session_factory, one_blank_spec):
    session = session_factory(one_blank_spec)
    session._timer.tick()
    session._timer.tick()
    assert session.elapsed == 2

    assert session.edit_cell(8, 8, 9)
    assert session.activity == Activity.WON
    assert not session._timer.running
    assert not session._timer.tick()
    assert session.elapsed == 2
    assert session.can_submit_score
    # board is frozen
    assert not session.edit_cell(8, 8, 1)


def test_filling_last_cell_wrong_keeps_playing(session_factory, one_blank_spec):
    session = session_factory(one_blank_spec)
    assert session.edit_cell(8, 8, 1)
    assert session.activity == Activity.ACTIVE
    assert session._timer.running
    assert session.check_conflicts() == {(8, 8)}
    assert session.edit_cell(8, 8, 9)
    assert session.activity == Activity.WON


def test_hint_reveals_solution_cell_and_revokes_eligibility(session, puzzle_spec):
    empties_before = set(find_empty_cells(session.board))
    cell = session.hint()
    assert cell in empties_before
    r, c = cell
    assert session.board[r][c] == puzzle_spec.solution[r][c]
    assert len(find_empty_cells(session.board)) == len(empties_before) - 1
    assert not session.eligible
    assert session.last_hint == cell

    # valid edits do not restore eligibility
    for er, ec in find_empty_cells(session.board)[:3]:
        session.edit_cell(er, ec, puzzle_spec.solution[er][ec])
    assert not session.eligible


def test_hint_can_win_but_round_is_not_rankable(session_factory, one_blank_spec):
    session = session_factory(one_blank_spec)
    assert session.hint() == (8, 8)
    assert session.activity == Activity.WON
    assert not session._timer.running
    assert not session.eligible
    assert not session.can_submit_score


def test_hint_with_no_empty_cells_is_noop(session_factory, full_spec):
    session = session_factory(full_spec)
    before = session.board
    assert session.hint() is None
    assert session.board == before
    assert session.eligible
    assert session.activity == Activity.ACTIVE


def test_solve_reveals_board_and_stops_round(session, puzzle_spec):
    session._timer.tick()
    assert session.confirm_and_solve()
    assert session.board == puzzle_spec.solution
    assert session.activity == Activity.STOPPED
    assert not session.eligible
    assert not session.can_submit_score
    assert not session._timer.running
    assert session.elapsed == 1

    # nothing else moves the round afterwards
    assert not session.edit_cell(0, 2, 1)
    assert session.hint() is None
    assert not session.confirm_and_solve()
    assert session.activity == Activity.STOPPED


def test_elapsed_only_advances_while_active(session):
    timer = session._timer
    for _ in range(3):
        assert timer.tick()
    assert session.elapsed == 3
    session.confirm_and_solve()
    assert not timer.tick()
    assert session.elapsed == 3


def test_start_game_again_resets_round(session, puzzle_spec):
    session.edit_cell(0, 2, 4)
    session.hint()
    session._timer.tick()
    session.start_game(puzzle_spec, background_timer=False)
    assert session.eligible
    assert session.elapsed == 0
    assert session.board == puzzle_spec.initial
    assert session.last_hint is None


def test_snapshot_contents(puzzle_spec):
    session = SessionState(timer=GameTimer(), rng=random.Random(5))
    session.start_game(puzzle_spec, background_timer=False)
    snap = session.snapshot()
    assert snap["activity"] == Activity.ACTIVE
    assert snap["difficulty"] == "easy"
    assert snap["board"] == puzzle_spec.initial
    assert snap["eligible"] is True
    assert snap["can_submit_score"] is False
    snap["board"][0][2] = 4
    assert session.board[0][2] == 0
