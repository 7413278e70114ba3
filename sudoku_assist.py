# sudoku_assist.py
import random

from sudoku_utils import copy_board, find_empty_cells


def reveal_hint(board, solution, rng=None):
    """
    Fills one empty cell, chosen uniformly at random, with its solution digit.
    Mutates `board` in place and returns the revealed (row, col), or None if the board is full.
    """
    empty_cells = find_empty_cells(board)
    if not empty_cells:
        return None
    r, c = (rng or random).choice(empty_cells)
    board[r][c] = solution[r][c]
    return (r, c)


def reveal_solution(solution):
    return copy_board(solution)
