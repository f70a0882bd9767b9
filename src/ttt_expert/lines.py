"""
Line evaluator: pure predicates over a 9-cell board.

Hypothetical moves are always made on a fresh tuple, so callers can share
a board snapshot freely.
"""

from typing import List, Tuple

from .game import Board, Mark, WIN_LINES, apply_move


def lines_of() -> Tuple[Tuple[int, int, int], ...]:
    """Return the 8 winning index-triples (rows, columns, diagonals)."""
    return WIN_LINES


def has_line(board: Board, mark: Mark) -> bool:
    """True iff some line is fully occupied by `mark`."""
    return any(board[a] == mark and board[b] == mark and board[c] == mark
               for a, b, c in WIN_LINES)


def _is_open(board: Board, position: int) -> bool:
    return 0 <= position < 9 and board[position] == Mark.EMPTY


def would_win(board: Board, position: int, mark: Mark) -> bool:
    """
    True iff placing `mark` at `position` completes a line.

    Only lines through `position` count, so a line `mark` already owns
    does not make every empty cell a winning one. Occupied or out-of-range
    positions are never winning.
    """
    if not _is_open(board, position):
        return False
    after = apply_move(board, mark, position)
    return any(position in line and all(after[i] == mark for i in line)
               for line in WIN_LINES)


def winning_cells(board: Board, mark: Mark) -> List[int]:
    """Empty cells where `mark` would complete a line, ascending."""
    return [p for p in range(9) if would_win(board, p, mark)]


def count_winning_cells(board: Board, mark: Mark) -> int:
    """Number of distinct immediate-win cells for `mark` on this board."""
    return len(winning_cells(board, mark))


def would_fork(board: Board, position: int, mark: Mark) -> bool:
    """True iff placing `mark` at `position` leaves it two or more immediate wins."""
    if not _is_open(board, position):
        return False
    return count_winning_cells(apply_move(board, mark, position), mark) >= 2


def fork_cells(board: Board, mark: Mark) -> List[int]:
    """Empty cells where `mark` would create a fork, ascending."""
    return [p for p in range(9) if would_fork(board, p, mark)]
