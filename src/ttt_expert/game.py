"""
TicTacToe board model.

Board representation: tuple of 9 Mark values, row-major (index = row*3 + col)
  - Mark.EMPTY:  0
  - Mark.X:     +1 (first player)
  - Mark.O:     -1 (second player)

Boards are immutable snapshots; every move produces a new tuple.
"""

from enum import IntEnum
from typing import Iterable, List, Tuple


class InvalidBoardError(ValueError):
    """Raised for a malformed board or mark-to-move."""


class Mark(IntEnum):
    EMPTY = 0
    X = 1
    O = -1

    # Aliases
    FIRST_PLAYER = 1
    SECOND_PLAYER = -1

    @property
    def token(self) -> str:
        return "EMPTY" if self is Mark.EMPTY else self.name


Board = Tuple[Mark, ...]

# Winning lines (rows, columns, diagonals)
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),              # diagonals
)

EMPTY_BOARD: Board = (Mark.EMPTY,) * 9

_TOKENS = {
    "X": Mark.X,
    "O": Mark.O,
    "FIRST_PLAYER": Mark.X,
    "SECOND_PLAYER": Mark.O,
    "EMPTY": Mark.EMPTY,
    "": Mark.EMPTY,
    ".": Mark.EMPTY,
    "-": Mark.EMPTY,
}


def _parse_cell(value) -> Mark:
    if value is None:
        return Mark.EMPTY
    if isinstance(value, Mark):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key in _TOKENS:
            return _TOKENS[key]
        raise InvalidBoardError(f"Invalid cell token: {value!r}")
    if isinstance(value, bool):
        raise InvalidBoardError(f"Invalid cell value: {value!r}")
    if isinstance(value, int) and value in (-1, 0, 1):
        return Mark(value)
    raise InvalidBoardError(f"Invalid cell value: {value!r}")


def as_board(cells: Iterable) -> Board:
    """
    Validate and normalize a board.

    Accepts Mark values, integers in {-1, 0, +1} or tokens
    ("X", "O", "EMPTY", " ", ...).

    Raises:
        InvalidBoardError: wrong length or unknown cell value
    """
    if isinstance(cells, str):
        raise InvalidBoardError("Board must be a sequence of 9 cells, not a string")
    try:
        cells = list(cells)
    except TypeError:
        raise InvalidBoardError(f"Board must be a sequence of 9 cells, got {type(cells).__name__}")
    if len(cells) != 9:
        raise InvalidBoardError(f"Board must have 9 positions, got {len(cells)}")
    return tuple(_parse_cell(c) for c in cells)


def as_mark(value) -> Mark:
    """Parse the mark to move. EMPTY is not a valid side."""
    try:
        mark = _parse_cell(value)
    except InvalidBoardError:
        raise InvalidBoardError(f"Invalid mark to move: {value!r}")
    if mark is Mark.EMPTY:
        raise InvalidBoardError(f"Invalid mark to move: {value!r}")
    return mark


def opponent(mark: Mark) -> Mark:
    """Return the other player's mark."""
    if mark == Mark.EMPTY:
        raise InvalidBoardError("EMPTY has no opponent")
    return Mark(-mark)


def winner(board: Board) -> Mark:
    """Return the mark owning a complete line, or Mark.EMPTY."""
    for a, b, c in WIN_LINES:
        if board[a] != Mark.EMPTY and board[a] == board[b] == board[c]:
            return board[a]
    return Mark.EMPTY


def winners_set(board: Board) -> set:
    """Return set of winners (both marks if illegal)."""
    wins = set()
    for a, b, c in WIN_LINES:
        s = board[a] + board[b] + board[c]
        if s == 3:
            wins.add(Mark.X)
        elif s == -3:
            wins.add(Mark.O)
    return wins


def is_full(board: Board) -> bool:
    return all(v != Mark.EMPTY for v in board)


def is_terminal(board: Board) -> Tuple[bool, Mark]:
    """
    Check if board is terminal.

    Returns:
        (is_terminal, winner) where winner is Mark.X/Mark.O/Mark.EMPTY
    """
    wset = winners_set(board)
    if len(wset) >= 2:
        # Illegal board state (both win) - treat as draw
        return True, Mark.EMPTY
    if len(wset) == 1:
        return True, next(iter(wset))
    if is_full(board):
        return True, Mark.EMPTY
    return False, Mark.EMPTY


def legal_moves(board: Board) -> List[int]:
    """Return list of legal move indices (empty squares)."""
    return [i for i, v in enumerate(board) if v == Mark.EMPTY]


def apply_move(board: Board, mark: Mark, action: int) -> Board:
    """Apply move and return new board."""
    if board[action] != Mark.EMPTY:
        raise InvalidBoardError(f"Cell {action} is already taken")
    new_board = list(board)
    new_board[action] = Mark(mark)
    return tuple(new_board)


def side_to_move(board: Board) -> Mark:
    """Infer side to move from board state (X plays first)."""
    x_cnt = sum(1 for v in board if v == Mark.X)
    o_cnt = sum(1 for v in board if v == Mark.O)
    return Mark.X if x_cnt == o_cnt else Mark.O


def is_legal_board(board: Board) -> bool:
    """Check if board respects game rules."""
    x_cnt = sum(1 for v in board if v == Mark.X)
    o_cnt = sum(1 for v in board if v == Mark.O)

    # X goes first, so x_cnt == o_cnt or x_cnt == o_cnt + 1
    if not (x_cnt == o_cnt or x_cnt == o_cnt + 1):
        return False

    # Can't have both winners
    if len(winners_set(board)) >= 2:
        return False

    return True


def render(board: Board) -> str:
    """Return a 3-row text picture of the board."""
    symbols = {Mark.EMPTY: " ", Mark.X: "X", Mark.O: "O"}
    rows = []
    for i in range(3):
        rows.append("|".join(symbols[board[i * 3 + j]] for j in range(3)))
    return "\n-+-+-\n".join(rows)
