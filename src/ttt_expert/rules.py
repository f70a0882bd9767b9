"""
Rule cascade: priority-ordered move selection.

Rules are evaluated in fixed order; the first rule that proposes a cell wins.
Order:
  1. win              - complete own line
  2. block            - stop opponent's immediate win
  3. fork             - create two immediate-win threats
  4. block-fork       - defuse opponent fork
  5. center
  6. opposite-corner
  7. corner
  8. side
  9. fallback         - lowest empty cell

The engine holds no state: decide() is a pure function of (board, mark).
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from .game import Board, Mark, apply_move, as_board, as_mark, legal_moves, opponent
from .lines import count_winning_cells, fork_cells, winning_cells

CENTER = 4
CORNERS = (0, 2, 6, 8)
SIDES = (1, 3, 5, 7)
# (opponent corner, corner to take), checked in this order
OPPOSITE_CORNERS = ((0, 8), (8, 0), (2, 6), (6, 2))


class RuleEngineError(RuntimeError):
    """A rule selected a cell that is not a legal move."""


@dataclass(frozen=True)
class MoveResult:
    """Chosen cell plus the rule that produced it."""
    position: int
    rule_id: str
    rule_description: str


@dataclass(frozen=True)
class NoMoveAvailable:
    """Returned when the board has no empty cell."""
    rule_id: str = "no-move"
    rule_description: str = "Board is full, no legal move"


NO_MOVE = NoMoveAvailable()

Selector = Callable[[Board, Mark, Mark], Optional[int]]


@dataclass(frozen=True)
class Rule:
    rule_id: str
    description: str
    select: Selector


def _first_open(board: Board, cells) -> Optional[int]:
    for p in cells:
        if board[p] == Mark.EMPTY:
            return p
    return None


def _select_win(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    cells = winning_cells(board, me)
    return cells[0] if cells else None


def _select_block(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    cells = winning_cells(board, opp)
    return cells[0] if cells else None


def _select_fork(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    cells = fork_cells(board, me)
    return cells[0] if cells else None


def is_safe_forcing_move(board: Board, position: int, me: Mark, opp: Mark) -> bool:
    """
    True if playing `position` threatens an immediate win that the opponent
    must answer, and that answer does not hand the opponent two threats.
    """
    after = apply_move(board, me, position)
    threats = winning_cells(after, me)
    if not threats:
        return False
    if len(threats) >= 2:
        return True
    reply = apply_move(after, opp, threats[0])
    return count_winning_cells(reply, opp) < 2


def _select_block_fork(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    forks = fork_cells(board, opp)
    if not forks:
        return None
    if len(forks) == 1:
        return forks[0]

    # Block a fork cell while forcing the opponent to answer.
    for p in forks:
        if is_safe_forcing_move(board, p, me, opp):
            return p

    # Otherwise force anywhere, as long as the forced reply is not a fork.
    for p in legal_moves(board):
        if p not in forks and is_safe_forcing_move(board, p, me, opp):
            return p

    return forks[0]


def _select_center(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    return CENTER if board[CENTER] == Mark.EMPTY else None


def _select_opposite_corner(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    for theirs, target in OPPOSITE_CORNERS:
        if board[theirs] == opp and board[target] == Mark.EMPTY:
            return target
    return None


def _select_corner(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    return _first_open(board, CORNERS)


def _select_side(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    return _first_open(board, SIDES)


def _select_fallback(board: Board, me: Mark, opp: Mark) -> Optional[int]:
    return _first_open(board, range(9))


RULES: Tuple[Rule, ...] = (
    Rule("win", "Complete a line of three to win", _select_win),
    Rule("block", "Block the opponent's immediate win", _select_block),
    Rule("fork", "Create two winning threats at once", _select_fork),
    Rule("block-fork", "Stop the opponent from creating a fork", _select_block_fork),
    Rule("center", "Take the center", _select_center),
    Rule("opposite-corner", "Take the corner opposite the opponent", _select_opposite_corner),
    Rule("corner", "Take an empty corner", _select_corner),
    Rule("side", "Take an empty side", _select_side),
    Rule("fallback", "Take the first empty cell", _select_fallback),
)

RULE_IDS = tuple(r.rule_id for r in RULES)


def decide(board, mark) -> Union[MoveResult, NoMoveAvailable]:
    """
    Choose a move for `mark` on `board`.

    Args:
        board: 9 cells (Mark values, -1/0/+1, or X/O/EMPTY tokens)
        mark: side to move

    Returns:
        MoveResult of the highest-priority matching rule,
        or NO_MOVE if the board is full.

    Raises:
        InvalidBoardError: malformed board or mark
        RuleEngineError: a rule picked an illegal cell
    """
    board = as_board(board)
    me = as_mark(mark)
    opp = opponent(me)

    for rule in RULES:
        position = rule.select(board, me, opp)
        if position is None:
            continue
        if not (0 <= position < 9) or board[position] != Mark.EMPTY:
            raise RuleEngineError(
                f"Rule {rule.rule_id!r} selected illegal cell {position}"
            )
        return MoveResult(position, rule.rule_id, rule.description)

    return NO_MOVE


def explain(board, mark) -> List[Tuple[Rule, Optional[int]]]:
    """Evaluate every rule independently, in priority order."""
    board = as_board(board)
    me = as_mark(mark)
    opp = opponent(me)
    return [(rule, rule.select(board, me, opp)) for rule in RULES]


def format_explanation(board, mark) -> str:
    """One line per rule: its candidate cell, with the rule that fired marked."""
    lines = []
    fired = False
    for rule, position in explain(board, mark):
        cell = "-" if position is None else str(position)
        if position is not None and not fired:
            marker = "*"
            fired = True
        else:
            marker = " "
        lines.append(f"{marker} {rule.rule_id:<16} {cell}")
    return "\n".join(lines)
