"""
Exact game values for TicTacToe, used to grade the rule cascade.

Values are negamax scores from the side to move: +1 forced win, 0 draw,
-1 forced loss. Solved positions are memoized for the life of the process.
"""

import itertools
from typing import Dict, List, Tuple

import torch

from .game import Board, Mark, apply_move, is_terminal, legal_moves, winners_set


# (board, side to move) -> (value, optimal moves)
_SOLVED: Dict[Tuple[Board, Mark], Tuple[int, Tuple[int, ...]]] = {}


def _terminal_value(winner: Mark, player: Mark) -> int:
    if winner == Mark.EMPTY:
        return 0
    return 1 if winner == player else -1


def _solve(board: Board, player: Mark) -> Tuple[int, Tuple[int, ...]]:
    key = (board, player)
    solved = _SOLVED.get(key)
    if solved is not None:
        return solved

    done, winner = is_terminal(board)
    if done:
        solved = (_terminal_value(winner, player), ())
    else:
        reply = Mark(-player)
        scores = {
            action: -_solve(apply_move(board, player, action), reply)[0]
            for action in legal_moves(board)
        }
        value = max(scores.values())
        solved = (value, tuple(a for a, s in scores.items() if s == value))

    _SOLVED[key] = solved
    return solved


def minimax_value_and_moves(board: Board, player: Mark) -> Tuple[int, List[int]]:
    """
    Game value for `player` and every move that keeps it.

    Returns an empty move list on a finished board.
    """
    value, moves = _solve(board, player)
    return value, list(moves)


def optimal_policy(board: Board, player: Mark) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Uniform distribution over optimal moves, as a [9] tensor, and the
    game value as a scalar tensor.
    """
    value, moves = _solve(board, player)

    pi = torch.zeros(9, dtype=torch.float32)
    if moves:
        pi[list(moves)] = 1.0 / len(moves)

    return pi, torch.tensor(float(value), dtype=torch.float32)


def clear_cache():
    _SOLVED.clear()


def cache_size() -> int:
    return len(_SOLVED)


def iter_all_legal_nonterminal_states():
    """
    Iterate over all legal non-terminal board states.

    Yields:
        (board, player) tuples for exhaustive evaluation.
    """
    for cells in itertools.product((Mark.EMPTY, Mark.X, Mark.O), repeat=9):
        x_cnt = cells.count(Mark.X)
        o_cnt = cells.count(Mark.O)

        # Legal turn order: X starts
        if not (x_cnt == o_cnt or x_cnt == o_cnt + 1):
            continue

        # Skip illegal states
        if len(winners_set(cells)) >= 2:
            continue

        # Skip terminal
        done, _ = is_terminal(cells)
        if done:
            continue

        # Side to move
        player = Mark.X if x_cnt == o_cnt else Mark.O
        yield cells, player
