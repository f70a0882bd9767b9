"""
Rule-based TicTacToe move selection.

A fixed, priority-ordered cascade of strategic rules (win, block, fork,
block-fork, center, opposite corner, corner, side) picks the move and
reports which rule fired. No game-tree search is involved in the decision;
the minimax solver is only used to verify and grade the rules.
"""

from .game import (
    Board,
    InvalidBoardError,
    Mark,
    EMPTY_BOARD,
    WIN_LINES,
    as_board,
    as_mark,
    opponent,
    winner,
    is_full,
    is_terminal,
    legal_moves,
    apply_move,
    side_to_move,
    is_legal_board,
    render,
)
from .lines import lines_of, has_line, would_win, winning_cells, count_winning_cells, would_fork, fork_cells
from .rules import (
    MoveResult,
    NoMoveAvailable,
    NO_MOVE,
    Rule,
    RULES,
    RULE_IDS,
    RuleEngineError,
    decide,
    explain,
    format_explanation,
)
from .wire import encode_request, decode_request, encode_response, response_to_json, handle_request
from .minimax import minimax_value_and_moves, optimal_policy, iter_all_legal_nonterminal_states
from .eval import (
    EvalConfig,
    eval_vs_random,
    eval_vs_minimax,
    count_outcomes_vs_optimal,
    eval_minimax_agreement_all_states,
)

__version__ = "0.1.0"
__all__ = [
    "Board",
    "InvalidBoardError",
    "Mark",
    "EMPTY_BOARD",
    "WIN_LINES",
    "as_board",
    "as_mark",
    "opponent",
    "winner",
    "is_full",
    "is_terminal",
    "legal_moves",
    "apply_move",
    "side_to_move",
    "is_legal_board",
    "render",
    "lines_of",
    "has_line",
    "would_win",
    "winning_cells",
    "count_winning_cells",
    "would_fork",
    "fork_cells",
    "MoveResult",
    "NoMoveAvailable",
    "NO_MOVE",
    "Rule",
    "RULES",
    "RULE_IDS",
    "RuleEngineError",
    "decide",
    "explain",
    "format_explanation",
    "encode_request",
    "decode_request",
    "encode_response",
    "response_to_json",
    "handle_request",
    "minimax_value_and_moves",
    "optimal_policy",
    "iter_all_legal_nonterminal_states",
    "EvalConfig",
    "eval_vs_random",
    "eval_vs_minimax",
    "count_outcomes_vs_optimal",
    "eval_minimax_agreement_all_states",
]
