"""
Evaluation functions.

Tests rule-engine strength against random and minimax opponents,
walks every game against an optimal opponent, and measures agreement
with minimax on all legal states.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np
import torch

from .game import EMPTY_BOARD, Board, Mark, apply_move, is_terminal, legal_moves, side_to_move
from .minimax import iter_all_legal_nonterminal_states, minimax_value_and_moves, optimal_policy
from .rules import RULE_IDS, MoveResult, RuleEngineError, decide


@dataclass
class EvalConfig:
    """Evaluation configuration."""

    # Random seed
    seed: int = 0

    # Sampled games per opponent
    games: int = 500

    # Minimax opponent samples among all optimal moves
    optimal_random: bool = True

    # Exhaustive walk vs optimal opponent
    exhaustive: bool = True

    # Output
    save_dir: str = "runs"
    run_name: str = "rules_eval"


def engine_move(board: Board, mark: Mark) -> int:
    """Position chosen by the rule cascade on a non-full board."""
    result = decide(board, mark)
    if not isinstance(result, MoveResult):
        raise RuleEngineError("Engine asked to move on a full board")
    return result.position


_PLURAL = {"win": "wins", "draw": "draws", "loss": "losses"}


def _score(winner: Mark, engine_side: Mark) -> str:
    if winner == Mark.EMPTY:
        return "draw"
    return "win" if winner == engine_side else "loss"


def eval_vs_random(
    games: int = 500,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[float, float, float]:
    """
    Evaluate the engine vs a uniformly random opponent.

    The engine alternates sides: X on even games, O on odd games.

    Returns:
        (win_rate, draw_rate, loss_rate)
    """
    if rng is None:
        rng = np.random.default_rng()
    tally = {"win": 0, "draw": 0, "loss": 0}

    for g in range(games):
        board = EMPTY_BOARD
        player = Mark.X
        engine_side = Mark.X if (g % 2 == 0) else Mark.O

        while True:
            done, winner = is_terminal(board)
            if done:
                tally[_score(winner, engine_side)] += 1
                break

            if player == engine_side:
                action = engine_move(board, player)
            else:
                action = int(rng.choice(legal_moves(board)))

            board = apply_move(board, player, action)
            player = Mark(-player)

    total = max(1, games)
    return tally["win"] / total, tally["draw"] / total, tally["loss"] / total


def eval_vs_minimax(
    games: int = 500,
    rng: Optional[np.random.Generator] = None,
    optimal_random: bool = True,
) -> Dict[str, float]:
    """
    Evaluate the engine vs a minimax opponent.

    Args:
        optimal_random: If True, the opponent samples among its optimal moves

    Returns:
        Dict with 'games', 'engine_w', 'engine_d', 'engine_l'
    """
    if rng is None:
        rng = np.random.default_rng()
    tally = {"win": 0, "draw": 0, "loss": 0}

    for g in range(games):
        board = EMPTY_BOARD
        engine_side = Mark.X if (g % 2 == 0) else Mark.O

        while True:
            done, winner = is_terminal(board)
            if done:
                tally[_score(winner, engine_side)] += 1
                break

            stm = side_to_move(board)

            if stm == engine_side:
                action = engine_move(board, stm)
            else:
                _, best_moves = minimax_value_and_moves(board, stm)
                if optimal_random:
                    action = int(rng.choice(best_moves))
                else:
                    action = best_moves[0]

            board = apply_move(board, stm, action)

    total = max(1, games)
    return {
        "games": games,
        "engine_w": tally["win"] / total,
        "engine_d": tally["draw"] / total,
        "engine_l": tally["loss"] / total,
    }


def count_outcomes_vs_optimal(engine_side: Mark, board: Board = EMPTY_BOARD) -> Dict[str, int]:
    """
    Play out every game in which the opponent picks any minimax-optimal move.

    Returns:
        Dict with 'games', 'wins', 'draws', 'losses' from the engine's side
    """
    counts = {"games": 0, "wins": 0, "draws": 0, "losses": 0}

    def walk(b: Board):
        done, winner = is_terminal(b)
        if done:
            counts["games"] += 1
            counts[_PLURAL[_score(winner, engine_side)]] += 1
            return
        stm = side_to_move(b)
        if stm == engine_side:
            walk(apply_move(b, stm, engine_move(b, stm)))
            return
        _, best_moves = minimax_value_and_moves(b, stm)
        for action in best_moves:
            walk(apply_move(b, stm, action))

    walk(board)
    return counts


def eval_minimax_agreement_all_states() -> Dict[str, object]:
    """
    Compare the engine's choice with the optimal move set on every
    legal non-terminal state.

    Returns:
        Dict with overall agreement, per-rule firing counts and agreement,
        and the raw disagreements (prefixed with '_')
    """
    states = list(iter_all_legal_nonterminal_states())
    n = len(states)

    pi_star_list = []
    chosen = []
    rule_idx = []
    for board, player in states:
        pi, _ = optimal_policy(board, player)
        pi_star_list.append(pi)
        result = decide(board, player)
        chosen.append(result.position)
        rule_idx.append(RULE_IDS.index(result.rule_id))

    pi_star = torch.stack(pi_star_list, dim=0)
    a = torch.tensor(chosen, dtype=torch.long)
    r = torch.tensor(rule_idx, dtype=torch.long)

    best = (pi_star > 0)
    agree = best.gather(1, a.unsqueeze(1)).squeeze(1)

    fired = torch.bincount(r, minlength=len(RULE_IDS))
    agreed = torch.bincount(r, weights=agree.float(), minlength=len(RULE_IDS))

    rule_fired = {rid: int(fired[i].item()) for i, rid in enumerate(RULE_IDS)}
    rule_opt_acc = {
        rid: (float(agreed[i].item()) / rule_fired[rid]) if rule_fired[rid] else float("nan")
        for i, rid in enumerate(RULE_IDS)
    }

    disagreements = [
        (states[i][0], states[i][1], chosen[i], RULE_IDS[rule_idx[i]])
        for i in torch.where(~agree)[0].tolist()
    ]

    return {
        "n_states": n,
        "opt_top1_acc": agree.float().mean().item(),
        "rule_fired": rule_fired,
        "rule_opt_acc": rule_opt_acc,
        "_disagreements": disagreements,
    }
