#!/usr/bin/env python3
"""
Evaluate the rule-based TicTacToe engine.

Usage:
    python eval.py
    python eval.py --games 1000 --seed 1
    python eval.py --play
    python eval.py --decide "X EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY EMPTY O"
"""

import sys
import argparse
from pathlib import Path

import numpy as np

# Add src to path
sys.path = [str(Path(__file__).parent / "src")] + sys.path

from ttt_expert import (
    InvalidBoardError,
    Mark,
    count_outcomes_vs_optimal,
    eval_vs_random,
    eval_vs_minimax,
    eval_minimax_agreement_all_states,
    handle_request,
)


def print_board(board):
    """Pretty print board."""
    from ttt_expert import render
    print(render(board))


def play_interactive(human: Mark = Mark.X):
    """Play a game against the engine."""
    from ttt_expert import EMPTY_BOARD, is_terminal, legal_moves, apply_move, decide, format_explanation

    board = EMPTY_BOARD
    player = Mark.X

    print("\n=== Interactive Game ===")
    print(f"You are {human.name}" + (" (play first)" if human == Mark.X else ""))
    print("Enter moves as numbers 0-8:")
    print(" 0 | 1 | 2 ")
    print("---+---+---")
    print(" 3 | 4 | 5 ")
    print("---+---+---")
    print(" 6 | 7 | 8 ")
    print()

    while True:
        done, winner = is_terminal(board)
        if done:
            print_board(board)
            if winner == Mark.EMPTY:
                print("\nDraw!")
            elif winner == human:
                print("\nYou win!")
            else:
                print("\nEngine wins!")
            break

        print_board(board)
        print()

        if player == human:
            moves = legal_moves(board)
            try:
                action = int(input(f"Your move ({moves}): "))
                if action not in moves:
                    print("Invalid move, try again")
                    continue
            except (ValueError, KeyboardInterrupt, EOFError):
                print("\nGame aborted")
                return
        else:
            result = decide(board, player)
            action = result.position
            print(f"Engine plays: {action} ({result.rule_id}: {result.rule_description})")
            print(format_explanation(board, player))

        board = apply_move(board, player, action)
        player = Mark(-player)
        print()


def main():
    parser = argparse.ArgumentParser(description="Evaluate rule-based TicTacToe engine")
    parser.add_argument("--play", action="store_true", help="Play interactive game")
    parser.add_argument("--second", action="store_true", help="Play as O in interactive mode")
    parser.add_argument("--decide", type=str, default=None, help="Answer one wire request")
    parser.add_argument("--games", type=int, default=100, help="Number of eval games")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")

    args = parser.parse_args()

    # Single request
    if args.decide is not None:
        try:
            print(handle_request(args.decide))
        except InvalidBoardError as e:
            print(f"Invalid request: {e}")
            sys.exit(2)
        return

    # Interactive play
    if args.play:
        play_interactive(Mark.O if args.second else Mark.X)
        return

    rng = np.random.default_rng(args.seed)

    # Evaluation
    print("\n=== Evaluation ===")

    # vs Random
    print(f"\nvs Random ({args.games} games)...")
    w, d, l = eval_vs_random(games=args.games, rng=rng)
    print(f"  Wins:   {w:.2%}")
    print(f"  Draws:  {d:.2%}")
    print(f"  Losses: {l:.2%}")

    # vs Minimax
    print(f"\nvs Minimax ({args.games} games)...")
    results = eval_vs_minimax(games=args.games, rng=rng)
    print(f"  Wins:   {results['engine_w']:.2%}")
    print(f"  Draws:  {results['engine_d']:.2%}")
    print(f"  Losses: {results['engine_l']:.2%}")

    # Every optimal line
    print("\nvs Optimal (all lines)...")
    for side in (Mark.X, Mark.O):
        c = count_outcomes_vs_optimal(side)
        print(f"  As {side.name}: {c['games']} games | "
              f"W {c['wins']} / D {c['draws']} / L {c['losses']}")

    # Minimax agreement
    print("\nMinimax Agreement (all states)...")
    te = eval_minimax_agreement_all_states()
    print(f"  States:      {te['n_states']}")
    print(f"  Top-1 Opt:   {te['opt_top1_acc']:.2%}")
    for rid, n in te["rule_fired"].items():
        if n:
            print(f"  {rid:<16} fired {n:5d} | optimal {te['rule_opt_acc'][rid]:.2%}")


if __name__ == "__main__":
    main()
