#!/usr/bin/env python3
"""
Grade the rule-based TicTacToe engine and write a report.

Outputs (under <save-dir>/<run-name>/):
    config.json      evaluation configuration
    history.csv      per-batch results vs random and minimax opponents
    rule_stats.csv   per-rule firing counts and minimax agreement
    plots/           rule and history charts
    report.md        markdown summary

Usage:
    python report.py
    python report.py --games 2000 --batches 20 --seed 3
"""

import sys
import json
import time
import argparse
from dataclasses import asdict
from pathlib import Path

import numpy as np
import pandas as pd
from tqdm.auto import trange, tqdm

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from ttt_expert import (
    EvalConfig,
    Mark,
    RULES,
    count_outcomes_vs_optimal,
    eval_vs_random,
    eval_vs_minimax,
    eval_minimax_agreement_all_states,
    render,
)


def run_batches(config: EvalConfig, batches: int) -> list:
    """Play sampled games in batches, one history row per batch."""
    rng = np.random.default_rng(config.seed)
    per_batch = max(1, config.games // batches)
    history = []

    for batch in trange(1, batches + 1, desc="Sampled games"):
        w, d, l = eval_vs_random(games=per_batch, rng=rng)
        mm = eval_vs_minimax(games=per_batch, rng=rng, optimal_random=config.optimal_random)
        history.append({
            "batch": batch,
            "games": per_batch,
            "random_w": w,
            "random_d": d,
            "random_l": l,
            "minimax_w": mm["engine_w"],
            "minimax_d": mm["engine_d"],
            "minimax_l": mm["engine_l"],
        })
        if l > 0 or mm["engine_l"] > 0:
            tqdm.write(f"[{batch:3d}] losses observed: random {l:.2%} | minimax {mm['engine_l']:.2%}")

    return history


def rule_stats_frame(agreement: dict) -> pd.DataFrame:
    rows = []
    for priority, rule in enumerate(RULES, start=1):
        rows.append({
            "priority": priority,
            "rule": rule.rule_id,
            "description": rule.description,
            "fired": agreement["rule_fired"][rule.rule_id],
            "optimal_rate": agreement["rule_opt_acc"][rule.rule_id],
        })
    return pd.DataFrame(rows)


def create_plots(history_df: pd.DataFrame, stats_df: pd.DataFrame, output_dir: Path):
    """Create rule and history plots."""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    # 1. Rule firing counts
    plt.figure(figsize=(10, 6))
    plt.bar(stats_df['rule'], stats_df['fired'])
    plt.title('Rule Firing Counts (all legal states)', fontsize=14, fontweight='bold')
    plt.xlabel('Rule', fontsize=12)
    plt.ylabel('States', fontsize=12)
    plt.xticks(rotation=30)
    plt.grid(True, axis='y', alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_dir / 'plot_1_rule_fired.png', dpi=150, bbox_inches='tight')
    plt.close()

    # 2. Minimax agreement per rule
    fired = stats_df[stats_df['fired'] > 0]
    plt.figure(figsize=(10, 6))
    plt.bar(fired['rule'], fired['optimal_rate'])
    plt.title('Minimax Agreement per Rule', fontsize=14, fontweight='bold')
    plt.xlabel('Rule', fontsize=12)
    plt.ylabel('Optimal move rate', fontsize=12)
    plt.ylim(0, 1.05)
    plt.xticks(rotation=30)
    plt.grid(True, axis='y', alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_dir / 'plot_2_rule_agreement.png', dpi=150, bbox_inches='tight')
    plt.close()

    # 3. Results per batch
    plt.figure(figsize=(10, 6))
    plt.plot(history_df['batch'], history_df['random_w'], label='Win vs Random', linewidth=2)
    plt.plot(history_df['batch'], history_df['minimax_d'], label='Draw vs Minimax', linewidth=2)
    plt.plot(history_df['batch'], history_df['random_l'] + history_df['minimax_l'],
             label='Losses (any)', linewidth=2)
    plt.title('Sampled Game Results', fontsize=14, fontweight='bold')
    plt.xlabel('Batch', fontsize=12)
    plt.ylabel('Rate', fontsize=12)
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_dir / 'plot_3_history.png', dpi=150, bbox_inches='tight')
    plt.close()


def generate_markdown_report(history_df: pd.DataFrame, stats_df: pd.DataFrame, agreement: dict,
                             exhaustive: dict, config: EvalConfig, run_dir: Path):
    """Generate markdown report."""
    md = []
    md.append("# Rule Engine Evaluation Report\n")
    md.append(f"**Generated:** {time.strftime('%Y-%m-%d %H:%M:%S')}\n")

    md.append("\n## Configuration\n")
    md.append("| Parameter | Value |")
    md.append("|-----------|-------|")
    md.append(f"| Seed | {config.seed} |")
    md.append(f"| Sampled games | {config.games:,} |")
    md.append(f"| Minimax samples optimal moves | {config.optimal_random} |")
    md.append(f"| Exhaustive optimal walk | {config.exhaustive} |")

    md.append("\n## Sampled Games\n")
    md.append("| Opponent | Win | Draw | Loss |")
    md.append("|----------|-----|------|------|")
    md.append(f"| Random | {history_df['random_w'].mean():.2%} | "
              f"{history_df['random_d'].mean():.2%} | {history_df['random_l'].mean():.2%} |")
    md.append(f"| Minimax | {history_df['minimax_w'].mean():.2%} | "
              f"{history_df['minimax_d'].mean():.2%} | {history_df['minimax_l'].mean():.2%} |")

    if exhaustive:
        md.append("\n## Every Line vs Optimal Opponent\n")
        md.append("| Engine side | Games | Wins | Draws | Losses |")
        md.append("|-------------|-------|------|-------|--------|")
        for side, c in exhaustive.items():
            md.append(f"| {side} | {c['games']} | {c['wins']} | {c['draws']} | {c['losses']} |")

    md.append("\n## Rules\n")
    md.append(f"Legal non-terminal states: **{agreement['n_states']:,}**, "
              f"engine move optimal in **{agreement['opt_top1_acc']:.2%}**.\n")
    md.append("| # | Rule | Fired | Optimal |")
    md.append("|---|------|-------|---------|")
    for row in stats_df.itertuples():
        rate = "-" if row.fired == 0 else f"{row.optimal_rate:.2%}"
        md.append(f"| {row.priority} | {row.rule} | {row.fired:,} | {rate} |")

    md.append("\n![Rule firing](plots/plot_1_rule_fired.png)\n")
    md.append("![Rule agreement](plots/plot_2_rule_agreement.png)\n")
    md.append("![History](plots/plot_3_history.png)\n")

    disagreements = agreement["_disagreements"]
    if disagreements:
        md.append("\n## Sample Non-optimal Choices\n")
        for board, player, position, rule_id in disagreements[:5]:
            md.append(f"{player.name} to move, engine plays {position} ({rule_id}):\n")
            md.append("```")
            md.append(render(board))
            md.append("```\n")

    with open(run_dir / "report.md", "w") as f:
        f.write("\n".join(md))
    print(f"✓ Report saved to {run_dir / 'report.md'}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate rule-based TicTacToe engine")
    parser.add_argument("--games", type=int, default=500, help="Sampled games per opponent")
    parser.add_argument("--batches", type=int, default=10, help="History batches")
    parser.add_argument("--deterministic-minimax", action="store_true",
                        help="Minimax opponent always plays its first optimal move")
    parser.add_argument("--skip-exhaustive", action="store_true", help="Skip the exhaustive optimal walk")
    parser.add_argument("--run-name", type=str, default="rules_eval", help="Run name for saving")
    parser.add_argument("--save-dir", type=str, default="runs", help="Save directory")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")

    args = parser.parse_args()

    # Config
    config = EvalConfig(
        seed=args.seed,
        games=args.games,
        optimal_random=not args.deterministic_minimax,
        exhaustive=not args.skip_exhaustive,
        save_dir=args.save_dir,
        run_name=args.run_name,
    )

    # Create save directory
    run_dir = Path(config.save_dir) / config.run_name
    run_dir.mkdir(parents=True, exist_ok=True)

    # Save config
    with open(run_dir / "config.json", "w") as f:
        json.dump(asdict(config), f, indent=2)

    print("\n=== Sampled Games ===")
    history = run_batches(config, max(1, args.batches))
    history_df = pd.DataFrame(history)
    history_df.to_csv(run_dir / "history.csv", index=False)
    print(f"✓ History saved to {run_dir / 'history.csv'}")

    exhaustive = {}
    if config.exhaustive:
        print("\n=== Optimal Opponent (all lines) ===")
        for side in (Mark.X, Mark.O):
            exhaustive[side.name] = count_outcomes_vs_optimal(side)
            c = exhaustive[side.name]
            tqdm.write(f"  As {side.name}: {c['games']} games | W {c['wins']} / D {c['draws']} / L {c['losses']}")

    print("\n=== Minimax Agreement ===")
    agreement = eval_minimax_agreement_all_states()
    stats_df = rule_stats_frame(agreement)
    stats_df.to_csv(run_dir / "rule_stats.csv", index=False)
    print(f"✓ Rule stats saved to {run_dir / 'rule_stats.csv'}")

    print("\n=== Generating Plots ===")
    plots_dir = run_dir / "plots"
    plots_dir.mkdir(exist_ok=True)
    create_plots(history_df, stats_df, plots_dir)
    print(f"✓ 3 plots saved to {plots_dir}")

    print("\n=== Generating Report ===")
    generate_markdown_report(history_df, stats_df, agreement, exhaustive, config, run_dir)

    # Final summary
    print("\n=== Final Results ===")
    print(f"vs Random:  {history_df['random_w'].mean():.1%} W / {history_df['random_d'].mean():.1%} D / "
          f"{history_df['random_l'].mean():.1%} L")
    print(f"vs Minimax: {history_df['minimax_w'].mean():.1%} W / {history_df['minimax_d'].mean():.1%} D / "
          f"{history_df['minimax_l'].mean():.1%} L")
    print(f"Minimax Top-1: {agreement['opt_top1_acc']:.1%}")

    print(f"\n✅ All outputs saved to: {run_dir}")


if __name__ == "__main__":
    main()
