"""
Train and evaluate any built-in agent on any built-in environment from a YAML (or JSON) config.

Run from repo root:
    python examples/01_tabular/train_from_config.py examples/configs/hole_grid_q_learning.yaml

Options on the command line override the file, e.g.:
    python examples/01_tabular/train_from_config.py examples/configs/dispatch_grid_sarsa.yaml --episodes 2000

Use --record to keep the per-step snapshots in memory and write them as JSON lines
(the same records an external visualizer would receive).
"""

from __future__ import annotations

import argparse
from pathlib import Path

from tdlab.common.config import ExperimentConfig
from tdlab.common.log import configure_logging
from tdlab.common.plotting import save_reward_curves
from tdlab.training import SnapshotRecorder, format_policy, format_reward_summary, run_experiment


def parse_args() -> argparse.Namespace:
    """
    Parse CLI arguments.

    :return: Parsed args.
        :rtype: argparse.Namespace
    """
    p = argparse.ArgumentParser(description="Config-driven tabular TD training.")
    p.add_argument("config", type=Path, help="Path to a .yaml/.yml/.json experiment config.")
    p.add_argument("--episodes", type=int, default=None, help="Override the number of training episodes.")
    p.add_argument("--seed", type=int, default=None, help="Override the master seed.")
    p.add_argument("--record", type=Path, default=None, help="Write step snapshots as JSON lines to this file.")
    p.add_argument("--plot", type=Path, default=None, help="Save the reward curve to this image file.")
    p.add_argument("--smooth", type=int, default=50, help="Smoothing window for plotting.")
    p.add_argument("--log-level", default="INFO", help="Logging level.")
    p.add_argument("--progress", action="store_true", help="Show progress bars.")

    return p.parse_args()


def main():
    args = parse_args()
    configure_logging(args.log_level)

    config = ExperimentConfig.load(args.config)
    if args.episodes is not None:
        config.episodes = args.episodes
    if args.seed is not None:
        config.seed = args.seed

    recorder = SnapshotRecorder(maxlen=None) if args.record is not None else None
    outcome = run_experiment(config, sink=recorder, progress=args.progress)

    print(format_reward_summary(outcome.training.episode_rewards, outcome.agent.name))
    if outcome.evaluation is not None:
        report = outcome.evaluation
        print(f"Success rate: {100.0 * report.success_rate:.2f}%")
        print(f"Average steps per success: {report.mean_steps_to_success:.2f}")
        print(f"Average reward per episode: {report.mean_reward:.4f}")

    print(f"\nGreedy policy ({outcome.env.name}):")
    print(format_policy(outcome.agent.Q, outcome.env))

    if args.plot is not None:
        out_path = save_reward_curves(
            curves=[outcome.training.episode_rewards],
            labels=[outcome.agent.name],
            out_path=args.plot,
            title=f"{outcome.env.name}: reward per episode",
            smooth_window=args.smooth,
        )
        print(f"Saved plot: {out_path.resolve()}")

    if recorder is not None:
        args.record.parent.mkdir(parents=True, exist_ok=True)
        with open(args.record, "w", encoding="utf-8") as f:
            for snapshot in recorder.snapshots:
                f.write(snapshot.to_json() + "\n")
        print(f"Saved {len(recorder)} snapshots: {args.record.resolve()}")


if __name__ == "__main__":
    main()
