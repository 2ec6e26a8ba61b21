"""
Train an agent on DispatchGrid, then replay the greedy policy from fixed benchmark configurations.

Run from repo root:
    python examples/01_tabular/benchmark_dispatch_grid.py --agent sarsa --episodes 10000

Benchmarks:
    1. cab at (2, 2), passenger waiting at Y (4, 0), destination G (0, 4): a long trip
    2. cab at (0, 1), passenger waiting at R (0, 0), destination G (0, 4): a short trip
"""

from __future__ import annotations

import argparse

from tdlab.common.log import configure_logging
from tdlab.common.seeding import spawn_seeds
from tdlab.envs import DispatchGrid
from tdlab.tabular import make_agent
from tdlab.training import evaluate, format_policy, format_reward_summary, greedy_rollout, train

BENCHMARKS = (
    ("Pickup at Y (4,0), dropoff at G (0,4)", (2, 2, 2, 1)),
    ("Pickup at R (0,0), dropoff at G (0,4)", (0, 1, 0, 1)),
)


def parse_args() -> argparse.Namespace:
    """
    Parse CLI arguments.

    :return: Parsed args.
        :rtype: argparse.Namespace
    """
    p = argparse.ArgumentParser(description="Benchmark a greedy DispatchGrid policy from fixed start configurations.")
    p.add_argument("--agent", choices=["q_learning", "sarsa", "boltzmann"], default="q_learning", help="Agent kind.")
    p.add_argument("--episodes", type=int, default=10_000, help="Training episodes.")
    p.add_argument("--max-steps", type=int, default=200, help="Step cap for training episodes and rollouts.")
    p.add_argument("--alpha", type=float, default=0.1, help="Learning rate.")
    p.add_argument("--gamma", type=float, default=0.99, help="Discount factor.")
    p.add_argument("--seed", type=int, default=0, help="Master seed.")
    p.add_argument("--progress", action="store_true", help="Show progress bars.")

    return p.parse_args()


def main():
    args = parse_args()
    configure_logging()
    env_seed, agent_seed, eval_seed = spawn_seeds(args.seed, 3)

    env = DispatchGrid(seed=env_seed)
    hyper = dict(alpha=args.alpha, gamma=args.gamma)
    if args.agent != "boltzmann":
        hyper.update(epsilon=1.0, epsilon_min=0.01, epsilon_decay=0.999)
    agent = make_agent(args.agent, env.n_states, env.n_actions, seed=agent_seed, **hyper)

    result = train(env, agent, args.episodes, max_steps=args.max_steps, progress=args.progress,
                   log_every=max(1, args.episodes // 10))
    print(format_reward_summary(result.episode_rewards, agent.name))

    report = evaluate(env, agent.Q, episodes=1000, max_steps=args.max_steps, seed=eval_seed)
    print(f"Success rate: {100.0 * report.success_rate:.2f}%")
    print(f"Average steps per success: {report.mean_steps_to_success:.2f}")

    print("\n--- Benchmark ---")
    for title, configuration in BENCHMARKS:
        start = env.set_state(*configuration)
        rollout = greedy_rollout(env, agent.Q, start_state=start, max_steps=args.max_steps, rng=eval_seed)
        outcome = "delivered" if rollout.succeeded else "not delivered"
        print(f"{title}: {outcome} in {rollout.steps} steps (reward {rollout.total_reward:.0f})")

    print("\nGreedy policy, passenger at Y, destination G:")
    print(format_policy(agent.Q, env, passenger=2, destination=1))
    print("\nGreedy policy, passenger in the cab, destination G:")
    print(format_policy(agent.Q, env, passenger=env.in_cab, destination=1))


if __name__ == "__main__":
    main()
