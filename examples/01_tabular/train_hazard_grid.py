"""
Train SARSA vs Q-learning on HazardGrid (the cliff-walking task).

Run from repo root:
    python examples/01_tabular/train_hazard_grid.py

It saves a plot to:
    assets/plots/hazard_grid_rewards.png

Tip:
    Use --print-policies to print the greedy policies learned by each agent.
    SARSA learns the safe path away from the cliff, Q-learning learns the short path along its edge
    (and keeps falling off while it explores).

Use --gymnasium to train on the Gymnasium CliffWalking reference instead of the built-in grid.
"""

from __future__ import annotations

import argparse

from tdlab.common.log import configure_logging
from tdlab.common.plotting import save_reward_curves
from tdlab.common.seeding import seed_everything, spawn_seeds
from tdlab.envs import Environment, GymnasiumEnvironment, HazardGrid
from tdlab.tabular import q_learning_agent, sarsa_agent
from tdlab.training import evaluate, format_policy, format_reward_summary, greedy_rollout, train


def make_environment(use_gymnasium: bool, seed: int) -> Environment:
    """
    Build the training environment.

    :param use_gymnasium: Use the Gymnasium CliffWalking reference instead of HazardGrid.
        :type use_gymnasium: bool
    :param seed: Environment seed.
        :type seed: int

    :return: The environment.
        :rtype: Environment
    """
    if use_gymnasium:
        return GymnasiumEnvironment(["CliffWalking-v1", "CliffWalking-v0"], seed=seed)
    return HazardGrid(seed=seed)


def parse_args() -> argparse.Namespace:
    """
    Parse CLI arguments.

    :return: Parsed args.
        :rtype: argparse.Namespace
    """
    p = argparse.ArgumentParser(description="Train SARSA vs Q-learning on HazardGrid.")
    p.add_argument("--episodes", type=int, default=500, help="Training episodes per agent.")
    p.add_argument("--max-steps", type=int, default=None, help="Optional step cap per training episode.")
    p.add_argument("--alpha", type=float, default=0.5, help="Learning rate.")
    p.add_argument("--gamma", type=float, default=0.99, help="Discount factor.")
    p.add_argument("--epsilon", type=float, default=0.1, help="Exploration probability.")
    p.add_argument("--eval-episodes", type=int, default=100, help="Greedy evaluation episodes.")
    p.add_argument("--seed", type=int, default=0, help="Master seed.")
    p.add_argument("--smooth", type=int, default=10, help="Smoothing window for plotting.")
    p.add_argument("--print-policies", action="store_true", help="Print the greedy policy learned by each method.")
    p.add_argument("--gymnasium", action="store_true", help="Use Gymnasium's CliffWalking instead of HazardGrid.")
    p.add_argument("--progress", action="store_true", help="Show progress bars.")

    return p.parse_args()


def main():
    """
    Train both agents with the same hyperparameters, report online and greedy performance, save the reward curves.
    """
    args = parse_args()
    configure_logging()
    seed_everything(args.seed)
    env_seed, sarsa_seed, q_seed, eval_seed = spawn_seeds(args.seed, 4)

    hyper = dict(alpha=args.alpha, gamma=args.gamma, epsilon=args.epsilon)
    results = {}
    for name, factory, agent_seed in (("SARSA", sarsa_agent, sarsa_seed), ("Q-learning", q_learning_agent, q_seed)):
        env = make_environment(args.gymnasium, seed=env_seed)
        agent = factory(env.n_states, env.n_actions, seed=agent_seed, **hyper)
        result = train(env, agent, args.episodes, max_steps=args.max_steps, progress=args.progress,
                       log_every=max(1, args.episodes // 5))
        report = evaluate(env, agent.Q, episodes=args.eval_episodes, seed=eval_seed)
        rollout = greedy_rollout(env, agent.Q, rng=eval_seed)
        results[name] = (env, agent, result, report, rollout)

    out_path = save_reward_curves(
        curves=[result.episode_rewards for _, _, result, _, _ in results.values()],
        labels=list(results),
        out_path="assets/plots/hazard_grid_rewards.png",
        title="HazardGrid: reward per episode",
        smooth_window=args.smooth,
    )
    print(f"Saved plot: {out_path.resolve()}")

    for name, (env, agent, result, report, rollout) in results.items():
        print()
        print(format_reward_summary(result.episode_rewards, name))
        print(f"Greedy evaluation: reward/episode {report.mean_reward:.2f}, "
              f"greedy path {rollout.steps} steps (reached goal: {rollout.done and rollout.rewards[-1] > -100})")
        if args.print_policies:
            print(f"\nGreedy policy learned by {name}:")
            print(format_policy(agent.Q, env))

    for env, *_ in results.values():
        if isinstance(env, GymnasiumEnvironment):
            env.close()


if __name__ == "__main__":
    main()
