from __future__ import annotations

import logging

import numpy as np
from tqdm import tqdm

from tdlab.envs.base import Environment
from tdlab.tabular.agent import TDAgent
from tdlab.training.results import EpisodeResult
from tdlab.training.snapshots import SnapshotEmitter

logger = logging.getLogger(__name__)


def run_episode(
    env: Environment,
    agent: TDAgent,
    episode: int = 0,
    max_steps: int | None = None,
    emitter: SnapshotEmitter | None = None,
) -> tuple[float, int]:
    """
    Run one training episode with online TD updates.

    The next action is chosen BEFORE the update, for every update rule:
        select A
        step -> observe S', R, done
        select A' (same behaviour policy)
        update using (S, A, R, S', A', done)
        S, A <- S', A'

    SARSA needs A' inside its target; Q-learning ignores it but follows the same loop, so one
    runner serves both and the action actually executed next is the one the update saw.

    :param env: Environment to interact with.
        :type env: Environment
    :param agent: Agent to train.
        :type agent: TDAgent
    :param episode: Episode index (only used for snapshots).
        :type episode: int
    :param max_steps: Optional safety cap; None runs until the environment reports done.
        :type max_steps: int | None
    :param emitter: Optional snapshot side channel.
        :type emitter: SnapshotEmitter | None

    :return: (episode_return, steps)
        :rtype: tuple[float, int]
    """
    state = env.reset()
    if emitter is not None:
        emitter.emit(env, episode, 0, 0.0)

    action = agent.choose_action(state)
    total_reward = 0.0
    steps = 0
    done = False

    while not done:
        if max_steps is not None and steps >= max_steps:
            break
        steps += 1
        next_state, reward, done = env.step(action)
        total_reward += reward

        next_action = agent.choose_action(next_state)
        agent.update(state, action, reward, next_state, next_action, done)

        state, action = next_state, next_action
        if emitter is not None:
            emitter.emit(env, episode, steps, total_reward)

    return total_reward, steps


def train(
    env: Environment,
    agent: TDAgent,
    episodes: int,
    max_steps: int | None = None,
    emitter: SnapshotEmitter | None = None,
    progress: bool = False,
    log_every: int = 0,
) -> EpisodeResult:
    """
    Train an agent for a number of episodes.

    After each episode the agent's exploration parameter is decayed once and the episode's
    total reward is recorded.

    :param env: Environment to interact with.
        :type env: Environment
    :param agent: Agent to train (its Q-table is updated in place).
        :type agent: TDAgent
    :param episodes: Number of episodes (>= 0).
        :type episodes: int
    :param max_steps: Optional per-episode step cap; None runs every episode to termination.
        :type max_steps: int | None
    :param emitter: Optional snapshot side channel.
        :type emitter: SnapshotEmitter | None
    :param progress: Show a tqdm progress bar.
        :type progress: bool
    :param log_every: Log rolling statistics every N episodes (0 disables).
        :type log_every: int

    :return: EpisodeResult with the Q-table and per-episode rewards.
        :rtype: EpisodeResult
    """
    if episodes < 0:
        raise ValueError(f"episodes must be >= 0, got {episodes}")
    if max_steps is not None and max_steps <= 0:
        raise ValueError(f"max_steps must be >= 1 or None, got {max_steps}")
    if agent.n_states != env.n_states or agent.n_actions != env.n_actions:
        raise ValueError(
            f"Agent table {agent.n_states}x{agent.n_actions} does not match "
            f"environment {env.n_states}x{env.n_actions}"
        )

    rewards: list[float] = []
    lengths: list[int] = []

    iterator = tqdm(range(episodes), desc=f"Training {agent.name}", disable=not progress)
    for ep in iterator:
        total_reward, steps = run_episode(env, agent, episode=ep, max_steps=max_steps, emitter=emitter)
        agent.decay_exploration()

        rewards.append(float(total_reward))
        lengths.append(int(steps))

        if log_every and (ep + 1) % log_every == 0:
            recent = float(np.mean(rewards[-log_every:]))
            logger.info("%s on %s: episode %d/%d, mean reward (last %d) %.2f, exploration %.4f",
                        agent.name, env.name, ep + 1, episodes, log_every, recent, agent.exploration_parameter)
            if progress:
                iterator.set_postfix({"avg_reward": f"{recent:.2f}", "explore": f"{agent.exploration_parameter:.3f}"})

    return EpisodeResult(
        q_table=agent.Q,
        episode_rewards=tuple(rewards),
        episode_lengths=tuple(lengths),
        agent_name=agent.name,
        env_name=env.name,
    )
