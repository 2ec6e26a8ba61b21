from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from tqdm import tqdm

from tdlab.common.seeding import make_rng
from tdlab.envs.base import Environment
from tdlab.tabular.exploration import greedy_action
from tdlab.training.results import EvaluationReport
from tdlab.training.snapshots import SnapshotEmitter

logger = logging.getLogger(__name__)

DEFAULT_EVAL_MAX_STEPS = 999


@dataclass
class Rollout:
    """
    Trace of one greedy episode.

    :param states: Visited states, starting with the start state (len = steps + 1).
        :type states: list[int]
    :param actions: Actions taken.
        :type actions: list[int]
    :param rewards: Rewards received.
        :type rewards: list[float]
    :param done: Whether the environment terminated (False means the step ceiling was hit).
        :type done: bool
    """
    states: list[int] = field(default_factory=list)
    actions: list[int] = field(default_factory=list)
    rewards: list[float] = field(default_factory=list)
    done: bool = False

    @property
    def steps(self) -> int:
        return len(self.actions)

    @property
    def total_reward(self) -> float:
        return float(sum(self.rewards))

    @property
    def succeeded(self) -> bool:
        return self.done and bool(self.rewards) and self.rewards[-1] > 0.0


def greedy_rollout(
    env: Environment,
    q_table: np.ndarray,
    start_state: int | None = None,
    max_steps: int = DEFAULT_EVAL_MAX_STEPS,
    rng: np.random.Generator | int | None = None,
    emitter: SnapshotEmitter | None = None,
    episode: int = 0,
) -> Rollout:
    """
    Run one episode with exploration disabled.

    The Q-table is only read. The step ceiling guarantees termination even when the learned
    policy loops (e.g. bouncing against a wall forever).

    :param env: Environment to roll out in.
        :type env: Environment
    :param q_table: Q-table of shape (n_states, n_actions).
        :type q_table: np.ndarray
    :param start_state: State the environment was already pinned to (e.g. DispatchGrid.set_state);
        None resets the environment.
        :type start_state: int | None
    :param max_steps: Hard step ceiling (>= 1).
        :type max_steps: int
    :param rng: Generator for the all-tied fallback.
        :type rng: np.random.Generator | int | None
    :param emitter: Optional snapshot side channel.
        :type emitter: SnapshotEmitter | None
    :param episode: Episode index (only used for snapshots).
        :type episode: int

    :return: The episode trace.
        :rtype: Rollout
    """
    if max_steps <= 0:
        raise ValueError(f"max_steps must be >= 1, got {max_steps}")
    q_table = np.asarray(q_table)
    if q_table.shape != (env.n_states, env.n_actions):
        raise ValueError(f"Q-table shape {q_table.shape} does not match environment {(env.n_states, env.n_actions)}")
    rng = make_rng(rng)

    state = env.reset() if start_state is None else env.check_state(start_state)
    rollout = Rollout(states=[state])
    if emitter is not None:
        emitter.emit(env, episode, 0, 0.0)

    while not rollout.done and rollout.steps < max_steps:
        action = greedy_action(q_table[state], rng)
        state, reward, done = env.step(action)

        rollout.actions.append(action)
        rollout.rewards.append(float(reward))
        rollout.states.append(state)
        rollout.done = bool(done)
        if emitter is not None:
            emitter.emit(env, episode, rollout.steps, rollout.total_reward)

    return rollout


def evaluate(
    env: Environment,
    q_table: np.ndarray,
    episodes: int = 1000,
    max_steps: int = DEFAULT_EVAL_MAX_STEPS,
    seed: int | np.random.Generator | None = None,
    emitter: SnapshotEmitter | None = None,
    progress: bool = False,
) -> EvaluationReport:
    """
    Quantitative greedy evaluation of a learned Q-table.

    :param env: Environment to evaluate in.
        :type env: Environment
    :param q_table: Q-table of shape (n_states, n_actions).
        :type q_table: np.ndarray
    :param episodes: Number of evaluation episodes (>= 1).
        :type episodes: int
    :param max_steps: Per-episode step ceiling.
        :type max_steps: int
    :param seed: Seed for the tie-breaking fallback.
        :type seed: int | np.random.Generator | None
    :param emitter: Optional snapshot side channel.
        :type emitter: SnapshotEmitter | None
    :param progress: Show a tqdm progress bar.
        :type progress: bool

    :return: Success rate, mean steps to success and mean reward.
        :rtype: EvaluationReport
    """
    if episodes <= 0:
        raise ValueError(f"episodes must be >= 1, got {episodes}")
    rng = make_rng(seed)

    rewards = []
    success_steps = []
    for ep in tqdm(range(episodes), desc="Evaluating", disable=not progress):
        rollout = greedy_rollout(env, q_table, max_steps=max_steps, rng=rng, emitter=emitter, episode=ep)
        rewards.append(rollout.total_reward)
        if rollout.succeeded:
            success_steps.append(rollout.steps)

    successes = len(success_steps)
    report = EvaluationReport(
        episodes=episodes,
        successes=successes,
        success_rate=successes / episodes,
        mean_steps_to_success=float(np.mean(success_steps)) if successes else 0.0,
        mean_reward=float(np.mean(rewards)),
        rewards=tuple(rewards),
    )
    logger.info("Evaluation on %s over %d episodes: success rate %.2f%%, steps/success %.2f, reward/episode %.4f",
                env.name, episodes, 100.0 * report.success_rate, report.mean_steps_to_success, report.mean_reward)
    return report
