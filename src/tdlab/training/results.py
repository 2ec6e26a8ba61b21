from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class EpisodeResult:
    """
    Outcome of a training run.

    Frozen once `train` returns: the per-episode sequences are tuples. The Q-table is the
    agent's live array, so it keeps changing if the agent is trained further.

    :param q_table: The agent's Q-table (a reference, not a copy).
        :type q_table: np.ndarray
    :param episode_rewards: Total reward of every completed episode, in order.
        :type episode_rewards: tuple[float, ...]
    :param episode_lengths: Number of steps of every completed episode, in order.
        :type episode_lengths: tuple[int, ...]
    :param agent_name: Name of the trained agent.
        :type agent_name: str
    :param env_name: Name of the environment.
        :type env_name: str
    """
    q_table: np.ndarray
    episode_rewards: tuple[float, ...] = ()
    episode_lengths: tuple[int, ...] = ()
    agent_name: str = ""
    env_name: str = ""

    @property
    def episodes(self) -> int:
        return len(self.episode_rewards)

    def summary(self, window: int = 100) -> "RewardSummary":
        return summarize_rewards(self.episode_rewards, window=window)


@dataclass(frozen=True)
class EvaluationReport:
    """
    Aggregated greedy-evaluation statistics.

    An episode counts as a success when it terminates with a strictly positive final reward.

    :param episodes: Number of evaluation episodes.
        :type episodes: int
    :param successes: Number of successful episodes.
        :type successes: int
    :param success_rate: successes / episodes, in [0, 1].
        :type success_rate: float
    :param mean_steps_to_success: Mean episode length over successful episodes (0 if none).
        :type mean_steps_to_success: float
    :param mean_reward: Mean total reward per episode.
        :type mean_reward: float
    :param rewards: Total reward of every evaluation episode.
        :type rewards: tuple[float, ...]
    """
    episodes: int
    successes: int
    success_rate: float
    mean_steps_to_success: float
    mean_reward: float
    rewards: tuple[float, ...] = ()


@dataclass(frozen=True)
class RewardSummary:
    """
    :param mean_reward: Mean over all episodes.
        :type mean_reward: float
    :param recent_mean_reward: Mean over the last `window` episodes.
        :type recent_mean_reward: float
    :param window: Window size actually used (min(window, episodes)).
        :type window: int
    """
    mean_reward: float
    recent_mean_reward: float
    window: int


def summarize_rewards(rewards, window: int = 100) -> RewardSummary:
    """
    Mean reward over all episodes and over the most recent ones.

    :param rewards: Per-episode total rewards.
        :type rewards: Sequence[float]
    :param window: Size of the "recent" window (>= 1).
        :type window: int

    :return: RewardSummary (means are 0.0 for an empty sequence).
        :rtype: RewardSummary
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    r = np.asarray(rewards, dtype=np.float64)
    if r.size == 0:
        return RewardSummary(mean_reward=0.0, recent_mean_reward=0.0, window=0)
    used = min(window, r.size)
    return RewardSummary(mean_reward=float(r.mean()), recent_mean_reward=float(r[-used:].mean()), window=used)


def rolling_mean(rewards, window: int) -> np.ndarray:
    """
    Mean of the last `window` values at every position (shorter at the start).

    :param rewards: Per-episode total rewards.
        :type rewards: Sequence[float]
    :param window: Window size (>= 1).
        :type window: int

    :return: Array with the same length as rewards.
        :rtype: np.ndarray
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    r = np.asarray(rewards, dtype=np.float64)
    csum = np.concatenate(([0.0], np.cumsum(r)))
    idx = np.arange(1, r.size + 1)
    start = np.maximum(0, idx - window)
    return (csum[idx] - csum[start]) / (idx - start)
