from __future__ import annotations

import numpy as np

from tdlab.envs.base import Environment
from tdlab.training.results import RewardSummary, summarize_rewards


def format_policy(q_table: np.ndarray, env: Environment, **context) -> str:
    """
    Format the greedy policy of a Q-table as a grid of action symbols.

    Special cells are drawn with their labels instead of an action, e.g. for the default HazardGrid:
        → → → → → → → → → → → ↓
        → → → → → → → → → → → ↓
        → → → → → → → → → → → ↓
        S C C C C C C C C C C G

    Environments with compound states are drawn one layer at a time; `context` selects the layer
    (e.g. passenger=2, destination=1 for DispatchGrid, has_eaten=True for ForageGrid).

    :param q_table: Q-table of shape (n_states, n_actions).
        :type q_table: np.ndarray
    :param env: Environment the table was learned on.
        :type env: Environment
    :param context: Extra configuration forwarded to env.grid_state.

    :return: Multi-line string of the policy grid.
        :rtype: str
    """
    q_table = np.asarray(q_table)
    if q_table.shape != (env.n_states, env.n_actions):
        raise ValueError(f"Q-table shape {q_table.shape} does not match environment {(env.n_states, env.n_actions)}")

    special = env.special_cells()
    lines = list()
    for r in range(env.rows):
        row_syms = list()
        for c in range(env.cols):
            cell = r * env.cols + c
            if cell in special:
                row_syms.append(special[cell])
            else:
                s = env.grid_state(r, c, **context)
                row_syms.append(env.action_symbols[int(np.argmax(q_table[s]))])
        lines.append(" ".join(row_syms))
    return "\n".join(lines)


def format_reward_summary(rewards, name: str, window: int = 100) -> str:
    """
    Two-line performance summary of a training run.

    :param rewards: Per-episode total rewards.
        :type rewards: Sequence[float]
    :param name: Agent name for the header.
        :type name: str
    :param window: Size of the "recent" window.
        :type window: int

    :return: Formatted summary.
        :rtype: str
    """
    summary: RewardSummary = summarize_rewards(rewards, window=window)
    return (
        f"--- {name} Performance ---\n"
        f"Average reward over all episodes: {summary.mean_reward:.2f}\n"
        f"Average reward over last {summary.window} episodes: {summary.recent_mean_reward:.2f}"
    )
