from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np


@dataclass(frozen=True)
class Transition:
    """
    One (S, A, R, S', A', done) tuple handed from the training loop to the agent.

    next_action is always the action the behaviour policy actually chose in next_state,
    even for off-policy rules that ignore it.

    :param state: State the action was taken in.
        :type state: int
    :param action: Action taken.
        :type action: int
    :param reward: Observed reward.
        :type reward: float
    :param next_state: Resulting state.
        :type next_state: int
    :param next_action: Action chosen in next_state by the behaviour policy.
        :type next_action: int
    :param done: Whether the episode ended after this transition.
        :type done: bool
    """
    state: int
    action: int
    reward: float
    next_state: int
    next_action: int
    done: bool = False


# (Q table, next_state, next_action) -> value of the successor used for bootstrapping
BootstrapRule = Callable[[np.ndarray, int, int], float]


def q_learning_bootstrap(q_table: np.ndarray, next_state: int, next_action: int) -> float:
    """
    Off-policy successor value: max_a' Q(s', a').

    The greedy target policy is assumed at the next state, whatever the behaviour policy
    will actually do, so next_action is ignored.
    """
    return float(np.max(q_table[next_state]))


def sarsa_bootstrap(q_table: np.ndarray, next_state: int, next_action: int) -> float:
    """
    On-policy successor value: Q(s', a') for the action a' that will actually be taken.
    """
    return float(q_table[next_state, next_action])


UPDATE_RULES: dict[str, BootstrapRule] = {
    "q_learning": q_learning_bootstrap,
    "sarsa": sarsa_bootstrap,
}


def td_target(reward: float, gamma: float, bootstrap: float, done: bool) -> float:
    """
    One-step TD target.

        target = r                       if done (no bootstrap from a terminal transition)
        target = r + gamma * bootstrap   otherwise

    :return: The target value.
        :rtype: float
    """
    if done:
        return float(reward)
    return float(reward) + gamma * bootstrap


def resolve_update_rule(rule: str | BootstrapRule) -> BootstrapRule:
    if callable(rule):
        return rule
    try:
        return UPDATE_RULES[rule]
    except KeyError:
        raise ValueError(f"Unknown update rule {rule!r}. Choose from {sorted(UPDATE_RULES)}") from None
