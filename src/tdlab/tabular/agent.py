from __future__ import annotations

import numpy as np

from tdlab.tabular.exploration import BoltzmannPolicy, EpsilonGreedyPolicy, ExplorationPolicy
from tdlab.tabular.td_updates import BootstrapRule, Transition, resolve_update_rule, td_target
from tdlab.tabular.value_table import ValueTable


class TDAgent:
    """
    Tabular one-step TD control agent.

    The agent is a composition of three parts:
        - a ValueTable Q[s, a] that only this agent mutates
        - an ExplorationPolicy that turns a Q row into an action (ε-greedy, softmax, ...)
        - a bootstrap rule that decides which successor value the target uses

    Update (both rules):
        Q(s,a) <- Q(s,a) + alpha * [r + gamma * bootstrap(s', a') - Q(s,a)]

    with bootstrap = max_a' Q(s',a') for Q-learning (off-policy) and Q(s',a') for SARSA (on-policy).
    Terminal transitions use target = r.

    :param n_states: Number of discrete states.
        :type n_states: int
    :param n_actions: Number of discrete actions.
        :type n_actions: int
    :param update_rule: "q_learning", "sarsa", or a custom bootstrap callable.
        :type update_rule: str | BootstrapRule
    :param policy: Exploration policy. Defaults to ε-greedy with ε=0.1.
        :type policy: ExplorationPolicy | None
    :param alpha: Learning rate in (0, 1].
        :type alpha: float
    :param gamma: Discount factor in [0, 1].
        :type gamma: float
    :param initial_value: Initial Q value (use a positive constant for optimistic initialization).
        :type initial_value: float
    :param name: Display name (defaults to the update rule name).
        :type name: str | None
    :param seed: Seed for the default policy (ignored when a policy is given).
        :type seed: int | np.random.Generator | None
    """

    def __init__(
        self,
        n_states: int,
        n_actions: int,
        update_rule: str | BootstrapRule = "q_learning",
        policy: ExplorationPolicy | None = None,
        alpha: float = 0.5,
        gamma: float = 0.99,
        initial_value: float = 0.0,
        name: str | None = None,
        seed: int | np.random.Generator | None = None,
    ):
        self.table = ValueTable(n_states, n_actions, initial_value=initial_value)
        self.n_states = self.table.n_states
        self.n_actions = self.table.n_actions

        self.alpha = float(alpha)
        self.gamma = float(gamma)
        if not (0.0 < self.alpha <= 1.0):
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        if not (0.0 <= self.gamma <= 1.0):
            raise ValueError(f"gamma must be in [0, 1], got {gamma}")

        self.bootstrap = resolve_update_rule(update_rule)
        self.policy = policy if policy is not None else EpsilonGreedyPolicy(epsilon=0.1, seed=seed)
        self.name = name if name is not None else (update_rule if isinstance(update_rule, str) else "td")

    @property
    def Q(self) -> np.ndarray:
        return self.table.values

    @property
    def exploration_parameter(self) -> float:
        return self.policy.parameter

    def choose_action(self, state: int) -> int:
        """
        Select an action for `state` with the exploration policy.

        :param state: Current state index.
            :type state: int

        :return: Action index.
            :rtype: int
        """
        return self.policy.select(self.table.row(state))

    def update(
        self,
        state: int,
        action: int,
        reward: float,
        next_state: int,
        next_action: int,
        done: bool = False,
    ) -> float:
        """
        Apply one TD update to Q[state, action].

        :param state: Current state.
            :type state: int
        :param action: Action taken.
            :type action: int
        :param reward: Observed reward.
            :type reward: float
        :param next_state: Next state.
            :type next_state: int
        :param next_action: Next action chosen by the behaviour policy.
            :type next_action: int
        :param done: Whether the episode ended after this transition.
            :type done: bool

        :return: The TD error.
            :rtype: float
        """
        state, action = self.table.check_state(state), self.table.check_action(action)
        next_state, next_action = self.table.check_state(next_state), self.table.check_action(next_action)

        bootstrap = 0.0 if done else self.bootstrap(self.table.values, next_state, next_action)
        target = td_target(reward, self.gamma, bootstrap, done)
        return self.table.move_towards(state, action, target, self.alpha)

    def learn(self, transition: Transition) -> float:
        return self.update(
            transition.state,
            transition.action,
            transition.reward,
            transition.next_state,
            transition.next_action,
            transition.done,
        )

    def decay_exploration(self) -> None:
        """Called once per completed episode."""
        self.policy.decay()

    def greedy_policy(self) -> np.ndarray:
        return self.table.greedy_actions()


def q_learning_agent(
    n_states: int,
    n_actions: int,
    alpha: float = 0.5,
    gamma: float = 0.99,
    epsilon: float = 0.1,
    epsilon_min: float = 0.0,
    epsilon_decay: float = 1.0,
    initial_value: float = 0.0,
    seed: int | np.random.Generator | None = None,
) -> TDAgent:
    """Off-policy TD control (Q-learning) with ε-greedy behaviour."""
    policy = EpsilonGreedyPolicy(epsilon=epsilon, epsilon_min=epsilon_min, decay_factor=epsilon_decay, seed=seed)
    return TDAgent(n_states, n_actions, update_rule="q_learning", policy=policy, alpha=alpha, gamma=gamma,
                   initial_value=initial_value, name="q_learning")


def sarsa_agent(
    n_states: int,
    n_actions: int,
    alpha: float = 0.5,
    gamma: float = 0.99,
    epsilon: float = 0.1,
    epsilon_min: float = 0.0,
    epsilon_decay: float = 1.0,
    initial_value: float = 0.0,
    seed: int | np.random.Generator | None = None,
) -> TDAgent:
    """On-policy TD control (SARSA) with ε-greedy behaviour."""
    policy = EpsilonGreedyPolicy(epsilon=epsilon, epsilon_min=epsilon_min, decay_factor=epsilon_decay, seed=seed)
    return TDAgent(n_states, n_actions, update_rule="sarsa", policy=policy, alpha=alpha, gamma=gamma,
                   initial_value=initial_value, name="sarsa")


def boltzmann_agent(
    n_states: int,
    n_actions: int,
    alpha: float = 0.5,
    gamma: float = 0.99,
    temperature: float = 1.0,
    min_temperature: float = 0.01,
    temperature_decay_rate: float = 0.0005,
    update_rule: str = "q_learning",
    initial_value: float = 0.0,
    seed: int | np.random.Generator | None = None,
) -> TDAgent:
    """Softmax exploration; off-policy update by default."""
    policy = BoltzmannPolicy(temperature=temperature, min_temperature=min_temperature,
                             decay_rate=temperature_decay_rate, seed=seed)
    return TDAgent(n_states, n_actions, update_rule=update_rule, policy=policy, alpha=alpha, gamma=gamma,
                   initial_value=initial_value, name="boltzmann")


AGENT_FACTORIES = {
    "q_learning": q_learning_agent,
    "sarsa": sarsa_agent,
    "boltzmann": boltzmann_agent,
}


def make_agent(kind: str, n_states: int, n_actions: int, **hyper) -> TDAgent:
    """
    Build an agent by name.

    :param kind: One of "q_learning", "sarsa", "boltzmann".
        :type kind: str
    :param n_states: Number of discrete states.
        :type n_states: int
    :param n_actions: Number of discrete actions.
        :type n_actions: int
    :param hyper: Hyperparameters accepted by the matching factory.

    :return: A fresh agent.
        :rtype: TDAgent
    """
    try:
        factory = AGENT_FACTORIES[kind]
    except KeyError:
        raise ValueError(f"Unknown agent {kind!r}. Choose from {sorted(AGENT_FACTORIES)}") from None
    return factory(n_states, n_actions, **hyper)
