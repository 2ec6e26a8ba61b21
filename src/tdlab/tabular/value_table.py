from __future__ import annotations

import operator

import numpy as np


class ValueTable:
    """
    Dense Q-table: one floating-point estimate per (state, action) pair.

    The shape is fixed at construction. Indices are validated on every access that can mutate
    the table: an out-of-range or non-integer index is a caller bug and raises instead of being clamped
    or truncated.

    :param n_states: Number of discrete states (> 0).
        :type n_states: int
    :param n_actions: Number of discrete actions (> 0).
        :type n_actions: int
    :param initial_value: Initial estimate for every entry (0.0, or an optimistic constant).
        :type initial_value: float
    """

    def __init__(self, n_states: int, n_actions: int, initial_value: float = 0.0):
        self.n_states = int(n_states)
        self.n_actions = int(n_actions)
        if self.n_states <= 0:
            raise ValueError(f"n_states must be > 0, got {n_states}")
        if self.n_actions <= 0:
            raise ValueError(f"n_actions must be > 0, got {n_actions}")

        self.initial_value = float(initial_value)
        if not np.isfinite(self.initial_value):
            raise ValueError(f"initial_value must be finite, got {initial_value}")
        self.values = np.full(shape=(self.n_states, self.n_actions), fill_value=self.initial_value, dtype=np.float64)

    @property
    def shape(self) -> tuple[int, int]:
        return self.n_states, self.n_actions

    def check_state(self, state: int) -> int:
        try:
            state = operator.index(state)
        except TypeError:
            raise ValueError(f"state must be an integer, got {state!r}") from None
        if not (0 <= state < self.n_states):
            raise ValueError(f"state={state} out of bounds [0, {self.n_states - 1}]")
        return state

    def check_action(self, action: int) -> int:
        try:
            action = operator.index(action)
        except TypeError:
            raise ValueError(f"action must be an integer, got {action!r}") from None
        if not (0 <= action < self.n_actions):
            raise ValueError(f"action={action} out of bounds [0, {self.n_actions - 1}]")
        return action

    def row(self, state: int) -> np.ndarray:
        """
        Read-only view of the estimates for one state.

        :param state: State index.
            :type state: int

        :return: Array of shape (n_actions,).
            :rtype: np.ndarray
        """
        view = self.values[self.check_state(state)]
        view.flags.writeable = False
        return view

    def value(self, state: int, action: int) -> float:
        return float(self.values[self.check_state(state), self.check_action(action)])

    def max_value(self, state: int) -> float:
        return float(np.max(self.values[self.check_state(state)]))

    def move_towards(self, state: int, action: int, target: float, alpha: float) -> float:
        """
        Move Q[state, action] a fraction alpha of the way towards target.

            Q(s,a) <- Q(s,a) + alpha * (target - Q(s,a))

        :param state: State index.
            :type state: int
        :param action: Action index.
            :type action: int
        :param target: TD target.
            :type target: float
        :param alpha: Step size.
            :type alpha: float

        :return: The TD error (target - old estimate).
            :rtype: float
        """
        state, action = self.check_state(state), self.check_action(action)
        td_error = float(target) - self.values[state, action]
        self.values[state, action] += alpha * td_error
        return float(td_error)

    def greedy_actions(self) -> np.ndarray:
        """
        Argmax action per state (first maximum on ties).

        :return: Array of shape (n_states,) with action indices.
            :rtype: np.ndarray
        """
        return np.argmax(self.values, axis=1).astype(np.int64)
