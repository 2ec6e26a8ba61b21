from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from tdlab.common.seeding import make_rng


def tied_best_actions(q: np.ndarray) -> np.ndarray:
    """
    All actions attaining the maximum value of a Q row.

    Ties use exact floating-point equality: untouched entries (e.g. all zeros early in learning) tie,
    entries that were updated differently do not.

    :param q: Q-values of one state, shape (n_actions,).
        :type q: np.ndarray

    :return: Indices of the maximizing actions, in increasing order.
        :rtype: np.ndarray
    """
    q = np.asarray(q, dtype=np.float64)
    return np.flatnonzero(q == np.max(q))


def greedy_action(q: np.ndarray, rng: np.random.Generator) -> int:
    """
    Deterministic greedy choice used for evaluation.

    Returns the row-maximizing action (first one on partial ties). Only when every action is tied
    (e.g. a state that was never visited) does it fall back to a uniform random action.

    :param q: Q-values of one state.
        :type q: np.ndarray
    :param rng: Generator used for the all-tied fallback.
        :type rng: np.random.Generator

    :return: Action index.
        :rtype: int
    """
    q = np.asarray(q, dtype=np.float64)
    if np.all(q == q[0]):
        return int(rng.integers(low=0, high=q.shape[0]))
    return int(np.argmax(q))


def softmax_probabilities(q: np.ndarray, temperature: float) -> np.ndarray:
    """
    Boltzmann distribution over actions.

        p(a) = exp((Q(a) - max Q) / T) / sum_b exp((Q(b) - max Q) / T)

    Subtracting the row maximum does not change the distribution but keeps every exponent <= 0,
    so exp() cannot overflow no matter how large the Q-values or how small the temperature.

    :param q: Q-values of one state.
        :type q: np.ndarray
    :param temperature: Softmax temperature (> 0).
        :type temperature: float

    :return: Probabilities, shape (n_actions,), summing to 1.
        :rtype: np.ndarray
    """
    if temperature <= 0.0:
        raise ValueError(f"temperature must be > 0, got {temperature}")
    q = np.asarray(q, dtype=np.float64)
    z = np.exp((q - np.max(q)) / temperature)
    return z / np.sum(z)


def sample_from_probabilities(probs: np.ndarray, u: float) -> int:
    """
    Inverse-CDF sampling: the first action whose cumulative probability exceeds u.

    :param probs: Probability vector (non-negative, sums to 1).
        :type probs: np.ndarray
    :param u: Uniform draw in [0, 1).
        :type u: float

    :return: Sampled action index.
        :rtype: int
    """
    probs = np.asarray(probs, dtype=np.float64)
    if probs.ndim != 1 or probs.size == 0:
        raise ValueError("probs must be a non-empty 1D vector")
    if np.any(probs < 0.0) or not np.isclose(np.sum(probs), 1.0):
        raise ValueError(f"probs must be non-negative and sum to 1, got {probs}")

    cdf = np.cumsum(probs)
    idx = int(np.searchsorted(cdf, u, side="right"))
    # cumsum can end slightly below 1.0
    return min(idx, probs.size - 1)


class ExplorationPolicy(ABC):
    """
    Action-selection strategy over one row of a Q-table.

    Policies own their random generator and their exploration parameter (ε or temperature);
    the agent calls `decay()` once per finished episode.
    """

    def __init__(self, seed: int | np.random.Generator | None = None):
        self.rng = make_rng(seed)

    @abstractmethod
    def select(self, q: np.ndarray) -> int:
        """Pick an action given the Q-values of the current state."""

    @abstractmethod
    def decay(self) -> None:
        """Advance the exploration schedule by one episode."""

    @property
    @abstractmethod
    def parameter(self) -> float:
        """Current exploration parameter (ε or temperature)."""


class EpsilonGreedyPolicy(ExplorationPolicy):
    """
    ε-greedy exploration with uniform tie-breaking and multiplicative decay.

        1. With probability epsilon: explore -> uniformly random action
        2. Else: exploit -> uniformly random action among ALL maximizers

    Always taking the first argmax would bias the agent towards low action indices,
    because early in learning many entries tie (often all 0).

    After every episode: epsilon <- max(epsilon_min, epsilon * decay_factor).

    :param epsilon: Initial exploration probability.
        :type epsilon: float
    :param epsilon_min: Floor for epsilon.
        :type epsilon_min: float
    :param decay_factor: Multiplicative decay per episode (1.0 keeps epsilon constant).
        :type decay_factor: float
    :param seed: RNG seed or Generator.
        :type seed: int | np.random.Generator | None
    """

    def __init__(
        self,
        epsilon: float = 0.1,
        epsilon_min: float = 0.0,
        decay_factor: float = 1.0,
        seed: int | np.random.Generator | None = None,
    ):
        super().__init__(seed=seed)
        self.epsilon = float(epsilon)
        self.epsilon_min = float(epsilon_min)
        self.decay_factor = float(decay_factor)

        if not (0.0 <= self.epsilon <= 1.0):
            raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")
        if not (0.0 <= self.epsilon_min <= self.epsilon):
            raise ValueError(f"epsilon_min must be in [0, epsilon], got {epsilon_min}")
        if not (0.0 < self.decay_factor <= 1.0):
            raise ValueError(f"decay_factor must be in (0, 1], got {decay_factor}")

    def select(self, q: np.ndarray) -> int:
        # Exploration
        if self.rng.random() < self.epsilon:
            return int(self.rng.integers(low=0, high=len(q)))

        # Exploitation
        return int(self.rng.choice(tied_best_actions(q)))

    def decay(self) -> None:
        self.epsilon = max(self.epsilon_min, self.epsilon * self.decay_factor)

    @property
    def parameter(self) -> float:
        return self.epsilon


class BoltzmannPolicy(ExplorationPolicy):
    """
    Softmax (Boltzmann) exploration with an exponential temperature schedule.

    Actions are sampled from softmax(Q / T). High T -> nearly uniform, low T -> nearly greedy.
    After episode k the temperature becomes:

        T_k = T_min + (T_0 - T_min) * exp(-decay_rate * k)

    :param temperature: Initial temperature T_0 (> 0).
        :type temperature: float
    :param min_temperature: Floor T_min (> 0, <= T_0).
        :type min_temperature: float
    :param decay_rate: Exponential decay rate per episode (>= 0).
        :type decay_rate: float
    :param seed: RNG seed or Generator.
        :type seed: int | np.random.Generator | None
    """

    def __init__(
        self,
        temperature: float = 1.0,
        min_temperature: float = 0.01,
        decay_rate: float = 0.0005,
        seed: int | np.random.Generator | None = None,
    ):
        super().__init__(seed=seed)
        self.initial_temperature = float(temperature)
        self.min_temperature = float(min_temperature)
        self.decay_rate = float(decay_rate)

        if self.initial_temperature <= 0.0:
            raise ValueError(f"temperature must be > 0, got {temperature}")
        if not (0.0 < self.min_temperature <= self.initial_temperature):
            raise ValueError(f"min_temperature must be in (0, temperature], got {min_temperature}")
        if self.decay_rate < 0.0:
            raise ValueError(f"decay_rate must be >= 0, got {decay_rate}")

        self.temperature = self.initial_temperature
        self.episode = 0

    def probabilities(self, q: np.ndarray) -> np.ndarray:
        return softmax_probabilities(q, self.temperature)

    def select(self, q: np.ndarray) -> int:
        return sample_from_probabilities(self.probabilities(q), self.rng.random())

    def decay(self) -> None:
        self.episode += 1
        self.temperature = self.min_temperature + (self.initial_temperature - self.min_temperature) * float(
            np.exp(-self.decay_rate * self.episode)
        )

    @property
    def parameter(self) -> float:
        return self.temperature
