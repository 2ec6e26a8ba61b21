import numpy as np
import pytest

from tdlab.tabular import (
    BoltzmannPolicy,
    EpsilonGreedyPolicy,
    greedy_action,
    sample_from_probabilities,
    softmax_probabilities,
    tied_best_actions,
)


def test_greedy_selection_breaks_ties_uniformly() -> None:
    """
    With epsilon=0, every maximizing action should be chosen about equally often
    and non-maximizing actions never.

    Test Goal: check uniform tie-breaking among all maximizers.
    Why this matters: a first-argmax rule would always pick the lowest index while the table is still all zeros.
    """
    policy = EpsilonGreedyPolicy(epsilon=0.0, seed=0)
    q = np.array([1.0, 3.0, 3.0, 0.0])

    n = 10_000
    counts = np.bincount([policy.select(q) for _ in range(n)], minlength=4)

    assert counts[0] == 0
    assert counts[3] == 0
    assert abs(counts[1] / n - 0.5) < 0.03
    assert abs(counts[2] / n - 0.5) < 0.03


def test_all_equal_row_is_not_biased_to_the_lowest_index() -> None:
    """
    An unvisited (all-zero) row yields every action with roughly equal frequency.
    """
    policy = EpsilonGreedyPolicy(epsilon=0.0, seed=2)
    q = np.zeros(4)

    n = 8_000
    freqs = np.bincount([policy.select(q) for _ in range(n)], minlength=4) / n
    assert np.all(np.abs(freqs - 0.25) < 0.03)


def test_full_exploration_is_uniform() -> None:
    """
    With epsilon=1, the action is uniform over all actions regardless of the Q-values.
    """
    policy = EpsilonGreedyPolicy(epsilon=1.0, seed=1)
    q = np.array([100.0, 0.0, 0.0])

    n = 9_000
    freqs = np.bincount([policy.select(q) for _ in range(n)], minlength=3) / n
    assert np.all(np.abs(freqs - 1.0 / 3.0) < 0.03)


def test_tied_best_actions_uses_exact_equality() -> None:
    """
    Entries that differ by a tiny amount are different estimates, not a tie.
    """
    assert tied_best_actions(np.array([0.0, 0.0, 0.0])).tolist() == [0, 1, 2]
    assert tied_best_actions(np.array([1.0, 1.0 + 1e-12, 1.0])).tolist() == [1]


def test_greedy_action_for_evaluation() -> None:
    """
    Evaluation takes the first maximum on partial ties and only randomizes when the whole row is tied.
    """
    rng = np.random.default_rng(0)
    assert all(greedy_action(np.array([1.0, 3.0, 3.0]), rng) == 1 for _ in range(50))

    picks = {greedy_action(np.zeros(4), rng) for _ in range(200)}
    assert picks == {0, 1, 2, 3}


def test_epsilon_decay_respects_floor() -> None:
    """
    epsilon <- max(epsilon_min, epsilon * decay_factor), applied once per episode.
    """
    policy = EpsilonGreedyPolicy(epsilon=1.0, epsilon_min=0.1, decay_factor=0.5, seed=0)

    seen = []
    for _ in range(6):
        policy.decay()
        seen.append(policy.parameter)

    assert np.allclose(seen, [0.5, 0.25, 0.125, 0.1, 0.1, 0.1])


def test_constant_epsilon_by_default() -> None:
    """
    The default decay factor keeps epsilon fixed.
    """
    policy = EpsilonGreedyPolicy(epsilon=0.1, seed=0)
    for _ in range(100):
        policy.decay()
    assert policy.epsilon == 0.1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"epsilon": 1.5},
        {"epsilon": -0.1},
        {"epsilon": 0.1, "epsilon_min": 0.2},
        {"epsilon": 0.1, "decay_factor": 0.0},
        {"epsilon": 0.1, "decay_factor": 1.5},
    ],
)
def test_epsilon_greedy_rejects_bad_parameters(kwargs) -> None:
    """
    Invalid exploration parameters are rejected at construction.
    """
    with pytest.raises(ValueError):
        EpsilonGreedyPolicy(**kwargs)


def test_softmax_equal_values_are_uniform() -> None:
    """
    Equal Q-values give equal probabilities at any temperature.
    """
    assert np.allclose(softmax_probabilities(np.array([2.0, 2.0]), temperature=1.0), [0.5, 0.5])
    assert np.allclose(softmax_probabilities(np.array([2.0, 2.0]), temperature=0.01), [0.5, 0.5])


def test_softmax_is_stable_for_extreme_values() -> None:
    """
    Large Q-values with a small temperature must not overflow.

    Test Goal: max-subtraction keeps every exponent <= 0.
    Why this matters: HazardGrid and DispatchGrid produce Q-values in the hundreds while the temperature decays to 0.01.
    """
    probs = softmax_probabilities(np.array([1000.0, 0.0, -1000.0]), temperature=0.01)
    assert np.all(np.isfinite(probs))
    assert np.isclose(np.sum(probs), 1.0)
    assert np.allclose(probs, [1.0, 0.0, 0.0])


def test_softmax_rejects_non_positive_temperature() -> None:
    with pytest.raises(ValueError):
        softmax_probabilities(np.array([0.0, 1.0]), temperature=0.0)


def test_inverse_cdf_sampling() -> None:
    """
    The sampled action is the first one whose cumulative probability exceeds u.
    """
    probs = np.array([0.2, 0.5, 0.3])
    assert sample_from_probabilities(probs, 0.0) == 0
    assert sample_from_probabilities(probs, 0.1) == 0
    assert sample_from_probabilities(probs, 0.2) == 1
    assert sample_from_probabilities(probs, 0.69) == 1
    assert sample_from_probabilities(probs, 0.7) == 2
    assert sample_from_probabilities(probs, 0.999999) == 2


def test_inverse_cdf_never_picks_zero_probability_actions() -> None:
    probs = np.array([0.0, 1.0, 0.0])
    for u in (0.0, 0.3, 0.999999):
        assert sample_from_probabilities(probs, u) == 1


@pytest.mark.parametrize("probs", [[0.5, 0.6], [-0.1, 1.1], [], [[0.5, 0.5]]])
def test_inverse_cdf_rejects_invalid_vectors(probs) -> None:
    with pytest.raises(ValueError):
        sample_from_probabilities(np.array(probs), 0.5)


def test_boltzmann_sampling_frequencies() -> None:
    """
    With T=1 and Q = [0, ln 3] the probabilities are [0.25, 0.75].
    """
    policy = BoltzmannPolicy(temperature=1.0, min_temperature=0.01, decay_rate=0.0, seed=0)
    q = np.array([0.0, np.log(3.0)])
    assert np.allclose(policy.probabilities(q), [0.25, 0.75])

    n = 20_000
    freq = np.mean([policy.select(q) for _ in range(n)])
    assert abs(freq - 0.75) < 0.02


def test_boltzmann_temperature_schedule() -> None:
    """
    T_k = T_min + (T_0 - T_min) * exp(-rate * k): decreasing, bounded below by T_min.
    """
    policy = BoltzmannPolicy(temperature=1.0, min_temperature=0.01, decay_rate=0.0005, seed=0)

    temps = []
    for _ in range(1000):
        policy.decay()
        temps.append(policy.parameter)

    assert np.all(np.diff(temps) < 0.0)
    assert np.isclose(temps[-1], 0.01 + 0.99 * np.exp(-0.0005 * 1000))

    for _ in range(100_000):
        policy.decay()
    assert policy.parameter >= 0.01
    assert np.isclose(policy.parameter, 0.01, atol=1e-6)


def test_boltzmann_becomes_greedy_at_low_temperature() -> None:
    policy = BoltzmannPolicy(temperature=0.01, min_temperature=0.01, decay_rate=0.0, seed=0)
    q = np.array([0.0, 1.0, 0.5])
    assert all(policy.select(q) == 1 for _ in range(200))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"temperature": 0.0},
        {"temperature": 1.0, "min_temperature": 0.0},
        {"temperature": 1.0, "min_temperature": 2.0},
        {"temperature": 1.0, "decay_rate": -0.1},
    ],
)
def test_boltzmann_rejects_bad_parameters(kwargs) -> None:
    with pytest.raises(ValueError):
        BoltzmannPolicy(**kwargs)
