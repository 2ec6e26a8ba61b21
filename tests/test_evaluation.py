import numpy as np
import pytest

from tdlab.envs import DispatchGrid, HazardGrid, HoleGrid
from tdlab.tabular import q_learning_agent
from tdlab.training import evaluate, greedy_rollout, train


def test_q_learning_solves_hole_grid_end_to_end() -> None:
    """
    After training, the greedy policy walks from the start to the goal without touching a hole.

    Test Goal: end-to-end check of table, exploration, update rule, loop and evaluator together.
    Why this matters: each piece can be right in isolation and still be wired together wrongly.
    """
    env = HoleGrid()
    agent = q_learning_agent(env.n_states, env.n_actions, alpha=0.5, gamma=0.99, epsilon=0.1, seed=42)

    train(env, agent, episodes=50_000)
    rollout = greedy_rollout(env, agent.Q, rng=0)

    assert rollout.done
    assert rollout.succeeded
    assert rollout.states[-1] == env.goal_state
    assert not set(rollout.states) & env.holes
    assert rollout.steps >= 6

    report = evaluate(env, agent.Q, episodes=20, seed=0)
    assert report.success_rate == 1.0
    assert report.successes == 20
    assert report.mean_steps_to_success == rollout.steps
    assert report.mean_reward == 1.0


def test_step_ceiling_stops_looping_policies() -> None:
    """
    A policy that bumps into the wall forever is cut at max_steps and is not a success.
    """
    env = HoleGrid()
    q_table = np.zeros((env.n_states, env.n_actions))
    q_table[0, 0] = 1.0  # up from the top-left corner: stays put

    rollout = greedy_rollout(env, q_table, max_steps=50, rng=0)
    assert rollout.steps == 50
    assert not rollout.done
    assert not rollout.succeeded
    assert set(rollout.states) == {0}

    report = evaluate(env, q_table, episodes=3, max_steps=50, seed=0)
    assert report.success_rate == 0.0
    assert report.mean_steps_to_success == 0.0
    assert report.mean_reward == 0.0


def test_cliff_fall_is_not_a_success() -> None:
    env = HazardGrid()
    q_table = np.zeros((env.n_states, env.n_actions))
    q_table[env.start_state, 1] = 1.0  # right, into the cliff

    report = evaluate(env, q_table, episodes=2, seed=0)
    assert report.success_rate == 0.0
    assert report.rewards == (-100.0, -100.0)


def test_evaluation_does_not_modify_the_table() -> None:
    env = HoleGrid()
    q_table = np.random.default_rng(0).normal(size=(env.n_states, env.n_actions))
    before = q_table.copy()

    evaluate(env, q_table, episodes=10, max_steps=20, seed=0)
    assert np.array_equal(q_table, before)


def test_rollout_from_a_pinned_dispatch_configuration() -> None:
    """
    A pinned DispatchGrid configuration can be rolled out without reset.
    """
    env = DispatchGrid(seed=0)
    q_table = np.full((env.n_states, env.n_actions), -1.0)
    start = env.set_state(0, 0, passenger=0, destination=1)
    q_table[start, DispatchGrid.PICKUP] = 0.0
    aboard = env.encode(0, 0, env.in_cab, 1)
    for col in range(4):
        q_table[env.encode(0, col, env.in_cab, 1), 2] = 0.0  # east
    q_table[env.encode(0, 4, env.in_cab, 1), DispatchGrid.DROPOFF] = 0.0

    rollout = greedy_rollout(env, q_table, start_state=start, rng=0)

    assert rollout.states[:2] == [start, aboard]
    assert rollout.actions == [DispatchGrid.PICKUP, 2, 2, 2, 2, DispatchGrid.DROPOFF]
    assert rollout.total_reward == -5.0 + 20.0
    assert rollout.succeeded


@pytest.mark.parametrize("kwargs", [{"episodes": 0}, {"max_steps": 0}])
def test_evaluate_rejects_bad_arguments(kwargs) -> None:
    env = HoleGrid()
    with pytest.raises(ValueError):
        evaluate(env, np.zeros((env.n_states, env.n_actions)), **kwargs)


def test_evaluate_rejects_mismatched_table() -> None:
    env = HoleGrid()
    with pytest.raises(ValueError):
        evaluate(env, np.zeros((env.n_states + 1, env.n_actions)))
