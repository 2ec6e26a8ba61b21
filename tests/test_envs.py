import numpy as np
import pytest

from tdlab.envs import ENVIRONMENTS, DispatchGrid, ForageGrid, HazardGrid, HoleGrid, make_env


@pytest.mark.parametrize("name", sorted(ENVIRONMENTS))
def test_random_walk_stays_in_state_space(name) -> None:
    """
    Every state produced by reset and step must lie in [0, n_states-1].

    Test Goal: exercise every environment with random actions across many episodes.
    Why this matters: an out-of-range state would index outside the Q-table.
    """
    env = make_env(name, seed=0)
    rng = np.random.default_rng(0)

    assert env.observation_space.n == env.n_states
    assert env.action_space.n == env.n_actions

    state = env.reset()
    for _ in range(2_000):
        assert 0 <= state < env.n_states
        state, reward, done = env.step(int(rng.integers(env.n_actions)))
        assert 0 <= state < env.n_states
        assert np.isfinite(reward)
        if done:
            state = env.reset()


@pytest.mark.parametrize("name", sorted(ENVIRONMENTS))
def test_step_requires_reset(name) -> None:
    """
    Stepping before reset, or after the episode ended, is a usage error.
    """
    env = make_env(name, seed=0)
    with pytest.raises(RuntimeError):
        env.step(0)

    env.reset()
    with pytest.raises(ValueError):
        env.step(env.n_actions)


def test_make_env_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        make_env("maze_of_doom")


def test_hazard_grid_layout_and_cliff() -> None:
    """
    Stepping into the cliff gives -100, returns the agent to the start and ends the episode.
    """
    env = HazardGrid()
    assert env.n_states == 48
    assert env.n_actions == 4

    start = env.reset()
    assert start == 36
    assert env.state_to_position(start) == (3, 0)

    next_state, reward, done = env.step(1)  # right, into the cliff
    assert (next_state, reward, done) == (36, -100.0, True)
    with pytest.raises(RuntimeError):
        env.step(0)

    assert env.reset() == 36
    assert env.step(3) == (36, -1.0, False)  # left wall: stays put
    assert env.step(0) == (24, -1.0, False)  # up


def test_hazard_grid_goal_costs_one_step() -> None:
    """
    The safe path along the cliff edge takes 13 steps, each worth -1, including the last one.
    """
    env = HazardGrid()
    env.reset()

    total = 0.0
    actions = [0] + [1] * 11 + [2]
    for i, a in enumerate(actions):
        state, reward, done = env.step(a)
        total += reward
        assert done == (i == len(actions) - 1)

    assert state == 47
    assert total == -13.0


def test_hole_grid_boundary_hole_and_goal() -> None:
    env = HoleGrid()
    assert env.reset() == 0

    # moving up from the top-left corner stays put, no reward, not done
    assert env.step(0) == (0, 0.0, False)
    assert env.step(1) == (1, 0.0, False)
    assert env.step(2) == (5, 0.0, True)  # hole

    env.reset()
    path = [1, 1, 2, 2, 2, 1]  # 0 -> 1 -> 2 -> 6 -> 10 -> 14 -> 15
    results = [env.step(a) for a in path]
    assert [r.next_state for r in results] == [1, 2, 6, 10, 14, 15]
    assert results[-1].reward == 1.0
    assert results[-1].done
    assert not any(r.done for r in results[:-1])


def test_hole_grid_rejects_bad_layouts() -> None:
    with pytest.raises(ValueError):
        HoleGrid(holes=(0, 5))
    with pytest.raises(ValueError):
        HoleGrid(goal_state=0)


def test_hole_grid_requires_holes_off_the_default_size() -> None:
    """
    The built-in hole pattern belongs to the 4x4 map; other sizes must name their own holes.
    """
    with pytest.raises(ValueError):
        HoleGrid(rows=8, cols=8)

    env = HoleGrid(rows=8, cols=8, holes=[9, 20])
    assert env.holes == {9, 20}
    assert env.goal_state == 63
    assert HoleGrid(rows=3, cols=3, holes=[]).holes == frozenset()


@pytest.mark.parametrize("action", [2.5, 1.0, "1", None])
def test_step_rejects_non_integer_actions(action) -> None:
    """
    A non-integer action is rejected instead of being truncated onto a valid move.
    """
    env = HoleGrid()
    env.reset()
    with pytest.raises(ValueError):
        env.step(action)
    assert env.current_state == env.start_state
    assert env.step(np.int64(1)) == (1, 0.0, False)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start": (3, 0), "goal": (3, 0)},
        {"hazards": [(3, 0)]},
        {"hazards": [(3, 11)]},
        {"start": (4, 0)},
        {"rows": 0},
    ],
    ids=["start-is-goal", "hazard-on-start", "hazard-on-goal", "start-off-grid", "empty-grid"],
)
def test_hazard_grid_rejects_bad_layouts(kwargs) -> None:
    with pytest.raises(ValueError):
        HazardGrid(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"landmarks": [(0, 0)]},
        {"landmarks": [(0, 0), (0, 0)]},
        {"landmarks": [(0, 0), (1, 1)], "landmark_labels": ["A"]},
        {"landmarks": [(0, 0), (9, 9)]},
    ],
    ids=["single-landmark", "duplicate-landmarks", "label-count-mismatch", "landmark-off-grid"],
)
def test_dispatch_grid_rejects_bad_layouts(kwargs) -> None:
    with pytest.raises(ValueError):
        DispatchGrid(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"food": (0, 0)},
        {"water": (9, 9)},
        {"food": (2, 2), "water": (2, 2)},
        {"start": (9, 9)},
        {"rows": 1, "cols": 3},
    ],
    ids=["food-on-start", "water-on-exit", "food-is-water", "start-is-exit", "too-few-cells"],
)
def test_forage_grid_rejects_bad_layouts(kwargs) -> None:
    with pytest.raises(ValueError):
        ForageGrid(**kwargs)


def test_dispatch_grid_encoding_is_a_bijection() -> None:
    """
    encode/decode must be inverse over the whole state space (500 states on the default grid).
    """
    env = DispatchGrid()
    assert env.n_states == 500
    assert env.n_actions == 6

    seen = set()
    for row in range(env.rows):
        for col in range(env.cols):
            for passenger in range(env.n_landmarks + 1):
                for destination in range(env.n_landmarks):
                    s = env.encode(row, col, passenger, destination)
                    assert env.decode(s) == (row, col, passenger, destination)
                    seen.add(s)
    assert seen == set(range(env.n_states))


def test_dispatch_grid_illegal_actions_keep_configuration() -> None:
    """
    Illegal pickup/dropoff cost -10 and leave passenger and destination unchanged.
    """
    env = DispatchGrid(seed=0)
    state = env.set_state(2, 2, passenger=0, destination=1)

    next_state, reward, done = env.step(DispatchGrid.PICKUP)
    assert (next_state, reward, done) == (state, -10.0, False)
    assert env.describe()["passenger"] == 0
    assert env.describe()["destination"] == 1

    next_state, reward, done = env.step(DispatchGrid.DROPOFF)
    assert (next_state, reward, done) == (state, -10.0, False)


def test_dispatch_grid_full_delivery() -> None:
    env = DispatchGrid(seed=0)
    env.set_state(2, 2, passenger=0, destination=1)  # wait at R (0, 0), deliver to G (0, 4)

    for a in (1, 1, 3, 3):  # north, north, west, west
        assert env.step(a).reward == -1.0
    assert env.decode(env.step(DispatchGrid.PICKUP).next_state) == (0, 0, env.in_cab, 1)

    assert env.step(DispatchGrid.DROPOFF).reward == -10.0  # wrong landmark

    for _ in range(4):
        env.step(2)  # east
    next_state, reward, done = env.step(DispatchGrid.DROPOFF)
    assert env.decode(next_state)[:2] == (0, 4)
    assert reward == 20.0
    assert done


def test_dispatch_grid_reset_draws_distinct_landmarks() -> None:
    env = DispatchGrid(seed=123)
    for _ in range(200):
        row, col, passenger, destination = env.decode(env.reset())
        assert 0 <= passenger < env.n_landmarks
        assert 0 <= destination < env.n_landmarks
        assert passenger != destination


def test_forage_grid_state_encoding() -> None:
    env = ForageGrid()
    assert env.n_states == 400

    for s in range(env.n_states):
        cell, eaten, drunk = env.decode(s)
        assert env.encode(cell, eaten, drunk) == s
    assert env.encode(7, True, False) == 107
    assert env.encode(7, False, True) == 207
    assert env.encode(7, True, True) == 307


def test_forage_grid_rewards_resources_once() -> None:
    """
    Food and water pay out on the first visit only; leaving with both is rewarded.
    """
    env = ForageGrid(rows=3, cols=3, start=(0, 0), exit_pos=(2, 2), food=(0, 1), water=(0, 2))
    assert env.reset() == 0

    assert env.step(2) == (1 + 9, 19.0, False)  # east onto food
    assert env.step(3) == (0 + 9, -1.0, False)  # back west
    assert env.step(2) == (1 + 9, -1.0, False)  # food again: nothing extra
    assert env.step(2) == (2 + 9 + 18, 19.0, False)  # water
    assert env.step(1) == (5 + 27, -1.0, False)  # south
    assert env.step(1) == (8 + 27, 49.0, True)  # exit with both resources


def test_forage_grid_exit_without_resources_is_penalized() -> None:
    env = ForageGrid(rows=3, cols=3, start=(0, 0), exit_pos=(0, 1), food=(2, 2), water=(2, 1))
    env.reset()
    assert env.step(2) == (1, -51.0, True)


def test_forage_grid_random_resources_avoid_reserved_cells() -> None:
    env = ForageGrid(rows=4, cols=4, seed=7)
    placements = set()
    for _ in range(100):
        env.reset()
        info = env.describe()
        assert info["food"] != info["water"]
        assert {info["food"], info["water"]}.isdisjoint({env.start_cell, env.exit_cell})
        placements.add((info["food"], info["water"]))
    assert len(placements) > 1
