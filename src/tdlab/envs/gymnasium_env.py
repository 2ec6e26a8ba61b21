from __future__ import annotations

from typing import Any, Iterable

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from tdlab.envs.base import ARROWS_URDL, Environment, StepResult


def make_gym_env(env_ids: str | Iterable[str], **kwargs) -> gym.Env:
    """
    Create a Gymnasium environment from the first registered ID.

    Toy-text IDs move between versions (CliffWalking-v0 became CliffWalking-v1), so callers
    can pass every known spelling.

    :param env_ids: One ID, or candidate IDs tried in order.
        :type env_ids: str | Iterable[str]
    :param kwargs: Extra keyword arguments for gym.make (e.g. is_slippery=False).

    :return: The created environment.
        :rtype: gym.Env
    """
    candidates = [env_ids] if isinstance(env_ids, str) else list(env_ids)
    errors = []
    for env_id in candidates:
        try:
            return gym.make(env_id, **kwargs)
        except gym.error.Error as e:
            errors.append(f"{env_id}: {e}")
    raise RuntimeError("No usable Gymnasium environment among " + ", ".join(errors or ["<no IDs>"]))


class GymnasiumEnvironment(Environment):
    """
    Adapter that drives a Gymnasium environment with Discrete spaces through this package's interface.

    Handy for cross-checking the hand-written grids against the toy-text references
    (CliffWalking, FrozenLake, Taxi): the same agents and training loop work on both.

    Gymnasium's (terminated, truncated) pair is folded into a single done flag. Each reset draws
    a fresh seed from the adapter's own RNG, so a seeded adapter replays the same episodes.

    :param env: A Gymnasium environment, one ID, or candidate IDs tried in order.
        :type env: gym.Env | str | Iterable[str]
    :param seed: RNG seed used to derive per-episode reset seeds.
        :type seed: int | np.random.Generator | None
    :param make_kwargs: Extra keyword arguments for gym.make when IDs are given.
    """

    name = "gymnasium"

    def __init__(self, env: gym.Env | str | Iterable[str], seed: int | np.random.Generator | None = None, **make_kwargs):
        super().__init__(seed=seed)
        if isinstance(env, gym.Env):
            self.env = env
        else:
            self.env = make_gym_env(env, **make_kwargs)

        obs_space, act_space = self.env.observation_space, self.env.action_space
        if not isinstance(obs_space, spaces.Discrete) or not isinstance(act_space, spaces.Discrete):
            raise ValueError("Only environments with Discrete observation and action spaces are supported")
        self.n_states = int(obs_space.n)
        self.n_actions = int(act_space.n)
        self.rows, self.cols = self._grid_shape()
        self.action_symbols = self._action_symbols()
        self._last_obs = 0

    def _action_symbols(self) -> tuple[str, ...]:
        if self.n_actions != 4:
            return tuple(str(a) for a in range(self.n_actions))
        if getattr(self.env.unwrapped, "desc", None) is not None:  # FrozenLake: left, down, right, up
            return ("←", "↓", "→", "↑")
        return ARROWS_URDL

    def _grid_shape(self) -> tuple[int, int]:
        unwrapped = self.env.unwrapped
        shape = getattr(unwrapped, "shape", None)  # CliffWalking
        if shape is not None:
            return int(shape[0]), int(shape[1])
        nrow, ncol = getattr(unwrapped, "nrow", None), getattr(unwrapped, "ncol", None)  # FrozenLake
        if nrow is not None and ncol is not None and int(nrow) * int(ncol) == self.n_states:
            return int(nrow), int(ncol)
        return 1, self.n_states

    def _reset(self) -> int:
        obs, _ = self.env.reset(seed=int(self.rng.integers(2**31 - 1)))
        self._last_obs = self.check_state(obs)
        return self._last_obs

    def _step(self, action: int) -> StepResult:
        obs, reward, terminated, truncated, _ = self.env.step(action)
        self._last_obs = self.check_state(obs)
        return StepResult(self._last_obs, float(reward), bool(terminated or truncated))

    def special_cells(self) -> dict[int, str]:
        unwrapped = self.env.unwrapped
        desc = getattr(unwrapped, "desc", None)  # FrozenLake map: S, F, H, G
        if desc is not None and np.shape(desc) == (self.rows, self.cols):
            labels = np.asarray(desc).astype(str).ravel()
            return {i: label for i, label in enumerate(labels) if label != "F"}
        special = {}
        start = getattr(unwrapped, "start_state_index", None)
        if start is not None:
            special[int(start)] = "S"
        cliff = getattr(unwrapped, "_cliff", None)
        if cliff is None:
            cliff = getattr(unwrapped, "cliff", None)
        if isinstance(cliff, np.ndarray):
            special.update({int(s): "C" for s in np.flatnonzero(cliff)})
        return special

    def state_to_position(self, state: int) -> tuple[int, int]:
        row, col = divmod(self.check_state(state), self.cols)
        return int(row), int(col)

    def grid_state(self, row: int, col: int, **context: Any) -> int:
        return self.check_state(row * self.cols + col)

    def describe(self) -> dict[str, Any]:
        return {"position": int(self._last_obs)}

    def close(self) -> None:
        self.env.close()
