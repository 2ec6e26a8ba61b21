from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from typing import Any, NamedTuple

import numpy as np
from gymnasium import spaces

from tdlab.common.seeding import make_rng


class StepResult(NamedTuple):
    """
    Outcome of one environment step.

    A NamedTuple so callers can either unpack it (next_state, reward, done = env.step(a))
    or read the fields by name.

    :param next_state: Encoded state after the action.
        :type next_state: int
    :param reward: Reward received for the transition.
        :type reward: float
    :param done: Whether the episode ended with this transition.
        :type done: bool
    """
    next_state: int
    reward: float
    done: bool


class Environment(ABC):
    """
    Discrete MDP interface shared by every environment in this package.

    States are integers in [0, n_states-1], actions are integers in [0, n_actions-1].
    Concrete environments own their RNG (if they need one) and their current configuration;
    `reset` reinitializes that configuration and `step` mutates it.

    Subclasses must set `name`, `n_states`, `n_actions`, `rows`, `cols` and `action_symbols`.
    """

    name: str = "environment"
    action_symbols: tuple[str, ...] = ()

    n_states: int
    n_actions: int
    rows: int
    cols: int

    def __init__(self, seed: int | np.random.Generator | None = None):
        self.rng = make_rng(seed)
        self._needs_reset = True
        self._done = False

    @property
    def observation_space(self) -> spaces.Discrete:
        return spaces.Discrete(self.n_states)

    @property
    def action_space(self) -> spaces.Discrete:
        return spaces.Discrete(self.n_actions)

    @abstractmethod
    def _reset(self) -> int:
        """Reinitialize the internal configuration and return the encoded start state."""

    @abstractmethod
    def _step(self, action: int) -> StepResult:
        """Apply a validated action to the internal configuration."""

    @abstractmethod
    def special_cells(self) -> dict[int, str]:
        """
        Labels of the special grid cells, used for textual rendering.

        :return: Mapping from cell index (row * cols + col) to a short label.
            :rtype: dict[int, str]
        """

    @abstractmethod
    def state_to_position(self, state: int) -> tuple[int, int]:
        """
        Decode the grid position from an encoded state.

        :param state: State index.
            :type state: int

        :return: (row, col) position.
            :rtype: tuple[int, int]
        """

    @abstractmethod
    def grid_state(self, row: int, col: int, **context: Any) -> int:
        """
        Encode the state for a grid cell, with any extra configuration given in `context`.

        Used to draw one layer of a policy as a grid.

        :param row: Row index.
            :type row: int
        :param col: Column index.
            :type col: int

        :return: State index.
            :rtype: int
        """

    @abstractmethod
    def describe(self) -> dict[str, Any]:
        """
        Describe the current configuration for the snapshot side channel.

        Always contains "position" (cell index); variants add their own keys.

        :return: JSON-friendly dictionary.
            :rtype: dict[str, Any]
        """

    def reset(self) -> int:
        """
        Start a new episode.

        :return: Encoded start state.
            :rtype: int
        """
        state = self._reset()
        self._needs_reset = False
        self._done = False
        return state

    def step(self, action: int) -> StepResult:
        """
        Apply one action.

        :param action: Action index in [0, n_actions-1].
            :type action: int

        :return: StepResult(next_state, reward, done).
            :rtype: StepResult
        """
        if self._needs_reset:
            raise RuntimeError("You must call reset() before step().")
        if self._done:
            raise RuntimeError("Episode is done. Call reset() before calling step() again.")
        action = self.check_action(action)

        result = self._step(action)
        self._done = result.done
        return result

    def check_action(self, action: int) -> int:
        try:
            action = operator.index(action)
        except TypeError:
            raise ValueError(f"action must be an integer, got {action!r}") from None
        if not (0 <= action < self.n_actions):
            raise ValueError(f"Invalid action {action}. Must be in [0, {self.n_actions - 1}].")
        return action

    def check_state(self, state: int) -> int:
        try:
            state = operator.index(state)
        except TypeError:
            raise ValueError(f"state must be an integer, got {state!r}") from None
        if not (0 <= state < self.n_states):
            raise ValueError(f"state={state} out of bounds [0, {self.n_states - 1}]")
        return state


class GridEnvironment(Environment, ABC):
    """
    Base for rectangular grids with four directional moves.

    Moves that would leave the grid are clamped to the boundary (the agent stays put).
    `moves` maps each movement action to a (d_row, d_col) offset; subclasses choose the order.

    :param rows: Number of rows.
        :type rows: int
    :param cols: Number of columns.
        :type cols: int
    :param seed: RNG seed or Generator.
        :type seed: int | np.random.Generator | None
    """

    moves: dict[int, tuple[int, int]] = {}

    def __init__(self, rows: int, cols: int, seed: int | np.random.Generator | None = None):
        super().__init__(seed=seed)
        self.rows = int(rows)
        self.cols = int(cols)
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Grid must be at least 1x1, got {self.rows}x{self.cols}")
        self.n_cells = self.rows * self.cols

    def pos_to_cell(self, row: int, col: int) -> int:
        """
        Convert grid position (row, col) to a cell index.

        :param row: Row index.
            :type row: int
        :param col: Column index.
            :type col: int

        :return: Cell index.
            :rtype: int
        """
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise ValueError(f"Position ({row}, {col}) is outside the {self.rows}x{self.cols} grid")
        return row * self.cols + col

    def cell_to_pos(self, cell: int) -> tuple[int, int]:
        """
        Convert a cell index to grid position (row, col).

        :param cell: Cell index.
            :type cell: int

        :return: (row, col) position.
            :rtype: tuple[int, int]
        """
        row, col = divmod(int(cell), self.cols)
        return int(row), int(col)

    def move(self, row: int, col: int, action: int) -> tuple[int, int]:
        """
        Apply a directional action with boundary clamping.

        :param row: Current row.
            :type row: int
        :param col: Current column.
            :type col: int
        :param action: Movement action (a key of `moves`).
            :type action: int

        :return: New (row, col).
            :rtype: tuple[int, int]
        """
        d_row, d_col = self.moves[action]
        row2 = min(self.rows - 1, max(0, row + d_row))
        col2 = min(self.cols - 1, max(0, col + d_col))
        return row2, col2

    def _cell(self, position: tuple[int, int]) -> int:
        row, col = position
        return self.pos_to_cell(int(row), int(col))


# Action conventions: up/right/down/left for the single-layer grids,
# the classic taxi order for the dispatch grid, north/south/east/west for the forage grid.
UP_RIGHT_DOWN_LEFT = {0: (-1, 0), 1: (0, 1), 2: (1, 0), 3: (0, -1)}
ARROWS_URDL = ("↑", "→", "↓", "←")
