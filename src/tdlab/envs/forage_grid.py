from __future__ import annotations

from typing import Any

import numpy as np

from tdlab.envs.base import GridEnvironment, StepResult


class ForageGrid(GridEnvironment):
    """
    Resource-collection maze: find food and water, then leave through the exit.

    The state combines the position with two possession flags:

        state = cell + cells * has_eaten + 2 * cells * has_drunk

    so a 10x10 maze has 100 * 2 * 2 = 400 states. The resource cells are not part of the state:
    when they are re-drawn on every reset the agent has to learn a search behaviour rather than a path.

    Rewards (added together within one step):
        - every step: `step_reward` (default -1)
        - first visit to food / to water: +`resource_reward` (default +20), later visits give nothing
        - reaching the exit: +`exit_reward` (default +50) if both resources were collected,
          otherwise -`exit_reward`; the episode always ends there

    Actions:
    - 0: north
    - 1: south
    - 2: east
    - 3: west

    :param rows: Number of rows.
        :type rows: int
    :param cols: Number of columns.
        :type cols: int
    :param start: Start cell (row, col). Defaults to the top-left corner.
        :type start: tuple[int, int] | None
    :param exit_pos: Exit cell (row, col). Defaults to the bottom-right corner.
        :type exit_pos: tuple[int, int] | None
    :param food: Fixed food cell, or None to draw it at random on every reset.
        :type food: tuple[int, int] | None
    :param water: Fixed water cell, or None to draw it at random on every reset.
        :type water: tuple[int, int] | None
    :param step_reward: Reward of every step.
        :type step_reward: float
    :param resource_reward: Bonus for the first visit to each resource.
        :type resource_reward: float
    :param exit_reward: Magnitude of the exit bonus / penalty.
        :type exit_reward: float
    :param seed: RNG seed for resource placement.
        :type seed: int | np.random.Generator | None
    """

    name = "forage_grid"
    moves = {0: (-1, 0), 1: (1, 0), 2: (0, 1), 3: (0, -1)}
    action_symbols = ("↑", "↓", "→", "←")

    def __init__(
        self,
        rows: int = 10,
        cols: int = 10,
        start: tuple[int, int] | None = None,
        exit_pos: tuple[int, int] | None = None,
        food: tuple[int, int] | None = None,
        water: tuple[int, int] | None = None,
        step_reward: float = -1.0,
        resource_reward: float = 20.0,
        exit_reward: float = 50.0,
        seed: int | np.random.Generator | None = None,
    ):
        super().__init__(rows=rows, cols=cols, seed=seed)
        if self.n_cells < 4:
            raise ValueError("The maze needs room for start, exit, food and water (at least 4 cells)")
        self.n_states = self.n_cells * 2 * 2
        self.n_actions = 4

        self.start_cell = self._cell(start if start is not None else (0, 0))
        self.exit_cell = self._cell(exit_pos if exit_pos is not None else (self.rows - 1, self.cols - 1))
        if self.start_cell == self.exit_cell:
            raise ValueError("start and exit must be different cells")

        self.fixed_food = self._cell(food) if food is not None else None
        self.fixed_water = self._cell(water) if water is not None else None
        reserved = {self.start_cell, self.exit_cell}
        for label, cell in (("food", self.fixed_food), ("water", self.fixed_water)):
            if cell is not None and cell in reserved:
                raise ValueError(f"{label} cannot be placed on the start or exit cell")
        if self.fixed_food is not None and self.fixed_food == self.fixed_water:
            raise ValueError("food and water must be different cells")

        self.step_reward = float(step_reward)
        self.resource_reward = float(resource_reward)
        self.exit_reward = float(exit_reward)

        self.agent_cell = self.start_cell
        self.has_eaten = False
        self.has_drunk = False
        self.food_cell = self.fixed_food
        self.water_cell = self.fixed_water

    def encode(self, cell: int, has_eaten: bool, has_drunk: bool) -> int:
        """
        Encode position and possession flags into a state index.

        :param cell: Cell index of the agent.
            :type cell: int
        :param has_eaten: Whether food was collected.
            :type has_eaten: bool
        :param has_drunk: Whether water was collected.
            :type has_drunk: bool

        :return: State index in [0, n_states-1].
            :rtype: int
        """
        if not (0 <= cell < self.n_cells):
            raise ValueError(f"cell={cell} out of bounds [0, {self.n_cells - 1}]")
        return int(cell) + self.n_cells * int(bool(has_eaten)) + 2 * self.n_cells * int(bool(has_drunk))

    def decode(self, state: int) -> tuple[int, bool, bool]:
        """
        Invert `encode`.

        :param state: State index.
            :type state: int

        :return: (cell, has_eaten, has_drunk).
            :rtype: tuple[int, bool, bool]
        """
        state = self.check_state(state)
        flags, cell = divmod(state, self.n_cells)
        return int(cell), bool(flags & 1), bool(flags & 2)

    def _draw_cell(self, excluded: set[int]) -> int:
        candidates = [c for c in range(self.n_cells) if c not in excluded]
        return int(self.rng.choice(candidates))

    def _reset(self) -> int:
        self.agent_cell = self.start_cell
        self.has_eaten = False
        self.has_drunk = False

        reserved = {self.start_cell, self.exit_cell}
        if self.fixed_food is not None:
            self.food_cell = self.fixed_food
        else:
            self.food_cell = self._draw_cell(reserved | ({self.fixed_water} if self.fixed_water is not None else set()))
        if self.fixed_water is not None:
            self.water_cell = self.fixed_water
        else:
            self.water_cell = self._draw_cell(reserved | {self.food_cell})

        return self.encode(self.agent_cell, self.has_eaten, self.has_drunk)

    def _step(self, action: int) -> StepResult:
        row, col = self.move(*self.cell_to_pos(self.agent_cell), action)
        self.agent_cell = self.pos_to_cell(row, col)

        reward = self.step_reward
        done = False

        if self.agent_cell == self.food_cell and not self.has_eaten:
            self.has_eaten = True
            reward += self.resource_reward
        if self.agent_cell == self.water_cell and not self.has_drunk:
            self.has_drunk = True
            reward += self.resource_reward

        if self.agent_cell == self.exit_cell:
            reward += self.exit_reward if (self.has_eaten and self.has_drunk) else -self.exit_reward
            done = True

        return StepResult(self.encode(self.agent_cell, self.has_eaten, self.has_drunk), reward, done)

    def special_cells(self) -> dict[int, str]:
        special = {self.start_cell: "S", self.exit_cell: "E"}
        if self.food_cell is not None:
            special[self.food_cell] = "F"
        if self.water_cell is not None:
            special[self.water_cell] = "W"
        return special

    def state_to_position(self, state: int) -> tuple[int, int]:
        cell, _, _ = self.decode(state)
        return self.cell_to_pos(cell)

    def grid_state(self, row: int, col: int, **context: Any) -> int:
        return self.encode(
            self.pos_to_cell(row, col),
            bool(context.get("has_eaten", False)),
            bool(context.get("has_drunk", False)),
        )

    def describe(self) -> dict[str, Any]:
        return {
            "position": int(self.agent_cell),
            "has_eaten": int(self.has_eaten),
            "has_drunk": int(self.has_drunk),
            "food": None if self.food_cell is None else int(self.food_cell),
            "water": None if self.water_cell is None else int(self.water_cell),
        }
