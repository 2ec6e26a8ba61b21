from __future__ import annotations

from typing import Any, Iterable

import numpy as np

from tdlab.envs.base import ARROWS_URDL, UP_RIGHT_DOWN_LEFT, GridEnvironment, StepResult


class HoleGrid(GridEnvironment):
    """
    Deterministic grid with holes (frozen lake without slipping).

    The agent always moves in the intended direction, or stays put at a boundary.
    Rewards are sparse:
        - reaching the goal: `goal_reward` (default +1), episode ends
        - falling into a hole: 0, episode ends
        - anything else: 0, episode continues

    Default 4x4 layout:

        S . . .
        . H . H
        . . . H
        H . . G

    Actions:
    - 0: up
    - 1: right
    - 2: down
    - 3: left

    :param rows: Number of rows.
        :type rows: int
    :param cols: Number of columns.
        :type cols: int
    :param start_state: Start cell index.
        :type start_state: int
    :param goal_state: Goal cell index. Defaults to the bottom-right corner.
        :type goal_state: int | None
    :param holes: Hole cell indices. Defaults to {5, 7, 11, 12}, which only fits the 4x4 grid:
        any other size must pass its own holes (an empty list for none) or a ValueError is raised.
        :type holes: Iterable[int] | None
    :param goal_reward: Reward for reaching the goal.
        :type goal_reward: float
    :param seed: Unused (the task is deterministic); accepted for a uniform constructor.
        :type seed: int | np.random.Generator | None
    """

    name = "hole_grid"
    moves = UP_RIGHT_DOWN_LEFT
    action_symbols = ARROWS_URDL

    DEFAULT_HOLES = (5, 7, 11, 12)

    def __init__(
        self,
        rows: int = 4,
        cols: int = 4,
        start_state: int = 0,
        goal_state: int | None = None,
        holes: Iterable[int] | None = None,
        goal_reward: float = 1.0,
        seed: int | np.random.Generator | None = None,
    ):
        super().__init__(rows=rows, cols=cols, seed=seed)
        self.n_states = self.n_cells
        self.n_actions = 4

        self.start_state = self.check_state(start_state)
        self.goal_state = self.check_state(goal_state if goal_state is not None else self.n_cells - 1)
        if holes is None:
            if (rows, cols) != (4, 4):
                raise ValueError(f"holes must be given for a {rows}x{cols} grid; the default layout is 4x4 only")
            holes = self.DEFAULT_HOLES
        self.holes = frozenset(self.check_state(h) for h in holes)

        if self.start_state == self.goal_state:
            raise ValueError("start and goal must be different cells")
        if self.start_state in self.holes or self.goal_state in self.holes:
            raise ValueError("start and goal cannot be holes")

        self.goal_reward = float(goal_reward)
        self.current_state = self.start_state

    def _reset(self) -> int:
        self.current_state = self.start_state
        return self.current_state

    def _step(self, action: int) -> StepResult:
        row, col = self.move(*self.cell_to_pos(self.current_state), action)
        self.current_state = self.pos_to_cell(row, col)

        if self.current_state in self.holes:
            return StepResult(self.current_state, 0.0, True)
        if self.current_state == self.goal_state:
            return StepResult(self.current_state, self.goal_reward, True)
        return StepResult(self.current_state, 0.0, False)

    def special_cells(self) -> dict[int, str]:
        special = {h: "H" for h in self.holes}
        special[self.start_state] = "S"
        special[self.goal_state] = "G"
        return special

    def state_to_position(self, state: int) -> tuple[int, int]:
        return self.cell_to_pos(self.check_state(state))

    def grid_state(self, row: int, col: int, **context: Any) -> int:
        return self.pos_to_cell(row, col)

    def describe(self) -> dict[str, Any]:
        return {"position": int(self.current_state)}
