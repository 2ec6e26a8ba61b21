from __future__ import annotations

from typing import Any, Iterable

import numpy as np

from tdlab.envs.base import ARROWS_URDL, UP_RIGHT_DOWN_LEFT, GridEnvironment, StepResult


class HazardGrid(GridEnvironment):
    """
    Grid navigation with a terminal cliff (the classic cliff-walking task).

    Rewards:
        - every step: `step_reward` (default -1), including the step that reaches the goal
        - stepping onto a hazard cell: `hazard_reward` (default -100), the agent is sent back
          to the start cell and the episode ends

    Because the goal is not rewarded beyond the step cost, maximizing return means minimizing path length.
    The default layout is 4x12 with the start at the bottom-left, the goal at the bottom-right
    and the cells in between being the cliff:

        . . . . . . . . . . . .
        . . . . . . . . . . . .
        . . . . . . . . . . . .
        S C C C C C C C C C C G

    Actions:
    - 0: up
    - 1: right
    - 2: down
    - 3: left

    :param rows: Number of rows.
        :type rows: int
    :param cols: Number of columns.
        :type cols: int
    :param start: Start cell (row, col). Defaults to the bottom-left corner.
        :type start: tuple[int, int] | None
    :param goal: Goal cell (row, col). Defaults to the bottom-right corner.
        :type goal: tuple[int, int] | None
    :param hazards: Hazard cells. Defaults to the bottom row between start and goal.
        :type hazards: Iterable[tuple[int, int]] | None
    :param step_reward: Reward of every non-hazard step.
        :type step_reward: float
    :param hazard_reward: Reward for stepping onto a hazard.
        :type hazard_reward: float
    :param seed: Unused (the task is deterministic); accepted for a uniform constructor.
        :type seed: int | np.random.Generator | None
    """

    name = "hazard_grid"
    moves = UP_RIGHT_DOWN_LEFT
    action_symbols = ARROWS_URDL

    def __init__(
        self,
        rows: int = 4,
        cols: int = 12,
        start: tuple[int, int] | None = None,
        goal: tuple[int, int] | None = None,
        hazards: Iterable[tuple[int, int]] | None = None,
        step_reward: float = -1.0,
        hazard_reward: float = -100.0,
        seed: int | np.random.Generator | None = None,
    ):
        super().__init__(rows=rows, cols=cols, seed=seed)
        self.n_states = self.n_cells
        self.n_actions = 4

        self.start_state = self._cell(start if start is not None else (self.rows - 1, 0))
        self.goal_state = self._cell(goal if goal is not None else (self.rows - 1, self.cols - 1))
        if hazards is None:
            hazards = [(self.rows - 1, c) for c in range(1, self.cols - 1)]
        self.hazard_states = frozenset(self._cell(h) for h in hazards)

        if self.start_state == self.goal_state:
            raise ValueError("start and goal must be different cells")
        if self.start_state in self.hazard_states or self.goal_state in self.hazard_states:
            raise ValueError("start and goal cannot be hazard cells")

        self.step_reward = float(step_reward)
        self.hazard_reward = float(hazard_reward)
        self.current_state = self.start_state

    def _reset(self) -> int:
        self.current_state = self.start_state
        return self.current_state

    def _step(self, action: int) -> StepResult:
        row, col = self.move(*self.cell_to_pos(self.current_state), action)
        self.current_state = self.pos_to_cell(row, col)

        if self.current_state in self.hazard_states:
            # fell off: back to start, episode over
            self.current_state = self.start_state
            return StepResult(self.current_state, self.hazard_reward, True)

        done = self.current_state == self.goal_state
        return StepResult(self.current_state, self.step_reward, done)

    def special_cells(self) -> dict[int, str]:
        special = {s: "C" for s in self.hazard_states}
        special[self.start_state] = "S"
        special[self.goal_state] = "G"
        return special

    def state_to_position(self, state: int) -> tuple[int, int]:
        return self.cell_to_pos(self.check_state(state))

    def grid_state(self, row: int, col: int, **context: Any) -> int:
        return self.pos_to_cell(row, col)

    def describe(self) -> dict[str, Any]:
        return {"position": int(self.current_state)}
