from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from tdlab.envs.base import GridEnvironment, StepResult


class DispatchGrid(GridEnvironment):
    """
    Pickup / drop-off logistics task (the classic taxi problem).

    A cab moves on a grid with four named landmarks. A passenger waits at one landmark
    and wants to go to a different one. The cab must drive to the passenger, pick them up,
    drive to the destination and drop them off.

    State = (cab_row, cab_col, passenger, destination), where passenger is a landmark index
    or IN_CAB (= number of landmarks). The encoding is a mixed-radix number:

        state = ((cab_row * cols + cab_col) * (L + 1) + passenger) * L + destination

    with L landmarks, so on the default 5x5 grid with 4 landmarks there are 5*5*5*4 = 500 states.

    Rewards:
        - every step: `step_reward` (default -1)
        - illegal pickup (passenger not here or already aboard) or illegal dropoff
          (passenger not aboard or cab not at destination): `illegal_reward` (default -10),
          passenger/destination unchanged
        - successful pickup: `step_reward`, passenger becomes IN_CAB
        - successful dropoff: `dropoff_reward` (default +20), episode ends

    Actions:
    - 0: south
    - 1: north
    - 2: east
    - 3: west
    - 4: pickup
    - 5: dropoff

    :param rows: Number of rows.
        :type rows: int
    :param cols: Number of columns.
        :type cols: int
    :param landmarks: Landmark cells (row, col); defaults to R(0,0), G(0,4), Y(4,0), B(4,3).
        :type landmarks: Sequence[tuple[int, int]] | None
    :param landmark_labels: One-letter labels for rendering.
        :type landmark_labels: Sequence[str] | None
    :param step_reward: Reward for every ordinary step.
        :type step_reward: float
    :param illegal_reward: Reward for an illegal pickup or dropoff.
        :type illegal_reward: float
    :param dropoff_reward: Reward for a successful dropoff.
        :type dropoff_reward: float
    :param seed: RNG seed for episode resets.
        :type seed: int | np.random.Generator | None
    """

    name = "dispatch_grid"
    moves = {0: (1, 0), 1: (-1, 0), 2: (0, 1), 3: (0, -1)}
    action_symbols = ("↓", "↑", "→", "←", "P", "D")

    PICKUP = 4
    DROPOFF = 5

    DEFAULT_LANDMARKS = ((0, 0), (0, 4), (4, 0), (4, 3))
    DEFAULT_LABELS = ("R", "G", "Y", "B")

    def __init__(
        self,
        rows: int = 5,
        cols: int = 5,
        landmarks: Sequence[tuple[int, int]] | None = None,
        landmark_labels: Sequence[str] | None = None,
        step_reward: float = -1.0,
        illegal_reward: float = -10.0,
        dropoff_reward: float = 20.0,
        seed: int | np.random.Generator | None = None,
    ):
        super().__init__(rows=rows, cols=cols, seed=seed)

        landmarks = list(landmarks if landmarks is not None else self.DEFAULT_LANDMARKS)
        if len(landmarks) < 2:
            raise ValueError("At least two landmarks are needed (pickup and destination must differ)")
        self.landmarks = [self.cell_to_pos(self._cell(lm)) for lm in landmarks]
        if len(set(self.landmarks)) != len(self.landmarks):
            raise ValueError("Landmarks must be distinct cells")

        if landmark_labels is None:
            landmark_labels = self.DEFAULT_LABELS if len(self.landmarks) == len(self.DEFAULT_LABELS) \
                else tuple(str(i) for i in range(len(self.landmarks)))
        if len(landmark_labels) != len(self.landmarks):
            raise ValueError("landmark_labels must have one label per landmark")
        self.landmark_labels = tuple(landmark_labels)

        self.n_landmarks = len(self.landmarks)
        self.in_cab = self.n_landmarks  # passenger index meaning "in the cab"
        self.n_states = self.n_cells * (self.n_landmarks + 1) * self.n_landmarks
        self.n_actions = 6

        self.step_reward = float(step_reward)
        self.illegal_reward = float(illegal_reward)
        self.dropoff_reward = float(dropoff_reward)

        self.cab_row = 0
        self.cab_col = 0
        self.passenger = 0
        self.destination = 1

    def encode(self, cab_row: int, cab_col: int, passenger: int, destination: int) -> int:
        """
        Encode a configuration into a state index.

        :param cab_row: Cab row.
            :type cab_row: int
        :param cab_col: Cab column.
            :type cab_col: int
        :param passenger: Landmark index, or `in_cab`.
            :type passenger: int
        :param destination: Landmark index.
            :type destination: int

        :return: State index in [0, n_states-1].
            :rtype: int
        """
        cell = self.pos_to_cell(cab_row, cab_col)
        if not (0 <= passenger <= self.in_cab):
            raise ValueError(f"passenger must be in [0, {self.in_cab}], got {passenger}")
        if not (0 <= destination < self.n_landmarks):
            raise ValueError(f"destination must be in [0, {self.n_landmarks - 1}], got {destination}")
        return (cell * (self.n_landmarks + 1) + passenger) * self.n_landmarks + destination

    def decode(self, state: int) -> tuple[int, int, int, int]:
        """
        Invert `encode`.

        :param state: State index.
            :type state: int

        :return: (cab_row, cab_col, passenger, destination).
            :rtype: tuple[int, int, int, int]
        """
        state = self.check_state(state)
        rest, destination = divmod(state, self.n_landmarks)
        cell, passenger = divmod(rest, self.n_landmarks + 1)
        row, col = self.cell_to_pos(cell)
        return row, col, int(passenger), int(destination)

    def _encode_current(self) -> int:
        return self.encode(self.cab_row, self.cab_col, self.passenger, self.destination)

    def _reset(self) -> int:
        self.cab_row = int(self.rng.integers(self.rows))
        self.cab_col = int(self.rng.integers(self.cols))
        self.passenger = int(self.rng.integers(self.n_landmarks))
        # destination differs from the pickup landmark
        offset = int(self.rng.integers(1, self.n_landmarks))
        self.destination = (self.passenger + offset) % self.n_landmarks
        return self._encode_current()

    def set_state(self, cab_row: int, cab_col: int, passenger: int, destination: int) -> int:
        """
        Pin the environment to a specific configuration (for benchmark rollouts and tests).

        The episode is considered started, so step() may be called right away.

        :return: Encoded state of the pinned configuration.
            :rtype: int
        """
        state = self.encode(cab_row, cab_col, passenger, destination)
        self.cab_row, self.cab_col = int(cab_row), int(cab_col)
        self.passenger, self.destination = int(passenger), int(destination)
        self._needs_reset = False
        self._done = False
        return state

    def _at(self, landmark: int) -> bool:
        return (self.cab_row, self.cab_col) == self.landmarks[landmark]

    def _step(self, action: int) -> StepResult:
        reward = self.step_reward
        done = False

        if action in self.moves:
            self.cab_row, self.cab_col = self.move(self.cab_row, self.cab_col, action)
        elif action == self.PICKUP:
            if self.passenger == self.in_cab or not self._at(self.passenger):
                reward = self.illegal_reward
            else:
                self.passenger = self.in_cab
        else:  # dropoff
            if self.passenger != self.in_cab or not self._at(self.destination):
                reward = self.illegal_reward
            else:
                reward = self.dropoff_reward
                done = True

        return StepResult(self._encode_current(), reward, done)

    def special_cells(self) -> dict[int, str]:
        return {self._cell(lm): label for lm, label in zip(self.landmarks, self.landmark_labels)}

    def state_to_position(self, state: int) -> tuple[int, int]:
        row, col, _, _ = self.decode(state)
        return row, col

    def grid_state(self, row: int, col: int, **context: Any) -> int:
        passenger = int(context.get("passenger", 0))
        destination = int(context.get("destination", 1))
        return self.encode(row, col, passenger, destination)

    def describe(self) -> dict[str, Any]:
        return {
            "position": self.pos_to_cell(self.cab_row, self.cab_col),
            "passenger": int(self.passenger),
            "destination": int(self.destination),
        }
