from __future__ import annotations

import json
import logging
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepSnapshot:
    """
    Per-step record for an external visualizer.

    :param position: Cell index of the agent (row * cols + col).
        :type position: int
    :param episode: Episode index (0-based).
        :type episode: int
    :param step: Step index inside the episode (0 right after reset).
        :type step: int
    :param cumulative_reward: Reward collected so far in the episode.
        :type cumulative_reward: float
    :param extras: Environment-specific fields (passenger/destination, eaten/drunk flags, ...).
        :type extras: dict[str, Any]
    """
    position: int
    episode: int
    step: int
    cumulative_reward: float
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        extras = data.pop("extras")
        data.update(extras)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


SnapshotSink = Callable[[StepSnapshot], None]


class SnapshotEmitter:
    """
    Fire-and-forget bridge between the training loop and a snapshot sink.

    Delivery is best effort: an exception raised by the sink is logged and the snapshot is dropped.
    The optional delay only slows playback and is clamped to `max_delay` seconds.

    :param sink: Callable receiving every snapshot.
        :type sink: SnapshotSink
    :param delay: Pause after each emitted snapshot, in seconds.
        :type delay: float
    :param max_delay: Upper bound for delay, in seconds.
        :type max_delay: float
    """

    def __init__(self, sink: SnapshotSink, delay: float = 0.0, max_delay: float = 1.0):
        if delay < 0.0 or max_delay < 0.0:
            raise ValueError("delay and max_delay must be >= 0")
        self.sink = sink
        self.delay = min(float(delay), float(max_delay))
        self.dropped = 0

    def emit(self, env, episode: int, step: int, cumulative_reward: float) -> None:
        info = dict(env.describe())
        snapshot = StepSnapshot(
            position=int(info.pop("position")),
            episode=int(episode),
            step=int(step),
            cumulative_reward=float(cumulative_reward),
            extras=info,
        )
        try:
            self.sink(snapshot)
        except Exception:
            self.dropped += 1
            logger.warning("Snapshot sink failed; dropping snapshot (episode=%d, step=%d)", episode, step,
                           exc_info=True)
        if self.delay > 0.0:
            time.sleep(self.delay)


class SnapshotRecorder:
    """
    In-process sink that keeps the most recent snapshots.

    :param maxlen: Maximum number of snapshots kept (None keeps everything).
        :type maxlen: int | None
    """

    def __init__(self, maxlen: int | None = 10_000):
        self.snapshots: deque[StepSnapshot] = deque(maxlen=maxlen)

    def __call__(self, snapshot: StepSnapshot) -> None:
        self.snapshots.append(snapshot)

    def __len__(self) -> int:
        return len(self.snapshots)
