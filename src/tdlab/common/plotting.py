from __future__ import annotations
from pathlib import Path
from typing import Sequence
import matplotlib.pyplot as plt
import numpy as np

from tdlab.training.results import rolling_mean


def save_reward_curves(
    *,
    curves: Sequence[Sequence[float]],
    labels: Sequence[str],
    out_path: str | Path,
    title: str = "Reward per episode",
    smooth_window: int = 1,
) -> Path:
    """
    Save a line plot with one per-episode reward curve per agent.

    :param curves: One reward sequence per agent (e.g. EpisodeResult.episode_rewards).
        :type curves: Sequence[Sequence[float]]
    :param labels: Legend labels (same length as curves).
        :type labels: Sequence[str]
    :param out_path: Output path for the saved image.
        :type out_path: str | Path
    :param title: Plot title.
        :type title: str
    :param smooth_window: Trailing mean window for smoothing (1 means no smoothing).
        :type smooth_window: int

    :return: The path the figure was written to.
        :rtype: Path
    """
    if len(curves) != len(labels):
        raise ValueError("curves and labels must have the same length")

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots()
    for y, label in zip(curves, labels):
        y = np.asarray(y, dtype=np.float64)
        ax.plot(rolling_mean(y, smooth_window) if smooth_window > 1 else y, label=label)

    ax.set_title(title)
    ax.set_xlabel("Episode")
    ax.set_ylabel("Total reward")
    ax.grid(True)
    ax.legend()
    fig.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)
    return out_path
