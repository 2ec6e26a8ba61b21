"""
Episodic training and evaluation.

Includes:
- run_episode / train: the choose-next-action-before-update TD loop
- greedy_rollout / evaluate: exploration-free evaluation with a step ceiling
- result containers and reward summaries
- the snapshot side channel for external visualizers
- text rendering of learned policies
- config-driven experiments
"""

from .results import EpisodeResult, EvaluationReport, RewardSummary, summarize_rewards, rolling_mean
from .snapshots import StepSnapshot, SnapshotEmitter, SnapshotRecorder
from .loop import run_episode, train
from .evaluation import Rollout, greedy_rollout, evaluate
from .rendering import format_policy, format_reward_summary
from .experiment import ExperimentOutcome, build_environment, build_agent, run_experiment

__all__ = [
    "EpisodeResult",
    "EvaluationReport",
    "RewardSummary",
    "summarize_rewards",
    "rolling_mean",
    "StepSnapshot",
    "SnapshotEmitter",
    "SnapshotRecorder",
    "run_episode",
    "train",
    "Rollout",
    "greedy_rollout",
    "evaluate",
    "format_policy",
    "format_reward_summary",
    "ExperimentOutcome",
    "build_environment",
    "build_agent",
    "run_experiment",
]
