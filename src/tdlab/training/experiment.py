from __future__ import annotations

import logging
from dataclasses import dataclass

from tdlab.common.config import ExperimentConfig
from tdlab.common.seeding import spawn_seeds
from tdlab.envs import Environment, make_env
from tdlab.tabular.agent import TDAgent, make_agent
from tdlab.training.evaluation import evaluate
from tdlab.training.loop import train
from tdlab.training.results import EpisodeResult, EvaluationReport
from tdlab.training.snapshots import SnapshotEmitter, SnapshotSink

logger = logging.getLogger(__name__)


@dataclass
class ExperimentOutcome:
    """
    :param env: The environment used for training and evaluation.
        :type env: Environment
    :param agent: The trained agent.
        :type agent: TDAgent
    :param training: Training result.
        :type training: EpisodeResult
    :param evaluation: Greedy evaluation report, or None when eval_episodes is 0.
        :type evaluation: EvaluationReport | None
    """
    env: Environment
    agent: TDAgent
    training: EpisodeResult
    evaluation: EvaluationReport | None


def build_environment(config: ExperimentConfig, seed: int | None = None) -> Environment:
    kwargs = dict(config.env_kwargs)
    kwargs.setdefault("seed", seed)
    return make_env(config.env, **kwargs)


def build_agent(config: ExperimentConfig, env: Environment, seed: int | None = None) -> TDAgent:
    return make_agent(config.agent.kind, env.n_states, env.n_actions, seed=seed, **config.agent.hyperparameters())


def run_experiment(config: ExperimentConfig, sink: SnapshotSink | None = None, progress: bool = False) -> ExperimentOutcome:
    """
    Build the environment and agent named in the config, train, then evaluate greedily.

    The master seed is split into independent streams for the environment, the agent's policy
    and the evaluator, so the whole run replays exactly from config.seed.

    :param config: Experiment configuration.
        :type config: ExperimentConfig
    :param sink: Optional snapshot sink (e.g. a SnapshotRecorder or a visualizer client).
        :type sink: SnapshotSink | None
    :param progress: Show tqdm progress bars.
        :type progress: bool

    :return: The environment, the trained agent and both results.
        :rtype: ExperimentOutcome
    """
    env_seed, agent_seed, eval_seed = spawn_seeds(config.seed, 3)
    env = build_environment(config, seed=env_seed)
    agent = build_agent(config, env, seed=agent_seed)
    emitter = SnapshotEmitter(sink, delay=config.snapshot_delay) if sink is not None else None

    logger.info("Environment: %s | States: %d | Actions: %d", env.name, env.n_states, env.n_actions)
    logger.info("Training %s for %d episodes", agent.name, config.episodes)
    training = train(env, agent, config.episodes, max_steps=config.max_steps, emitter=emitter,
                     progress=progress, log_every=config.log_every)

    evaluation = None
    if config.eval_episodes > 0:
        evaluation = evaluate(env, agent.Q, episodes=config.eval_episodes, max_steps=config.eval_max_steps,
                              seed=eval_seed, emitter=emitter, progress=progress)

    return ExperimentOutcome(env=env, agent=agent, training=training, evaluation=evaluation)
