from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml


def _check_keys(cls, config_dict: dict[str, Any]) -> None:
    known = {f.name for f in fields(cls)}
    unknown = set(config_dict) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")


@dataclass
class AgentConfig:
    """
    Agent kind and hyperparameters.

    Only the fields relevant to `kind` are forwarded: epsilon_* for the ε-greedy agents,
    temperature_* for the Boltzmann agent.
    """

    kind: str = "q_learning"
    alpha: float = 0.5
    gamma: float = 0.99
    initial_value: float = 0.0
    epsilon: float = 0.1
    epsilon_min: float = 0.0
    epsilon_decay: float = 1.0
    temperature: float = 1.0
    min_temperature: float = 0.01
    temperature_decay_rate: float = 0.0005
    update_rule: str = "q_learning"  # only used by the Boltzmann agent

    def hyperparameters(self) -> dict[str, Any]:
        """Keyword arguments for tdlab.tabular.make_agent."""
        common = {"alpha": self.alpha, "gamma": self.gamma, "initial_value": self.initial_value}
        if self.kind == "boltzmann":
            return {
                **common,
                "temperature": self.temperature,
                "min_temperature": self.min_temperature,
                "temperature_decay_rate": self.temperature_decay_rate,
                "update_rule": self.update_rule,
            }
        return {**common, "epsilon": self.epsilon, "epsilon_min": self.epsilon_min,
                "epsilon_decay": self.epsilon_decay}

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "AgentConfig":
        _check_keys(cls, config_dict)
        return cls(**config_dict)


@dataclass
class ExperimentConfig:
    """Full configuration of one train-then-evaluate run."""

    env: str = "hole_grid"
    env_kwargs: dict[str, Any] = field(default_factory=dict)
    agent: AgentConfig = field(default_factory=AgentConfig)
    episodes: int = 1000
    max_steps: int | None = None
    eval_episodes: int = 100
    eval_max_steps: int = 999
    seed: int | None = 0
    snapshot_delay: float = 0.0
    log_every: int = 0

    def __post_init__(self):
        if self.episodes < 0:
            raise ValueError(f"episodes must be >= 0, got {self.episodes}")
        if self.eval_episodes < 0:
            raise ValueError(f"eval_episodes must be >= 0, got {self.eval_episodes}")
        if self.eval_max_steps <= 0:
            raise ValueError(f"eval_max_steps must be >= 1, got {self.eval_max_steps}")

    def to_dict(self) -> dict[str, Any]:
        """Converts the configuration to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ExperimentConfig":
        """Creates a configuration from a dictionary (e.g. parsed YAML)."""
        config_dict = deepcopy(config_dict) or {}
        _check_keys(cls, config_dict)
        agent = config_dict.pop("agent", None) or {}
        if not isinstance(agent, AgentConfig):
            agent = AgentConfig.from_dict(agent)
        return cls(agent=agent, **config_dict)

    def save_yaml(self, filepath: Path | str) -> None:
        """Saves the configuration to a YAML file."""
        filepath = Path(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def load_yaml(cls, filepath: Path | str) -> "ExperimentConfig":
        """Loads the configuration from a YAML file."""
        filepath = Path(filepath)
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict)

    def save_json(self, filepath: Path | str) -> None:
        """Saves the configuration to a JSON file."""
        filepath = Path(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_json(cls, filepath: Path | str) -> "ExperimentConfig":
        """Loads the configuration from a JSON file."""
        filepath = Path(filepath)
        with open(filepath, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    @classmethod
    def load(cls, filepath: Path | str) -> "ExperimentConfig":
        """Loads a YAML or JSON configuration, chosen by file suffix."""
        filepath = Path(filepath)
        if filepath.suffix in (".yaml", ".yml"):
            return cls.load_yaml(filepath)
        if filepath.suffix == ".json":
            return cls.load_json(filepath)
        raise ValueError(f"File format '{filepath.suffix}' not supported")
