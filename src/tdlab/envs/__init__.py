"""
Discrete MDP environments.

Includes:
- HazardGrid: grid navigation with a terminal cliff
- HoleGrid: deterministic grid with holes
- DispatchGrid: pickup / drop-off logistics task
- ForageGrid: resource collection with encoded possession flags
- GymnasiumEnvironment: adapter for Gymnasium toy-text environments

Environments are selected by name through `make_env`, never by inspecting instances.
"""

from .base import Environment, GridEnvironment, StepResult
from .hazard_grid import HazardGrid
from .hole_grid import HoleGrid
from .dispatch_grid import DispatchGrid
from .forage_grid import ForageGrid
from .gymnasium_env import GymnasiumEnvironment, make_gym_env

ENVIRONMENTS = {
    HazardGrid.name: HazardGrid,
    HoleGrid.name: HoleGrid,
    DispatchGrid.name: DispatchGrid,
    ForageGrid.name: ForageGrid,
}


def make_env(name: str, **kwargs) -> Environment:
    """
    Build one of the built-in environments by name.

    :param name: One of "hazard_grid", "hole_grid", "dispatch_grid", "forage_grid".
        :type name: str
    :param kwargs: Constructor arguments (layout, rewards, seed).

    :return: A fresh environment instance.
        :rtype: Environment
    """
    try:
        cls = ENVIRONMENTS[name]
    except KeyError:
        raise ValueError(f"Unknown environment {name!r}. Choose from {sorted(ENVIRONMENTS)}") from None
    return cls(**kwargs)


__all__ = [
    "Environment",
    "GridEnvironment",
    "StepResult",
    "HazardGrid",
    "HoleGrid",
    "DispatchGrid",
    "ForageGrid",
    "GymnasiumEnvironment",
    "make_gym_env",
    "ENVIRONMENTS",
    "make_env",
]
