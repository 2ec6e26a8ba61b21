from __future__ import annotations
import random
import numpy as np


def make_rng(seed: int | np.random.Generator | None = None) -> np.random.Generator:
    """
    Build the private random generator owned by a policy or an environment.

    Passing an existing Generator returns it unchanged (the two components then share one stream).
    Passing an int (or None) creates a fresh, independent stream.

    :param seed: Seed, Generator, or None for OS entropy.
        :type seed: int | np.random.Generator | None

    :return: A NumPy Generator.
        :rtype: np.random.Generator
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def spawn_seeds(seed: int | None, n: int) -> list[int]:
    """
    Derive n independent child seeds from one master seed.

    Used by experiments to give the environment, the agent and the evaluator their own streams
    while keeping the whole run reproducible from a single number.

    :param seed: Master seed.
        :type seed: int | None
    :param n: Number of child seeds.
        :type n: int

    :return: List of n integer seeds.
        :rtype: list[int]
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    children = np.random.SeedSequence(seed).spawn(n)
    return [int(child.generate_state(1)[0]) for child in children]


def seed_everything(seed: int) -> None:
    """
    Seed the global RNGs (Python's random and the legacy NumPy state).

    Library code never reads the global state; this only matters for scripts
    that use random or np.random directly.

    :param seed: Master seed.
        :type seed: int

    :return: None.
        :rtype: None
    """
    seed = int(seed)
    random.seed(seed)
    np.random.seed(seed)
