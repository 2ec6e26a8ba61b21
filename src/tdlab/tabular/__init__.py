"""
Tabular TD control.

Includes:
- ValueTable: dense Q[s, a] storage with strict index checks
- exploration policies: ε-greedy (uniform tie-breaking) and Boltzmann/softmax
- bootstrap rules: Q-learning (off-policy) and SARSA (on-policy)
- TDAgent, which composes the three, plus factories for the built-in agents
"""

from .value_table import ValueTable
from .exploration import (
    ExplorationPolicy,
    EpsilonGreedyPolicy,
    BoltzmannPolicy,
    tied_best_actions,
    greedy_action,
    softmax_probabilities,
    sample_from_probabilities,
)
from .td_updates import Transition, UPDATE_RULES, q_learning_bootstrap, sarsa_bootstrap, td_target
from .agent import TDAgent, q_learning_agent, sarsa_agent, boltzmann_agent, make_agent, AGENT_FACTORIES

__all__ = [
    "ValueTable",
    "ExplorationPolicy",
    "EpsilonGreedyPolicy",
    "BoltzmannPolicy",
    "tied_best_actions",
    "greedy_action",
    "softmax_probabilities",
    "sample_from_probabilities",
    "Transition",
    "UPDATE_RULES",
    "q_learning_bootstrap",
    "sarsa_bootstrap",
    "td_target",
    "TDAgent",
    "q_learning_agent",
    "sarsa_agent",
    "boltzmann_agent",
    "make_agent",
    "AGENT_FACTORIES",
]
