"""Cave Automata - Grow organic cave layouts from random noise with cellular automaton smoothing."""

from .automaton import (
    CaveAutomaton,
    Connectivity,
    Grid,
    GridMode,
    RuleConfig,
    count_alive_neighbors,
    neighbor_counts,
    smooth,
    smooth_binary,
    smooth_graded,
)
from .errors import (
    CaveError,
    InvalidDimension,
    InvalidGrid,
    InvalidRuleConfig,
    InvalidSettings,
    InvalidThreshold,
)
from .metrics import evaluate_cave, evaluate_run
from .multistate import seed_states
from .noise import NoiseGenerator, generate_noise
from .settings import CaveSettings, generate_cave

__all__ = [
    "CaveAutomaton",
    "CaveError",
    "CaveSettings",
    "Connectivity",
    "Grid",
    "GridMode",
    "InvalidDimension",
    "InvalidGrid",
    "InvalidRuleConfig",
    "InvalidSettings",
    "InvalidThreshold",
    "NoiseGenerator",
    "RuleConfig",
    "count_alive_neighbors",
    "evaluate_cave",
    "evaluate_run",
    "generate_cave",
    "generate_noise",
    "neighbor_counts",
    "seed_states",
    "smooth",
    "smooth_binary",
    "smooth_graded",
]
