"""Graded wall-strength states for cave grids."""

import numpy as np
from typing import Dict

from .errors import InvalidGrid, InvalidRuleConfig


def open_mask(states: np.ndarray) -> np.ndarray:
    """Cells with a state above zero count as open."""
    return states > 0


def seed_states(open_cells: np.ndarray, state_count: int) -> np.ndarray:
    """Turn a boolean grid into a graded one: open cells start at state_count, walls at 0."""
    if state_count < 1:
        raise InvalidRuleConfig(f"state_count must be at least 1, got {state_count}")
    open_cells = np.asarray(open_cells, dtype=bool)
    return np.where(open_cells, state_count, 0).astype(np.int32)


def check_states(states: np.ndarray, state_count: int):
    """Raise InvalidGrid if any state lies outside [0, state_count]."""
    if states.size and (states.min() < 0 or states.max() > state_count):
        raise InvalidGrid(
            f"States must lie in [0, {state_count}], "
            f"got range [{int(states.min())}, {int(states.max())}]"
        )


def graded_update(states: np.ndarray, neighbors: np.ndarray, config) -> np.ndarray:
    """Strengthen cells with enough open neighbors, weaken the rest, clamped to [0, state_count]."""
    # Compare before stepping so unsigned and narrow dtypes never wrap
    strengthened = np.where(states < config.state_count, states + 1, config.state_count)
    weakened = np.where(states > 0, states - 1, 0)
    return np.where(neighbors >= config.survival_threshold, strengthened, weakened).astype(states.dtype)


def population_by_state(states: np.ndarray) -> Dict[int, int]:
    """Count cells in each state."""
    unique, counts = np.unique(states, return_counts=True)
    return {int(s): int(c) for s, c in zip(unique, counts)}
