import numpy as np
import pytest

from cave_automata import RuleConfig


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def cave_rule():
    """Classic cave smoothing: survive on 4, open on 5, Moore neighborhood, single pass."""
    return RuleConfig(survival_threshold=4, birth_threshold=5, generations=0)


@pytest.fixture
def open_interior():
    """Factory for grids whose non-border cells are all open."""
    def make(width, height):
        grid = np.zeros((height, width), dtype=bool)
        grid[1:-1, 1:-1] = True
        return grid
    return make
