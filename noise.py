"""Random noise seeding for cave grids."""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .errors import InvalidDimension, InvalidThreshold

logger = logging.getLogger(__name__)

RandomSource = Optional[Union[int, np.random.Generator]]


def check_dimensions(width: int, height: int):
    """Raise InvalidDimension unless both sides are at least 1."""
    if width < 1 or height < 1:
        raise InvalidDimension(f"Grid must be at least 1x1, got {width}x{height}")


@dataclass
class NoiseGenerator:
    """Uniform noise with a closed border.

    A cell is open when its draw in [0, 1) is at least threshold / 100, so a
    lower threshold gives more open space.
    """
    width: int
    height: int
    threshold: float  # Percentage in [0, 100]

    def __post_init__(self):
        check_dimensions(self.width, self.height)
        if math.isnan(self.threshold) or not 0 <= self.threshold <= 100:
            raise InvalidThreshold(f"Threshold must be in [0, 100], got {self.threshold}")

    def generate(self, rng: RandomSource = None) -> np.ndarray:
        """Sample a (height, width) boolean grid and force its outer ring to False."""
        rng = np.random.default_rng(rng)
        grid = rng.random((self.height, self.width)) >= self.threshold / 100.0

        # Walls all around
        grid[0, :] = False
        grid[-1, :] = False
        grid[:, 0] = False
        grid[:, -1] = False

        logger.debug(
            "Generated %dx%d noise at threshold %.1f (open fraction %.3f)",
            self.width, self.height, self.threshold, grid.mean(),
        )
        return grid


def generate_noise(width: int, height: int, threshold: float, rng: RandomSource = None) -> np.ndarray:
    """Convenience wrapper around NoiseGenerator.generate."""
    return NoiseGenerator(width, height, threshold).generate(rng)
