"""Cave smoothing engine: threshold birth/survival rules over binary or graded grids."""

import logging
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from scipy import ndimage

from .errors import InvalidDimension, InvalidGrid, InvalidRuleConfig
from .multistate import check_states, graded_update, open_mask, seed_states
from .noise import RandomSource, check_dimensions, generate_noise

logger = logging.getLogger(__name__)


class Connectivity(Enum):
    FOUR_WAY = "four"    # Orthogonal neighbors (von Neumann)
    EIGHT_WAY = "eight"  # Orthogonal + diagonal neighbors (Moore)


# (dx, dy) offsets for each neighborhood
OFFSETS: Dict[Connectivity, Tuple[Tuple[int, int], ...]] = {
    Connectivity.EIGHT_WAY: (
        (-1, 1), (0, 1), (1, 1),
        (-1, 0), (1, 0),
        (-1, -1), (0, -1), (1, -1),
    ),
    Connectivity.FOUR_WAY: (
        (0, 1), (0, -1),
        (1, 0), (-1, 0),
    ),
}


def _kernel(connectivity: Connectivity) -> np.ndarray:
    kernel = np.zeros((3, 3), dtype=np.int32)
    for dx, dy in OFFSETS[connectivity]:
        kernel[1 + dy, 1 + dx] = 1
    return kernel


KERNELS = {c: _kernel(c) for c in Connectivity}


@dataclass(frozen=True)
class RuleConfig:
    """Parameters for one smoothing run.

    A live cell stays open with at least survival_threshold open neighbors, a
    wall opens with at least birth_threshold. Graded grids only use
    survival_threshold, and clamp states to [0, state_count].
    """
    survival_threshold: int = 4
    birth_threshold: int = 5
    state_count: int = 3
    connectivity: Connectivity = Connectivity.EIGHT_WAY
    generations: int = 5

    def __post_init__(self):
        try:
            object.__setattr__(self, "connectivity", Connectivity(self.connectivity))
        except ValueError:
            raise InvalidRuleConfig(f"Unknown connectivity: {self.connectivity!r}") from None

        for name in ("survival_threshold", "birth_threshold", "state_count", "generations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidRuleConfig(f"{name} must be an integer, got {value!r}")

        limit = self.max_neighbors
        for name in ("survival_threshold", "birth_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= limit:
                raise InvalidRuleConfig(
                    f"{name} must be in [0, {limit}] for {self.connectivity.value}-way "
                    f"connectivity, got {value}"
                )
        if self.generations < 0:
            raise InvalidRuleConfig(f"generations must be non-negative, got {self.generations}")

    @property
    def max_neighbors(self) -> int:
        return len(OFFSETS[self.connectivity])

    @classmethod
    def from_string(cls, rule_str: str, **kwargs) -> "RuleConfig":
        """Parse thresholds from notation like 'B5/S4' (birth 5, survival 4)."""
        rule_str = rule_str.upper().replace(" ", "")
        birth_part = survival_part = ""
        for part in rule_str.split("/"):
            if part.startswith("B"):
                birth_part = part[1:]
            elif part.startswith("S"):
                survival_part = part[1:]

        if not (birth_part.isdigit() and survival_part.isdigit()):
            raise InvalidRuleConfig(f"Cannot parse rule '{rule_str}', expected form 'B5/S4'")

        return cls(birth_threshold=int(birth_part), survival_threshold=int(survival_part), **kwargs)

    def to_string(self) -> str:
        return f"B{self.birth_threshold}/S{self.survival_threshold}"


class GridMode(Enum):
    BINARY = "binary"  # bool cells, open vs wall
    GRADED = "graded"  # int cells, wall strength in [0, state_count]


@dataclass(frozen=True, eq=False)
class Grid:
    """A (height, width) cell array tagged with the rule family that updates it."""
    mode: GridMode
    cells: np.ndarray

    def __post_init__(self):
        if self.cells.ndim != 2 or 0 in self.cells.shape:
            raise InvalidDimension(f"Grid must be a non-empty 2-D array, got shape {self.cells.shape}")
        if self.mode is GridMode.GRADED and not np.issubdtype(self.cells.dtype, np.integer):
            raise InvalidGrid(f"Graded states must be integers, got dtype {self.cells.dtype}")

    @classmethod
    def binary(cls, cells) -> "Grid":
        return cls(GridMode.BINARY, np.asarray(cells, dtype=bool))

    @classmethod
    def graded(cls, cells) -> "Grid":
        """Keeps the input's integer dtype so range checks see the real values."""
        return cls(GridMode.GRADED, np.asarray(cells))

    @property
    def height(self) -> int:
        return self.cells.shape[0]

    @property
    def width(self) -> int:
        return self.cells.shape[1]

    def open_cells(self) -> np.ndarray:
        return open_mask(self.cells)


def count_alive_neighbors(
    grid: np.ndarray,
    x: int,
    y: int,
    connectivity: Connectivity = Connectivity.EIGHT_WAY,
    alive: Callable = open_mask,
) -> int:
    """Count neighbors of grid[y, x] that satisfy `alive`; offsets off the grid are skipped."""
    height, width = grid.shape
    count = 0
    for dx, dy in OFFSETS[connectivity]:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height and alive(grid[ny, nx]):
            count += 1
    return count


def neighbor_counts(
    grid: np.ndarray,
    connectivity: Connectivity = Connectivity.EIGHT_WAY,
    alive: Callable = open_mask,
) -> np.ndarray:
    """Vectorized count_alive_neighbors for every cell at once."""
    mask = np.asarray(alive(grid)).astype(np.int32)
    return ndimage.convolve(mask, KERNELS[connectivity], mode="constant", cval=0)


def binary_update(cells: np.ndarray, neighbors: np.ndarray, config: RuleConfig) -> np.ndarray:
    """Open cells survive at survival_threshold, walls open at birth_threshold."""
    return np.where(
        cells,
        neighbors >= config.survival_threshold,
        neighbors >= config.birth_threshold,
    )


UPDATE_RULES = {
    GridMode.BINARY: binary_update,
    GridMode.GRADED: graded_update,
}


def pass_count(generations: int) -> int:
    """Number of update passes for a generation count.

    The last remaining generation still performs its pass, so g generations
    mean g + 1 passes and 0 generations still smooths once.
    """
    return generations + 1


def apply_pass(grid: Grid, config: RuleConfig) -> Grid:
    """Apply one update to every interior cell, reading only the previous grid."""
    update = UPDATE_RULES[grid.mode]
    neighbors = neighbor_counts(grid.cells, config.connectivity)

    cells = grid.cells.copy()
    interior = (slice(1, -1), slice(1, -1))
    cells[interior] = update(grid.cells[interior], neighbors[interior], config)
    return Grid(grid.mode, cells)


def check_grid(grid: Grid, config: RuleConfig):
    """Validate mode-specific constraints before a run."""
    if grid.mode is GridMode.GRADED:
        if config.state_count < 1:
            raise InvalidRuleConfig(f"state_count must be at least 1, got {config.state_count}")
        check_states(grid.cells, config.state_count)


def smooth(grid: Grid, config: RuleConfig) -> Grid:
    """Run pass_count(config.generations) passes over the grid."""
    check_grid(grid, config)
    passes = pass_count(config.generations)
    logger.debug(
        "Smoothing %dx%d %s grid with %s (%s) for %d passes",
        grid.width, grid.height, grid.mode.value, config.to_string(),
        config.connectivity.value, passes,
    )
    for _ in range(passes):
        grid = apply_pass(grid, config)
    return grid


def smooth_binary(cells: np.ndarray, config: RuleConfig) -> np.ndarray:
    """Smooth a boolean grid; returns a new array."""
    return smooth(Grid.binary(cells), config).cells


def smooth_graded(states: np.ndarray, config: RuleConfig) -> np.ndarray:
    """Smooth a graded state grid; returns a new array.

    Each pass counts neighbors on the output of the pass before it.
    """
    return smooth(Grid.graded(states), config).cells


class CaveAutomaton:
    """Noise-seeded cave grid that can be smoothed at once or one pass at a time."""

    def __init__(
        self,
        width: int = 100,
        height: int = 100,
        config: Optional[RuleConfig] = None,
        use_states: bool = False,
    ):
        check_dimensions(width, height)
        self.width = width
        self.height = height
        self.config = config or RuleConfig()
        self.use_states = use_states
        if use_states:
            self.grid = Grid.graded(np.zeros((height, width), dtype=np.int32))
        else:
            self.grid = Grid.binary(np.zeros((height, width), dtype=bool))
        self.generation = 0
        self._history: List[np.ndarray] = []

    def randomize(self, threshold: float = 45.0, rng: RandomSource = None):
        """Seed the grid from border-closed noise."""
        cells = generate_noise(self.width, self.height, threshold, rng)
        if self.use_states:
            self.grid = Grid.graded(seed_states(cells, self.config.state_count))
        else:
            self.grid = Grid.binary(cells)
        self.generation = 0
        self._history = []

    def set_cells(self, cells: np.ndarray):
        """Replace the grid with externally supplied cells of the same size."""
        grid = Grid.graded(cells) if self.use_states else Grid.binary(cells)
        if grid.cells.shape != (self.height, self.width):
            raise InvalidDimension(
                f"Expected shape {(self.height, self.width)}, got {grid.cells.shape}"
            )
        self.grid = grid
        self.generation = 0
        self._history = []

    def step(self, record_history: bool = False):
        """Advance by a single pass."""
        if record_history:
            self._history.append(self.grid.cells.copy())
        check_grid(self.grid, self.config)
        self.grid = apply_pass(self.grid, self.config)
        self.generation += 1

    def run(self, steps: Optional[int] = None, record_history: bool = False) -> List[np.ndarray]:
        """Run `steps` passes, or the configured generation count when omitted."""
        if steps is None:
            steps = pass_count(self.config.generations)
        for _ in range(steps):
            self.step(record_history=record_history)
        if record_history:
            self._history.append(self.grid.cells.copy())
        return self._history

    def get_history(self) -> List[np.ndarray]:
        """Get recorded history."""
        return self._history

    @property
    def cells(self) -> np.ndarray:
        return self.grid.cells

    def open_cells(self) -> np.ndarray:
        return self.grid.open_cells()

    def population(self) -> int:
        """Count open cells."""
        return int(np.sum(self.open_cells()))

    def density(self) -> float:
        """Fraction of open cells."""
        return self.population() / (self.width * self.height)
