"""Summary statistics for judging generated caves."""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from scipy import ndimage

from .automaton import CaveAutomaton, Connectivity, Grid
from .multistate import open_mask

# Region labeling structures: which neighbors join two open cells into one cave
STRUCTURES = {
    Connectivity.FOUR_WAY: ndimage.generate_binary_structure(2, 1),
    Connectivity.EIGHT_WAY: ndimage.generate_binary_structure(2, 2),
}


@dataclass
class CaveStats:
    """Container for cave statistics."""
    open_fraction: float  # Share of cells that are open
    spatial_entropy: float  # Bits per cell of the open/wall split
    region_count: int  # Connected open areas
    largest_region_fraction: float  # Largest area over all open cells
    border_closed: bool  # Outer ring is all wall
    change_rate: float = 0.0  # Mean share of cells changed per recorded pass

    def to_dict(self) -> Dict:
        return {
            "open_fraction": self.open_fraction,
            "spatial_entropy": self.spatial_entropy,
            "region_count": self.region_count,
            "largest_region_fraction": self.largest_region_fraction,
            "border_closed": self.border_closed,
            "change_rate": self.change_rate,
        }


def open_fraction(cells: np.ndarray) -> float:
    return float(np.mean(open_mask(cells)))


def shannon_entropy(cells: np.ndarray) -> float:
    """Binary entropy of the open fraction; 0 for all-open or all-wall grids."""
    p = open_fraction(cells)
    if p in (0.0, 1.0):
        return 0.0
    return float(-(p * np.log2(p) + (1 - p) * np.log2(1 - p)))


def temporal_change_rate(history: List[np.ndarray]) -> float:
    """Average share of cells that differ between consecutive snapshots."""
    if len(history) < 2:
        return 0.0
    return float(np.mean([np.mean(after != before) for before, after in zip(history, history[1:])]))


def label_regions(
    cells: np.ndarray,
    connectivity: Connectivity = Connectivity.EIGHT_WAY,
) -> Tuple[np.ndarray, int]:
    """Label connected open regions."""
    labeled, num_regions = ndimage.label(open_mask(cells), structure=STRUCTURES[connectivity])
    return labeled, num_regions


def region_sizes(labeled: np.ndarray, num_regions: int) -> List[int]:
    """Sizes of labeled regions, largest first."""
    if num_regions == 0:
        return []
    sizes = ndimage.sum(np.ones_like(labeled), labeled, range(1, num_regions + 1))
    return sorted((int(s) for s in sizes), reverse=True)


def _largest_share(sizes: List[int]) -> float:
    return sizes[0] / sum(sizes) if sizes else 0.0


def largest_region_fraction(
    cells: np.ndarray,
    connectivity: Connectivity = Connectivity.EIGHT_WAY,
) -> float:
    """Share of open cells that sit in the biggest region; 0 when nothing is open."""
    return _largest_share(region_sizes(*label_regions(cells, connectivity)))


def border_is_closed(cells: np.ndarray) -> bool:
    """True when every cell of the outer ring is wall."""
    mask = open_mask(cells)
    return not (mask[0, :].any() or mask[-1, :].any() or mask[:, 0].any() or mask[:, -1].any())


def evaluate_cave(
    grid: Grid,
    connectivity: Connectivity = Connectivity.EIGHT_WAY,
    history: Optional[List[np.ndarray]] = None,
) -> CaveStats:
    cells = grid.cells
    labeled, num_regions = label_regions(cells, connectivity)

    return CaveStats(
        open_fraction=open_fraction(cells),
        spatial_entropy=shannon_entropy(cells),
        region_count=num_regions,
        largest_region_fraction=_largest_share(region_sizes(labeled, num_regions)),
        border_closed=border_is_closed(cells),
        change_rate=temporal_change_rate(history or []),
    )


def evaluate_run(cave: CaveAutomaton) -> CaveStats:
    """Stats for a cave's current grid, with change rate from its recorded history."""
    return evaluate_cave(cave.grid, cave.config.connectivity, cave.get_history())
