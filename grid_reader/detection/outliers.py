"""
Outlier Filter

Drops filled lattice cells that sit far from the main cluster, such as
picture-in-picture overlays or stray UI chrome.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence

from .result import CellCoord

logger = logging.getLogger(__name__)

# Below this many cells there is too little data to filter
MIN_CELLS_TO_FILTER = 10

# Keep cells within this multiple of the median centroid distance
MEDIAN_DISTANCE_FACTOR = 2.5

# Give up (keep everything) if less than this share would survive
MIN_KEPT_FRACTION = 0.6


@dataclass
class OutlierReport:
    """Outcome of outlier filtering."""
    kept: List[CellCoord]
    removed: List[CellCoord] = field(default_factory=list)
    median_distance: float = 0.0
    radius: float = 0.0
    safety_valve: bool = False   # Filtering was too aggressive and was undone
    skipped: bool = False        # Too few cells to filter


def filter_outliers_report(cells: Sequence[CellCoord]) -> OutlierReport:
    """
    Filter isolated cells and describe what happened.

    Args:
        cells: Filled lattice cells

    Returns:
        OutlierReport; ``kept`` preserves the input order
    """
    cells = list(cells)
    if len(cells) < MIN_CELLS_TO_FILTER:
        return OutlierReport(kept=cells, skipped=True)

    center_x = sum(c.x for c in cells) / len(cells)
    center_y = sum(c.y for c in cells) / len(cells)
    distances = [math.hypot(c.x - center_x, c.y - center_y) for c in cells]

    median_distance = sorted(distances)[len(distances) // 2]
    radius = median_distance * MEDIAN_DISTANCE_FACTOR

    kept = [c for c, d in zip(cells, distances) if d <= radius]
    removed = [c for c, d in zip(cells, distances) if d > radius]

    if not kept or len(kept) < len(cells) * MIN_KEPT_FRACTION:
        logger.warning(
            f"Outlier filtering would remove {len(removed)}/{len(cells)} cells, using unfiltered set"
        )
        return OutlierReport(
            kept=cells,
            median_distance=median_distance,
            radius=radius,
            safety_valve=True,
        )

    if removed:
        logger.debug(f"Removed {len(removed)} outlier cells (radius={radius:.2f})")
    return OutlierReport(kept=kept, removed=removed, median_distance=median_distance, radius=radius)


def filter_outliers(cells: Sequence[CellCoord]) -> List[CellCoord]:
    """Return the filled cells with isolated outliers removed."""
    return filter_outliers_report(cells).kept
