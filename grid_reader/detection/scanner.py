"""
Coarse Grid Scanner

Partitions the image into square lattice cells, counts background pixels
per cell and flags cells that are almost entirely tile as "filled".
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .classifier import LIGHT_BRIGHTNESS, background_mask
from .pixels import PixelBuffer
from .result import CellCoord, Color

logger = logging.getLogger(__name__)

# Lattice edge: larger than UI dots and glyph strokes, smaller than a tile
SCAN_CELL_SIZE = 40

# Max share of background pixels in a filled cell
LIGHT_BACKGROUND_ALLOWANCE = 0.15   # Anti-aliasing bleeds more on light themes
DARK_BACKGROUND_ALLOWANCE = 0.05


@dataclass
class ScanResult:
    """Coarse lattice scan output."""
    cell_size: int
    grid_width: int
    grid_height: int
    background_counts: np.ndarray                  # (grid_height, grid_width) background pixels per cell
    threshold: float                               # Filled if count < threshold (full interior cell)
    valid_counts: Optional[np.ndarray] = None      # Image pixels per cell; smaller on the right and bottom edges
    filled_cells: List[CellCoord] = field(default_factory=list)


def background_allowance(background: Color) -> float:
    """Fraction of a cell that may be background while still counting as filled."""
    if background.brightness > LIGHT_BRIGHTNESS:
        return LIGHT_BACKGROUND_ALLOWANCE
    return DARK_BACKGROUND_ALLOWANCE


def scan_grid(pixels: PixelBuffer, background: Color, cell_size: int = SCAN_CELL_SIZE) -> ScanResult:
    """
    Scan the image on a coarse lattice.

    Edge cells that extend past the image are judged against the pixels
    they actually contain, so a thin strip of background never counts as
    filled.

    Args:
        pixels: Decoded image
        background: Estimated background colour
        cell_size: Lattice edge length in pixels

    Returns:
        ScanResult with filled cells in row-major lattice order
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")

    width, height = pixels.width, pixels.height
    grid_w = -(-width // cell_size)
    grid_h = -(-height // cell_size)
    threshold = cell_size * cell_size * background_allowance(background)

    if grid_w == 0 or grid_h == 0:
        empty = np.zeros((grid_h, grid_w), dtype=np.int64)
        return ScanResult(cell_size, grid_w, grid_h, empty, threshold, valid_counts=empty)

    is_background = background_mask(pixels.array, background)

    # Pad to whole cells, then count both background and real pixels per cell
    shape = (grid_h * cell_size, grid_w * cell_size)
    padded = np.zeros(shape, dtype=bool)
    padded[:height, :width] = is_background
    padded_valid = np.zeros(shape, dtype=bool)
    padded_valid[:height, :width] = True

    counts = padded.reshape(grid_h, cell_size, grid_w, cell_size).sum(axis=(1, 3))
    valid_counts = padded_valid.reshape(grid_h, cell_size, grid_w, cell_size).sum(axis=(1, 3))

    ys, xs = np.nonzero(counts < valid_counts * background_allowance(background))
    filled = [CellCoord(int(x), int(y)) for y, x in zip(ys, xs)]

    logger.debug(
        f"Scanned {grid_w}x{grid_h} lattice (cell={cell_size}px), "
        f"{len(filled)} filled, threshold={threshold:.0f} bg px"
    )
    return ScanResult(
        cell_size=cell_size,
        grid_width=grid_w,
        grid_height=grid_h,
        background_counts=counts,
        threshold=threshold,
        valid_counts=valid_counts,
        filled_cells=filled,
    )
