"""
Grid Detector

Runs the detection stages in order: background estimation, coarse
lattice scan, outlier filtering and bounding box resolution.
"""

import logging
import time

from .background import estimate_background
from .bounds import resolve_bounds
from .outliers import filter_outliers_report
from .pixels import PixelBuffer
from .result import GridDetection
from .scanner import SCAN_CELL_SIZE, scan_grid

logger = logging.getLogger(__name__)


def detect_grid(pixels: PixelBuffer, padding: int = 0, cell_size: int = SCAN_CELL_SIZE) -> GridDetection:
    """
    Locate the puzzle grid in an image.

    The result is a pure function of the inputs; nothing is cached
    between calls.

    Args:
        pixels: Decoded image
        padding: Extra pixels added around the detected box
        cell_size: Coarse lattice edge length

    Returns:
        GridDetection. When no filled cells are found the bounds cover
        the whole image and ``is_fallback`` is set.
    """
    start_time = time.perf_counter()

    background = estimate_background(pixels)
    scan = scan_grid(pixels, background, cell_size)

    if scan.filled_cells:
        report = filter_outliers_report(scan.filled_cells)
        kept = report.kept
    else:
        kept = []

    bounds = resolve_bounds(kept, pixels.width, pixels.height, cell_size, padding)
    elapsed = (time.perf_counter() - start_time) * 1000

    if bounds.is_fallback:
        logger.info(f"No grid detected in {pixels.width}x{pixels.height} image, using full image")
    else:
        logger.debug(
            f"Grid bounds x={bounds.x} y={bounds.y} w={bounds.width} h={bounds.height} "
            f"from {len(kept)}/{len(scan.filled_cells)} cells in {elapsed:.1f}ms"
        )

    return GridDetection(
        bounds=bounds,
        background=background,
        cell_size=cell_size,
        filled_cells=scan.filled_cells,
        kept_cells=kept,
        processing_time_ms=elapsed,
    )
