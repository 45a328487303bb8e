"""
Grid Detection Module

Locates a 4x4 word-puzzle grid in a screenshot and segments it into
cells in reading order.

Usage:
    from grid_reader.detection import load_image, detect_grid, segment_cells

    pixels = load_image("screenshot.png")
    detection = detect_grid(pixels)

    # 16 rectangles, index = row * 4 + col
    cells = segment_cells(detection.bounds)

Every function here is pure: the same pixels and parameters always give
the same bounds and cells.
"""

# Public API - Result types
from .result import (
    PUZZLE_ROWS,
    PUZZLE_COLS,
    PUZZLE_CELLS,
    Color,
    CellCoord,
    BoundingBox,
    PuzzleCellRect,
    WordBox,
    RecognizedWord,
    GridDetection,
    CellStatus,
    CellRecognition,
    ExtractionStatus,
    ExtractionResult,
)

# Public API - Pixel source
from .pixels import (
    PixelBuffer,
    decode_image,
    decode_image_async,
    load_image,
    from_pil,
    from_array,
    crop_region,
    crop_to_png,
    extract_cell,
)

# Public API - Pipeline stages
from .background import ColorHistogram, estimate_background
from .classifier import is_different_from_background, tile_mask, thresholds_for
from .scanner import SCAN_CELL_SIZE, ScanResult, scan_grid
from .outliers import OutlierReport, filter_outliers, filter_outliers_report
from .bounds import resolve_bounds
from .detector import detect_grid
from .segmenter import segment_cells, cell_index, cell_position
from .rows import group_into_rows, extract_grid_words
from .tokens import normalize_token, normalize_to_grid, parse_manual_entry

# Debug utilities
from .debug import DEBUG_DIR, render_debug_image, save_debug_image

__all__ = [
    # Result types
    "PUZZLE_ROWS",
    "PUZZLE_COLS",
    "PUZZLE_CELLS",
    "Color",
    "CellCoord",
    "BoundingBox",
    "PuzzleCellRect",
    "WordBox",
    "RecognizedWord",
    "GridDetection",
    "CellStatus",
    "CellRecognition",
    "ExtractionStatus",
    "ExtractionResult",
    # Pixel source
    "PixelBuffer",
    "decode_image",
    "decode_image_async",
    "load_image",
    "from_pil",
    "from_array",
    "crop_region",
    "crop_to_png",
    "extract_cell",
    # Stages
    "ColorHistogram",
    "estimate_background",
    "is_different_from_background",
    "tile_mask",
    "thresholds_for",
    "SCAN_CELL_SIZE",
    "ScanResult",
    "scan_grid",
    "OutlierReport",
    "filter_outliers",
    "filter_outliers_report",
    "resolve_bounds",
    "detect_grid",
    "segment_cells",
    "cell_index",
    "cell_position",
    "group_into_rows",
    "extract_grid_words",
    # Tokens
    "normalize_token",
    "normalize_to_grid",
    "parse_manual_entry",
    # Debug
    "DEBUG_DIR",
    "render_debug_image",
    "save_debug_image",
]
