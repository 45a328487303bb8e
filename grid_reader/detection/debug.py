"""
Detection Debug Utilities

Functions for saving annotated debug images and managing debug output.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from .result import ExtractionResult, GridDetection, CellStatus
from .segmenter import segment_cells

logger = logging.getLogger(__name__)

# Debug settings
DEBUG_DIR = Path("./debug")
MAX_DEBUG_IMAGES = 10

# Overlay colours
FILLED_CELL_COLOR = (0, 200, 100, 128)
REMOVED_CELL_COLOR = (220, 40, 40, 128)
BOUNDS_COLOR = "#c45c3a"
LATTICE_COLOR = "#3a7bc4"

# Confidence thresholds for token colouring
HIGH_CONFIDENCE = 90.0
MEDIUM_CONFIDENCE = 60.0


def _load_font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default()


def render_debug_image(
    image: Image.Image,
    detection: GridDetection,
    result: Optional[ExtractionResult] = None,
) -> Image.Image:
    """
    Draw detection and recognition results over an image.

    Annotations include:
    - Filled lattice cells (green) and rejected outliers (red)
    - Grid bounding box
    - 4x4 puzzle lattice
    - Recognized tokens coloured by confidence

    Args:
        image: Source PIL Image
        detection: Grid detection result
        result: Extraction result (can be None)

    Returns:
        New RGB image with the overlay applied
    """
    base = image.convert("RGBA")
    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    font = _load_font(14)

    size = detection.cell_size
    kept = set(detection.kept_cells)
    for cell in detection.filled_cells:
        color = FILLED_CELL_COLOR if cell in kept else REMOVED_CELL_COLOR
        x, y = cell.x * size, cell.y * size
        draw.rectangle([x, y, x + size - 1, y + size - 1], fill=color)

    bounds = detection.bounds
    for rect in segment_cells(bounds):
        if rect.width < 2 or rect.height < 2:
            continue
        draw.rectangle([rect.x, rect.y, rect.right - 1, rect.bottom - 1], outline=LATTICE_COLOR, width=1)
    if bounds.width > 0 and bounds.height > 0:
        draw.rectangle([bounds.x, bounds.y, bounds.right - 1, bounds.bottom - 1], outline=BOUNDS_COLOR, width=3)

    label = "Full image (no grid detected)" if detection.is_fallback else "Detected Grid Area"
    draw.text((bounds.x + 8, bounds.y + 6), label, fill=BOUNDS_COLOR, font=font)

    if result and result.cells:
        for cell in result.cells:
            rect = cell.rect
            if cell.token is None:
                text, color = "?", "red"
            elif cell.confidence >= HIGH_CONFIDENCE:
                text, color = cell.token, "green"
            elif cell.confidence >= MEDIUM_CONFIDENCE:
                text, color = cell.token, "orange"
            else:
                text, color = cell.token, "red"
            if cell.status is CellStatus.TIMED_OUT:
                text = "timeout"
            draw.text((rect.x + 4, rect.bottom - 20), text, fill=color, font=font)

    if result:
        summary = (
            f"Status: {result.status.value}, unresolved: {result.unresolved_count}, "
            f"time: {result.processing_time_ms:.1f}ms"
        )
        draw.text((10, 10), summary, fill=BOUNDS_COLOR, font=font)

    return Image.alpha_composite(base, layer).convert("RGB")


def save_debug_image(
    image: Image.Image,
    detection: GridDetection,
    result: Optional[ExtractionResult],
    path: Union[str, Path],
) -> Path:
    """
    Save an annotated debug image and prune old ones.

    Args:
        image: Source PIL Image
        detection: Grid detection result
        result: Extraction result (can be None)
        path: Output file path

    Returns:
        Path of the written image
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    render_debug_image(image, detection, result).save(path, "PNG")
    logger.debug(f"Debug image saved: {path}")

    _cleanup_debug_images(path.parent)
    return path


def _cleanup_debug_images(directory: Path = DEBUG_DIR) -> None:
    """Remove old debug images, keeping only the most recent MAX_DEBUG_IMAGES."""
    if not directory.exists():
        return

    debug_files = sorted(
        directory.glob("debug_*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True
    )

    for old_file in debug_files[MAX_DEBUG_IMAGES:]:
        try:
            old_file.unlink()
        except OSError as e:
            logger.warning(f"Failed to remove old debug image {old_file}: {e}")
