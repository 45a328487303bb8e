"""
Bounding Box Resolver

Reduces a set of filled lattice cells to one pixel rectangle.
"""

from typing import Sequence

from .result import BoundingBox, CellCoord


def resolve_bounds(
    cells: Sequence[CellCoord],
    image_width: int,
    image_height: int,
    cell_size: int,
    padding: int = 0,
) -> BoundingBox:
    """
    Compute the pixel bounding box of the given lattice cells.

    The far edge uses (max index + 1) so the last cell is included whole.
    The box is expanded by ``padding`` on every side and clamped to the
    image.

    Args:
        cells: Filtered filled cells
        image_width: Source image width
        image_height: Source image height
        cell_size: Lattice edge length in pixels
        padding: Extra pixels on each side

    Returns:
        BoundingBox; the full image (flagged as fallback) when cells is
        empty or the clamped box would be empty
    """
    if not cells:
        return BoundingBox.full_image(image_width, image_height)

    min_x = min(c.x for c in cells)
    min_y = min(c.y for c in cells)
    max_x = max(c.x for c in cells)
    max_y = max(c.y for c in cells)

    left = max(0, min_x * cell_size - padding)
    top = max(0, min_y * cell_size - padding)
    right = min(image_width, (max_x + 1) * cell_size + padding)
    bottom = min(image_height, (max_y + 1) * cell_size + padding)

    if right <= left or bottom <= top:
        return BoundingBox.full_image(image_width, image_height)

    return BoundingBox(
        x=left,
        y=top,
        width=right - left,
        height=bottom - top,
        image_width=image_width,
        image_height=image_height,
    )
