"""
Cell Segmenter

Divides the grid bounding box into the 4x4 puzzle lattice. The order of
the returned rectangles defines reading order for everything downstream.
"""

from typing import List, Tuple

from .result import BoundingBox, PuzzleCellRect, PUZZLE_COLS, PUZZLE_ROWS, PUZZLE_CELLS


def cell_index(row: int, col: int) -> int:
    """Reading-order index of a puzzle cell."""
    if not (0 <= row < PUZZLE_ROWS and 0 <= col < PUZZLE_COLS):
        raise IndexError(f"Cell ({row}, {col}) outside {PUZZLE_ROWS}x{PUZZLE_COLS} grid")
    return row * PUZZLE_COLS + col


def cell_position(index: int) -> Tuple[int, int]:
    """(row, col) of a reading-order index."""
    if not 0 <= index < PUZZLE_CELLS:
        raise IndexError(f"Cell index {index} out of range 0-{PUZZLE_CELLS - 1}")
    return divmod(index, PUZZLE_COLS)


def segment_cells(bounds: BoundingBox, margin: int = 0) -> List[PuzzleCellRect]:
    """
    Split a bounding box into 16 cells, row-major.

    Cell edges are computed as ``x + col * width // 4`` so the unshrunk
    rectangles cover the box exactly, with no gaps or overlaps, even when
    the size is not a multiple of four.

    Args:
        bounds: Resolved grid area
        margin: Optional inward border removed from every cell

    Returns:
        List of 16 PuzzleCellRect; element i has index i
    """
    xs = [bounds.x + col * bounds.width // PUZZLE_COLS for col in range(PUZZLE_COLS + 1)]
    ys = [bounds.y + row * bounds.height // PUZZLE_ROWS for row in range(PUZZLE_ROWS + 1)]

    cells = []
    for row in range(PUZZLE_ROWS):
        for col in range(PUZZLE_COLS):
            rect = PuzzleCellRect(
                row=row,
                col=col,
                x=xs[col],
                y=ys[row],
                width=xs[col + 1] - xs[col],
                height=ys[row + 1] - ys[row],
            )
            cells.append(rect.inset(margin))
    return cells
