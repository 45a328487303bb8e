"""
Synthetic screenshots for detection tests.

Grids are laid out on the 40px scanning lattice so expected bounds are
exact: the grid spans GRID_ORIGIN..GRID_ORIGIN + GRID_EXTENT on both axes.
"""

from typing import Sequence, Tuple

import numpy as np

from grid_reader.detection import PixelBuffer, from_array

GRID_ORIGIN = 120
GRID_EXTENT = 560
TILE_GAP = 8
TILE_SIZE = (GRID_EXTENT - 3 * TILE_GAP) // 4   # 134

LIGHT_BACKGROUND = (255, 255, 255)
LIGHT_TILE = (239, 239, 230)
DARK_BACKGROUND = (18, 18, 18)
DARK_TILE = (58, 58, 60)

RGB = Tuple[int, int, int]


def solid(width: int, height: int, color: RGB) -> np.ndarray:
    return np.full((height, width, 3), color, dtype=np.uint8)


def tile_origin(index: int) -> Tuple[int, int]:
    """Top-left pixel of puzzle tile ``index`` in reading order."""
    row, col = divmod(index, 4)
    step = TILE_SIZE + TILE_GAP
    return GRID_ORIGIN + col * step, GRID_ORIGIN + row * step


def draw_grid(array: np.ndarray, tile_colors: Sequence[RGB]) -> np.ndarray:
    for index, color in enumerate(tile_colors):
        x, y = tile_origin(index)
        array[y:y + TILE_SIZE, x:x + TILE_SIZE] = color
    return array


def puzzle_screenshot(
    width: int = 800,
    height: int = 800,
    background: RGB = LIGHT_BACKGROUND,
    tile: RGB = LIGHT_TILE,
) -> PixelBuffer:
    """A 4x4 grid of identical tiles on a plain background."""
    array = solid(width, height, background)
    draw_grid(array, [tile] * 16)
    return from_array(array)


def gray_tile_color(index: int) -> RGB:
    """Distinct gray per tile so a fake recognizer can tell cells apart."""
    value = 40 + 10 * index
    return (value, value, value)


def gray_tile_index(value: float) -> int:
    return int(round((value - 40) / 10))


def gray_puzzle_screenshot() -> PixelBuffer:
    array = solid(800, 800, LIGHT_BACKGROUND)
    draw_grid(array, [gray_tile_color(i) for i in range(16)])
    return from_array(array)
