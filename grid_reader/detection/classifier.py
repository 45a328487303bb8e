"""
Tile Classifier

Decides whether a pixel belongs to a puzzle tile or to the page
background. Thresholds adapt to the background brightness so that dark
and light themes are both detected.
"""

import math
from dataclasses import dataclass

import numpy as np

from .result import Color, luma_brightness


# Background brightness tier boundaries
DARK_BRIGHTNESS = 0.3
LIGHT_BRIGHTNESS = 0.7


@dataclass(frozen=True)
class TileThresholds:
    """A pixel is a tile if either difference exceeds its threshold."""
    distance: float    # Euclidean RGB distance
    luma: float        # Absolute brightness difference (0-1)


DARK_THRESHOLDS = TileThresholds(distance=12, luma=0.08)
MEDIUM_THRESHOLDS = TileThresholds(distance=25, luma=0.10)
LIGHT_THRESHOLDS = TileThresholds(distance=20, luma=0.05)


def thresholds_for(background: Color) -> TileThresholds:
    """Pick the threshold tier for a background colour."""
    brightness = background.brightness
    if brightness < DARK_BRIGHTNESS:
        return DARK_THRESHOLDS
    if brightness < LIGHT_BRIGHTNESS:
        return MEDIUM_THRESHOLDS
    return LIGHT_THRESHOLDS


def is_different_from_background(r: int, g: int, b: int, background: Color) -> bool:
    """
    Classify a single pixel.

    Args:
        r, g, b: Pixel channels (0-255)
        background: Estimated background colour

    Returns:
        True if the pixel is tile (different from background)
    """
    thresholds = thresholds_for(background)
    dr = r - background.r
    dg = g - background.g
    db = b - background.b
    distance = math.sqrt(dr * dr + dg * dg + db * db)
    luma_diff = abs(luma_brightness(r, g, b) - background.brightness)
    return distance > thresholds.distance or luma_diff > thresholds.luma


def tile_mask(rgb: np.ndarray, background: Color) -> np.ndarray:
    """
    Vectorized is_different_from_background.

    Args:
        rgb: (..., 3+) array of pixels; channels past the third are ignored
        background: Estimated background colour

    Returns:
        Boolean array shaped like rgb[..., 0], True where the pixel is tile
    """
    thresholds = thresholds_for(background)
    r = rgb[..., 0].astype(np.float64)
    g = rgb[..., 1].astype(np.float64)
    b = rgb[..., 2].astype(np.float64)

    dr = r - background.r
    dg = g - background.g
    db = b - background.b
    distance = np.sqrt(dr * dr + dg * dg + db * db)

    luma = (r * 0.299 + g * 0.587 + b * 0.114) / 255
    luma_diff = np.abs(luma - background.brightness)

    return (distance > thresholds.distance) | (luma_diff > thresholds.luma)


def background_mask(rgb: np.ndarray, background: Color) -> np.ndarray:
    """True where a pixel matches the background (inverse of tile_mask)."""
    return ~tile_mask(rgb, background)
