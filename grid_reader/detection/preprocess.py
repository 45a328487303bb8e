"""
Recognition Preprocessing

Prepares image regions for the text recognizer: dark themes are
inverted to dark-on-light and small cell crops are upscaled.
"""

from typing import Tuple

import cv2
import numpy as np
from PIL import Image

from .result import Color

# Backgrounds darker than this are treated as dark mode
DARK_MODE_BRIGHTNESS = 0.5

# Cell crops shorter than this are upscaled before recognition
MIN_CELL_HEIGHT = 64
MAX_UPSCALE = 4.0


def is_dark_mode(background: Color) -> bool:
    return background.brightness < DARK_MODE_BRIGHTNESS


def to_grayscale(image: Image.Image, background: Color) -> np.ndarray:
    """Grayscale uint8 array, inverted when the background is dark."""
    rgb = np.array(image.convert("RGB"))
    gray = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
    if is_dark_mode(background):
        gray = cv2.bitwise_not(gray)
    return gray


def prepare_region(image: Image.Image, background: Color) -> Image.Image:
    """
    Preprocess a full image for whole-region recognition.

    Geometry is unchanged so recognized boxes stay in source coordinates.
    """
    return Image.fromarray(to_grayscale(image, background))


def prepare_cell(image: Image.Image, background: Color) -> Tuple[Image.Image, float]:
    """
    Preprocess a single cell crop.

    Returns:
        (prepared image, scale factor it was enlarged by)
    """
    gray = to_grayscale(image, background)
    scale = 1.0
    height = gray.shape[0]
    if 0 < height < MIN_CELL_HEIGHT:
        scale = min(MAX_UPSCALE, MIN_CELL_HEIGHT / height)
        gray = cv2.resize(gray, None, fx=scale, fy=scale, interpolation=cv2.INTER_CUBIC)
    return Image.fromarray(gray), scale
