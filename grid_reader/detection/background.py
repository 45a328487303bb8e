"""
Background Color Estimator

Infers the page background from the four image corners using a
quantized colour histogram. The mode is robust to anti-aliasing
gradients that would drag a plain average away from the true colour.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .pixels import PixelBuffer
from .result import Color, WHITE

logger = logging.getLogger(__name__)

# Edge length of each sampled corner square (independent of image size)
CORNER_SIZE = 80

# Channels are rounded to the nearest multiple of this before counting
QUANTIZE_STEP = 8

QuantizedKey = Tuple[int, int, int]


def quantize_channel(value: int) -> int:
    """Round a channel to the nearest multiple of QUANTIZE_STEP (half up)."""
    return (int(value) + QUANTIZE_STEP // 2) // QUANTIZE_STEP * QUANTIZE_STEP


@dataclass
class HistogramBin:
    """One histogram bucket: sample count plus raw channel sums."""
    key: QuantizedKey
    count: int = 0
    sum_r: int = 0
    sum_g: int = 0
    sum_b: int = 0

    def mean_color(self) -> Color:
        """Mean of the raw samples that fell in this bucket."""
        if self.count == 0:
            return Color(*self.key)
        half = self.count // 2
        return Color(
            min(255, (self.sum_r + half) // self.count),
            min(255, (self.sum_g + half) // self.count),
            min(255, (self.sum_b + half) // self.count),
        )


class ColorHistogram:
    """
    Frequency map from quantized colour to count.

    Bins keep first-seen order, which decides ties between equally
    frequent colours.
    """

    def __init__(self):
        self._bins: Dict[QuantizedKey, HistogramBin] = {}

    def __len__(self) -> int:
        return len(self._bins)

    def __iter__(self) -> Iterator[HistogramBin]:
        return iter(self._bins.values())

    @property
    def total(self) -> int:
        return sum(b.count for b in self._bins.values())

    def add(self, r: int, g: int, b: int) -> None:
        """Count a single pixel."""
        key = (quantize_channel(r), quantize_channel(g), quantize_channel(b))
        bin_ = self._bins.get(key)
        if bin_ is None:
            bin_ = self._bins[key] = HistogramBin(key)
        bin_.count += 1
        bin_.sum_r += int(r)
        bin_.sum_g += int(g)
        bin_.sum_b += int(b)

    @classmethod
    def from_samples(cls, samples: np.ndarray) -> "ColorHistogram":
        """
        Build a histogram from an (N, 3+) array of pixels in scan order.

        Equivalent to calling add() for every row, but vectorized.
        """
        histogram = cls()
        if len(samples) == 0:
            return histogram

        rgb = samples[:, :3].astype(np.int64)
        quantized = (rgb + QUANTIZE_STEP // 2) // QUANTIZE_STEP * QUANTIZE_STEP
        # Quantized channels fit in 9 bits (0-256)
        keys = (quantized[:, 0] << 18) | (quantized[:, 1] << 9) | quantized[:, 2]

        _, first_index, inverse, counts = np.unique(
            keys, return_index=True, return_inverse=True, return_counts=True
        )
        inverse = inverse.reshape(-1)
        sums = [np.bincount(inverse, weights=rgb[:, c], minlength=len(counts)) for c in range(3)]

        for bucket in np.argsort(first_index, kind="stable"):
            sample = quantized[first_index[bucket]]
            key = (int(sample[0]), int(sample[1]), int(sample[2]))
            histogram._bins[key] = HistogramBin(
                key=key,
                count=int(counts[bucket]),
                sum_r=int(sums[0][bucket]),
                sum_g=int(sums[1][bucket]),
                sum_b=int(sums[2][bucket]),
            )
        return histogram

    def dominant(self) -> Optional[HistogramBin]:
        """Most frequent bin; the earliest-seen bin wins ties."""
        best: Optional[HistogramBin] = None
        for bin_ in self._bins.values():
            if best is None or bin_.count > best.count:
                best = bin_
        return best


def corner_samples(pixels: PixelBuffer, corner_size: int = CORNER_SIZE) -> np.ndarray:
    """
    Collect pixels from the four corner squares in scan order.

    Corners are visited top-left, top-right, bottom-left, bottom-right;
    within a corner rows go top to bottom and pixels left to right.
    Coordinates outside the image are skipped, so small images may
    sample overlapping pixels more than once.

    Returns:
        (N, 4) uint8 array of RGBA samples
    """
    width, height = pixels.width, pixels.height
    if width == 0 or height == 0:
        return np.empty((0, 4), dtype=np.uint8)

    array = pixels.array
    origins = [
        (0, 0),
        (width - corner_size, 0),
        (0, height - corner_size),
        (width - corner_size, height - corner_size),
    ]

    chunks: List[np.ndarray] = []
    for ox, oy in origins:
        x0, y0 = max(0, ox), max(0, oy)
        x1, y1 = min(width, ox + corner_size), min(height, oy + corner_size)
        if x1 > x0 and y1 > y0:
            chunks.append(array[y0:y1, x0:x1].reshape(-1, 4))

    if not chunks:
        return np.empty((0, 4), dtype=np.uint8)
    return np.concatenate(chunks)


def estimate_background(pixels: PixelBuffer, corner_size: int = CORNER_SIZE) -> Color:
    """
    Estimate the dominant background colour of an image.

    Args:
        pixels: Decoded image
        corner_size: Edge length of the sampled corner squares

    Returns:
        Background Color (white if the image has no pixels)
    """
    histogram = ColorHistogram.from_samples(corner_samples(pixels, corner_size))
    winner = histogram.dominant()
    if winner is None:
        logger.debug("No corner samples, assuming white background")
        return WHITE

    color = winner.mean_color()
    logger.debug(
        f"Background {color.as_tuple()} brightness={color.brightness:.3f} "
        f"({winner.count}/{histogram.total} samples, {len(histogram)} buckets)"
    )
    return color
