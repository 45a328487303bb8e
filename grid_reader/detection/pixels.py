"""
Pixel Source Adapter

Decodes image payloads into immutable RGBA pixel buffers and crops
regions back out of them for recognition.
"""

import io
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import ImageDecodeError
from .result import BoundingBox, PuzzleCellRect
from .segmenter import segment_cells

logger = logging.getLogger(__name__)

Region = Union[BoundingBox, PuzzleCellRect]

# Shared executor for decode_image_async when the caller supplies none
_DECODE_EXECUTOR: Optional[ThreadPoolExecutor] = None
_DECODE_EXECUTOR_LOCK = threading.Lock()


@dataclass(frozen=True)
class PixelBuffer:
    """
    Raw RGBA pixels, 4 bytes per pixel in row-major order.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        data: Flat RGBA byte string (width * height * 4 bytes)
    """
    width: int
    height: int
    data: bytes

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid dimensions: {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(f"Expected {expected} bytes of RGBA data, got {len(self.data)}")

    @property
    def array(self) -> np.ndarray:
        """Read-only (height, width, 4) uint8 view of the pixels."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)

    def to_image(self) -> Image.Image:
        """Convert back to a PIL RGBA image."""
        return Image.frombytes("RGBA", (self.width, self.height), self.data)


def from_pil(image: Image.Image) -> PixelBuffer:
    """Build a PixelBuffer from a PIL image of any mode."""
    rgba = image.convert("RGBA")
    return PixelBuffer(width=rgba.width, height=rgba.height, data=rgba.tobytes())


def from_array(array: np.ndarray) -> PixelBuffer:
    """
    Build a PixelBuffer from an (H, W, 3) RGB or (H, W, 4) RGBA uint8 array.
    """
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ValueError(f"Expected (H, W, 3|4) array, got shape {array.shape}")
    if array.shape[2] == 3:
        alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
        array = np.concatenate([array.astype(np.uint8), alpha], axis=2)
    height, width = array.shape[:2]
    return PixelBuffer(width=width, height=height, data=np.ascontiguousarray(array, dtype=np.uint8).tobytes())


def decode_image(data: bytes) -> PixelBuffer:
    """
    Decode opaque image bytes into a PixelBuffer.

    Args:
        data: Encoded image (PNG, JPEG, ... anything Pillow reads)

    Returns:
        Decoded RGBA PixelBuffer

    Raises:
        ImageDecodeError: If the bytes are not a supported raster image
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            pixels = from_pil(image)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to decode image: {e}") from e

    logger.debug(f"Decoded image: {pixels.width}x{pixels.height}")
    return pixels


def load_image(path: Union[str, Path]) -> PixelBuffer:
    """
    Read and decode an image file.

    Raises:
        ImageDecodeError: If the file cannot be read or decoded
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Failed to read image {path}: {e}") from e
    return decode_image(data)


def decode_image_async(data: bytes, executor: Optional[Executor] = None) -> "Future[PixelBuffer]":
    """
    Decode an image off the calling thread.

    The returned future resolves to a PixelBuffer or raises ImageDecodeError.
    Cancelling means discarding the future; nothing else holds state.

    Args:
        data: Encoded image bytes
        executor: Executor to run on (a shared single-worker pool by default)
    """
    if executor is None:
        executor = _shared_decode_executor()
    return executor.submit(decode_image, data)


def _shared_decode_executor() -> ThreadPoolExecutor:
    global _DECODE_EXECUTOR
    with _DECODE_EXECUTOR_LOCK:
        if _DECODE_EXECUTOR is None:
            _DECODE_EXECUTOR = ThreadPoolExecutor(max_workers=1, thread_name_prefix="decode")
        return _DECODE_EXECUTOR


def crop_region(pixels: PixelBuffer, region: Region) -> Image.Image:
    """
    Cut a rectangle out of the buffer.

    The rectangle is clamped to the image; an empty intersection raises
    ValueError.
    """
    left, top, right, bottom = region.crop_box
    left, top = max(0, left), max(0, top)
    right, bottom = min(pixels.width, right), min(pixels.height, bottom)
    if right <= left or bottom <= top:
        raise ValueError(f"Region {region.crop_box} lies outside {pixels.width}x{pixels.height} image")

    array = pixels.array[top:bottom, left:right]
    return Image.fromarray(np.ascontiguousarray(array))


def crop_to_png(pixels: PixelBuffer, region: Region) -> bytes:
    """Crop a rectangle and encode it as PNG bytes."""
    buffer = io.BytesIO()
    crop_region(pixels, region).save(buffer, "PNG")
    return buffer.getvalue()


def extract_cell(pixels: PixelBuffer, bounds: BoundingBox, index: int, margin: int = 0) -> bytes:
    """
    Encode one of the 16 puzzle cells of ``bounds`` as PNG.

    Args:
        pixels: Source image
        bounds: Resolved grid bounding box
        index: Reading-order cell index (0-15)
        margin: Inward border to trim from the cell

    Raises:
        IndexError: If index is outside 0-15
    """
    cells = segment_cells(bounds)
    if not 0 <= index < len(cells):
        raise IndexError(f"Cell index {index} out of range 0-{len(cells) - 1}")
    return crop_to_png(pixels, cells[index].inset(margin))
