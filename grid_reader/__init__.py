"""
Grid Reader

Reconstructs a 4x4 word-puzzle grid from a screenshot.

Usage:
    from grid_reader import GridReader

    result = GridReader().read_file("screenshot.png")
    print(result.tokens)   # 16 words in reading order
"""

from .errors import GridReaderError, ImageDecodeError, RecognizerError
from .pipeline import GridReader, read_grid

__version__ = "0.1.0"

__all__ = [
    "GridReader",
    "read_grid",
    "GridReaderError",
    "ImageDecodeError",
    "RecognizerError",
]
