"""
Error Types

Distinct exception classes so callers can branch on the recovery path.
Conditions that are not failures (empty detection, outlier safety valve,
no words found) are reported as markers on the result objects instead.
"""


class GridReaderError(Exception):
    """Base class for all grid reader errors."""


class ImageDecodeError(GridReaderError):
    """The image payload could not be decoded as a supported raster format."""


class RecognizerError(GridReaderError):
    """The text recognizer is unavailable or failed outright."""
