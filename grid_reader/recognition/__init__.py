"""
Text Recognition

Pluggable text recognizers used by the grid reader. The recognizer is a
black box: an image (optionally with a rectangle of interest) goes in,
words with boxes and confidences come out.

Usage:
    from grid_reader.recognition import create_recognizer

    recognizer = create_recognizer("tesseract", language="eng")
    words = recognizer.recognize(image)
"""

from .base import TextRecognizer, offset_words
from .factory import (
    create_recognizer,
    register_recognizer,
    available_recognizers,
)

__all__ = [
    "TextRecognizer",
    "offset_words",
    "create_recognizer",
    "register_recognizer",
    "available_recognizers",
]
