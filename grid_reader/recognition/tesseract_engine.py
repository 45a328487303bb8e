"""
Tesseract Recognizer

Text recognizer backed by the Tesseract command-line engine through
pytesseract.
"""

import logging
from typing import Dict, List, Optional

import pytesseract
from PIL import Image

from ..errors import RecognizerError
from ..detection.result import BoundingBox, RecognizedWord, WordBox
from .base import TextRecognizer, offset_words

logger = logging.getLogger(__name__)

# Default recognition parameters
DEFAULT_LANGUAGE = "eng"
DEFAULT_PSM = 6          # Assume a single uniform block of text
DEFAULT_TIMEOUT_SEC = 0  # 0 = no timeout inside pytesseract


class TesseractRecognizer(TextRecognizer):
    """
    Recognizer using pytesseract.image_to_data.

    Words with empty text or negative confidence (layout rows, not words)
    are dropped.
    """

    def __init__(
        self,
        language: str = DEFAULT_LANGUAGE,
        psm: int = DEFAULT_PSM,
        tesseract_cmd: Optional[str] = None,
        min_confidence: float = 0.0,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ):
        """
        Initialize the Tesseract recognizer.

        Args:
            language: Tesseract language code
            psm: Page segmentation mode passed as --psm
            tesseract_cmd: Optional path to the tesseract binary
            min_confidence: Words below this confidence (0-100) are dropped
            timeout_sec: Per-call timeout enforced by pytesseract (0 = none)
        """
        self.language = language
        self.psm = psm
        self.min_confidence = min_confidence
        self.timeout_sec = timeout_sec
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    @property
    def name(self) -> str:
        return "tesseract"

    def configure(self, **kwargs) -> None:
        """
        Configure recognizer parameters.

        Args:
            language: Tesseract language code
            psm: Page segmentation mode
            tesseract_cmd: Path to the tesseract binary
            min_confidence: Minimum word confidence (0-100)
            timeout_sec: Per-call timeout in seconds
        """
        if "language" in kwargs:
            self.language = kwargs["language"]
        if "psm" in kwargs:
            self.psm = int(kwargs["psm"])
        if "min_confidence" in kwargs:
            self.min_confidence = float(kwargs["min_confidence"])
        if "timeout_sec" in kwargs:
            self.timeout_sec = float(kwargs["timeout_sec"])
        if kwargs.get("tesseract_cmd"):
            pytesseract.pytesseract.tesseract_cmd = kwargs["tesseract_cmd"]

    def recognize(self, image: Image.Image, region: Optional[BoundingBox] = None) -> List[RecognizedWord]:
        dx = dy = 0
        if region is not None:
            image = image.crop(region.crop_box)
            dx, dy = region.x, region.y

        try:
            data = pytesseract.image_to_data(
                image,
                lang=self.language,
                config=f"--psm {self.psm}",
                output_type=pytesseract.Output.DICT,
                timeout=self.timeout_sec,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise RecognizerError(f"Tesseract is not installed or not on PATH: {e}") from e
        except (pytesseract.TesseractError, RuntimeError) as e:
            # pytesseract reports its own timeout as RuntimeError
            raise RecognizerError(f"Tesseract failed: {e}") from e

        words = self._parse(data)
        logger.debug(f"Tesseract read {len(words)} words (psm={self.psm})")
        return offset_words(words, dx, dy) if region is not None else words

    def _parse(self, data: Dict[str, list]) -> List[RecognizedWord]:
        """Convert image_to_data output to RecognizedWord entries."""
        words = []
        for i, text in enumerate(data.get("text", [])):
            text = (text or "").strip()
            if not text:
                continue
            confidence = float(data["conf"][i])
            if confidence < 0 or confidence < self.min_confidence:
                continue
            left, top = float(data["left"][i]), float(data["top"][i])
            words.append(RecognizedWord(
                text=text,
                box=WordBox(
                    x0=left,
                    y0=top,
                    x1=left + float(data["width"][i]),
                    y1=top + float(data["height"][i]),
                ),
                confidence=confidence,
            ))
        return words
