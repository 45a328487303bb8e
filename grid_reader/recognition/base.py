"""
Text Recognizer Base Interface

Abstract base class defining the text recognizer contract.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from PIL import Image

from ..detection.result import BoundingBox, RecognizedWord, WordBox


class TextRecognizer(ABC):
    """
    Abstract base class for text recognizers.

    The grid reader treats recognizers as black boxes: no retries, no
    knowledge of the puzzle. Implementations must be safe to call from
    several threads at once.
    """

    @abstractmethod
    def recognize(self, image: Image.Image, region: Optional[BoundingBox] = None) -> List[RecognizedWord]:
        """
        Recognize words in an image.

        Args:
            image: Full image or a cropped cell
            region: Optional rectangle of interest in ``image`` coordinates;
                    when given, only that area is read

        Returns:
            Recognized words with boxes in ``image`` coordinates (not
            relative to ``region``) and confidences in 0-100

        Raises:
            RecognizerError: If the engine is unavailable or crashes
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Recognizer identifier.

        Returns:
            String name identifying this recognizer type (e.g., "tesseract")
        """
        pass

    def configure(self, **kwargs) -> None:
        """
        Configure recognizer parameters.

        Override in subclasses to support runtime configuration.
        Default implementation does nothing.

        Args:
            **kwargs: Recognizer-specific configuration options
        """
        pass


def offset_words(words: List[RecognizedWord], dx: float, dy: float, scale: float = 1.0) -> List[RecognizedWord]:
    """
    Map word boxes from a crop back into source coordinates.

    Args:
        words: Words with boxes relative to the (possibly resized) crop
        dx: Crop left edge in the source image
        dy: Crop top edge in the source image
        scale: Factor the crop was enlarged by before recognition
    """
    return [
        RecognizedWord(
            text=w.text,
            box=WordBox(
                x0=dx + w.box.x0 / scale,
                y0=dy + w.box.y0 / scale,
                x1=dx + w.box.x1 / scale,
                y1=dy + w.box.y1 / scale,
            ),
            confidence=w.confidence,
        )
        for w in words
    ]
