"""
Detection Result Dataclasses

Shared data structures for grid detection, cell segmentation and
recognition results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


# Puzzle lattice (4 columns x 4 rows)
PUZZLE_ROWS = 4
PUZZLE_COLS = 4
PUZZLE_CELLS = PUZZLE_ROWS * PUZZLE_COLS  # 16 tiles


def luma_brightness(r: float, g: float, b: float) -> float:
    """Luma-weighted brightness of an RGB triple, in [0, 1]."""
    return (r * 0.299 + g * 0.587 + b * 0.114) / 255


@dataclass(frozen=True)
class Color:
    """An RGB colour with channels in [0, 255]."""
    r: int
    g: int
    b: int

    @property
    def brightness(self) -> float:
        return luma_brightness(self.r, self.g, self.b)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


WHITE = Color(255, 255, 255)


@dataclass(frozen=True)
class CellCoord:
    """Index into the coarse scanning lattice (not the 4x4 puzzle lattice)."""
    x: int
    y: int


@dataclass(frozen=True)
class BoundingBox:
    """
    Pixel rectangle in source-image coordinates.

    Carries the source image dimensions so consumers can scale the box
    into display space. ``is_fallback`` marks the full-image box returned
    when no filled cells were detected.
    """
    x: int
    y: int
    width: int
    height: int
    image_width: int
    image_height: int
    is_fallback: bool = False

    @classmethod
    def full_image(cls, image_width: int, image_height: int) -> "BoundingBox":
        """Box covering the whole image, flagged as a fallback."""
        return cls(0, 0, image_width, image_height, image_width, image_height, is_fallback=True)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def crop_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) as used by PIL."""
        return (self.x, self.y, self.right, self.bottom)

    def contains_point(self, px: float, py: float) -> bool:
        """Check whether a point lies inside the box (edges inclusive)."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def scaled_to(self, display_width: float, display_height: float) -> Tuple[float, float, float, float]:
        """
        Map the box into a display surface of a different size.

        Args:
            display_width: Width of the surface the image is drawn on
            display_height: Height of the surface the image is drawn on

        Returns:
            (x, y, width, height) in display coordinates
        """
        if self.image_width <= 0 or self.image_height <= 0:
            return (0.0, 0.0, 0.0, 0.0)
        scale_x = display_width / self.image_width
        scale_y = display_height / self.image_height
        return (self.x * scale_x, self.y * scale_y, self.width * scale_x, self.height * scale_y)


@dataclass(frozen=True)
class PuzzleCellRect:
    """One of the 16 puzzle cells; ``index`` is the reading-order index."""
    row: int
    col: int
    x: int
    y: int
    width: int
    height: int

    @property
    def index(self) -> int:
        return self.row * PUZZLE_COLS + self.col

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def crop_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) as used by PIL."""
        return (self.x, self.y, self.right, self.bottom)

    def inset(self, margin: int) -> "PuzzleCellRect":
        """
        Shrink the rectangle inward by ``margin`` pixels on every side.

        The margin is capped per axis so the result keeps at least one
        pixel of width and height.
        """
        if margin <= 0:
            return self
        mx = max(0, min(margin, (self.width - 1) // 2))
        my = max(0, min(margin, (self.height - 1) // 2))
        return PuzzleCellRect(
            row=self.row,
            col=self.col,
            x=self.x + mx,
            y=self.y + my,
            width=self.width - 2 * mx,
            height=self.height - 2 * my,
        )


@dataclass(frozen=True)
class WordBox:
    """Recognized word box in source-image pixels (x0, y0) - (x1, y1)."""
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def center_x(self) -> float:
        return (self.x0 + self.x1) / 2

    @property
    def center_y(self) -> float:
        return (self.y0 + self.y1) / 2

    @property
    def height(self) -> float:
        return self.y1 - self.y0


@dataclass(frozen=True)
class RecognizedWord:
    """A word reported by the external text recognizer."""
    text: str
    box: WordBox
    confidence: float


@dataclass
class GridDetection:
    """Grid detection results for one image."""
    bounds: BoundingBox
    background: Color
    cell_size: int                                                # Coarse lattice edge length
    filled_cells: List[CellCoord] = field(default_factory=list)   # Before outlier filtering
    kept_cells: List[CellCoord] = field(default_factory=list)     # After outlier filtering
    processing_time_ms: float = 0.0

    @property
    def is_fallback(self) -> bool:
        """True when nothing was detected and the whole image is used."""
        return self.bounds.is_fallback

    @property
    def removed_cells(self) -> List[CellCoord]:
        kept = set(self.kept_cells)
        return [c for c in self.filled_cells if c not in kept]


class CellStatus(Enum):
    """Outcome of recognizing a single puzzle cell."""
    OK = "ok"
    EMPTY = "empty"          # Recognizer ran but returned no usable text
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class ExtractionStatus(Enum):
    """Outcome of a whole extraction run."""
    OK = "ok"
    NO_WORDS_FOUND = "no_words_found"


@dataclass
class CellRecognition:
    """Per-cell recognition result."""
    rect: PuzzleCellRect
    status: CellStatus
    token: Optional[str] = None                                   # Normalized text, None if unresolved
    words: List[RecognizedWord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def index(self) -> int:
        return self.rect.index

    @property
    def confidence(self) -> float:
        if not self.words:
            return 0.0
        return sum(w.confidence for w in self.words) / len(self.words)


@dataclass
class ExtractionResult:
    """Complete extraction result for one image."""
    detection: GridDetection
    tokens: List[str]                                             # Always 16 entries, reading order
    status: ExtractionStatus
    cells: List[CellRecognition] = field(default_factory=list)    # Empty in whole-region mode
    words: List[str] = field(default_factory=list)                # Recognized tokens before padding
    processing_time_ms: float = 0.0

    @property
    def no_words_found(self) -> bool:
        return self.status is ExtractionStatus.NO_WORDS_FOUND

    @property
    def unresolved_count(self) -> int:
        """Cells whose token had to be replaced with a placeholder."""
        return sum(1 for c in self.cells if c.token is None)
