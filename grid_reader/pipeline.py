"""
Grid Reader Pipeline

Ties detection, segmentation and text recognition together: an image goes
in, the grid geometry and sixteen normalized tokens come out.
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from PIL import Image

from .detection import (
    CellRecognition,
    CellStatus,
    ExtractionResult,
    ExtractionStatus,
    GridDetection,
    PixelBuffer,
    PuzzleCellRect,
    crop_region,
    decode_image,
    detect_grid,
    extract_grid_words,
    group_into_rows,
    load_image,
    normalize_to_grid,
    normalize_token,
    segment_cells,
)
from .detection.preprocess import prepare_cell, prepare_region
from .detection.result import Color
from .recognition import TextRecognizer, create_recognizer, offset_words
from .settings import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

# How often the collector re-checks running cells against their timeout
POLL_INTERVAL_SEC = 0.05


class GridReader:
    """
    Reads a 4x4 word grid from a screenshot.

    The reader holds configuration and a recognizer, nothing else: every
    call recomputes detection from scratch.

    Example:
        reader = GridReader()
        result = reader.read_file("puzzle.png")
        if result.no_words_found:
            ...  # offer manual entry
        print(result.tokens)
    """

    def __init__(self, recognizer: Optional[TextRecognizer] = None, settings: Optional[Dict[str, Any]] = None):
        """
        Initialize the reader.

        Args:
            recognizer: Text recognizer; created from settings if None
            settings: Settings overrides merged over DEFAULT_SETTINGS
        """
        self.settings = DEFAULT_SETTINGS.copy()
        if settings:
            self.settings.update(settings)

        if recognizer is None:
            recognizer = create_recognizer(
                self.settings["recognizer"],
                language=self.settings["language"],
                tesseract_cmd=self.settings["tesseract_cmd"],
                min_confidence=self.settings["min_confidence"],
                timeout_sec=self.cell_timeout_sec,
            )
        self.recognizer = recognizer

    @property
    def cell_timeout_sec(self) -> float:
        return float(self.settings["cell_timeout_sec"])

    @property
    def max_workers(self) -> int:
        return max(1, int(self.settings["max_workers"]))

    def read_file(self, path: Union[str, Path]) -> ExtractionResult:
        """Decode an image file and read it. Raises ImageDecodeError."""
        return self.read(load_image(path))

    def read_bytes(self, data: bytes) -> ExtractionResult:
        """Decode image bytes and read them. Raises ImageDecodeError."""
        return self.read(decode_image(data))

    def read(self, pixels: PixelBuffer) -> ExtractionResult:
        """
        Run the full pipeline on a decoded image.

        Args:
            pixels: Decoded image

        Returns:
            ExtractionResult with exactly 16 tokens in reading order.
            ``status`` is NO_WORDS_FOUND when nothing was recognized.
        """
        start_time = time.perf_counter()
        detection = detect_grid(pixels, padding=int(self.settings["padding"]))

        cells: List[CellRecognition] = []
        if self.settings["per_cell"]:
            cells = self.read_cells(pixels, detection)
            words = [cell.token for cell in cells]
        else:
            words = self.read_region(pixels, detection)

        recognized = [w for w in words if w]
        status = ExtractionStatus.OK if recognized else ExtractionStatus.NO_WORDS_FOUND
        elapsed = (time.perf_counter() - start_time) * 1000

        if status is ExtractionStatus.NO_WORDS_FOUND:
            logger.warning("No words found in grid area")
        else:
            logger.info(f"Recognized {len(recognized)}/16 tiles in {elapsed:.1f}ms")

        return ExtractionResult(
            detection=detection,
            tokens=normalize_to_grid(words),
            status=status,
            cells=cells,
            words=recognized,
            processing_time_ms=elapsed,
        )

    def read_region(self, pixels: PixelBuffer, detection: GridDetection) -> List[str]:
        """
        Recognize the whole grid area at once and order words by row.

        Raises:
            RecognizerError: If the recognizer fails
        """
        image = prepare_region(pixels.to_image(), detection.background)
        words = self.recognizer.recognize(image, region=detection.bounds)
        tokens = extract_grid_words(words, detection.bounds)
        logger.debug(f"Whole-region recognition: {len(words)} words, {len(tokens)} in grid")
        return tokens

    def read_cells(self, pixels: PixelBuffer, detection: GridDetection) -> List[CellRecognition]:
        """
        Recognize each of the 16 cells concurrently.

        The rectangles are computed once from the detection bounds before
        any recognition starts. Results are keyed by cell index, so
        completion order does not matter. A cell that raises, or runs
        longer than ``cell_timeout_sec``, degrades to an empty token
        without holding up the others.

        Returns:
            16 CellRecognition entries in reading order
        """
        rects = segment_cells(detection.bounds, margin=int(self.settings["cell_margin"]))
        results: Dict[int, CellRecognition] = {}
        crops: Dict[int, Image.Image] = {}

        for rect in rects:
            try:
                crops[rect.index] = crop_region(pixels, rect)
            except ValueError as e:
                results[rect.index] = CellRecognition(rect=rect, status=CellStatus.FAILED, error=str(e))

        started: Dict[int, float] = {}
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="cell")
        try:
            futures = {
                index: executor.submit(
                    self._recognize_cell, rects[index], crop, detection.background, started
                )
                for index, crop in crops.items()
            }
            timed_out = self._wait_for_cells(futures, started)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        for index, future in futures.items():
            rect = rects[index]
            if index in timed_out:
                logger.warning(f"Cell {index} timed out after {self.cell_timeout_sec:.1f}s")
                results[index] = CellRecognition(rect=rect, status=CellStatus.TIMED_OUT)
                continue
            try:
                results[index] = future.result()
            except Exception as e:
                logger.warning(f"Cell {index} recognition failed: {e}")
                results[index] = CellRecognition(rect=rect, status=CellStatus.FAILED, error=str(e))

        return [results[rect.index] for rect in rects]

    def _wait_for_cells(self, futures: Dict[int, Future], started: Dict[int, float]) -> set:
        """
        Wait for cell futures, abandoning those that run too long.

        A cell's clock starts when a worker picks it up. As a backstop
        for recognizers that never return, everything still unfinished
        after ``cell_timeout_sec`` times the number of worker rounds is
        abandoned too.

        Returns:
            Indices of abandoned cells
        """
        timeout = self.cell_timeout_sec
        rounds = -(-len(futures) // self.max_workers)
        overall_deadline = time.monotonic() + timeout * max(1, rounds)

        index_of = {future: index for index, future in futures.items()}
        pending = set(futures.values())
        timed_out = set()

        while pending:
            now = time.monotonic()
            for future in list(pending):
                if future.done():
                    continue
                began = started.get(index_of[future])
                if now >= overall_deadline or (began is not None and now - began > timeout):
                    future.cancel()
                    timed_out.add(index_of[future])
                    pending.discard(future)
            if not pending:
                break
            done, _ = wait(pending, timeout=POLL_INTERVAL_SEC, return_when=FIRST_COMPLETED)
            pending -= done

        return timed_out

    def _recognize_cell(
        self,
        rect: PuzzleCellRect,
        crop: Image.Image,
        background: Color,
        started: Dict[int, float],
    ) -> CellRecognition:
        """Recognize one cell crop (runs on a worker thread)."""
        started[rect.index] = time.monotonic()

        prepared, scale = prepare_cell(crop, background)
        words = offset_words(self.recognizer.recognize(prepared), rect.x, rect.y, scale)
        text = " ".join(w.text for row in group_into_rows(words) for w in row)
        token = normalize_token(text)

        status = CellStatus.OK if token else CellStatus.EMPTY
        logger.debug(f"Cell {rect.index} ({rect.row},{rect.col}): {token!r} from {len(words)} words")
        return CellRecognition(rect=rect, status=status, token=token, words=words)


def read_grid(
    image: Union[str, Path, bytes, PixelBuffer],
    recognizer: Optional[TextRecognizer] = None,
    **settings,
) -> ExtractionResult:
    """
    Convenience wrapper: read a grid from a path, bytes or PixelBuffer.

    Raises:
        ImageDecodeError: If the image cannot be decoded
    """
    reader = GridReader(recognizer=recognizer, settings=settings)
    if isinstance(image, PixelBuffer):
        return reader.read(image)
    if isinstance(image, (bytes, bytearray)):
        return reader.read_bytes(bytes(image))
    return reader.read_file(image)
