"""
Tests for cell segmentation, row grouping, token normalization and the
pixel source adapter.

Usage:
    pytest tests/test_segmentation.py
"""

import io
import sys
import threading
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from grid_reader import ImageDecodeError
from grid_reader.detection import (
    BoundingBox,
    PixelBuffer,
    PuzzleCellRect,
    RecognizedWord,
    WordBox,
    cell_index,
    cell_position,
    crop_region,
    crop_to_png,
    decode_image,
    decode_image_async,
    extract_cell,
    extract_grid_words,
    from_array,
    group_into_rows,
    load_image,
    normalize_to_grid,
    normalize_token,
    parse_manual_entry,
    segment_cells,
)
from grid_reader.detection import pixels as pixels_module

from synthetic import solid


def word(text, cx, cy, height=30, width=80, confidence=90.0):
    """Word centred at (cx, cy)."""
    return RecognizedWord(
        text=text,
        box=WordBox(cx - width / 2, cy - height / 2, cx + width / 2, cy + height / 2),
        confidence=confidence,
    )


# ============================================================================
# Cell Segmenter
# ============================================================================

@pytest.mark.parametrize("bounds", [
    BoundingBox(0, 0, 400, 400, 400, 400),
    BoundingBox(13, 7, 403, 298, 500, 400),
    BoundingBox(120, 120, 560, 560, 800, 800),
    BoundingBox(5, 5, 6, 5, 20, 20),
])
def test_reading_order_and_exact_tiling(bounds):
    cells = segment_cells(bounds)
    assert len(cells) == 16

    for i, rect in enumerate(cells):
        assert rect.index == i
        assert rect.row == i // 4
        assert rect.col == i % 4

    # Rows share edges, columns share edges, outer edges match the box
    for rect in cells:
        if rect.col < 3:
            assert cells[rect.index + 1].x == rect.right
        else:
            assert rect.right == bounds.right
        if rect.row < 3:
            assert cells[rect.index + 4].y == rect.bottom
        else:
            assert rect.bottom == bounds.bottom
        if rect.col == 0:
            assert rect.x == bounds.x
        if rect.row == 0:
            assert rect.y == bounds.y

    assert sum(r.width * r.height for r in cells) == bounds.width * bounds.height


def test_cells_are_deterministic():
    bounds = BoundingBox(13, 7, 403, 298, 500, 400)
    assert segment_cells(bounds) == segment_cells(bounds)


def test_margin_shrinks_each_cell():
    bounds = BoundingBox(0, 0, 400, 400, 400, 400)
    plain = segment_cells(bounds)
    shrunk = segment_cells(bounds, margin=6)
    for a, b in zip(plain, shrunk):
        assert (b.x, b.y) == (a.x + 6, a.y + 6)
        assert (b.width, b.height) == (a.width - 12, a.height - 12)
        assert b.index == a.index


def test_inset_never_collapses_a_cell():
    rect = PuzzleCellRect(row=1, col=2, x=10, y=10, width=5, height=3)
    shrunk = rect.inset(10)
    assert shrunk.width >= 1 and shrunk.height >= 1
    assert shrunk.index == 6


def test_index_helpers():
    assert cell_index(0, 0) == 0
    assert cell_index(2, 3) == 11
    assert cell_position(13) == (3, 1)
    with pytest.raises(IndexError):
        cell_position(16)
    with pytest.raises(IndexError):
        cell_index(4, 0)


# ============================================================================
# Word Row Grouping
# ============================================================================

def test_rows_grouped_by_relative_height():
    words = [
        word("B", 300, 102),
        word("A", 100, 100),
        word("D", 300, 262),
        word("C", 100, 260),
    ]
    rows = group_into_rows(words)
    assert [[w.text for w in row] for row in rows] == [["A", "B"], ["C", "D"]]


def test_rows_use_previous_word_height():
    # 20px apart: same row for 30px-tall words (threshold 24), split for 20px (threshold 16)
    tall = group_into_rows([word("A", 0, 100, height=30), word("B", 50, 120, height=30)])
    short = group_into_rows([word("A", 0, 100, height=20), word("B", 50, 120, height=20)])
    assert len(tall) == 1
    assert len(short) == 2


def test_group_empty():
    assert group_into_rows([]) == []


def test_extract_grid_words_filters_and_orders():
    bounds = BoundingBox(0, 0, 800, 400, 1000, 1000)
    words = [
        word("delta!", 700, 101),
        word("alpha", 100, 100),
        word("x", 300, 100),          # too short
        word("outside", 900, 100),    # centre outside bounds
        word("gamma", 500, 99),
        word("beta", 300, 300),
    ]
    assert extract_grid_words(words, bounds) == ["ALPHA", "GAMMA", "DELTA", "BETA"]


def test_extract_grid_words_truncates_to_16():
    bounds = BoundingBox(0, 0, 2000, 2000, 2000, 2000)
    words = [word(f"w{i:02d}", 100 + 100 * i, 100) for i in range(20)]
    result = extract_grid_words(words, bounds)
    assert len(result) == 16
    assert result[0] == "W00"
    assert result[-1] == "W15"


# ============================================================================
# Token Normalization
# ============================================================================

def test_normalize_token():
    assert normalize_token("wo#rd!!") == "WORD"
    assert normalize_token("a") is None
    assert normalize_token("  rock'n-roll  ") == "ROCK'N-ROLL"
    assert normalize_token("ice cream") == "ICE CREAM"
    assert normalize_token("") is None
    assert normalize_token(None) is None
    assert normalize_token("!!") is None


def test_normalize_to_grid_pads_with_placeholders():
    tokens = normalize_to_grid(["APPLE", None, "PEAR"])
    assert len(tokens) == 16
    assert tokens[:4] == ["APPLE", "WORD 2", "PEAR", "WORD 4"]
    assert tokens[15] == "WORD 16"


def test_normalize_to_grid_truncates():
    tokens = normalize_to_grid([f"W{i}" for i in range(30)])
    assert tokens == [f"W{i}" for i in range(16)]


def test_parse_manual_entry():
    tokens = parse_manual_entry(" apple, banana ,, cherry ")
    assert tokens[:3] == ["APPLE", "BANANA", "CHERRY"]
    assert tokens[3] == "WORD 4"


# ============================================================================
# Pixel Source Adapter
# ============================================================================

def _png_bytes(width=40, height=30, color=(10, 20, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, "PNG")
    return buffer.getvalue()


def test_decode_png():
    pixels = decode_image(_png_bytes())
    assert (pixels.width, pixels.height) == (40, 30)
    assert len(pixels.data) == 40 * 30 * 4
    assert tuple(pixels.array[0, 0]) == (10, 20, 30, 255)


def test_decode_rejects_garbage():
    with pytest.raises(ImageDecodeError):
        decode_image(b"definitely not an image")


def test_load_missing_file(tmp_path):
    with pytest.raises(ImageDecodeError):
        load_image(tmp_path / "missing.png")


def test_decode_async():
    future = decode_image_async(_png_bytes(7, 5))
    pixels = future.result(timeout=10)
    assert (pixels.width, pixels.height) == (7, 5)

    failing = decode_image_async(b"junk")
    with pytest.raises(ImageDecodeError):
        failing.result(timeout=10)


def test_concurrent_first_use_shares_one_decode_executor(monkeypatch):
    monkeypatch.setattr(pixels_module, "_DECODE_EXECUTOR", None)
    barrier = threading.Barrier(8)
    seen = []

    def first_use():
        barrier.wait()
        seen.append(pixels_module._shared_decode_executor())

    threads = [threading.Thread(target=first_use) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({id(executor) for executor in seen}) == 1
    assert decode_image_async(_png_bytes(3, 2)).result(timeout=5).width == 3
    seen[0].shutdown()


def test_pixel_buffer_validates_length():
    with pytest.raises(ValueError):
        PixelBuffer(width=2, height=2, data=b"\x00" * 15)


def test_pixel_buffer_is_read_only():
    pixels = from_array(solid(4, 4, (1, 2, 3)))
    with pytest.raises(ValueError):
        pixels.array[0, 0, 0] = 9


def test_crop_to_png():
    array = solid(100, 80, (255, 255, 255))
    array[10:30, 20:60] = (0, 0, 0)
    pixels = from_array(array)
    region = BoundingBox(20, 10, 40, 20, 100, 80)

    cropped = Image.open(io.BytesIO(crop_to_png(pixels, region)))
    assert cropped.size == (40, 20)
    assert cropped.convert("RGB").getpixel((0, 0)) == (0, 0, 0)


def test_crop_is_clamped_and_rejects_empty():
    pixels = from_array(solid(50, 50, (0, 0, 0)))
    assert crop_region(pixels, BoundingBox(40, 40, 30, 30, 50, 50)).size == (10, 10)
    with pytest.raises(ValueError):
        crop_region(pixels, BoundingBox(60, 60, 10, 10, 50, 50))


def test_extract_cell():
    pixels = from_array(solid(400, 400, (200, 200, 200)))
    bounds = BoundingBox(0, 0, 400, 400, 400, 400)
    cell = Image.open(io.BytesIO(extract_cell(pixels, bounds, 5, margin=10)))
    assert cell.size == (80, 80)
    with pytest.raises(IndexError):
        extract_cell(pixels, bounds, 16)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
