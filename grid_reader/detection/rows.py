"""
Word Row Grouping

Alternative to per-cell recognition: orders words recognized over the
whole grid region into reading order by clustering them into rows.
"""

from typing import List, Sequence

from .tokens import normalize_token
from .result import BoundingBox, PUZZLE_CELLS, RecognizedWord

# A word joins the current row if its centre is within this share of the
# previous word's height
ROW_HEIGHT_FACTOR = 0.8


def group_into_rows(words: Sequence[RecognizedWord]) -> List[List[RecognizedWord]]:
    """
    Cluster words into rows by vertical proximity.

    Words are sorted by vertical centre; each word joins the current row
    when its centre is less than 0.8x the previous word's height away from
    the previous word's centre. Each row is then sorted left to right.

    Returns:
        Rows top to bottom, each ordered by horizontal centre
    """
    if not words:
        return []

    ordered = sorted(words, key=lambda w: w.box.center_y)
    rows: List[List[RecognizedWord]] = []
    current_row = [ordered[0]]

    for prev, word in zip(ordered, ordered[1:]):
        threshold = prev.box.height * ROW_HEIGHT_FACTOR
        if abs(word.box.center_y - prev.box.center_y) < threshold:
            current_row.append(word)
        else:
            rows.append(current_row)
            current_row = [word]
    rows.append(current_row)

    return [sorted(row, key=lambda w: w.box.center_x) for row in rows]


def extract_grid_words(words: Sequence[RecognizedWord], bounds: BoundingBox) -> List[str]:
    """
    Pick the words inside the grid area in reading order.

    Args:
        words: Words recognized over the whole image, source coordinates
        bounds: Resolved grid bounding box

    Returns:
        Up to 16 normalized tokens, top to bottom then left to right
    """
    inside = []
    for word in words:
        text = normalize_token(word.text)
        if text is None:
            continue
        if not bounds.contains_point(word.box.center_x, word.box.center_y):
            continue
        inside.append(RecognizedWord(text=text, box=word.box, confidence=word.confidence))

    tokens = [w.text for row in group_into_rows(inside) for w in row]
    return tokens[:PUZZLE_CELLS]
