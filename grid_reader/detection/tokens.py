"""
Token Normalization

Cleans recognized text into puzzle tokens and pads word lists to a full
16-tile grid.
"""

import re
from typing import Iterable, List, Optional

from .result import PUZZLE_CELLS

# Everything except letters, digits, apostrophes, hyphens and whitespace
_DISALLOWED = re.compile(r"[^a-zA-Z0-9'\-\s]")

MIN_TOKEN_LENGTH = 2


def placeholder(position: int) -> str:
    """Placeholder text for an unresolved tile (1-based position)."""
    return f"WORD {position}"


def normalize_token(text: Optional[str]) -> Optional[str]:
    """
    Normalize raw recognized text.

    Examples:
        >>> normalize_token("wo#rd!!")
        'WORD'
        >>> normalize_token("a") is None
        True

    Returns:
        Uppercased token, or None if fewer than 2 characters survive
    """
    if not text:
        return None
    cleaned = _DISALLOWED.sub("", text).strip()
    if len(cleaned) < MIN_TOKEN_LENGTH:
        return None
    return cleaned.upper()


def normalize_to_grid(tokens: Iterable[Optional[str]]) -> List[str]:
    """
    Trim or pad a token list to exactly 16 entries.

    Empty entries and missing trailing entries become ``WORD {n}`` where n
    is the 1-based reading-order position.
    """
    tiles = list(tokens)[:PUZZLE_CELLS]
    tiles += [None] * (PUZZLE_CELLS - len(tiles))
    return [tile if tile else placeholder(i + 1) for i, tile in enumerate(tiles)]


def parse_manual_entry(text: str) -> List[str]:
    """
    Parse comma-separated words typed by the user.

    Manual entries are trimmed and uppercased but otherwise kept as typed.
    """
    words = [w.strip().upper() for w in text.split(",")]
    return normalize_to_grid([w for w in words if w])
