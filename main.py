"""
Grid Reader - Entry Point

Reads the sixteen words of a 4x4 puzzle grid from a screenshot and prints
them in reading order.

Example:
    python main.py screenshot.png
    python main.py screenshot.png --whole-region --debug
    python main.py --words "apple, banana, ..."   # Manual entry
"""

import sys
import logging
import argparse
from datetime import datetime
from typing import List, Optional

from grid_reader import GridReader, ImageDecodeError, RecognizerError
from grid_reader.detection import DEBUG_DIR, load_image, parse_manual_entry, save_debug_image
from grid_reader.settings import load_settings, save_settings


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging - output to both console and file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.StreamHandler(),  # Console output
            logging.FileHandler("grid_reader.log", mode='w', encoding='utf-8')  # File output
        ]
    )


def print_grid(tokens: List[str]) -> None:
    """Print tokens as a 4x4 grid."""
    width = max(len(t) for t in tokens)
    for row in range(4):
        print("  ".join(t.ljust(width) for t in tokens[row * 4:(row + 1) * 4]))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read a 4x4 word grid from a screenshot")
    parser.add_argument("image", nargs="?", help="Screenshot to read")
    parser.add_argument("--words", help="Skip recognition and use these comma-separated words")
    parser.add_argument("--whole-region", action="store_true",
                        help="Recognize the whole grid area at once instead of per cell")
    parser.add_argument("--padding", type=int, help="Pixels added around the detected grid")
    parser.add_argument("--cell-margin", type=int, help="Pixels trimmed from each cell border")
    parser.add_argument("--timeout", type=float, help="Per-cell recognition timeout in seconds")
    parser.add_argument("--workers", type=int, help="Concurrent cell recognitions")
    parser.add_argument("--recognizer", help="Recognizer type (default: tesseract)")
    parser.add_argument("--tesseract-cmd", help="Path to the tesseract binary")
    parser.add_argument("--debug", action="store_true", help="Save an annotated debug image")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--save-settings", action="store_true",
                        help="Persist the given options to config.json")
    return parser


def apply_overrides(settings: dict, args: argparse.Namespace) -> dict:
    """CLI flags override saved settings."""
    overrides = {
        "padding": args.padding,
        "cell_margin": args.cell_margin,
        "cell_timeout_sec": args.timeout,
        "max_workers": args.workers,
        "recognizer": args.recognizer,
        "tesseract_cmd": args.tesseract_cmd,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})
    if args.whole_region:
        settings["per_cell"] = False
    if args.debug:
        settings["debug_enabled"] = True
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.words:
        print_grid(parse_manual_entry(args.words))
        return 0
    if not args.image:
        parser.error("an image path or --words is required")

    settings = apply_overrides(load_settings(), args)
    if args.save_settings:
        save_settings(settings)

    try:
        reader = GridReader(settings=settings)
        pixels = load_image(args.image)
        result = reader.read(pixels)
    except ImageDecodeError as e:
        logger.error(str(e))
        return 2
    except RecognizerError as e:
        logger.error(f"Recognition failed: {e}")
        return 3

    if settings.get("debug_enabled"):
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = save_debug_image(
            pixels.to_image(), result.detection, result, DEBUG_DIR / f"debug_{timestamp}.png"
        )
        logger.info(f"Debug image saved: {path}")

    if result.detection.is_fallback:
        logger.warning("Grid not detected, the whole image was used")

    if result.no_words_found:
        print("No words found. Enter them manually with:")
        print('  python main.py --words "WORD1, WORD2, ..."')
        return 1

    print_grid(result.tokens)
    return 0


if __name__ == "__main__":
    sys.exit(main())
