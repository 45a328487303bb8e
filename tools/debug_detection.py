"""
Diagnostic script to analyze grid detection on screenshots.
Prints every detection stage and writes an annotated overlay per image.

Usage:
    python tools/debug_detection.py screenshot.png [more.png ...]
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from grid_reader.detection import (
    DEBUG_DIR,
    estimate_background,
    filter_outliers_report,
    load_image,
    resolve_bounds,
    save_debug_image,
    scan_grid,
    segment_cells,
    thresholds_for,
    GridDetection,
)


def analyze_image(image_path: str) -> None:
    """Analyze an image and report each detection stage."""
    print(f"\n{'='*60}")
    print(f"Analyzing: {image_path}")
    print(f"{'='*60}")

    pixels = load_image(image_path)
    print(f"Image size: {pixels.width}x{pixels.height}")

    background = estimate_background(pixels)
    thresholds = thresholds_for(background)
    print(f"Background: {background.as_tuple()} brightness={background.brightness:.3f}")
    print(f"Tile thresholds: distance>{thresholds.distance} or luma>{thresholds.luma}")

    scan = scan_grid(pixels, background)
    print(f"Lattice: {scan.grid_width}x{scan.grid_height} cells of {scan.cell_size}px")
    print(f"Filled threshold: < {scan.threshold:.0f} background px per cell")
    print(f"Filled cells: {len(scan.filled_cells)}")

    # Show the lattice as text: '#' filled, '.' background
    filled = set((c.x, c.y) for c in scan.filled_cells)
    for y in range(scan.grid_height):
        print("  " + "".join("#" if (x, y) in filled else "." for x in range(scan.grid_width)))

    report = filter_outliers_report(scan.filled_cells)
    if report.skipped:
        print("Outlier filter: skipped (too few cells)")
    elif report.safety_valve:
        print(f"Outlier filter: safety valve fired (radius={report.radius:.2f}), kept all")
    else:
        print(f"Outlier filter: removed {len(report.removed)} (median={report.median_distance:.2f}, "
              f"radius={report.radius:.2f})")
        for cell in report.removed:
            print(f"  removed ({cell.x}, {cell.y})")

    bounds = resolve_bounds(report.kept, pixels.width, pixels.height, scan.cell_size)
    flag = " (fallback: full image)" if bounds.is_fallback else ""
    print(f"Bounds: x={bounds.x} y={bounds.y} w={bounds.width} h={bounds.height}{flag}")

    print(f"\n--- Puzzle cells ---")
    print(f"{'Idx':>3} {'Row':>3} {'Col':>3} {'X':>6} {'Y':>6} {'W':>5} {'H':>5}")
    for rect in segment_cells(bounds):
        print(f"{rect.index:>3} {rect.row:>3} {rect.col:>3} {rect.x:>6} {rect.y:>6} "
              f"{rect.width:>5} {rect.height:>5}")

    detection = GridDetection(
        bounds=bounds,
        background=background,
        cell_size=scan.cell_size,
        filled_cells=scan.filled_cells,
        kept_cells=report.kept,
    )
    output_path = DEBUG_DIR / f"detect_{Path(image_path).stem}.png"
    save_debug_image(pixels.to_image(), detection, None, output_path)
    print(f"\nOverlay saved: {output_path}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python tools/debug_detection.py image.png [more.png ...]")
        sys.exit(1)

    for path in sys.argv[1:]:
        analyze_image(path)
