#!/usr/bin/env python3
"""
Command-line interface for the polycut triangulator.

This module handles all the CLI-specific stuff: argument parsing, reading
polygon JSON files, pretty printing and error display. The triangulation
itself lives in earcut.py and can be imported/used programmatically.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import TriangulationConfig
from .constants import (
    DEFAULT_DEVIATION_TOLERANCE,
    DEFAULT_OUTPUT_SUFFIX,
    INPUT_FILE_EXTENSION,
    Z_ORDER_VERTEX_THRESHOLD,
    __version__
)
from .deviation import FlatPolygon, deviation, flatten
from .earcut import log_triangulation_summary, triangulate_detailed
from .json_utils import dumps_compact_arrays
from .validation import get_validation_report, validate_triangulation

# Create Rich consoles for output and errors
console = Console()
error_console = Console(stderr=True)

Z_ORDER_CHOICES = {"auto": None, "on": True, "off": False}


def is_polygon_file(filepath: Path) -> bool:
    """Check if a file looks like a polygon input file."""
    return filepath.suffix.lower() == INPUT_FILE_EXTENSION


def load_polygon(path: Path) -> FlatPolygon:
    """
    Read a polygon from a JSON file.

    Two layouts are accepted:
        - nested rings: [[[x, y], ...], [[x, y], ...], ...] (first ring is
          the outer boundary, the rest are holes)
        - flat arrays: {"vertices": [...], "holes": [...], "dim": 2}

    Raises:
        ValueError: If the JSON doesn't hold a polygon in either layout
        OSError: If the file can't be read
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        if "vertices" not in data:
            raise ValueError(f"{path.name}: object input needs a 'vertices' array")
        try:
            vertices = [float(v) for v in data["vertices"]]
            holes = [int(h) for h in data.get("holes") or []]
            dim = int(data.get("dim", 2))
        except (TypeError, ValueError) as e:
            raise ValueError(f"{path.name}: malformed flat polygon: {e}") from e
        return FlatPolygon(vertices=vertices, holes=holes, dim=dim)

    if isinstance(data, list):
        return flatten(data)

    raise ValueError(f"{path.name}: expected a list of rings or an object, got {type(data).__name__}")


def triangulate_file(
    input_path: Path,
    config: TriangulationConfig,
    output_path: Optional[Path] = None,
    check: bool = False,
    tolerance: float = DEFAULT_DEVIATION_TOLERANCE
) -> Dict[str, Any]:
    """
    Triangulate one polygon file and optionally write/validate the result.

    Returns:
        Dictionary with the triangulation stats, deviation, elapsed time and
        (when check is set) the ValidationResult
    """
    polygon = load_polygon(input_path)

    start = time.perf_counter()
    result = triangulate_detailed(polygon.vertices, polygon.holes, polygon.dim, config)
    elapsed = time.perf_counter() - start

    dev = deviation(polygon.vertices, polygon.holes, polygon.dim, result.triangles)

    if output_path is not None:
        output_path.write_text(
            dumps_compact_arrays({"triangles": result.triangles, "deviation": dev}, array_fields=["triangles"]) + "\n",
            encoding="utf-8"
        )

    summary = {
        'input_file': input_path.name,
        'output_file': str(output_path) if output_path is not None else None,
        'result': result,
        'deviation': dev,
        'elapsed_ms': elapsed * 1000.0,
        'validation': None,
    }
    if check:
        summary['validation'] = validate_triangulation(
            polygon.vertices, polygon.holes, polygon.dim, result.triangles,
            tolerance=tolerance, name=input_path.name
        )
    return summary


def process_batch(
    input_folder: Path,
    config: TriangulationConfig,
    output_folder: Optional[Path] = None,
    check: bool = False,
    tolerance: float = DEFAULT_DEVIATION_TOLERANCE
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Triangulate every polygon file in a folder.

    Args:
        input_folder: Folder containing *.json polygon files
        config: TriangulationConfig shared by all files
        output_folder: Where {name}_triangles.json files go (None = don't write)
        check: Run validate_triangulation() on every result
        tolerance: Deviation tolerance for the checks

    Returns:
        Dictionary with 'success' and 'failed' results
    """
    results: Dict[str, List[Dict[str, Any]]] = {
        'success': [],
        'failed': []
    }

    if output_folder is not None:
        output_folder.mkdir(parents=True, exist_ok=True)

    polygon_files = sorted(f for f in input_folder.iterdir() if f.is_file() and is_polygon_file(f))
    if not polygon_files:
        console.print(f"[yellow]⚠️  No polygon files found in {input_folder}[/yellow]")
        return results

    console.print(f"[cyan]📁 Found {len(polygon_files)} polygon file(s) to process[/cyan]")

    for input_path in polygon_files:
        output_path = None
        if output_folder is not None:
            output_path = output_folder / (input_path.stem + DEFAULT_OUTPUT_SUFFIX + INPUT_FILE_EXTENSION)

        try:
            summary = triangulate_file(input_path, config, output_path, check, tolerance)
        except (ValueError, OSError) as e:
            results['failed'].append({'input_file': input_path.name, 'error': str(e)})
            error_console.print(f"[red]   ❌ {input_path.name}: {e}[/red]")
            continue

        validation = summary['validation']
        if validation is not None and not validation.is_valid:
            results['failed'].append({'input_file': input_path.name, 'error': "; ".join(validation.errors)})
            error_console.print(f"[red]   ❌ {input_path.name}: validation failed[/red]")
        else:
            results['success'].append(summary)

    return results


def build_result_table(summaries: List[Dict[str, Any]], title: str = "Results") -> Table:
    """Create a rich table with one row per triangulated polygon."""
    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("File", style="bold yellow")
    table.add_column("Vertices", justify="right")
    table.add_column("Holes", justify="right")
    table.add_column("Triangles", justify="right")
    table.add_column("Deviation", justify="right")
    table.add_column("Passes", justify="right")
    table.add_column("Dropped", justify="right")
    table.add_column("Time", justify="right")

    for summary in summaries:
        result = summary['result']
        stats = result.stats
        passes = f"{stats['filter_passes']}/{stats['cure_passes']}/{stats['splits']}"
        dropped = f"[red]{stats['dropped_rings']}[/red]" if result.is_partial else "0"
        table.add_row(
            summary['input_file'],
            str(stats['input_vertices']),
            str(stats['holes']),
            str(result.triangle_count),
            f"{summary['deviation']:.3e}",
            passes,
            dropped,
            f"{summary['elapsed_ms']:.2f}ms"
        )
    return table


def _enable_verbose_logging() -> None:
    # Only touch the polycut logger so embedding apps keep their own setup
    package_logger = logging.getLogger('polycut')
    package_logger.setLevel(logging.DEBUG)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('   [%(name)s] %(message)s'))
        package_logger.addHandler(handler)


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""

    parser = argparse.ArgumentParser(
        description="Triangulate polygons (with holes) using ear clipping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single file
  %(prog)s shape.json
  %(prog)s shape.json --output shape_triangles.json --check

  # Batch mode (every *.json in a folder)
  %(prog)s fixtures/ --output out/ --check --tolerance 1e-9

Input files hold either nested rings [[[x, y], ...], ...] (first ring is
the outer boundary, the rest are holes) or an object
{"vertices": [...], "holes": [...], "dim": 2}.
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show program's version number and exit"
    )

    parser.add_argument(
        "input",
        type=str,
        help="Polygon JSON file, or a folder of them for batch mode"
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output JSON file (a folder in batch mode) for the triangle indices"
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the triangulation (deviation, coverage and overlap checks)"
    )

    parser.add_argument(
        "--tolerance",
        type=float,
        default=DEFAULT_DEVIATION_TOLERANCE,
        help=f"Maximum relative area deviation accepted by --check (default: {DEFAULT_DEVIATION_TOLERANCE})"
    )

    parser.add_argument(
        "--z-order",
        choices=sorted(Z_ORDER_CHOICES),
        default="auto",
        help="Use the z-order index: auto (large polygons only), on, or off (default: auto)"
    )

    parser.add_argument(
        "--hash-threshold",
        type=int,
        default=Z_ORDER_VERTEX_THRESHOLD,
        help=f"Vertex count above which auto mode uses the z-order index (default: {Z_ORDER_VERTEX_THRESHOLD})"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log engine details (fallback passes, splits, hole bridges)"
    )

    args = parser.parse_args(argv)

    try:
        config = TriangulationConfig(
            hash_threshold=args.hash_threshold,
            use_z_order=Z_ORDER_CHOICES[args.z_order]
        )
    except ValueError as e:
        error_console.print(f"[red]❌ Error: Invalid configuration: {e}[/red]")
        sys.exit(1)

    if args.verbose:
        _enable_verbose_logging()

    input_path = Path(args.input)
    if not input_path.exists():
        error_console.print(f"[red]❌ Error: Input not found: {input_path}[/red]")
        sys.exit(1)

    # =========================================================================
    # BATCH MODE
    # =========================================================================
    if input_path.is_dir():
        console.print(Panel.fit(
            "[bold cyan]🔺 polycut - BATCH MODE[/bold cyan]",
            border_style="cyan"
        ))

        output_folder = Path(args.output) if args.output else None
        results = process_batch(input_path, config, output_folder, args.check, args.tolerance)

        if results['success']:
            console.print(build_result_table(results['success']))
        console.print(f"   [green]✅ Successful: {len(results['success'])} files[/green]")
        console.print(f"   [red]❌ Failed:     {len(results['failed'])} files[/red]")

        if results['failed']:
            sys.exit(1)
        return

    # =========================================================================
    # SINGLE-FILE MODE
    # =========================================================================
    output_path = Path(args.output) if args.output else None

    try:
        summary = triangulate_file(input_path, config, output_path, args.check, args.tolerance)
    except json.JSONDecodeError as e:
        error_console.print(f"[red]❌ Error: {input_path.name} is not valid JSON: {e}[/red]")
        sys.exit(1)
    except (ValueError, OSError) as e:
        error_console.print(f"[red]❌ Error: {e}[/red]")
        sys.exit(1)

    if args.verbose:
        log_triangulation_summary(summary['result'])

    console.print(build_result_table([summary], title="Triangulation"))
    if output_path is not None:
        console.print(f"[cyan]📄 Triangles written to {output_path}[/cyan]")
    if summary['result'].is_partial:
        console.print("[yellow]⚠️  Part of the polygon could not be triangulated (degenerate residue dropped)[/yellow]")

    validation = summary['validation']
    if validation is not None:
        console.print(get_validation_report(validation, input_path.name))
        if not validation.is_valid:
            sys.exit(1)


if __name__ == "__main__":
    main()
